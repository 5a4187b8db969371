import asyncio
import logging
import uuid
from typing import Dict, Any, Union, List

import aiohttp
from aiohttp import ClientError

from ethcli import LOGGER_NAME


class RpcError(Exception):
    pass


class RpcTransportError(RpcError):
    pass


class RpcClientError(RpcError):
    pass


class RpcDecodeError(RpcError):
    pass


class RpcServerError(RpcError):
    def __init__(self, rpc_version, request_id, error_code, error_message) -> None:
        super().__init__(f"RPC {rpc_version} - Req {request_id} - {error_code}: {error_message}")
        self.__rpc_version = rpc_version
        self.__request_id = request_id
        self.__error_code = error_code
        self.__error_message = error_message

    @property
    def rpc_version(self):
        return self.__rpc_version

    @property
    def request_id(self):
        return self.__request_id

    @property
    def error_code(self):
        return self.__error_code

    @property
    def error_message(self):
        return self.__error_message


class RpcClient:
    """
    JSON-RPC 2.0 client over HTTP. Every request is a single POST and the client
    waits for its response before returning. There is no retry, backoff or
    batching.

    :param provider_url: HTTP(S) URL of the JSON-RPC endpoint
    """

    def __init__(self, provider_url: str) -> None:
        if not provider_url or not provider_url.startswith(("http://", "https://")):
            raise RpcClientError(f"Invalid provider URL: {provider_url!r}")
        self.__provider_url: str = provider_url
        self.__nonce: int = 0
        self.__instance: uuid.UUID = uuid.uuid1()
        self.__logger = logging.getLogger(LOGGER_NAME)

    @property
    def provider_url(self) -> str:
        return self.__provider_url

    def __get_rpc_request(self, method, params) -> Dict[str, Any]:
        self.__nonce += 1
        data = {
            "jsonrpc": "2.0",
            "method": method,
            "params": list(params),
            "id": self.__nonce,
        }
        return data

    async def __post(self, request: Dict[str, Any]) -> Union[Dict, List]:
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(self.__provider_url, json=request) as response:
                    return await response.json(content_type=None)
        except (ClientError, asyncio.TimeoutError) as e:
            raise RpcTransportError(e)
        except ValueError as e:
            raise RpcDecodeError("Response is not valid JSON", e)

    def __log_debug(self, message):
        self.__logger.debug(f"{self.__instance}:{message}")

    async def send(self, method, *params) -> Any:
        request = self.__get_rpc_request(method, params)
        self.__log_debug(f"Sending request {request['id']} -- {method} {request['params']}")
        response = await self.__post(request)

        if not isinstance(response, dict):
            raise RpcDecodeError(f"Unexpected response returned: {response}")

        if "error" in response:
            try:
                error = RpcServerError(
                    response.get("jsonrpc"),
                    response.get("id"),
                    response["error"]["code"],
                    response["error"]["message"],
                )
            except (KeyError, TypeError):
                raise RpcDecodeError(f"Invalid error response received: {response}")
            self.__log_debug(f"Error received for request {request['id']} -- {error}")
            raise error

        if "result" not in response:
            raise RpcDecodeError(f"No result or error in response: {response}")

        self.__log_debug(f"Response received for request {request['id']}")
        return response["result"]
