from typing import Any, Dict, List
from unittest.mock import AsyncMock, MagicMock, patch


class RpcPostPatch:
    """
    Helper for patching the HTTP POST made by the RPC client. Responses are returned
    in order, one per request.
    """

    def __init__(self, test_case) -> None:
        patcher = patch("aiohttp.ClientSession.post")
        self.post: MagicMock = patcher.start()
        test_case.addCleanup(patcher.stop)
        self.json = AsyncMock(return_value={"jsonrpc": "2.0", "id": 1, "result": None})
        self.post.return_value.__aenter__.return_value.json = self.json

    def respond(self, *results: Any) -> None:
        self.json.side_effect = None
        if len(results) == 1:
            self.json.return_value = {"jsonrpc": "2.0", "id": 1, "result": results[0]}
        else:
            self.json.side_effect = [
                {"jsonrpc": "2.0", "id": i, "result": result} for i, result in enumerate(results)
            ]

    def respond_raw(self, response: Any) -> None:
        self.json.side_effect = None
        self.json.return_value = response

    @property
    def requests(self) -> List[Dict[str, Any]]:
        return [call.kwargs["json"] for call in self.post.call_args_list]

    @property
    def request(self) -> Dict[str, Any]:
        self.post.assert_called()
        return self.post.call_args.kwargs["json"]
