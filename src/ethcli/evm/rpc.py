"""EVM specific RPC Clients"""

from typing import Optional, List, Any, Dict, Sequence

from eth_abi import decode, encode
from eth_utils import decode_hex
from hexbytes import HexBytes

from .types import (
    AccountProof,
    EvmBlock,
    EvmLog,
    EvmTransaction,
    EvmTransactionReceipt,
    FeeHistory,
    Function,
    StorageProof,
    SyncStatus,
    TransactionRequest,
)
from ..core.rpc import RpcClient, RpcDecodeError
from ..core.types import Address, BlockId, HexInt, to_hex


class EthCall:
    """
    Python representation of the properties of an eth_call to execute a function for a
    smart contract on an Ethereum Virtual Machine (EVM)

    :param from_: Address from which a transaction would originate. This is optional for
        view function calls.
    :param to:  Address of the contract whose function you will be calling.
    :param function: The function class representation of the contract function
    :param parameters: The list of ordered function parameters to send
    :param block: The block at which to execute the function. Latest if not provided.
    """

    def __init__(
        self,
        from_: Optional[str],
        to: str,
        function: Function,
        parameters: Optional[list] = None,
        block: Optional[BlockId] = None,
    ):
        self.__from = from_
        self.__to = to
        self.__function = function
        self.__parameters = [] if parameters is None else parameters.copy()
        self.__block = BlockId.latest() if block is None else block

    def __repr__(self) -> str:  # pragma: no cover
        return (
            str(self.__class__)
            + {
                "from": self.__from,
                "to": self.__to,
                "function": self.__function,
                "parameters": self.__parameters,
                "block": self.__block,
            }.__repr__()
        )

    def __eq__(self, other):
        return (
            isinstance(other, self.__class__)
            and self.from_ == other.from_
            and self.to == other.to
            and self.function == other.function
            and self.parameters == other.parameters
            and self.block == other.block
        )

    @property
    def from_(self):
        return self.__from

    @property
    def to(self):
        return self.__to

    @property
    def function(self):
        return self.__function

    @property
    def parameters(self):
        return self.__parameters.copy()

    @property
    def block(self) -> BlockId:
        return self.__block


def _block_param(block: Optional[BlockId]) -> str:
    return "latest" if block is None else block.rpc_value


def _optional_hex_int(value: Optional[str]) -> Optional[HexInt]:
    return None if value is None else HexInt(value)


def _optional_hex_bytes(value: Optional[str]) -> Optional[HexBytes]:
    return None if value is None else HexBytes(value)


def _parse_transaction(tx: Dict[str, Any]) -> EvmTransaction:
    return EvmTransaction(
        block_hash=_optional_hex_bytes(tx.get("blockHash")),
        block_number=_optional_hex_int(tx.get("blockNumber")),
        from_=Address(tx["from"]),
        gas=HexInt(tx["gas"]),
        gas_price=_optional_hex_int(tx.get("gasPrice")),
        max_fee_per_gas=_optional_hex_int(tx.get("maxFeePerGas")),
        max_priority_fee_per_gas=_optional_hex_int(tx.get("maxPriorityFeePerGas")),
        hash=HexBytes(tx["hash"]),
        input=HexBytes(tx["input"]),
        nonce=HexInt(tx["nonce"]),
        transaction_index=_optional_hex_int(tx.get("transactionIndex")),
        type=_optional_hex_int(tx.get("type")),
        chain_id=_optional_hex_int(tx.get("chainId")),
        v=HexInt(tx["v"]),
        r=HexBytes(tx["r"]),
        s=HexBytes(tx["s"]),
        to_=Address(tx["to"]) if tx.get("to") else None,
        value=_optional_hex_int(tx.get("value")),
    )


def _parse_block(result: Dict[str, Any], full_transactions: bool) -> EvmBlock:
    if result.get("transactions") is None:
        # Blocks must have transactions, even if empty
        raise RpcDecodeError("Error retrieving block: transactions attribute was null")

    if full_transactions:
        transactions: Optional[List[EvmTransaction]] = [
            _parse_transaction(tx) for tx in result["transactions"]
        ]
        transaction_hashes = [HexBytes(tx["hash"]) for tx in result["transactions"]]
    else:
        transactions = None
        transaction_hashes = [HexBytes(tx) for tx in result["transactions"]]

    return EvmBlock(
        number=_optional_hex_int(result.get("number")),
        hash=_optional_hex_bytes(result.get("hash")),
        parent_hash=HexBytes(result["parentHash"]),
        nonce=_optional_hex_bytes(result.get("nonce")),
        sha3_uncles=HexBytes(result["sha3Uncles"]),
        logs_bloom=HexBytes(result["logsBloom"]),
        transactions_root=HexBytes(result["transactionsRoot"]),
        state_root=HexBytes(result["stateRoot"]),
        receipts_root=HexBytes(result["receiptsRoot"]),
        miner=Address(result["miner"]),
        mix_hash=_optional_hex_bytes(result.get("mixHash")),
        difficulty=HexInt(result["difficulty"]),
        total_difficulty=_optional_hex_int(result.get("totalDifficulty")),
        extra_data=HexBytes(result["extraData"]),
        size=HexInt(result["size"]),
        gas_limit=HexInt(result["gasLimit"]),
        gas_used=HexInt(result["gasUsed"]),
        timestamp=HexInt(result["timestamp"]),
        base_fee_per_gas=_optional_hex_int(result.get("baseFeePerGas")),
        withdrawals_root=_optional_hex_bytes(result.get("withdrawalsRoot")),
        transaction_hashes=transaction_hashes,
        transactions=transactions,
        uncles=[HexBytes(uncle) for uncle in result.get("uncles", [])],
    )


def _parse_log(log: Dict[str, Any]) -> EvmLog:
    return EvmLog(
        removed=log.get("removed", False),
        log_index=HexInt(log["logIndex"]),
        transaction_index=HexInt(log["transactionIndex"]),
        transaction_hash=HexBytes(log["transactionHash"]),
        block_hash=HexBytes(log["blockHash"]),
        block_number=HexInt(log["blockNumber"]),
        address=Address(log["address"]),
        data=HexBytes(log["data"]),
        topics=[HexBytes(topic) for topic in log["topics"]],
    )


def _parse_receipt(result: Dict[str, Any]) -> EvmTransactionReceipt:
    return EvmTransactionReceipt(
        transaction_hash=HexBytes(result["transactionHash"]),
        transaction_index=HexInt(result["transactionIndex"]),
        block_hash=HexBytes(result["blockHash"]),
        block_number=HexInt(result["blockNumber"]),
        from_=Address(result["from"]),
        to_=Address(result["to"]) if result.get("to") else None,
        cumulative_gas_used=HexInt(result["cumulativeGasUsed"]),
        gas_used=HexInt(result["gasUsed"]),
        contract_address=result.get("contractAddress"),
        effective_gas_price=_optional_hex_int(result.get("effectiveGasPrice")),
        type=_optional_hex_int(result.get("type")),
        logs=[_parse_log(log) for log in result["logs"]],
        logs_bloom=HexBytes(result["logsBloom"]),
        root=HexBytes(result["root"]) if "root" in result else None,
        status=HexInt(result["status"]) if "status" in result else None,
    )


def _parse_proof(result: Dict[str, Any]) -> AccountProof:
    return AccountProof(
        address=Address(result["address"]),
        balance=HexInt(result["balance"]),
        code_hash=HexBytes(result["codeHash"]),
        nonce=HexInt(result["nonce"]),
        storage_hash=HexBytes(result["storageHash"]),
        account_proof=[HexBytes(node) for node in result["accountProof"]],
        storage_proof=[
            StorageProof(
                key=HexBytes(item["key"]),
                value=HexInt(item["value"]),
                proof=[HexBytes(node) for node in item["proof"]],
            )
            for item in result["storageProof"]
        ],
    )


class EvmRpcClient(RpcClient):
    """
    RPC Client for EVM RPC calls. Lookups return None when the node returns a null
    result, for example an unknown block or transaction hash. Errors reported by the
    node are raised as :class:`ethcli.core.rpc.RpcServerError`.
    """

    async def get_block_number(self) -> HexInt:
        """Get the current block height via
        `eth_blockNumber <https://ethereum.org/en/developers/docs/apis/json-rpc/#eth_blocknumber>`_
        """

        result = await self.send("eth_blockNumber")
        block_number = HexInt(result)
        return block_number

    async def get_balance(self, address: Address, block: Optional[BlockId] = None) -> HexInt:
        result = await self.send("eth_getBalance", address, _block_param(block))
        return HexInt(result)

    async def get_code(self, address: Address, block: Optional[BlockId] = None) -> HexBytes:
        result = await self.send("eth_getCode", address, _block_param(block))
        return HexBytes(result)

    async def get_transaction_count(
        self, address: Address, block: Optional[BlockId] = None
    ) -> HexInt:
        result = await self.send("eth_getTransactionCount", address, _block_param(block))
        return HexInt(result)

    async def get_storage_at(
        self, address: Address, slot: HexBytes, block: Optional[BlockId] = None
    ) -> HexBytes:
        result = await self.send("eth_getStorageAt", address, to_hex(slot), _block_param(block))
        return HexBytes(result)

    async def get_block(
        self, block_id: BlockId, full_transactions: bool = False
    ) -> Optional[EvmBlock]:
        """Get a block via
        `eth_getBlockByHash <https://ethereum.org/en/developers/docs/apis/json-rpc/#eth_getblockbyhash>`_
        or
        `eth_getBlockByNumber <https://ethereum.org/en/developers/docs/apis/json-rpc/#eth_getblockbynumber>`_

        :param block_id: Identifier of the block you wish to get.
        :param full_transactions: Return full transactions flag. If True,
            `transactions` attribute on the returned block will contain EVMTransaction
            objects and the `transaction_hashes` attribute will contain transaction hashes. If
            False, the `transaction_hashes` attribute will contain transaction hashes and the
            `transactions` attribute will be None.
        :returns: The block or None if the node does not know the block
        """  # noqa: E501

        method = "eth_getBlockByHash" if block_id.is_hash else "eth_getBlockByNumber"
        result = await self.send(method, block_id.rpc_value, full_transactions)
        if result is None:
            return None
        return _parse_block(result, full_transactions)

    async def get_block_transaction_count(self, block_id: BlockId) -> Optional[HexInt]:
        method = (
            "eth_getBlockTransactionCountByHash"
            if block_id.is_hash
            else "eth_getBlockTransactionCountByNumber"
        )
        result = await self.send(method, block_id.rpc_value)
        return _optional_hex_int(result)

    async def get_uncle_count(self, block_id: BlockId) -> Optional[HexInt]:
        method = (
            "eth_getUncleCountByBlockHash" if block_id.is_hash else "eth_getUncleCountByBlockNumber"
        )
        result = await self.send(method, block_id.rpc_value)
        return _optional_hex_int(result)

    async def get_block_receipts(self, block_id: BlockId) -> Optional[List[EvmTransactionReceipt]]:
        result = await self.send("eth_getBlockReceipts", block_id.rpc_value)
        if result is None:
            return None
        return [_parse_receipt(receipt) for receipt in result]

    async def get_transaction(self, tx_hash: HexBytes) -> Optional[EvmTransaction]:
        result = await self.send("eth_getTransactionByHash", to_hex(tx_hash))
        if result is None:
            return None
        return _parse_transaction(result)

    async def get_transaction_by_block_and_index(
        self, block_id: BlockId, index: int
    ) -> Optional[EvmTransaction]:
        method = (
            "eth_getTransactionByBlockHashAndIndex"
            if block_id.is_hash
            else "eth_getTransactionByBlockNumberAndIndex"
        )
        result = await self.send(method, block_id.rpc_value, hex(index))
        if result is None:
            return None
        return _parse_transaction(result)

    async def get_transaction_receipt(self, tx_hash: HexBytes) -> Optional[EvmTransactionReceipt]:
        """Get a transaction receipt by hash via
        `eth_getTransactionReceipt <https://ethereum.org/en/developers/docs/apis/json-rpc/#eth_gettransactionreceipt>`_

        :param tx_hash: Transaction hash of transaction you wish to retrieve.
        :returns: The receipt or None if the transaction is unknown or not yet mined
        """  # noqa: E501

        result = await self.send("eth_getTransactionReceipt", to_hex(tx_hash))
        if result is None:
            return None
        return _parse_receipt(result)

    async def estimate_gas(
        self, tx: TransactionRequest, block: Optional[BlockId] = None
    ) -> HexInt:
        if block is None:
            result = await self.send("eth_estimateGas", tx.to_rpc())
        else:
            result = await self.send("eth_estimateGas", tx.to_rpc(), block.rpc_value)
        return HexInt(result)

    async def call_transaction(
        self, tx: TransactionRequest, block: Optional[BlockId] = None
    ) -> HexBytes:
        """Execute a message call without creating a transaction via `eth_call`"""
        result = await self.send("eth_call", tx.to_rpc(), _block_param(block))
        return HexBytes(result)

    async def call(self, request: EthCall) -> Any:
        """
        Call a function on a smart contract via
        `eth_call <https://ethereum.org/en/developers/docs/apis/json-rpc/#eth_call>`_

        :param request: Object representation of the call

        :returns: Decoded values returned by the smart contract function.
            If there is no return type for the function, the result will be None.
            Otherwise, it will be a tuple of response types as functions can return
            multiple values. For example::

                (result,) = rpc_client.call(request)

        :raises: RpcDecodeError

        """

        if len(request.parameters) == 0:
            encoded_params = ""
        else:
            encoded_param_bytes = encode(request.function.param_types, request.parameters)
            encoded_params = encoded_param_bytes.hex()

        call_data = f"{to_hex(request.function.function_signature_hash)}{encoded_params}"
        call_object = {"to": request.to, "data": call_data}
        if request.from_ is not None:
            call_object["from"] = request.from_
        result = await self.send("eth_call", call_object, request.block.rpc_value)

        encoded_response: str = result
        if len(request.function.return_types) == 0:
            response = None
        else:
            try:
                encoded_response_bytes = decode_hex(encoded_response)
                if encoded_response_bytes == b"":
                    response = (None,)
                else:
                    response = decode(
                        request.function.return_types,
                        encoded_response_bytes,
                    )
            except Exception as e:
                raise RpcDecodeError(
                    "Response Decode Error",
                    e,
                )
        return response

    async def get_fee_history(
        self, block_count: int, newest_block: BlockId, reward_percentiles: Sequence[float]
    ) -> Optional[FeeHistory]:
        result = await self.send(
            "eth_feeHistory", hex(block_count), newest_block.rpc_value, list(reward_percentiles)
        )
        if result is None:
            return None
        reward = result.get("reward")
        return FeeHistory(
            oldest_block=HexInt(result["oldestBlock"]),
            base_fee_per_gas=[HexInt(fee) for fee in result.get("baseFeePerGas", [])],
            gas_used_ratio=[float(ratio) for ratio in result.get("gasUsedRatio", [])],
            reward=None
            if reward is None
            else [[HexInt(value) for value in block_rewards] for block_rewards in reward],
        )

    async def get_gas_price(self) -> HexInt:
        result = await self.send("eth_gasPrice")
        return HexInt(result)

    async def get_max_priority_fee_per_gas(self) -> HexInt:
        result = await self.send("eth_maxPriorityFeePerGas")
        return HexInt(result)

    async def get_accounts(self) -> List[Address]:
        result = await self.send("eth_accounts")
        return [Address(account.lower()) for account in result]

    async def get_chain_id(self) -> HexInt:
        result = await self.send("eth_chainId")
        return HexInt(result)

    async def get_protocol_version(self) -> HexInt:
        result = await self.send("eth_protocolVersion")
        if isinstance(result, str) and not result.startswith("0x"):
            # Some clients report the version as a decimal string
            return HexInt(int(result))
        return HexInt(result)

    async def get_proof(
        self, address: Address, storage_keys: Sequence[HexBytes], block: Optional[BlockId] = None
    ) -> AccountProof:
        result = await self.send(
            "eth_getProof", address, [to_hex(key) for key in storage_keys], _block_param(block)
        )
        return _parse_proof(result)

    async def get_syncing(self) -> SyncStatus:
        result = await self.send("eth_syncing")
        if not result:
            return SyncStatus(syncing=False)
        return SyncStatus(
            syncing=True,
            starting_block=_optional_hex_int(result.get("startingBlock")),
            current_block=_optional_hex_int(result.get("currentBlock")),
            highest_block=_optional_hex_int(result.get("highestBlock")),
        )

    async def sign(self, address: Address, data: bytes) -> HexBytes:
        """Sign data with an account managed by the node via `eth_sign`"""
        result = await self.send("eth_sign", address, to_hex(data))
        return HexBytes(result)

    async def sign_transaction(self, tx: TransactionRequest) -> Dict[str, Any]:
        """Sign a transaction with an account managed by the node via `eth_signTransaction`"""
        result = await self.send("eth_signTransaction", tx.to_rpc())
        if not isinstance(result, dict):
            raise RpcDecodeError(f"Unexpected eth_signTransaction result: {result}")
        return result

    async def send_raw_transaction(self, raw: bytes) -> HexBytes:
        result = await self.send("eth_sendRawTransaction", to_hex(raw))
        return HexBytes(result)

    async def send_transaction(self, tx: TransactionRequest) -> HexBytes:
        result = await self.send("eth_sendTransaction", tx.to_rpc())
        return HexBytes(result)
