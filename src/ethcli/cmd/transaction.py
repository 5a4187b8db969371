"""Transaction commands"""

import logging
from typing import Optional, Union

from hexbytes import HexBytes

from ethcli import LOGGER_NAME
from ethcli.core.types import BlockId, to_hex
from ethcli.evm.provider import NodeProvider
from ethcli.evm.types import (
    EvmTransaction,
    EvmTransactionReceipt,
    SendInput,
    TransactionRequest,
)


# eth_getTransactionByHash
async def get_transaction(
    node_provider: NodeProvider, tx_hash: HexBytes
) -> Optional[EvmTransaction]:
    return await node_provider.get_transaction(tx_hash)


# eth_getTransactionByBlockHashAndIndex || eth_getTransactionByBlockNumberAndIndex
async def get_transaction_by_block_and_index(
    node_provider: NodeProvider, block_id: BlockId, index: int
) -> Optional[EvmTransaction]:
    return await node_provider.get_transaction_by_block_and_index(block_id, index)


# eth_getTransactionReceipt
async def get_transaction_receipt(
    node_provider: NodeProvider, tx_hash: HexBytes
) -> Optional[EvmTransactionReceipt]:
    return await node_provider.get_transaction_receipt(tx_hash)


# eth_sendRawTransaction || eth_sendTransaction
async def send_transaction(
    node_provider: NodeProvider, send_input: SendInput, wait: bool = False
) -> Union[HexBytes, EvmTransactionReceipt, None]:
    """
    Submit a transaction to the node.

    :param send_input: Raw signed transaction bytes or a typed transaction
    :param wait: Wait for the transaction to be mined
    :returns: The transaction hash when not waiting. When waiting, the receipt of the
        mined transaction or None if the transaction was dropped.
    """
    if send_input.is_raw:
        pending = await node_provider.submit_raw_transaction(send_input.raw)
    else:
        pending = await node_provider.submit_transaction(send_input.transaction)

    logger = logging.getLogger(LOGGER_NAME)
    logger.info(f"Submitted transaction {to_hex(pending.tx_hash)}")

    if not wait:
        return pending.tx_hash
    return await pending.wait()


# eth_call
async def call(
    node_provider: NodeProvider, tx: TransactionRequest, block_id: Optional[BlockId] = None
) -> HexBytes:
    tx = await node_provider.resolve_receiver(tx)
    return await node_provider.call_transaction(tx, block_id)
