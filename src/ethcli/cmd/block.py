"""Block commands. Lookups return None when the block does not exist."""

from typing import Optional, List

from ethcli.core.types import BlockId, HexInt
from ethcli.evm.provider import NodeProvider
from ethcli.evm.types import EvmBlock, EvmTransactionReceipt


# eth_getBlockByHash || eth_getBlockByNumber
async def get_block(
    node_provider: NodeProvider, block_id: BlockId, include_tx: bool = False
) -> Optional[EvmBlock]:
    return await node_provider.get_block(block_id, include_tx)


# eth_blockNumber
async def get_block_number(node_provider: NodeProvider) -> HexInt:
    return await node_provider.get_block_number()


# eth_getBlockTransactionCountByHash || eth_getBlockTransactionCountByNumber
async def get_transaction_count(
    node_provider: NodeProvider, block_id: BlockId
) -> Optional[HexInt]:
    return await node_provider.get_block_transaction_count(block_id)


# eth_getUncleCountByBlockHash || eth_getUncleCountByBlockNumber
async def get_uncle_block_count(
    node_provider: NodeProvider, block_id: BlockId
) -> Optional[HexInt]:
    return await node_provider.get_uncle_count(block_id)


# eth_getBlockReceipts
async def get_block_receipts(
    node_provider: NodeProvider, block_id: BlockId
) -> Optional[List[EvmTransactionReceipt]]:
    """
    Get the receipts for all transactions in the block. The receipts are requested
    by block number, so a block hash is first resolved to its number. If no block
    exists for the hash, None is returned without requesting the receipts.
    """
    if block_id.is_hash:
        block = await node_provider.get_block(block_id)
        if block is None or block.number is None:
            return None
        block_id = BlockId.from_number(block.number.int_value)

    return await node_provider.get_block_receipts(block_id)
