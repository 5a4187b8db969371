"""Gas commands"""

from typing import Optional, Sequence

from ethcli.core.types import BlockId, HexInt
from ethcli.evm.provider import NodeProvider
from ethcli.evm.types import FeeHistory, TransactionRequest


# eth_estimateGas
async def estimate_gas(
    node_provider: NodeProvider, tx: TransactionRequest, block_id: Optional[BlockId] = None
) -> HexInt:
    tx = await node_provider.resolve_receiver(tx)
    return await node_provider.estimate_gas(tx, block_id)


# eth_feeHistory
async def get_fee_history(
    node_provider: NodeProvider,
    block_count: int,
    last_block: BlockId,
    reward_percentiles: Sequence[float],
) -> Optional[FeeHistory]:
    return await node_provider.get_fee_history(block_count, last_block, reward_percentiles)


# eth_gasPrice
async def get_gas_price(node_provider: NodeProvider) -> HexInt:
    return await node_provider.get_gas_price()


# eth_maxPriorityFeePerGas
async def get_max_priority_fee(node_provider: NodeProvider) -> HexInt:
    return await node_provider.get_max_priority_fee_per_gas()
