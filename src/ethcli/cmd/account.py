"""Account commands"""

from typing import Optional

from hexbytes import HexBytes

from ethcli.core.types import AccountId, BlockId, HexInt
from ethcli.evm.provider import NodeProvider


# eth_getBalance
async def get_balance(
    node_provider: NodeProvider, account_id: AccountId, block_id: Optional[BlockId] = None
) -> HexInt:
    address = await node_provider.resolve_account(account_id)
    return await node_provider.get_balance(address, block_id)


# eth_getCode
async def get_code(
    node_provider: NodeProvider, account_id: AccountId, block_id: Optional[BlockId] = None
) -> HexBytes:
    address = await node_provider.resolve_account(account_id)
    return await node_provider.get_code(address, block_id)


# eth_getTransactionCount
async def get_transaction_count(
    node_provider: NodeProvider, account_id: AccountId, block_id: Optional[BlockId] = None
) -> HexInt:
    address = await node_provider.resolve_account(account_id)
    return await node_provider.get_transaction_count(address, block_id)


async def get_nonce(node_provider: NodeProvider, account_id: AccountId) -> HexInt:
    """
    Get the nonce to use for the next transaction sent from the account. This is the
    transaction count at the pending block, which includes transactions that have
    been submitted but not yet mined.
    """
    return await get_transaction_count(node_provider, account_id, BlockId.pending())


# eth_getStorageAt
async def get_storage_at(
    node_provider: NodeProvider,
    account_id: AccountId,
    slot: HexBytes,
    block_id: Optional[BlockId] = None,
) -> HexBytes:
    address = await node_provider.resolve_account(account_id)
    return await node_provider.get_storage_at(address, slot, block_id)
