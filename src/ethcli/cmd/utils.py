"""Utility commands"""

from typing import List, Optional, Sequence

from hexbytes import HexBytes

from ethcli.core.types import AccountId, Address, BlockId, HexInt
from ethcli.evm.provider import NodeProvider, NoSignerAvailableError
from ethcli.evm.types import AccountProof, SendInput, Signature, SyncStatus


# eth_accounts
async def get_accounts(node_provider: NodeProvider) -> List[Address]:
    return await node_provider.get_accounts()


# eth_chainId
async def get_chain_id(node_provider: NodeProvider) -> HexInt:
    return await node_provider.get_chain_id()


# eth_getProof
async def get_proof(
    node_provider: NodeProvider,
    account_id: AccountId,
    storage_locations: Sequence[HexBytes],
    block_id: Optional[BlockId] = None,
) -> AccountProof:
    address = await node_provider.resolve_account(account_id)
    return await node_provider.get_proof(address, storage_locations, block_id)


# eth_protocolVersion
async def get_protocol_version(node_provider: NodeProvider) -> HexInt:
    return await node_provider.get_protocol_version()


async def sign(node_provider: NodeProvider, account_id: AccountId, data: SendInput) -> Signature:
    """
    Sign raw data or a transaction for the account. An ENS name for the account is
    resolved before signing.

    :raises NoSignerAvailableError: The provider has no signer configured
    """
    if not node_provider.has_signer:
        raise NoSignerAvailableError(
            "No signer available. A private key must be configured to sign."
        )
    address = await node_provider.resolve_account(account_id)
    if data.is_raw:
        return await node_provider.sign_data(address, data.raw)
    return await node_provider.sign_typed_transaction(address, data.transaction)


# eth_syncing
async def get_sync_status(node_provider: NodeProvider) -> SyncStatus:
    return await node_provider.get_syncing()
