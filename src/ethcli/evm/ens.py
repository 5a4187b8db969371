"""ENS name resolution through the ENS registry and resolver contracts"""

import logging

from eth_hash.auto import keccak
from hexbytes import HexBytes

from ethcli import LOGGER_NAME
from ethcli.core.types import Address
from ethcli.evm.rpc import EvmRpcClient, EthCall
from ethcli.evm.types import EnsRegistryFunctions, EnsResolverFunctions

ENS_REGISTRY_ADDRESS = Address("0x00000000000c2e074ec69a0dfb2997ba6c7d2e1e")
ZERO_ADDRESS = Address("0x0000000000000000000000000000000000000000")


class EnsResolutionError(Exception):
    pass


def namehash(name: str) -> HexBytes:
    """
    Compute the EIP-137 namehash of an ENS name. For example::

        namehash("eth")

    will return `0x93cdeb708b7545dc668eb9280176169d1c33cfd8ed6f04690a0bcc88a93fc4ae`.
    """
    node = b"\x00" * 32
    if name:
        labels = name.lower().split(".")
        if not all(labels):
            raise EnsResolutionError(f"ENS name {name!r} has an empty label")
        for label in reversed(labels):
            node = keccak(node + keccak(label.encode("utf-8")))
    return HexBytes(node)


async def resolve_name(rpc_client: EvmRpcClient, name: str) -> Address:
    """
    Resolve an ENS name to an address. This takes two calls: one to the registry to
    find the resolver for the name and one to the resolver for the address.

    :raises EnsResolutionError: The name has no resolver or resolves to no address
    """
    logger = logging.getLogger(LOGGER_NAME)
    node = namehash(name)
    (resolver,) = await rpc_client.call(
        EthCall(None, ENS_REGISTRY_ADDRESS, EnsRegistryFunctions.RESOLVER, [bytes(node)])
    )
    if resolver is None or resolver.lower() == ZERO_ADDRESS:
        raise EnsResolutionError(f"No resolver found for ENS name {name}")

    (address,) = await rpc_client.call(
        EthCall(None, resolver, EnsResolverFunctions.ADDR, [bytes(node)])
    )
    if address is None or address.lower() == ZERO_ADDRESS:
        raise EnsResolutionError(f"ENS name {name} does not resolve to an address")

    logger.debug(f"Resolved ENS name {name} to {address}")
    return Address(address.lower())
