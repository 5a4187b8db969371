"""
Node provider used by every command. The provider is an EVM RPC client with an
optional local signer. The signer is chosen once, when the provider is created,
and does not change afterwards.
"""

import asyncio
import logging
import re
from typing import Optional, Tuple

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_utils import to_checksum_address
from hexbytes import HexBytes

from ethcli import LOGGER_NAME
from ethcli.core.config import CliConfig
from ethcli.core.rpc import RpcClientError, RpcDecodeError
from ethcli.core.types import AccountId, Address, BlockId, to_hex
from ethcli.evm.ens import resolve_name
from ethcli.evm.rpc import EvmRpcClient
from ethcli.evm.types import EvmTransactionReceipt, Signature, TransactionRequest

DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_RETRIES = 3

_PRIVATE_KEY_PATTERN = re.compile(r"^(0x)?[0-9a-fA-F]{64}$")


class ProviderConfigError(Exception):
    pass


class NoSignerAvailableError(Exception):
    pass


class LocalSigner:
    """
    Signs messages and transactions with a private key held in memory.

    :param private_key: Hexadecimal private key, with or without the `0x` prefix
    :raises ProviderConfigError: The private key could not be parsed
    """

    def __init__(self, private_key: str) -> None:
        if not isinstance(private_key, str) or not _PRIVATE_KEY_PATTERN.match(private_key):
            raise ProviderConfigError(
                "Invalid private key: must be a hexadecimal string of 32 bytes"
            )
        try:
            self.__account = Account.from_key(private_key)
        except Exception as e:  # key out of curve range
            raise ProviderConfigError(f"Invalid private key: {e}") from e

    def __repr__(self) -> str:  # pragma: no cover
        return f"{self.__class__.__name__}({self.address})"

    @property
    def address(self) -> Address:
        return Address(self.__account.address.lower())

    def sign_message(self, data: bytes) -> Signature:
        """Sign `data` as an EIP-191 personal message"""
        signed = self.__account.sign_message(encode_defunct(primitive=bytes(data)))
        return Signature(r=signed.r, s=signed.s, v=signed.v)

    def sign_transaction(self, tx: TransactionRequest) -> Tuple[HexBytes, Signature]:
        """
        Sign a fully populated legacy transaction.

        :returns: The raw encoded signed transaction and its signature
        """
        fields = tx.fields
        unsigned = {
            "nonce": fields["nonce"],
            "gasPrice": fields["gasPrice"],
            "gas": fields["gas"],
            "value": fields.get("value", 0),
            "data": bytes(fields.get("data", b"")),
            "chainId": fields["chainId"],
        }
        if fields.get("to") is not None:
            unsigned["to"] = to_checksum_address(fields["to"])
        signed = self.__account.sign_transaction(unsigned)
        return HexBytes(signed.raw_transaction), Signature(r=signed.r, s=signed.s, v=signed.v)


class PendingTransaction:
    """
    Handle for a transaction which has been submitted to the node.

    :param rpc_client: Client used to poll for the receipt
    :param tx_hash: Hash of the submitted transaction
    :param poll_interval: Seconds to wait between receipt polls
    :param retries: Consecutive lookups which may find no transaction before it is
        considered dropped
    """

    def __init__(
        self,
        rpc_client: EvmRpcClient,
        tx_hash: HexBytes,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        retries: int = DEFAULT_RETRIES,
    ) -> None:
        self.__rpc_client = rpc_client
        self.__tx_hash = HexBytes(tx_hash)
        self.__poll_interval = poll_interval
        self.__retries = retries

    @property
    def tx_hash(self) -> HexBytes:
        return self.__tx_hash

    async def wait(self) -> Optional[EvmTransactionReceipt]:
        """
        Wait until the transaction is mined.

        A transaction the node does not know yet is looked up again until `retries`
        consecutive lookups have found nothing.

        :returns: The receipt of the mined transaction, or None if the node no longer
            knows the transaction
        """
        logger = logging.getLogger(LOGGER_NAME)
        misses = 0
        while True:
            receipt = await self.__rpc_client.get_transaction_receipt(self.__tx_hash)
            if receipt is not None:
                return receipt

            transaction = await self.__rpc_client.get_transaction(self.__tx_hash)
            if transaction is None:
                misses += 1
                if misses >= self.__retries:
                    logger.warning(f"Transaction {to_hex(self.__tx_hash)} was dropped by the node")
                    return None
                logger.debug(f"Transaction not found, {self.__retries - misses} lookups left")
            else:
                misses = 0

            logger.debug(f"Waiting {self.__poll_interval}s for transaction to be mined")
            await asyncio.sleep(self.__poll_interval)


class NodeProvider(EvmRpcClient):
    """
    EVM RPC client with an optional local signer. Reads behave the same with or
    without a signer. Sending a transaction signs it locally when the signer owns the
    sender, otherwise the node is asked to send it. Signing always requires a signer.

    :param provider_url: HTTP(S) URL of the node
    :param signer: Local signer, if a private key was configured
    :param poll_interval: Seconds between receipt polls while waiting for transactions
    """

    def __init__(
        self,
        provider_url: str,
        signer: Optional[LocalSigner] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        super().__init__(provider_url)
        self.__signer = signer
        self.__poll_interval = poll_interval

    @classmethod
    def from_config(cls, config: CliConfig) -> "NodeProvider":
        """
        Create the provider for the configuration.

        :raises ProviderConfigError: The RPC URL or the private key is invalid
        """
        logger = logging.getLogger(LOGGER_NAME)
        signer = LocalSigner(config.priv_key) if config.priv_key else None
        try:
            provider = cls(config.rpc_url, signer)
        except RpcClientError as e:
            raise ProviderConfigError(str(e)) from e
        if signer:
            logger.debug(f"Using local signer {signer.address} with node {config.rpc_url}")
        else:
            logger.debug(f"Using node {config.rpc_url} without a signer")
        return provider

    @property
    def signer(self) -> Optional[LocalSigner]:
        return self.__signer

    @property
    def has_signer(self) -> bool:
        return self.__signer is not None

    def __require_signer(self) -> LocalSigner:
        if self.__signer is None:
            raise NoSignerAvailableError(
                "No signer available. A private key must be configured to sign."
            )
        return self.__signer

    async def resolve_name(self, name: str) -> Address:
        return await resolve_name(self, name)

    async def resolve_account(self, account_id: AccountId) -> Address:
        """Get the address for the account, resolving its ENS name if needed"""
        if account_id.name is not None:
            return await self.resolve_name(account_id.name)
        return account_id.address

    async def resolve_receiver(self, tx: TransactionRequest) -> TransactionRequest:
        """Get the transaction with an ENS receiver name replaced by its address"""
        if tx.receiver_name is None:
            return tx
        return tx.with_receiver(await self.resolve_name(tx.receiver_name))

    async def fill_transaction(
        self, tx: TransactionRequest, sender: Address
    ) -> TransactionRequest:
        """
        Populate the fields required to sign a transaction which were not provided.
        The nonce is taken from the pending block so it accounts for transactions
        which have not been mined yet.
        """
        filled = (await self.resolve_receiver(tx)).copy()
        if not filled.is_set("from"):
            filled.from_(sender)
        if not filled.is_set("nonce"):
            filled.nonce((await self.get_transaction_count(sender, BlockId.pending())).int_value)
        if not filled.is_set("chainId"):
            filled.chain_id((await self.get_chain_id()).int_value)
        if not filled.is_set("gasPrice"):
            filled.gas_price((await self.get_gas_price()).int_value)
        if not filled.is_set("gas"):
            filled.gas((await self.estimate_gas(filled)).int_value)
        return filled

    def __signs_locally(self, sender: Optional[Address]) -> bool:
        return self.__signer is not None and (
            sender is None or sender.lower() == self.__signer.address
        )

    async def submit_raw_transaction(self, raw: bytes) -> PendingTransaction:
        tx_hash = await self.send_raw_transaction(raw)
        return PendingTransaction(self, tx_hash, self.__poll_interval)

    async def submit_transaction(self, tx: TransactionRequest) -> PendingTransaction:
        """
        Submit a typed transaction. With a local signer owning the sender the
        transaction is filled, signed and sent raw. Otherwise the node signs it with
        one of its own accounts via `eth_sendTransaction`.
        """
        if self.__signs_locally(tx.get("from")):
            signer = self.__require_signer()
            filled = await self.fill_transaction(tx, signer.address)
            raw, _ = signer.sign_transaction(filled)
            return await self.submit_raw_transaction(raw)

        tx_hash = await self.send_transaction(await self.resolve_receiver(tx))
        return PendingTransaction(self, tx_hash, self.__poll_interval)

    async def sign_data(self, address: Address, data: bytes) -> Signature:
        signer = self.__require_signer()
        if self.__signs_locally(address):
            return signer.sign_message(data)
        signature = await self.sign(address, data)
        try:
            return Signature.from_bytes(signature)
        except ValueError as e:
            raise RpcDecodeError(f"Unexpected eth_sign result: {signature!r}", e)

    async def sign_typed_transaction(
        self, address: Address, tx: TransactionRequest
    ) -> Signature:
        signer = self.__require_signer()
        if self.__signs_locally(address):
            filled = await self.fill_transaction(tx.copy().from_(address), address)
            _, signature = signer.sign_transaction(filled)
            return signature

        result = await self.sign_transaction(await self.resolve_receiver(tx.copy().from_(address)))
        try:
            signed = result["tx"]
            return Signature(
                r=int(signed["r"], 16), s=int(signed["s"], 16), v=int(signed["v"], 16)
            )
        except (KeyError, TypeError, ValueError) as e:
            raise RpcDecodeError(f"Unexpected eth_signTransaction result: {result}", e)
