from dataclasses import dataclass
from typing import List, Optional, Dict, Any, Union

from hexbytes import HexBytes

from ethcli.core.types import Address, HexInt, to_hex


@dataclass(frozen=True)
class EvmTransaction:
    from_: Address
    gas: HexInt
    hash: HexBytes
    input: HexBytes
    nonce: HexInt
    v: HexInt
    r: HexBytes
    s: HexBytes
    block_hash: Optional[HexBytes] = None
    block_number: Optional[HexInt] = None
    transaction_index: Optional[HexInt] = None
    gas_price: Optional[HexInt] = None
    max_fee_per_gas: Optional[HexInt] = None
    max_priority_fee_per_gas: Optional[HexInt] = None
    type: Optional[HexInt] = None
    chain_id: Optional[HexInt] = None
    to_: Optional[Address] = None
    value: Optional[HexInt] = None

    def __hash__(self) -> int:
        return (self.__class__.__name__ + to_hex(self.hash)).__hash__()


@dataclass(frozen=True)
class EvmBlock:
    number: Optional[HexInt]
    hash: Optional[HexBytes]
    parent_hash: HexBytes
    sha3_uncles: HexBytes
    logs_bloom: HexBytes
    transactions_root: HexBytes
    state_root: HexBytes
    receipts_root: HexBytes
    miner: Address
    difficulty: HexInt
    extra_data: HexBytes
    size: HexInt
    gas_limit: HexInt
    gas_used: HexInt
    timestamp: HexInt
    transaction_hashes: List[HexBytes]
    uncles: List[HexBytes]
    transactions: Optional[List[EvmTransaction]]
    nonce: Optional[HexBytes] = None
    mix_hash: Optional[HexBytes] = None
    total_difficulty: Optional[HexInt] = None
    base_fee_per_gas: Optional[HexInt] = None
    withdrawals_root: Optional[HexBytes] = None

    def __hash__(self) -> int:
        return (self.__class__.__name__ + str(self.hash)).__hash__()


@dataclass(frozen=True)
class EvmLog:
    removed: bool
    log_index: HexInt
    transaction_index: HexInt
    transaction_hash: HexBytes
    block_hash: HexBytes
    block_number: HexInt
    data: HexBytes
    topics: List[HexBytes]
    address: Optional[Address] = None

    def __hash__(self) -> int:
        return (
            self.__class__.__name__
            + self.block_number.hex_value
            + self.transaction_index.hex_value
            + self.log_index.hex_value
        ).__hash__()


@dataclass(frozen=True)
class EvmTransactionReceipt:
    transaction_hash: HexBytes
    transaction_index: HexInt
    block_hash: HexBytes
    block_number: HexInt
    from_: Address
    cumulative_gas_used: HexInt
    gas_used: HexInt
    logs: List[EvmLog]
    logs_bloom: HexBytes
    status: Optional[HexInt] = None
    to_: Optional[Address] = None
    contract_address: Optional[Address] = None
    effective_gas_price: Optional[HexInt] = None
    type: Optional[HexInt] = None
    root: Optional[HexBytes] = None

    def __hash__(self) -> int:
        return (self.__class__.__name__ + to_hex(self.transaction_hash)).__hash__()


@dataclass(frozen=True)
class FeeHistory:
    oldest_block: HexInt
    base_fee_per_gas: List[HexInt]
    gas_used_ratio: List[float]
    reward: Optional[List[List[HexInt]]] = None


@dataclass(frozen=True)
class StorageProof:
    key: HexBytes
    value: HexInt
    proof: List[HexBytes]


@dataclass(frozen=True)
class AccountProof:
    """EIP-1186 account proof"""

    address: Address
    balance: HexInt
    code_hash: HexBytes
    nonce: HexInt
    storage_hash: HexBytes
    account_proof: List[HexBytes]
    storage_proof: List[StorageProof]


@dataclass(frozen=True)
class SyncStatus:
    syncing: bool
    starting_block: Optional[HexInt] = None
    current_block: Optional[HexInt] = None
    highest_block: Optional[HexInt] = None


@dataclass(frozen=True)
class Signature:
    r: int
    s: int
    v: int

    @classmethod
    def from_bytes(cls, signature: bytes) -> "Signature":
        if len(signature) != 65:
            raise ValueError(f"Signature must be 65 bytes, got {len(signature)}")
        return cls(
            r=int.from_bytes(signature[0:32], "big"),
            s=int.from_bytes(signature[32:64], "big"),
            v=signature[64],
        )

    def to_bytes(self) -> HexBytes:
        return HexBytes(
            self.r.to_bytes(32, "big") + self.s.to_bytes(32, "big") + self.v.to_bytes(1, "big")
        )


@dataclass(frozen=True)
class Function:
    function_signature_hash: HexBytes
    description: str
    param_types: List[str]
    return_types: List[str]
    is_view: bool


class EnsRegistryFunctions:
    RESOLVER = Function(
        HexBytes("0x0178b8bf"),
        "resolver(bytes32)->(address)",
        ["bytes32"],
        ["address"],
        True,
    )


class EnsResolverFunctions:
    ADDR = Function(
        HexBytes("0x3b3b57de"),
        "addr(bytes32)->(address)",
        ["bytes32"],
        ["address"],
        True,
    )


class TransactionRequest:
    """
    Sparse transaction request. Only the fields which have been explicitly set are
    present and serialized; everything else is left for the node, or the signer, to
    fill in.

    Setters return the request so they may be chained::

        tx = TransactionRequest().from_(sender).to(receiver).value(10**18)

    The receiver may be an address or an ENS name. ENS names must be resolved,
    see :meth:`with_receiver`, before the request is serialized.
    """

    QUANTITY_FIELDS = ("gas", "gasPrice", "value", "nonce", "chainId")

    def __init__(self, fields: Optional[Dict[str, Any]] = None) -> None:
        self.__fields: Dict[str, Any] = {} if fields is None else dict(fields)

    def __repr__(self) -> str:  # pragma: no cover
        return f"{self.__class__.__name__}({self.__fields!r})"

    def __eq__(self, other):
        return isinstance(other, self.__class__) and self.fields == other.fields

    def __set(self, name: str, value: Any) -> "TransactionRequest":
        self.__fields[name] = value
        return self

    def from_(self, address: Address) -> "TransactionRequest":
        return self.__set("from", address)

    def to(self, receiver: Union[Address, str]) -> "TransactionRequest":
        return self.__set("to", receiver)

    def gas(self, gas: int) -> "TransactionRequest":
        return self.__set("gas", gas)

    def gas_price(self, gas_price: int) -> "TransactionRequest":
        return self.__set("gasPrice", gas_price)

    def value(self, value: int) -> "TransactionRequest":
        return self.__set("value", value)

    def data(self, data: bytes) -> "TransactionRequest":
        return self.__set("data", HexBytes(data))

    def nonce(self, nonce: int) -> "TransactionRequest":
        return self.__set("nonce", nonce)

    def chain_id(self, chain_id: int) -> "TransactionRequest":
        return self.__set("chainId", chain_id)

    @property
    def fields(self) -> Dict[str, Any]:
        return self.__fields.copy()

    def get(self, name: str, default: Any = None) -> Any:
        return self.__fields.get(name, default)

    def is_set(self, name: str) -> bool:
        return name in self.__fields

    @property
    def receiver_name(self) -> Optional[str]:
        """The ENS name of the receiver if the receiver has not yet been resolved"""
        receiver = self.__fields.get("to")
        if receiver is None or (receiver.startswith("0x") and len(receiver) == 42):
            return None
        return receiver

    def with_receiver(self, address: Address) -> "TransactionRequest":
        """Get a copy of the request with the receiver replaced by `address`"""
        return TransactionRequest(self.__fields).to(address)

    def copy(self) -> "TransactionRequest":
        return TransactionRequest(self.__fields)

    def to_rpc(self) -> Dict[str, Any]:
        """Get the JSON-RPC transaction object for the request"""
        if self.receiver_name is not None:
            raise ValueError(f"Receiver ENS name {self.receiver_name} has not been resolved")
        rpc: Dict[str, Any] = {}
        for name, value in self.__fields.items():
            if name in self.QUANTITY_FIELDS:
                rpc[name] = hex(value)
            elif name == "data":
                rpc[name] = to_hex(value)
            else:
                rpc[name] = value
        return rpc


@dataclass(frozen=True)
class SendInput:
    """Either pre-encoded `raw` bytes or a typed `transaction`, never both"""

    raw: Optional[HexBytes] = None
    transaction: Optional[TransactionRequest] = None

    @property
    def is_raw(self) -> bool:
        return self.raw is not None
