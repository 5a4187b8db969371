"""Core types"""

from dataclasses import dataclass
from enum import Enum
from typing import NewType, Union, Optional

from hexbytes import HexBytes

Address = NewType("Address", str)
"""A address type for explicitly identifying an address in usage"""


def to_hex(value: bytes) -> str:
    """Get the `0x` prefixed hexadecimal string for a byte string"""
    return "0x" + bytes(value).hex()


class HexInt:
    """
    A representation of an integer than can be easily translated between a hexadecimal
    string and an integer. It will evaluate in most forms as an integer representation.
    """

    def __init__(self, value: Union[str, int]) -> None:
        if isinstance(value, str):
            self.__hex_str = value
            self.__int_value = int(value, 16)
        elif isinstance(value, int):
            self.__hex_str = hex(value)
            self.__int_value = value
        else:
            raise TypeError("parameter value must be str or int")

    def __eq__(self, o) -> bool:
        if isinstance(o, self.__class__):
            return o.int_value == self.int_value
        elif isinstance(o, int):
            return self.int_value == o
        else:
            return NotImplemented

    def __str__(self) -> str:
        return self.__hex_str

    def __hash__(self) -> int:
        return self.int_value.__hash__()

    def __repr__(self):
        return f"{self.__class__.__name__}('{self.__hex_str}')"

    def __int__(self) -> int:
        return self.int_value

    def __lt__(self, other):
        if isinstance(other, self.__class__):
            return self.int_value < other.int_value
        elif isinstance(other, int):
            return self.int_value < other
        else:
            return NotImplemented

    def __gt__(self, other):
        if isinstance(other, self.__class__):
            return self.int_value > other.int_value
        elif isinstance(other, int):
            return self.int_value > other
        else:
            return NotImplemented

    def __add__(self, other):
        if isinstance(other, self.__class__):
            return HexInt(self.int_value + other.int_value)
        elif isinstance(other, int):
            return HexInt(self.int_value + other)
        else:
            return NotImplemented

    @property
    def hex_value(self) -> str:
        """Get the hexadecimal string representation of the object"""
        return self.__hex_str

    @property
    def int_value(self) -> int:
        """Get the integer representation of the object"""
        return self.__int_value


class BlockTag(Enum):
    """Symbolic block references resolved by the node"""

    LATEST = "latest"
    FINALIZED = "finalized"
    SAFE = "safe"
    EARLIEST = "earliest"
    PENDING = "pending"

    @classmethod
    def from_value(cls, value: str):
        for item in cls:
            if item.value == value:
                return item


@dataclass(frozen=True)
class BlockId:
    """
    Identifier for a block. Exactly one of `hash`, `number` or `tag` is set. Use the
    `from_*` class methods to construct one.
    """

    hash: Optional[HexBytes] = None
    number: Optional[int] = None
    tag: Optional[BlockTag] = None

    @classmethod
    def from_hash(cls, block_hash: HexBytes) -> "BlockId":
        return cls(hash=HexBytes(block_hash))

    @classmethod
    def from_number(cls, number: int) -> "BlockId":
        return cls(number=number)

    @classmethod
    def from_tag(cls, tag: BlockTag) -> "BlockId":
        return cls(tag=tag)

    @classmethod
    def latest(cls) -> "BlockId":
        return cls(tag=BlockTag.LATEST)

    @classmethod
    def pending(cls) -> "BlockId":
        return cls(tag=BlockTag.PENDING)

    @property
    def is_hash(self) -> bool:
        return self.hash is not None

    @property
    def rpc_value(self) -> str:
        """Value to send as the block parameter of a JSON-RPC request"""
        if self.hash is not None:
            return to_hex(self.hash)
        if self.number is not None:
            return hex(self.number)
        if self.tag is not None:
            return self.tag.value
        raise ValueError("Empty block identifier")


@dataclass(frozen=True)
class AccountId:
    """Identifier for an account, either an address or an ENS name"""

    address: Optional[Address] = None
    name: Optional[str] = None

    @classmethod
    def from_address(cls, address: str) -> "AccountId":
        return cls(address=Address(address.lower()))

    @classmethod
    def from_name(cls, name: str) -> "AccountId":
        return cls(name=name)

    @property
    def is_name(self) -> bool:
        return self.name is not None
