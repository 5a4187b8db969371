"""
Resolution of raw command line inputs into validated identifiers and transaction
requests. Every check here is local: nothing in this module talks to a node.

For each group of mutually exclusive inputs the checks run in a fixed order.
Conflicts are reported first, then missing values, then malformed values, so a
typo in one of two conflicting flags is still reported as a conflict.
"""

import re
from typing import Optional, Dict, Any, Union, Tuple, Sequence, List

from hexbytes import HexBytes

from ethcli.core.types import BlockId, BlockTag, AccountId, Address
from ethcli.evm.types import TransactionRequest, SendInput

UINT64_MAX = 2**64 - 1
UINT256_MAX = 2**256 - 1

_HASH_PATTERN = re.compile(r"^0x[0-9a-fA-F]{64}$")
_ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")
_HEX_DATA_PATTERN = re.compile(r"^0x([0-9a-fA-F]{2})*$")

TX_FIELD_NAMES = (
    "from_",
    "to",
    "ens_to",
    "gas",
    "gas_price",
    "value",
    "data",
    "nonce",
    "chain_id",
)


class ParserError(Exception):
    """Base class for errors detected while validating command input"""

    pass


class ConflictingIdentifierError(ParserError):
    pass


class MissingIdentifierError(ParserError):
    pass


class InvalidFormatError(ParserError):
    def __init__(self, field: str, value: Any, expected: str) -> None:
        super().__init__(f'Invalid value "{value}" for {field}! Must be {expected}')
        self.__field = field
        self.__value = value

    @property
    def field(self) -> str:
        return self.__field

    @property
    def value(self) -> Any:
        return self.__value


class ConflictingReceiverError(ParserError):
    pass


class ConflictingTxDataError(ParserError):
    pass


class MissingTxDataError(ParserError):
    pass


def _count_present(*values) -> int:
    return sum(1 for value in values if value is not None)


def parse_hash(field: str, value: Union[str, bytes]) -> HexBytes:
    """Parse a 32 byte hash given as a `0x` prefixed hexadecimal string"""
    if isinstance(value, bytes) and len(value) == 32:
        return HexBytes(value)
    if isinstance(value, str) and _HASH_PATTERN.match(value):
        return HexBytes(value)
    raise InvalidFormatError(field, value, "a hexadecimal string of 32 bytes")


def parse_address(field: str, value: str) -> Address:
    if isinstance(value, str) and _ADDRESS_PATTERN.match(value):
        return Address(value.lower())
    raise InvalidFormatError(field, value, "a hexadecimal string of 20 bytes")


def parse_ens_name(field: str, value: str) -> str:
    """Check an ENS name is non-empty and has no empty labels, such as `a..eth`"""
    if isinstance(value, str) and value.strip() and all(value.strip().split(".")):
        return value.strip()
    raise InvalidFormatError(field, value, "an ENS name without empty labels")


def parse_quantity(field: str, value: Union[str, int], maximum: int = UINT256_MAX) -> int:
    """
    Parse an unsigned integer given either as a decimal string, a `0x` prefixed
    hexadecimal string or an int.
    """
    try:
        if isinstance(value, bool):
            raise ValueError()
        if isinstance(value, int):
            parsed = value
        elif value.startswith("0x"):
            parsed = int(value, 16)
        else:
            parsed = int(value, 10)
    except (ValueError, AttributeError):
        raise InvalidFormatError(field, value, "a decimal or hexadecimal integer")
    if parsed < 0 or parsed > maximum:
        raise InvalidFormatError(field, value, f"an integer between 0 and {maximum}")
    return parsed


def parse_data(field: str, value: Union[str, bytes]) -> HexBytes:
    if isinstance(value, bytes):
        return HexBytes(value)
    if isinstance(value, str) and _HEX_DATA_PATTERN.match(value):
        return HexBytes(value)
    raise InvalidFormatError(field, value, "a hexadecimal bytes string")


def parse_block_tag(field: str, value: Union[str, BlockTag]) -> BlockTag:
    if isinstance(value, BlockTag):
        return value
    tag = BlockTag.from_value(value)
    if tag is None:
        raise InvalidFormatError(
            field, value, "one of: " + ", ".join(item.value for item in BlockTag)
        )
    return tag


def resolve_block_id(
    hash_: Optional[str] = None,
    number: Optional[Union[str, int]] = None,
    tag: Optional[Union[str, BlockTag]] = None,
    default: Optional[BlockId] = None,
    required: bool = False,
) -> Optional[BlockId]:
    """
    Resolve the block hash, number and tag inputs into a single block identifier.

    :param hash_: Hash of the block
    :param number: Number of the block
    :param tag: Tag of the block
    :param default: Identifier to return when no input was provided
    :param required: Raise when no input was provided instead of returning `default`

    :raises ConflictingIdentifierError: More than one input was provided
    :raises MissingIdentifierError: No input was provided and one is required
    :raises InvalidFormatError: The provided input could not be parsed
    """
    if _count_present(hash_, number, tag) > 1:
        raise ConflictingIdentifierError(
            "Provided multiple block identifiers. Only a block tag, number or hash must be "
            "provided."
        )

    if hash_ is not None:
        return BlockId.from_hash(parse_hash("hash", hash_))

    if number is not None:
        return BlockId.from_number(parse_quantity("number", number, UINT64_MAX))

    if tag is not None:
        return BlockId.from_tag(parse_block_tag("tag", tag))

    if required:
        raise MissingIdentifierError(
            "Missing block identifier. A block tag, number or hash must be provided."
        )
    return default


def resolve_block_number(
    number: Optional[Union[str, int]] = None,
    tag: Optional[Union[str, BlockTag]] = None,
) -> BlockId:
    """
    Resolve a block identifier that may only be given as a number or a tag, such as
    the upper bound of a fee history range. One of the two is required.
    """
    if number is not None and tag is not None:
        raise ConflictingIdentifierError(
            "Provided multiple block identifiers. Only a block tag or number must be provided."
        )

    if number is not None:
        return BlockId.from_number(parse_quantity("number", number, UINT64_MAX))

    if tag is not None:
        return BlockId.from_tag(parse_block_tag("tag", tag))

    raise MissingIdentifierError(
        "Missing block identifier. A block tag or number must be provided."
    )


def resolve_account_id(address: Optional[str] = None, ens: Optional[str] = None) -> AccountId:
    """Resolve the address and ENS name inputs into a single account identifier"""
    if address is not None and ens is not None:
        raise ConflictingIdentifierError(
            "Provided multiple account identifiers. Either an ens or address must be provided."
        )

    if address is not None:
        return AccountId(address=parse_address("address", address))

    if ens is not None:
        return AccountId.from_name(parse_ens_name("ens", ens))

    raise MissingIdentifierError("Missing account identifier. An ens or address must be provided.")


def build_transaction_request(
    from_: Optional[str] = None,
    to: Optional[str] = None,
    ens_to: Optional[str] = None,
    gas: Optional[Union[str, int]] = None,
    gas_price: Optional[Union[str, int]] = None,
    value: Optional[Union[str, int]] = None,
    data: Optional[Union[str, bytes]] = None,
    nonce: Optional[Union[str, int]] = None,
    chain_id: Optional[Union[str, int]] = None,
) -> TransactionRequest:
    """
    Build a transaction request from the provided fields. Fields which are not
    provided are left unset so the node can apply its own defaults.

    :raises ConflictingReceiverError: Both `to` and `ens_to` were provided
    :raises InvalidFormatError: A provided field could not be parsed
    """
    if to is not None and ens_to is not None:
        raise ConflictingReceiverError("Provided both ens and address")

    tx = TransactionRequest()
    if from_ is not None:
        tx = tx.from_(parse_address("from", from_))
    if to is not None:
        tx = tx.to(parse_address("to", to))
    if ens_to is not None:
        tx = tx.to(parse_ens_name("ens_to", ens_to))
    if gas is not None:
        tx = tx.gas(parse_quantity("gas", gas))
    if gas_price is not None:
        tx = tx.gas_price(parse_quantity("gas_price", gas_price))
    if value is not None:
        tx = tx.value(parse_quantity("value", value))
    if data is not None:
        tx = tx.data(parse_data("data", data))
    if nonce is not None:
        tx = tx.nonce(parse_quantity("nonce", nonce))
    if chain_id is not None:
        tx = tx.chain_id(parse_quantity("chain_id", chain_id, UINT64_MAX))
    return tx


def _resolve_raw_or_typed(raw: Optional[Union[str, bytes]], tx_fields: Dict[str, Any]) -> SendInput:
    unknown = set(tx_fields) - set(TX_FIELD_NAMES)
    if unknown:
        raise TypeError("Unknown transaction fields: " + ", ".join(sorted(unknown)))
    typed_fields = {name: value for name, value in tx_fields.items() if value is not None}
    if raw is not None and typed_fields:
        raise ConflictingTxDataError(
            "Provided both raw transaction data and transaction fields: "
            + ", ".join(sorted(typed_fields))
        )
    if raw is not None:
        return SendInput(raw=parse_data("raw", raw))
    if not typed_fields:
        raise MissingTxDataError(
            "Missing transaction data. Either raw data or transaction fields must be provided."
        )
    return SendInput(transaction=build_transaction_request(**typed_fields))


def resolve_send_input(
    raw: Optional[Union[str, bytes]] = None, **tx_fields: Any
) -> SendInput:
    """
    Resolve the input for sending a transaction: either pre-signed raw bytes or a
    transaction built from fields. The `wait` flag is not a transaction field and
    must not be passed here.
    """
    return _resolve_raw_or_typed(raw, tx_fields)


def resolve_sign_input(raw: Optional[Union[str, bytes]] = None, **tx_fields: Any) -> SendInput:
    """Resolve the input for signing: either raw bytes or a transaction built from fields"""
    return _resolve_raw_or_typed(raw, tx_fields)


def resolve_transaction_lookup(
    hash_: Optional[str] = None,
    block_hash: Optional[str] = None,
    block_number: Optional[Union[str, int]] = None,
    block_tag: Optional[Union[str, BlockTag]] = None,
    index: Optional[Union[str, int]] = None,
) -> Union[HexBytes, Tuple[BlockId, int]]:
    """
    Resolve how a transaction is to be looked up: either by its hash or by a block
    identifier and the index of the transaction within that block.

    :returns: The transaction hash, or a tuple of the block identifier and the index
    """
    by_block = _count_present(block_hash, block_number, block_tag, index) > 0
    if hash_ is not None and by_block:
        raise ConflictingIdentifierError(
            "Provided both a transaction hash and a block position. Only one must be provided."
        )

    if hash_ is not None:
        return parse_hash("hash", hash_)

    if not by_block:
        raise MissingIdentifierError(
            "Missing transaction identifier. A transaction hash or a block and index must be "
            "provided."
        )

    block_id = resolve_block_id(block_hash, block_number, block_tag, required=True)
    if index is None:
        raise MissingIdentifierError("Missing transaction index for the block.")
    return block_id, parse_quantity("index", index, UINT64_MAX)


def parse_percentiles(field: str, values: Sequence[Union[str, float]]) -> List[float]:
    """Parse a monotonically increasing list of percentiles between 0 and 100"""
    percentiles: List[float] = []
    for value in values:
        try:
            percentile = float(value)
        except (TypeError, ValueError):
            raise InvalidFormatError(field, value, "a number")
        if not 0.0 <= percentile <= 100.0:
            raise InvalidFormatError(field, value, "a number between 0 and 100")
        if percentiles and percentile < percentiles[-1]:
            raise InvalidFormatError(field, value, "monotonically increasing")
        percentiles.append(percentile)
    return percentiles
