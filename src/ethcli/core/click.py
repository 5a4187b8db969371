"""Classes and decorators to integrate with the click library"""

import typing as t

import click
from click import ParamType, Parameter, Context
from hexbytes import HexBytes

from ethcli.core.types import HexInt, BlockTag


class HexIntParamType(ParamType):
    """CLick param type to parse input data and produce HexInt instances"""

    name = "HexInt"

    def convert(
        self, value: t.Any, param: t.Optional["Parameter"], ctx: t.Optional["Context"]
    ) -> t.Any:
        if isinstance(value, HexInt):
            return value
        try:
            if isinstance(value, str) and value.startswith("0x"):
                converted = HexInt(value)
            else:
                converted = HexInt(int(value))
            if converted.int_value >= 0:
                return converted
        except ValueError:
            pass

        self.fail(f'Invalid value "{value}"! Must be either a hexadecimal string or integer')


class HexBytesParamType(ParamType):
    """
    Click param type to parse input data and produce HexBytes instances

    :param length: Exact number of bytes required, any length if not provided
    """

    name = "HexBytes"

    def __init__(self, length: t.Optional[int] = None) -> None:
        self.__length = length

    def convert(
        self, value: t.Any, param: t.Optional["Parameter"], ctx: t.Optional["Context"]
    ) -> t.Any:
        if isinstance(value, str) and value.startswith("0x"):
            try:
                converted = HexBytes(value)
                if self.__length is None or len(converted) == self.__length:
                    return converted
            except ValueError:
                pass

        if self.__length is None:
            self.fail(f'Invalid value "{value}"! Must be a hexadecimal bytes string')
        self.fail(
            f'Invalid value "{value}"! Must be a hexadecimal string of {self.__length} bytes'
        )


HASH = HexBytesParamType(32)

_TAG_HELP = "Tag of the target block: " + ", ".join(tag.value for tag in BlockTag)


def block_id_options(prefix: str = ""):
    """
    Add the mutually exclusive block hash, number and tag options to a command. The
    values are passed through as strings and validated by
    :func:`ethcli.evm.parsers.resolve_block_id`.

    :param prefix: Prefix for the option names, e.g. "block-" for "--block-hash"
    """

    def decorator(f):
        f = click.option(f"--{prefix}tag", metavar="BLOCK_TAG", help=_TAG_HELP)(f)
        f = click.option(
            f"--{prefix}number", metavar="BLOCK_NUMBER", help="Number of the target block"
        )(f)
        f = click.option(
            f"--{prefix}hash", metavar="BLOCK_HASH", help="Hash of the target block"
        )(f)
        return f

    return decorator


def account_id_options(f):
    """Add the mutually exclusive account address and ENS name options to a command"""
    f = click.option("--ens", metavar="ENS_NAME", help="Ens name for the account")(f)
    f = click.option(
        "--address", metavar="ADDRESS", help="Ethereum address for the account"
    )(f)
    return f


def typed_transaction_options(f):
    """Add the optional transaction request field options to a command"""
    options = [
        click.option(
            "--from",
            "from_",
            metavar="ADDRESS",
            help="Address of the account from which the transaction will be sent",
        ),
        click.option(
            "--to", metavar="ADDRESS", help="Address of the account to send the transaction to"
        ),
        click.option(
            "--ens-to",
            metavar="ENS_NAME",
            help="Ens name of the account to send the transaction to",
        ),
        click.option("--gas", metavar="QUANTITY", help="Gas limit for the transaction"),
        click.option("--gas-price", metavar="QUANTITY", help="Gas price in wei"),
        click.option("--value", metavar="QUANTITY", help="Amount of wei to send"),
        click.option("--data", metavar="HEX", help="Calldata to send to the target account"),
        click.option("--nonce", metavar="QUANTITY", help="Nonce for the transaction"),
        click.option("--chain-id", metavar="QUANTITY", help="Chain id for the transaction"),
    ]
    for option in reversed(options):
        f = option(f)
    return f
