"""Wrapping and serialization of command results"""

import dataclasses
import json
import pathlib
import re
from enum import Enum
from typing import Any, Optional

import click

from ethcli.core.types import HexInt, to_hex
from ethcli.evm.types import TransactionRequest

NOT_FOUND = "notFound"

_CAMEL_CASE_PATTERN = re.compile(r"_([a-z0-9])")


class OutputMode(Enum):
    CONSOLE = "console"
    FILE = "file"


@dataclasses.dataclass(frozen=True)
class NamespaceResult:
    """
    Result of a single command. `kind` names what the value is, e.g. "balance" or
    "block". A lookup which found nothing has the kind "notFound" and no value.
    """

    namespace: str
    kind: str
    value: Any = None

    @classmethod
    def not_found(cls, namespace: str) -> "NamespaceResult":
        return cls(namespace, NOT_FOUND, None)

    @classmethod
    def of(cls, namespace: str, kind: str, value: Any) -> "NamespaceResult":
        """Wrap a handler result, turning None into the not found result"""
        if value is None:
            return cls.not_found(namespace)
        return cls(namespace, kind, value)

    @property
    def is_not_found(self) -> bool:
        return self.kind == NOT_FOUND


def _camel_case(name: str) -> str:
    name = name.rstrip("_")
    return _CAMEL_CASE_PATTERN.sub(lambda match: match.group(1).upper(), name)


def to_serializable(value: Any) -> Any:
    """
    Convert a result value into plain JSON types. Quantities become integers and
    byte strings become `0x` prefixed hexadecimal strings.
    """
    if value is None or isinstance(value, (bool, str, float)):
        return value
    if isinstance(value, HexInt):
        return value.int_value
    if isinstance(value, int):
        return value
    if isinstance(value, (bytes, bytearray)):
        return to_hex(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, TransactionRequest):
        return to_serializable(value.fields)
    if isinstance(value, NamespaceResult):
        return {value.kind: to_serializable(value.value)}
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            _camel_case(field.name): to_serializable(getattr(value, field.name))
            for field in dataclasses.fields(value)
        }
    if isinstance(value, dict):
        return {str(key): to_serializable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_serializable(item) for item in value]
    raise TypeError(f"Unable to serialize value of type {type(value).__name__}")


def format_result(result: NamespaceResult) -> str:
    return json.dumps(to_serializable(result), indent=2)


def write_result(
    result: NamespaceResult, mode: OutputMode, out_file: Optional[pathlib.Path] = None
) -> None:
    """Write the formatted result to the console or to `out_file`"""
    text = format_result(result)
    if mode is OutputMode.FILE:
        if out_file is None:
            raise click.ClickException("An output file is required for file output")
        try:
            with open(out_file, "w") as file:
                file.write(text + "\n")
        except OSError as e:
            raise click.ClickException(f"Unable to write output file {out_file}: {e}")
    else:
        click.echo(text)
