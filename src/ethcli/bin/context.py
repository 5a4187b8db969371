"""Execution context shared by every command of a single invocation"""

import asyncio
import contextlib
import logging
import pathlib
from typing import Any, Awaitable, Callable, Iterator, Optional, TypeVar

import click

from ethcli import LOGGER_NAME
from ethcli.bin.output import NamespaceResult, OutputMode, write_result
from ethcli.core.config import CliConfig, ConfigError
from ethcli.core.rpc import RpcError, RpcServerError
from ethcli.evm.ens import EnsResolutionError
from ethcli.evm.parsers import ParserError
from ethcli.evm.provider import NodeProvider, NoSignerAvailableError, ProviderConfigError

T = TypeVar("T")


@contextlib.contextmanager
def translate_errors() -> Iterator[None]:
    """
    Convert errors raised while validating or executing a command into click
    exceptions. Validation errors are usage errors, everything else is a failure of
    the command.
    """
    logger = logging.getLogger(LOGGER_NAME)
    try:
        yield
    except ParserError as e:
        raise click.UsageError(str(e))
    except RpcServerError as e:
        logger.debug(f"Node returned an error: {e}")
        raise click.ClickException(f"Node error {e.error_code}: {e.error_message}")
    except RpcError as e:
        logger.debug(f"RPC request failed: {e!r}")
        raise click.ClickException(f"RPC request failed: {e}")
    except (
        NoSignerAvailableError,
        EnsResolutionError,
        ConfigError,
        ProviderConfigError,
    ) as e:
        raise click.ClickException(str(e))


class CommandExecutionContext:
    """
    Owns the configuration and the node provider for one invocation and runs the
    command coroutine to completion. Only one coroutine is ever in flight. The
    provider is built when the context is created, so an invalid private key or RPC
    URL fails the invocation before any command runs.

    :param config: Configuration for the invocation
    :param output_mode: Where results are written
    :param out_file: File results are written to in file output mode
    :raises ProviderConfigError: The RPC URL or the private key is invalid
    """

    def __init__(
        self,
        config: CliConfig,
        output_mode: OutputMode = OutputMode.CONSOLE,
        out_file: Optional[pathlib.Path] = None,
    ) -> None:
        self.__config = config
        self.__output_mode = output_mode
        self.__out_file = out_file
        self.__node_provider = NodeProvider.from_config(config)

    @property
    def config(self) -> CliConfig:
        return self.__config

    @property
    def output_mode(self) -> OutputMode:
        return self.__output_mode

    @property
    def out_file(self) -> Optional[pathlib.Path]:
        return self.__out_file

    @property
    def node_provider(self) -> NodeProvider:
        return self.__node_provider

    def execute(self, coroutine: Awaitable[T]) -> T:
        """Block until the coroutine completes and return its result"""
        return asyncio.run(coroutine)

    def run(
        self,
        namespace: str,
        kind: str,
        handler: Callable[..., Awaitable[Any]],
        *args: Any,
        **kwargs: Any,
    ) -> NamespaceResult:
        """
        Run a command handler with the node provider and write its result. A handler
        returning None produces the not found result.
        """
        with translate_errors():
            value = self.execute(handler(self.node_provider, *args, **kwargs))
        result = NamespaceResult.of(namespace, kind, value)
        write_result(result, self.__output_mode, self.__out_file)
        return result
