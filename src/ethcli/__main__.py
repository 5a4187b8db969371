import logging
import pathlib
import sys
from logging import StreamHandler
from logging.handlers import TimedRotatingFileHandler
from typing import List, Optional

import click
from click import Context
from dotenv import load_dotenv

from ethcli import LOGGER_NAME
from ethcli.bin.account import account
from ethcli.bin.block import block
from ethcli.bin.context import CommandExecutionContext, translate_errors
from ethcli.bin.gas import gas
from ethcli.bin.output import OutputMode
from ethcli.bin.transaction import transaction
from ethcli.bin.utils import utils
from ethcli.core.config import ConfigOverrides, get_config

load_dotenv()


@click.group
@click.option(
    "--config-file",
    envvar="ETHCLI_CONFIG_FILE",
    type=click.Path(dir_okay=False, path_type=str),
    help="JSON or YAML file with rpc_url and priv_key values",
)
@click.option(
    "--rpc-url",
    envvar="ETHCLI_RPC_URL",
    help="HTTP(S) URL of the Ethereum JSON-RPC node  [default: http://localhost:8545]",
)
@click.option(
    "--priv-key",
    envvar="ETHCLI_PRIV_KEY",
    help="Private key used to sign transactions and messages",
)
@click.option(
    "--output",
    type=click.Choice([mode.value for mode in OutputMode]),
    default=OutputMode.CONSOLE.value,
    show_default=True,
    help="Where results are written",
)
@click.option(
    "--out-file",
    type=click.Path(file_okay=True, dir_okay=False, allow_dash=False, path_type=pathlib.Path),
    default="output.json",
    show_default=True,
    help="File results are written to when the output is file",
)
@click.option(
    "--log-file",
    envvar="LOG_FILE",
    type=click.Path(file_okay=True, dir_okay=False, allow_dash=False, path_type=pathlib.Path),
    multiple=True,
    help="Location and filename for a log.",
)
@click.option(
    "--debug/--no-debug",
    envvar="DEBUG",
    default=False,
    show_default=True,
    help="Show debug messages in the console.",
)
@click.pass_context
def main(
    ctx: Context,
    config_file: Optional[str],
    rpc_url: Optional[str],
    priv_key: Optional[str],
    output: str,
    out_file: pathlib.Path,
    log_file: List[pathlib.Path],
    debug: bool,
):
    """
    Ethereum JSON-RPC command line client
    """
    logger = logging.getLogger(LOGGER_NAME)
    handlers: List[logging.Handler] = [StreamHandler()]
    for filename in log_file:
        handlers.append(TimedRotatingFileHandler(filename, when="D"))
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    logging.basicConfig(format="%(asctime)s %(message)s", handlers=handlers)

    with translate_errors():
        config = get_config(
            ConfigOverrides(priv_key=priv_key, rpc_url=rpc_url, config_file=config_file)
        )
        ctx.obj = CommandExecutionContext(config, OutputMode(output), out_file)


main.add_command(account)
main.add_command(block)
main.add_command(transaction)
main.add_command(gas)
main.add_command(utils)


if __name__ == "__main__":
    main()
    sys.exit(0)
