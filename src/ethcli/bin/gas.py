import click

from ethcli.bin.context import CommandExecutionContext, translate_errors
from ethcli.cmd import gas as handlers
from ethcli.core.click import HexIntParamType, block_id_options, typed_transaction_options
from ethcli.core.types import BlockTag
from ethcli.evm.parsers import (
    build_transaction_request,
    parse_percentiles,
    resolve_block_id,
    resolve_block_number,
)


@click.group
def gas():
    """
    Gas estimates, prices and fee history
    """
    pass


@gas.command()
@typed_transaction_options
@block_id_options(prefix="block-")
@click.pass_obj
def estimate(context: CommandExecutionContext, block_hash, block_number, block_tag, **tx_fields):
    """
    Estimate the gas needed for a transaction to complete
    """
    with translate_errors():
        block_id = resolve_block_id(block_hash, block_number, block_tag)
        tx = build_transaction_request(**tx_fields)
    context.run("gas", "estimate", handlers.estimate_gas, tx, block_id)


@gas.command()
@click.argument("BLOCK_COUNT", type=HexIntParamType())
@click.argument("PERCENTILES", nargs=-1)
@click.option("--number", metavar="BLOCK_NUMBER", help="Number of the newest block in the range")
@click.option(
    "--tag",
    metavar="BLOCK_TAG",
    help="Tag of the newest block in the range: " + ", ".join(tag.value for tag in BlockTag),
)
@click.pass_obj
def history(context: CommandExecutionContext, block_count, percentiles, number, tag):
    """
    Get the fee history for BLOCK_COUNT blocks ending with the newest block, with
    the priority fee rewards at each of the PERCENTILES

    Example:

        history --tag latest 4 25 75
    """
    with translate_errors():
        last_block = resolve_block_number(number, tag)
        reward_percentiles = parse_percentiles("percentiles", percentiles)
    context.run(
        "gas",
        "feeHistory",
        handlers.get_fee_history,
        block_count.int_value,
        last_block,
        reward_percentiles,
    )


@gas.command()
@click.pass_obj
def price(context: CommandExecutionContext):
    """
    Get the current gas price in wei
    """
    context.run("gas", "price", handlers.get_gas_price)


@gas.command()
@click.pass_obj
def fee(context: CommandExecutionContext):
    """
    Get the current max priority fee per gas in wei
    """
    context.run("gas", "maxPriorityFee", handlers.get_max_priority_fee)
