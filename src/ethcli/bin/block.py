import click

from ethcli.bin.context import CommandExecutionContext, translate_errors
from ethcli.cmd import block as handlers
from ethcli.core.click import block_id_options
from ethcli.core.types import BlockId
from ethcli.evm.parsers import resolve_block_id


@click.group
def block():
    """
    Blocks and their transactions, uncles and receipts
    """
    pass


def _block_id(hash_, number, tag) -> BlockId:
    with translate_errors():
        return resolve_block_id(hash_, number, tag, default=BlockId.latest())


@block.command()
@block_id_options()
@click.option(
    "--include-tx",
    default=False,
    is_flag=True,
    help="Include full transactions instead of transaction hashes",
)
@click.pass_obj
def get(context: CommandExecutionContext, hash, number, tag, include_tx: bool):
    """
    Get a block. The latest block is returned when no block is identified.
    """
    context.run("block", "block", handlers.get_block, _block_id(hash, number, tag), include_tx)


@block.command()
@click.pass_obj
def number(context: CommandExecutionContext):
    """
    Get the number of the most recent block
    """
    context.run("block", "number", handlers.get_block_number)


@block.command()
@block_id_options()
@click.pass_obj
def transaction_count(context: CommandExecutionContext, hash, number, tag):
    """
    Get the number of transactions in a block
    """
    context.run(
        "block", "transactionCount", handlers.get_transaction_count, _block_id(hash, number, tag)
    )


@block.command()
@block_id_options()
@click.pass_obj
def uncle_count(context: CommandExecutionContext, hash, number, tag):
    """
    Get the number of uncles of a block
    """
    context.run(
        "block", "uncleCount", handlers.get_uncle_block_count, _block_id(hash, number, tag)
    )


@block.command()
@block_id_options()
@click.pass_obj
def receipts(context: CommandExecutionContext, hash, number, tag):
    """
    Get the receipts of every transaction in a block
    """
    context.run("block", "receipts", handlers.get_block_receipts, _block_id(hash, number, tag))
