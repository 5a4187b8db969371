import click

from ethcli.bin.context import CommandExecutionContext, translate_errors
from ethcli.cmd import transaction as handlers
from ethcli.core.click import HASH, block_id_options, typed_transaction_options
from ethcli.evm.parsers import (
    build_transaction_request,
    resolve_block_id,
    resolve_send_input,
    resolve_transaction_lookup,
)


@click.group
def transaction():
    """
    Transaction lookup, submission and simulation
    """
    pass


@transaction.command()
@click.option("--hash", metavar="TX_HASH", help="Hash of the transaction")
@block_id_options(prefix="block-")
@click.option("--index", metavar="INDEX", help="Index of the transaction in the block")
@click.pass_obj
def get(context: CommandExecutionContext, hash, block_hash, block_number, block_tag, index):
    """
    Get a transaction either by its hash or by its position in a block

    Example:

        get --block-number 17000000 --index 0
    """
    with translate_errors():
        lookup = resolve_transaction_lookup(hash, block_hash, block_number, block_tag, index)

    if isinstance(lookup, tuple):
        block_id, index_ = lookup
        context.run(
            "transaction",
            "transaction",
            handlers.get_transaction_by_block_and_index,
            block_id,
            index_,
        )
    else:
        context.run("transaction", "transaction", handlers.get_transaction, lookup)


@transaction.command()
@click.argument("TX_HASH", type=HASH)
@click.pass_obj
def receipt(context: CommandExecutionContext, tx_hash):
    """
    Get the receipt of a mined transaction
    """
    context.run("transaction", "receipt", handlers.get_transaction_receipt, tx_hash)


@transaction.command()
@click.option("--raw", metavar="HEX", help="Signed raw transaction to send")
@typed_transaction_options
@click.option(
    "--wait",
    default=False,
    is_flag=True,
    help="Wait for the transaction to be mined and return its receipt",
)
@click.pass_obj
def send(context: CommandExecutionContext, raw, wait: bool, **tx_fields):
    """
    Send a transaction. Either a signed raw transaction or transaction fields must
    be provided. A transaction from the configured private key's account is signed
    locally, otherwise the node signs it.
    """
    with translate_errors():
        send_input = resolve_send_input(raw, **tx_fields)
    kind = "receipt" if wait else "hash"
    context.run("transaction", kind, handlers.send_transaction, send_input, wait)


@transaction.command()
@typed_transaction_options
@block_id_options(prefix="block-")
@click.pass_obj
def call(context: CommandExecutionContext, block_hash, block_number, block_tag, **tx_fields):
    """
    Execute a call without creating a transaction and return the output data
    """
    with translate_errors():
        block_id = resolve_block_id(block_hash, block_number, block_tag)
        tx = build_transaction_request(**tx_fields)
    context.run("transaction", "output", handlers.call, tx, block_id)
