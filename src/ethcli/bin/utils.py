import click

from ethcli.bin.context import CommandExecutionContext, translate_errors
from ethcli.cmd import utils as handlers
from ethcli.core.click import (
    HASH,
    account_id_options,
    block_id_options,
    typed_transaction_options,
)
from ethcli.evm.parsers import (
    resolve_account_id,
    resolve_block_id,
    resolve_sign_input,
)


@click.group
def utils():
    """
    Node information, proofs and signing
    """
    pass


@utils.command()
@click.pass_obj
def accounts(context: CommandExecutionContext):
    """
    List the accounts managed by the node
    """
    context.run("utils", "accounts", handlers.get_accounts)


@utils.command()
@click.pass_obj
def chain_id(context: CommandExecutionContext):
    """
    Get the chain id of the node
    """
    context.run("utils", "chainId", handlers.get_chain_id)


@utils.command()
@click.argument("STORAGE_KEYS", nargs=-1, type=HASH)
@account_id_options
@block_id_options()
@click.pass_obj
def proof(context: CommandExecutionContext, storage_keys, address, ens, hash, number, tag):
    """
    Get the account and storage values of an account with their Merkle proofs
    for each of the STORAGE_KEYS
    """
    with translate_errors():
        account_id = resolve_account_id(address, ens)
        block_id = resolve_block_id(hash, number, tag)
    context.run("utils", "proof", handlers.get_proof, account_id, list(storage_keys), block_id)


@utils.command()
@click.pass_obj
def protocol_version(context: CommandExecutionContext):
    """
    Get the Ethereum protocol version of the node
    """
    context.run("utils", "protocolVersion", handlers.get_protocol_version)


@utils.command()
@account_id_options
@click.option("--raw", metavar="HEX", help="Data to sign as a personal message")
@typed_transaction_options
@click.pass_obj
def sign(context: CommandExecutionContext, address, ens, raw, **tx_fields):
    """
    Sign data or a transaction for an account. A private key must be configured.
    """
    with translate_errors():
        account_id = resolve_account_id(address, ens)
        sign_input = resolve_sign_input(raw, **tx_fields)
    context.run("utils", "signature", handlers.sign, account_id, sign_input)


@utils.command()
@click.pass_obj
def sync_status(context: CommandExecutionContext):
    """
    Get the sync status of the node
    """
    context.run("utils", "syncStatus", handlers.get_sync_status)
