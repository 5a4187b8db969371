import click
from hexbytes import HexBytes

from ethcli.bin.context import CommandExecutionContext, translate_errors
from ethcli.cmd import account as handlers
from ethcli.core.click import HexIntParamType, account_id_options, block_id_options
from ethcli.evm.parsers import (
    UINT256_MAX,
    InvalidFormatError,
    resolve_account_id,
    resolve_block_id,
)


@click.group
def account():
    """
    Account balances, code, nonces and storage
    """
    pass


@account.command()
@account_id_options
@block_id_options()
@click.pass_obj
def balance(context: CommandExecutionContext, address, ens, hash, number, tag):
    """
    Get the balance in wei of an account
    """
    with translate_errors():
        account_id = resolve_account_id(address, ens)
        block_id = resolve_block_id(hash, number, tag)
    context.run("account", "balance", handlers.get_balance, account_id, block_id)


@account.command()
@account_id_options
@block_id_options()
@click.pass_obj
def code(context: CommandExecutionContext, address, ens, hash, number, tag):
    """
    Get the contract code deployed at an account
    """
    with translate_errors():
        account_id = resolve_account_id(address, ens)
        block_id = resolve_block_id(hash, number, tag)
    context.run("account", "code", handlers.get_code, account_id, block_id)


@account.command()
@account_id_options
@block_id_options()
@click.pass_obj
def transaction_count(context: CommandExecutionContext, address, ens, hash, number, tag):
    """
    Get the number of transactions sent from an account
    """
    with translate_errors():
        account_id = resolve_account_id(address, ens)
        block_id = resolve_block_id(hash, number, tag)
    context.run(
        "account", "transactionCount", handlers.get_transaction_count, account_id, block_id
    )


@account.command()
@account_id_options
@click.pass_obj
def nonce(context: CommandExecutionContext, address, ens):
    """
    Get the nonce for the next transaction sent from an account, including
    transactions which are still pending
    """
    with translate_errors():
        account_id = resolve_account_id(address, ens)
    context.run("account", "nonce", handlers.get_nonce, account_id)


@account.command()
@click.argument("SLOT", type=HexIntParamType())
@account_id_options
@block_id_options()
@click.pass_obj
def storage(context: CommandExecutionContext, slot, address, ens, hash, number, tag):
    """
    Get the value of storage SLOT of an account

    Example:

        storage --address 0x00000000219ab540356cbb839cbe05303d7705fa 0x0
    """
    with translate_errors():
        account_id = resolve_account_id(address, ens)
        block_id = resolve_block_id(hash, number, tag)
        if slot.int_value > UINT256_MAX:
            raise InvalidFormatError("slot", slot, "a 32 byte storage slot")
        slot_ = HexBytes(slot.int_value.to_bytes(32, "big"))
    context.run("account", "storage", handlers.get_storage_at, account_id, slot_, block_id)

