import json
import pathlib
import tempfile
import unittest
from unittest.mock import AsyncMock, patch

import ddt
from click.testing import CliRunner
from hexbytes import HexBytes

from ethcli.__main__ import main
from ethcli.core.config import CliConfig
from ethcli.core.rpc import RpcServerError, RpcTransportError
from ethcli.core.types import AccountId, BlockId, BlockTag, HexInt
from ethcli.evm.ens import EnsResolutionError
from ethcli.evm.provider import (
    NodeProvider,
    NoSignerAvailableError,
    PendingTransaction,
    ProviderConfigError,
)
from ethcli.evm.types import FeeHistory, Signature, SyncStatus, TransactionRequest

ADDRESS = "0x" + "cd" * 20
BLOCK_HASH = "0x" + "11" * 32
TX_HASH = "0x" + "22" * 32


class BaseCommandTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._provider = AsyncMock(NodeProvider)
        self._provider.resolve_account.return_value = ADDRESS
        self._provider.resolve_receiver.side_effect = lambda tx: tx
        patcher = patch("ethcli.bin.context.NodeProvider")
        self._node_provider_class = patcher.start()
        self.addCleanup(patcher.stop)
        self._node_provider_class.from_config.return_value = self._provider
        self._runner = CliRunner()

    def _invoke(self, *args: str):
        return self._runner.invoke(main, ["--rpc-url", "http://node", *args])

    def _json(self, result):
        self.assertEqual(0, result.exit_code, result.output)
        return json.loads(result.stdout)

    def assertUsageError(self, result, message=None):
        self.assertEqual(2, result.exit_code, result.output)
        if message:
            self.assertIn(message, result.output)
        self.assertEqual([], self._provider.mock_calls)

    def assertFailure(self, result, message=None):
        self.assertEqual(1, result.exit_code, result.output)
        if message:
            self.assertIn(message, result.output)


class GlobalOptionsTestCase(BaseCommandTestCase):
    def test_provider_is_created_from_config(self):
        self._provider.get_gas_price.return_value = HexInt(1)
        self._invoke("--priv-key", "0x01", "gas", "price")
        self._node_provider_class.from_config.assert_called_once_with(
            CliConfig(rpc_url="http://node", priv_key="0x01")
        )

    def test_rpc_url_from_environment(self):
        self._provider.get_gas_price.return_value = HexInt(1)
        self._runner.invoke(main, ["gas", "price"], env={"ETHCLI_RPC_URL": "http://env"})
        config = self._node_provider_class.from_config.call_args.args[0]
        self.assertEqual("http://env", config.rpc_url)

    def test_config_file_is_loaded(self):
        self._provider.get_gas_price.return_value = HexInt(1)
        with self._runner.isolated_filesystem():
            pathlib.Path("config.yaml").write_text("rpc_url: http://file\n")
            self._runner.invoke(main, ["--config-file", "config.yaml", "gas", "price"])
        config = self._node_provider_class.from_config.call_args.args[0]
        self.assertEqual("http://file", config.rpc_url)

    def test_invalid_config_file_fails(self):
        with self._runner.isolated_filesystem():
            result = self._runner.invoke(main, ["--config-file", "missing.json", "gas", "price"])
        self.assertFailure(result, "Unable to read config file")

    def test_provider_config_error_fails(self):
        self._node_provider_class.from_config.side_effect = ProviderConfigError("Invalid key")
        self.assertFailure(self._invoke("gas", "price"), "Invalid key")

    def test_file_output_writes_out_file(self):
        self._provider.get_gas_price.return_value = HexInt(7)
        with tempfile.TemporaryDirectory() as directory:
            out_file = pathlib.Path(directory) / "result.json"
            result = self._invoke("--output", "file", "--out-file", str(out_file), "gas", "price")
            self.assertEqual(0, result.exit_code, result.output)
            self.assertEqual({"price": 7}, json.loads(out_file.read_text()))

    def test_rpc_server_error_fails(self):
        self._provider.get_gas_price.side_effect = RpcServerError("2.0", 1, -32000, "boom")
        self.assertFailure(self._invoke("gas", "price"), "boom")

    def test_rpc_transport_error_fails(self):
        self._provider.get_gas_price.side_effect = RpcTransportError("connection refused")
        self.assertFailure(self._invoke("gas", "price"), "connection refused")

    def test_ens_resolution_error_fails(self):
        self._provider.resolve_account.side_effect = EnsResolutionError("No resolver")
        self.assertFailure(self._invoke("account", "balance", "--ens", "x.eth"), "No resolver")


@ddt.ddt
class AccountCommandTestCase(BaseCommandTestCase):
    def test_balance_outputs_balance(self):
        self._provider.get_balance.return_value = HexInt(16)
        actual = self._json(self._invoke("account", "balance", "--address", ADDRESS))
        self.assertEqual({"balance": 16}, actual)
        self._provider.resolve_account.assert_awaited_once_with(AccountId.from_address(ADDRESS))
        self._provider.get_balance.assert_awaited_once_with(ADDRESS, None)

    def test_balance_passes_block(self):
        self._provider.get_balance.return_value = HexInt(0)
        self._invoke("account", "balance", "--address", ADDRESS, "--number", "0x10")
        self._provider.get_balance.assert_awaited_once_with(ADDRESS, BlockId.from_number(16))

    @ddt.data(
        (["--address", ADDRESS, "--ens", "vitalik.eth"], "multiple account identifiers"),
        (["--address", "0xbad", "--ens", "vitalik.eth"], "multiple account identifiers"),
        ([], "Missing account identifier"),
        (["--address", "0xbad"], "Invalid value"),
        (["--address", ADDRESS, "--number", "1", "--tag", "latest"], "multiple block"),
        (["--address", ADDRESS, "--tag", "newest"], "Invalid value"),
    )
    @ddt.unpack
    def test_balance_usage_errors(self, args, message):
        self.assertUsageError(self._invoke("account", "balance", *args), message)

    def test_code_outputs_hex(self):
        self._provider.get_code.return_value = HexBytes("0x6080")
        actual = self._json(self._invoke("account", "code", "--ens", "vitalik.eth"))
        self.assertEqual({"code": "0x6080"}, actual)
        self._provider.resolve_account.assert_awaited_once_with(AccountId.from_name("vitalik.eth"))

    def test_transaction_count(self):
        self._provider.get_transaction_count.return_value = HexInt(2)
        actual = self._json(
            self._invoke("account", "transaction-count", "--address", ADDRESS, "--tag", "safe")
        )
        self.assertEqual({"transactionCount": 2}, actual)
        self._provider.get_transaction_count.assert_awaited_once_with(
            ADDRESS, BlockId.from_tag(BlockTag.SAFE)
        )

    def test_nonce_uses_pending(self):
        self._provider.get_transaction_count.return_value = HexInt(3)
        actual = self._json(self._invoke("account", "nonce", "--address", ADDRESS))
        self.assertEqual({"nonce": 3}, actual)
        self._provider.get_transaction_count.assert_awaited_once_with(ADDRESS, BlockId.pending())

    def test_storage_pads_slot(self):
        self._provider.get_storage_at.return_value = HexBytes("0x" + "00" * 32)
        self._invoke("account", "storage", "--address", ADDRESS, "0x1")
        self._provider.get_storage_at.assert_awaited_once_with(
            ADDRESS, HexBytes(b"\x00" * 31 + b"\x01"), None
        )

    def test_storage_rejects_invalid_slot(self):
        result = self._invoke("account", "storage", "--address", ADDRESS, "slot")
        self.assertEqual(2, result.exit_code)


@ddt.ddt
class BlockCommandTestCase(BaseCommandTestCase):
    def test_get_defaults_to_latest(self):
        self._provider.get_block.return_value = None
        self._invoke("block", "get")
        self._provider.get_block.assert_awaited_once_with(BlockId.latest(), False)

    def test_get_not_found(self):
        self._provider.get_block.return_value = None
        self.assertEqual({"notFound": None}, self._json(self._invoke("block", "get")))

    def test_get_by_hash_with_transactions(self):
        self._provider.get_block.return_value = None
        self._invoke("block", "get", "--hash", BLOCK_HASH, "--include-tx")
        self._provider.get_block.assert_awaited_once_with(
            BlockId.from_hash(HexBytes(BLOCK_HASH)), True
        )

    @ddt.data(
        ["--hash", BLOCK_HASH, "--number", "1"],
        ["--number", "ten"],
        ["--hash", "0x1234"],
        ["--tag", "Latest"],
    )
    def test_get_usage_errors(self, args):
        self.assertUsageError(self._invoke("block", "get", *args))

    def test_number(self):
        self._provider.get_block_number.return_value = HexInt(100)
        self.assertEqual({"number": 100}, self._json(self._invoke("block", "number")))

    def test_transaction_count(self):
        self._provider.get_block_transaction_count.return_value = HexInt(5)
        actual = self._json(self._invoke("block", "transaction-count", "--number", "1"))
        self.assertEqual({"transactionCount": 5}, actual)

    def test_uncle_count_defaults_to_latest(self):
        self._provider.get_uncle_count.return_value = HexInt(0)
        self._invoke("block", "uncle-count")
        self._provider.get_uncle_count.assert_awaited_once_with(BlockId.latest())

    def test_receipts_by_unknown_hash_not_found(self):
        self._provider.get_block.return_value = None
        actual = self._json(self._invoke("block", "receipts", "--hash", BLOCK_HASH))
        self.assertEqual({"notFound": None}, actual)
        self._provider.get_block_receipts.assert_not_awaited()

    def test_receipts_empty_block(self):
        self._provider.get_block_receipts.return_value = []
        self.assertEqual({"receipts": []}, self._json(self._invoke("block", "receipts")))


@ddt.ddt
class TransactionCommandTestCase(BaseCommandTestCase):
    def setUp(self) -> None:
        super().setUp()
        self._pending = AsyncMock(PendingTransaction)
        self._pending.tx_hash = HexBytes(TX_HASH)
        self._provider.submit_raw_transaction.return_value = self._pending
        self._provider.submit_transaction.return_value = self._pending

    def test_get_by_hash(self):
        self._provider.get_transaction.return_value = None
        actual = self._json(self._invoke("transaction", "get", "--hash", TX_HASH))
        self.assertEqual({"notFound": None}, actual)
        self._provider.get_transaction.assert_awaited_once_with(HexBytes(TX_HASH))

    def test_get_by_block_and_index(self):
        self._provider.get_transaction_by_block_and_index.return_value = None
        self._invoke("transaction", "get", "--block-number", "1", "--index", "2")
        self._provider.get_transaction_by_block_and_index.assert_awaited_once_with(
            BlockId.from_number(1), 2
        )

    @ddt.data(
        ["--hash", TX_HASH, "--index", "0"],
        ["--hash", TX_HASH, "--block-tag", "latest"],
        [],
        ["--block-tag", "latest"],
        ["--hash", "0x12"],
    )
    def test_get_usage_errors(self, args):
        self.assertUsageError(self._invoke("transaction", "get", *args))

    def test_receipt(self):
        self._provider.get_transaction_receipt.return_value = None
        actual = self._json(self._invoke("transaction", "receipt", TX_HASH))
        self.assertEqual({"notFound": None}, actual)

    def test_receipt_rejects_invalid_hash(self):
        self.assertEqual(2, self._invoke("transaction", "receipt", "0x12").exit_code)

    def test_send_raw_outputs_hash(self):
        result = self._invoke("transaction", "send", "--raw", "0xf86c")
        self.assertEqual(0, result.exit_code, result.output)
        self.assertIn(TX_HASH, result.stdout)
        self._provider.submit_raw_transaction.assert_awaited_once_with(HexBytes("0xf86c"))
        self._pending.wait.assert_not_awaited()

    def test_send_typed_with_wait_outputs_receipt(self):
        self._pending.wait.return_value = None
        result = self._invoke("transaction", "send", "--to", ADDRESS, "--value", "1", "--wait")
        self.assertEqual(0, result.exit_code, result.output)
        self.assertIn("notFound", result.stdout)
        self._provider.submit_transaction.assert_awaited_once_with(
            TransactionRequest().to(ADDRESS).value(1)
        )
        self._pending.wait.assert_awaited_once_with()

    def test_send_raw_and_field_conflict_before_any_call(self):
        result = self._invoke("transaction", "send", "--raw", "0xf86c", "--to", ADDRESS)
        self.assertUsageError(result, "Provided both raw transaction data")
        self.assertEqual([], self._provider.mock_calls)

    def test_send_wait_is_not_transaction_data(self):
        self.assertUsageError(self._invoke("transaction", "send", "--wait"), "Missing")

    def test_send_to_and_ens_to_conflict(self):
        result = self._invoke("transaction", "send", "--to", ADDRESS, "--ens-to", "x.eth")
        self.assertUsageError(result, "Provided both ens and address")

    def test_call(self):
        self._provider.call_transaction.return_value = HexBytes("0x01")
        actual = self._json(
            self._invoke("transaction", "call", "--to", ADDRESS, "--data", "0x06fdde03")
        )
        self.assertEqual({"output": "0x01"}, actual)
        self._provider.call_transaction.assert_awaited_once_with(
            TransactionRequest().to(ADDRESS).data(HexBytes("0x06fdde03")), None
        )


@ddt.ddt
class GasCommandTestCase(BaseCommandTestCase):
    def test_estimate(self):
        self._provider.estimate_gas.return_value = HexInt(21000)
        actual = self._json(self._invoke("gas", "estimate", "--to", ADDRESS))
        self.assertEqual({"estimate": 21000}, actual)
        self._provider.estimate_gas.assert_awaited_once_with(TransactionRequest().to(ADDRESS), None)

    def test_history(self):
        self._provider.get_fee_history.return_value = FeeHistory(
            oldest_block=HexInt(1), base_fee_per_gas=[HexInt(2)], gas_used_ratio=[0.5]
        )
        actual = self._json(self._invoke("gas", "history", "--tag", "latest", "4", "25", "75"))
        self.assertEqual(
            {
                "feeHistory": {
                    "oldestBlock": 1,
                    "baseFeePerGas": [2],
                    "gasUsedRatio": [0.5],
                    "reward": None,
                }
            },
            actual,
        )
        self._provider.get_fee_history.assert_awaited_once_with(4, BlockId.latest(), [25.0, 75.0])

    @ddt.data(
        ["4"],
        ["--number", "1", "--tag", "latest", "4"],
        ["--tag", "latest", "4", "75", "25"],
        ["--tag", "latest", "4", "101"],
    )
    def test_history_usage_errors(self, args):
        self.assertUsageError(self._invoke("gas", "history", *args))

    def test_price(self):
        self._provider.get_gas_price.return_value = HexInt(10**9)
        self.assertEqual({"price": 10**9}, self._json(self._invoke("gas", "price")))

    def test_fee(self):
        self._provider.get_max_priority_fee_per_gas.return_value = HexInt(1)
        self.assertEqual({"maxPriorityFee": 1}, self._json(self._invoke("gas", "fee")))


class UtilsCommandTestCase(BaseCommandTestCase):
    def test_accounts(self):
        self._provider.get_accounts.return_value = [ADDRESS]
        self.assertEqual({"accounts": [ADDRESS]}, self._json(self._invoke("utils", "accounts")))

    def test_chain_id(self):
        self._provider.get_chain_id.return_value = HexInt(1)
        self.assertEqual({"chainId": 1}, self._json(self._invoke("utils", "chain-id")))

    def test_proof(self):
        self._provider.get_proof.return_value = None
        key = "0x" + "00" * 32
        self._invoke("utils", "proof", "--address", ADDRESS, "--tag", "latest", key)
        self._provider.get_proof.assert_awaited_once_with(
            ADDRESS, [HexBytes(key)], BlockId.latest()
        )

    def test_protocol_version(self):
        self._provider.get_protocol_version.return_value = HexInt(65)
        actual = self._json(self._invoke("utils", "protocol-version"))
        self.assertEqual({"protocolVersion": 65}, actual)

    def test_sign_raw(self):
        self._provider.has_signer = True
        self._provider.sign_data.return_value = Signature(r=1, s=2, v=27)
        actual = self._json(self._invoke("utils", "sign", "--address", ADDRESS, "--raw", "0x01"))
        self.assertEqual({"signature": {"r": 1, "s": 2, "v": 27}}, actual)
        self._provider.sign_data.assert_awaited_once_with(ADDRESS, HexBytes("0x01"))

    def test_sign_without_signer_fails(self):
        self._provider.has_signer = False
        result = self._invoke("utils", "sign", "--address", ADDRESS, "--raw", "0x01")
        self.assertFailure(result, "No signer available")

    def test_sign_provider_error_fails(self):
        self._provider.has_signer = True
        self._provider.sign_typed_transaction.side_effect = NoSignerAvailableError("No signer")
        result = self._invoke("utils", "sign", "--address", ADDRESS, "--nonce", "1")
        self.assertFailure(result, "No signer")

    def test_sign_raw_and_field_conflict(self):
        result = self._invoke("utils", "sign", "--address", ADDRESS, "--raw", "0x01", "--gas", "1")
        self.assertUsageError(result, "Provided both raw transaction data")

    def test_sync_status(self):
        self._provider.get_syncing.return_value = SyncStatus(syncing=False)
        actual = self._json(self._invoke("utils", "sync-status"))
        self.assertFalse(actual["syncStatus"]["syncing"])



@ddt.ddt
class StartupTestCase(unittest.TestCase):
    def setUp(self) -> None:
        patcher = patch("aiohttp.ClientSession.post")
        self._post = patcher.start()
        self.addCleanup(patcher.stop)
        self._runner = CliRunner()

    @ddt.data(
        ["account", "balance", "--address", ADDRESS, "--ens", "x.eth"],
        ["account", "balance"],
        ["block", "get", "--number", "1", "--tag", "latest"],
        ["transaction", "send"],
        ["gas", "price"],
    )
    def test_invalid_private_key_fails_before_command(self, args):
        result = self._runner.invoke(
            main, ["--rpc-url", "http://node", "--priv-key", "not-a-key", *args]
        )
        self.assertEqual(1, result.exit_code, result.output)
        self.assertIn("Invalid private key", result.output)
        self._post.assert_not_called()

    def test_invalid_rpc_url_fails_before_command(self):
        result = self._runner.invoke(main, ["--rpc-url", "localhost", "account", "balance"])
        self.assertEqual(1, result.exit_code, result.output)
        self.assertIn("Invalid provider URL", result.output)
        self._post.assert_not_called()
