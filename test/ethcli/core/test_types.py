from unittest import TestCase

import ddt
from hexbytes import HexBytes

from ethcli.core.types import HexInt, BlockId, BlockTag, AccountId, to_hex


class HexIntTestCase(TestCase):
    def test_equal_hex_str_is_equal(self):
        self.assertEqual(HexInt("0x1"), HexInt("0x1"))

    def test_equivalent_hex_str_is_equal(self):
        self.assertEqual(HexInt("0x01"), HexInt("0x1"))

    def test_equal_int_is_equal(self):
        self.assertEqual(HexInt("0x1"), 1)

    def test_unequal_hex_str_is_not_equal(self):
        self.assertNotEqual(HexInt("0x1"), HexInt("0x0"))

    def test_hex_value_is_original(self):
        self.assertEqual("0x1", HexInt("0x1").hex_value)

    def test_int_value_is_correct(self):
        self.assertEqual(1, HexInt("0x1").int_value)

    def test_int_is_int_value(self):
        self.assertEqual(255, int(HexInt("0xff")))

    def test_str_is_original(self):
        self.assertEqual("0x1", str(HexInt("0x1")))

    def test_assert_hash_works_in_dict(self):
        self.assertEqual("1", {HexInt("0x0"): "1"}[HexInt("0x0")])

    def test_lt(self):
        self.assertLess(HexInt(1), HexInt(2))

    def test_gt_int(self):
        self.assertGreater(HexInt(2), 1)

    def test_add(self):
        self.assertEqual(HexInt(3), HexInt(1) + HexInt(2))

    def test_invalid_hex_raises_value_error(self):
        with self.assertRaises(ValueError):
            HexInt("0xzz")

    def test_invalid_type_raises_type_error(self):
        with self.assertRaises(TypeError):
            HexInt(1.0)  # type: ignore


class ToHexTestCase(TestCase):
    def test_prefixes_hex(self):
        self.assertEqual("0x0102", to_hex(b"\x01\x02"))

    def test_empty_bytes(self):
        self.assertEqual("0x", to_hex(b""))

    def test_hex_bytes(self):
        self.assertEqual("0xff", to_hex(HexBytes("0xff")))


@ddt.ddt
class BlockIdTestCase(TestCase):
    def test_hash_rpc_value_is_hex(self):
        block_id = BlockId.from_hash(HexBytes("0x" + "ab" * 32))
        self.assertEqual("0x" + "ab" * 32, block_id.rpc_value)

    def test_hash_is_hash(self):
        self.assertTrue(BlockId.from_hash(HexBytes("0x" + "ab" * 32)).is_hash)

    @ddt.data((0, "0x0"), (1, "0x1"), (17000000, "0x1036640"))
    @ddt.unpack
    def test_number_rpc_value_is_hex(self, number, expected):
        self.assertEqual(expected, BlockId.from_number(number).rpc_value)

    def test_number_is_not_hash(self):
        self.assertFalse(BlockId.from_number(1).is_hash)

    @ddt.data(*BlockTag)
    def test_tag_rpc_value_is_tag_value(self, tag):
        self.assertEqual(tag.value, BlockId.from_tag(tag).rpc_value)

    def test_latest_is_latest_tag(self):
        self.assertEqual(BlockId(tag=BlockTag.LATEST), BlockId.latest())

    def test_pending_is_pending_tag(self):
        self.assertEqual(BlockId(tag=BlockTag.PENDING), BlockId.pending())

    def test_empty_rpc_value_raises_value_error(self):
        with self.assertRaises(ValueError):
            BlockId().rpc_value  # noqa


@ddt.ddt
class BlockTagTestCase(TestCase):
    @ddt.data("latest", "finalized", "safe", "earliest", "pending")
    def test_from_value_returns_tag(self, value):
        self.assertEqual(value, BlockTag.from_value(value).value)

    def test_from_value_returns_none_for_unknown(self):
        self.assertIsNone(BlockTag.from_value("newest"))


class AccountIdTestCase(TestCase):
    def test_from_address_lowercases(self):
        account_id = AccountId.from_address("0xABCDEF0000000000000000000000000000000000")
        self.assertEqual("0xabcdef0000000000000000000000000000000000", account_id.address)

    def test_from_address_is_not_name(self):
        self.assertFalse(AccountId.from_address("0x" + "00" * 20).is_name)

    def test_from_name_is_name(self):
        account_id = AccountId.from_name("vitalik.eth")
        self.assertTrue(account_id.is_name)
        self.assertEqual("vitalik.eth", account_id.name)
