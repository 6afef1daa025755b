"""Unit tests for fixed-size hashes, addresses and BigDecimal."""

from __future__ import annotations

import pytest

from neoconduit.primitives import BigDecimal, UInt160, UInt256, parse_account, to_address, to_script_hash
from neoconduit.utils import b58check_decode, b58check_encode, hash160, sha256


class TestUInt:
    def test_string_form_is_big_endian(self) -> None:
        value = UInt160.from_string("0x0102030405060708090a0b0c0d0e0f1011121314")
        assert value.to_array()[0] == 0x14
        assert str(value) == "0x0102030405060708090a0b0c0d0e0f1011121314"

    def test_prefix_optional(self) -> None:
        assert UInt256.from_string("ab" * 32) == UInt256.from_string("0x" + "ab" * 32)

    @pytest.mark.parametrize("text", ["0x1234", "zz" * 20, ""])
    def test_rejects_bad_input(self, text: str) -> None:
        with pytest.raises(ValueError):
            UInt160.from_string(text)

    def test_direct_length_check(self) -> None:
        with pytest.raises(ValueError):
            UInt256(b"\x00" * 31)


class TestAddress:
    def test_round_trip(self) -> None:
        script_hash = UInt160(hash160(b"\x40"))
        address = to_address(script_hash)
        assert address.startswith("N")
        assert to_script_hash(address) == script_hash

    def test_wrong_version(self) -> None:
        address = b58check_encode(bytes([0x17]) + b"\x00" * 20)
        with pytest.raises(ValueError):
            to_script_hash(address)

    def test_wrong_checksum(self) -> None:
        address = to_address(UInt160.zero())
        tampered = address[:-1] + ("2" if address[-1] != "2" else "3")
        with pytest.raises(ValueError):
            to_script_hash(tampered)

    def test_parse_account_accepts_all_forms(self) -> None:
        script_hash = UInt160(hash160(b"account"))
        assert parse_account(script_hash) == script_hash
        assert parse_account(str(script_hash)) == script_hash
        assert parse_account(to_address(script_hash)) == script_hash

    def test_b58check_rejects_short_input(self) -> None:
        with pytest.raises(ValueError):
            b58check_decode("1")


class TestBigDecimal:
    def test_parse_and_str(self) -> None:
        amount = BigDecimal.parse("12.5", 8)
        assert amount.value == 1250000000
        assert str(amount) == "12.5"

    def test_negative(self) -> None:
        assert str(BigDecimal.parse("-0.01", 2)) == "-0.01"

    def test_too_many_places(self) -> None:
        with pytest.raises(ValueError):
            BigDecimal.parse("0.123", 2)

    def test_arithmetic_rescales(self) -> None:
        total = BigDecimal(1, 1) + BigDecimal(5, 2)
        assert total == BigDecimal(15, 2)
        assert total.decimals == 2
        assert BigDecimal(1, 0) - BigDecimal(1, 8) == BigDecimal(99999999, 8)

    def test_comparison_across_precision(self) -> None:
        assert BigDecimal(1, 0) == BigDecimal(100, 2)
        assert BigDecimal(1, 0) < BigDecimal(101, 2)
        assert hash(BigDecimal(1, 0)) == hash(BigDecimal(100, 2))

    def test_lossy_rescale_rejected(self) -> None:
        with pytest.raises(ValueError):
            BigDecimal(15, 1).change_decimals(0)


def test_sha256_known_vector() -> None:
    assert sha256(b"abc").hex().startswith("ba7816bf")
