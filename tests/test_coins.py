"""
Test suite for coin module

Tests integer amount parsing, the Uint128 range and Coin formatting.
"""

import pytest

from split_ledger.coins import (
    Coin, MAX_AMOUNT, checked_add, coins, format_coins, parse_amount, validate_denom
)
from split_ledger.errors import InvalidAmount, InvalidDenom, Overflow


class TestParseAmount:
    """Test amount parsing"""

    def test_int_and_digit_string(self):
        assert parse_amount(0) == 0
        assert parse_amount(45) == 45
        assert parse_amount("45") == 45
        assert parse_amount(" 7 ") == 7

    def test_max_amount_accepted(self):
        assert parse_amount(MAX_AMOUNT) == MAX_AMOUNT
        assert parse_amount(str(MAX_AMOUNT)) == MAX_AMOUNT

    def test_above_max_overflows(self):
        with pytest.raises(Overflow):
            parse_amount(MAX_AMOUNT + 1)

    def test_negative_rejected(self):
        with pytest.raises(InvalidAmount, match="cannot be negative"):
            parse_amount(-1)

    def test_malformed_rejected(self):
        for value in ["", "1.5", "-3", "abc", "1e3", "\uff10\uff11", "\u0661", 1.0, None, True]:
            with pytest.raises(InvalidAmount):
                parse_amount(value)


class TestCheckedAdd:
    """Test overflow-checked addition"""

    def test_add_within_range(self):
        assert checked_add(MAX_AMOUNT - 1, 1) == MAX_AMOUNT

    def test_add_past_max_fails(self):
        with pytest.raises(Overflow) as exc_info:
            checked_add(MAX_AMOUNT, 1, denom="usei", account="account1")
        assert exc_info.value.account == "account1"
        assert exc_info.value.limit == MAX_AMOUNT


class TestCoin:
    """Test Coin value type"""

    def test_coin_creation(self):
        coin = Coin(denom="usei", amount="100")
        assert coin.amount == 100
        assert coin.denom == "usei"
        assert not coin.is_zero()
        assert Coin(denom="usei", amount=0).is_zero()

    def test_coin_is_immutable(self):
        coin = Coin(denom="usei", amount=1)
        with pytest.raises(Exception):
            coin.amount = 2

    def test_invalid_denom(self):
        for denom in ["", "u sei", None]:
            with pytest.raises(InvalidDenom) as exc_info:
                validate_denom(denom)
            assert exc_info.value.to_dict()["error"] == "InvalidDenom"
            assert "denomination" in exc_info.value.message
        with pytest.raises(InvalidDenom):
            Coin(denom="", amount=1)

    def test_invalid_denom_is_an_amount_error(self):
        """Callers catching InvalidAmount still see malformed coins"""
        with pytest.raises(InvalidAmount):
            validate_denom("u sei")

    def test_formatting(self):
        assert Coin(denom="usei", amount=45).to_string() == "45usei"
        assert Coin(denom="usei", amount=45).to_dict() == {"denom": "usei", "amount": "45"}
        assert coins(25, "usei") == [Coin(denom="usei", amount=25)]
        assert format_coins([Coin("wei", 5), Coin("usei", 10)]) == "10usei,5wei"
        assert format_coins([]) == ""
