"""
Tests for input parsing utilities
"""

import pytest
from decimal import Decimal

from merkelrex.utils.exceptions import MalformedInputException, UnknownProductException
from merkelrex.utils.validators import (
    tokenise,
    split_product,
    sanitize_decimal,
    parse_order_line,
)


class TestTokenise:
    
    def test_simple(self):
        assert tokenise("ETH/USDT,200,0.5", ",") == ["ETH/USDT", "200", "0.5"]
    
    def test_empty_tokens_dropped(self):
        assert tokenise(",a,,b,", ",") == ["a", "b"]
    
    def test_empty_line(self):
        assert tokenise("", ",") == []


class TestSplitProduct:
    
    def test_base_and_quote(self):
        assert split_product("ETH/USDT") == ("ETH", "USDT")
    
    def test_custom_separator(self):
        assert split_product("ETH-USDT", "-") == ("ETH", "USDT")
    
    @pytest.mark.parametrize("product", ["ETHUSDT", "ETH/USDT/BTC", "/USDT", ""])
    def test_invalid(self, product):
        with pytest.raises(UnknownProductException):
            split_product(product)


class TestSanitizeDecimal:
    
    def test_string(self):
        assert sanitize_decimal(" 0.5 ") == Decimal("0.5")
    
    def test_decimal_passthrough(self):
        value = Decimal("1.25")
        assert sanitize_decimal(value) is value
    
    @pytest.mark.parametrize("value", ["abc", "", "NaN", "inf", None])
    def test_invalid(self, value):
        with pytest.raises(MalformedInputException):
            sanitize_decimal(value)


class TestParseOrderLine:
    """Fallible parsing of product,price,amount lines."""
    
    def test_valid_line(self):
        result = parse_order_line("ETH/USDT,200,0.5")
        assert result.ok
        assert result.error is None
        assert result.order.product == "ETH/USDT"
        assert result.order.price == Decimal("200")
        assert result.order.amount == Decimal("0.5")
    
    def test_whitespace_is_trimmed(self):
        result = parse_order_line(" ETH/USDT , 200 , 0.5 \n")
        assert result.ok
        assert result.order.product == "ETH/USDT"
    
    @pytest.mark.parametrize("line", ["ETH/USDT,200", "ETH/USDT,200,0.5,1", "", "garbage"])
    def test_wrong_token_count(self, line):
        result = parse_order_line(line)
        assert not result.ok
        assert result.order is None
        assert isinstance(result.error, MalformedInputException)
    
    @pytest.mark.parametrize("line", ["ETH/USDT,abc,0.5", "ETH/USDT,200,xyz"])
    def test_non_numeric(self, line):
        result = parse_order_line(line)
        assert not result.ok
        assert isinstance(result.error, MalformedInputException)
    
    def test_negative_values(self):
        assert not parse_order_line("ETH/USDT,-200,0.5").ok
        assert not parse_order_line("ETH/USDT,200,-0.5").ok
    
    def test_bad_product(self):
        result = parse_order_line("ETHUSDT,200,0.5")
        assert not result.ok
        assert isinstance(result.error, MalformedInputException)
