"""
Input parsing and validation utilities

This module turns user-typed order lines such as ``ETH/USDT,200,0.5`` into
validated fields. Parsing is fallible rather than throwing: callers receive a
``ParseResult`` that carries either the parsed order or the typed error.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import List, NamedTuple, Optional, Tuple, Union

from .exceptions import MalformedInputException, UnknownProductException


def tokenise(line: str, separator: str) -> List[str]:
    """
    Split a line on a single-character separator.
    
    Empty tokens are dropped, so ``",a,,b,"`` yields ``["a", "b"]``.
    
    Args:
        line: Text to split
        separator: Separator character
        
    Returns:
        List of non-empty tokens in order
    """
    return [token for token in line.split(separator) if token != ""]


def split_product(product: str, separator: str = "/") -> Tuple[str, str]:
    """
    Split a product code into its base and quote currencies.
    
    Args:
        product: Product code, e.g. "ETH/USDT"
        separator: Separator between the two currency codes
        
    Returns:
        Tuple of (base, quote)
        
    Raises:
        UnknownProductException: If the product is not exactly two codes
    """
    currencies = tokenise(product, separator)
    if len(currencies) != 2:
        raise UnknownProductException(
            f"Invalid product: {product}",
            details={"product": product, "separator": separator}
        )
    return currencies[0], currencies[1]


def sanitize_decimal(value: Union[str, int, float, Decimal]) -> Decimal:
    """
    Convert a value to Decimal with proper error handling.
    
    Args:
        value: Value to convert to Decimal
        
    Returns:
        Decimal representation of the value
        
    Raises:
        MalformedInputException: If value cannot be converted to a finite Decimal
    """
    try:
        if isinstance(value, Decimal):
            result = value
        else:
            result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError) as e:
        raise MalformedInputException(
            f"Invalid decimal value: {value}",
            details={"value": value, "error": str(e)}
        )
    
    if not result.is_finite():
        raise MalformedInputException(
            f"Invalid decimal value: {value}",
            details={"value": value}
        )
    
    return result


class OrderInput(NamedTuple):
    """Fields of a parsed order line."""
    product: str
    price: Decimal
    amount: Decimal


@dataclass(frozen=True)
class ParseResult:
    """
    Outcome of parsing an order line.
    
    Exactly one of ``order`` and ``error`` is set.
    """
    order: Optional[OrderInput] = None
    error: Optional[MalformedInputException] = None
    
    @property
    def ok(self) -> bool:
        """True when the line parsed cleanly."""
        return self.error is None


def parse_order_line(
    line: str,
    separator: str = ",",
    product_separator: str = "/",
) -> ParseResult:
    """
    Parse a ``product,price,amount`` order line.
    
    Args:
        line: Raw user input
        separator: Field separator
        product_separator: Separator inside the product code
        
    Returns:
        ParseResult holding the order fields or the reason the line was rejected
    """
    tokens = [token.strip() for token in tokenise(line.strip(), separator)]
    if len(tokens) != 3:
        return ParseResult(error=MalformedInputException(
            f"Expected 3 fields, got {len(tokens)}",
            details={"line": line}
        ))
    
    product, raw_price, raw_amount = tokens
    
    try:
        split_product(product, product_separator)
        price = sanitize_decimal(raw_price)
        amount = sanitize_decimal(raw_amount)
    except UnknownProductException as e:
        return ParseResult(error=MalformedInputException(e.message, details=e.details))
    except MalformedInputException as e:
        return ParseResult(error=e)
    
    if price < 0 or amount < 0:
        return ParseResult(error=MalformedInputException(
            "Price and amount must not be negative",
            details={"line": line, "price": str(price), "amount": str(amount)}
        ))
    
    return ParseResult(order=OrderInput(product, price, amount))
