"""
Order book entry domain model

This module defines the OrderBookEntry class and the OrderBookType enum.
An entry is either a resting order (bid/ask) or a sale produced by matching
(asksale/bidsale).
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict


DATASET_USER = "dataset"


class OrderBookType(Enum):
    """Entry type enumeration."""
    BID = "bid"
    ASK = "ask"
    ASKSALE = "asksale"  # Sale settled as the seller
    BIDSALE = "bidsale"  # Sale settled as the buyer
    
    def __str__(self) -> str:
        return self.value
    
    @property
    def is_sale(self) -> bool:
        """Check if this type marks a matched sale rather than a resting order."""
        return self in (OrderBookType.ASKSALE, OrderBookType.BIDSALE)


@dataclass(slots=True)
class OrderBookEntry:
    """
    A resting order or a matched sale for one product at one time step.
    
    Every field is fixed at construction except ``amount``, which matching
    reduces as an order is filled. An amount of zero marks the entry as
    consumed.
    
    Attributes:
        price: Limit price for orders, execution price for sales
        amount: Remaining quantity of the base currency
        timestamp: Simulated instant; entries sharing it are simultaneous
        product: Currency pair, e.g. "ETH/USDT"
        order_type: Bid, ask, asksale or bidsale
        username: Owner of the entry ("dataset" for background liquidity)
    """
    
    price: Decimal
    amount: Decimal
    timestamp: str
    product: str
    order_type: OrderBookType
    username: str = DATASET_USER
    
    def __post_init__(self):
        """
        Post-initialization validation.
        
        Raises:
            ValueError: If price or amount is negative, or product is empty
        """
        if self.price < 0:
            raise ValueError(f"Price cannot be negative, got {self.price}")
        
        if self.amount < 0:
            raise ValueError(f"Amount cannot be negative, got {self.amount}")
        
        if not self.product or not self.product.strip():
            raise ValueError("Product cannot be empty")
    
    def __setattr__(self, name: str, value: Any) -> None:
        # Fields are write-once, apart from the remaining amount
        if name != "amount" and hasattr(self, name):
            raise AttributeError(f"OrderBookEntry.{name} is read-only")
        object.__setattr__(self, name, value)
    
    @staticmethod
    def compare_by_timestamp(entry: "OrderBookEntry") -> str:
        """Sort key: chronological order."""
        return entry.timestamp
    
    @staticmethod
    def compare_by_price_asc(entry: "OrderBookEntry") -> Decimal:
        """Sort key: cheapest first."""
        return entry.price
    
    @staticmethod
    def compare_by_price_desc(entry: "OrderBookEntry") -> Decimal:
        """Sort key: most expensive first."""
        return -entry.price
    
    def copy(self) -> "OrderBookEntry":
        """Return an independent copy whose amount can be consumed separately."""
        return OrderBookEntry(
            price=self.price,
            amount=self.amount,
            timestamp=self.timestamp,
            product=self.product,
            order_type=self.order_type,
            username=self.username,
        )
    
    @property
    def is_consumed(self) -> bool:
        """Check if nothing remains to be matched."""
        return self.amount == 0
    
    @property
    def total_value(self) -> Decimal:
        """Value in the quote currency (price * amount)."""
        return self.price * self.amount
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert entry to dictionary for API serialization."""
        return {
            "price": str(self.price),
            "amount": str(self.amount),
            "timestamp": self.timestamp,
            "product": self.product,
            "order_type": self.order_type.value,
            "username": self.username,
        }
    
    def __repr__(self) -> str:
        return (
            f"OrderBookEntry({self.order_type.value} {self.amount} {self.product} "
            f"@ {self.price}, t={self.timestamp}, user={self.username})"
        )
