"""
Seed orders loaded into the book at startup.
"""

from decimal import Decimal
from typing import List

from .entry import OrderBookEntry, OrderBookType


def load_seed_orders() -> List[OrderBookEntry]:
    """
    Build the background orders the simulation starts from.
    
    Returns:
        Entries owned by the dataset user, across two time steps
    """
    return [
        OrderBookEntry(Decimal("10000"), Decimal("0.5"), "2020/03/17 17:01:24", "BTC/USDT", OrderBookType.BID),
        OrderBookEntry(Decimal("10500"), Decimal("0.2"), "2020/03/17 17:01:24", "BTC/USDT", OrderBookType.ASK),
        OrderBookEntry(Decimal("10100"), Decimal("1.0"), "2020/03/17 17:01:24", "BTC/USDT", OrderBookType.BID),
        # Next time frame
        OrderBookEntry(Decimal("200"), Decimal("50"), "2020/03/17 17:01:30", "ETH/USDT", OrderBookType.ASK),
        OrderBookEntry(Decimal("190"), Decimal("10"), "2020/03/17 17:01:30", "ETH/USDT", OrderBookType.BID),
    ]
