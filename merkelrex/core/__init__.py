"""
Core domain models, order book matching and wallet settlement
"""

from .entry import OrderBookEntry, OrderBookType
from .order_book import OrderBook
from .wallet import Wallet, SettlementWallet
from .seed import load_seed_orders
from .exchange import Exchange, OrderResult, TimeStepResult, ProductStats

__all__ = [
    "OrderBookEntry",
    "OrderBookType",
    "OrderBook",
    "Wallet",
    "SettlementWallet",
    "load_seed_orders",
    "Exchange",
    "OrderResult",
    "TimeStepResult",
    "ProductStats",
]
