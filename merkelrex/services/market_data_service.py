"""
Market Data Service - Read access to the book and the simulated clock.

Provides product lists, per-instant order snapshots and statistics, the recent
sales journal, and the time-step action that drives matching.
"""

import logging
from typing import Any, Dict, List, Optional

from merkelrex.core.entry import OrderBookEntry, OrderBookType
from merkelrex.core.exchange import Exchange, ProductStats, TimeStepResult


class MarketDataService:
    """
    Service class for market data and the simulation clock.
    """
    
    def __init__(self, exchange: Exchange):
        """
        Initialize market data service.
        
        Args:
            exchange: Reference to the exchange instance
        """
        self.exchange = exchange
        self.logger = logging.getLogger(f"{__name__}.MarketDataService")
        self.logger.info("MarketDataService initialized")
    
    def get_products(self) -> List[str]:
        return self.exchange.get_known_products()
    
    def get_current_time(self) -> str:
        return self.exchange.current_time
    
    def get_market_stats(self) -> List[ProductStats]:
        return self.exchange.market_stats()
    
    def get_order_book_snapshot(
        self,
        product: str,
        side: Optional[OrderBookType] = None,
    ) -> Dict[str, Any]:
        """
        Get the asks and bids of a product at the current time.
        
        Asks are listed cheapest first and bids most expensive first.
        
        Args:
            product: Product code
            side: ASK or BID to list one side only, None for both
        
        Returns:
            Dictionary with product, timestamp, asks and bids
        """
        asks = []
        bids = []
        if side in (None, OrderBookType.ASK):
            asks = self.exchange.get_orders(OrderBookType.ASK, product)
        if side in (None, OrderBookType.BID):
            bids = self.exchange.get_orders(OrderBookType.BID, product)
        asks.sort(key=OrderBookEntry.compare_by_price_asc)
        bids.sort(key=OrderBookEntry.compare_by_price_desc)
        
        return {
            "product": product,
            "timestamp": self.exchange.current_time,
            "asks": asks,
            "bids": bids,
        }
    
    def advance_time(self) -> TimeStepResult:
        """
        Run one time step.
        
        Returns:
            TimeStepResult with the sales matched at the previous time
        """
        result = self.exchange.goto_next_timeframe()
        self.logger.info(
            f"Advanced from {result.previous_time} to {result.current_time}, "
            f"{len(result.all_sales)} sales"
        )
        return result
    
    def get_recent_trades(self, limit: int = 50) -> List[OrderBookEntry]:
        return self.exchange.recent_trades(limit)
