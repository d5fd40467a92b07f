"""
Order book storage and price-time priority matching

This module implements the order book for every product across every simulated
time step. Entries are kept in a sorted list keyed by timestamp; entries that
share a timestamp keep their insertion order.
"""

from decimal import Decimal
from typing import Iterable, List, Optional

from sortedcontainers import SortedKeyList

from .entry import OrderBookEntry, OrderBookType, DATASET_USER
from ..utils.exceptions import EmptyQuerySetException, OrderBookException
from ..utils.logger import get_logger


SIMULATED_USER = "simuser"


class OrderBook:
    """
    Chronological store of all entries for all products.
    
    The book only grows: orders are inserted, never removed. Matching works on
    copies of the entries at one timestamp, so the stored entries keep their
    original amounts and the sales it returns are not written back.
    
    Attributes:
        simulated_user: Owner id whose sales are tagged for settlement
        dataset_user: Owner id given to sales between background participants
    """
    
    def __init__(
        self,
        entries: Optional[Iterable[OrderBookEntry]] = None,
        simulated_user: str = SIMULATED_USER,
        dataset_user: str = DATASET_USER,
    ):
        """
        Initialize the order book.
        
        Args:
            entries: Initial entries, in any order
            simulated_user: Owner id of the simulated participant
            dataset_user: Owner id of background liquidity
        """
        self.simulated_user = simulated_user
        self.dataset_user = dataset_user
        
        # Sorted by timestamp; equal timestamps stay in insertion order
        self._entries: SortedKeyList = SortedKeyList(
            entries or [], key=OrderBookEntry.compare_by_timestamp
        )
        
        self.logger = get_logger()
    
    def __len__(self) -> int:
        return len(self._entries)
    
    def __iter__(self):
        return iter(self._entries)
    
    def get_known_products(self) -> List[str]:
        """
        Get every product seen in the book.
        
        Returns:
            Distinct product codes in ascending order
        """
        return sorted({entry.product for entry in self._entries})
    
    def get_orders(
        self,
        order_type: OrderBookType,
        product: str,
        timestamp: str,
    ) -> List[OrderBookEntry]:
        """
        Get the entries matching a type, product and timestamp.
        
        The returned entries are copies; reducing their amounts does not
        touch the book.
        
        Args:
            order_type: Entry type to select
            product: Product code
            timestamp: Simulated instant
            
        Returns:
            Matching entries in insertion order (empty if none)
        """
        return [
            entry.copy()
            for entry in self._entries.irange_key(timestamp, timestamp)
            if entry.order_type == order_type and entry.product == product
        ]
    
    @staticmethod
    def get_high_price(entries: List[OrderBookEntry]) -> Decimal:
        """
        Get the highest price among entries.
        
        Raises:
            EmptyQuerySetException: If entries is empty
        """
        if not entries:
            raise EmptyQuerySetException("Cannot compute high price of no entries")
        
        high = entries[0].price
        for entry in entries:
            if entry.price > high:
                high = entry.price
        return high
    
    @staticmethod
    def get_low_price(entries: List[OrderBookEntry]) -> Decimal:
        """
        Get the lowest price among entries.
        
        Raises:
            EmptyQuerySetException: If entries is empty
        """
        if not entries:
            raise EmptyQuerySetException("Cannot compute low price of no entries")
        
        low = entries[0].price
        for entry in entries:
            if entry.price < low:
                low = entry.price
        return low
    
    def get_earliest_time(self) -> str:
        """
        Get the timestamp of the first entry.
        
        Raises:
            OrderBookException: If the book is empty
        """
        if not self._entries:
            raise OrderBookException("Order book is empty")
        return self._entries[0].timestamp
    
    def get_next_time(self, timestamp: str) -> str:
        """
        Get the first timestamp strictly after the given one.
        
        The simulation is cyclic: after the last timestamp it wraps around to
        the earliest one.
        
        Args:
            timestamp: Current simulated instant
            
        Returns:
            Next timestamp in the book
            
        Raises:
            OrderBookException: If the book is empty
        """
        if not self._entries:
            raise OrderBookException("Order book is empty")
        
        index = self._entries.bisect_key_right(timestamp)
        if index < len(self._entries):
            return self._entries[index].timestamp
        
        # Wrap around
        return self._entries[0].timestamp
    
    def insert_order(self, order: OrderBookEntry) -> None:
        """
        Insert an order, keeping the book in timestamp order.
        
        Args:
            order: Entry to add; placed after existing entries with the same timestamp
        """
        self._entries.add(order)
    
    def match_asks_to_bids(self, product: str, timestamp: str) -> List[OrderBookEntry]:
        """
        Match the asks and bids of one product at one timestamp.
        
        Asks are walked cheapest first, bids most expensive first. A pair
        trades when the bid price covers the ask price, always at the ask
        price. A bid larger than the ask carries its remainder on to the next
        ask; a bid smaller than the ask is consumed and the ask moves on to
        the next bid.
        
        Args:
            product: Product code
            timestamp: Simulated instant
            
        Returns:
            Sales in the order they were produced
        """
        asks = self.get_orders(OrderBookType.ASK, product, timestamp)
        bids = self.get_orders(OrderBookType.BID, product, timestamp)
        sales: List[OrderBookEntry] = []
        
        # Python sorts are stable, so equal prices keep insertion order
        asks.sort(key=OrderBookEntry.compare_by_price_asc)
        bids.sort(key=OrderBookEntry.compare_by_price_desc)
        
        self.logger.debug(
            f"Matching {product} at {timestamp}: {len(asks)} asks, {len(bids)} bids"
        )
        
        for ask in asks:
            for bid in bids:
                if ask.is_consumed:
                    break
                if bid.is_consumed or bid.price < ask.price:
                    continue
                
                if bid.amount == ask.amount:
                    sales.append(self._make_sale(ask, bid, ask.amount))
                    bid.amount = Decimal("0")
                    ask.amount = Decimal("0")
                    break
                
                if bid.amount > ask.amount:
                    sales.append(self._make_sale(ask, bid, ask.amount))
                    bid.amount = bid.amount - ask.amount
                    ask.amount = Decimal("0")
                    break
                
                # Partial fill: the bid is used up, the ask keeps looking
                sales.append(self._make_sale(ask, bid, bid.amount))
                ask.amount = ask.amount - bid.amount
                bid.amount = Decimal("0")
        
        return sales
    
    def _make_sale(
        self,
        ask: OrderBookEntry,
        bid: OrderBookEntry,
        amount: Decimal,
    ) -> OrderBookEntry:
        """
        Build the sale entry for a matched pair.
        
        When both sides belong to the simulated participant the ask wins and
        the sale is settled as a sell.
        """
        order_type = OrderBookType.ASKSALE
        username = self.dataset_user
        
        if bid.username == self.simulated_user:
            order_type = OrderBookType.BIDSALE
            username = self.simulated_user
        if ask.username == self.simulated_user:
            order_type = OrderBookType.ASKSALE
            username = self.simulated_user
        
        return OrderBookEntry(
            price=ask.price,
            amount=amount,
            timestamp=ask.timestamp,
            product=ask.product,
            order_type=order_type,
            username=username,
        )
    
    def __repr__(self) -> str:
        return (
            f"OrderBook({len(self._entries)} entries, "
            f"products={self.get_known_products()})"
        )
