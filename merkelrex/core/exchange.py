"""
Exchange simulation driver.

Owns the order book, the simulated participant's wallet and the time cursor.
Orders are checked against the wallet before they enter the book; each time
step matches every product at the current instant, settles the participant's
sales and advances the cursor.
"""

import threading
from collections import deque
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Deque, Dict, List, Optional, Union

from .entry import OrderBookEntry, OrderBookType
from .order_book import OrderBook
from .seed import load_seed_orders
from .wallet import SettlementWallet, Wallet
from ..config import Settings, get_settings
from ..utils.exceptions import MalformedInputException, UnknownProductException
from ..utils.logger import get_logger
from ..utils.validators import parse_order_line, sanitize_decimal, split_product


MSG_ACCEPTED = "Wallet looks good."
MSG_INSUFFICIENT_FUNDS = "Wallet has insufficient funds."
MSG_BAD_INPUT = "Bad input!"


@dataclass
class OrderResult:
    """
    Result of placing an order with the exchange.
    
    Attributes:
        accepted: Whether the order entered the book
        message: Human-readable outcome
        entry: The order that was built (None when the input was malformed)
        error: Parse failure for malformed input
    """
    accepted: bool
    message: str
    entry: Optional[OrderBookEntry] = None
    error: Optional[MalformedInputException] = None
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary for API serialization."""
        return {
            "accepted": self.accepted,
            "message": self.message,
            "entry": self.entry.to_dict() if self.entry else None,
            "error": self.error.message if self.error else None,
        }


@dataclass
class TimeStepResult:
    """Sales produced while moving from one time step to the next."""
    previous_time: str
    current_time: str
    sales: Dict[str, List[OrderBookEntry]] = field(default_factory=dict)
    
    @property
    def all_sales(self) -> List[OrderBookEntry]:
        return [sale for product_sales in self.sales.values() for sale in product_sales]


@dataclass
class ProductStats:
    """Order counts and price range for one product at one instant."""
    product: str
    ask_count: int = 0
    max_ask: Optional[Decimal] = None
    min_ask: Optional[Decimal] = None
    bid_count: int = 0
    max_bid: Optional[Decimal] = None
    min_bid: Optional[Decimal] = None


class Exchange:
    """
    Step-driven single-participant exchange simulation.
    
    All public methods take the exchange lock, so one instance can be shared
    by several request handlers.
    """
    
    def __init__(
        self,
        order_book: Optional[OrderBook] = None,
        wallet: Optional[Wallet] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the exchange.
        
        Args:
            order_book: Book to trade on (seeded with the default orders if omitted)
            wallet: Participant wallet (funded from settings if omitted)
            settings: Configuration (global settings if omitted)
            
        Raises:
            OrderBookException: If the book is empty
        """
        self.settings = settings or get_settings()
        self.logger = get_logger(
            log_level=self.settings.log_level,
            log_dir=self.settings.log_dir,
            use_json=self.settings.log_json,
        )
        
        if order_book is None:
            order_book = OrderBook(
                load_seed_orders(),
                simulated_user=self.settings.simulated_user,
                dataset_user=self.settings.dataset_user,
            )
        self.order_book = order_book
        
        if wallet is None:
            wallet = Wallet(self.settings.starting_balances)
        self.wallet = SettlementWallet(wallet, self.settings.product_separator)
        
        self.current_time: str = self.order_book.get_earliest_time()
        self.trade_journal: Deque[OrderBookEntry] = deque(
            maxlen=self.settings.trade_journal_size
        )
        self.statistics: Dict[str, int] = {
            "time_steps": 0,
            "orders_entered": 0,
            "orders_rejected": 0,
            "sales_matched": 0,
            "sales_settled": 0,
        }
        self.lock = threading.Lock()
        
        self.logger.info(f"Exchange started at {self.current_time}")
    
    @property
    def simulated_user(self) -> str:
        return self.order_book.simulated_user
    
    def enter_ask(
        self,
        product: str,
        price: Union[str, Decimal],
        amount: Union[str, Decimal],
    ) -> OrderResult:
        """Offer to sell ``amount`` of the product's base currency at ``price``."""
        with self.lock:
            return self._enter_order(OrderBookType.ASK, product, price, amount)
    
    def enter_bid(
        self,
        product: str,
        price: Union[str, Decimal],
        amount: Union[str, Decimal],
    ) -> OrderResult:
        """Bid to buy ``amount`` of the product's base currency at ``price``."""
        with self.lock:
            return self._enter_order(OrderBookType.BID, product, price, amount)
    
    def enter_order_line(self, order_type: OrderBookType, line: str) -> OrderResult:
        """
        Place an order typed as ``product,price,amount``.
        
        Args:
            order_type: ASK or BID
            line: Raw user input
            
        Returns:
            OrderResult; malformed lines are rejected with "Bad input!"
        """
        parsed = parse_order_line(
            line,
            separator=self.settings.input_separator,
            product_separator=self.settings.product_separator,
        )
        
        with self.lock:
            if not parsed.ok:
                self.statistics["orders_rejected"] += 1
                self.logger.log_order_rejected(
                    line, order_type.value, parsed.error.message, self.simulated_user
                )
                return OrderResult(accepted=False, message=MSG_BAD_INPUT, error=parsed.error)
            
            order = parsed.order
            return self._enter_order(order_type, order.product, order.price, order.amount)
    
    def goto_next_timeframe(self) -> TimeStepResult:
        """
        Match every product at the current time, then advance the clock.
        
        Sales owned by the simulated participant are settled against the wallet.
        
        Returns:
            TimeStepResult with the sales per product
            
        Raises:
            SettlementException: If a sale cannot be covered by the wallet
        """
        with self.lock:
            previous_time = self.current_time
            result = TimeStepResult(previous_time=previous_time, current_time=previous_time)
            
            for product in self.order_book.get_known_products():
                sales = self.order_book.match_asks_to_bids(product, previous_time)
                result.sales[product] = sales
                
                for sale in sales:
                    self.logger.log_sale(
                        sale.product,
                        sale.order_type.value,
                        sale.price,
                        sale.amount,
                        sale.timestamp,
                        sale.username,
                    )
                    self.trade_journal.append(sale)
                    self.statistics["sales_matched"] += 1
                    
                    if sale.username == self.simulated_user:
                        self.wallet.process_sale(sale)
                        self.statistics["sales_settled"] += 1
            
            self.current_time = self.order_book.get_next_time(previous_time)
            result.current_time = self.current_time
            self.statistics["time_steps"] += 1
            
            self.logger.log_time_step(previous_time, self.current_time, len(result.all_sales))
            return result
    
    def market_stats(self) -> List[ProductStats]:
        """
        Summarize the orders at the current time for every known product.
        
        Returns:
            One ProductStats per product, in product order
        """
        with self.lock:
            stats = []
            for product in self.order_book.get_known_products():
                product_stats = ProductStats(product=product)
                
                asks = self.order_book.get_orders(OrderBookType.ASK, product, self.current_time)
                if asks:
                    product_stats.ask_count = len(asks)
                    product_stats.max_ask = self.order_book.get_high_price(asks)
                    product_stats.min_ask = self.order_book.get_low_price(asks)
                
                bids = self.order_book.get_orders(OrderBookType.BID, product, self.current_time)
                if bids:
                    product_stats.bid_count = len(bids)
                    product_stats.max_bid = self.order_book.get_high_price(bids)
                    product_stats.min_bid = self.order_book.get_low_price(bids)
                
                stats.append(product_stats)
            return stats
    
    def get_orders(self, order_type: OrderBookType, product: str) -> List[OrderBookEntry]:
        """Entries of one type for a product at the current time."""
        with self.lock:
            return self.order_book.get_orders(order_type, product, self.current_time)
    
    def get_known_products(self) -> List[str]:
        with self.lock:
            return self.order_book.get_known_products()
    
    def wallet_balances(self) -> Dict[str, Decimal]:
        with self.lock:
            return self.wallet.balances
    
    def recent_trades(self, limit: int = 50) -> List[OrderBookEntry]:
        """Most recent sales, oldest first."""
        with self.lock:
            if limit <= 0:
                return []
            return list(self.trade_journal)[-limit:]
    
    def get_statistics(self) -> Dict[str, Any]:
        """
        Get current exchange statistics.
        
        Returns:
            Dictionary of counters plus the current time and book size
        """
        with self.lock:
            stats: Dict[str, Any] = dict(self.statistics)
            stats["current_time"] = self.current_time
            stats["book_size"] = len(self.order_book)
            return stats
    
    def _enter_order(
        self,
        order_type: OrderBookType,
        product: str,
        price: Union[str, Decimal],
        amount: Union[str, Decimal],
    ) -> OrderResult:
        try:
            split_product(product, self.settings.product_separator)
        except UnknownProductException as e:
            raise MalformedInputException(e.message, details=e.details) from e
        price = sanitize_decimal(price)
        amount = sanitize_decimal(amount)
        if price < 0 or amount < 0:
            raise MalformedInputException(
                "Price and amount must not be negative",
                details={"price": str(price), "amount": str(amount)}
            )
        
        order = OrderBookEntry(
            price=price,
            amount=amount,
            timestamp=self.current_time,
            product=product,
            order_type=order_type,
            username=self.simulated_user,
        )
        
        if not self.wallet.can_fulfill_order(order):
            self.statistics["orders_rejected"] += 1
            self.logger.log_order_rejected(
                product, order_type.value, "insufficient funds", self.simulated_user
            )
            return OrderResult(accepted=False, message=MSG_INSUFFICIENT_FUNDS, entry=order)
        
        self.order_book.insert_order(order)
        self.statistics["orders_entered"] += 1
        self.logger.log_order_entry(
            product, order_type.value, price, amount, order.timestamp, self.simulated_user
        )
        return OrderResult(accepted=True, message=MSG_ACCEPTED, entry=order)
