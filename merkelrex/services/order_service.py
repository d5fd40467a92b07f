"""
Order Service - Business logic layer for order entry and the wallet.

This service sits between the API layer and the exchange: it places asks and
bids for the simulated participant and turns rejected orders into typed
exceptions for the API.
"""

import logging
from decimal import Decimal
from typing import Dict

from merkelrex.core.entry import OrderBookType
from merkelrex.core.exchange import Exchange, OrderResult
from merkelrex.utils.exceptions import InsufficientFundsException, MalformedInputException

logger = logging.getLogger(__name__)


class OrderService:
    """
    Service class for placing orders on behalf of the simulated participant.
    """
    
    def __init__(self, exchange: Exchange):
        """
        Initialize order service.
        
        Args:
            exchange: Reference to the exchange instance
        """
        self.exchange = exchange
        self.logger = logging.getLogger(f"{__name__}.OrderService")
        self.logger.info("OrderService initialized")
    
    def submit_order(
        self,
        order_type: OrderBookType,
        product: str,
        price: Decimal,
        amount: Decimal,
    ) -> OrderResult:
        """
        Place an ask or bid at the current time.
        
        Args:
            order_type: ASK or BID
            product: Product code, e.g. "ETH/USDT"
            price: Limit price
            amount: Quantity of the base currency
        
        Returns:
            OrderResult for the accepted order
        
        Raises:
            InsufficientFundsException: If the wallet cannot cover the order
            MalformedInputException: If order_type is not ASK or BID
        """
        if order_type == OrderBookType.ASK:
            result = self.exchange.enter_ask(product, price, amount)
        elif order_type == OrderBookType.BID:
            result = self.exchange.enter_bid(product, price, amount)
        else:
            raise MalformedInputException(
                f"Cannot place a {order_type.value} order",
                details={"order_type": order_type.value}
            )
        
        return self._check_result(result)
    
    def submit_order_line(self, order_type: OrderBookType, line: str) -> OrderResult:
        """
        Place an order typed as ``product,price,amount``.
        
        Raises:
            MalformedInputException: If the line does not parse
            InsufficientFundsException: If the wallet cannot cover the order
        """
        if order_type not in (OrderBookType.ASK, OrderBookType.BID):
            raise MalformedInputException(
                f"Cannot place a {order_type.value} order",
                details={"order_type": order_type.value}
            )
        
        result = self.exchange.enter_order_line(order_type, line)
        if result.error is not None:
            raise result.error
        return self._check_result(result)
    
    def get_wallet(self) -> Dict[str, Decimal]:
        """Current balances of the simulated participant."""
        return self.exchange.wallet_balances()
    
    def _check_result(self, result: OrderResult) -> OrderResult:
        if not result.accepted:
            entry = result.entry
            self.logger.info(f"Order rejected: {result.message}")
            raise InsufficientFundsException(
                result.message,
                details=entry.to_dict() if entry else {}
            )
        
        self.logger.info(
            f"Order accepted: {result.entry.order_type.value} {result.entry.amount} "
            f"{result.entry.product} @ {result.entry.price}"
        )
        return result
