"""
Wallet balances and sale settlement

This module defines the Wallet, a per-currency balance store with no overdraft,
and the SettlementWallet, which checks whether orders are affordable and applies
matched sales. The SettlementWallet wraps a Wallet and only changes balances
through the Wallet's own deposit and withdrawal methods.
"""

from decimal import Decimal
from typing import Dict, Optional

from .entry import OrderBookEntry, OrderBookType
from ..utils.exceptions import (
    InvalidAmountException,
    SettlementException,
    UnknownProductException,
)
from ..utils.logger import get_logger
from ..utils.validators import split_product


class Wallet:
    """
    Balances of one participant, keyed by currency code.
    
    Balances never go negative: deposits must be non-negative and
    withdrawals beyond the current balance are refused.
    """
    
    def __init__(self, balances: Optional[Dict[str, Decimal]] = None):
        """
        Initialize a wallet.
        
        Args:
            balances: Optional starting balances
            
        Raises:
            InvalidAmountException: If a starting balance is negative
        """
        self.currencies: Dict[str, Decimal] = {}
        for currency, amount in (balances or {}).items():
            self.insert_currency(currency, amount)
    
    def insert_currency(self, currency: str, amount: Decimal) -> None:
        """
        Deposit an amount of a currency.
        
        Args:
            currency: Currency code
            amount: Amount to add
            
        Raises:
            InvalidAmountException: If amount is negative
        """
        if amount < 0:
            raise InvalidAmountException(
                f"Cannot insert negative amount {amount} of {currency}",
                details={"currency": currency, "amount": str(amount)}
            )
        self.currencies[currency] = self.currencies.get(currency, Decimal("0")) + amount
    
    def remove_currency(self, currency: str, amount: Decimal) -> bool:
        """
        Withdraw an amount of a currency.
        
        Args:
            currency: Currency code
            amount: Amount to remove
            
        Returns:
            True if removed; False (and no change) if amount is negative,
            the currency is unknown or the balance is too small
        """
        if amount < 0:
            return False
        if not self.contains_currency(currency, amount):
            return False
        self.currencies[currency] -= amount
        return True
    
    def contains_currency(self, currency: str, amount: Decimal) -> bool:
        """Check if the wallet holds at least ``amount`` of a known currency."""
        if currency not in self.currencies:
            return False
        return self.currencies[currency] >= amount
    
    def balance(self, currency: str) -> Decimal:
        """Current balance of a currency (zero if unknown)."""
        return self.currencies.get(currency, Decimal("0"))
    
    @property
    def balances(self) -> Dict[str, Decimal]:
        """Snapshot of all balances, sorted by currency code."""
        return {currency: self.currencies[currency] for currency in sorted(self.currencies)}
    
    def __str__(self) -> str:
        return "".join(
            f"{currency} : {amount}\n" for currency, amount in self.balances.items()
        )
    
    def __repr__(self) -> str:
        return f"Wallet({self.balances})"


class SettlementWallet:
    """
    Order affordability checks and sale settlement on top of a Wallet.
    
    Attributes:
        wallet: The balances being checked and settled
        product_separator: Separator between base and quote in product codes
    """
    
    def __init__(self, wallet: Optional[Wallet] = None, product_separator: str = "/"):
        """
        Initialize the settlement wallet.
        
        Args:
            wallet: Wallet to operate on (a new empty one if omitted)
            product_separator: Separator between base and quote currency
        """
        self.wallet = wallet if wallet is not None else Wallet()
        self.product_separator = product_separator
        self.logger = get_logger()
    
    def insert_currency(self, currency: str, amount: Decimal) -> None:
        self.wallet.insert_currency(currency, amount)
    
    def remove_currency(self, currency: str, amount: Decimal) -> bool:
        return self.wallet.remove_currency(currency, amount)
    
    def contains_currency(self, currency: str, amount: Decimal) -> bool:
        return self.wallet.contains_currency(currency, amount)
    
    def can_fulfill_order(self, order: OrderBookEntry) -> bool:
        """
        Check if the wallet can pay for an order.
        
        An ask needs the base currency being sold; a bid needs
        ``amount * price`` of the quote currency.
        
        Args:
            order: Bid or ask to check
            
        Returns:
            True if affordable; False for sales, unknown products or
            insufficient balances
        """
        try:
            base, quote = split_product(order.product, self.product_separator)
        except UnknownProductException as e:
            self.logger.warning(f"Cannot check order: {e.message}")
            return False
        
        if order.order_type == OrderBookType.ASK:
            return self.wallet.contains_currency(base, order.amount)
        elif order.order_type == OrderBookType.BID:
            return self.wallet.contains_currency(quote, order.amount * order.price)
        elif order.order_type in (OrderBookType.ASKSALE, OrderBookType.BIDSALE):
            return False
        else:
            raise ValueError(f"Unhandled order type: {order.order_type}")
    
    def process_sale(self, sale: OrderBookEntry) -> None:
        """
        Apply a matched sale to the wallet.
        
        An asksale gives up ``amount`` of the base currency for
        ``amount * price`` of the quote currency; a bidsale does the reverse.
        The debit is made first, so a refused debit leaves the wallet unchanged.
        
        Args:
            sale: Sale entry owned by this wallet's participant
            
        Raises:
            SettlementException: If the entry is not a sale or the wallet
                cannot cover the debit
        """
        base, quote = split_product(sale.product, self.product_separator)
        value = sale.amount * sale.price
        
        if sale.order_type == OrderBookType.ASKSALE:
            self._debit(base, sale.amount, sale)
            self.wallet.insert_currency(quote, value)
        elif sale.order_type == OrderBookType.BIDSALE:
            self._debit(quote, value, sale)
            self.wallet.insert_currency(base, sale.amount)
        elif sale.order_type in (OrderBookType.ASK, OrderBookType.BID):
            raise SettlementException(
                f"Cannot settle a resting {sale.order_type.value} order",
                details=sale.to_dict()
            )
        else:
            raise ValueError(f"Unhandled order type: {sale.order_type}")
        
        self.logger.log_settlement(
            sale.product, sale.order_type.value, sale.username, self.wallet.balances
        )
    
    def _debit(self, currency: str, amount: Decimal, sale: OrderBookEntry) -> None:
        if not self.wallet.remove_currency(currency, amount):
            raise SettlementException(
                f"Wallet cannot cover {amount} {currency} for sale",
                details={
                    "currency": currency,
                    "amount": str(amount),
                    "balance": str(self.wallet.balance(currency)),
                    "sale": sale.to_dict(),
                }
            )
    
    @property
    def balances(self) -> Dict[str, Decimal]:
        return self.wallet.balances
    
    def __str__(self) -> str:
        return str(self.wallet)
