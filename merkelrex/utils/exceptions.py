"""
Custom exceptions for the exchange simulator

This module defines a hierarchy of exceptions used by the order book, the wallet
and the simulation driver to report error conditions in a structured way.
"""


class BaseExchangeException(Exception):
    """Base exception class for all exchange simulator exceptions."""
    
    def __init__(self, message: str, details: dict = None):
        """
        Initialize the exception.
        
        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidAmountException(BaseExchangeException):
    """Raised when a negative amount is deposited into a wallet."""
    pass


class InsufficientFundsException(BaseExchangeException):
    """Raised when a participant cannot afford the order being placed."""
    pass


class MalformedInputException(BaseExchangeException):
    """Raised when an order line has the wrong shape or non-numeric fields."""
    pass


class EmptyQuerySetException(BaseExchangeException):
    """Raised when a price aggregate is requested over zero entries."""
    pass


class UnknownProductException(BaseExchangeException):
    """Raised when a product is not a BASE/QUOTE pair."""
    pass


class SettlementException(BaseExchangeException):
    """
    Raised when a sale cannot be settled against the wallet.
    
    This is a consistency violation: orders are checked for affordability
    before they enter the book, so a sale that overdraws the wallet means
    matching and validation disagree.
    """
    pass


class OrderBookException(BaseExchangeException):
    """Raised for general order book operation errors."""
    pass
