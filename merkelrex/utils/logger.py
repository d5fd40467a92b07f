"""
Logging configuration and utilities for the exchange simulator.

Provides structured logging with JSON format for production environments
and human-readable format for development.
"""

import logging
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
from decimal import Decimal


class JSONFormatter(logging.Formatter):
    """
    Custom JSON formatter for structured logging.
    
    Converts log records to JSON format with additional context fields.
    """
    
    EXTRA_FIELDS = ("product", "timestamp", "owner", "order_type")
    
    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON string."""
        log_data = {
            "logged_at": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        
        # Add extra fields if present
        for name in self.EXTRA_FIELDS:
            if hasattr(record, name):
                log_data[name] = str(getattr(record, name))
            
        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
            
        return json.dumps(log_data)


class ExchangeLogger:
    """
    Centralized logger for the exchange simulator.
    
    Separates order entry, sales and general application messages into
    child loggers so they can be routed to their own files.
    """
    
    def __init__(
        self,
        name: str = "MerkelRex",
        log_level: str = "INFO",
        log_dir: Optional[Path] = None,
        use_json: bool = False,
    ):
        """
        Initialize the exchange logger.
        
        Args:
            name: Logger name
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (None for console only)
            use_json: Use JSON formatting (for production)
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, log_level.upper()))
        self.logger.handlers.clear()  # Remove existing handlers
        
        # Console handler
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(self._create_formatter(use_json))
        self.logger.addHandler(console_handler)
        
        # Child loggers propagate to the console handler above
        self.trade_logger = logging.getLogger(f"{name}.trades")
        self.order_logger = logging.getLogger(f"{name}.orders")
        
        if log_dir:
            log_dir = Path(log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)
            
            self.logger.addHandler(
                self._create_file_handler(log_dir / "application.log", use_json)
            )
            self.trade_logger.addHandler(
                self._create_file_handler(log_dir / "trades.log", use_json)
            )
            self.order_logger.addHandler(
                self._create_file_handler(log_dir / "orders.log", use_json)
            )
            
            error_handler = self._create_file_handler(log_dir / "errors.log", use_json)
            error_handler.setLevel(logging.ERROR)
            self.logger.addHandler(error_handler)
    
    @staticmethod
    def _create_formatter(use_json: bool) -> logging.Formatter:
        if use_json:
            return JSONFormatter()
        return logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
    
    def _create_file_handler(
        self,
        filepath: Path,
        use_json: bool
    ) -> logging.FileHandler:
        """Create a file handler with appropriate formatter."""
        handler = logging.FileHandler(filepath)
        handler.setFormatter(self._create_formatter(use_json))
        return handler
    
    def log_order_entry(
        self,
        product: str,
        order_type: str,
        price: Decimal,
        amount: Decimal,
        timestamp: str,
        owner: str,
    ):
        """Log an order accepted into the book."""
        extra = {
            "product": product,
            "order_type": order_type,
            "timestamp": timestamp,
            "owner": owner,
        }
        self.order_logger.info(
            f"Order entered: {order_type} {amount} {product} @ {price} at {timestamp} ({owner})",
            extra=extra,
        )
    
    def log_order_rejected(
        self,
        product: str,
        order_type: str,
        reason: str,
        owner: str,
    ):
        """Log an order that was not placed."""
        extra = {"product": product, "order_type": order_type, "owner": owner}
        self.order_logger.warning(
            f"Order rejected: {order_type} {product} ({reason})",
            extra=extra,
        )
    
    def log_sale(
        self,
        product: str,
        order_type: str,
        price: Decimal,
        amount: Decimal,
        timestamp: str,
        owner: str,
    ):
        """Log a sale produced by matching."""
        extra = {
            "product": product,
            "order_type": order_type,
            "timestamp": timestamp,
            "owner": owner,
        }
        self.trade_logger.info(
            f"Sale: {amount} {product} @ {price} ({order_type}, owner: {owner})",
            extra=extra,
        )
    
    def log_settlement(self, product: str, order_type: str, owner: str, balances: dict):
        """Log a sale applied to a wallet."""
        extra = {"product": product, "order_type": order_type, "owner": owner}
        summary = ", ".join(f"{currency}={amount}" for currency, amount in balances.items())
        self.trade_logger.info(
            f"Settled {order_type} {product} for {owner}: {summary}",
            extra=extra,
        )
    
    def log_time_step(self, previous_time: str, current_time: str, sales_count: int):
        """Log a simulated time step."""
        self.logger.info(
            f"Time step: {previous_time} -> {current_time} ({sales_count} sales)",
            extra={"timestamp": current_time},
        )
    
    def debug(self, message: str, **kwargs):
        """Log debug message."""
        self.logger.debug(message, extra=kwargs)
    
    def info(self, message: str, **kwargs):
        """Log info message."""
        self.logger.info(message, extra=kwargs)
    
    def warning(self, message: str, **kwargs):
        """Log warning message."""
        self.logger.warning(message, extra=kwargs)


# Global logger instance
_logger: Optional[ExchangeLogger] = None


def get_logger(
    name: str = "MerkelRex",
    log_level: str = "INFO",
    log_dir: Optional[Path] = None,
    use_json: bool = False,
) -> ExchangeLogger:
    """
    Get or create the global logger instance.
    
    Args:
        name: Logger name
        log_level: Logging level
        log_dir: Directory for log files
        use_json: Use JSON formatting
        
    Returns:
        ExchangeLogger instance
    """
    global _logger
    
    if _logger is None:
        _logger = ExchangeLogger(name, log_level, log_dir, use_json)
    
    return _logger
