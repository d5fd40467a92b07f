"""
Pydantic models for API request/response validation.

This module defines all data models used by the REST API, ensuring type
safety and validation at the HTTP boundary.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ConfigDict

from merkelrex.core.entry import OrderBookEntry
from merkelrex.core.exchange import OrderResult, ProductStats, TimeStepResult


# ============================================================================
# Request Models
# ============================================================================

class OrderRequest(BaseModel):
    """Request model for placing an ask or a bid."""
    
    model_config = ConfigDict(json_schema_extra={
        "example": {
            "product": "ETH/USDT",
            "price": "200",
            "amount": "0.5"
        }
    })
    
    product: str = Field(
        ...,
        description="Product code BASE/QUOTE (e.g., ETH/USDT)",
        min_length=3,
        max_length=20,
        pattern=r'^[A-Z0-9]+/[A-Z0-9]+$'
    )
    price: str = Field(
        ...,
        description="Limit price as decimal string",
        pattern=r'^\d+(\.\d+)?$'
    )
    amount: str = Field(
        ...,
        description="Amount of the base currency as decimal string",
        pattern=r'^\d+(\.\d+)?$'
    )
    
    def to_order_params(self) -> Dict[str, Any]:
        """Convert to keyword arguments for OrderService.submit_order."""
        return {
            "product": self.product,
            "price": Decimal(self.price),
            "amount": Decimal(self.amount),
        }


class OrderLineRequest(BaseModel):
    """Request model for an order typed as a single line."""
    
    model_config = ConfigDict(json_schema_extra={
        "example": {"order_type": "ask", "line": "ETH/USDT,200,0.5"}
    })
    
    order_type: str = Field(
        ...,
        description="Order type: ask or bid",
        pattern=r'^(ask|bid)$'
    )
    line: str = Field(..., description="product,price,amount", max_length=200)


# ============================================================================
# Response Models
# ============================================================================

class EntryResponse(BaseModel):
    """Response model for an order or a sale."""
    
    price: str = Field(..., description="Limit or execution price")
    amount: str = Field(..., description="Amount of the base currency")
    timestamp: str = Field(..., description="Simulated time step")
    product: str = Field(..., description="Product code")
    order_type: str = Field(..., description="bid/ask/asksale/bidsale")
    username: str = Field(..., description="Owner of the entry")
    
    @classmethod
    def from_entry(cls, entry: OrderBookEntry) -> 'EntryResponse':
        """Create from OrderBookEntry object."""
        return cls(**entry.to_dict())


class OrderResponse(BaseModel):
    """Response model for order entry."""
    
    accepted: bool = Field(..., description="Whether the order entered the book")
    message: str = Field(..., description="Outcome message")
    entry: Optional[EntryResponse] = Field(None, description="The order placed")
    
    @classmethod
    def from_order_result(cls, result: OrderResult) -> 'OrderResponse':
        """Create from OrderResult object."""
        return cls(
            accepted=result.accepted,
            message=result.message,
            entry=EntryResponse.from_entry(result.entry) if result.entry else None,
        )


class WalletResponse(BaseModel):
    """Response model for wallet balances."""
    
    owner: str = Field(..., description="Wallet owner")
    balances: Dict[str, str] = Field(..., description="Balance per currency")


class ProductStatsResponse(BaseModel):
    """Order counts and price range of one product."""
    
    product: str
    ask_count: int
    max_ask: Optional[str] = None
    min_ask: Optional[str] = None
    bid_count: int
    max_bid: Optional[str] = None
    min_bid: Optional[str] = None
    
    @classmethod
    def from_stats(cls, stats: ProductStats) -> 'ProductStatsResponse':
        def fmt(value: Optional[Decimal]) -> Optional[str]:
            return str(value) if value is not None else None
        
        return cls(
            product=stats.product,
            ask_count=stats.ask_count,
            max_ask=fmt(stats.max_ask),
            min_ask=fmt(stats.min_ask),
            bid_count=stats.bid_count,
            max_bid=fmt(stats.max_bid),
            min_bid=fmt(stats.min_bid),
        )


class MarketStatsResponse(BaseModel):
    """Response model for exchange statistics at the current time."""
    
    timestamp: str = Field(..., description="Current simulated time")
    products: List[ProductStatsResponse]


class OrderBookResponse(BaseModel):
    """Response model for the orders of a product at the current time."""
    
    product: str = Field(..., description="Product code")
    timestamp: str = Field(..., description="Current simulated time")
    asks: List[EntryResponse] = Field(..., description="Asks, cheapest first")
    bids: List[EntryResponse] = Field(..., description="Bids, most expensive first")


class ProductsResponse(BaseModel):
    products: List[str]


class TimeResponse(BaseModel):
    current_time: str = Field(..., description="Current simulated time")


class TimeStepResponse(BaseModel):
    """Response model for a time step."""
    
    previous_time: str = Field(..., description="Time step that was matched")
    current_time: str = Field(..., description="New current time")
    sales: Dict[str, List[EntryResponse]] = Field(..., description="Sales per product")
    
    @classmethod
    def from_result(cls, result: TimeStepResult) -> 'TimeStepResponse':
        """Create from TimeStepResult object."""
        return cls(
            previous_time=result.previous_time,
            current_time=result.current_time,
            sales={
                product: [EntryResponse.from_entry(sale) for sale in sales]
                for product, sales in result.sales.items()
            },
        )


class TradesResponse(BaseModel):
    trades: List[EntryResponse]


class HealthResponse(BaseModel):
    """Response model for health check."""
    
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Check timestamp")
    version: str = Field(..., description="API version")
    exchange: Dict[str, Any] = Field(..., description="Exchange statistics")


class ErrorResponse(BaseModel):
    """Response model for errors."""
    
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Additional error details")
    timestamp: datetime = Field(..., description="Error timestamp")
