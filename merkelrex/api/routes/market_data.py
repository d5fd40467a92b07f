"""
REST API endpoints for market data and the simulation clock.

Provides endpoints for products, per-instant order snapshots, statistics,
recent sales and the time-step action.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Query, status

from merkelrex.api.models import (
    EntryResponse,
    MarketStatsResponse,
    OrderBookResponse,
    ProductsResponse,
    ProductStatsResponse,
    TimeResponse,
    TimeStepResponse,
    TradesResponse,
)
from merkelrex.core.entry import OrderBookType
from merkelrex.services.market_data_service import MarketDataService

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix="/api/v1", tags=["market-data"])


# Dependency injection for MarketDataService
_market_data_service: MarketDataService = None


def get_market_data_service() -> MarketDataService:
    """Dependency to get MarketDataService instance."""
    if _market_data_service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Market data service not initialized"
        )
    return _market_data_service


def set_market_data_service(service: MarketDataService) -> None:
    """Set the global MarketDataService instance."""
    global _market_data_service
    _market_data_service = service


@router.get("/products", response_model=ProductsResponse, summary="Known products")
async def get_products(
    service: MarketDataService = Depends(get_market_data_service)
) -> ProductsResponse:
    return ProductsResponse(products=service.get_products())


@router.get("/time", response_model=TimeResponse, summary="Current simulated time")
async def get_time(
    service: MarketDataService = Depends(get_market_data_service)
) -> TimeResponse:
    return TimeResponse(current_time=service.get_current_time())


@router.post(
    "/time/next",
    response_model=TimeStepResponse,
    summary="Continue to the next time step",
)
async def next_time_step(
    service: MarketDataService = Depends(get_market_data_service)
) -> TimeStepResponse:
    """
    Match every product at the current time, settle the simulated
    participant's sales and advance the clock.
    
    After the last time step the clock wraps around to the first.
    """
    result = service.advance_time()
    return TimeStepResponse.from_result(result)


@router.get(
    "/stats",
    response_model=MarketStatsResponse,
    summary="Print exchange stats",
)
async def get_stats(
    service: MarketDataService = Depends(get_market_data_service)
) -> MarketStatsResponse:
    """Ask and bid counts and price range per product at the current time."""
    stats = service.get_market_stats()
    return MarketStatsResponse(
        timestamp=service.get_current_time(),
        products=[ProductStatsResponse.from_stats(s) for s in stats],
    )


@router.get(
    "/orderbook/{base}/{quote}",
    response_model=OrderBookResponse,
    summary="Orders for a product at the current time",
    responses={404: {"description": "Product not found"}},
)
async def get_orderbook(
    base: str,
    quote: str,
    side: Optional[str] = Query(default=None, pattern="^(ask|bid)$", description="List one side only"),
    service: MarketDataService = Depends(get_market_data_service)
) -> OrderBookResponse:
    """
    Get the asks and bids of a product at the current time.
    
    **Query Parameters:**
    - `side`: ask or bid to list one side only (both when omitted)
    
    **Example:**
    ```
    GET /api/v1/orderbook/BTC/USDT?side=bid
    ```
    """
    product = f"{base}{service.exchange.settings.product_separator}{quote}"
    if product not in service.get_products():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown product {product}"
        )
    
    logger.debug(f"Getting order book snapshot for {product}")
    snapshot = service.get_order_book_snapshot(
        product, OrderBookType(side) if side else None
    )
    
    return OrderBookResponse(
        product=snapshot["product"],
        timestamp=snapshot["timestamp"],
        asks=[EntryResponse.from_entry(e) for e in snapshot["asks"]],
        bids=[EntryResponse.from_entry(e) for e in snapshot["bids"]],
    )


@router.get("/trades", response_model=TradesResponse, summary="Recent sales")
async def get_trades(
    limit: int = Query(default=50, ge=1, le=1000, description="Number of sales to return"),
    service: MarketDataService = Depends(get_market_data_service)
) -> TradesResponse:
    trades = service.get_recent_trades(limit)
    return TradesResponse(trades=[EntryResponse.from_entry(t) for t in trades])
