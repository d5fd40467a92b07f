"""
REST API endpoints for order entry and the wallet.

Provides endpoints for placing asks and bids for the simulated participant
and for reading its balances.
"""

import logging

from fastapi import APIRouter, HTTPException, Depends, status

from merkelrex.api.models import (
    OrderRequest,
    OrderLineRequest,
    OrderResponse,
    WalletResponse,
    ErrorResponse,
)
from merkelrex.core.entry import OrderBookType
from merkelrex.services.order_service import OrderService
from merkelrex.utils.exceptions import (
    InsufficientFundsException,
    MalformedInputException,
)

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix="/api/v1", tags=["orders"])


# Dependency injection for OrderService
# This will be overridden in main.py with actual instance
_order_service: OrderService = None


def get_order_service() -> OrderService:
    """Dependency to get OrderService instance."""
    if _order_service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Order service not initialized"
        )
    return _order_service


def set_order_service(service: OrderService) -> None:
    """Set the global OrderService instance."""
    global _order_service
    _order_service = service


ORDER_RESPONSES = {
    201: {"description": "Order placed in the book", "model": OrderResponse},
    400: {"description": "Malformed order", "model": ErrorResponse},
    409: {"description": "Wallet has insufficient funds", "model": ErrorResponse},
    503: {"description": "Service unavailable"},
}


def _place_order(
    order_service: OrderService,
    order_type: OrderBookType,
    order_request: OrderRequest,
) -> OrderResponse:
    try:
        logger.info(
            f"Received {order_type.value} request: {order_request.amount} "
            f"{order_request.product} @ {order_request.price}"
        )
        result = order_service.submit_order(order_type, **order_request.to_order_params())
        return OrderResponse.from_order_result(result)
        
    except InsufficientFundsException as e:
        logger.warning(f"Insufficient funds: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )
    except MalformedInputException as e:
        logger.warning(f"Malformed order: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.post(
    "/orders/ask",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Make an offer (sell)",
    responses=ORDER_RESPONSES,
)
async def submit_ask(
    order_request: OrderRequest,
    order_service: OrderService = Depends(get_order_service)
) -> OrderResponse:
    """
    Offer to sell the base currency of a product at the current time.
    
    The wallet must hold `amount` of the base currency.
    """
    return _place_order(order_service, OrderBookType.ASK, order_request)


@router.post(
    "/orders/bid",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Make a bid (buy)",
    responses=ORDER_RESPONSES,
)
async def submit_bid(
    order_request: OrderRequest,
    order_service: OrderService = Depends(get_order_service)
) -> OrderResponse:
    """
    Bid to buy the base currency of a product at the current time.
    
    The wallet must hold `amount * price` of the quote currency.
    """
    return _place_order(order_service, OrderBookType.BID, order_request)


@router.post(
    "/orders/line",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Place an order typed as product,price,amount",
    responses=ORDER_RESPONSES,
)
async def submit_order_line(
    order_request: OrderLineRequest,
    order_service: OrderService = Depends(get_order_service)
) -> OrderResponse:
    """
    Place an order from a single text line.
    
    **Example:**
    ```json
    {"order_type": "bid", "line": "ETH/USDT,200,0.5"}
    ```
    """
    order_type = OrderBookType(order_request.order_type)
    
    try:
        result = order_service.submit_order_line(order_type, order_request.line)
        return OrderResponse.from_order_result(result)
        
    except MalformedInputException as e:
        logger.warning(f"Bad input: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Bad input!"
        )
    except InsufficientFundsException as e:
        logger.warning(f"Insufficient funds: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )


@router.get(
    "/wallet",
    response_model=WalletResponse,
    summary="Print wallet",
)
async def get_wallet(
    order_service: OrderService = Depends(get_order_service)
) -> WalletResponse:
    """Balances of the simulated participant."""
    balances = order_service.get_wallet()
    return WalletResponse(
        owner=order_service.exchange.simulated_user,
        balances={currency: str(amount) for currency, amount in balances.items()},
    )
