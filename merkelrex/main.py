"""
FastAPI Application - Main Entry Point

REST API for the exchange simulator.
"""

import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from merkelrex import __version__
from merkelrex.config import get_settings
from merkelrex.core.exchange import Exchange
from merkelrex.services.order_service import OrderService
from merkelrex.services.market_data_service import MarketDataService
from merkelrex.utils.exceptions import BaseExchangeException, SettlementException

# Import routers
from merkelrex.api.routes import orders, market_data
from merkelrex.api.models import HealthResponse, ErrorResponse

# Configure logging
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
# basicConfig leaves an already configured root logger alone
logging.getLogger("merkelrex").setLevel(get_settings().log_level.upper())
logger = logging.getLogger(__name__)

# Global instances
exchange: Exchange = None
order_service: OrderService = None
market_data_service: MarketDataService = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    
    Creates a freshly seeded exchange and its services on startup.
    """
    global exchange, order_service, market_data_service
    
    logger.info("Starting exchange simulator API")
    
    exchange = Exchange(settings=get_settings())
    order_service = OrderService(exchange)
    market_data_service = MarketDataService(exchange)
    
    # Set service instances in routers
    orders.set_order_service(order_service)
    market_data.set_market_data_service(market_data_service)
    
    logger.info(f"API startup complete, simulated time {exchange.current_time}")
    
    yield
    
    logger.info("API shutdown complete!")


# Create FastAPI application
app = FastAPI(
    title="MerkelRex Exchange Simulator API",
    description="""
    Step-driven exchange simulator with price-time priority matching
    and wallet settlement for one simulated participant.
    
    ## Endpoints
    * **POST /api/v1/orders/ask**: Make an offer (sell)
    * **POST /api/v1/orders/bid**: Make a bid (buy)
    * **POST /api/v1/orders/line**: Place an order typed as product,price,amount
    * **GET /api/v1/wallet**: Print wallet
    * **GET /api/v1/stats**: Print exchange stats
    * **POST /api/v1/time/next**: Continue to the next time step
    """,
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)


# Request ID middleware
@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add unique request ID to each request for tracking."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    
    logger.info(f"Request [{request_id}]: {request.method} {request.url.path}")
    
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    
    logger.info(f"Response [{request_id}]: {response.status_code}")
    
    return response


def _error_response(status_code: int, error: str, message: str, detail: str = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=error,
            message=message,
            detail=detail,
            timestamp=datetime.now(timezone.utc)
        ).model_dump(mode='json')
    )


# Exception handlers
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors."""
    request_id = getattr(request.state, "request_id", "unknown")
    logger.warning(f"Validation error [{request_id}]: {exc.errors()}")
    
    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "ValidationError",
        "Request validation failed",
        str(exc.errors()),
    )


@app.exception_handler(SettlementException)
async def settlement_exception_handler(request: Request, exc: SettlementException):
    """Settlement failures mean the book and the wallet disagree."""
    request_id = getattr(request.state, "request_id", "unknown")
    logger.critical(f"Settlement failure [{request_id}]: {exc.message} {exc.details}")
    
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "SettlementException",
        exc.message,
        "Contact support with request ID: " + request_id,
    )


@app.exception_handler(BaseExchangeException)
async def exchange_exception_handler(request: Request, exc: BaseExchangeException):
    """Handle domain exceptions not converted by a route."""
    request_id = getattr(request.state, "request_id", "unknown")
    logger.warning(f"{type(exc).__name__} [{request_id}]: {exc.message}")
    
    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        type(exc).__name__,
        exc.message,
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions."""
    request_id = getattr(request.state, "request_id", "unknown")
    logger.error(f"Unhandled exception [{request_id}]: {str(exc)}", exc_info=True)
    
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "InternalServerError",
        "An internal error occurred",
        "Contact support with request ID: " + request_id,
    )


# Health check endpoint
@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
)
async def health_check() -> HealthResponse:
    """Service status and exchange statistics."""
    stats = exchange.get_statistics() if exchange else {}
    
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        exchange=stats
    )


# Include routers
app.include_router(orders.router)
app.include_router(market_data.router)


# Root endpoint
@app.get("/", tags=["root"])
async def root():
    """Root endpoint with API information."""
    return {
        "name": "MerkelRex Exchange Simulator API",
        "version": __version__,
        "status": "operational",
        "docs": "/docs",
        "health": "/health"
    }


def run() -> None:
    """Run the API server with uvicorn."""
    import uvicorn
    
    settings = get_settings()
    uvicorn.run(
        "merkelrex.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    run()
