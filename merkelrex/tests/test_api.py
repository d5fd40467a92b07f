"""
API integration tests for the FastAPI endpoints.

Each test gets a fresh client, and the lifespan seeds a fresh exchange.
"""

import logging
import pytest
from decimal import Decimal
from fastapi.testclient import TestClient

from merkelrex.main import app


@pytest.fixture
def test_client():
    """Create a test client with services initialized."""
    with TestClient(app) as client:
        yield client


class TestHealthEndpoint:
    
    def test_health_check(self, test_client):
        response = test_client.get("/health")
        assert response.status_code == 200
        
        data = response.json()
        assert data["status"] == "healthy"
        assert data["exchange"]["current_time"] == "2020/03/17 17:01:24"
    
    def test_root(self, test_client):
        response = test_client.get("/")
        assert response.status_code == 200
        assert response.headers["X-Request-ID"]
    
    def test_requests_are_logged(self, test_client, caplog):
        assert logging.getLogger("merkelrex.main").isEnabledFor(logging.INFO)
        
        response = test_client.get("/health")
        request_id = response.headers["X-Request-ID"]
        
        messages = [r.getMessage() for r in caplog.records if r.name == "merkelrex.main"]
        assert f"Request [{request_id}]: GET /health" in messages
        assert f"Response [{request_id}]: 200" in messages


class TestOrderEndpoints:
    
    def test_submit_ask(self, test_client):
        response = test_client.post(
            "/api/v1/orders/ask",
            json={"product": "BTC/USDT", "price": "10000", "amount": "0.5"},
        )
        assert response.status_code == 201
        
        data = response.json()
        assert data["accepted"] is True
        assert data["message"] == "Wallet looks good."
        assert data["entry"]["order_type"] == "ask"
        assert data["entry"]["username"] == "simuser"
    
    def test_submit_bid_insufficient_funds(self, test_client):
        response = test_client.post(
            "/api/v1/orders/bid",
            json={"product": "BTC/USDT", "price": "10000", "amount": "100"},
        )
        assert response.status_code == 409
    
    def test_submit_invalid_product(self, test_client):
        response = test_client.post(
            "/api/v1/orders/bid",
            json={"product": "BTCUSDT", "price": "10000", "amount": "1"},
        )
        assert response.status_code == 422
    
    def test_submit_negative_amount(self, test_client):
        response = test_client.post(
            "/api/v1/orders/ask",
            json={"product": "BTC/USDT", "price": "10000", "amount": "-1"},
        )
        assert response.status_code == 422
    
    def test_submit_line(self, test_client):
        response = test_client.post(
            "/api/v1/orders/line",
            json={"order_type": "bid", "line": "ETH/USDT,200,10"},
        )
        assert response.status_code == 201
        assert response.json()["entry"]["product"] == "ETH/USDT"
    
    def test_submit_bad_line(self, test_client):
        response = test_client.post(
            "/api/v1/orders/line",
            json={"order_type": "bid", "line": "ETH/USDT,200"},
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Bad input!"
    
    def test_wallet(self, test_client):
        response = test_client.get("/api/v1/wallet")
        assert response.status_code == 200
        
        data = response.json()
        assert data["owner"] == "simuser"
        assert Decimal(data["balances"]["BTC"]) == Decimal("10")
        assert Decimal(data["balances"]["USDT"]) == Decimal("100000")


class TestMarketDataEndpoints:
    
    def test_products(self, test_client):
        response = test_client.get("/api/v1/products")
        assert response.json()["products"] == ["BTC/USDT", "ETH/USDT"]
    
    def test_time(self, test_client):
        response = test_client.get("/api/v1/time")
        assert response.json()["current_time"] == "2020/03/17 17:01:24"
    
    def test_stats(self, test_client):
        response = test_client.get("/api/v1/stats")
        assert response.status_code == 200
        
        products = {p["product"]: p for p in response.json()["products"]}
        assert products["BTC/USDT"]["ask_count"] == 1
        assert Decimal(products["BTC/USDT"]["max_ask"]) == Decimal("10500")
        assert products["ETH/USDT"]["max_ask"] is None
    
    def test_orderbook(self, test_client):
        response = test_client.get("/api/v1/orderbook/BTC/USDT")
        assert response.status_code == 200
        
        data = response.json()
        assert [Decimal(b["price"]) for b in data["bids"]] == [Decimal("10100"), Decimal("10000")]
        assert len(data["asks"]) == 1
    
    def test_orderbook_asks_only(self, test_client):
        response = test_client.get("/api/v1/orderbook/BTC/USDT", params={"side": "ask"})
        assert response.status_code == 200
        
        data = response.json()
        assert [Decimal(a["price"]) for a in data["asks"]] == [Decimal("10500")]
        assert data["bids"] == []
    
    def test_orderbook_bids_only(self, test_client):
        response = test_client.get("/api/v1/orderbook/BTC/USDT", params={"side": "bid"})
        assert response.status_code == 200
        
        data = response.json()
        assert [Decimal(b["price"]) for b in data["bids"]] == [Decimal("10100"), Decimal("10000")]
        assert data["asks"] == []
    
    def test_orderbook_invalid_side(self, test_client):
        response = test_client.get("/api/v1/orderbook/BTC/USDT", params={"side": "asksale"})
        assert response.status_code == 422
    
    def test_orderbook_unknown_product(self, test_client):
        response = test_client.get("/api/v1/orderbook/DOGE/USDT")
        assert response.status_code == 404
    
    def test_trade_cycle(self, test_client):
        test_client.post(
            "/api/v1/orders/ask",
            json={"product": "BTC/USDT", "price": "10000", "amount": "0.5"},
        )
        
        response = test_client.post("/api/v1/time/next")
        assert response.status_code == 200
        
        data = response.json()
        assert data["previous_time"] == "2020/03/17 17:01:24"
        assert data["current_time"] == "2020/03/17 17:01:30"
        assert len(data["sales"]["BTC/USDT"]) == 1
        assert data["sales"]["BTC/USDT"][0]["order_type"] == "asksale"
        
        balances = test_client.get("/api/v1/wallet").json()["balances"]
        assert Decimal(balances["BTC"]) == Decimal("9.5")
        assert Decimal(balances["USDT"]) == Decimal("105000")
        
        trades = test_client.get("/api/v1/trades").json()["trades"]
        assert len(trades) == 1
    
    def test_time_wraps_around(self, test_client):
        test_client.post("/api/v1/time/next")
        response = test_client.post("/api/v1/time/next")
        assert response.json()["current_time"] == "2020/03/17 17:01:24"
