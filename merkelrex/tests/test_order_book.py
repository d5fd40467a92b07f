"""
Unit tests for order book storage and queries

Covers product listing, per-instant queries, price aggregates, the time cursor
(including wrap-around) and insertion ordering.
"""

import pytest
from decimal import Decimal

from merkelrex.core.entry import OrderBookEntry, OrderBookType
from merkelrex.core.order_book import OrderBook
from merkelrex.core.seed import load_seed_orders
from merkelrex.utils.exceptions import EmptyQuerySetException, OrderBookException


T1 = "2020/03/17 17:01:24"
T2 = "2020/03/17 17:01:30"


@pytest.fixture
def book():
    return OrderBook(load_seed_orders())


def make_entry(price, amount, timestamp=T1, product="BTC/USDT",
               order_type=OrderBookType.BID, username="dataset"):
    return OrderBookEntry(Decimal(price), Decimal(amount), timestamp, product, order_type, username)


class TestOrderBookEntry:
    """Test cases for OrderBookEntry."""
    
    def test_defaults_to_dataset_owner(self):
        entry = make_entry("100", "1")
        assert entry.username == "dataset"
    
    def test_amount_is_mutable(self):
        entry = make_entry("100", "1")
        entry.amount = Decimal("0")
        assert entry.is_consumed
    
    def test_other_fields_are_read_only(self):
        entry = make_entry("100", "1")
        with pytest.raises(AttributeError):
            entry.price = Decimal("1")
        with pytest.raises(AttributeError):
            entry.timestamp = T2
    
    def test_negative_amount_rejected(self):
        with pytest.raises(ValueError):
            make_entry("100", "-1")
    
    def test_copy_is_independent(self):
        entry = make_entry("100", "1")
        clone = entry.copy()
        clone.amount = Decimal("0.25")
        assert entry.amount == Decimal("1")
        assert clone.price == entry.price
        assert clone.username == entry.username
    
    def test_sale_types(self):
        assert OrderBookType.ASKSALE.is_sale
        assert OrderBookType.BIDSALE.is_sale
        assert not OrderBookType.ASK.is_sale
        assert not OrderBookType.BID.is_sale


class TestOrderBookQueries:
    """Test cases for OrderBook queries."""
    
    def test_known_products_sorted(self, book):
        assert book.get_known_products() == ["BTC/USDT", "ETH/USDT"]
    
    def test_known_products_include_inserted(self, book):
        book.insert_order(make_entry("1", "1", product="ADA/USDT"))
        assert book.get_known_products() == ["ADA/USDT", "BTC/USDT", "ETH/USDT"]
    
    def test_get_orders_insertion_order(self, book):
        bids = book.get_orders(OrderBookType.BID, "BTC/USDT", T1)
        assert [b.price for b in bids] == [Decimal("10000"), Decimal("10100")]
    
    def test_get_orders_filters_all_keys(self, book):
        assert len(book.get_orders(OrderBookType.ASK, "BTC/USDT", T1)) == 1
        assert book.get_orders(OrderBookType.ASK, "BTC/USDT", T2) == []
        assert book.get_orders(OrderBookType.ASK, "ETH/USDT", T1) == []
        assert book.get_orders(OrderBookType.ASK, "DOGE/USDT", T1) == []
    
    def test_get_orders_returns_copies(self, book):
        bids = book.get_orders(OrderBookType.BID, "BTC/USDT", T1)
        bids[0].amount = Decimal("0")
        again = book.get_orders(OrderBookType.BID, "BTC/USDT", T1)
        assert again[0].amount == Decimal("0.5")
    
    def test_high_and_low_price(self, book):
        bids = book.get_orders(OrderBookType.BID, "BTC/USDT", T1)
        assert book.get_high_price(bids) == Decimal("10100")
        assert book.get_low_price(bids) == Decimal("10000")
    
    def test_high_price_of_nothing_fails(self, book):
        with pytest.raises(EmptyQuerySetException):
            book.get_high_price([])
    
    def test_low_price_of_nothing_fails(self, book):
        with pytest.raises(EmptyQuerySetException):
            book.get_low_price([])


class TestTimeCursor:
    """Test cases for the simulated clock."""
    
    def test_earliest_time(self, book):
        assert book.get_earliest_time() == T1
    
    def test_next_time(self, book):
        assert book.get_next_time(T1) == T2
    
    def test_next_time_wraps_around(self, book):
        assert book.get_next_time(T2) == T1
    
    def test_next_time_before_first_entry(self, book):
        assert book.get_next_time("2000/01/01 00:00:00") == T1
    
    def test_next_time_between_entries(self, book):
        assert book.get_next_time("2020/03/17 17:01:25") == T2
    
    def test_empty_book(self):
        book = OrderBook()
        with pytest.raises(OrderBookException):
            book.get_earliest_time()
        with pytest.raises(OrderBookException):
            book.get_next_time(T1)


class TestInsertOrder:
    """Test cases for order insertion."""
    
    def test_insert_keeps_chronological_order(self, book):
        book.insert_order(make_entry("1", "1", timestamp="2020/03/17 17:01:27"))
        assert book.get_next_time(T1) == "2020/03/17 17:01:27"
        assert book.get_next_time("2020/03/17 17:01:27") == T2
    
    def test_insert_earlier_entry_moves_start(self, book):
        book.insert_order(make_entry("1", "1", timestamp="2020/03/17 17:00:00"))
        assert book.get_earliest_time() == "2020/03/17 17:00:00"
        assert book.get_next_time(T2) == "2020/03/17 17:00:00"
    
    def test_equal_timestamps_keep_insertion_order(self, book):
        book.insert_order(make_entry("9000", "1"))
        book.insert_order(make_entry("9500", "2"))
        bids = book.get_orders(OrderBookType.BID, "BTC/USDT", T1)
        assert [b.price for b in bids] == [
            Decimal("10000"), Decimal("10100"), Decimal("9000"), Decimal("9500")
        ]
    
    def test_insert_grows_book(self, book):
        size = len(book)
        book.insert_order(make_entry("1", "1"))
        assert len(book) == size + 1
    
    def test_unsorted_initial_entries_are_sorted(self):
        book = OrderBook([
            make_entry("1", "1", timestamp=T2),
            make_entry("2", "1", timestamp=T1),
        ])
        assert book.get_earliest_time() == T1
