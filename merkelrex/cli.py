"""
Interactive trading menu.

Reads menu choices and order lines from the console and drives an Exchange,
one time step at a time.
"""

from typing import Callable, Optional

from merkelrex.core.entry import OrderBookType
from merkelrex.core.exchange import Exchange


MENU_HELP = 1
MENU_STATS = 2
MENU_ASK = 3
MENU_BID = 4
MENU_WALLET = 5
MENU_NEXT = 6


class MerkelMain:
    """
    Console front end for the exchange.
    
    ``read`` and ``write`` default to ``input`` and ``print`` and can be
    replaced to script a session.
    """
    
    def __init__(
        self,
        exchange: Optional[Exchange] = None,
        read: Callable[[str], str] = input,
        write: Callable[[str], None] = print,
    ):
        self.exchange = exchange or Exchange()
        self.read = read
        self.write = write
    
    def init(self) -> None:
        """Run the menu loop until input ends."""
        try:
            while True:
                self.print_menu()
                self.process_user_option(self.get_user_option())
        except (EOFError, KeyboardInterrupt):
            self.write("Goodbye.")
    
    def print_menu(self) -> None:
        self.write("=" * 40)
        self.write("MERKEL REX TRADING PLATFORM")
        self.write(f"Current Time: {self.exchange.current_time}")
        self.write("=" * 40)
        self.write("1: Print help")
        self.write("2: Print exchange stats")
        self.write("3: Make an offer (Sell)")
        self.write("4: Make a bid (Buy)")
        self.write("5: Print wallet")
        self.write("6: Continue (Next Time Step)")
        self.write("=" * 40)
    
    def get_user_option(self) -> int:
        """Read a menu choice; anything that is not an integer becomes 0."""
        line = self.read("Type in 1-6: ")
        try:
            return int(line.strip())
        except ValueError:
            return 0
    
    def process_user_option(self, option: int) -> None:
        """Dispatch a menu choice; unknown choices are ignored."""
        actions = {
            MENU_HELP: self.print_help,
            MENU_STATS: self.print_market_stats,
            MENU_ASK: self.enter_ask,
            MENU_BID: self.enter_bid,
            MENU_WALLET: self.print_wallet,
            MENU_NEXT: self.goto_next_timeframe,
        }
        action = actions.get(option)
        if action is not None:
            action()
    
    def print_help(self) -> None:
        self.write("Help - Your aim is to make money. Analyze the market and trade.")
    
    def print_market_stats(self) -> None:
        for stats in self.exchange.market_stats():
            self.write(f"Product: {stats.product}")
            if stats.ask_count:
                self.write(f"  Asks seen: {stats.ask_count}")
                self.write(f"  Max ask: {stats.max_ask}")
                self.write(f"  Min ask: {stats.min_ask}")
            else:
                self.write("  No Asks")
            if stats.bid_count:
                self.write(f"  Bids seen: {stats.bid_count}")
                self.write(f"  Max bid: {stats.max_bid}")
                self.write(f"  Min bid: {stats.min_bid}")
            else:
                self.write("  No Bids")
    
    def enter_ask(self) -> None:
        self.write("Make an ask - enter the amount: product,price,amount, eg ETH/BTC,200,0.5")
        result = self.exchange.enter_order_line(OrderBookType.ASK, self.read(""))
        self.write(result.message)
    
    def enter_bid(self) -> None:
        self.write("Make a bid - enter the amount: product,price,amount, eg ETH/BTC,200,0.5")
        result = self.exchange.enter_order_line(OrderBookType.BID, self.read(""))
        self.write(result.message)
    
    def print_wallet(self) -> None:
        balances = self.exchange.wallet_balances()
        self.write("".join(f"{currency} : {amount}\n" for currency, amount in balances.items()))
    
    def goto_next_timeframe(self) -> None:
        self.write("Going to next time frame...")
        result = self.exchange.goto_next_timeframe()
        for product, sales in result.sales.items():
            self.write(f"Matching {product}")
            self.write(f"Sales: {len(sales)}")
            for sale in sales:
                self.write(f"Sale price: {sale.price} amount {sale.amount}")


def main() -> None:
    MerkelMain().init()


if __name__ == "__main__":
    main()
