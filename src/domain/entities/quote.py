"""
Domain entities for market quotes and price history.
Zero external dependencies: pure Python dataclasses only.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Quote:
    symbol: str
    yahoo_symbol: str
    price: float
    bid: float
    ask: float
    change: float
    change_percent: float
    digits: int
    spread: float
    tick_size: float
    timestamp: int
    currency: str
    market_state: str

    def to_wire(self) -> dict:
        """Serialize using the camelCase field names clients expect."""
        return {
            "symbol": self.symbol,
            "yahooSymbol": self.yahoo_symbol,
            "price": self.price,
            "bid": self.bid,
            "ask": self.ask,
            "change": self.change,
            "changePercent": self.change_percent,
            "digits": self.digits,
            "spread": self.spread,
            "tickSize": self.tick_size,
            "timestamp": self.timestamp,
            "currency": self.currency,
            "marketState": self.market_state,
        }


@dataclass(frozen=True)
class HistoricalRecord:
    date: str
    open: float
    high: float
    low: float
    close: float
    volume: int


@dataclass(frozen=True)
class HistoricalPrices:
    symbol: str
    period: str
    interval: str
    records: list[HistoricalRecord]
