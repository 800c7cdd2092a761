"""
Domain entities for the local instrument catalog.
Zero external dependencies: pure Python dataclasses only.

A Catalog is always the normalized, ordered list of instruments regardless of
which on-disk shape it was read from; `structure` records that shape for
provenance only.
"""

from dataclasses import dataclass
from typing import Optional

STRUCTURE_CATEGORIES = "categories"
STRUCTURE_FLAT = "flat_array"


@dataclass(frozen=True)
class Instrument:
    symbol: str
    name: str = ""
    category: str = ""
    bid: Optional[float] = None
    ask: Optional[float] = None
    digits: Optional[int] = None
    tick_size: Optional[float] = None
    blockchain: Optional[str] = None

    @property
    def mid_price(self) -> Optional[float]:
        """Bid/ask midpoint, or the single side present, or None."""
        if self.bid and self.ask:
            return (self.bid + self.ask) / 2
        return self.bid or self.ask or None

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "name": self.name,
            "category": self.category,
            "bid": self.bid,
            "ask": self.ask,
            "digits": self.digits,
            "tickSize": self.tick_size,
            "blockchain": self.blockchain,
        }


@dataclass(frozen=True)
class Catalog:
    instruments: tuple[Instrument, ...]
    structure: str

    def __len__(self) -> int:
        return len(self.instruments)

    def find(self, symbol: str) -> Optional[Instrument]:
        """Exact, case-insensitive symbol match."""
        if not symbol:
            return None
        target = symbol.upper()
        return next(
            (i for i in self.instruments if i.symbol.upper() == target),
            None,
        )
