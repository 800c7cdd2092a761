"""
Application service: access to the local instrument catalog.

Owns the reload policy for the parsed catalog:
  - "reload_every_call": every load() re-reads the source, so edits to the
    snapshot file are picked up without a restart.
  - "cache": the first successful load is kept until invalidate().

The source is injected (IInstrumentSource); no file or JSON handling here.
"""

import logging
from typing import Optional

from src.domain.entities.instrument import Catalog, Instrument
from src.domain.ports.instrument_source_port import IInstrumentSource
from src.domain.services.asset_classifier import expected_price_range

logger = logging.getLogger(__name__)

RELOAD_EVERY_CALL = "reload_every_call"
CACHE = "cache"


class InstrumentCatalog:
    PROMPT_LIMIT: int = 50
    SEARCH_LIMIT: int = 10

    def __init__(self, source: IInstrumentSource, reload_policy: str = RELOAD_EVERY_CALL) -> None:
        if reload_policy not in (RELOAD_EVERY_CALL, CACHE):
            raise ValueError(f"Unknown catalog reload policy: {reload_policy!r}")
        self._source = source
        self._reload_policy = reload_policy
        self._cached: Optional[Catalog] = None

    @property
    def reload_policy(self) -> str:
        return self._reload_policy

    def load(self) -> Optional[Catalog]:
        """Return the catalog, or None when it is unavailable."""
        if self._reload_policy == CACHE and self._cached is not None:
            return self._cached
        catalog = self._source.load()
        if catalog is None:
            logger.warning("Instrument catalog unavailable, continuing without it")
        elif self._reload_policy == CACHE:
            self._cached = catalog
        return catalog

    def invalidate(self) -> None:
        self._cached = None

    @staticmethod
    def find(catalog: Optional[Catalog], symbol: str) -> Optional[Instrument]:
        if catalog is None:
            return None
        return catalog.find(symbol)

    @staticmethod
    def format(catalog: Optional[Catalog], limit: int = PROMPT_LIMIT) -> str:
        """Compact inventory of the first *limit* instruments for the prompt."""
        if not catalog:
            return ""
        return "\n".join(_format_entry(i) for i in catalog.instruments[:limit])

    def instruments(self, category: Optional[str] = None) -> list[Instrument]:
        catalog = self.load()
        if catalog is None:
            return []
        if category:
            return [i for i in catalog.instruments if i.category == category]
        return list(catalog.instruments)

    def search(self, query: str, limit: int = SEARCH_LIMIT) -> list[Instrument]:
        """Symbol or name substring match, case-insensitive."""
        needle = query.lower()
        matches = [
            i for i in self.instruments()
            if needle in i.symbol.lower() or needle in i.name.lower()
        ]
        return matches[:limit]

    def lookup(self, text: str) -> Optional[Instrument]:
        """Loose lookup used for symbol validation: symbol match, then name substring."""
        needle = text.lower()
        instruments = self.instruments()
        exact = next((i for i in instruments if i.symbol.lower() == needle), None)
        if exact is not None:
            return exact
        return next((i for i in instruments if needle in i.name.lower()), None)


def _na(value) -> str:
    return "N/A" if value is None else str(value)


def _format_entry(instrument: Instrument) -> str:
    if instrument.bid and instrument.ask:
        quoted = f"{instrument.bid} - {instrument.ask}"
    else:
        quoted = _na(instrument.bid or instrument.ask)
    asset_name = (
        instrument.blockchain
        or instrument.symbol
        or instrument.name.split(" - ")[0]
    )
    return (
        f"- {instrument.symbol}: {asset_name}\n"
        f"  * Category: {instrument.category or 'N/A'}\n"
        f"  * Current price: {quoted}\n"
        f"  * Expected range: {expected_price_range(instrument)}\n"
        f"  * Digits: {_na(instrument.digits)}, Tick size: {_na(instrument.tick_size)}"
    )
