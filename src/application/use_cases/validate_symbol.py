"""
Use-case: check a symbol against the catalog and attach a live quote.
Depends only on application services and other use-cases.
"""

import logging

from src.application.services.instrument_catalog import InstrumentCatalog
from src.application.use_cases.get_market_data import GetMarketDataUseCase
from src.domain.errors import MarketDataError

logger = logging.getLogger(__name__)


class ValidateSymbolUseCase:
    def __init__(self, catalog: InstrumentCatalog, market_data: GetMarketDataUseCase) -> None:
        self._catalog = catalog
        self._market_data = market_data

    def execute(self, symbol: str) -> dict:
        """Return a validation report for *symbol*.

        Shapes:
            {"valid": False, "symbol", "message"} when not in the catalog;
            {"valid": True, "symbol", "marketData", "source"[, "warning"]} otherwise.
        """
        instrument = self._catalog.lookup(symbol)
        if instrument is None:
            return {
                "valid": False,
                "symbol": symbol,
                "message": "Symbol not found in database",
            }
        try:
            quote = self._market_data.execute(instrument.symbol)
        except MarketDataError as exc:
            logger.warning("No live quote while validating %s: %s", instrument.symbol, exc.reason)
            return {
                "valid": True,
                "symbol": instrument.to_dict(),
                "marketData": None,
                "source": "database",
                "warning": "Market data unavailable",
            }
        return {
            "valid": True,
            "symbol": instrument.to_dict(),
            "marketData": quote.to_wire(),
            "source": "database+yahoo",
        }
