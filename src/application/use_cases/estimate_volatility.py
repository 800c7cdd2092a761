"""
Use-case: derive recent volatility conditions from daily price history.
Depends only on Domain ports, entities and services.

The resulting profile is advisory context for the analysis prompt; clients
fetch it separately and pass it back with the chart.
"""

import math
from statistics import mean, pstdev

from src.domain.entities.quote import HistoricalRecord
from src.domain.entities.volatility import VolatilityProfile
from src.domain.errors import MarketDataError
from src.domain.ports.market_data_port import IPriceHistoryProvider
from src.domain.services.asset_classifier import AssetClass, classify


def volatility_level(annualized: float) -> str:
    if annualized < 15:
        return "low"
    if annualized < 30:
        return "moderate"
    if annualized < 60:
        return "high"
    return "extreme"


def average_true_range(records: list[HistoricalRecord], period: int) -> float:
    ranges = [
        max(cur.high - cur.low, abs(cur.high - prev.close), abs(cur.low - prev.close))
        for prev, cur in zip(records, records[1:])
    ]
    return mean(ranges[-period:])


class EstimateVolatilityUseCase:
    PERIOD: str = "1mo"
    ATR_PERIOD: int = 14
    STOP_ATR_MULTIPLE: float = 1.5
    ENTRY_ATR_MULTIPLE: float = 0.5

    def __init__(self, history: IPriceHistoryProvider) -> None:
        self._history = history

    def execute(self, symbol: str) -> VolatilityProfile:
        """Estimate volatility for *symbol* from roughly 30 days of daily bars.

        Raises:
            ValueError: if *symbol* is blank.
            MarketDataError: if fewer than three bars are available.
        """
        if not symbol or not symbol.strip():
            raise ValueError("symbol must be a non-empty string")
        symbol = symbol.upper().strip()

        records = self._history.get_historical_prices(symbol, period=self.PERIOD).records
        if len(records) < 3:
            raise MarketDataError(symbol, "not enough price history to estimate volatility")

        closes = [r.close for r in records]
        returns = [cur / prev - 1 for prev, cur in zip(closes, closes[1:]) if prev]
        trading_days = 365 if classify(symbol) is AssetClass.CRYPTO else 252
        annualized = pstdev(returns) * math.sqrt(trading_days) * 100

        atr_pct = average_true_range(records, self.ATR_PERIOD) / closes[-1] * 100
        return VolatilityProfile(
            annualized=round(annualized, 2),
            level=volatility_level(annualized),
            atr_percentage=round(atr_pct, 4),
            recommended_stop_distance=round(atr_pct * self.STOP_ATR_MULTIPLE, 4),
            recommended_entry_distance=round(atr_pct * self.ENTRY_ATR_MULTIPLE, 4),
        )
