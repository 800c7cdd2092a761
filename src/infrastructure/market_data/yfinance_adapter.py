"""
Infrastructure adapter: yfinance -> IPriceHistoryProvider.
All yfinance-specific details (Ticker, history()) are confined here; the rest
of the codebase depends only on IPriceHistoryProvider.
"""

import yfinance as yf

from src.domain.entities.quote import HistoricalPrices, HistoricalRecord
from src.domain.errors import MarketDataError
from src.domain.ports.market_data_port import IPriceHistoryProvider
from src.infrastructure.market_data.yahoo_chart_adapter import to_yahoo_symbol


class YFinancePriceHistoryProvider(IPriceHistoryProvider):
    """Fetches daily bars from Yahoo Finance via the yfinance library."""

    def get_historical_prices(
        self,
        symbol: str,
        period: str = "1mo",
        interval: str = "1d",
    ) -> HistoricalPrices:
        ticker = yf.Ticker(to_yahoo_symbol(symbol))
        history = ticker.history(period=period, interval=interval)

        if history.empty:
            raise MarketDataError(symbol, "No historical data available")

        records = [
            HistoricalRecord(
                date=date.strftime("%Y-%m-%d"),
                open=round(float(row["Open"]), 6),
                high=round(float(row["High"]), 6),
                low=round(float(row["Low"]), 6),
                close=round(float(row["Close"]), 6),
                volume=int(row["Volume"]),
            )
            for date, row in history.iterrows()
        ]
        return HistoricalPrices(
            symbol=symbol,
            period=period,
            interval=interval,
            records=records,
        )
