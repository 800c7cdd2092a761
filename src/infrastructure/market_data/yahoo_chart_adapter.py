"""
Infrastructure adapter: Yahoo Finance chart endpoint -> IMarketDataProvider.

All Yahoo-specific details (provider symbol syntax, URL, payload layout) are
confined here. One GET per call, no retries; every failure surfaces as
MarketDataError so the cache policy upstream can decide what to serve.
"""

import logging
import time
from typing import Optional

import httpx

from src.domain.entities.quote import Quote
from src.domain.errors import MarketDataError
from src.domain.ports.market_data_port import IMarketDataProvider
from src.domain.services.asset_classifier import determine_digits, estimate_spread, tick_size

logger = logging.getLogger(__name__)

YAHOO_SYMBOLS: dict[str, str] = {
    # Forex
    "EURUSD": "EURUSD=X",
    "GBPUSD": "GBPUSD=X",
    "USDJPY": "USDJPY=X",
    "USDCHF": "USDCHF=X",
    "AUDUSD": "AUDUSD=X",
    "USDCAD": "USDCAD=X",
    "NZDUSD": "NZDUSD=X",
    "EURGBP": "EURGBP=X",
    "EURJPY": "EURJPY=X",
    "GBPJPY": "GBPJPY=X",
    "EURCHF": "EURCHF=X",
    "EURCAD": "EURCAD=X",
    "EURAUD": "EURAUD=X",
    "AUDCAD": "AUDCAD=X",
    "AUDJPY": "AUDJPY=X",
    "CADJPY": "CADJPY=X",
    "CHFJPY": "CHFJPY=X",
    "NZDJPY": "NZDJPY=X",
    # Commodities
    "XAUUSD": "GC=F",
    "XAGUSD": "SI=F",
    "OIL": "CL=F",
    "OILUSD": "CL=F",
    "NATGAS": "NG=F",
    # Indices
    "SPX": "^GSPC",
    "US500": "^GSPC",
    "NASDAQ": "^IXIC",
    "US100": "^IXIC",
    "DOW": "^DJI",
    "US30": "^DJI",
    "FTSE": "^FTSE",
    "UK100": "^FTSE",
    "DAX": "^GDAXI",
    "GER40": "^GDAXI",
    "NIKKEI": "^N225",
    # Crypto
    "BTCUSD": "BTC-USD",
    "ETHUSD": "ETH-USD",
    "LTCUSD": "LTC-USD",
    "XRPUSD": "XRP-USD",
    "ADAUSD": "ADA-USD",
}

_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    "Accept": "application/json,text/html;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


def to_yahoo_symbol(symbol: str) -> str:
    """Map a canonical symbol to Yahoo's syntax; unknown symbols get the forex suffix."""
    upper = symbol.upper()
    return YAHOO_SYMBOLS.get(upper, f"{upper}=X")


def _now_ms() -> int:
    return int(time.time() * 1000)


def parse_chart_payload(payload: dict, symbol: str, yahoo_symbol: str) -> Quote:
    """Convert a chart response body into a normalized Quote.

    Raises:
        MarketDataError: if the body holds no result or has an unexpected shape.
    """
    try:
        return _quote_from_chart(payload, symbol, yahoo_symbol)
    except (AttributeError, TypeError, KeyError, IndexError) as exc:
        raise MarketDataError(symbol, f"Failed to process data: {exc}") from exc


def _quote_from_chart(payload: dict, symbol: str, yahoo_symbol: str) -> Quote:
    chart = payload.get("chart") or {}
    results = chart.get("result") or []
    if not results:
        raise MarketDataError(symbol, "No data available for this symbol")

    meta = results[0].get("meta") or {}
    price = meta.get("regularMarketPrice") or 0
    previous_close = meta.get("previousClose") or meta.get("chartPreviousClose") or price

    digits = determine_digits(price, symbol)
    spread = estimate_spread(price, symbol)
    change = price - previous_close

    return Quote(
        symbol=symbol,
        yahoo_symbol=meta.get("symbol") or yahoo_symbol,
        price=price,
        bid=price - spread / 2,
        ask=price + spread / 2,
        change=change,
        change_percent=(change / previous_close * 100) if previous_close else 0,
        digits=digits,
        spread=spread,
        tick_size=tick_size(digits),
        timestamp=_now_ms(),
        currency=meta.get("currency") or "USD",
        market_state=meta.get("marketState") or "CLOSED",
    )


class YahooChartMarketDataProvider(IMarketDataProvider):
    """Fetches one-minute chart metadata from query1.finance.yahoo.com."""

    BASE_URL = "https://query1.finance.yahoo.com"
    TIMEOUT_S = 10.0

    def __init__(
        self,
        base_url: str = BASE_URL,
        timeout: float = TIMEOUT_S,
        client: Optional[httpx.Client] = None,
    ) -> None:
        """
        Args:
            base_url: Scheme and host of the chart API.
            timeout:  Per-request timeout in seconds; expiry is a failed attempt.
            client:   Optional pre-configured httpx.Client (tests inject one
                      with a MockTransport). Built from base_url when omitted.
        """
        self._client = client or httpx.Client(
            base_url=base_url,
            timeout=timeout,
            headers=_HEADERS,
        )

    def fetch_quote(self, symbol: str) -> Quote:
        yahoo_symbol = to_yahoo_symbol(symbol)
        try:
            response = self._client.get(
                f"/v8/finance/chart/{yahoo_symbol}",
                params={"interval": "1m", "range": "1d"},
            )
        except httpx.TimeoutException as exc:
            raise MarketDataError(symbol, "Request timeout") from exc
        except httpx.HTTPError as exc:
            raise MarketDataError(symbol, str(exc)) from exc

        if response.status_code != 200:
            raise MarketDataError(
                symbol, f"HTTP {response.status_code}: {response.reason_phrase}"
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise MarketDataError(symbol, f"Failed to parse response: {exc}") from exc

        quote = parse_chart_payload(payload, symbol, yahoo_symbol)
        logger.debug("Quote for %s (%s): %s", symbol, quote.yahoo_symbol, quote.price)
        return quote
