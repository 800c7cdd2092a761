"""
Asset-class heuristics shared by quote normalization and prompt building.

Classification is substring based, so a symbol can satisfy several
predicates. `classify` always applies the same precedence:

    JPY pair > forex > crypto > index > commodity > other
"""

import enum
from typing import Optional

from src.domain.entities.instrument import Instrument

FOREX_CURRENCIES = ("EUR", "GBP", "USD", "JPY", "CHF", "CAD", "AUD", "NZD")
CRYPTO_KEYWORDS = ("BTC", "ETH", "LTC", "XRP", "ADA", "DOT", "LINK", "BCH")
INDEX_KEYWORDS = (
    "SPX", "NASDAQ", "DOW", "FTSE", "DAX", "NIKKEI",
    "US500", "US100", "US30", "GER40", "UK100",
)
COMMODITY_KEYWORDS = ("XAU", "XAG", "OIL", "GAS")
FUTURES_CODES = ("GC", "SI", "CL", "NG")


class AssetClass(str, enum.Enum):
    FOREX_JPY = "forex_jpy"
    FOREX = "forex"
    CRYPTO = "crypto"
    INDEX = "index"
    COMMODITY = "commodity"
    OTHER = "other"


def is_jpy_pair(symbol: str) -> bool:
    return "JPY" in symbol.upper()


def is_forex_pair(symbol: str) -> bool:
    s = symbol.upper()
    starts = any(s.startswith(c) for c in FOREX_CURRENCIES)
    ends = any(s.endswith(c) and not s.startswith(c) for c in FOREX_CURRENCIES)
    return starts and ends


def is_crypto(symbol: str) -> bool:
    s = symbol.upper()
    return any(k in s for k in CRYPTO_KEYWORDS)


def is_index(symbol: str) -> bool:
    s = symbol.upper()
    return s.startswith("^") or any(k in s for k in INDEX_KEYWORDS)


def is_commodity(symbol: str) -> bool:
    s = symbol.upper()
    return any(k in s for k in COMMODITY_KEYWORDS + FUTURES_CODES)


_PRECEDENCE = (
    (AssetClass.FOREX_JPY, is_jpy_pair),
    (AssetClass.FOREX, is_forex_pair),
    (AssetClass.CRYPTO, is_crypto),
    (AssetClass.INDEX, is_index),
    (AssetClass.COMMODITY, is_commodity),
)


def classify(symbol: str) -> AssetClass:
    for asset_class, predicate in _PRECEDENCE:
        if predicate(symbol):
            return asset_class
    return AssetClass.OTHER


def _is_gold(s: str) -> bool:
    return "XAU" in s or "GC" in s


def _is_silver(s: str) -> bool:
    return "XAG" in s or "SI" in s


def determine_digits(price: float, symbol: str) -> int:
    """Decimal places conventionally quoted for *symbol* at *price*."""
    s = symbol.upper()
    asset_class = classify(s)
    if asset_class is AssetClass.FOREX_JPY:
        return 3
    if asset_class is AssetClass.FOREX:
        return 5
    if asset_class is AssetClass.CRYPTO:
        if price >= 1000:
            return 2
        if price >= 10:
            return 3
        if price >= 1:
            return 4
        return 8
    if asset_class is AssetClass.INDEX:
        return 2
    if asset_class is AssetClass.COMMODITY:
        if _is_gold(s):
            return 2
        if _is_silver(s):
            return 3
        return 2
    return 5


def tick_size(digits: int) -> float:
    return 10 ** -digits


def estimate_spread(price: float, symbol: str) -> float:
    """Typical dealer spread for *symbol*; an estimate, not market data."""
    s = symbol.upper()
    tick = tick_size(determine_digits(price, s))
    asset_class = classify(s)

    if asset_class in (AssetClass.FOREX, AssetClass.FOREX_JPY):
        if "EUR" in s or "GBP" in s:
            return 2 * tick
        if "JPY" in s:
            return 3 * tick
        if "AUD" in s or "CAD" in s:
            return 4 * tick
        return 5 * tick
    if asset_class is AssetClass.CRYPTO:
        return price * 0.001
    if asset_class is AssetClass.INDEX:
        return price * 0.0001
    if asset_class is AssetClass.COMMODITY:
        if "XAU" in s:
            return 0.5
        if "XAG" in s:
            return 0.02
        return price * 0.0005
    return 5 * tick


def _band(mid: float, pct: float, decimals: Optional[int]) -> str:
    low, high = mid * (1 - pct), mid * (1 + pct)
    if decimals is None:
        return f"{round(low)} - {round(high)}"
    return f"{low:.{decimals}f} - {high:.{decimals}f}"


def expected_price_range(instrument: Instrument) -> str:
    """Heuristic price band around the instrument's mid price.

    Advisory text for the analysis prompt only; never used to accept or
    reject anything.
    """
    if not instrument.bid or not instrument.ask:
        return "N/A"

    mid = (instrument.bid + instrument.ask) / 2
    s = instrument.symbol.upper()
    digits = instrument.digits or 4
    asset_class = classify(s)

    if asset_class is AssetClass.FOREX_JPY:
        return _band(mid, 0.01, 2)
    if asset_class is AssetClass.FOREX:
        if mid > 50:
            return _band(mid, 0.01, None)
        if mid > 10:
            return _band(mid, 0.01, digits)
        return _band(mid, 0.02, digits)
    if asset_class is AssetClass.CRYPTO and ("BTC" in s or "ETH" in s):
        return _band(mid, 0.05, None)
    if asset_class is AssetClass.COMMODITY:
        if "XAU" in s or "XAG" in s:
            return _band(mid, 0.02, None)
        if "OIL" in s:
            return _band(mid, 0.05, 2)
    if asset_class is AssetClass.INDEX:
        return _band(mid, 0.02, None)

    if mid > 1000:
        return _band(mid, 0.05, None)
    if mid > 100:
        return _band(mid, 0.05, 2)
    return _band(mid, 0.10, digits)
