"""
Free-text instrument names to canonical ticker symbols.

Pure functions over a static synonym table; no I/O and no failure mode.
Unknown inputs pass through upper-cased.
"""

import re
from typing import Optional

_CANONICAL_PATTERN = re.compile(r"^[a-z]{3,6}usd$", re.IGNORECASE)

SYMBOL_SYNONYMS: dict[str, str] = {
    # Crypto
    "bitcoin": "BTCUSD",
    "btc": "BTCUSD",
    "ethereum": "ETHUSD",
    "eth": "ETHUSD",
    "ripple": "XRPUSD",
    "xrp": "XRPUSD",
    "litecoin": "LTCUSD",
    "ltc": "LTCUSD",
    "cardano": "ADAUSD",
    "ada": "ADAUSD",
    "solana": "SOLUSD",
    "sol": "SOLUSD",
    "binance": "BNBUSD",
    "bnb": "BNBUSD",
    "dogecoin": "DOGUSD",
    "doge": "DOGUSD",
    "polkadot": "DOTUSD",
    "dot": "DOTUSD",
    "avalanche": "AVAXUSD",
    "avax": "AVAXUSD",
    "chainlink": "LNKUSD",
    "link": "LNKUSD",
    "polygon": "MATICUSD",
    "matic": "MATICUSD",
    "uniswap": "UNIUSD",
    "uni": "UNIUSD",
    # Metals and commodities
    "gold": "XAUUSD",
    "xau": "XAUUSD",
    "oro": "XAUUSD",
    "silver": "XAGUSD",
    "xag": "XAGUSD",
    "plata": "XAGUSD",
    "oil": "OILUSD",
    "petróleo": "OILUSD",
    "copper": "XCUUSD",
    "cobre": "XCUUSD",
    "platinum": "XPTUSD",
    "xpt": "XPTUSD",
    "palladium": "XPDUSD",
    "xpd": "XPDUSD",
    # Forex majors
    "eur": "EURUSD",
    "euro": "EURUSD",
    "eurodollar": "EURUSD",
    "gbp": "GBPUSD",
    "pound": "GBPUSD",
    "sterling": "GBPUSD",
    "cable": "GBPUSD",
    "jpy": "USDJPY",
    "yen": "USDJPY",
    "chf": "USDCHF",
    "franc": "USDCHF",
    "cad": "USDCAD",
    "loonie": "USDCAD",
    "aud": "AUDUSD",
    "aussie": "AUDUSD",
    "nzd": "NZDUSD",
    "kiwi": "NZDUSD",
    # Indices
    "sp500": "US500",
    "s&p": "US500",
    "nasdaq": "US100",
    "dow": "US30",
    "dax": "GER40",
    "ftse": "UK100",
}


def synonym_for(text: str) -> Optional[str]:
    """Return the synonym table hit for *text*, if any."""
    if not text:
        return None
    return SYMBOL_SYNONYMS.get(text.strip().lower())


def resolve_symbol(text: str) -> str:
    """Normalize a user-supplied identifier into a canonical ticker symbol.

    Inputs already shaped like ``XXXUSD`` (3 to 6 letters then USD) are
    returned upper-cased; known aliases are mapped through the synonym table;
    anything else is returned upper-cased unchanged.
    """
    if not text:
        return ""
    normalized = text.strip().lower()
    if _CANONICAL_PATTERN.match(normalized):
        return normalized.upper()
    return SYMBOL_SYNONYMS.get(normalized, normalized.upper())
