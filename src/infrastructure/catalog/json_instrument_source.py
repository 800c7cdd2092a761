"""
Infrastructure adapter: JSON snapshot file -> IInstrumentSource.

Two on-disk shapes are accepted and normalized into one ordered Catalog:

    {"categories": {"<name>": {"symbols": [<instrument>, ...]}, ...}}
    [<instrument>, ...]

The grouped shape is recognized first. Read or parse failures are logged and
reported as None so the analysis pipeline can continue without a catalog.
"""

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Optional

from src.domain.entities.instrument import (
    STRUCTURE_CATEGORIES,
    STRUCTURE_FLAT,
    Catalog,
    Instrument,
)
from src.domain.ports.instrument_source_port import IInstrumentSource

logger = logging.getLogger(__name__)


def _number(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def instrument_from_record(record: dict, category: str = "") -> Optional[Instrument]:
    symbol = record.get("symbol")
    if not symbol:
        return None
    digits = record.get("digits")
    return Instrument(
        symbol=str(symbol),
        name=str(record.get("name") or ""),
        category=str(record.get("category") or category),
        bid=_number(record.get("bid")),
        ask=_number(record.get("ask")),
        digits=int(digits) if digits is not None else None,
        tick_size=_number(record.get("tickSize", record.get("tick_size"))),
        blockchain=record.get("blockchain"),
    )


def _collect(records: Iterable[Any], category: str = "") -> list[Instrument]:
    instruments = []
    for record in records:
        if isinstance(record, dict):
            instrument = instrument_from_record(record, category)
            if instrument is not None:
                instruments.append(instrument)
    return instruments


def normalize_catalog(document: Any) -> Optional[Catalog]:
    """Discriminate the document shape and flatten it; None if unrecognized."""
    if isinstance(document, dict) and isinstance(document.get("categories"), dict):
        instruments: list[Instrument] = []
        for name, group in document["categories"].items():
            symbols = group.get("symbols") if isinstance(group, dict) else None
            if isinstance(symbols, list):
                instruments.extend(_collect(symbols, name))
        return Catalog(instruments=tuple(instruments), structure=STRUCTURE_CATEGORIES)
    if isinstance(document, list):
        return Catalog(instruments=tuple(_collect(document)), structure=STRUCTURE_FLAT)
    return None


class JsonInstrumentSource(IInstrumentSource):
    """Reads the instrument snapshot from a JSON file on every load()."""

    def __init__(self, path: str) -> None:
        self._path = Path(path)

    def load(self) -> Optional[Catalog]:
        try:
            document = json.loads(self._path.read_text(encoding="utf-8"))
            catalog = normalize_catalog(document)
        except (OSError, ValueError, TypeError) as exc:
            logger.error("Error reading instrument catalog %s: %s", self._path, exc)
            return None
        if catalog is None:
            logger.error("Unrecognized instrument catalog layout in %s", self._path)
        return catalog
