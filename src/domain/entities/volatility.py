"""
Domain entity for recent volatility conditions of an instrument.
Zero external dependencies: pure Python dataclass only.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

_WIRE_KEYS = {
    "annualized": "annualized",
    "level": "level",
    "atr_percentage": "atrPercentage",
    "recommended_stop_distance": "recommendedStopDistance",
    "recommended_entry_distance": "recommendedEntryDistance",
}


@dataclass(frozen=True)
class VolatilityProfile:
    annualized: Optional[float] = None
    level: Optional[str] = None
    atr_percentage: Optional[float] = None
    recommended_stop_distance: Optional[float] = None
    recommended_entry_distance: Optional[float] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "VolatilityProfile":
        """Build from a client payload; accepts camelCase or snake_case keys."""
        values = {}
        for field_name, wire_name in _WIRE_KEYS.items():
            value = data.get(wire_name, data.get(field_name))
            if value is not None and field_name != "level":
                value = float(value)
            values[field_name] = value
        return cls(**values)

    def to_wire(self) -> dict:
        return {wire: getattr(self, name) for name, wire in _WIRE_KEYS.items()}
