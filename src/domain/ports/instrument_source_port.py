"""
Port (interface) for instrument catalog sources.
Infrastructure adapters (e.g. JsonInstrumentSource) must implement this interface.
"""

from abc import ABC, abstractmethod
from typing import Optional

from src.domain.entities.instrument import Catalog


class IInstrumentSource(ABC):
    @abstractmethod
    def load(self) -> Optional[Catalog]:
        """Read and normalize the catalog.

        Returns None instead of raising when the source cannot be read or
        parsed, so callers can continue without a catalog.
        """
        ...
