"""
Port (interface) for vision-capable language models.
Infrastructure adapters (e.g. BedrockVisionAdapter) must implement this interface.
"""

from abc import ABC, abstractmethod


class IVisionModel(ABC):
    @property
    @abstractmethod
    def model_id(self) -> str:
        """Identifier of the model that answers every request."""
        ...

    @abstractmethod
    def analyze_image(self, prompt: str, image: bytes, mime_type: str) -> str:
        """Send *prompt* and *image* in one call and return the raw text reply."""
        ...
