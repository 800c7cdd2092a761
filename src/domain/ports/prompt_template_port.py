"""
Port (interface) for analysis prompt templates.
Infrastructure adapters (e.g. FilePromptTemplateSource) must implement this interface.
"""

from abc import ABC, abstractmethod


class IPromptTemplateSource(ABC):
    @abstractmethod
    def load(self) -> str:
        """Return the raw template text.

        Raises:
            PromptTemplateError: if the template cannot be read.
        """
        ...
