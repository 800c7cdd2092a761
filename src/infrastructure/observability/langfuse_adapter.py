"""
Infrastructure adapter: Langfuse -> IObservabilityHandler.

Langfuse is imported lazily inside the methods so the module can be loaded
even when LANGFUSE_* environment variables are not set (e.g. during testing).
The entry point only builds this handler when Langfuse is enabled in settings.
"""

from typing import Any

from src.domain.ports.observability_port import IObservabilityHandler


class LangfuseObservabilityHandler(IObservabilityHandler):
    """Wraps the Langfuse LangChain CallbackHandler."""

    def __init__(self) -> None:
        from langfuse.langchain import CallbackHandler
        self._handler = CallbackHandler()

    def run_config(self, tags: list[str], metadata: dict[str, Any]) -> dict:
        """Return a LangChain run config carrying the Langfuse callback."""
        return {
            "callbacks": [self._handler],
            "metadata": {**metadata, "langfuse_tags": tags},
        }

    def flush(self) -> None:
        """Flush pending traces to the Langfuse backend before the process exits."""
        from langfuse import get_client
        get_client().flush()
