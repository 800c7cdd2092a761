"""
Domain-specific errors for chart analysis and market data.

Every fatal condition of the analysis pipeline is one of these, so the
orchestrator can fold them into a single failure shape.
No framework imports allowed.
"""


class ChartAnalysisError(Exception):
    """Base error for all analysis pipeline failures."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class MissingInputError(ChartAnalysisError):
    """Raised when a mandatory analysis input (symbol or image) is absent."""

    def __init__(self, field: str) -> None:
        super().__init__(f"The {field} is required for chart analysis")
        self.field = field


class PriceUnavailableError(ChartAnalysisError):
    """Raised when neither the caller nor the catalog provides a price."""

    def __init__(self, symbol: str) -> None:
        super().__init__(f"No price available for analysis of {symbol}")
        self.symbol = symbol


class PromptTemplateError(ChartAnalysisError):
    """Raised when the analysis prompt template cannot be loaded."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Could not load prompt template {path}: {reason}")
        self.path = path


class AnalysisParseError(ChartAnalysisError):
    """Raised when the model output is not valid JSON."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to parse analysis JSON: {reason}")
        self.reason = reason


class UnexpectedStructureError(ChartAnalysisError):
    """Raised when the model output lacks the mandatory report sections."""

    def __init__(self, missing: list[str]) -> None:
        super().__init__(
            "Analysis response does not contain the expected structure "
            f"(missing: {', '.join(missing)})"
        )
        self.missing = missing


class MarketDataError(Exception):
    """Raised when a quote cannot be fetched from the upstream provider."""

    def __init__(self, symbol: str, reason: str) -> None:
        self.symbol = symbol
        self.reason = reason
        super().__init__(f"Market data unavailable for {symbol}: {reason}")
