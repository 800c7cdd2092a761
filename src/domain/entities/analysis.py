"""
Domain entity for the tagged result of one chart analysis.
Zero external dependencies: pure Python dataclass only.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class AnalysisOutcome:
    success: bool
    symbol: Optional[str]
    filename: str
    result: Optional[dict] = None
    confidence: Optional[float] = None
    analysis_summary: Optional[dict] = None
    error: Optional[str] = None

    @classmethod
    def failed(cls, error: str, symbol: Optional[str], filename: str) -> "AnalysisOutcome":
        return cls(success=False, symbol=symbol, filename=filename, error=error)

    def to_dict(self) -> dict:
        if not self.success:
            return {
                "success": False,
                "error": self.error,
                "symbol": self.symbol,
                "filename": self.filename,
            }
        return {
            "success": True,
            "result": self.result,
            "symbol": self.symbol,
            "confidence": self.confidence,
            "filename": self.filename,
            "analysis_summary": self.analysis_summary,
        }
