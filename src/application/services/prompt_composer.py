"""
Application service: renders the unified analysis prompt.

The template text comes from an injected IPromptTemplateSource; a template
that cannot be loaded aborts the analysis (PromptTemplateError propagates).
"""

import json
from typing import Optional

from src.domain.entities.volatility import VolatilityProfile
from src.domain.ports.prompt_template_port import IPromptTemplateSource

EXTRACTED_DATA_MARKER = {"message": "Data will be extracted from the image by the vision model"}


def _fmt(value: Optional[float], decimals: int) -> str:
    return "N/A" if value is None else f"{value:.{decimals}f}"


def render_volatility_block(volatility: Optional[VolatilityProfile]) -> str:
    if volatility is None:
        return ""
    return (
        "\n## Volatility and Current Market Conditions:\n"
        f"- **Annualized Volatility**: {_fmt(volatility.annualized, 1)}% "
        f"({volatility.level or 'N/A'})\n"
        f"- **Average True Range (ATR)**: {_fmt(volatility.atr_percentage, 2)}%\n"
        "- **Recommended Stop Loss distance**: "
        f"{_fmt(volatility.recommended_stop_distance, 2)}%\n"
        "- **Recommended Entry Limit distance**: "
        f"{_fmt(volatility.recommended_entry_distance, 2)}%\n"
        "- **Based on 30 days of real historical data**"
    )


class PromptComposer:
    def __init__(self, template_source: IPromptTemplateSource) -> None:
        self._template_source = template_source

    def compose(
        self,
        symbol: str,
        price: float,
        symbols_list: str,
        volatility: Optional[VolatilityProfile] = None,
    ) -> str:
        """Substitute every placeholder in the template.

        Args:
            symbol:       Resolved canonical symbol.
            price:        Price selected for the analysis.
            symbols_list: Catalog inventory from InstrumentCatalog.format().
            volatility:   Optional volatility profile; omitted block when None.
        """
        template = self._template_source.load()
        replacements = {
            "{{SELECTED_SYMBOL}}": symbol,
            "{{CURRENT_PRICE}}": str(price),
            "{{SYMBOLS_LIST}}": symbols_list,
            "{{EXTRACTED_DATA}}": json.dumps(EXTRACTED_DATA_MARKER, indent=2),
            "{{VOLATILITY_INFO}}": render_volatility_block(volatility),
        }
        for placeholder, value in replacements.items():
            template = template.replace(placeholder, value)
        return template
