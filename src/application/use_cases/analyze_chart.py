"""
Use-case: analyse a chart image for a user-supplied symbol.
Depends only on Domain ports, entities and application services.

Pipeline: resolve symbol -> catalog lookup -> price selection -> prompt ->
vision model -> response validation. Every fatal condition, including
unexpected adapter failures, comes back as a failed AnalysisOutcome; this
use-case never raises.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from src.application.services.instrument_catalog import InstrumentCatalog
from src.application.services.prompt_composer import PromptComposer
from src.application.services.response_validator import (
    PRICE_SOURCE_CALLER,
    PRICE_SOURCE_CATALOG,
    PipelineContext,
    confidence_of,
    pattern_applicable,
    validate_report,
)
from src.domain.entities.analysis import AnalysisOutcome
from src.domain.entities.instrument import Instrument
from src.domain.entities.volatility import VolatilityProfile
from src.domain.errors import ChartAnalysisError, MissingInputError, PriceUnavailableError
from src.domain.ports.llm_port import IVisionModel
from src.domain.services.symbol_resolver import resolve_symbol, synonym_for

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "image/jpeg"


def select_price(
    caller_price: Optional[float],
    instrument: Optional[Instrument],
    symbol: str,
) -> tuple[float, str]:
    """A non-zero caller price wins, then the catalog mid price; having neither is fatal."""
    if caller_price:
        price, source = caller_price, PRICE_SOURCE_CALLER
    elif instrument is not None:
        price, source = instrument.mid_price, PRICE_SOURCE_CATALOG
    else:
        price, source = None, None
    if not price:
        raise PriceUnavailableError(symbol)
    return price, source


class AnalyzeChartUseCase:
    def __init__(
        self,
        catalog: InstrumentCatalog,
        composer: PromptComposer,
        model: IVisionModel,
    ) -> None:
        self._catalog = catalog
        self._composer = composer
        self._model = model

    def execute(
        self,
        image: Optional[bytes],
        symbol: Optional[str],
        filename: str = "image",
        price: Optional[float] = None,
        volatility: Optional[VolatilityProfile] = None,
        mime_type: str = DEFAULT_MIME_TYPE,
    ) -> AnalysisOutcome:
        """Run the full pipeline and return a tagged outcome.

        Args:
            image:      Raw chart image bytes (mandatory).
            symbol:     User-supplied symbol or alias (mandatory); echoed back
                        as the report's symbol.
            filename:   Original upload name, for metadata only.
            price:      Caller-supplied reference price; overrides the catalog.
            volatility: Optional volatility profile rendered into the prompt.
            mime_type:  MIME type of *image*.
        """
        try:
            return self._run(image, symbol, filename, price, volatility, mime_type)
        except ChartAnalysisError as exc:
            logger.error("Chart analysis failed for %s: %s", symbol, exc.message)
            return AnalysisOutcome.failed(exc.message, symbol, filename)
        except Exception as exc:
            logger.exception("Unexpected error during chart analysis for %s", symbol)
            return AnalysisOutcome.failed(str(exc), symbol, filename)

    def _run(
        self,
        image: Optional[bytes],
        symbol: Optional[str],
        filename: str,
        caller_price: Optional[float],
        volatility: Optional[VolatilityProfile],
        mime_type: str,
    ) -> AnalysisOutcome:
        if not symbol or not symbol.strip():
            raise MissingInputError("symbol")
        if not image:
            raise MissingInputError("image")

        resolved = resolve_symbol(symbol)
        logger.info("Symbol %r resolved to %r", symbol, resolved)

        catalog = self._catalog.load()
        instrument = self._catalog.find(catalog, resolved)
        if instrument is None:
            logger.warning("Symbol %r not found in instrument catalog, continuing", resolved)

        price, price_source = select_price(caller_price, instrument, resolved)
        logger.info("Using price %s (source: %s)", price, price_source)

        prompt = self._composer.compose(
            symbol=resolved,
            price=price,
            symbols_list=self._catalog.format(catalog),
            volatility=volatility,
        )

        logger.info("Sending chart to %s for analysis", self._model.model_id)
        raw = self._model.analyze_image(prompt, image, mime_type)

        ctx = PipelineContext(
            original_symbol=symbol,
            resolved_symbol=resolved,
            synonym=synonym_for(symbol),
            catalog=catalog,
            instrument=instrument,
            price=price,
            price_source=price_source,
            caller_price=caller_price,
            filename=filename,
            model_id=self._model.model_id,
            image_processed=True,
            volatility_supplied=volatility is not None,
            analyzed_at=datetime.now(timezone.utc).isoformat(),
        )
        report = validate_report(raw, ctx)

        plan = report["trading_plan"] if isinstance(report["trading_plan"], dict) else {}
        wave = report["analysis_phases"]["phase_6_elliott_wave_analysis"]
        logger.info(
            "Analysis completed for %s: %s %s (elliott wave: %s)",
            symbol,
            plan.get("direction", "N/A"),
            plan.get("entry_price", "N/A"),
            wave["status"],
        )

        return AnalysisOutcome(
            success=True,
            symbol=symbol,
            filename=filename,
            result=report,
            confidence=confidence_of(report),
            analysis_summary={
                "original_symbol": symbol,
                "resolved_symbol": resolved,
                "synonym_used": symbol != resolved,
                "total_phases": len(report["analysis_phases"]),
                "phases_completed": len(report["analysis_phases"]),
                "price_used": price,
                "trading_direction": plan.get("direction", "N/A"),
                "entry_price": plan.get("entry_price", "N/A"),
                "elliott_wave_applicable": pattern_applicable(report),
                "elliott_pattern": wave["pattern_type"],
            },
        )
