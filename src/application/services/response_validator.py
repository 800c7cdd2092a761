"""
Application service: validates and repackages the vision model's reply.

Business decisions owned here:
  - the reply must be a JSON object with symbol, trading_plan and
    technical_analysis;
  - the caller's symbol always overwrites whatever the model echoed;
  - the six provenance phases and the metadata block attached to every
    report, in a fixed order.

Nothing here checks whether the trading plan is financially sound.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Optional

from src.domain.entities.instrument import Catalog, Instrument
from src.domain.errors import AnalysisParseError, UnexpectedStructureError

ANALYSIS_VERSION = "3.2-enhanced-synonyms"
REQUIRED_SECTIONS = ("symbol", "trading_plan", "technical_analysis")

PRICE_SOURCE_CALLER = "caller_supplied"
PRICE_SOURCE_CATALOG = "catalog_bid_ask"

STRUCTURE_UNAVAILABLE = "unavailable"

_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


@dataclass(frozen=True)
class PipelineContext:
    """Everything the pipeline learned before the model replied."""

    original_symbol: str
    resolved_symbol: str
    synonym: Optional[str]
    catalog: Optional[Catalog]
    instrument: Optional[Instrument]
    price: float
    price_source: str
    caller_price: Optional[float]
    filename: str
    model_id: str
    image_processed: bool
    volatility_supplied: bool
    analyzed_at: str


def strip_code_fence(text: str) -> str:
    cleaned = text.strip()
    match = _FENCE.match(cleaned)
    return match.group(1).strip() if match else cleaned


def parse_analysis(text: str) -> dict:
    try:
        parsed = json.loads(strip_code_fence(text))
    except json.JSONDecodeError as exc:
        raise AnalysisParseError(str(exc)) from exc
    if not isinstance(parsed, dict):
        raise UnexpectedStructureError(list(REQUIRED_SECTIONS))
    return parsed


def check_structure(report: dict) -> None:
    missing = [key for key in REQUIRED_SECTIONS if not report.get(key)]
    if missing:
        raise UnexpectedStructureError(missing)


def enforce_symbol(report: dict, symbol: str) -> None:
    report["symbol"] = symbol
    if isinstance(report.get("trading_plan"), dict):
        report["trading_plan"]["symbol"] = symbol


def _elliott_wave(report: dict) -> dict:
    technical = report.get("technical_analysis")
    wave = technical.get("elliott_wave") if isinstance(technical, dict) else None
    return wave if isinstance(wave, dict) else {}


def _validation(report: dict) -> dict:
    validation = report.get("validation")
    return validation if isinstance(validation, dict) else {}


def pattern_applicable(report: dict) -> bool:
    return bool(_elliott_wave(report).get("applicable"))


def build_phases(report: dict, ctx: PipelineContext) -> dict:
    """Six-phase provenance block, in pipeline order."""
    changed = ctx.original_symbol != ctx.resolved_symbol
    catalog = ctx.catalog
    found = ctx.instrument is not None
    validation = _validation(report)
    wave = _elliott_wave(report)
    applicable = pattern_applicable(report)
    rules = wave.get("rules_compliance")

    return {
        "phase_1_symbol_resolution": {
            "status": "completed",
            "original_input": ctx.original_symbol,
            "resolved_symbol": ctx.resolved_symbol,
            "symbol_changed": changed,
            "synonym_used": ctx.synonym,
            "message": (
                f"Symbol {ctx.original_symbol!r} resolved to {ctx.resolved_symbol!r} via synonym table"
                if changed
                else f"Symbol {ctx.original_symbol!r} recognized directly"
            ),
        },
        "phase_2_database_validation": {
            "status": "completed" if found else "warning",
            "symbol_found": found,
            "database_structure": catalog.structure if catalog is not None else STRUCTURE_UNAVAILABLE,
            "total_symbols_available": len(catalog) if catalog is not None else 0,
            "message": (
                f"Symbol {ctx.resolved_symbol!r} validated against the instrument catalog"
                if found
                else f"Symbol {ctx.resolved_symbol!r} not found in the instrument catalog, analysis continued"
            ),
        },
        "phase_3_price_determination": {
            "status": "completed",
            "price_used": ctx.price,
            "price_source": ctx.price_source,
            "current_price_provided": bool(ctx.caller_price),
            "symbol_price_available": bool(ctx.instrument and ctx.instrument.mid_price),
            "message": f"Price {ctx.price} taken from {ctx.price_source}",
        },
        "phase_4_ai_analysis": {
            "status": "completed",
            "ai_model": ctx.model_id,
            "analysis_timestamp": ctx.analyzed_at,
            "image_processed": ctx.image_processed,
            "prompt_enhanced": ctx.volatility_supplied,
            "volatility_data_available": ctx.volatility_supplied,
            "message": "Chart image and market context analysed by the vision model",
        },
        "phase_5_result_validation": {
            "status": "completed",
            "coherence_check": bool(validation.get("coherence_check")),
            "risk_analysis": bool(validation.get("risk_analysis")),
            "technical_analysis": bool(report.get("technical_analysis")),
            "trading_plan_generated": bool(report.get("trading_plan")),
            "message": "Structure, coherence and risk sections checked",
        },
        "phase_6_elliott_wave_analysis": {
            "status": "completed" if applicable else "not_applicable",
            "elliott_wave_applicable": applicable,
            "pattern_type": wave.get("pattern_type") or "none",
            "current_wave": wave.get("current_wave") or "not_identified",
            "confidence_level": wave.get("confidence") or "low",
            "rules_compliance": {
                "wave2_not_beyond_wave1": rules.get("rule_1_wave2_not_beyond_wave1"),
                "wave3_not_shortest": rules.get("rule_2_wave3_not_shortest"),
                "wave4_no_overlap_wave1": rules.get("rule_3_wave4_no_overlap_wave1"),
            } if isinstance(rules, dict) else None,
            "fibonacci_targets": wave.get("fibonacci_targets") or [],
            "invalidation_level": wave.get("invalidation_level"),
            "message": (
                "Elliott wave structure identified"
                if applicable
                else "Elliott wave analysis not applicable to this market structure"
            ),
        },
    }


def build_metadata(ctx: PipelineContext) -> dict:
    return {
        "filename": ctx.filename,
        "analysis_timestamp": ctx.analyzed_at,
        "model_used": ctx.model_id,
        "original_symbol": ctx.original_symbol,
        "resolved_symbol": ctx.resolved_symbol,
        "selected_symbol": ctx.original_symbol,
        "price_source": ctx.price_source,
        "price_used": ctx.price,
        "synonym_mapping_used": ctx.original_symbol != ctx.resolved_symbol,
        "analysis_version": ANALYSIS_VERSION,
    }


def _as_list(value) -> list:
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def collect_warnings(report: dict, symbol: str) -> dict[str, Any]:
    """user_warning / risk_warnings entries derived from the validation block."""
    extra: dict[str, Any] = {}
    validation = _validation(report)

    coherence = validation.get("coherence_check")
    if isinstance(coherence, dict) and coherence.get("values_coherent") is False:
        issues = _as_list(coherence.get("issues_found"))
        extra["user_warning"] = {
            "type": "coherence",
            "message": " ".join(
                [f"Values were adjusted to be coherent with {symbol}."]
                + [f"{issue}." for issue in issues]
            ),
            "issues": issues,
        }

    warnings = _as_list(validation.get("warnings"))
    if warnings:
        extra["risk_warnings"] = warnings
    return extra


def validate_report(raw_text: str, ctx: PipelineContext) -> dict:
    """Parse, check and annotate the model reply; returns the final report.

    Raises:
        AnalysisParseError:       reply is not JSON.
        UnexpectedStructureError: reply lacks a mandatory section.
    """
    report = parse_analysis(raw_text)
    check_structure(report)
    enforce_symbol(report, ctx.original_symbol)
    report["analysis_phases"] = build_phases(report, ctx)
    report["metadata"] = build_metadata(ctx)
    report.update(collect_warnings(report, ctx.original_symbol))
    return report


def confidence_of(report: dict, default: float = 0.8) -> float:
    return _validation(report).get("confidence") or default
