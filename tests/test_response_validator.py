import json

import pytest

from src.application.services.response_validator import (
    ANALYSIS_VERSION,
    PRICE_SOURCE_CATALOG,
    PipelineContext,
    build_phases,
    check_structure,
    collect_warnings,
    confidence_of,
    parse_analysis,
    strip_code_fence,
    validate_report,
)
from src.domain.entities.instrument import STRUCTURE_FLAT, Catalog
from src.domain.errors import AnalysisParseError, UnexpectedStructureError
from tests.conftest import BTC, make_report


def _context(**overrides) -> PipelineContext:
    values = dict(
        original_symbol="btc",
        resolved_symbol="BTCUSD",
        synonym="BTCUSD",
        catalog=Catalog(instruments=(BTC,), structure=STRUCTURE_FLAT),
        instrument=BTC,
        price=60005.0,
        price_source=PRICE_SOURCE_CATALOG,
        caller_price=None,
        filename="chart.png",
        model_id="fake-vision-model",
        image_processed=True,
        volatility_supplied=False,
        analyzed_at="2026-01-01T00:00:00+00:00",
    )
    values.update(overrides)
    return PipelineContext(**values)


class TestParsing:
    def test_strips_json_fence(self):
        assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_strips_bare_fence(self):
        assert strip_code_fence('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_unfenced_text_is_untouched(self):
        assert strip_code_fence('  {"a": 1} ') == '{"a": 1}'

    def test_non_json_raises_parse_error(self):
        with pytest.raises(AnalysisParseError) as info:
            parse_analysis("I cannot read this chart")
        assert info.value.message.startswith("Failed to parse analysis JSON")

    def test_json_array_is_unexpected_structure(self):
        with pytest.raises(UnexpectedStructureError):
            parse_analysis("[1, 2]")

    def test_missing_trading_plan(self):
        report = make_report()
        del report["trading_plan"]
        with pytest.raises(UnexpectedStructureError) as info:
            check_structure(report)
        assert "trading_plan" in info.value.message


class TestValidateReport:
    def test_symbol_is_overwritten_everywhere(self):
        report = validate_report(json.dumps(make_report()), _context())
        assert report["symbol"] == "btc"
        assert report["trading_plan"]["symbol"] == "btc"

    def test_phase_and_metadata_blocks(self):
        report = validate_report(json.dumps(make_report()), _context())
        assert list(report["analysis_phases"]) == [
            "phase_1_symbol_resolution",
            "phase_2_database_validation",
            "phase_3_price_determination",
            "phase_4_ai_analysis",
            "phase_5_result_validation",
            "phase_6_elliott_wave_analysis",
        ]
        metadata = report["metadata"]
        assert metadata["filename"] == "chart.png"
        assert metadata["original_symbol"] == "btc"
        assert metadata["resolved_symbol"] == "BTCUSD"
        assert metadata["synonym_mapping_used"] is True
        assert metadata["analysis_version"] == ANALYSIS_VERSION
        assert metadata["model_used"] == "fake-vision-model"

    def test_clean_report_has_no_warnings(self):
        report = validate_report(json.dumps(make_report()), _context())
        assert "user_warning" not in report
        assert "risk_warnings" not in report


class TestPhases:
    def test_catalog_miss_is_a_warning(self):
        phases = build_phases(make_report(), _context(instrument=None, caller_price=1.0))
        phase = phases["phase_2_database_validation"]
        assert phase["status"] == "warning"
        assert phase["symbol_found"] is False
        assert phase["database_structure"] == STRUCTURE_FLAT

    def test_missing_catalog_reports_unavailable(self):
        phases = build_phases(make_report(), _context(catalog=None, instrument=None))
        phase = phases["phase_2_database_validation"]
        assert phase["database_structure"] == "unavailable"
        assert phase["total_symbols_available"] == 0

    def test_elliott_wave_not_applicable(self):
        report = make_report(technical_analysis={"trend": "range", "elliott_wave": {"applicable": False}})
        phase = build_phases(report, _context())["phase_6_elliott_wave_analysis"]
        assert phase["status"] == "not_applicable"
        assert phase["pattern_type"] == "none"
        assert phase["current_wave"] == "not_identified"
        assert phase["confidence_level"] == "low"
        assert phase["rules_compliance"] is None
        assert phase["fibonacci_targets"] == []

    def test_elliott_wave_rules_are_mapped(self):
        phase = build_phases(make_report(), _context())["phase_6_elliott_wave_analysis"]
        assert phase["status"] == "completed"
        assert phase["rules_compliance"] == {
            "wave2_not_beyond_wave1": True,
            "wave3_not_shortest": True,
            "wave4_no_overlap_wave1": True,
        }

    def test_volatility_flags(self):
        phase = build_phases(make_report(), _context(volatility_supplied=True))["phase_4_ai_analysis"]
        assert phase["prompt_enhanced"] is True
        assert phase["volatility_data_available"] is True


class TestWarningsAndConfidence:
    def test_incoherent_values_produce_user_warning(self):
        report = make_report(validation={
            "coherence_check": {"values_coherent": False, "issues_found": ["Stop loss above entry"]},
        })
        warning = collect_warnings(report, "btc")["user_warning"]
        assert warning["type"] == "coherence"
        assert warning["issues"] == ["Stop loss above entry"]
        assert "Stop loss above entry." in warning["message"]

    def test_risk_warnings_are_copied(self):
        report = make_report(validation={"warnings": ["High volatility"]})
        assert collect_warnings(report, "btc") == {"risk_warnings": ["High volatility"]}

    def test_single_string_warning_is_kept_whole(self):
        report = make_report(validation={"warnings": "High volatility"})
        assert collect_warnings(report, "btc") == {"risk_warnings": ["High volatility"]}

    def test_single_string_issue_is_kept_whole(self):
        report = make_report(validation={
            "coherence_check": {"values_coherent": False, "issues_found": "Stop loss above entry"},
        })
        warning = collect_warnings(report, "btc")["user_warning"]
        assert warning["issues"] == ["Stop loss above entry"]
        assert warning["message"].endswith(" Stop loss above entry.")

    def test_confidence_from_validation(self):
        assert confidence_of(make_report()) == 0.72

    def test_confidence_defaults(self):
        assert confidence_of(make_report(validation={})) == 0.8
