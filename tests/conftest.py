import json
from typing import Optional

import pytest

from src.application.services.instrument_catalog import InstrumentCatalog
from src.application.services.prompt_composer import PromptComposer
from src.application.use_cases.analyze_chart import AnalyzeChartUseCase
from src.domain.entities.instrument import STRUCTURE_FLAT, Catalog, Instrument
from src.domain.ports.instrument_source_port import IInstrumentSource
from src.domain.ports.llm_port import IVisionModel
from src.domain.ports.prompt_template_port import IPromptTemplateSource

TEMPLATE = (
    "Symbol: {{SELECTED_SYMBOL}}\n"
    "Price: {{CURRENT_PRICE}}\n"
    "{{VOLATILITY_INFO}}\n"
    "Instruments:\n{{SYMBOLS_LIST}}\n"
    "Extracted: {{EXTRACTED_DATA}}\n"
)

BTC = Instrument(
    symbol="BTCUSD", name="BTCUSD - Bitcoin", category="crypto",
    bid=60000.0, ask=60010.0, digits=2, tick_size=0.01, blockchain="Bitcoin",
)
XAU = Instrument(
    symbol="XAUUSD", name="XAUUSD - Gold", category="metals",
    bid=2345.1, ask=2345.6, digits=2, tick_size=0.01,
)


class StaticInstrumentSource(IInstrumentSource):
    def __init__(self, catalog: Optional[Catalog]) -> None:
        self.catalog = catalog
        self.loads = 0

    def load(self) -> Optional[Catalog]:
        self.loads += 1
        return self.catalog


class StaticTemplateSource(IPromptTemplateSource):
    def __init__(self, text: str = TEMPLATE) -> None:
        self.text = text

    def load(self) -> str:
        return self.text


class FakeVisionModel(IVisionModel):
    def __init__(self, reply: str) -> None:
        self.reply = reply
        self.calls: list[tuple[str, bytes, str]] = []

    @property
    def model_id(self) -> str:
        return "fake-vision-model"

    def analyze_image(self, prompt: str, image: bytes, mime_type: str) -> str:
        self.calls.append((prompt, image, mime_type))
        return self.reply


def make_report(**overrides) -> dict:
    report = {
        "symbol": "SOMETHING-ELSE",
        "trading_plan": {
            "symbol": "SOMETHING-ELSE",
            "direction": "BUY",
            "entry_price": 60005,
            "stop_loss": 59000,
            "take_profit": [62000],
        },
        "technical_analysis": {
            "trend": "bullish",
            "elliott_wave": {
                "applicable": True,
                "pattern_type": "impulse",
                "current_wave": "3",
                "confidence": "medium",
                "rules_compliance": {
                    "rule_1_wave2_not_beyond_wave1": True,
                    "rule_2_wave3_not_shortest": True,
                    "rule_3_wave4_no_overlap_wave1": True,
                },
                "fibonacci_targets": [61800],
                "invalidation_level": 58500,
            },
        },
        "validation": {
            "confidence": 0.72,
            "coherence_check": {"values_coherent": True, "issues_found": []},
            "risk_analysis": {"risk_reward": 2.0},
            "warnings": [],
        },
    }
    report.update(overrides)
    return report


@pytest.fixture
def flat_catalog() -> Catalog:
    return Catalog(instruments=(XAU, BTC), structure=STRUCTURE_FLAT)


@pytest.fixture
def make_use_case(flat_catalog):
    def _build(reply, catalog=flat_catalog, template=TEMPLATE):
        if not isinstance(reply, str):
            reply = json.dumps(reply)
        model = FakeVisionModel(reply)
        use_case = AnalyzeChartUseCase(
            InstrumentCatalog(StaticInstrumentSource(catalog)),
            PromptComposer(StaticTemplateSource(template)),
            model,
        )
        return use_case, model

    return _build
