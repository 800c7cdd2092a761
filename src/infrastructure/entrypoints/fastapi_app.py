"""
FastAPI entry point and Composition Root.

Wires every infrastructure adapter to the application layer once per process
and exposes the HTTP surface. State shared between requests (quote cache,
catalog reload policy) lives in the Container, not in module globals.

Run locally:
    uvicorn src.infrastructure.entrypoints.fastapi_app:create_app --factory --reload --port 3000
"""

import json
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, File, Form, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from src.application.services.instrument_catalog import InstrumentCatalog
from src.application.services.prompt_composer import PromptComposer
from src.application.use_cases.analyze_chart import DEFAULT_MIME_TYPE, AnalyzeChartUseCase
from src.application.use_cases.estimate_volatility import EstimateVolatilityUseCase
from src.application.use_cases.get_market_data import GetMarketDataUseCase
from src.application.use_cases.validate_symbol import ValidateSymbolUseCase
from src.domain.entities.volatility import VolatilityProfile
from src.domain.errors import MarketDataError
from src.domain.ports.llm_port import IVisionModel
from src.domain.ports.observability_port import IObservabilityHandler
from src.domain.services.quote_cache import QuoteCache
from src.infrastructure.config import Settings, get_settings
from src.infrastructure.logging_setup import configure_logging

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = ("jpeg", "jpg", "png", "gif", "bmp", "webp", "heic", "heif")


@dataclass
class Container:
    settings: Settings
    catalog: InstrumentCatalog
    market_data: GetMarketDataUseCase
    volatility: EstimateVolatilityUseCase
    validate_symbol: ValidateSymbolUseCase
    analyze_chart: AnalyzeChartUseCase
    model: IVisionModel
    observability: Optional[IObservabilityHandler] = None


def build_container(settings: Settings) -> Container:
    """Instantiate the production adapters and use-cases."""
    from src.infrastructure.catalog.json_instrument_source import JsonInstrumentSource
    from src.infrastructure.llm.bedrock_adapter import BedrockVisionAdapter
    from src.infrastructure.market_data.yahoo_chart_adapter import YahooChartMarketDataProvider
    from src.infrastructure.market_data.yfinance_adapter import YFinancePriceHistoryProvider
    from src.infrastructure.prompts.file_template_source import FilePromptTemplateSource

    observability = None
    if settings.langfuse_enabled:
        from src.infrastructure.observability.langfuse_adapter import LangfuseObservabilityHandler
        observability = LangfuseObservabilityHandler()

    catalog = InstrumentCatalog(
        JsonInstrumentSource(settings.catalog_path),
        reload_policy=settings.catalog_reload_policy,
    )
    market_data = GetMarketDataUseCase(
        YahooChartMarketDataProvider(
            base_url=settings.market_data_base_url,
            timeout=settings.market_data_timeout_s,
        ),
        QuoteCache(ttl_ms=settings.quote_cache_ttl_ms),
    )
    model = BedrockVisionAdapter(region=settings.aws_region, observability=observability)
    return Container(
        settings=settings,
        catalog=catalog,
        market_data=market_data,
        volatility=EstimateVolatilityUseCase(YFinancePriceHistoryProvider()),
        validate_symbol=ValidateSymbolUseCase(catalog, market_data),
        analyze_chart=AnalyzeChartUseCase(
            catalog,
            PromptComposer(FilePromptTemplateSource(settings.prompt_template_path)),
            model,
        ),
        model=model,
        observability=observability,
    )


def _error(status_code: int, error: str, **detail) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, **detail})


def _is_image(upload: UploadFile) -> bool:
    extension = Path(upload.filename or "").suffix.lower().lstrip(".")
    mime = (upload.content_type or "").lower()
    return extension in ALLOWED_IMAGE_TYPES and any(t in mime for t in ALLOWED_IMAGE_TYPES)


def create_app(container: Optional[Container] = None) -> FastAPI:
    """Build the FastAPI application; production adapters unless *container* is given."""
    if container is None:
        load_dotenv()
        settings = get_settings()
        configure_logging(settings.log_level)
        container = build_container(settings)
    settings = container.settings

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        logger.info(
            "%s %s ready (model %s, catalog %s)",
            settings.service_name,
            settings.version,
            container.model.model_id,
            settings.catalog_path,
        )
        yield
        if container.observability is not None:
            container.observability.flush()

    app = FastAPI(title=settings.service_name, version=settings.version, lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health():
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": settings.version,
            "features": {
                "yahoo_finance": True,
                "vision_model": container.model.model_id,
                "unified_analysis": True,
                "symbols_count": len(container.catalog.instruments()),
            },
        }

    @app.get("/version")
    async def version():
        return {
            "version": settings.version,
            "name": settings.service_name,
            "description": "AI-powered trading plan analysis with real-time market data",
            "features": [
                "Yahoo Finance market data",
                "Chart image analysis",
                "Unified trading plan analysis",
                "Symbol validation",
                "Volatility estimation",
            ],
        }

    @app.get("/api/market-data/{symbol}")
    async def market_data(symbol: str):
        logger.info("Market data requested for %s", symbol)
        try:
            quote = await run_in_threadpool(container.market_data.execute, symbol)
        except (MarketDataError, ValueError) as exc:
            return _error(500, "Failed to fetch market data", message=str(exc), symbol=symbol)
        return quote.to_wire()

    @app.get("/api/volatility/{symbol}")
    async def volatility(symbol: str):
        try:
            profile = await run_in_threadpool(container.volatility.execute, symbol)
        except (MarketDataError, ValueError) as exc:
            return _error(500, "Failed to estimate volatility", message=str(exc), symbol=symbol)
        return {"symbol": symbol.upper(), **profile.to_wire()}

    @app.get("/api/symbol-validate/{symbol}")
    async def symbol_validate(symbol: str):
        return await run_in_threadpool(container.validate_symbol.execute, symbol)

    @app.post("/api/clear-cache")
    async def clear_cache():
        container.market_data.clear_cache()
        container.catalog.invalidate()
        return {"success": True, "message": "Cache cleared successfully"}

    @app.post("/analyze")
    @app.post("/api/analyze")
    async def analyze(
        tradingImage: Optional[UploadFile] = File(None),
        selectedSymbol: Optional[str] = Form(None),
        symbol: Optional[str] = Form(None),
        currentPrice: Optional[str] = Form(None),
        volatilityData: Optional[str] = Form(None),
    ):
        if tradingImage is None:
            return _error(400, "No image file provided")
        if not _is_image(tradingImage):
            return _error(400, "Invalid file type. Only images are allowed.")

        image = await tradingImage.read()
        if len(image) > settings.max_upload_bytes:
            limit_mb = settings.max_upload_bytes // (1024 * 1024)
            return _error(413, f"File too large. Maximum size is {limit_mb}MB.")

        try:
            price = float(currentPrice) if currentPrice else None
            volatility_profile = (
                VolatilityProfile.from_mapping(json.loads(volatilityData))
                if volatilityData
                else None
            )
        except (ValueError, TypeError, AttributeError) as exc:
            return _error(400, "Invalid analysis parameters", message=str(exc))

        filename = tradingImage.filename or "image"
        requested = selectedSymbol or symbol or filename
        logger.info(
            "Analysis requested: symbol=%s filename=%s price=%s volatility=%s",
            requested, filename, price, volatility_profile is not None,
        )
        outcome = await run_in_threadpool(
            container.analyze_chart.execute,
            image,
            requested,
            filename,
            price,
            volatility_profile,
            tradingImage.content_type or DEFAULT_MIME_TYPE,
        )
        return outcome.to_dict()

    @app.get("/api/symbols")
    async def symbols(category: Optional[str] = None):
        instruments = [i.to_dict() for i in container.catalog.instruments(category)]
        body = {"symbols": instruments, "total": len(instruments)}
        if category:
            body["category"] = category
        return body

    @app.get("/api/symbols/search/{query}")
    async def search_symbols(query: str):
        results = [i.to_dict() for i in container.catalog.search(query)]
        return {"query": query, "symbols": results, "total": len(results)}

    return app
