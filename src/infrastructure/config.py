"""
Application configuration.

Loads settings from environment variables and the .env file. Paths are
relative to the working directory the service is started from.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service settings.

    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        catalog_path: JSON snapshot of known instruments.
        catalog_reload_policy: "reload_every_call" re-reads the snapshot for
            every request; "cache" keeps it until the cache is cleared.
        prompt_template_path: Unified analysis prompt with {{...}} placeholders.
        quote_cache_ttl_ms: Freshness window for cached quotes.
        market_data_base_url: Scheme and host of the Yahoo chart API.
        market_data_timeout_s: Timeout for a single quote request.
        aws_region: Region for the Bedrock runtime.
        max_upload_bytes: Largest accepted chart upload.
        langfuse_enabled: Trace model calls to Langfuse (needs LANGFUSE_* keys).
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    service_name: str = "PlanScan chart analysis"
    version: str = "3.2-enhanced"
    log_level: str = "INFO"

    catalog_path: str = "data/symbols.json"
    catalog_reload_policy: Literal["reload_every_call", "cache"] = "reload_every_call"
    prompt_template_path: str = "prompts/unified_analysis_prompt.md"

    quote_cache_ttl_ms: int = 60_000
    market_data_base_url: str = "https://query1.finance.yahoo.com"
    market_data_timeout_s: float = 10.0

    aws_region: str = "us-east-1"
    max_upload_bytes: int = 25 * 1024 * 1024
    langfuse_enabled: bool = False


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
