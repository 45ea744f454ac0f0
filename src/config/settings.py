"""
Configuration management for the web intelligence layer.

Configuration sources:
- config.yaml: Application settings (non-secrets)
- Environment variables: Secrets and infrastructure (API keys, hosts, ports)

ENV vars override YAML values for infrastructure settings.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import List, Literal

import yaml
from pydantic import BaseModel


class AppSettings(BaseModel):
    """Application-level settings."""
    name: str = "Web Intel"
    version: str = "1.0.0"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    user_agent: str = "WebIntel-Bot/1.0"


class APISettings(BaseModel):
    """API server settings."""
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1
    cors_origins: List[str] = ["*"]


class SearchSettings(BaseModel):
    """Search provider settings."""
    provider: Literal["mock", "live"] = "live"
    timeout: int = 10
    max_requests_per_minute: int = 10
    default_max_results: int = 10
    max_related_topics: int = 5

    google_api_key: str = ""  # From ENV: GOOGLE_SEARCH_API_KEY
    google_cx: str = ""  # From ENV: GOOGLE_SEARCH_CX
    google_base_url: str = "https://www.googleapis.com/customsearch/v1"
    bing_api_key: str = ""  # From ENV: BING_SEARCH_API_KEY
    bing_base_url: str = "https://api.bing.microsoft.com/v7.0/search"
    duckduckgo_base_url: str = "https://api.duckduckgo.com/"

    # Results on these domains are moved to the front of every response
    official_domains: List[str] = [
        "docs.servicenow.com",
        "developer.servicenow.com",
        "community.servicenow.com",
        "support.servicenow.com",
        "store.servicenow.com",
    ]

    # Query enhancement for the configured vertical
    vertical_qualifier: str = "ServiceNow"
    vertical_keywords: List[str] = [
        "servicenow", "snow", "glide", "scoped application", "update set",
        "business rule", "client script", "ui policy", "workflow", "flow",
        "catalog item", "record producer", "incident", "change", "problem",
        "script include", "rest api", "graphql", "atf", "automated test",
        "cmdb", "discovery", "orchestration", "mid server",
    ]
    problem_terms: List[str] = ["error", "issue"]


class FetchSettings(BaseModel):
    """Page fetch settings."""
    max_content_length: int = 50_000
    timeout_ms: int = 10_000
    max_redirects: int = 5
    max_requests_per_domain_per_minute: int = 5
    blocked_host_patterns: List[str] = [
        "localhost",
        "127.0.0.1",
        "0.0.0.0",
        "internal",
        "private",
    ]
    documentation_hosts: List[str] = [
        "docs.servicenow.com",
        "developer.servicenow.com",
    ]
    forum_hosts: List[str] = [
        "community.servicenow.com",
    ]


class Settings(BaseModel):
    """Main settings container."""
    app: AppSettings = AppSettings()
    api: APISettings = APISettings()
    search: SearchSettings = SearchSettings()
    fetch: FetchSettings = FetchSettings()


def _load_yaml_config(yaml_path: Path) -> dict:
    """Load YAML config file if it exists."""
    if yaml_path.exists():
        with open(yaml_path, "r") as f:
            return yaml.safe_load(f) or {}
    return {}


def _apply_env_overrides(settings: Settings) -> Settings:
    """
    Apply environment variable overrides for infrastructure and secrets.

    ENV vars override YAML for:
    - Infrastructure: hosts, ports, log level
    - Secrets: search provider API keys
    """
    # API server (infrastructure)
    if os.environ.get("API_HOST"):
        settings.api.host = os.environ["API_HOST"]
    if os.environ.get("API_PORT"):
        settings.api.port = int(os.environ["API_PORT"])
    if os.environ.get("LOG_LEVEL"):
        settings.app.log_level = os.environ["LOG_LEVEL"].upper()

    # Search credentials (secrets)
    if os.environ.get("GOOGLE_SEARCH_API_KEY"):
        settings.search.google_api_key = os.environ["GOOGLE_SEARCH_API_KEY"]
    if os.environ.get("GOOGLE_SEARCH_CX"):
        settings.search.google_cx = os.environ["GOOGLE_SEARCH_CX"]
    if os.environ.get("BING_SEARCH_API_KEY"):
        settings.search.bing_api_key = os.environ["BING_SEARCH_API_KEY"]

    return settings


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings.

    Loads from:
    1. config.yaml (application settings)
    2. Environment variables (secrets + infrastructure overrides)
    """
    # Load .env file if present (for local development)
    from dotenv import load_dotenv
    env_path = Path(__file__).parent.parent.parent / ".env"
    load_dotenv(env_path)

    config_path = Path(__file__).parent.parent.parent / "config.yaml"
    yaml_config = _load_yaml_config(config_path)

    settings = Settings(
        app=AppSettings(**yaml_config.get("app", {})),
        api=APISettings(**yaml_config.get("api", {})),
        search=SearchSettings(**yaml_config.get("search", {})),
        fetch=FetchSettings(**yaml_config.get("fetch", {})),
    )

    settings = _apply_env_overrides(settings)

    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache. Useful for testing."""
    get_settings.cache_clear()
