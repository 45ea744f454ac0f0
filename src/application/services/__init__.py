"""
Application Services.

This module contains application-level services that coordinate
between domain models and infrastructure adapters.
"""

from src.application.services.content_extractor import ContentExtractor
from src.application.services.fetch_service import FetchService
from src.application.services.rate_limiter import RateLimiter
from src.application.services.search_aggregator import SearchAggregator

__all__ = ["ContentExtractor", "FetchService", "RateLimiter", "SearchAggregator"]
