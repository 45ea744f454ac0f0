"""
Web Intel - Web search and page fetch tools for agents.

Main FastAPI application entry point.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.adapters.api.dependencies import close_dependencies, get_search_providers
from src.adapters.api.routes import router
from src.config.logging import setup_logging, get_logger
from src.config.settings import get_settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    settings = get_settings()
    setup_logging(
        log_level=settings.app.log_level,
        log_format=settings.app.log_format,
    )
    logger = get_logger(__name__)
    logger.info(
        "application_startup",
        app_name=settings.app.name,
        version=settings.app.version,
        debug=settings.app.debug,
        search_mode=settings.search.provider,
    )
    get_search_providers()

    yield

    # Shutdown
    await close_dependencies()
    logger.info("application_shutdown")


settings = get_settings()

app = FastAPI(
    title="Web Intel - Search and Fetch Tools",
    description="""
## Overview

Web Intel exposes two tools an agent can call: **search**, which queries the
web through a failover rotation of providers (Google Custom Search, Bing Web
Search, DuckDuckGo Instant Answers), and **fetch**, which downloads a page and
extracts its title, main content and metadata.

## Features

- **Provider Failover**: The first provider that answers wins and stays active
- **Rate Limiting**: Per-provider and per-domain sliding windows
- **Official Sources First**: Results on official documentation domains are ranked first
- **Safe Fetching**: Blocked hosts, protocol checks, size caps and timeouts
- **Structured Content**: Title, excerpt, author, dates, breadcrumbs, tags and reading time

## Example Usage

```bash
# Search
curl -X POST "http://localhost:8000/tools/execute" \\
  -H "Content-Type: application/json" \\
  -d '{"id": "call-1", "name": "search", "arguments": {"query": "business rule abort insert"}}'

# Fetch
curl -X POST "http://localhost:8000/tools/execute" \\
  -H "Content-Type: application/json" \\
  -d '{"id": "call-2", "name": "fetch", "arguments": {"url": "https://docs.python.org/3/"}}'
```
    """,
    version=settings.app.version,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.api.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(router, tags=["Tools"])


@app.get("/", include_in_schema=False)
async def root():
    """Root endpoint - service info."""
    return {
        "name": "Web Intel - Search and Fetch Tools",
        "version": settings.app.version,
        "docs": "/docs",
        "health": "/health",
        "tools": "/tools",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.app.debug,
        workers=settings.api.workers,
    )
