"""Entry point for the FastAPI-powered IMDb scraper API."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .catalog_ids import CatalogConfig
from .config import settings
from .services.cache import TTLCache
from .services.fetcher import DocumentFetcher, FetchError
from .services.scraper import ScraperService, top_list_cache_key

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app: FastAPI


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    exit_stack = AsyncExitStack()
    http_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(
            timeout=httpx.Timeout(settings.request_timeout_seconds, connect=10.0),
            follow_redirects=True,
        )
    )
    fetcher = DocumentFetcher(http_client, user_agent=settings.user_agent)
    cache = TTLCache(settings.cache_ttl_seconds)
    scraper_service = ScraperService(settings, fetcher, cache)

    fastapi_app.state.scraper_service = scraper_service
    await scraper_service.start()

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        await scraper_service.stop()
        await exit_stack.aclose()


def create_app(catalog_config: CatalogConfig | None = None) -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Scraped IMDb genres, interests and top charts",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    fastapi_app.state.catalog_config = catalog_config or CatalogConfig()

    register_routes(fastapi_app)
    return fastapi_app


def get_scraper_service(app: FastAPI) -> ScraperService:
    service = getattr(app.state, "scraper_service", None)
    if not isinstance(service, ScraperService):
        raise RuntimeError("Scraper service not initialised")
    return service


def get_catalog_config(app: FastAPI) -> CatalogConfig:
    config = getattr(app.state, "catalog_config", None)
    if not isinstance(config, CatalogConfig):
        raise RuntimeError("Catalog configuration not initialised")
    return config


def _fetch_failed(error: str, exc: FetchError) -> JSONResponse:
    logger.warning("%s: %s", error, exc)
    return JSONResponse(
        status_code=500, content={"error": error, "message": str(exc)}
    )


def register_routes(fastapi_app: FastAPI) -> None:
    @fastapi_app.get("/")
    async def index() -> dict[str, Any]:
        return {
            "message": f"Welcome to {settings.app_name}",
            "endpoints": {
                "genres": "/api/genres",
                "genresAtBulk": "/api/genre",
                "genre": "/api/genre/{genreName}",
                "topLists": "/api/top-lists",
                "top": "/api/top/{listName}",
            },
        }

    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.get("/api/genres")
    async def list_genres() -> list[str]:
        return list(get_catalog_config(fastapi_app).genres)

    @fastapi_app.get("/api/top-lists")
    async def list_top_lists() -> list[str]:
        return list(get_catalog_config(fastapi_app).top_lists)

    @fastapi_app.get("/api/genre", response_model=None)
    async def genres_in_bulk() -> JSONResponse | dict[str, Any]:
        service = get_scraper_service(fastapi_app)
        try:
            listing = await service.list_categories()
        except FetchError as exc:
            return _fetch_failed("Failed to fetch genre data", exc)
        return {"data": listing}

    @fastapi_app.get("/api/genre/{genre_name}", response_model=None)
    async def genre_detail(genre_name: str) -> JSONResponse | dict[str, Any]:
        genre_id = get_catalog_config(fastapi_app).genre_id(genre_name)
        if not genre_id:
            return JSONResponse(status_code=404, content={"error": "Genre not found"})
        service = get_scraper_service(fastapi_app)
        try:
            detail = await service.genre_detail(genre_id)
        except FetchError as exc:
            return _fetch_failed("Failed to fetch genre data", exc)
        return {"genre": genre_name, "data": detail}

    @fastapi_app.get("/api/top/{list_name}", response_model=None)
    async def top_list(list_name: str) -> JSONResponse | dict[str, Any]:
        list_url = get_catalog_config(fastapi_app).top_list_url(list_name)
        if not list_url:
            return JSONResponse(status_code=404, content={"error": "List not found"})
        service = get_scraper_service(fastapi_app)
        try:
            entries = await service.ranked_list(
                list_url, cache_key=top_list_cache_key(list_name)
            )
        except FetchError as exc:
            return _fetch_failed("Failed to fetch top list data", exc)
        return {"list": list_name, "data": entries}


app = create_app()


if __name__ == "__main__":  # pragma: no cover - manual execution
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.environment == "development",
    )
