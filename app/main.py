import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from openai import AsyncOpenAI

from services.ai_enricher import ENRICH_FAILED_MESSAGE, ArticleEnricher, build_openai_client
from services.news_fetcher import FETCH_FAILED_MESSAGE, NewsApiClient, NewsQuery

from .config import Settings
from .errors import ConfigurationError, ProxyError, UpstreamError
from .schemas import EnrichmentResult, EnrichRequest, ErrorResponse, NewsResponse

LOGGER = logging.getLogger(__name__)

ERROR_RESPONSES = {500: {"model": ErrorResponse}}

ROUTE_FAILURE_MESSAGES = {
    "/api/news": FETCH_FAILED_MESSAGE,
    "/api/ai/enrich": ENRICH_FAILED_MESSAGE,
}


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def create_app(
    settings: Optional[Settings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    openai_client: Optional[AsyncOpenAI] = None,
) -> FastAPI:
    """
    Build the API with its upstream clients.
    Clients passed in are used as-is and left open; the ones built here
    are closed on shutdown.
    """
    settings = settings or Settings.from_env()
    configure_logging(settings)
    owns_http = http_client is None
    owns_openai = openai_client is None

    http = http_client or httpx.AsyncClient()
    if owns_openai:
        openai_client = build_openai_client(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if owns_http:
            await http.aclose()
        if owns_openai and openai_client is not None:
            await openai_client.close()

    app = FastAPI(title="FlashRead Backend", lifespan=lifespan)
    app.state.settings = settings
    app.state.news_client = NewsApiClient(http, settings.news_api_key)
    app.state.enricher = ArticleEnricher(
        openai_client if settings.ai_configured else None
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    async def proxy_error_handler(request: Request, exc: ProxyError):
        return JSONResponse(status_code=500, content={"error": exc.message})

    # both map to a generic 500, the cause stays in the log
    app.add_exception_handler(ConfigurationError, proxy_error_handler)
    app.add_exception_handler(UpstreamError, proxy_error_handler)

    async def unexpected_error_handler(request: Request, exc: Exception):
        LOGGER.exception("Unhandled error on %s", request.url.path)
        message = ROUTE_FAILURE_MESSAGES.get(request.url.path, "Internal server error")
        return JSONResponse(status_code=500, content={"error": message})

    app.add_exception_handler(Exception, unexpected_error_handler)

    _register_routes(app)
    return app


def get_news_client(request: Request) -> NewsApiClient:
    return request.app.state.news_client


def get_enricher(request: Request) -> ArticleEnricher:
    return request.app.state.enricher


def _register_routes(app: FastAPI) -> None:
    @app.get("/health")
    def health():
        return {"status": "ok", "ts": int(time.time())}

    @app.get("/api/news", response_model=NewsResponse, responses=ERROR_RESPONSES)
    async def get_news(
        q: str = "",
        country: str = "",
        category: str = "",
        from_date: str = Query("", alias="from"),
        to_date: str = Query("", alias="to"),
        pageSize: str = "10",
        page: str = "1",
        sortBy: str = "publishedAt",
        news: NewsApiClient = Depends(get_news_client),
    ):
        query = NewsQuery(
            q=q,
            country=country,
            category=category,
            from_date=from_date,
            to_date=to_date,
            page_size=pageSize,
            page=page,
            sort_by=sortBy,
        )
        return await news.search_news(query)

    @app.post("/api/ai/enrich", response_model=EnrichmentResult, responses=ERROR_RESPONSES)
    async def enrich_article(
        body: Optional[EnrichRequest] = None,
        enricher: ArticleEnricher = Depends(get_enricher),
    ):
        # a missing body means every field is empty
        return await enricher.enrich(body or EnrichRequest())


if __name__ == "__main__":
    import uvicorn

    settings = Settings.from_env()
    configure_logging(settings)
    LOGGER.info("Backend listening on http://localhost:%s", settings.port)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
