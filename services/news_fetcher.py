import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from app.errors import ConfigurationError, UpstreamError
from app.response_formatter import normalize_article
from app.schemas import NewsResponse

NEWS_API_BASE = "https://newsapi.org/v2"
HEADLINES_URL = f"{NEWS_API_BASE}/top-headlines"
EVERYTHING_URL = f"{NEWS_API_BASE}/everything"

# /everything rejects a request without a keyword
FALLBACK_QUERY = "news"

MISSING_KEY_MESSAGE = "NEWS_API_KEY missing. Add it to backend .env (NEWS_API_KEY=...)."
FETCH_FAILED_MESSAGE = "Failed to fetch news"

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class NewsQuery:
    """Inbound filters, kept as the strings the caller sent."""

    q: str = ""
    country: str = ""
    category: str = ""
    from_date: str = ""
    to_date: str = ""
    page_size: str = "10"
    page: str = "1"
    sort_by: str = "publishedAt"

    @property
    def is_headlines(self) -> bool:
        return bool(self.country or self.category)


def build_request(query: NewsQuery, api_key: str) -> tuple[str, dict]:
    """
    Pick the upstream endpoint and its parameters.

    country/category present -> top-headlines
    otherwise                -> everything (keyword + date range)
    """
    params = {"apiKey": api_key, "pageSize": query.page_size, "page": query.page}

    if query.is_headlines:
        if query.country:
            params["country"] = query.country
        if query.category:
            params["category"] = query.category.lower()
        if query.q:
            params["q"] = query.q
        return HEADLINES_URL, params

    params["q"] = query.q or FALLBACK_QUERY
    if query.from_date:
        params["from"] = query.from_date
    if query.to_date:
        params["to"] = query.to_date
    params["sortBy"] = query.sort_by
    return EVERYTHING_URL, params


class NewsApiClient:
    """
    Talks to NewsAPI.org. One upstream call per search, no retries.
    The httpx client is owned by the caller.
    """

    def __init__(self, http: httpx.AsyncClient, api_key: Optional[str]):
        self.http = http
        self.api_key = api_key

    async def search_news(self, query: NewsQuery) -> NewsResponse:
        if not self.api_key:
            raise ConfigurationError(MISSING_KEY_MESSAGE)

        url, params = build_request(query, self.api_key)
        mode = "headlines" if query.is_headlines else "search"
        LOGGER.info("Fetching news in %s mode from %s", mode, url)

        try:
            response = await self.http.get(url, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            LOGGER.error(
                "News API error: %s - %s", e.response.status_code, e.response.text
            )
            raise UpstreamError(FETCH_FAILED_MESSAGE) from e
        except (httpx.HTTPError, ValueError, RecursionError) as e:
            LOGGER.error("News API error: %s", e)
            raise UpstreamError(FETCH_FAILED_MESSAGE) from e

        return _parse_body(data)


def _parse_body(data) -> NewsResponse:
    if not isinstance(data, dict):
        LOGGER.error("News API error: expected a JSON object, got %s", type(data).__name__)
        raise UpstreamError(FETCH_FAILED_MESSAGE)

    items = data.get("articles") or []
    if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
        LOGGER.error("News API error: unexpected articles payload")
        raise UpstreamError(FETCH_FAILED_MESSAGE)

    total = data.get("totalResults")
    if not isinstance(total, int) or isinstance(total, bool):
        total = 0

    return NewsResponse(
        totalResults=total,
        articles=[normalize_article(item) for item in items],
    )
