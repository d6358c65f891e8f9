from unittest.mock import MagicMock

import pytest

from app.config import Settings
from app.response_formatter import FALLBACK_ENRICHMENT, coerce_enrichment, normalize_article
from services.news_fetcher import EVERYTHING_URL, HEADLINES_URL, NewsQuery, build_request


def test_normalize_full_record():
    article = normalize_article({
        "source": {"id": "bbc-news", "name": "BBC News"},
        "author": "BBC",
        "title": "Title",
        "description": "Desc",
        "url": "https://bbc.co.uk/1",
        "urlToImage": "https://bbc.co.uk/1.jpg",
        "publishedAt": "2026-10-16T08:00:00Z",
        "content": "Body",
    })
    assert article.model_dump() == {
        "title": "Title",
        "source": "BBC News",
        "author": "BBC",
        "description": "Desc",
        "content": "Body",
        "url": "https://bbc.co.uk/1",
        "urlToImage": "https://bbc.co.uk/1.jpg",
        "publishedAt": "2026-10-16T08:00:00Z",
    }


@pytest.mark.parametrize("source", [None, {}, {"name": ""}, "BBC"])
def test_source_without_name_is_unknown(source):
    assert normalize_article({"source": source}).source == "Unknown"


def test_empty_strings_are_treated_as_absent():
    article = normalize_article({"author": "", "urlToImage": "", "title": ""})
    assert article.author is None
    assert article.urlToImage is None
    assert article.title == ""


def test_coerce_keeps_valid_result():
    result = coerce_enrichment({"summary100": "ok", "sentiment": "Negative", "takeaways": ["a", "b", "c"]})
    assert result.model_dump() == {"summary100": "ok", "sentiment": "Negative", "takeaways": ["a", "b", "c"]}


@pytest.mark.parametrize("parsed", [None, [], "text", 42, {}])
def test_coerce_non_object(parsed):
    result = coerce_enrichment(parsed)
    assert result.summary100 == ""
    assert result.sentiment == "Neutral"
    assert result.takeaways == ["", "", ""]


def test_coerce_stringifies_odd_values():
    result = coerce_enrichment({"summary100": 123, "sentiment": "positive", "takeaways": [1, None, "c"]})
    assert result.summary100 == "123"
    assert result.sentiment == "Neutral"
    assert result.takeaways == ["1", "", "c"]


def test_coerce_non_list_takeaways():
    assert coerce_enrichment({"takeaways": "one, two"}).takeaways == ["", "", ""]


def test_coerce_does_not_touch_input():
    parsed = {"summary100": "s", "sentiment": "Angry", "takeaways": ["a"]}
    coerce_enrichment(parsed)
    assert parsed == {"summary100": "s", "sentiment": "Angry", "takeaways": ["a"]}
    assert coerce_enrichment(FALLBACK_ENRICHMENT).takeaways == FALLBACK_ENRICHMENT["takeaways"]


def test_build_request_headlines_forwards_everything_given():
    url, params = build_request(NewsQuery(q="ai", country="gb", category="Science", page_size="5", page="2"), "k")
    assert url == HEADLINES_URL
    assert params == {"apiKey": "k", "pageSize": "5", "page": "2", "country": "gb", "category": "science", "q": "ai"}


def test_build_request_headlines_drops_date_bounds():
    url, params = build_request(NewsQuery(country="us", from_date="2026-01-01"), "k")
    assert url == HEADLINES_URL
    assert "from" not in params


def test_build_request_search_mode():
    url, params = build_request(NewsQuery(sort_by="relevancy", page_size="abc"), "k")
    assert url == EVERYTHING_URL
    assert params == {"apiKey": "k", "pageSize": "abc", "page": "1", "q": "news", "sortBy": "relevancy"}


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("AI_PROVIDER", "OpenAI")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.delenv("NEWS_API_KEY", raising=False)
    settings = Settings.from_env()
    assert settings.port == 8080
    assert settings.ai_provider == "openai"
    assert settings.ai_configured
    assert settings.news_api_key is None


def test_settings_defaults(monkeypatch):
    for name in ("PORT", "AI_PROVIDER", "OPENAI_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings.from_env()
    assert settings.port == 5000
    assert settings.ai_provider == "openai"
    assert not settings.ai_configured


def test_create_app_configures_logging(monkeypatch):
    from app import main

    calls = []
    monkeypatch.setattr(main.logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    main.create_app(Settings(log_level="DEBUG"), http_client=MagicMock())
    assert calls and calls[0]["level"] == "DEBUG"
