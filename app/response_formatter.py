from typing import Any, Optional

from .schemas import Article, EnrichmentResult

SUMMARY_MAX_CHARS = 900
TAKEAWAY_COUNT = 3
ALLOWED_SENTIMENTS = ("Positive", "Negative", "Neutral")
DEFAULT_SENTIMENT = "Neutral"

FALLBACK_ENRICHMENT = {
    "summary100": "Summary not available due to parsing error. Please try again.",
    "sentiment": DEFAULT_SENTIMENT,
    "takeaways": [
        "Summary failed to parse.",
        "Try again or open the article.",
        "Check network/API limits.",
    ],
}


def _text(value: Any, default: str = "") -> str:
    if not value:
        return default
    return value if isinstance(value, str) else str(value)


def _optional_text(value: Any) -> Optional[str]:
    if not value:
        return None
    return value if isinstance(value, str) else str(value)


def normalize_article(item: dict) -> Article:
    """
    Map one raw NewsAPI record onto the Article shape.
    Falsy fields get their defaults and the nested source object is
    flattened to its name.
    """
    source = item.get("source")
    source_name = source.get("name") if isinstance(source, dict) else None

    url = item.get("url")
    if url is not None and not isinstance(url, str):
        url = str(url)

    return Article(
        title=_text(item.get("title")),
        source=_text(source_name, "Unknown"),
        author=_optional_text(item.get("author")),
        description=_text(item.get("description")),
        content=_text(item.get("content")),
        url=url,
        urlToImage=_optional_text(item.get("urlToImage")),
        publishedAt=_text(item.get("publishedAt")),
    )


def coerce_enrichment(parsed: Any) -> EnrichmentResult:
    """
    Build a valid EnrichmentResult out of whatever the model returned.

    - anything that is not a JSON object counts as an empty object
    - summary100 is stringified and cut to SUMMARY_MAX_CHARS
    - an unknown sentiment label becomes "Neutral"
    - takeaways are cut to three and padded with empty strings
    """
    if not isinstance(parsed, dict):
        parsed = {}

    summary = _text(parsed.get("summary100"))[:SUMMARY_MAX_CHARS]

    sentiment = parsed.get("sentiment")
    if not isinstance(sentiment, str) or sentiment not in ALLOWED_SENTIMENTS:
        sentiment = DEFAULT_SENTIMENT

    takeaways = parsed.get("takeaways")
    if not isinstance(takeaways, list):
        takeaways = []
    takeaways = [_text(t) for t in takeaways[:TAKEAWAY_COUNT]]
    takeaways += [""] * (TAKEAWAY_COUNT - len(takeaways))

    return EnrichmentResult(summary100=summary, sentiment=sentiment, takeaways=takeaways)
