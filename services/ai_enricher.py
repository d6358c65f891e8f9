import json
import logging
from typing import Any, Optional

from openai import AsyncOpenAI

from app.config import Settings
from app.errors import ConfigurationError, MalformedResponseError, UpstreamError
from app.response_formatter import FALLBACK_ENRICHMENT, coerce_enrichment
from app.schemas import EnrichmentResult, EnrichRequest

OPENAI_MODEL = "gpt-4o-mini"
OPENAI_TEMPERATURE = 0.3

SYSTEM_PROMPT = "You are a helpful news assistant."

PROMPT_TEMPLATE = """
You are an assistant that analyzes news articles.
Given the article text below, return a JSON object with:
- "summary100": a concise summary under 100 words.
- "sentiment": one of "Positive", "Negative", or "Neutral".
- "takeaways": exactly 3 short bullet points (strings).

Article:
{text}

Respond ONLY with valid JSON (no backticks, no extra text).
"""

NOT_CONFIGURED_MESSAGE = (
    "AI provider not configured. Set AI_PROVIDER=openai and OPENAI_API_KEY in .env"
)
ENRICH_FAILED_MESSAGE = "Failed to enrich article"

LOGGER = logging.getLogger(__name__)


def build_openai_client(settings: Settings) -> Optional[AsyncOpenAI]:
    """Return a client only when the openai provider is selected and has a key."""
    if not settings.ai_configured:
        return None
    return AsyncOpenAI(api_key=settings.openai_api_key)


def article_text(fields: EnrichRequest) -> str:
    parts = [fields.title, fields.description, fields.content]
    return "\n\n".join(p for p in parts if p)


def build_prompt(text: str) -> str:
    return PROMPT_TEMPLATE.format(text=text).strip()


def parse_completion(raw: str) -> Any:
    # ValueError also covers the int digit limit, RecursionError deep nesting
    try:
        return json.loads(raw)
    except (ValueError, RecursionError) as e:
        raise MalformedResponseError("Completion is not valid JSON") from e


class ArticleEnricher:
    """
    Summary, sentiment and takeaways for one article via OpenAI chat completions.
    `client` is None when the provider is not configured.
    """

    def __init__(self, client: Optional[AsyncOpenAI]):
        self.client = client

    async def enrich(self, fields: EnrichRequest) -> EnrichmentResult:
        if self.client is None:
            raise ConfigurationError(NOT_CONFIGURED_MESSAGE)

        prompt = build_prompt(article_text(fields))
        LOGGER.info("Enriching article: %s", fields.title or fields.url or "<untitled>")

        try:
            completion = await self.client.chat.completions.create(
                model=OPENAI_MODEL,
                temperature=OPENAI_TEMPERATURE,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
            )
            raw = _first_content(completion)
        except Exception as e:
            LOGGER.error("AI enrich error: %s", e)
            raise UpstreamError(ENRICH_FAILED_MESSAGE) from e

        try:
            parsed = parse_completion(raw)
        except MalformedResponseError:
            LOGGER.warning("Unparseable completion, using fallback result: %.200r", raw)
            parsed = FALLBACK_ENRICHMENT

        return coerce_enrichment(parsed)


def _first_content(completion) -> str:
    choices = getattr(completion, "choices", None) or []
    if not choices:
        return "{}"
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    return (content or "").strip() or "{}"
