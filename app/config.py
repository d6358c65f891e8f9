import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

SUPPORTED_AI_PROVIDER = "openai"


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, read once at startup."""

    port: int = 5000
    host: str = "0.0.0.0"
    news_api_key: Optional[str] = None
    ai_provider: str = SUPPORTED_AI_PROVIDER
    openai_api_key: Optional[str] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            port=int(os.getenv("PORT") or 5000),
            host=os.getenv("HOST") or "0.0.0.0",
            news_api_key=os.getenv("NEWS_API_KEY") or None,
            ai_provider=(os.getenv("AI_PROVIDER") or SUPPORTED_AI_PROVIDER).lower(),
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        )

    @property
    def ai_configured(self) -> bool:
        return self.ai_provider == SUPPORTED_AI_PROVIDER and bool(self.openai_api_key)
