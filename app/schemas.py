from typing import List, Literal, Optional

from pydantic import BaseModel, field_validator

Sentiment = Literal["Positive", "Negative", "Neutral"]


class Article(BaseModel):
    """One normalized news record. `url` doubles as the identifier."""

    title: str = ""
    source: str = "Unknown"
    author: Optional[str] = None
    description: str = ""
    content: str = ""
    url: Optional[str] = None
    urlToImage: Optional[str] = None
    publishedAt: str = ""


class NewsResponse(BaseModel):
    totalResults: int = 0
    articles: List[Article] = []


class EnrichRequest(BaseModel):
    title: Optional[str] = ""
    description: Optional[str] = ""
    content: Optional[str] = ""
    url: Optional[str] = ""

    # JSON null behaves like an omitted field
    @field_validator("title", "description", "content", "url", mode="before")
    @classmethod
    def _null_to_empty(cls, value):
        return "" if value is None else value


class EnrichmentResult(BaseModel):
    summary100: str
    sentiment: Sentiment
    takeaways: List[str]


class ErrorResponse(BaseModel):
    error: str
