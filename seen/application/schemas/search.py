"""Pydantic schemas for search requests and responses."""

from pydantic import BaseModel, Field

from seen.application.schemas.link import LinkResponse


class SearchRequest(BaseModel):
    """Request body for a natural-language search."""

    query: str = Field(..., min_length=1, description="Natural-language query")
    top_k: int = Field(default=5, ge=0, le=50, description="Maximum number of links")


class SearchHitResponse(BaseModel):
    """A single ranked link."""

    link: LinkResponse
    score: float
    excerpt: str = ""


class SearchResponse(BaseModel):
    """Ranked search results."""

    query: str
    hits: list[SearchHitResponse] = []
    total_hits: int = 0
