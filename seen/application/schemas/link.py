"""Pydantic DTOs (Data Transfer Objects) for archived links."""

from pydantic import BaseModel, Field


class IngestUrlRequest(BaseModel):
    """Schema for submitting a URL to the archive."""

    url: str = Field(..., min_length=1, max_length=2048, examples=["https://example.com/article"])


class IngestContentRequest(BaseModel):
    """Schema for submitting page content directly."""

    content: str = Field(..., min_length=1, examples=["Some notes worth remembering."])
    content_type: str = Field("text/plain", examples=["text/plain", "text/html"])
    source_url: str | None = Field(None, max_length=2048)


class LinkResponse(BaseModel):
    """Schema returned to the client — mirrors the ``links`` table."""

    id: str
    url: str
    created_at: str
    bucket_path: str
    content_type: str
    size: int
    title: str
    summary: str
    chunk_count: int

    model_config = {"from_attributes": True}


class LinkStatsResponse(BaseModel):
    """Archive totals with the most recent links."""

    total: int
    recent: list[LinkResponse] = []


class ReconcileResponse(BaseModel):
    """Relational chunk count next to the number of indexed vectors."""

    link_id: str
    chunk_count: int
    indexed_vectors: int
    consistent: bool
