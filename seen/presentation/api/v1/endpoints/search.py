"""Semantic search endpoint."""

from fastapi import APIRouter, Depends

from seen.application.schemas import LinkResponse, SearchHitResponse, SearchRequest, SearchResponse
from seen.application.services import RetrievalService
from seen.domain.exceptions import SeenError
from seen.infrastructure.dependencies import get_caller_id, get_retrieval_service
from seen.presentation.api.v1.errors import http_error_for

router = APIRouter(prefix="/search", tags=["Search"])


@router.post("", response_model=SearchResponse)
async def search_links(
    request: SearchRequest,
    caller: str = Depends(get_caller_id),
    service: RetrievalService = Depends(get_retrieval_service),
) -> SearchResponse:
    """Rank archived links against a natural-language query."""
    try:
        hits = await service.search(request.query, caller, top_k=request.top_k)
    except SeenError as e:
        raise http_error_for(e) from e

    return SearchResponse(
        query=request.query,
        hits=[
            SearchHitResponse(
                link=LinkResponse.model_validate(hit.link, from_attributes=True),
                score=hit.score,
                excerpt=hit.excerpt,
            )
            for hit in hits
        ],
        total_hits=len(hits),
    )
