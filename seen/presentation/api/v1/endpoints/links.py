"""Link archive endpoints — ingest, browse and delete saved links."""

from fastapi import APIRouter, Depends, Response, status

from seen.application.schemas import (
    IngestContentRequest,
    IngestUrlRequest,
    LinkResponse,
    LinkStatsResponse,
    ReconcileResponse,
)
from seen.application.services import IngestionService, LinkService
from seen.domain.exceptions import SeenError
from seen.infrastructure.dependencies import (
    get_caller_id,
    get_ingestion_service,
    get_link_service,
)
from seen.presentation.api.v1.errors import http_error_for

router = APIRouter(prefix="/links", tags=["Links"])


@router.post("", response_model=LinkResponse, status_code=status.HTTP_201_CREATED)
async def ingest_link(
    data: IngestUrlRequest,
    response: Response,
    caller: str = Depends(get_caller_id),
    service: IngestionService = Depends(get_ingestion_service),
) -> LinkResponse:
    """Fetch, summarise and index a URL. Returns 200 if it was already archived."""
    try:
        result = await service.ingest(data.url, caller)
    except SeenError as e:
        raise http_error_for(e) from e
    if not result.created:
        response.status_code = status.HTTP_200_OK
    return LinkResponse.model_validate(result.link, from_attributes=True)


@router.post("/content", response_model=LinkResponse, status_code=status.HTTP_201_CREATED)
async def ingest_content(
    data: IngestContentRequest,
    response: Response,
    caller: str = Depends(get_caller_id),
    service: IngestionService = Depends(get_ingestion_service),
) -> LinkResponse:
    """Archive content submitted directly instead of fetched from a URL."""
    try:
        result = await service.ingest_content(
            data.content.encode("utf-8"),
            data.content_type,
            caller,
            source_url=data.source_url,
        )
    except SeenError as e:
        raise http_error_for(e) from e
    if not result.created:
        response.status_code = status.HTTP_200_OK
    return LinkResponse.model_validate(result.link, from_attributes=True)


@router.get("", response_model=list[LinkResponse])
async def list_links(
    skip: int = 0,
    limit: int = 100,
    caller: str = Depends(get_caller_id),
    service: LinkService = Depends(get_link_service),
) -> list[LinkResponse]:
    """Retrieve a paginated list of links, newest first."""
    try:
        links = await service.list_links(skip=skip, limit=limit)
    except SeenError as e:
        raise http_error_for(e) from e
    return [LinkResponse.model_validate(link, from_attributes=True) for link in links]


@router.get("/stats", response_model=LinkStatsResponse)
async def link_stats(
    caller: str = Depends(get_caller_id),
    service: LinkService = Depends(get_link_service),
) -> LinkStatsResponse:
    try:
        stats = await service.get_stats()
    except SeenError as e:
        raise http_error_for(e) from e
    return LinkStatsResponse(
        total=stats.total,
        recent=[LinkResponse.model_validate(link, from_attributes=True) for link in stats.recent],
    )


@router.get("/{link_id}", response_model=LinkResponse)
async def get_link(
    link_id: str,
    caller: str = Depends(get_caller_id),
    service: LinkService = Depends(get_link_service),
) -> LinkResponse:
    try:
        link = await service.get_link(link_id)
    except SeenError as e:
        raise http_error_for(e) from e
    return LinkResponse.model_validate(link, from_attributes=True)


@router.get("/{link_id}/reconcile", response_model=ReconcileResponse)
async def reconcile_link(
    link_id: str,
    caller: str = Depends(get_caller_id),
    service: LinkService = Depends(get_link_service),
) -> ReconcileResponse:
    """Compare the recorded chunk count with the vectors actually indexed."""
    try:
        chunk_count, indexed = await service.reconcile(link_id)
    except SeenError as e:
        raise http_error_for(e) from e
    return ReconcileResponse(
        link_id=link_id,
        chunk_count=chunk_count,
        indexed_vectors=indexed,
        consistent=chunk_count == indexed,
    )


@router.delete("/{link_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_link(
    link_id: str,
    caller: str = Depends(get_caller_id),
    service: LinkService = Depends(get_link_service),
) -> None:
    """Delete a link together with its vectors and stored content."""
    try:
        await service.delete_link(link_id)
    except SeenError as e:
        raise http_error_for(e) from e
