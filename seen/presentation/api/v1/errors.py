"""Map domain exceptions onto HTTP responses."""

from fastapi import HTTPException, status

from seen.domain.exceptions import (
    AuthorizationError,
    BlobStoreError,
    FetchError,
    LinkNotFoundError,
    MetadataStoreError,
    OracleError,
    SeenError,
    UnsupportedContentTypeError,
    VectorIndexError,
)


def http_error_for(exc: SeenError) -> HTTPException:
    """Translate a pipeline failure into an ``HTTPException`` with a reason tag."""
    code = status.HTTP_500_INTERNAL_SERVER_ERROR
    if isinstance(exc, FetchError):
        if exc.reason == "timeout":
            code = status.HTTP_504_GATEWAY_TIMEOUT
        elif exc.reason == "too-large":
            code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
        else:
            code = status.HTTP_422_UNPROCESSABLE_ENTITY
    elif isinstance(exc, UnsupportedContentTypeError):
        code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE
    elif isinstance(exc, OracleError):
        if exc.reason == "rate-limited":
            code = status.HTTP_429_TOO_MANY_REQUESTS
        else:
            code = status.HTTP_502_BAD_GATEWAY
    elif isinstance(exc, (BlobStoreError, VectorIndexError, MetadataStoreError)):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    elif isinstance(exc, LinkNotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, AuthorizationError):
        code = status.HTTP_403_FORBIDDEN

    return HTTPException(status_code=code, detail={"reason": exc.reason, "message": exc.message})
