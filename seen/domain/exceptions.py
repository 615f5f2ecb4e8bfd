"""Domain-specific exceptions — framework-independent.

Every pipeline failure is one of these; ``reason`` is a short machine-readable
tag that the presentation layer maps to a status code or a chat reply.
"""


class SeenError(Exception):
    """Base class for all archive errors."""

    reason: str = "error"

    def __init__(self, message: str, *, reason: str | None = None):
        if reason is not None:
            self.reason = reason
        self.message = message
        super().__init__(message)


class FetchError(SeenError):
    """Raised when a URL cannot be fetched.

    Reasons: ``timeout``, ``too-large``, ``non-2xx``, ``unsupported-scheme``, ``network``.
    """

    def __init__(self, reason: str, message: str, *, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message, reason=reason)


class UnsupportedContentTypeError(SeenError):
    """Raised when no extraction strategy exists for a content type."""

    reason = "unsupported-content-type"

    def __init__(self, content_type: str):
        self.content_type = content_type
        super().__init__(f"Unsupported content type: {content_type or 'unknown'}")


class OracleError(SeenError):
    """Raised when the summarisation/embedding oracle fails.

    Reasons: ``rate-limited``, ``quota``, ``malformed-response``, ``timeout``,
    ``input-too-large``, ``unavailable``.
    """

    def __init__(self, reason: str, message: str, *, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message, reason=reason)


class BlobStoreError(SeenError):
    """Raised when raw content cannot be written to or read from the blob store."""

    reason = "blob-store"


class VectorIndexError(SeenError):
    """Raised when the vector index rejects an upsert, query or delete."""

    reason = "vector-index"


class MetadataStoreError(SeenError):
    """Raised when the relational store fails. Reasons: ``duplicate-key``, ``unavailable``."""

    reason = "unavailable"


class DuplicateLinkError(MetadataStoreError):
    """Raised when a Link row with the same id already exists."""

    reason = "duplicate-key"

    def __init__(self, link_id: str):
        self.link_id = link_id
        super().__init__(f"Link with id '{link_id}' already exists")


class LinkNotFoundError(SeenError):
    """Raised when a requested link does not exist."""

    reason = "not-found"

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Link '{key}' not found")


class AuthorizationError(SeenError):
    """Raised by the front-end boundary for callers outside the allow-list."""

    reason = "unauthorized"

    def __init__(self, caller_id: str | int | None):
        self.caller_id = caller_id
        super().__init__(f"Caller '{caller_id}' is not authorized")


class ChatProviderError(Exception):
    """Raised when a chat provider returns an error.

    Provider-agnostic — works for OpenRouter, Groq, OpenAI, etc.
    """

    def __init__(self, provider: str, status_code: int, message: str):
        self.provider = provider
        self.status_code = status_code
        self.message = message
        super().__init__(f"[{provider}] {status_code}: {message}")
