"""Content-addressed identifiers and storage keys.

A link id is derived deterministically from its normalized URL (or, for
submitted content, from the bytes themselves), so resubmitting the same
document always lands on the same row.
"""

import hashlib
from urllib.parse import urlsplit, urlunsplit

from seen.domain.exceptions import FetchError

_ID_LENGTH = 32
_DEFAULT_PORTS = {"http": 80, "https": 443}

_EXTENSIONS: dict[str, str] = {
    "text/html": "html",
    "application/pdf": "pdf",
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "application/json": "json",
    "text/plain": "txt",
    "text/css": "css",
    "text/javascript": "js",
    "application/javascript": "js",
    "application/xml": "xml",
    "text/xml": "xml",
}


def normalize_url(url: str) -> str:
    """Canonical form of an http(s) URL used for deduplication.

    Lower-cases scheme and host, drops default ports, the fragment and a
    trailing slash on non-root paths. The query string is kept verbatim.

    Raises:
        FetchError: ``unsupported-scheme`` for anything but http/https.
    """
    raw = url.strip()
    parts = urlsplit(raw)
    scheme = parts.scheme.lower()
    if scheme not in _DEFAULT_PORTS or not parts.hostname:
        raise FetchError("unsupported-scheme", f"Only http(s) URLs can be archived: {raw!r}")

    host = parts.hostname.lower()
    if ":" in host:
        host = f"[{host}]"
    port = parts.port
    netloc = host if port in (None, _DEFAULT_PORTS[scheme]) else f"{host}:{port}"
    if parts.username:
        userinfo = parts.username + (f":{parts.password}" if parts.password else "")
        netloc = f"{userinfo}@{netloc}"

    path = parts.path or "/"
    if len(path) > 1 and path.endswith("/"):
        path = path.rstrip("/") or "/"

    return urlunsplit((scheme, netloc, path, parts.query, ""))


def _digest(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()[:_ID_LENGTH]


def link_id_for_url(url: str) -> str:
    """Content-addressed id for a URL (hash of its normalized form)."""
    return _digest(normalize_url(url).encode("utf-8"))


def link_id_for_content(content: bytes) -> str:
    """Content-addressed id for directly submitted content."""
    return _digest(content)


def extension_for(content_type: str) -> str:
    mime = content_type.split(";", 1)[0].strip().lower()
    return _EXTENSIONS.get(mime, "bin")


def bucket_path_for(link_id: str, content_type: str) -> str:
    """Blob store key for a link's raw content: ``content/<id>.<ext>``."""
    return f"content/{link_id}.{extension_for(content_type)}"


def vector_id_for(link_id: str, attempt: str, chunk_index: int) -> str:
    """Vector id unique to one ingestion attempt of one chunk."""
    return f"{link_id}-{attempt}-{chunk_index}"
