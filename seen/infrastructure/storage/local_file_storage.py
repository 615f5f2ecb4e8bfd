"""Local filesystem blob store for raw fetched content.

Storage layout:
    <upload_dir>/content/<link_id>.<ext>   — raw bytes of an archived link
    <upload_dir>/vector_lite.json          — in-memory vector index snapshot
"""

import logging
from pathlib import Path

from seen.application.interfaces import BlobStore
from seen.domain.exceptions import BlobStoreError

logger = logging.getLogger(__name__)


class LocalFileStorage(BlobStore):
    """Infrastructure adapter storing blobs as files under ``upload_dir``."""

    def __init__(self, upload_dir: str):
        self._upload_dir = Path(upload_dir).resolve()
        self._upload_dir.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._upload_dir

    def _path_for(self, key: str) -> Path:
        """Resolve ``key`` inside the upload directory, rejecting traversal."""
        if not key or key.startswith(("/", "\\")):
            raise BlobStoreError(f"Invalid blob key: {key!r}")
        path = (self._upload_dir / key).resolve()
        if not path.is_relative_to(self._upload_dir):
            raise BlobStoreError(f"Blob key escapes storage root: {key!r}")
        return path

    async def put(self, key: str, content: bytes, content_type: str) -> None:
        dest_path = self._path_for(key)
        tmp_path = dest_path.with_name(dest_path.name + ".part")
        try:
            dest_path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(content)
            tmp_path.replace(dest_path)
        except OSError as exc:
            if tmp_path.is_file():
                tmp_path.unlink()
            raise BlobStoreError(f"Could not write {key}: {exc}") from exc

        logger.info("Stored blob: %s (%d bytes, %s)", key, len(content), content_type)

    async def get(self, key: str) -> bytes | None:
        path = self._path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise BlobStoreError(f"Could not read {key}: {exc}") from exc

    async def delete(self, key: str) -> bool:
        """Delete a stored blob. Returns False if it was not there.

        Empty parent directories are left in place.
        """
        path = self._path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise BlobStoreError(f"Could not delete {key}: {exc}") from exc

        logger.info("Deleted blob: %s", key)
        return True
