"""In-process vector index using numpy cosine similarity.

Suitable for a single-process deployment or tests. With a blob store
attached, every mutation rewrites a JSON snapshot before returning, so
vectors are durable before the link row that references them is committed.
"""

import asyncio
import json
import logging

import numpy as np

from seen.application.interfaces import BlobStore, VectorIndex
from seen.domain.entities import VectorMatch, VectorRecord
from seen.domain.exceptions import BlobStoreError, VectorIndexError

logger = logging.getLogger(__name__)

SNAPSHOT_KEY = "vector_lite.json"


class InMemoryVectorIndex(VectorIndex):
    """Keeps every record in a dict and scores queries with a matrix product."""

    def __init__(self, dimensions: int = 768, blob_store: BlobStore | None = None):
        self._dimensions = dimensions
        self._blob_store = blob_store
        self._records: dict[str, VectorRecord] = {}
        self._normalized: dict[str, np.ndarray] = {}
        self._write_lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._records)

    async def upsert(self, records: list[VectorRecord]) -> None:
        prepared: list[tuple[VectorRecord, np.ndarray]] = []
        for record in records:
            vector = np.asarray(record.vector, dtype=np.float32)
            if vector.shape != (self._dimensions,):
                raise VectorIndexError(
                    f"Vector {record.id} has shape {vector.shape}, expected ({self._dimensions},)"
                )
            prepared.append((record, _unit(vector)))
        if not prepared:
            return

        async with self._write_lock:
            previous = {
                record.id: (self._records.get(record.id), self._normalized.get(record.id))
                for record, _ in prepared
            }
            for record, unit in prepared:
                self._records[record.id] = record
                self._normalized[record.id] = unit
            try:
                await self._persist()
            except VectorIndexError:
                self._restore(previous)
                raise
        logger.debug("Upserted %d vectors (index size %d)", len(prepared), len(self._records))

    async def query(self, vector: list[float], top_k: int) -> list[VectorMatch]:
        if top_k <= 0 or not self._records:
            return []
        query = np.asarray(vector, dtype=np.float32)
        if query.shape != (self._dimensions,):
            raise VectorIndexError(
                f"Query vector has shape {query.shape}, expected ({self._dimensions},)"
            )

        ids = list(self._normalized)
        matrix = np.stack([self._normalized[i] for i in ids])
        scores = matrix @ _unit(query)

        k = min(top_k, len(ids))
        order = np.argsort(-scores, kind="stable")[:k]
        matches = []
        for position in order:
            record = self._records[ids[position]]
            matches.append(
                VectorMatch(
                    id=record.id,
                    score=float(scores[position]),
                    link_id=record.link_id,
                    chunk_index=record.chunk_index,
                    excerpt=record.excerpt,
                )
            )
        return matches

    async def delete(self, ids: list[str]) -> int:
        async with self._write_lock:
            previous = {
                vector_id: (self._records[vector_id], self._normalized[vector_id])
                for vector_id in ids
                if vector_id in self._records
            }
            if not previous:
                return 0
            for vector_id in previous:
                del self._records[vector_id]
                del self._normalized[vector_id]
            try:
                await self._persist()
            except VectorIndexError:
                self._restore(previous)
                raise
        return len(previous)

    async def delete_by_link(self, link_id: str) -> int:
        ids = [r.id for r in self._records.values() if r.link_id == link_id]
        return await self.delete(ids)

    async def count_by_link(self, link_id: str) -> int:
        return sum(1 for r in self._records.values() if r.link_id == link_id)

    def _restore(self, previous: dict[str, tuple[VectorRecord | None, np.ndarray | None]]) -> None:
        """Undo an in-memory change whose snapshot could not be written."""
        for vector_id, (record, unit) in previous.items():
            if record is None:
                self._records.pop(vector_id, None)
                self._normalized.pop(vector_id, None)
            else:
                self._records[vector_id] = record
                self._normalized[vector_id] = unit

    # ── Persistence ──────────────────────────────────────────────────

    async def save(self) -> None:
        async with self._write_lock:
            await self._persist()
        logger.info("Saved vector snapshot with %d records", len(self._records))

    async def _persist(self) -> None:
        if self._blob_store is None:
            return
        snapshot = {
            "dimensions": self._dimensions,
            "records": [
                {
                    "id": r.id,
                    "link_id": r.link_id,
                    "chunk_index": r.chunk_index,
                    "excerpt": r.excerpt,
                    "vector": [float(v) for v in r.vector],
                }
                for r in self._records.values()
            ],
        }
        try:
            await self._blob_store.put(
                SNAPSHOT_KEY, json.dumps(snapshot).encode("utf-8"), "application/json"
            )
        except BlobStoreError as exc:
            raise VectorIndexError(f"Could not persist vector snapshot: {exc.message}") from exc

    async def load(self) -> int:
        """Replace the index contents with the stored snapshot. Returns the record count."""
        if self._blob_store is None:
            return 0
        raw = await self._blob_store.get(SNAPSHOT_KEY)
        if raw is None:
            logger.info("No vector snapshot found; starting with an empty index")
            return 0
        try:
            snapshot = json.loads(raw)
            if snapshot.get("dimensions") != self._dimensions:
                raise VectorIndexError(
                    f"Snapshot has {snapshot.get('dimensions')} dimensions, expected {self._dimensions}"
                )
            records = [
                VectorRecord(
                    id=item["id"],
                    link_id=item["link_id"],
                    chunk_index=int(item["chunk_index"]),
                    vector=item["vector"],
                    excerpt=item.get("excerpt", ""),
                )
                for item in snapshot["records"]
            ]
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
            raise VectorIndexError(f"Unreadable vector snapshot: {exc}") from exc

        normalized = {}
        for record in records:
            vector = np.asarray(record.vector, dtype=np.float32)
            if vector.shape != (self._dimensions,):
                raise VectorIndexError(f"Snapshot vector {record.id} has shape {vector.shape}")
            normalized[record.id] = _unit(vector)

        async with self._write_lock:
            self._records = {record.id: record for record in records}
            self._normalized = normalized
        logger.info("Loaded vector snapshot with %d records", len(records))
        return len(records)


def _unit(vector: np.ndarray) -> np.ndarray:
    norm = np.linalg.norm(vector)
    if norm == 0:
        return vector
    return vector / norm
