"""Domain entities for vector index entries and similarity matches."""

from dataclasses import dataclass, field


@dataclass
class VectorRecord:
    """One embedded chunk as stored in the vector index."""

    id: str
    link_id: str
    chunk_index: int
    vector: list[float] = field(default_factory=list)
    excerpt: str = ""


@dataclass(frozen=True)
class VectorMatch:
    """A nearest-neighbour hit returned by the vector index."""

    id: str
    score: float  # cosine similarity, higher is closer
    link_id: str
    chunk_index: int
    excerpt: str = ""
