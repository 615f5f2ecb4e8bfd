from .link import Link, LinkStats, format_size, type_emoji, utc_now_iso
from .chunk import Chunk
from .vector import VectorRecord, VectorMatch
from .document import FetchedContent, ExtractedDocument, DocumentSummary
from .search import SearchHit
from .chat_message import ChatMessage, TokenUsage, ChatCompletionResult

__all__ = [
    "Link",
    "LinkStats",
    "format_size",
    "type_emoji",
    "utc_now_iso",
    "Chunk",
    "VectorRecord",
    "VectorMatch",
    "FetchedContent",
    "ExtractedDocument",
    "DocumentSummary",
    "SearchHit",
    "ChatMessage",
    "TokenUsage",
    "ChatCompletionResult",
]
