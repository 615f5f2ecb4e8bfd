from .link import (
    IngestContentRequest,
    IngestUrlRequest,
    LinkResponse,
    LinkStatsResponse,
    ReconcileResponse,
)
from .search import SearchHitResponse, SearchRequest, SearchResponse
from .telegram import TelegramChat, TelegramMessage, TelegramUpdate, TelegramUser

__all__ = [
    "IngestContentRequest",
    "IngestUrlRequest",
    "LinkResponse",
    "LinkStatsResponse",
    "ReconcileResponse",
    "SearchHitResponse",
    "SearchRequest",
    "SearchResponse",
    "TelegramChat",
    "TelegramMessage",
    "TelegramUpdate",
    "TelegramUser",
]
