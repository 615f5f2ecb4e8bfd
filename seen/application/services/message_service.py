"""Message service — turns an inbound chat message into a reply.

This is the front-end boundary: callers outside the allow-list are rejected
here, before any ingestion or search work starts.
"""

import logging

from seen.application.services.ingestion_service import IngestionService
from seen.application.services.link_service import LinkService
from seen.application.services.retrieval_service import RetrievalService
from seen.config import AllowList
from seen.domain.entities import Link, SearchHit
from seen.domain.exceptions import AuthorizationError, SeenError

logger = logging.getLogger(__name__)

HELP_TEXT = (
    "Available commands:\n"
    "/start - Start the bot\n"
    "/help - Show this help message\n"
    "/list - Show link statistics\n"
    "/search <query> - Search through saved links\n"
    "/delete <url> - Remove a saved link\n"
    "Send any http(s) link to save it."
)
START_TEXT = "Hello! Send me a link and I'll remember it for you. Try /help for commands."
UNKNOWN_TEXT = "I don't understand that command. Try /help for a list of available commands."


class MessageService:
    """Dispatches chat commands to the archive services."""

    def __init__(
        self,
        allow_list: AllowList,
        ingestion_service: IngestionService,
        retrieval_service: RetrievalService,
        link_service: LinkService,
        *,
        top_k: int = 5,
    ):
        self._allow_list = allow_list
        self._ingestion = ingestion_service
        self._retrieval = retrieval_service
        self._links = link_service
        self._top_k = top_k

    async def handle(self, caller_id: str | int, text: str) -> str:
        """Reply text for one message.

        Raises:
            AuthorizationError: if ``caller_id`` is not in the allow-list.
        """
        if not self._allow_list.allows(caller_id):
            logger.warning("Rejected message from unauthorized caller %s", caller_id)
            raise AuthorizationError(caller_id)

        caller = str(caller_id)
        text = text.strip()
        command, _, argument = text.partition(" ")
        argument = argument.strip()

        try:
            if command == "/start":
                return START_TEXT
            if command == "/help":
                return HELP_TEXT
            if command == "/list":
                return await self._list()
            if command == "/search":
                if not argument:
                    return "Please provide a search query, e.g., '/search cloudflare'"
                return await self._search(argument, caller)
            if command == "/delete":
                if not argument:
                    return "Please provide the link to delete, e.g., '/delete https://example.com'"
                return await self._delete(argument)
            if text.startswith(("http://", "https://")):
                return await self._save(text, caller)
        except SeenError as exc:
            logger.info("Request from %s failed (%s): %s", caller, exc.reason, exc)
            return f"⚠️ {exc.message}"

        return UNKNOWN_TEXT

    # ── Commands ─────────────────────────────────────────────────────

    async def _save(self, url: str, caller: str) -> str:
        result = await self._ingestion.ingest(url, caller)
        link = result.link
        heading = "✅ Link saved successfully!" if result.created else "ℹ️ Link already saved."
        return (
            f"{heading}\n\n"
            f"Title: {link.title}\n"
            f"URL: {link.url}\n"
            f"Type: {link.type_emoji} {link.content_type}\n"
            f"Size: {link.formatted_size}\n"
            f"Saved: {link.created_at}\n\n"
            f"{link.summary}\n\n"
            "Use /search <query> to search through saved content."
        ).rstrip()

    async def _list(self) -> str:
        stats = await self._links.get_stats()
        lines = [f"Total links saved: {stats.total}", ""]
        if not stats.recent:
            lines.append("No links saved yet.")
        else:
            lines.append("Recent links:")
            for i, link in enumerate(stats.recent, 1):
                lines.append(f"{i}. {link.type_emoji} {_label(link)} ({link.created_at})")
        return "\n".join(lines)

    async def _search(self, query: str, caller: str) -> str:
        hits = await self._retrieval.search(query, caller, top_k=self._top_k)
        if not hits:
            return f"No saved links match '{query}'."
        return "\n\n".join(_format_hit(i, hit) for i, hit in enumerate(hits, 1))

    async def _delete(self, url: str) -> str:
        link = await self._links.get_link_by_url(url)
        await self._links.delete_link(link.id)
        return f"🗑️ Deleted {link.url}"


def _label(link: Link) -> str:
    return f"{link.title} — {link.url}" if link.title else link.url


def _format_hit(position: int, hit: SearchHit) -> str:
    parts = [f"{position}. {hit.link.type_emoji} {_label(hit.link)} (score {hit.score:.2f})"]
    if hit.link.summary:
        parts.append(hit.link.summary)
    if hit.excerpt:
        parts.append(f"“{hit.excerpt}”")
    return "\n".join(parts)
