"""Colored pipeline logger — ANSI-colored console logging for link ingestion and search.

Color scheme:
    🟢 Green   — Fetch / Blob store
    🟡 Yellow  — Extraction / Chunking
    🟣 Magenta — Oracle (summary + embeddings)
    🔵 Blue    — Vector index
    🟠 Cyan    — Metadata commit / Search
    🔴 Red     — Errors
"""

import logging
import time
from contextlib import contextmanager
from typing import Any


class _Colors:
    """ANSI escape codes for terminal colors."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"
    GRAY = "\033[90m"


Stage = tuple[str, str, str]


class PipelineStage:
    """Predefined pipeline stages with colors and icons."""

    DEDUP = ("DEDUP", _Colors.WHITE, "🔁")
    FETCH = ("FETCH", _Colors.GREEN, "🌐")
    EXTRACT = ("EXTRACT", _Colors.YELLOW, "📄")
    CHUNK = ("CHUNK", _Colors.YELLOW, "✂️")
    ORACLE = ("ORACLE", _Colors.MAGENTA, "🤖")
    BLOB = ("BLOB", _Colors.GREEN, "💾")
    VECTORS = ("VECTORS", _Colors.BLUE, "🧭")
    COMMIT = ("COMMIT", _Colors.CYAN, "🗃️")
    SEARCH = ("SEARCH", _Colors.CYAN, "🔎")
    PIPELINE = ("PIPELINE", _Colors.WHITE, "⚙️")
    ERROR = ("ERROR", _Colors.RED, "❌")
    COMPLETE = ("COMPLETE", _Colors.GREEN, "✅")


def _details(color: str, kwargs: dict[str, Any]) -> str:
    if not kwargs:
        return ""
    joined = " | ".join(f"{k}={v}" for k, v in kwargs.items())
    return f" {color}({joined}){_Colors.RESET}"


class PipelineLogger:
    """Color-coded logger for the ingestion and retrieval pipelines.

    Usage:
        log = PipelineLogger("IngestionService")
        log.step_start(PipelineStage.FETCH, "Fetching https://example.com")
        log.detail("content_type=text/html")
        log.step_complete(PipelineStage.FETCH, "Fetched", size_bytes=5120)
    """

    def __init__(self, component_name: str):
        self._logger = logging.getLogger(component_name)

    def step_start(self, stage: Stage, message: str, **kwargs: Any) -> None:
        label, color, icon = stage
        self._logger.info(
            f"{color}{_Colors.BOLD}{icon} [{label}]{_Colors.RESET} "
            f"{color}{message}{_Colors.RESET}" + _details(_Colors.GRAY, kwargs)
        )

    def step_complete(self, stage: Stage, message: str, **kwargs: Any) -> None:
        label, color, icon = stage
        self._logger.info(
            f"{color}{icon} [{label}]{_Colors.RESET} "
            f"{_Colors.GREEN}✓ {message}{_Colors.RESET}" + _details(_Colors.GRAY, kwargs)
        )

    def step_error(self, stage: Stage, message: str, error: BaseException | None = None) -> None:
        label, _, icon = stage
        formatted = (
            f"{_Colors.RED}{_Colors.BOLD}❌ [{label}]{_Colors.RESET} "
            f"{_Colors.RED}{message}{_Colors.RESET}"
        )
        if error is not None:
            formatted += f" {_Colors.DIM}→ {type(error).__name__}: {error}{_Colors.RESET}"
        self._logger.error(formatted)

    def detail(self, message: str, **kwargs: Any) -> None:
        self._logger.info(
            f"   {_Colors.GRAY}├─ {message}{_Colors.RESET}" + _details(_Colors.DIM, kwargs)
        )

    def separator(self, title: str = "") -> None:
        if title:
            self._logger.info(
                f"{_Colors.GRAY}{'─' * 10} {title} {'─' * max(50 - len(title), 4)}{_Colors.RESET}"
            )
        else:
            self._logger.info(f"{_Colors.GRAY}{'─' * 60}{_Colors.RESET}")

    @contextmanager
    def timed_step(self, stage: Stage, message: str, **kwargs: Any):
        """Context manager that logs start/end with elapsed time.

        Usage:
            with log.timed_step(PipelineStage.ORACLE, "Summarising"):
                summary = await oracle.summarize(text)
        """
        self.step_start(stage, message, **kwargs)
        start = time.perf_counter()
        try:
            yield
        except Exception as e:
            elapsed = time.perf_counter() - start
            self.step_error(stage, f"{message} — failed after {elapsed:.2f}s", error=e)
            raise
        else:
            elapsed = time.perf_counter() - start
            self.step_complete(stage, f"{message} — {elapsed:.2f}s")
