"""Multi-format text extractor — turns fetched bytes into normalized plain text and a title."""

import html
import logging
import re

import trafilatura

from seen.application.interfaces import TextExtractor
from seen.domain.entities import ExtractedDocument
from seen.domain.exceptions import UnsupportedContentTypeError

logger = logging.getLogger(__name__)

_TITLE_RE = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE | re.DOTALL)


class MultiFormatTextExtractor(TextExtractor):
    """Infrastructure adapter that extracts text from the content types we archive.

    - HTML: trafilatura main-content extraction (readability-style), title from metadata
    - TXT/MD/CSV: passthrough
    - PDF: PyMuPDF (fitz)
    - Images: no text; the document is still archived with a title
    """

    # Format → handler method mapping
    _HANDLERS: dict[str, str] = {
        "text/html": "_extract_html",
        "application/xhtml+xml": "_extract_html",
        "text/plain": "_extract_text",
        "text/markdown": "_extract_text",
        "text/csv": "_extract_text",
        "application/pdf": "_extract_pdf",
        "image/png": "_extract_image",
        "image/jpeg": "_extract_image",
        "image/gif": "_extract_image",
        "image/webp": "_extract_image",
    }

    def supports(self, mime_type: str) -> bool:
        return _base_mime(mime_type) in self._HANDLERS

    async def extract(self, content: bytes, mime_type: str) -> ExtractedDocument:
        mime = _base_mime(mime_type)
        handler_name = self._HANDLERS.get(mime)
        if handler_name is None:
            raise UnsupportedContentTypeError(mime_type)

        handler = getattr(self, handler_name)
        document: ExtractedDocument = await handler(content)

        logger.info(
            "Extracted %d characters from %d bytes (%s)",
            len(document.text),
            len(content),
            mime,
        )
        return document

    # ── Format-specific handlers ─────────────────────────────────────

    async def _extract_html(self, content: bytes) -> ExtractedDocument:
        markup = _decode(content)
        extracted = trafilatura.extract(
            markup,
            include_comments=False,
            include_tables=True,
            include_images=False,
            include_links=False,
            favor_precision=True,
            output_format="txt",
        ) or ""
        if not extracted.strip():
            # Pages without a detectable main block: fall back to tag stripping
            extracted = _strip_markup(markup)

        title: str | None = None
        metadata = trafilatura.extract_metadata(markup)
        if metadata is not None and metadata.title:
            title = metadata.title.strip()
        if not title:
            match = _TITLE_RE.search(markup)
            if match:
                title = html.unescape(match.group(1)).strip() or None

        return ExtractedDocument(text=normalize_whitespace(extracted), title=title)

    async def _extract_text(self, content: bytes) -> ExtractedDocument:
        text = normalize_whitespace(_decode(content))
        first_line = text.split("\n", 1)[0].strip() if text else ""
        return ExtractedDocument(text=text, title=first_line[:120] or None)

    async def _extract_pdf(self, content: bytes) -> ExtractedDocument:
        """Extract text from PDF using PyMuPDF."""
        import fitz  # PyMuPDF

        try:
            doc = fitz.open(stream=content, filetype="pdf")
        except Exception as exc:
            logger.warning("Could not open PDF (%d bytes): %s", len(content), exc)
            raise UnsupportedContentTypeError("application/pdf") from exc

        try:
            pages: list[str] = []
            for page_num, page in enumerate(doc):
                text = page.get_text("text")
                if text.strip():
                    pages.append(text)
                else:
                    logger.debug("Page %d appears to be scanned (no text layer)", page_num + 1)
            title = (doc.metadata or {}).get("title") or None
        finally:
            doc.close()

        if not pages:
            logger.warning("PDF has no extractable text — archiving without chunks")
        return ExtractedDocument(text=normalize_whitespace("\n\n".join(pages)), title=title)

    async def _extract_image(self, content: bytes) -> ExtractedDocument:
        return ExtractedDocument(text="", title=None)


def _base_mime(mime_type: str) -> str:
    return mime_type.split(";", 1)[0].strip().lower()


def _decode(content: bytes) -> str:
    """UTF-8 first, then fall back to latin-1."""
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError:
        return content.decode("latin-1")


def _strip_markup(markup: str) -> str:
    """Remove scripts, styles and tags from raw HTML."""
    text = re.sub(r"<script[^>]*>.*?</script>", " ", markup, flags=re.IGNORECASE | re.DOTALL)
    text = re.sub(r"<style[^>]*>.*?</style>", " ", text, flags=re.IGNORECASE | re.DOTALL)
    text = re.sub(r"<title[^>]*>.*?</title>", " ", text, flags=re.IGNORECASE | re.DOTALL)
    text = re.sub(r"<(br|/p|/div|/h[1-6]|/li)[^>]*>", "\n", text, flags=re.IGNORECASE)
    text = re.sub(r"<[^>]+>", " ", text)
    return html.unescape(text)


def normalize_whitespace(text: str) -> str:
    """Normalize newline and spacing artifacts in extracted text."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"[\t\x0b\x0c ]+", " ", text)
    text = re.sub(r" *\n *", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()
