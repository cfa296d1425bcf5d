"""Résumé ingestion: binary pass-through for PDFs/images, text for everything else."""

from __future__ import annotations

import base64
import logging
import mimetypes
import re
from io import BytesIO
from pathlib import Path

from portocv.errors import IngestionFailed
from portocv.models.request import Attachment, ResumeInput

logger = logging.getLogger(__name__)

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
PDF_MIME = "application/pdf"

_EXT_MEDIA_TYPES = {
    ".pdf": PDF_MIME,
    ".docx": DOCX_MIME,
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".txt": "text/plain",
    ".md": "text/markdown",
}

# Shared emoji pattern for Google Docs résumé cleanup
EMOJI_PATTERN = (
    r"[\U0001f4e7\U0001f4de\U0001f4cd\U0001f4bc\U0001f4c5\U0001f393"
    r"\U0001f3e2\U0001f4dd\U0001f4c4\U0001f517\U0001f310\U0001f4f1"
    r"\u260e\u2709\u2706\u2702]\s*"
)


def guess_media_type(filename: str) -> str:
    suffix = Path(filename).suffix.lower()
    if suffix in _EXT_MEDIA_TYPES:
        return _EXT_MEDIA_TYPES[suffix]
    guessed, _ = mimetypes.guess_type(filename)
    return guessed or "text/plain"


def ingest_file(file_path: str | Path) -> ResumeInput:
    """Read a résumé file from disk."""
    path = Path(file_path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise IngestionFailed() from exc
    return ingest_bytes(data, guess_media_type(path.name), filename=path.name)


def ingest_bytes(data: bytes, mime_type: str | None, filename: str = "") -> ResumeInput:
    """Turn uploaded bytes into either (text, None) or (None, attachment)."""
    mime_type = mime_type or guess_media_type(filename)
    logger.info("Ingesting %s (%s, %d bytes)", filename or "upload", mime_type, len(data))
    if mime_type == PDF_MIME or mime_type.startswith("image/"):
        encoded = base64.b64encode(data).decode("ascii")
        return ResumeInput(attachment=Attachment(data=encoded, mime_type=mime_type))

    try:
        if mime_type == DOCX_MIME:
            text = _extract_docx_text(data)
        else:
            text = data.decode("utf-8")
    except Exception as exc:
        logger.warning("Ingestion of %s failed", filename or "upload", exc_info=True)
        raise IngestionFailed() from exc

    text = clean_markdown(text)
    if not text:
        raise IngestionFailed("The file contains no readable text. Please select another file.")
    return ResumeInput(text=text)


def clean_markdown(text: str) -> str:
    """Clean Google Docs export artifacts.

    Handles: unicode artifacts, emoji icons, bullet styles and runs of
    blank lines.
    """
    text = text.lstrip("\ufeff")
    text = re.sub(r"[\u200b\u200c\u200d\u00ad\u2060\ufeff]", "", text)
    text = re.sub(EMOJI_PATTERN, "", text)
    text = re.sub(r"^(\s*)[●•◦◆■▪★○]\s*", r"\1- ", text, flags=re.MULTILINE)
    lines = [re.sub(r"[ \t]{2,}", " ", line).rstrip() for line in text.splitlines()]
    text = "\n".join(lines)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def _extract_docx_text(data: bytes) -> str:
    from docx import Document

    doc = Document(BytesIO(data))
    return "\n".join(p.text for p in doc.paragraphs if p.text.strip())
