"""Content type detection from raw bytes."""

import io
import zipfile
from enum import Enum
from typing import Optional

import filetype

SPREADSHEET_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
PRESENTATION_MIME = "application/vnd.openxmlformats-officedocument.presentationml.presentation"
WORDPROCESSING_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

_ZIP_SIGNATURE = b"PK\x03\x04"

# Office Open XML containers are told apart by their part folders
_OOXML_PARTS = (
    ("xl/", SPREADSHEET_MIME),
    ("ppt/", PRESENTATION_MIME),
    ("word/", WORDPROCESSING_MIME),
)


class ContentKind(str, Enum):
    """Decoding strategies."""

    IMAGE = "image"
    PDF = "pdf"
    PRESENTATION = "presentation"
    SPREADSHEET = "spreadsheet"
    TEXT = "text"


def _ooxml_mime_type(data: bytes) -> Optional[str]:
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            names = archive.namelist()
    except (zipfile.BadZipFile, ValueError):
        return None

    for prefix, mime_type in _OOXML_PARTS:
        if any(name.startswith(prefix) for name in names):
            return mime_type
    return None


def sniff_mime_type(data: bytes) -> str:
    """Detect the MIME type from magic numbers; empty string if unknown."""
    if not data:
        return ""

    if data.startswith(_ZIP_SIGNATURE):
        mime_type = _ooxml_mime_type(data)
        if mime_type:
            return mime_type

    kind = filetype.guess(data)
    return kind.mime.lower().strip() if kind else ""


def classify_mime_type(mime_type: str) -> ContentKind:
    """Map a MIME type onto a decoding strategy."""
    mime_type = (mime_type or "").lower()

    if "image/" in mime_type:
        return ContentKind.IMAGE
    if "/pdf" in mime_type:
        return ContentKind.PDF
    if "powerpoint" in mime_type or "presentation" in mime_type:
        return ContentKind.PRESENTATION
    if "excel" in mime_type or "sheet" in mime_type:
        return ContentKind.SPREADSHEET
    return ContentKind.TEXT
