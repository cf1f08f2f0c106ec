"""
Document ingestion.

- sniff_mime_type / classify_mime_type: Content-based format detection
- DocumentNormalizer: Bytes to text documents (OCR, PDF, slides, sheets, text)
- ChunkSplitter: Deterministic overlapping chunks with character offsets
- IngestionPipeline: Batch indexing with per-file failure isolation
"""

from .normalizer import DocumentNormalizer
from .pipeline import IngestionPipeline
from .sniffing import ContentKind, classify_mime_type, sniff_mime_type
from .splitter import DEFAULT_SEPARATORS, ChunkSplitter

__all__ = [
    "ContentKind",
    "classify_mime_type",
    "sniff_mime_type",
    "DocumentNormalizer",
    "ChunkSplitter",
    "DEFAULT_SEPARATORS",
    "IngestionPipeline",
]
