"""Conversion of arbitrary input blobs into text documents."""

import asyncio
import io
from typing import Any, Dict, List, Optional

import pytesseract
from openpyxl import load_workbook
from PIL import Image
from pptx import Presentation
from pypdf import PdfReader

from ..config.logging import LoggerMixin
from ..config.settings import Settings
from ..core.exceptions import DecodeError
from ..models.rag import Document
from .sniffing import ContentKind, classify_mime_type, sniff_mime_type


class DocumentNormalizer(LoggerMixin):
    """Turns one binary payload into one or more plain-text documents.

    The format is sniffed from the bytes, never taken from a file name.
    Decoders are blocking and run in a worker thread.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    async def normalize(
        self,
        data: bytes,
        source: str,
        language: Optional[str] = None,
    ) -> List[Document]:
        """Normalize ``data`` into documents whose metadata names ``source``.

        Raises:
            DecodeError: The format-specific decoder failed.
        """
        mime_type = sniff_mime_type(data)
        kind = classify_mime_type(mime_type)
        metadata: Dict[str, Any] = {"source": source}

        self.logger.info(
            "Handling input",
            source=source,
            mime_type=mime_type or "unknown",
            kind=kind.value,
            size=len(data),
        )

        try:
            if kind is ContentKind.IMAGE:
                documents = await asyncio.to_thread(
                    self._from_image, data, metadata, language or self.settings.OCR_LANGUAGE
                )
            elif kind is ContentKind.PDF:
                documents = await asyncio.to_thread(self._from_pdf, data, metadata)
            elif kind is ContentKind.PRESENTATION:
                documents = await asyncio.to_thread(self._from_presentation, data, metadata)
            elif kind is ContentKind.SPREADSHEET:
                documents = await asyncio.to_thread(self._from_spreadsheet, data, metadata)
            else:
                documents = self._from_text(data, metadata)
        except Exception as e:
            self.logger.warning(
                "Failed to decode input", source=source, mime_type=mime_type, error=str(e)
            )
            raise DecodeError(source, str(e) or e.__class__.__name__, mime_type or None)

        self.logger.debug("Input normalized", source=source, documents=len(documents))
        return documents

    @staticmethod
    def _from_image(data: bytes, metadata: Dict[str, Any], language: str) -> List[Document]:
        with Image.open(io.BytesIO(data)) as image:
            text = pytesseract.image_to_string(image, lang=language)

        return [Document(page_content=str(text or "").strip(), metadata=dict(metadata))]

    @staticmethod
    def _from_pdf(data: bytes, metadata: Dict[str, Any]) -> List[Document]:
        reader = PdfReader(io.BytesIO(data))
        total_pages = len(reader.pages)

        return [
            Document(
                page_content=page.extract_text() or "",
                metadata={**metadata, "page": number, "totalPages": total_pages},
            )
            for number, page in enumerate(reader.pages, start=1)
        ]

    @staticmethod
    def _from_presentation(data: bytes, metadata: Dict[str, Any]) -> List[Document]:
        presentation = Presentation(io.BytesIO(data))
        texts: List[str] = []

        for slide in presentation.slides:
            for shape in slide.shapes:
                if shape.has_text_frame:
                    texts.append(shape.text_frame.text)
                elif shape.has_table:
                    for row in shape.table.rows:
                        texts.append("\t".join(cell.text for cell in row.cells))

        page_content = "\n".join(text for text in texts if text.strip()).strip()
        return [Document(page_content=page_content, metadata=dict(metadata))]

    @staticmethod
    def _from_spreadsheet(data: bytes, metadata: Dict[str, Any]) -> List[Document]:
        workbook = load_workbook(io.BytesIO(data), data_only=True)
        documents = []

        try:
            for sheet in workbook.worksheets:
                row_texts = []
                for row in sheet.iter_rows(values_only=True):
                    cell_texts = ["" if value is None else str(value) for value in row]
                    row_texts.append("\t".join(cell_texts).strip())

                documents.append(
                    Document(
                        page_content="\n".join(row_texts).strip(),
                        metadata={**metadata, "sheet": str(sheet.title)},
                    )
                )
        finally:
            workbook.close()

        return documents

    @staticmethod
    def _from_text(data: bytes, metadata: Dict[str, Any]) -> List[Document]:
        return [
            Document(
                page_content=data.decode("utf-8", errors="replace"),
                metadata=dict(metadata),
            )
        ]
