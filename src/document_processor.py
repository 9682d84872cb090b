"""
Document ingestion adapters

Turns uploaded files into plain-text Document records for the search engine:
1. TXT: whole file becomes one document
2. CSV: every row becomes one document ("column: value" lines)
3. PDF: all pages concatenated into one document

Every document gets entity/topic metadata from the text analyzer. The adapters
contain no ranking logic; they only decode files and call analyze().
"""

import csv
import io
import logging
from pathlib import PurePath
from typing import Any, Dict, List

import pymupdf

from .bm25.index_store import Document
from .nlp.metadata_extractor import analyze

# Setup logging
logger = logging.getLogger(__name__)


class DocumentProcessingError(ValueError):
    """File could not be turned into documents (message is user-facing)"""


class DocumentProcessor:
    """Convert uploaded files into analyzed Document records"""

    def process_file(self, filename: str, file_content: bytes) -> List[Document]:
        """
        Dispatch on file extension.

        Args:
            filename: Original filename (used for ids and extension detection)
            file_content: Raw file bytes

        Returns:
            One or more Documents with metadata = analysis (+ CSV row cells)

        Raises:
            DocumentProcessingError: unsupported extension, empty or unreadable file
        """
        file_ext = PurePath(filename).suffix.lstrip(".").lower()

        if file_ext == "csv":
            documents = self.process_csv(filename, file_content)
        elif file_ext == "pdf":
            documents = self.process_pdf(filename, file_content)
        elif file_ext in ("txt", "text"):
            documents = self.process_txt(filename, file_content)
        else:
            raise DocumentProcessingError(
                f"Unsupported file format: .{file_ext}. Please upload CSV, PDF, or TXT."
            )

        logger.info(f"Processed {filename}: {len(documents)} documents")
        return documents

    def decode_text(self, file_content: bytes) -> str:
        """Decode UTF-8 (BOM tolerated), falling back to latin-1."""
        try:
            return file_content.decode("utf-8-sig")
        except UnicodeDecodeError:
            # latin-1 never fails
            logger.warning("UTF-8 decode failed, using latin-1")
            return file_content.decode("latin-1", errors="replace")

    def process_txt(self, filename: str, file_content: bytes) -> List[Document]:
        content = self.decode_text(file_content)
        if not content.strip():
            raise DocumentProcessingError("File is empty.")

        return [Document(
            id=f"{filename}-1",
            content=content,
            filename=filename,
            metadata=analyze(content),
        )]

    def process_csv(self, filename: str, file_content: bytes) -> List[Document]:
        """
        One document per data row.

        Header names are trimmed; empty lines are skipped. Row content is
        "column: value" for every string cell, joined by newlines. Row cells
        are kept in metadata next to the analysis output.
        """
        text = self.decode_text(file_content)
        reader = csv.DictReader(io.StringIO(text, newline=""))

        documents = []
        try:
            if reader.fieldnames:
                reader.fieldnames = [name.strip() for name in reader.fieldnames]

            for index, row in enumerate(reader):
                # Extra cells land under the None key as a list; missing cells are None
                cells: Dict[str, Any] = {
                    key: value for key, value in row.items()
                    if key is not None and isinstance(value, str)
                }
                content = "\n".join(f"{key}: {value}" for key, value in cells.items())
                if not content:
                    continue

                documents.append(Document(
                    id=f"{filename}-{index}",
                    content=content,
                    filename=filename,
                    metadata={**cells, **analyze(content)},
                ))
        except csv.Error as e:
            raise DocumentProcessingError(f"Failed to parse CSV: {e}") from e

        if not documents:
            raise DocumentProcessingError("No valid content found in CSV.")

        logger.debug(f"CSV {filename}: {len(documents)} rows converted")
        return documents

    def process_pdf(self, filename: str, file_content: bytes) -> List[Document]:
        """Extract page text with PyMuPDF into a single document."""
        try:
            pdf = pymupdf.open(stream=file_content, filetype="pdf")
        except (RuntimeError, ValueError) as e:  # pymupdf.FileDataError is a RuntimeError
            raise DocumentProcessingError(f"Failed to process PDF: {e}") from e

        try:
            page_count = len(pdf)
            logger.debug(f"PDF has {page_count} pages, extracting text...")
            page_texts = [page.get_text() for page in pdf]
        finally:
            pdf.close()

        # "Page n:" headers alone do not count as content
        if not any(text.strip() for text in page_texts):
            raise DocumentProcessingError(
                "Failed to process PDF: No text content found in PDF (scanned image?)."
            )

        full_text = "".join(
            f"Page {number}:\n{text}\n\n" for number, text in enumerate(page_texts, start=1)
        )
        logger.debug(f"Extracted {len(full_text)} chars from PDF")

        return [Document(
            id=filename,
            content=full_text,
            filename=filename,
            metadata=analyze(full_text),
        )]
