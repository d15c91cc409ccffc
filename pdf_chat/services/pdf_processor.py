"""
PDF processing service for extracting text from PDF files.
"""

from io import BytesIO
from typing import Callable, Optional
import logging

import PyPDF2

from ..config import settings
from ..utils import measure_time, log_processing_info, handle_processing_error

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, str], None]


class PDFProcessingError(Exception):
    """Raised when a PDF cannot be read."""


class PDFProcessor:
    """Service for extracting the text of a PDF file."""

    def __init__(self, max_file_size_mb: Optional[int] = None):
        self.max_file_size_mb = max_file_size_mb or settings.max_file_size_mb

    def validate_pdf_content(self, file_content: bytes, filename: str) -> None:
        """
        Validate PDF file content before extraction.

        Raises:
            PDFProcessingError: If the file is empty, too large or not a PDF
        """
        if not file_content:
            raise PDFProcessingError(f"{filename} is empty")

        if len(file_content) > self.max_file_size_mb * 1024 * 1024:
            size_mb = len(file_content) / (1024 * 1024)
            raise PDFProcessingError(
                f"File {filename} is too large: {size_mb:.1f}MB. Maximum size is {self.max_file_size_mb}MB."
            )

        if not filename.lower().endswith(".pdf"):
            raise PDFProcessingError(f"Invalid file type: {filename}. Only PDF files are allowed.")

    @measure_time
    def extract_text(self, file_content: bytes, filename: str,
                     on_progress: Optional[ProgressCallback] = None) -> str:
        """
        Extract the text of every page, joined by newlines.

        Args:
            file_content: PDF file content as bytes
            filename: Name of the PDF file
            on_progress: Called with (percent, status) as pages are read

        Returns:
            Extracted text
        """
        self.validate_pdf_content(file_content, filename)

        def report(percent: int, status: str) -> None:
            if on_progress:
                on_progress(percent, status)

        report(0, "Starting file processing...")

        try:
            pdf_reader = PyPDF2.PdfReader(BytesIO(file_content))
            total_pages = len(pdf_reader.pages)
        except Exception as e:
            handle_processing_error("pdf_open", e, {"filename": filename})
            raise PDFProcessingError(f"Failed to read PDF {filename}: {e}") from e

        page_texts = []
        for page_num, page in enumerate(pdf_reader.pages, start=1):
            try:
                page_texts.append(page.extract_text() or "")
            except Exception as page_error:
                error_info = handle_processing_error(
                    "page_extraction",
                    page_error,
                    {"filename": filename, "page": page_num}
                )
                logger.warning(f"Skipping page {page_num}: {error_info}")
            report(int(page_num * 100 / total_pages), f"Extracted page {page_num} of {total_pages}")

        text = "\n".join(t for t in page_texts if t)

        log_processing_info("PDF extraction completed", {
            "filename": filename,
            "total_pages": total_pages,
            "characters": len(text)
        })
        report(100, "Complete!")

        return text
