"""
PDF Processing Engine - Core Coordinator

The PDFEngine opens a document, validates it, and owns the processors that
work on it.

Usage:
    >>> from engine.pdf_engine import PDFEngine
    >>> with PDFEngine('document.pdf') as engine:
    ...     text = engine.layout_text_processor.extract_page_text(0)
"""

import logging
import os
from pathlib import Path
from typing import Optional, Any, Dict, Tuple

import pikepdf

from engine.config import EngineConfig, LayoutTextOptions
from utils.validation import PdfValidationError, comprehensive_pdf_validation

logger = logging.getLogger(__name__)


class PDFEngine:
    """
    PDF engine with resource management and processor coordination.

    The document is opened with pikepdf for page geometry; page content is
    interpreted by the processors.

    Example:
        >>> with PDFEngine('document.pdf') as engine:
        ...     total_pages = engine.get_page_count()
    """

    def __init__(self, file_path: str, config: Optional[EngineConfig] = None):
        """
        Initialize PDF engine with file path and optional configuration.

        Note: Document is not opened until entering context manager (__enter__).

        Args:
            file_path: Path to PDF file to process
            config: Engine configuration (uses defaults if None)

        Raises:
            FileNotFoundError: If file does not exist
            PdfValidationError: If configuration is invalid
        """
        self.file_path = file_path
        self.config = config or EngineConfig.default()

        if not os.path.exists(file_path):
            raise FileNotFoundError(f"PDF file not found: {file_path}")

        if not self.config.validate():
            raise PdfValidationError("Invalid engine configuration")

        self._pikepdf_doc = None
        self._is_open = False
        self._layout_text_processor = None

        self._page_count: Optional[int] = None
        self._file_size_mb: Optional[float] = None

        logger.debug(f"PDFEngine initialized for: {Path(file_path).name}")

    def __enter__(self) -> 'PDFEngine':
        """
        Open the PDF and initialize processors.

        Raises:
            PdfValidationError: If PDF cannot be opened or is invalid
        """
        try:
            logger.info(f"Opening PDF: {self.file_path}")

            if self.config.validate_on_open:
                self._validate_pdf_file()

            self._pikepdf_doc = pikepdf.open(self.file_path)
            self._page_count = len(self._pikepdf_doc.pages)
            self._file_size_mb = os.path.getsize(self.file_path) / (1024 * 1024)
            self._is_open = True

            self._initialize_processors()

            logger.info(
                f"PDF opened successfully: {self._page_count} pages, "
                f"{self._file_size_mb:.2f} MB"
            )

            return self

        except PdfValidationError:
            self._cleanup_resources()
            raise
        except Exception as e:
            logger.error(f"Failed to open PDF: {e}")
            self._cleanup_resources()
            raise PdfValidationError(f"Failed to open PDF: {str(e)}")

    def __exit__(self, exc_type, exc_val, exc_tb):
        logger.info("Closing PDF engine")
        self._cleanup_resources()

        if exc_type is not None:
            logger.error(f"Exception during engine operation: {exc_val}")

        return False

    def _validate_pdf_file(self) -> None:
        results = comprehensive_pdf_validation(self.file_path, self.config.max_file_size_mb)
        if not results['is_valid']:
            raise PdfValidationError("; ".join(results['errors']))
        for warning in results['warnings']:
            logger.warning(warning)

    def _initialize_processors(self) -> None:
        from engine.layout_text_processor import LayoutTextProcessor

        options = LayoutTextOptions.from_dict(self.config.layout_text_options or {})
        if options.enabled:
            self._layout_text_processor = LayoutTextProcessor(self, options)
            self._layout_text_processor.initialize()

    def _cleanup_resources(self) -> None:
        """Release processors and the document. Safe to call multiple times."""
        if self._layout_text_processor is not None:
            try:
                self._layout_text_processor.cleanup()
            except Exception as e:
                logger.warning(f"Error cleaning up layout text processor: {e}")
            finally:
                self._layout_text_processor = None

        if self._pikepdf_doc is not None:
            try:
                self._pikepdf_doc.close()
            except Exception as e:
                logger.warning(f"Error closing pikepdf document: {e}")
            finally:
                self._pikepdf_doc = None

        self._is_open = False

    def _require_open(self) -> None:
        if not self._is_open:
            raise RuntimeError("Engine not opened - use within context manager")

    def _require_page(self, page_index: int) -> None:
        self._require_open()
        if page_index < 0 or page_index >= self._page_count:
            raise IndexError(f"Page index {page_index} out of bounds (0-{self._page_count-1})")

    # Public API - Document Information

    def get_page_count(self) -> int:
        self._require_open()
        return self._page_count

    def get_file_size_mb(self) -> float:
        self._require_open()
        return self._file_size_mb

    def get_page_mediabox(self, page_index: int) -> Tuple[float, float, float, float]:
        """
        Get the MediaBox of a page as (left, bottom, right, top).

        Args:
            page_index: 0-based page index

        Raises:
            RuntimeError: If engine not opened
            IndexError: If page index out of bounds
        """
        self._require_page(page_index)
        mediabox = self._pikepdf_doc.pages[page_index].mediabox
        return (float(mediabox[0]), float(mediabox[1]), float(mediabox[2]), float(mediabox[3]))

    @property
    def pikepdf_document(self):
        self._require_open()
        return self._pikepdf_doc

    @property
    def layout_text_processor(self):
        """Access LayoutTextProcessor instance."""
        if self._layout_text_processor is None:
            raise RuntimeError("LayoutTextProcessor not enabled or not yet initialized")
        return self._layout_text_processor

    @property
    def is_open(self) -> bool:
        return self._is_open

    def get_status(self) -> Dict[str, Any]:
        return {
            'is_open': self._is_open,
            'file_path': self.file_path,
            'page_count': self._page_count,
            'file_size_mb': self._file_size_mb,
            'layout_text_processor': self._layout_text_processor is not None,
            'config': self.config.to_dict()
        }

    def __repr__(self) -> str:
        status = "open" if self._is_open else "closed"
        pages = f"{self._page_count} pages" if self._page_count else "unknown pages"
        return f"PDFEngine({Path(self.file_path).name}, {status}, {pages})"
