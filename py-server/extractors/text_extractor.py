"""
PDF Layout Text Extractor

Layout-preserving plain text extraction: one string per page whose
whitespace approximates where the text sits on the page.

Uses PDFEngine + LayoutTextProcessor for all extraction operations.
"""

import logging
import time
from typing import Any, Dict, List, Optional, Sequence

from engine import EngineConfig, LayoutTextOptions, PageRange, PDFEngine
from models.pdf_types import LayoutTextPage, RegionFilter
from utils.validation import PdfValidationError, ProcessingTimeoutError

DEFAULT_START_PAGE = 1

logger = logging.getLogger(__name__)


def _check_deadline(started: float, timeout_seconds: int, page_num: int) -> None:
    elapsed = time.monotonic() - started
    if elapsed > timeout_seconds:
        raise ProcessingTimeoutError(
            f"Layout text extraction exceeded {timeout_seconds}s before page {page_num} "
            f"({elapsed:.1f}s elapsed)"
        )


def extract_layout_text(
    file_path: str,
    start_page: int = DEFAULT_START_PAGE,
    end_page: Optional[int] = None,
    text_config: Optional[Dict] = None,
    regions: Optional[Sequence[RegionFilter]] = None,
    timeout_seconds: Optional[int] = None
) -> List[LayoutTextPage]:
    """
    Extract layout-preserving text from a range of pages.

    Args:
        file_path: Path to the PDF
        start_page: First page, 1-based
        end_page: Last page, inclusive; None for the end of the document
        text_config: LayoutTextOptions values (page_left, fixed_char_width, dump_state, timeout_seconds)
        regions: Optional regions; each page then also reports one string per region
        timeout_seconds: Time budget for the whole document; None keeps the engine default

    Returns:
        One LayoutTextPage per extracted page

    Raises:
        PdfValidationError: If the document cannot be processed
        ProcessingTimeoutError: If the time budget runs out between pages
    """
    try:
        options = LayoutTextOptions.from_dict(text_config or {})
        if not options.validate():
            raise PdfValidationError(f"Invalid layout text configuration: {options.to_dict()}")

        engine_kwargs: Dict[str, Any] = {'layout_text_options': options.to_dict()}
        if timeout_seconds is not None:
            engine_kwargs['timeout_seconds'] = timeout_seconds
        engine_config = EngineConfig(**engine_kwargs)

        with PDFEngine(file_path, config=engine_config) as engine:
            processor = engine.layout_text_processor
            total_pages = engine.get_page_count()

            page_range = PageRange(start=max(DEFAULT_START_PAGE, start_page), end=end_page)
            page_numbers = page_range.to_page_numbers(total_pages)

            logger.info(
                f"Processing PDF (layout text): {total_pages} total pages, "
                f"extracting {len(page_numbers)} pages {page_range}"
            )

            started = time.monotonic()
            pages: List[LayoutTextPage] = []
            for page_num in page_numbers:
                _check_deadline(started, processor.timeout_seconds, page_num)
                logger.debug(f"Processing page {page_num}")

                reconstructor = processor.collect_page(page_num - 1)
                region_texts = processor.region_texts(reconstructor, regions) if regions else None

                pages.append(LayoutTextPage(
                    pageNumber=page_num,
                    text=reconstructor.get_resultant_text(),
                    chunkCount=reconstructor.chunk_count,
                    regions=region_texts,
                ))

            logger.info(f"Layout text extraction complete: {len(pages)} pages processed")
            return pages

    except (PdfValidationError, ProcessingTimeoutError):
        raise
    except Exception as e:
        logger.error(f"Layout text extraction failed: {e}", exc_info=True)
        raise PdfValidationError(f"PDF extraction failed: {str(e)}")
