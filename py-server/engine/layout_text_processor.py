"""Layout Text Processor for PDFEngine

Runs a page through pdfminer's content stream interpreter with a
LayoutTextDevice and synthesizes layout-preserving text from the collected
runs.
"""

import logging
from typing import List, Optional, Sequence, TYPE_CHECKING

from pdfminer.pdfinterp import PDFPageInterpreter, PDFResourceManager
from pdfminer.pdfpage import PDFPage

from engine.base_processor import BaseProcessor
from engine.config import LayoutTextOptions
from processors.layout_text import ChunkFilter, LayoutTextReconstructor
from processors.layout_text_device import LayoutTextDevice

if TYPE_CHECKING:
    from engine.pdf_engine import PDFEngine

logger = logging.getLogger(__name__)


class LayoutTextProcessor(BaseProcessor):
    """
    Layout-preserving text extraction for PDFEngine.

    Each page is interpreted once per call to collect_page(); the returned
    reconstructor can then be synthesized any number of times with different
    chunk filters.
    """

    def __init__(self, engine: 'PDFEngine', options: Optional[LayoutTextOptions] = None):
        super().__init__(engine)
        self.options = options or LayoutTextOptions()

    def initialize(self) -> None:
        if not self.options.validate():
            raise ValueError(f"Invalid layout text options: {self.options.to_dict()}")
        super().initialize()

    def new_reconstructor(self) -> LayoutTextReconstructor:
        return LayoutTextReconstructor(
            page_left=self.options.page_left,
            fixed_char_width=self.options.fixed_char_width,
            dump_state=self.options.dump_state,
        )

    def collect_page(self, page_index: int) -> LayoutTextReconstructor:
        """
        Interpret one page and collect its text runs.

        Args:
            page_index: 0-based page index

        Returns:
            Reconstructor holding every text run of the page
        """
        if not self.validate_state():
            raise RuntimeError("LayoutTextProcessor is not ready")

        page_count = self.engine.get_page_count()
        if page_index < 0 or page_index >= page_count:
            raise IndexError(f"Page index {page_index} out of bounds (0-{page_count-1})")

        page_num = page_index + 1
        reconstructor = self.new_reconstructor()

        with open(self.engine.file_path, 'rb') as fp:
            rsrcmgr = PDFResourceManager()
            device = LayoutTextDevice(rsrcmgr, reconstructor, page_num=page_num)
            interpreter = PDFPageInterpreter(rsrcmgr, device)
            for pdfminer_page in PDFPage.get_pages(fp, pagenos={page_index}):
                interpreter.process_page(pdfminer_page)
            device.close()

        logger.debug(f"Page {page_num}: collected {reconstructor.chunk_count} text chunks")
        return reconstructor

    def extract_page_text(self, page_index: int, chunk_filter: Optional[ChunkFilter] = None) -> str:
        """Layout-preserving text of one page, optionally filtered."""
        return self.collect_page(page_index).get_resultant_text(chunk_filter)

    def extract_regions(self, page_index: int, regions: Sequence[ChunkFilter]) -> List[str]:
        """
        Text of several regions of one page from a single interpretation pass.

        Args:
            page_index: 0-based page index
            regions: One chunk filter per region

        Returns:
            One string per region, in the order given
        """
        return self.region_texts(self.collect_page(page_index), regions)

    @staticmethod
    def region_texts(reconstructor: LayoutTextReconstructor, regions: Sequence[ChunkFilter]) -> List[str]:
        """Synthesize one string per region from an already collected page."""
        return [reconstructor.get_resultant_text(region) for region in regions]

    @property
    def timeout_seconds(self) -> int:
        """Time budget for one document; the processor option overrides the engine setting."""
        if self.options.timeout_seconds is not None:
            return self.options.timeout_seconds
        return self.engine.config.timeout_seconds
