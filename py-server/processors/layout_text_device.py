"""Layout Text Device for PDF Content Extraction

PDFMiner device that turns every string operand of the text showing
operators into one positioned text run and hands it to a render listener.

The listener receives the run's baseline in user space (rise included),
the rise itself, and the width of a single space in the run's font.
"""

import logging
import math
from typing import Optional, Protocol, Tuple

from pdfminer.pdfdevice import PDFTextDevice
from pdfminer.pdffont import PDFUnicodeNotDefined
from pdfminer.pdfinterp import PDFResourceManager
from pdfminer.utils import apply_matrix_norm, apply_matrix_pt, mult_matrix

from models.pdf_types import ImageRenderInfo, LineSegment, TextRenderInfo

logger = logging.getLogger(__name__)

SCALING_PERCENTAGE_DIVISOR = 0.01
DISPLACEMENT_MULTIPLIER = 0.001
SPACE_CID = 32
NO_BREAK_SPACE_CID = 160
IDENTITY_MATRIX = (1, 0, 0, 1, 0, 0)


class RenderListener(Protocol):
    """Receiver of text and image render events."""

    def render_text(self, render_info: TextRenderInfo) -> None:
        ...

    def render_image(self, render_info: Optional[ImageRenderInfo] = None) -> None:
        ...


def _undefined_char(cid: int) -> str:
    return f"(cid:{cid})"


class LayoutTextDevice(PDFTextDevice):
    """
    Text device emitting one run per shown string.

    Pen advancement mirrors pdfminer's own layout analyzer so that run
    endpoints agree with the glyph boxes pdfminer would compute.
    """

    def __init__(self, rsrcmgr: PDFResourceManager, listener: RenderListener, page_num: int = 1):
        """
        Args:
            rsrcmgr: PDF resource manager
            listener: Receiver of the text and image events
            page_num: Page number (1-indexed), used for logging
        """
        super().__init__(rsrcmgr)
        self.listener = listener
        self.page_num = page_num
        self.text_run_count = 0
        self.image_count = 0

    def begin_page(self, page, ctm):
        logger.debug(f"Page {self.page_num}: begin_page called")
        self.text_run_count = 0
        self.image_count = 0

    def end_page(self, page):
        logger.debug(
            f"Page {self.page_num}: {self.text_run_count} text runs, {self.image_count} images"
        )

    def render_string(self, textstate, seq, ncs, graphicstate):
        """Handle text rendering (Tj/TJ/'/\" operators)"""
        font = textstate.font
        if not font:
            return

        ctm = self.ctm or IDENTITY_MATRIX
        matrix = mult_matrix(textstate.matrix, ctm)
        fontsize = textstate.fontsize
        scaling = textstate.scaling * SCALING_PERCENTAGE_DIVISOR
        charspace = textstate.charspace * scaling
        wordspace = textstate.wordspace * scaling
        rise = textstate.rise
        if font.is_multibyte():
            wordspace = 0
        dxscale = DISPLACEMENT_MULTIPLIER * fontsize * scaling
        vertical = font.is_vertical()

        single_space_width = self._single_space_width(textstate, matrix, scaling)
        fontname = getattr(font, 'fontname', None)

        (x, y) = textstate.linematrix
        needcharspace = False
        for item in seq:
            if isinstance(item, (int, float)):
                if vertical:
                    y -= item * dxscale
                else:
                    x -= item * dxscale
                needcharspace = True
                continue

            if isinstance(item, str):
                item = item.encode('latin-1', errors='ignore')
            if not isinstance(item, bytes):
                continue

            start = (x, y)
            chars = []
            for cid in font.decode(item):
                if needcharspace:
                    if vertical:
                        y += charspace
                    else:
                        x += charspace
                try:
                    chars.append(font.to_unichr(cid))
                except PDFUnicodeNotDefined:
                    chars.append(_undefined_char(cid))

                adv = font.char_width(cid) * fontsize * scaling
                if cid == SPACE_CID and wordspace:
                    adv += wordspace
                if vertical:
                    y += adv
                else:
                    x += adv
                needcharspace = True

            text = ''.join(chars)
            if not text:
                continue

            self._emit_text(
                text,
                matrix,
                start,
                (x, y),
                rise,
                single_space_width,
                fontname,
                fontsize,
            )

        textstate.linematrix = (x, y)

    def _emit_text(
        self,
        text: str,
        matrix,
        start: Tuple[float, float],
        end: Tuple[float, float],
        rise: float,
        single_space_width: float,
        fontname: Optional[str],
        fontsize: float
    ) -> None:
        baseline = LineSegment(
            start=apply_matrix_pt(matrix, (start[0], start[1] + rise)),
            end=apply_matrix_pt(matrix, (end[0], end[1] + rise)),
        )
        render_info = TextRenderInfo(
            text=text,
            baseline=baseline,
            rise=rise,
            single_space_width=single_space_width,
            font_name=str(fontname) if fontname is not None else None,
            font_size=fontsize,
        )
        self.text_run_count += 1
        self.listener.render_text(render_info)

    @staticmethod
    def _single_space_width(textstate, matrix, scaling: float) -> float:
        """Width of one space in user space, falling back to no-break space."""
        font = textstate.font
        width = font.char_width(SPACE_CID)
        if width == 0:
            width = font.char_width(NO_BREAK_SPACE_CID)
        text_width = (width * textstate.fontsize + textstate.charspace + textstate.wordspace) * scaling
        (dx, dy) = apply_matrix_norm(matrix, (text_width, 0))
        return math.hypot(dx, dy)

    def render_image(self, name, stream):
        """Images are reported to the listener, which ignores them"""
        image_name = name
        if isinstance(name, bytes):
            image_name = name.decode('latin-1', errors='ignore')
        image_name = str(image_name).lstrip('/')

        self.image_count += 1
        ctm = tuple(float(v) for v in (self.ctm or IDENTITY_MATRIX))
        self.listener.render_image(ImageRenderInfo(name=image_name, ctm=ctm))
