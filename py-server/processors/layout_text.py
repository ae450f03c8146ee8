"""Layout Text Reconstruction

Render listener that keeps track of the position of every text run on a page
and rebuilds text whose whitespace approximates the physical layout, in the
spirit of `pdftotext -layout`.

Runs are accumulated unordered while the page is interpreted. On request they
are ordered by orientation, then perpendicular, then parallel distance. Runs
with the same orientation and perpendicular distance form a line. Within a
line, gaps are turned into enough spaces to move each run to the fixed-width
column nearest its true horizontal position.
"""

import logging
import math
from typing import Callable, List, Optional, Protocol, Union

from models.pdf_types import ImageRenderInfo, TextRenderInfo
from processors.text_chunk import TextChunk, truncate

logger = logging.getLogger(__name__)

DEFAULT_PAGE_LEFT = 0.0
DEFAULT_FIXED_CHAR_WIDTH = 6.0


class TextChunkFilter(Protocol):
    """Decides which chunks take part in text synthesis."""

    def accept(self, chunk: TextChunk) -> bool:
        ...


ChunkFilter = Union[TextChunkFilter, Callable[[TextChunk], bool]]


def _as_predicate(chunk_filter: Optional[ChunkFilter]) -> Optional[Callable[[TextChunk], bool]]:
    if chunk_filter is None:
        return None
    accept = getattr(chunk_filter, 'accept', None)
    if callable(accept):
        return accept
    return chunk_filter


class LayoutTextReconstructor:
    """
    Accumulates text chunks for one extraction session and synthesizes
    layout-preserving text from them.

    Synthesis never mutates the accumulated chunks, so several filters can be
    applied to one traversal of a page.
    """

    def __init__(
        self,
        page_left: float = DEFAULT_PAGE_LEFT,
        fixed_char_width: float = DEFAULT_FIXED_CHAR_WIDTH,
        dump_state: bool = False
    ):
        """
        Args:
            page_left: X coordinate treated as column zero
            fixed_char_width: Width of one synthetic character cell
            dump_state: Log every accumulated chunk before synthesis
        """
        self.page_left = page_left
        self.fixed_char_width = fixed_char_width
        self.dump_state = dump_state
        self.chunks: List[TextChunk] = []

    # Render listener protocol

    def begin_text_block(self) -> None:
        pass

    def end_text_block(self) -> None:
        pass

    def render_text(self, render_info: TextRenderInfo) -> None:
        """Record one text run."""
        segment = render_info.baseline
        if render_info.rise != 0:
            # Super/subscripts belong to the line they are raised from
            segment = segment.translate(0.0, -render_info.rise)
        chunk = TextChunk(
            render_info.text,
            segment.start,
            segment.end,
            render_info.single_space_width,
        )
        self.chunks.append(chunk)

    def render_image(self, render_info: Optional[ImageRenderInfo] = None) -> None:
        """Images have no place in the text layout."""
        pass

    # Synthesis

    def is_chunk_at_word_boundary(self, chunk: TextChunk, previous_chunk: TextChunk) -> bool:
        """
        Determine whether chunk starts a new word relative to previous_chunk.

        A gap of more than half a space width is a boundary, and so is a chunk
        that starts more than one space width before the previous one ends
        (overlapping text). Subclasses may tune this.
        """
        dist = chunk.distance_from_end_of(previous_chunk)
        if dist < -chunk.char_space_width or dist > chunk.char_space_width / 2.0:
            return True
        return False

    def insert_spaces(
        self,
        buffer_length: int,
        start_of_line_position: int,
        chunk_start: float,
        space_required: bool
    ) -> int:
        """
        Number of spaces needed to move the write position to the column of
        chunk_start.

        Args:
            buffer_length: Current length of the output
            start_of_line_position: Output index where the current line starts
            chunk_start: Parallel start distance of the chunk being placed
            space_required: Emit at least one space even if already past the column

        Returns:
            Space count, never negative
        """
        index_now = buffer_length - start_of_line_position
        index_to_be = 0
        if self.fixed_char_width:
            column = (chunk_start - self.page_left) / self.fixed_char_width
            if math.isfinite(column):
                index_to_be = truncate(column)
        spaces_to_insert = index_to_be - index_now
        if spaces_to_insert < 1 and space_required:
            spaces_to_insert = 1
        return max(spaces_to_insert, 0)

    def filter_chunks(self, chunk_filter: Optional[ChunkFilter] = None) -> List[TextChunk]:
        """Return a new list of the chunks accepted by chunk_filter."""
        predicate = _as_predicate(chunk_filter)
        if predicate is None:
            return list(self.chunks)
        return [chunk for chunk in self.chunks if predicate(chunk)]

    def get_resultant_text(self, chunk_filter: Optional[ChunkFilter] = None) -> str:
        """
        Get the laid out text of the chunks that pass chunk_filter.

        Filtering here is cheaper than re-running the page through a filtered
        device when several regions of one page are extracted, but it only
        sees the state captured in TextChunk.

        Args:
            chunk_filter: Object with accept(chunk) or a predicate; None keeps all chunks

        Returns:
            The text so far
        """
        if self.dump_state:
            self._dump_state()

        ordered = sorted(self.filter_chunks(chunk_filter), key=lambda chunk: chunk.sort_key)

        parts: List[str] = []
        length = 0
        start_of_line_position = 0
        last_chunk: Optional[TextChunk] = None

        for chunk in ordered:
            if last_chunk is None:
                spaces = self.insert_spaces(length, start_of_line_position, chunk.dist_parallel_start, False)
            elif chunk.same_line(last_chunk):
                spaces = 0
                if self.is_chunk_at_word_boundary(chunk, last_chunk):
                    # Text that already carries the separator does not need another one
                    space_required = not chunk.text.startswith(' ') and not last_chunk.text.endswith(' ')
                    spaces = self.insert_spaces(
                        length, start_of_line_position, chunk.dist_parallel_start, space_required
                    )
            else:
                parts.append('\n')
                length += 1
                start_of_line_position = length
                spaces = self.insert_spaces(length, start_of_line_position, chunk.dist_parallel_start, False)

            if spaces:
                parts.append(' ' * spaces)
                length += spaces
            parts.append(chunk.text)
            length += len(chunk.text)
            last_chunk = chunk

        return ''.join(parts)

    def _dump_state(self) -> None:
        for chunk in self.chunks:
            logger.debug(chunk.diagnostics())

    @property
    def chunk_count(self) -> int:
        return len(self.chunks)

    def __repr__(self) -> str:
        return (
            f"LayoutTextReconstructor({len(self.chunks)} chunks, "
            f"page_left={self.page_left}, fixed_char_width={self.fixed_char_width})"
        )
