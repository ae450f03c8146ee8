"""
Pydantic models for layout text extraction.

Render events passed from the pdfminer device to the layout reconstructor,
region filters, and the request/response shapes of the API.
"""

from typing import TYPE_CHECKING, List, Optional, Tuple

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from processors.text_chunk import TextChunk


class LineSegment(BaseModel):
    """Baseline of a text run in user space"""
    start: Tuple[float, float]
    end: Tuple[float, float]

    def translate(self, dx: float, dy: float) -> 'LineSegment':
        """Return a copy shifted by (dx, dy)"""
        return LineSegment(
            start=(self.start[0] + dx, self.start[1] + dy),
            end=(self.end[0] + dx, self.end[1] + dy),
        )

    @property
    def length(self) -> float:
        dx = self.end[0] - self.start[0]
        dy = self.end[1] - self.start[1]
        return (dx * dx + dy * dy) ** 0.5


class TextRenderInfo(BaseModel):
    """One visible text run as emitted by the content stream interpreter"""
    text: str
    baseline: LineSegment
    rise: float = 0.0  # Super/subscript offset still contained in baseline
    single_space_width: float
    font_name: Optional[str] = None
    font_size: Optional[float] = None


class ImageRenderInfo(BaseModel):
    """Image paint event; carried for completeness, never laid out"""
    name: str
    ctm: Tuple[float, float, float, float, float, float] = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)


class RegionFilter(BaseModel):
    """Accepts chunks whose baseline start lies inside a user-space rectangle"""
    x: float
    y: float
    width: float = Field(ge=0)
    height: float = Field(ge=0)

    def accept(self, chunk: 'TextChunk') -> bool:
        location = chunk.start_location
        return (
            self.x <= location[0] <= self.x + self.width
            and self.y <= location[1] <= self.y + self.height
        )


class LayoutTextPage(BaseModel):
    """Layout-preserving text of a single page"""
    pageNumber: int
    text: str
    chunkCount: int = 0
    regions: Optional[List[str]] = None


class LayoutTextResponse(BaseModel):
    """Response payload for layout text extraction"""
    pages: List[LayoutTextPage]
    pageLeft: float
    fixedCharWidth: float
