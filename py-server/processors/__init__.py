"""
PDF Processing Components

Stateful components for layout-preserving text extraction:

- LayoutTextDevice: PDFMiner device emitting one positioned run per shown string
- LayoutTextReconstructor: Run accumulation and layout text synthesis
- TextChunk: Orientation-normalized geometry of a single run

These differ from utils/ which contains pure, stateless functions.
"""

from processors.text_chunk import TextChunk
from processors.layout_text import LayoutTextReconstructor, TextChunkFilter
from processors.layout_text_device import LayoutTextDevice, RenderListener

__version__ = "1.0.0"
__all__ = [
    'TextChunk',
    'LayoutTextReconstructor',
    'TextChunkFilter',
    'LayoutTextDevice',
    'RenderListener',
]
