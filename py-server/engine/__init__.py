"""
PDF Processing Engine

Core engine module for coordinating PDF operations.
Contains the PDFEngine class and the layout text processor.
"""

__version__ = "1.0.0"

from engine.pdf_engine import PDFEngine
from engine.config import EngineConfig, LayoutTextOptions, ProcessorOptions, PageRange
from engine.base_processor import BaseProcessor
from engine.layout_text_processor import LayoutTextProcessor

__all__ = [
    'PDFEngine',
    'EngineConfig',
    'LayoutTextOptions',
    'ProcessorOptions',
    'PageRange',
    'BaseProcessor',
    'LayoutTextProcessor',
]
