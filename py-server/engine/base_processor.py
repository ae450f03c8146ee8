"""
Base processor for PDFEngine.

Processors hold a reference to the engine that opened the document and go
through an explicit initialize/cleanup lifecycle driven by the engine.
"""

from abc import ABC
from typing import TYPE_CHECKING
import logging

if TYPE_CHECKING:
    from engine.pdf_engine import PDFEngine

logger = logging.getLogger(__name__)


class BaseProcessor(ABC):
    """
    Abstract base class for PDF processors.

    Subclasses override initialize() and cleanup() to manage their own
    per-document state.
    """

    def __init__(self, engine: 'PDFEngine'):
        self.engine = engine
        self._initialized = False
        logger.debug(f"{self.__class__.__name__} created with engine reference")

    def initialize(self) -> None:
        """Prepare the processor for use. Safe to call once per document."""
        if self._initialized:
            logger.warning(f"{self.__class__.__name__} already initialized")
            return

        self._initialized = True
        logger.debug(f"{self.__class__.__name__} initialized")

    def cleanup(self) -> None:
        """Release processor state. Idempotent."""
        if not self._initialized:
            return

        self._initialized = False
        logger.debug(f"{self.__class__.__name__} cleaned up")

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def validate_state(self) -> bool:
        """
        Returns:
            True if the processor is initialized and attached to an engine
        """
        if not self._initialized:
            logger.error(f"{self.__class__.__name__} not initialized")
            return False

        if self.engine is None:
            logger.error(f"{self.__class__.__name__} has no engine reference")
            return False

        return True

    def __repr__(self) -> str:
        status = "initialized" if self._initialized else "not initialized"
        return f"{self.__class__.__name__}({status})"
