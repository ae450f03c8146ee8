"""
Configuration system for PDF Engine.

Provides structured configuration using dataclasses with clear defaults,
type safety, and backward compatibility with dict-based configs.
"""

from dataclasses import dataclass, fields
from typing import Optional, Dict, Any, List
import logging
import math

logger = logging.getLogger(__name__)

# Smallest character cell, in user-space units
MIN_FIXED_CHAR_WIDTH = 0.5


def _known_keys(cls, config: Dict[str, Any]) -> Dict[str, Any]:
    """Keep keys that are fields of cls, warning about the rest."""
    valid_keys = {f.name for f in fields(cls)}
    filtered_config = {}
    for key, value in config.items():
        if key in valid_keys:
            filtered_config[key] = value
        else:
            logger.warning(f"Unknown config key '{key}' will be ignored")
    return filtered_config


@dataclass
class ProcessorOptions:
    """
    Base class for processor-specific configuration options.

    All processor option classes should inherit from this to provide
    consistent interface and common functionality.
    """
    enabled: bool = True
    timeout_seconds: Optional[int] = None  # Override engine timeout if set

    def validate(self) -> bool:
        """
        Validate configuration options.

        Returns:
            True if configuration is valid, False otherwise
        """
        if self.timeout_seconds is not None and self.timeout_seconds < 0:
            logger.error("timeout_seconds must be non-negative")
            return False
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'enabled': self.enabled,
            'timeout_seconds': self.timeout_seconds
        }


@dataclass
class LayoutTextOptions(ProcessorOptions):
    """
    Configuration options for layout-preserving text extraction.

    page_left is the x coordinate that maps to column zero and
    fixed_char_width the width of one synthetic character cell, both in
    page user-space units.
    """
    page_left: float = 0.0
    fixed_char_width: float = 6.0
    dump_state: bool = False  # Log every chunk at DEBUG before synthesis

    def validate(self) -> bool:
        if not super().validate():
            return False

        if not math.isfinite(self.page_left):
            logger.error("page_left must be a finite number")
            return False

        if not math.isfinite(self.fixed_char_width) or self.fixed_char_width < MIN_FIXED_CHAR_WIDTH:
            logger.error(f"fixed_char_width must be a finite number of at least {MIN_FIXED_CHAR_WIDTH}")
            return False

        return True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        base_dict = super().to_dict()
        base_dict.update({
            'page_left': self.page_left,
            'fixed_char_width': self.fixed_char_width,
            'dump_state': self.dump_state,
        })
        return base_dict

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'LayoutTextOptions':
        """Create from dictionary, ignoring unknown keys with a warning."""
        return cls(**_known_keys(cls, config))


@dataclass
class EngineConfig:
    """
    Central configuration for PDFEngine initialization.

    Example:
        >>> config = EngineConfig(max_file_size_mb=20)
        >>> engine = PDFEngine(file_path, config=config)
    """

    # Processor-specific options (as dictionaries for flexibility)
    layout_text_options: Optional[Dict[str, Any]] = None

    # Performance
    timeout_seconds: int = 300
    max_file_size_mb: int = 50

    # Validation
    validate_on_open: bool = True

    def validate(self) -> bool:
        """
        Validate configuration values.

        Returns:
            True if all values are valid, False otherwise
        """
        if self.timeout_seconds < 30:
            logger.error("timeout_seconds must be at least 30 seconds")
            return False

        if self.max_file_size_mb < 1:
            logger.error("max_file_size_mb must be at least 1 MB")
            return False

        if self.layout_text_options is not None:
            if not LayoutTextOptions.from_dict(self.layout_text_options).validate():
                return False

        return True

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to dictionary.

        Useful for serialization, logging, and debugging.
        """
        return {
            'layout_text_options': dict(self.layout_text_options) if self.layout_text_options else None,
            'timeout_seconds': self.timeout_seconds,
            'max_file_size_mb': self.max_file_size_mb,
            'validate_on_open': self.validate_on_open,
        }

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'EngineConfig':
        """
        Create EngineConfig from dictionary.

        Unknown keys are ignored with a warning.
        """
        return cls(**_known_keys(cls, config))

    @classmethod
    def default(cls) -> 'EngineConfig':
        """Create configuration with default values."""
        return cls()

    def __repr__(self) -> str:
        return (
            f"EngineConfig("
            f"timeout={self.timeout_seconds}s, "
            f"max_size={self.max_file_size_mb}MB, "
            f"validate_on_open={self.validate_on_open})"
        )


@dataclass
class PageRange:
    """
    Represents a range of pages to process in a PDF document.

    Uses 1-based page numbering, as PDF viewers do.

    Example:
        >>> page_range = PageRange(start=5, end=None)  # page 5 to the end
        >>> page_range.to_page_numbers(7)
        [5, 6, 7]
    """

    start: int  # 1-based page number
    end: Optional[int] = None  # None means "to end of document"

    def __post_init__(self):
        """Validate page range on construction."""
        if self.start < 1:
            raise ValueError(f"start page must be >= 1, got {self.start}")

        if self.end is not None:
            if self.end < 1:
                raise ValueError(f"end page must be >= 1, got {self.end}")
            if self.end < self.start:
                raise ValueError(
                    f"end page ({self.end}) must be >= start page ({self.start})"
                )

    def to_page_numbers(self, total_pages: int) -> List[int]:
        """
        Convert range to explicit list of page numbers, clamped to the document.
        """
        if total_pages < 1:
            return []

        start = max(1, min(self.start, total_pages))
        end = total_pages if self.end is None else min(self.end, total_pages)

        if start > end:
            return []

        return list(range(start, end + 1))

    @classmethod
    def all_pages(cls) -> 'PageRange':
        """Create range representing all pages in document."""
        return cls(start=1, end=None)

    @classmethod
    def single_page(cls, page_num: int) -> 'PageRange':
        return cls(start=page_num, end=page_num)

    def __repr__(self) -> str:
        if self.end is None:
            return f"PageRange({self.start}→end)"
        elif self.start == self.end:
            return f"PageRange(page {self.start})"
        else:
            return f"PageRange({self.start}→{self.end})"
