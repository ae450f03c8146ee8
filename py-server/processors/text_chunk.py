"""Text Chunk Geometry

A text chunk is one rendered text run projected into the frame of its own
baseline. Orientation, perpendicular distance and parallel distances are
computed once so that chunks can be sorted and compared for line membership
without touching the floating point geometry again.
"""

import math
from typing import Sequence, Tuple

import numpy as np

ORIENTATION_SCALE = 1000
DEFAULT_ORIENTATION = (1.0, 0.0, 0.0)
ORIGIN = np.array([0.0, 0.0, 1.0])
INT_MAX = 2 ** 31 - 1
INT_MIN = -2 ** 31


def truncate(value: float) -> int:
    """
    Quantize toward zero into the 32-bit integer range.

    NaN maps to 0 and out of range values, infinities included, saturate.
    """
    if math.isnan(value):
        return 0
    if value >= INT_MAX:
        return INT_MAX
    if value <= INT_MIN:
        return INT_MIN
    return int(value)


def as_location(point: Sequence[float]) -> np.ndarray:
    """Convert an (x, y) or (x, y, 1) point into a homogeneous 3-vector."""
    if len(point) == 2:
        return np.array([float(point[0]), float(point[1]), 1.0])
    return np.array([float(point[0]), float(point[1]), float(point[2])])


class TextChunk:
    """
    Represents a chunk of text, its orientation, and location relative to
    the orientation vector.

    Chunks are ordered by orientation, then perpendicular distance, then
    parallel distance. Two chunks with the same orientation and perpendicular
    distance are on the same line.
    """

    __slots__ = (
        '_text',
        '_start_location',
        '_end_location',
        '_orientation_vector',
        '_orientation_magnitude',
        '_dist_perpendicular',
        '_dist_parallel_start',
        '_dist_parallel_end',
        '_char_space_width',
    )

    def __init__(
        self,
        text: str,
        start_location: Sequence[float],
        end_location: Sequence[float],
        char_space_width: float
    ):
        """
        Build a chunk from one run's baseline.

        Args:
            text: Literal run text
            start_location: Baseline start in user space, rise already removed
            end_location: Baseline end in user space, rise already removed
            char_space_width: Width of a single space in the run's font
        """
        self._text = text
        self._start_location = as_location(start_location)
        self._end_location = as_location(end_location)
        self._char_space_width = float(char_space_width)

        with np.errstate(invalid='ignore', over='ignore'):
            o_vector = self._end_location - self._start_location
            length = np.linalg.norm(o_vector)
            if length == 0 or not np.isfinite(length):
                o_vector = np.array(DEFAULT_ORIENTATION)
                length = 1.0
            self._orientation_vector = o_vector / length
            self._orientation_magnitude = truncate(
                np.arctan2(self._orientation_vector[1], self._orientation_vector[0]) * ORIENTATION_SCALE
            )

            # Both operands lie in the z=0 plane, so the cross product points
            # purely along z; its z component is the signed point-line distance.
            cross = np.cross(self._start_location - ORIGIN, self._orientation_vector)
            self._dist_perpendicular = truncate(cross[2])

            self._dist_parallel_start = float(np.dot(self._orientation_vector, self._start_location))
            self._dist_parallel_end = float(np.dot(self._orientation_vector, self._end_location))

    @property
    def text(self) -> str:
        return self._text

    @property
    def start_location(self) -> np.ndarray:
        return self._start_location.copy()

    @property
    def end_location(self) -> np.ndarray:
        return self._end_location.copy()

    @property
    def orientation_vector(self) -> np.ndarray:
        return self._orientation_vector.copy()

    @property
    def orientation_magnitude(self) -> int:
        return self._orientation_magnitude

    @property
    def dist_perpendicular(self) -> int:
        """Y position in an unrotated frame, truncated to an integer."""
        return self._dist_perpendicular

    @property
    def dist_parallel_start(self) -> float:
        """X position of the run start in an unrotated frame."""
        return self._dist_parallel_start

    @property
    def dist_parallel_end(self) -> float:
        return self._dist_parallel_end

    @property
    def char_space_width(self) -> float:
        return self._char_space_width

    @property
    def sort_key(self) -> Tuple[int, int, float]:
        return (self._orientation_magnitude, self._dist_perpendicular, self._dist_parallel_start)

    def same_line(self, other: 'TextChunk') -> bool:
        """True if other has the same orientation and perpendicular distance."""
        if self._orientation_magnitude != other._orientation_magnitude:
            return False
        if self._dist_perpendicular != other._dist_perpendicular:
            return False
        return True

    def distance_from_end_of(self, other: 'TextChunk') -> float:
        """
        Distance between the end of other and the start of this chunk,
        measured along this chunk's orientation.

        Only meaningful for chunks on the same line; that is not checked here.
        """
        return self._dist_parallel_start - other._dist_parallel_end

    def compare_to(self, other: 'TextChunk') -> int:
        """Compare by orientation, perpendicular distance, then parallel distance."""
        if self is other:
            return 0
        mine = self.sort_key
        theirs = other.sort_key
        if mine == theirs:
            return 0
        return -1 if mine < theirs else 1

    def __lt__(self, other: 'TextChunk') -> bool:
        return self.compare_to(other) < 0

    def diagnostics(self) -> str:
        start = tuple(round(float(v), 3) for v in self._start_location[:2])
        end = tuple(round(float(v), 3) for v in self._end_location[:2])
        return (
            f"Text (@{start} -> {end}): {self._text}\n"
            f"orientationMagnitude: {self._orientation_magnitude}\n"
            f"distPerpendicular: {self._dist_perpendicular}\n"
            f"distParallel: {self._dist_parallel_start}"
        )

    def __repr__(self) -> str:
        return (
            f"TextChunk({self._text!r}, magnitude={self._orientation_magnitude}, "
            f"perpendicular={self._dist_perpendicular}, "
            f"parallel={self._dist_parallel_start:.2f}->{self._dist_parallel_end:.2f})"
        )
