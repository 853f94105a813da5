"""Bounds-checked RGB pixel storage for rendered frames."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, NamedTuple

import numpy as np

from .errors import AllocationError, InvalidRequest, OutOfBounds

CHANNELS = 3


class Pixel(NamedTuple):
    """A single 8-bit RGB triple."""

    red: int
    green: int
    blue: int


BLACK = Pixel(0, 0, 0)


def _check_dimension(name: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InvalidRequest(f"{name} must be an integer, got {value!r}")
    if value <= 0:
        raise InvalidRequest(f"{name} must be positive, got {value}")
    return int(value)


def _check_channel(name: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if not 0 <= value <= 255:
        raise ValueError(f"{name} must be in [0, 255], got {value}")
    return int(value)


class PixelBuffer:
    """A ``width`` x ``height`` grid of RGB pixels, initially black.

    Pixels live in a contiguous ``(height, width, 3)`` ``uint8`` array in
    row-major order: ``row`` selects the scan line (top to bottom) and ``col``
    the position within it (left to right). This is also the order in which
    :meth:`rows` hands scan lines to the image codec.
    """

    __slots__ = ("_pixels",)

    def __init__(self, width: int, height: int) -> None:
        width = _check_dimension("width", width)
        height = _check_dimension("height", height)
        try:
            self._pixels = np.zeros((height, width, CHANNELS), dtype=np.uint8)
        except (MemoryError, ValueError) as exc:
            raise AllocationError(f"cannot allocate a {width}x{height} pixel buffer") from exc

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        """Build a buffer holding a copy of an ``(height, width, 3)`` array."""

        array = np.asarray(array)
        if array.ndim != 3 or array.shape[2] != CHANNELS:
            raise InvalidRequest(f"expected an array of shape (height, width, 3), got {array.shape}")
        height, width = array.shape[:2]
        buffer = cls(width, height)
        buffer._pixels[...] = array.astype(np.uint8, copy=False)
        return buffer

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    @property
    def size(self) -> int:
        """Number of pixels in the buffer."""

        return self.width * self.height

    def _check_coordinates(self, row: int, col: int) -> None:
        if not (0 <= row < self.height and 0 <= col < self.width):
            raise OutOfBounds(
                f"pixel ({row}, {col}) is outside a {self.width}x{self.height} buffer"
            )

    def get_pixel(self, row: int, col: int) -> Pixel:
        self._check_coordinates(row, col)
        red, green, blue = self._pixels[row, col]
        return Pixel(int(red), int(green), int(blue))

    def set_pixel(self, row: int, col: int, red: int, green: int, blue: int) -> None:
        self._check_coordinates(row, col)
        self._pixels[row, col] = (
            _check_channel("red", red),
            _check_channel("green", green),
            _check_channel("blue", blue),
        )

    def fill_rows(self, start: int, stop: int, mask: np.ndarray, color: Pixel) -> None:
        """Paint ``color`` into rows ``[start, stop)`` wherever ``mask`` is set.

        Calls touching disjoint row ranges never write the same memory, so
        concurrent workers may each fill their own band without locking.
        """

        if not 0 <= start <= stop <= self.height:
            raise OutOfBounds(f"rows [{start}, {stop}) are outside a buffer of height {self.height}")
        mask = np.asarray(mask, dtype=bool)
        if mask.shape != (stop - start, self.width):
            raise ValueError(f"mask shape {mask.shape} does not match rows [{start}, {stop}) x {self.width}")
        color = tuple(_check_channel(name, value) for name, value in zip(Pixel._fields, color))
        self._pixels[start:stop][mask] = color

    def rows(self) -> Iterator[bytes]:
        """Yield each scan line, top to bottom, as packed ``R G B`` bytes."""

        for row in self._pixels:
            yield row.tobytes()

    def to_array(self) -> np.ndarray:
        return self._pixels.copy()

    def count(self, color: Pixel) -> int:
        """Number of pixels whose value equals ``color``."""

        return int(np.count_nonzero(np.all(self._pixels == np.asarray(color, dtype=np.uint8), axis=-1)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self._pixels.shape == other._pixels.shape and bool(np.array_equal(self._pixels, other._pixels))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"PixelBuffer(width={self.width}, height={self.height})"


def create(width: int, height: int) -> PixelBuffer:
    """Allocate a black ``width`` x ``height`` buffer."""

    return PixelBuffer(width, height)


def diff(image: PixelBuffer, other: PixelBuffer) -> int:
    """Count the differences between two buffers.

    Every position of the overlapping ``min(width) x min(height)`` region whose
    RGB triple differs counts once. A size mismatch adds the absolute
    difference of the two pixel counts as a single flat penalty, so images of
    different dimensions still compare with one number.
    """

    width = min(image.width, other.width)
    height = min(image.height, other.height)
    ours = image._pixels[:height, :width]
    theirs = other._pixels[:height, :width]
    changed = np.any(ours != theirs, axis=-1)
    return int(np.count_nonzero(changed)) + abs(image.size - other.size)


@dataclass(frozen=True)
class Comparison:
    """Difference count between two images and its share of each image."""

    count: int
    primary_ratio: float
    secondary_ratio: float

    @property
    def identical(self) -> bool:
        return self.count == 0


def compare(image: PixelBuffer, other: PixelBuffer) -> Comparison:
    count = diff(image, other)
    return Comparison(
        count=count,
        primary_ratio=count / image.size,
        secondary_ratio=count / other.size,
    )
