"""Escape-time rendering of Multibrot sets into pixel buffers."""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

import numpy as np
import tensorflow as tf

from .errors import InvalidRequest
from .pixels import Pixel, PixelBuffer

INTERIOR_COLOR = Pixel(0, 0, 255)
DEFAULT_DEVICE = "/CPU:0"

# The kernel carries loop counters and the exponent as int32 tensors.
MAX_COUNT = int(np.iinfo(np.int32).max)


def _is_integer(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


@dataclass(frozen=True)
class RenderRequest:
    """Parameters that describe a single render of a Multibrot set.

    ``exponent`` is the power ``e`` of the recurrence ``z <- z**e + c``;
    ``e = 2`` gives the classical Mandelbrot set. The rectangle
    ``[xmin, xmax] x [ymin, ymax]`` of the complex plane is mapped onto the
    ``width`` x ``height`` pixel grid.
    """

    width: int
    height: int
    iterations: int
    exponent: int
    xmin: float
    xmax: float
    ymin: float
    ymax: float
    escape_radius: float
    interior_color: Pixel = INTERIOR_COLOR

    def validate(self) -> None:
        """Raise :class:`InvalidRequest` unless the request can be rendered."""

        for name in ("width", "height", "iterations"):
            value = getattr(self, name)
            if not _is_integer(value) or value < 1:
                raise InvalidRequest(f"{name} must be a positive integer, got {value!r}")
        if not _is_integer(self.exponent) or self.exponent < 0:
            raise InvalidRequest(f"exponent must be a non-negative integer, got {self.exponent!r}")
        for name in ("iterations", "exponent"):
            if getattr(self, name) > MAX_COUNT:
                raise InvalidRequest(f"{name} must not exceed {MAX_COUNT}, got {getattr(self, name)}")
        if not self.xmax > self.xmin:
            raise InvalidRequest(f"xmax ({self.xmax}) must be greater than xmin ({self.xmin})")
        if not self.ymax > self.ymin:
            raise InvalidRequest(f"ymax ({self.ymax}) must be greater than ymin ({self.ymin})")
        if not self.escape_radius > 0:
            raise InvalidRequest(f"escape radius must be positive, got {self.escape_radius}")
        if len(self.interior_color) != 3 or not all(
            _is_integer(channel) and 0 <= channel <= 255 for channel in self.interior_color
        ):
            raise InvalidRequest(f"interior color must be three integers in [0, 255], got {self.interior_color!r}")


@dataclass(frozen=True)
class SamplingMetadata:
    """Metadata describing the sampling grid for a rendered frame."""

    x_min: float
    y_min: float
    x_step: float
    y_step: float
    width: int
    height: int


def compute_metadata(request: RenderRequest) -> SamplingMetadata:
    x_step = np.float64(request.xmax - request.xmin) / np.float64(request.width)
    y_step = np.float64(request.ymax - request.ymin) / np.float64(request.height)
    return SamplingMetadata(
        x_min=float(request.xmin),
        y_min=float(request.ymin),
        x_step=float(x_step),
        y_step=float(y_step),
        width=int(request.width),
        height=int(request.height),
    )


def pixel_to_complex(metadata: SamplingMetadata, row: int, col: int) -> complex:
    """Point of the plane sampled by pixel ``(row, col)``.

    Columns advance along the real axis from ``x_min`` and rows advance along
    the imaginary axis from ``y_min``, so row 0 is the bottom edge of the
    plane rectangle.
    """

    return complex(metadata.x_min + col * metadata.x_step, metadata.y_min + row * metadata.y_step)


def balance(n: int, parts: int, index: int) -> tuple[int, int]:
    """Return the ``[lo, hi)`` range of the ``index``'th of ``parts`` slices of ``n`` items.

    The first ``n % parts`` slices hold one extra item.
    """

    length = n // parts
    extra = n - parts * length
    if index < extra:
        lo = index * length + index
        hi = lo + length + 1
    else:
        lo = index * length + extra
        hi = lo + length
    return lo, hi


def _complex_power(z_re: tf.Tensor, z_im: tf.Tensor, exponent: tf.Tensor) -> tuple[tf.Tensor, tf.Tensor]:
    """Raise ``z`` to ``exponent`` with ``exponent - 1`` multiplications; ``z**0`` is 1."""

    def cond(k: tf.Tensor, w_re: tf.Tensor, w_im: tf.Tensor) -> tf.Tensor:
        return tf.less(k, exponent)

    def body(k: tf.Tensor, w_re: tf.Tensor, w_im: tf.Tensor) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor]:
        return k + 1, z_re * w_re - z_im * w_im, z_re * w_im + z_im * w_re

    _, w_re, w_im = tf.while_loop(cond, body, (tf.constant(1, dtype=tf.int32), z_re, z_im))
    zero_power = tf.equal(exponent, 0)
    w_re = tf.where(zero_power, tf.ones_like(w_re), w_re)
    w_im = tf.where(zero_power, tf.zeros_like(w_im), w_im)
    return w_re, w_im


@tf.function
def _escape_step(
    z_re: tf.Tensor,
    z_im: tf.Tensor,
    c_re: tf.Tensor,
    c_im: tf.Tensor,
    active: tf.Tensor,
    exponent: tf.Tensor,
    limit: tf.Tensor,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor]:
    """Perform a single iteration for points that have not escaped."""

    w_re, w_im = _complex_power(z_re, z_im, exponent)
    z_re = tf.where(active, w_re + c_re, z_re)
    z_im = tf.where(active, w_im + c_im, z_im)
    escaped = tf.greater(z_re * z_re + z_im * z_im, limit)
    return z_re, z_im, tf.logical_and(active, tf.logical_not(escaped))


@tf.function
def _escape_run(
    c_re: tf.Tensor,
    c_im: tf.Tensor,
    iterations: tf.Tensor,
    exponent: tf.Tensor,
    limit: tf.Tensor,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Iterate from ``z = c`` until the budget is spent or every point escaped."""

    i = tf.constant(0, dtype=tf.int32)
    active = tf.ones_like(c_re, tf.bool)

    def cond(i: tf.Tensor, z_re: tf.Tensor, z_im: tf.Tensor, active: tf.Tensor) -> tf.Tensor:
        return tf.logical_and(tf.less(i, iterations), tf.reduce_any(active))

    def body(i: tf.Tensor, z_re: tf.Tensor, z_im: tf.Tensor, active: tf.Tensor) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
        z_re, z_im, active = _escape_step(z_re, z_im, c_re, c_im, active, exponent, limit)
        return i + 1, z_re, z_im, active

    return tf.while_loop(cond, body, (i, c_re, c_im, active))


def _render_band(
    buffer: PixelBuffer,
    request: RenderRequest,
    metadata: SamplingMetadata,
    lo: int,
    hi: int,
    device: str,
) -> None:
    x = np.float64(metadata.x_min) + np.arange(metadata.width, dtype=np.float64) * np.float64(metadata.x_step)
    y = np.float64(metadata.y_min) + np.arange(lo, hi, dtype=np.float64) * np.float64(metadata.y_step)
    radius = np.float64(request.escape_radius)

    with tf.device(device):
        x_tf = tf.convert_to_tensor(x, dtype=tf.float64)
        y_tf = tf.convert_to_tensor(y, dtype=tf.float64)
        c_re, c_im = tf.meshgrid(x_tf, y_tf)
        _, _, _, interior = _escape_run(
            c_re,
            c_im,
            tf.constant(request.iterations, dtype=tf.int32),
            tf.constant(request.exponent, dtype=tf.int32),
            tf.constant(radius * radius, dtype=tf.float64),
        )

    buffer.fill_rows(lo, hi, interior.numpy(), request.interior_color)


def _resolve_workers(workers: Optional[int], height: int) -> int:
    if workers is None:
        workers = os.cpu_count() or 1
    elif isinstance(workers, bool) or not isinstance(workers, int) or workers < 1:
        raise InvalidRequest(f"workers must be a positive integer, got {workers!r}")
    return max(1, min(workers, height))


def render(request: RenderRequest, *, workers: Optional[int] = None, device: Optional[str] = None) -> PixelBuffer:
    """Render ``request`` and return the filled buffer.

    Every pixel is classified independently: the orbit of its plane point
    ``c`` starts at ``z = c`` and the pixel is painted ``interior_color`` if
    ``|z|`` never exceeds the escape radius within ``iterations`` steps.
    Escaped pixels stay black.

    Rows are split into ``workers`` disjoint bands rendered concurrently; the
    call returns only after every band has been written.
    """

    request.validate()
    workers = _resolve_workers(workers, request.height)
    buffer = PixelBuffer(request.width, request.height)
    metadata = compute_metadata(request)
    device = device if device is not None else DEFAULT_DEVICE
    bands = [balance(request.height, workers, index) for index in range(workers)]

    if len(bands) == 1:
        _render_band(buffer, request, metadata, 0, request.height, device)
        return buffer

    with ThreadPoolExecutor(max_workers=len(bands), thread_name_prefix="multibrot") as pool:
        futures = [pool.submit(_render_band, buffer, request, metadata, lo, hi, device) for lo, hi in bands]
        for future in futures:
            future.result()
    return buffer

