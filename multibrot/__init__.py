"""Public API for Multibrot rendering utilities."""

from .errors import AllocationError, CodecError, InvalidRequest, MultibrotError, OutOfBounds
from .numeric import complex_power, escapes
from .pixels import BLACK, Comparison, Pixel, PixelBuffer, compare, create, diff
from .renderer import (
    INTERIOR_COLOR,
    RenderRequest,
    SamplingMetadata,
    balance,
    compute_metadata,
    pixel_to_complex,
    render,
)

__version__ = "0.1.0"

__all__ = [
    "AllocationError",
    "BLACK",
    "CodecError",
    "Comparison",
    "INTERIOR_COLOR",
    "InvalidRequest",
    "MultibrotError",
    "OutOfBounds",
    "Pixel",
    "PixelBuffer",
    "RenderRequest",
    "SamplingMetadata",
    "balance",
    "compare",
    "complex_power",
    "compute_metadata",
    "create",
    "diff",
    "escapes",
    "pixel_to_complex",
    "render",
]
