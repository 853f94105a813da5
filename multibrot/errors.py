"""Exception types raised by the rendering and image utilities."""


class MultibrotError(Exception):
    """Base class for every error raised by :mod:`multibrot`."""


class AllocationError(MultibrotError, MemoryError):
    """Pixel storage for a buffer could not be obtained."""


class OutOfBounds(MultibrotError, IndexError):
    """A pixel coordinate lies outside the buffer."""


class CodecError(MultibrotError, OSError):
    """An image could not be encoded, decoded, read or written."""


class InvalidRequest(MultibrotError, ValueError):
    """Rendering parameters or buffer dimensions are not acceptable."""
