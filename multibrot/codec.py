"""PNG encoding and decoding of pixel buffers through Pillow."""

from __future__ import annotations

import io
import os
import tempfile
from pathlib import Path
from typing import Union

import numpy as np
import PIL.Image

from .errors import CodecError
from .pixels import PixelBuffer

PathLike = Union[str, "os.PathLike[str]"]

FORMAT = "PNG"


def to_image(buffer: PixelBuffer) -> PIL.Image.Image:
    """Wrap a buffer's pixels in an 8-bit RGB Pillow image."""

    return PIL.Image.fromarray(buffer.to_array())


def from_image(image: PIL.Image.Image) -> PixelBuffer:
    if image.mode != "RGB":
        image = image.convert("RGB")
    return PixelBuffer.from_array(np.asarray(image, dtype=np.uint8))


def encode(buffer: PixelBuffer) -> bytes:
    """Serialize ``buffer`` as a PNG file, scan lines top to bottom."""

    stream = io.BytesIO()
    try:
        to_image(buffer).save(stream, format=FORMAT)
    except (OSError, ValueError) as exc:
        raise CodecError(f"cannot encode {buffer!r} as {FORMAT}: {exc}") from exc
    return stream.getvalue()


def decode(data: bytes) -> PixelBuffer:
    """Read an image file's bytes back into a buffer."""

    try:
        with PIL.Image.open(io.BytesIO(data)) as image:
            image.load()
            return from_image(image)
    except (OSError, ValueError, SyntaxError, PIL.Image.DecompressionBombError) as exc:
        raise CodecError(f"cannot decode image data: {exc}") from exc


def save(buffer: PixelBuffer, path: PathLike) -> Path:
    """Write ``buffer`` to ``path`` as PNG.

    The data goes to a temporary file beside ``path`` that replaces the
    destination only once it is complete, so a failed save leaves no partial
    file behind.
    """

    path = Path(path)
    data = encode(buffer)
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    except OSError as exc:
        raise CodecError(f"cannot write {path}: {exc}") from exc
    try:
        with os.fdopen(fd, "wb") as stream:
            stream.write(data)
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except OSError as exc:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise CodecError(f"cannot write {path}: {exc}") from exc
    return path


def load(path: PathLike) -> PixelBuffer:
    """Read the image stored at ``path``."""

    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise CodecError(f"cannot read {path}: {exc}") from exc
    return decode(data)
