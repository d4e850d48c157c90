"""
SourceImage and FocalPoint - Inputs to crop derivation.
"""

import io
from dataclasses import dataclass
from typing import Optional

from PIL import Image

from .errors import ImageNotReady, InvalidFocalPoint


@dataclass(frozen=True)
class FocalPoint:
    """
    Normalized focal coordinate; (0.5, 0.5) is the image centre.

    Attributes:
        x: Horizontal position (0.0 = left edge, 1.0 = right edge)
        y: Vertical position (0.0 = top edge, 1.0 = bottom edge)
    """
    x: float = 0.5
    y: float = 0.5

    def __post_init__(self):
        for name, value in (('x', self.x), ('y', self.y)):
            if not 0.0 <= value <= 1.0:
                raise InvalidFocalPoint(f"Focal {name} must be within [0, 1], got {value}")

    @classmethod
    def parse(cls, value: str) -> 'FocalPoint':
        """Parse an 'x,y' string."""
        try:
            x_str, y_str = value.split(',')
            return cls(float(x_str), float(y_str))
        except ValueError as e:
            if isinstance(e, InvalidFocalPoint):
                raise
            raise InvalidFocalPoint(f"Expected 'x,y', got '{value}'") from e


class SourceImage:
    """
    An uploaded or selected image, decoded once and treated as immutable.
    """

    MIME_TYPES = {
        'JPEG': 'image/jpeg',
        'PNG': 'image/png',
        'GIF': 'image/gif',
        'WEBP': 'image/webp',
        'TIFF': 'image/tiff',
        'BMP': 'image/bmp',
    }

    def __init__(self, image: Image.Image, mime_type: Optional[str] = None):
        self._image = image
        self.mime_type = mime_type or self.MIME_TYPES.get(image.format or '', 'image/png')
        self._decoded = False

    @classmethod
    def from_bytes(cls, data: bytes, decode: bool = True) -> 'SourceImage':
        """
        Open an image from bytes.

        Args:
            data: Encoded image
            decode: Decode pixel data immediately (default: True)
        """
        source = cls(Image.open(io.BytesIO(data)))
        if decode:
            source.decode()
        return source

    @classmethod
    def from_path(cls, path: str, decode: bool = True) -> 'SourceImage':
        """Open an image from a file path."""
        with open(path, 'rb') as f:
            return cls.from_bytes(f.read(), decode=decode)

    def decode(self) -> 'SourceImage':
        """Force pixel decoding; idempotent."""
        if not self._decoded:
            if self.width and self.height:
                self._image.load()
            self._decoded = True
        return self

    @property
    def width(self) -> int:
        return self._image.width

    @property
    def height(self) -> int:
        return self._image.height

    @property
    def is_ready(self) -> bool:
        """True once pixels are decoded and both dimensions are non-zero."""
        return self._decoded and self.width > 0 and self.height > 0

    @property
    def image(self) -> Image.Image:
        """The decoded Pillow image."""
        if not self.is_ready:
            raise ImageNotReady(
                f"Source image not ready (decoded={self._decoded}, "
                f"size={self.width}x{self.height})"
            )
        return self._image

    def __repr__(self) -> str:
        return f"SourceImage({self.width}x{self.height}, {self.mime_type})"
