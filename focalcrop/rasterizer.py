"""
Rasterizer - Crops and resamples source pixels to exact viewport dimensions.
"""

import io
import logging
from typing import Optional, Tuple

from PIL import Image

from .errors import InvalidDimensions
from .geometry import CropRectangle


class Rasterizer:
    """
    Produces fixed-resolution crops from a source image using Pillow.
    """

    OUTPUT_FORMATS = {
        'image/jpeg': ('JPEG', 'image/jpeg', 'jpg'),
        'image/jpg': ('JPEG', 'image/jpeg', 'jpg'),
        'image/png': ('PNG', 'image/png', 'png'),
    }
    DEFAULT_FORMAT = ('PNG', 'image/png', 'png')

    def __init__(
        self,
        resample: int = Image.Resampling.LANCZOS,
        quality: int = 90,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize rasterizer.

        Args:
            resample: Pillow resampling filter (default: LANCZOS)
            quality: JPEG quality for encoded output (default: 90)
            logger: Optional logger instance
        """
        self.resample_filter = resample
        self.quality = quality
        self.logger = logger or logging.getLogger(__name__)

    def resample(
        self,
        source: Image.Image,
        crop: CropRectangle,
        target_width: int,
        target_height: int
    ) -> Image.Image:
        """
        Crop the source to the rectangle and resize to the target size.

        Args:
            source: Decoded source image
            crop: Crop rectangle in source pixel space
            target_width: Output width in pixels
            target_height: Output height in pixels

        Returns:
            Image of exactly target_width x target_height
        """
        if target_width <= 0 or target_height <= 0:
            raise InvalidDimensions(
                f"Target dimensions must be positive, got {target_width}x{target_height}"
            )

        img = self._convert_color_mode(source)
        box = crop.to_box()
        self.logger.debug(f"Resampling box {box} -> {target_width}x{target_height}")

        return img.resize(
            (target_width, target_height),
            resample=self.resample_filter,
            box=box,
        )

    def encode(self, image: Image.Image, mime_type: str) -> Tuple[bytes, str, str]:
        """
        Encode a derived image for upload.

        JPEG sources stay JPEG; everything else is written as PNG.

        Returns:
            Tuple of (data, content_type, extension)
        """
        output_format, content_type, extension = self._get_output_format(mime_type)
        output = io.BytesIO()

        if output_format == 'JPEG':
            self._flatten_alpha(image).save(output, format='JPEG', quality=self.quality)
        else:
            image.save(output, format='PNG')

        return output.getvalue(), content_type, extension

    def _convert_color_mode(self, img: Image.Image) -> Image.Image:
        """Normalize to RGB, or RGBA when the source carries transparency."""
        if img.mode in ('RGB', 'RGBA'):
            return img
        if img.mode in ('P', 'LA', 'PA') or 'transparency' in img.info:
            return img.convert('RGBA')
        return img.convert('RGB')

    @staticmethod
    def _flatten_alpha(img: Image.Image) -> Image.Image:
        """Composite an RGBA image onto white for formats without alpha."""
        if img.mode != 'RGBA':
            return img.convert('RGB') if img.mode != 'RGB' else img
        background = Image.new('RGB', img.size, (255, 255, 255))
        background.paste(img, mask=img.split()[-1])
        return background

    def _get_output_format(self, mime_type: str) -> Tuple[str, str, str]:
        """Determine output format based on source MIME type."""
        return self.OUTPUT_FORMATS.get((mime_type or '').lower(), self.DEFAULT_FORMAT)
