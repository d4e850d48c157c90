"""
Geometry - Focal-point crop rectangle computation.
"""

from dataclasses import dataclass
from typing import Tuple

from .errors import InvalidDimensions


# Float results this close below an integer are treated as that integer
SNAP_EPSILON = 1e-6


@dataclass(frozen=True)
class CropRectangle:
    """
    Crop area in source pixel space.

    Attributes:
        x: Left edge
        y: Top edge
        width: Crop width
        height: Crop height
    """
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def aspect(self) -> float:
        return self.width / self.height

    def to_box(self) -> Tuple[int, int, int, int]:
        """
        Integer (left, top, right, bottom) box for sampling.

        Origin and size are truncated independently after snapping values
        within SNAP_EPSILON of the next integer, so 58.99999999999999 samples
        59 rows. The box stays inside the source and is at least one pixel.
        """
        left = int(self.x + SNAP_EPSILON)
        top = int(self.y + SNAP_EPSILON)
        return (
            left,
            top,
            left + max(int(self.width + SNAP_EPSILON), 1),
            top + max(int(self.height + SNAP_EPSILON), 1),
        )


def compute_crop_rectangle(
    source_width: int,
    source_height: int,
    focal_x: float,
    focal_y: float,
    target_width: int,
    target_height: int
) -> CropRectangle:
    """
    Compute the largest target-aspect rectangle centred on the focal point.

    The rectangle spans the full source height when the source is
    relatively wider than the target, otherwise the full source width.
    Near an edge it is translated inward rather than shrunk, so the focal
    point may end up off-centre in the crop.

    Args:
        source_width: Source image width in pixels
        source_height: Source image height in pixels
        focal_x: Normalized horizontal focal coordinate (0.0 - 1.0)
        focal_y: Normalized vertical focal coordinate (0.0 - 1.0)
        target_width: Target viewport width in pixels
        target_height: Target viewport height in pixels

    Returns:
        CropRectangle fully inside the source

    Raises:
        InvalidDimensions: If any dimension is not positive
    """
    if source_width <= 0 or source_height <= 0:
        raise InvalidDimensions(
            f"Source dimensions must be positive, got {source_width}x{source_height}"
        )
    if target_width <= 0 or target_height <= 0:
        raise InvalidDimensions(
            f"Target dimensions must be positive, got {target_width}x{target_height}"
        )

    target_aspect = target_width / target_height
    source_aspect = source_width / source_height

    if source_aspect > target_aspect:
        crop_height = float(source_height)
        crop_width = crop_height * target_aspect
    else:
        crop_width = float(source_width)
        crop_height = crop_width / target_aspect

    # Float overshoot when the aspects are (nearly) equal
    crop_width = min(crop_width, float(source_width))
    crop_height = min(crop_height, float(source_height))

    center_x = focal_x * source_width
    center_y = focal_y * source_height

    crop_x = center_x - crop_width / 2
    crop_y = center_y - crop_height / 2

    if crop_x < 0:
        crop_x = 0.0
    if crop_y < 0:
        crop_y = 0.0
    if crop_x + crop_width > source_width:
        crop_x = source_width - crop_width
    if crop_y + crop_height > source_height:
        crop_y = source_height - crop_height

    return CropRectangle(x=crop_x, y=crop_y, width=crop_width, height=crop_height)
