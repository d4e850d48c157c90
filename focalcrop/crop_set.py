"""
CropSet - Derives one crop per viewport and tracks which set was uploaded.
"""

import hashlib
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence

from PIL import Image

from .errors import ImageNotReady
from .geometry import CropRectangle, compute_crop_rectangle
from .rasterizer import Rasterizer
from .source_image import FocalPoint, SourceImage
from .viewport import ViewportSpec


@dataclass
class DerivedAsset:
    """
    A crop rendered for one viewport.

    Attributes:
        viewport: Viewport the crop was rendered for
        pixels: Raw pixel buffer
        mode: Pillow mode of the pixel buffer ('RGB' or 'RGBA')
        width: Width in pixels
        height: Height in pixels
        crop: Source rectangle the pixels were sampled from
    """
    viewport: ViewportSpec
    pixels: bytes
    mode: str
    width: int
    height: int
    crop: Optional[CropRectangle] = None

    @property
    def viewport_label(self) -> str:
        return self.viewport.label

    def to_image(self) -> Image.Image:
        """Rebuild a Pillow image from the pixel buffer."""
        return Image.frombytes(self.mode, (self.width, self.height), self.pixels)


@dataclass
class CropSet:
    """
    Ordered derived assets computed from a single focal point.

    The fingerprint changes whenever the focal point, viewport specs or
    source pixels change, so it identifies stale uploads.
    """
    focal_point: FocalPoint
    assets: List[DerivedAsset] = field(default_factory=list)
    fingerprint: str = ''

    def __iter__(self) -> Iterator[DerivedAsset]:
        return iter(self.assets)

    def __len__(self) -> int:
        return len(self.assets)

    def __getitem__(self, index: int) -> DerivedAsset:
        return self.assets[index]


class CropSetBuilder:
    """
    Applies crop geometry and rasterization across viewport specs.
    """

    def __init__(
        self,
        rasterizer: Optional[Rasterizer] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize builder.

        Args:
            rasterizer: Rasterizer instance (default: Lanczos rasterizer)
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.rasterizer = rasterizer or Rasterizer(logger=self.logger)

    def build(
        self,
        source: SourceImage,
        focal_point: FocalPoint,
        viewports: Sequence[ViewportSpec]
    ) -> CropSet:
        """
        Build the crop set for a source image and focal point.

        Args:
            source: Decoded source image
            focal_point: Normalized focal point
            viewports: Viewport specs; output order matches

        Returns:
            CropSet with one DerivedAsset per viewport

        Raises:
            ImageNotReady: If the source is not decoded or has zero size
        """
        if not source.is_ready:
            raise ImageNotReady(
                f"Cannot build crops: source image not ready ({source.width}x{source.height})"
            )

        image = source.image
        assets = []
        for viewport in viewports:
            crop = compute_crop_rectangle(
                source.width, source.height,
                focal_point.x, focal_point.y,
                viewport.width, viewport.height,
            )
            rendered = self.rasterizer.resample(image, crop, viewport.width, viewport.height)
            self.logger.debug(
                f"Derived {viewport.label} ({viewport.dimensions}) from "
                f"crop x={crop.x:.1f} y={crop.y:.1f} w={crop.width:.1f} h={crop.height:.1f}"
            )
            assets.append(DerivedAsset(
                viewport=viewport,
                pixels=rendered.tobytes(),
                mode=rendered.mode,
                width=rendered.width,
                height=rendered.height,
                crop=crop,
            ))

        crop_set = CropSet(
            focal_point=focal_point,
            assets=assets,
            fingerprint=self.fingerprint(focal_point, assets),
        )
        self.logger.info(
            f"Built {len(assets)} crops at focal ({focal_point.x:.3f}, {focal_point.y:.3f}) "
            f"[{crop_set.fingerprint[:12]}]"
        )
        return crop_set

    @staticmethod
    def fingerprint(focal_point: FocalPoint, assets: Sequence[DerivedAsset]) -> str:
        """SHA-256 over focal point, viewport specs and pixel buffers."""
        digest = hashlib.sha256()
        digest.update(f"{focal_point.x!r},{focal_point.y!r}".encode())
        for asset in assets:
            vp = asset.viewport
            digest.update(f"|{vp.label}:{vp.width}x{vp.height}:{asset.mode}|".encode())
            digest.update(asset.pixels)
        return digest.hexdigest()


def build_crop_set(
    source: SourceImage,
    focal_point: FocalPoint,
    viewports: Sequence[ViewportSpec]
) -> List[DerivedAsset]:
    """Build derived assets with a default builder."""
    return CropSetBuilder().build(source, focal_point, viewports).assets


class UploadLedger:
    """
    Remembers the fingerprint of the last crop set uploaded per destination.

    Replaces an ad-hoc "has uploaded" flag: a crop set needs uploading
    whenever its fingerprint differs from the last one recorded.
    """

    def __init__(self):
        self._uploaded: Dict[str, str] = {}

    def needs_upload(self, destination: str, crop_set: CropSet) -> bool:
        return self._uploaded.get(destination) != crop_set.fingerprint

    def mark_uploaded(self, destination: str, crop_set: CropSet) -> None:
        self._uploaded[destination] = crop_set.fingerprint

    def invalidate(self, destination: str) -> None:
        self._uploaded.pop(destination, None)

    def last_uploaded(self, destination: str) -> Optional[str]:
        return self._uploaded.get(destination)
