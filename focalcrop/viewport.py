"""
ViewportSpec - Named target dimensions for a derived crop.
"""

import re
from dataclasses import dataclass
from typing import Iterable, List

from .errors import InvalidDimensions


_DIMENSIONS_RE = re.compile(r'^\s*(\d+)\s*[xX]\s*(\d+)\s*$')


@dataclass(frozen=True)
class ViewportSpec:
    """
    Target viewport for one derived crop.

    Attributes:
        label: Display name (e.g., 'Mobile')
        width: Target width in pixels
        height: Target height in pixels
    """
    label: str
    width: int
    height: int

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise InvalidDimensions(
                f"Viewport '{self.label}' must have positive dimensions, "
                f"got {self.width}x{self.height}"
            )

    @property
    def dimensions(self) -> str:
        """Dimensions string used as the destination path suffix."""
        return f"{self.width}x{self.height}"

    def to_dict(self) -> dict:
        return {'label': self.label, 'width': self.width, 'height': self.height}


def parse_dimensions(value: str) -> tuple:
    """Parse a 'WIDTHxHEIGHT' string into (width, height)."""
    match = _DIMENSIONS_RE.match(value)
    if not match:
        raise InvalidDimensions(f"Expected WIDTHxHEIGHT, got '{value}'")
    return int(match.group(1)), int(match.group(2))


def parse_viewport_spec(value: str) -> ViewportSpec:
    """
    Parse a viewport spec from 'Label=WxH' or bare 'WxH'.

    A bare dimensions string is labelled with the dimensions themselves.
    """
    if '=' in value:
        label, dims = value.split('=', 1)
        label = label.strip()
    else:
        label, dims = '', value

    width, height = parse_dimensions(dims)
    return ViewportSpec(label=label or f"{width}x{height}", width=width, height=height)


def parse_viewport_specs(values: Iterable[str]) -> List[ViewportSpec]:
    """Parse several viewport specs, preserving order."""
    return [parse_viewport_spec(value) for value in values]
