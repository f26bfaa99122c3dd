"""
Image editing data models for Lumina Vision.

This module defines core data structures used throughout the editing core.

Classes:
    EditorImage: Immutable decoded base image at its native resolution

Functions:
    parse_color: Convert a UI colour string or tuple into an RGBA tuple
    clamp: Clamp a number into a closed range

Type Aliases:
    RgbaColor: A tuple of 4 integers representing RGBA color values (0-255)
    Point: A canonical (x, y) coordinate pair
"""

from dataclasses import dataclass
from typing import Any, Sequence, Tuple, Union

import numpy as np

from LV_Libs.pillow_compat import Image, ImageColor

RgbaColor = Tuple[int, int, int, int]
Point = Tuple[float, float]
ColorLike = Union[str, Sequence[int]]


def clamp(value: float, minimum: float, maximum: float) -> float:
    """Clamp ``value`` into ``[minimum, maximum]``."""
    return max(minimum, min(maximum, float(value)))


def parse_color(color: ColorLike) -> RgbaColor:
    """
    Convert a colour into an RGBA tuple.

    Accepts CSS-style strings understood by Pillow (``"#9d00ff"``, ``"#fff"``,
    ``"white"``, ``"rgb(255,0,0)"``) as well as RGB or RGBA sequences.

    Args:
        color: Colour string or 3/4-item integer sequence

    Returns:
        (R, G, B, A) tuple with every channel in 0-255

    Raises:
        ValueError: If the colour cannot be interpreted
    """
    if isinstance(color, str):
        values = ImageColor.getrgb(color)
    elif isinstance(color, Sequence) and len(color) in (3, 4):
        values = tuple(int(channel) for channel in color)
    else:
        raise ValueError(f"Unsupported color value: {color!r}")

    if len(values) == 3:
        values = (*values, 255)
    return tuple(int(clamp(channel, 0, 255)) for channel in values)


@dataclass(frozen=True)
class EditorImage:
    """A decoded base image, held in RGBA at its native resolution.

    Attributes:
        source: Pillow image in RGBA mode. Treated as read-only.
    """
    source: Any

    def __post_init__(self):
        if not hasattr(self.source, "mode"):
            raise TypeError(f"Expected PIL Image, got {type(self.source)}")
        if self.source.mode != "RGBA":
            object.__setattr__(self, "source", self.source.convert("RGBA"))

    @classmethod
    def from_pil(cls, image: Any) -> "EditorImage":
        """Wrap a Pillow image, copying it so later edits to it cannot leak in."""
        return cls(image.copy())

    @classmethod
    def blank(cls, width: int, height: int, color: ColorLike = "black") -> "EditorImage":
        return cls(Image.new("RGBA", (int(width), int(height)), parse_color(color)))

    @property
    def width(self) -> int:
        return self.source.width

    @property
    def height(self) -> int:
        return self.source.height

    @property
    def size(self) -> Tuple[int, int]:
        return self.source.size

    def pixels(self) -> np.ndarray:
        """Return straight-alpha RGBA as a fresh ``(H, W, 4)`` float32 array in [0, 1]."""
        return np.asarray(self.source, dtype=np.float32) / 255.0
