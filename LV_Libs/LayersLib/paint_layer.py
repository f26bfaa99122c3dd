"""
Free-hand paint layer.

A persistent premultiplied RGBA buffer with the same dimensions as the base
image. Strokes are rasterized into it in canonical pixel space, so the layer
is unaffected by preview zoom or scaling.

A stroke is a chain of capsules (line segments with round caps and joins) of
width ``2 * radius``. Each segment starts where the previous one ended, so a
sparse sequence of pointer samples still produces a continuous line.

Two composite modes are supported:

- ``StrokeMode.PAINT``: source-over, the brush colour is blended on top
- ``StrokeMode.ERASE``: destination-out, coverage is removed so the base
  image shows through again

Example:
    >>> layer = PaintLayer(100, 100)
    >>> layer.begin_stroke((10, 10), "#ff0000", radius=3)
    True
    >>> layer.extend_stroke((90, 90))
    >>> layer.end_stroke()
    >>> float(layer.alpha()[50, 50])
    1.0
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple, Union
import logging
import math

import numpy as np

from LV_Libs.ImageEditingLib.image_models import ColorLike, Point, clamp, parse_color
from LV_Libs.constants import MAX_BRUSH_SIZE, MIN_BRUSH_SIZE, MIN_COVERAGE_RADIUS
from LV_Libs.pillow_compat import Image

logger = logging.getLogger(__name__)


class StrokeMode(Enum):
    PAINT = "paint"
    ERASE = "erase"


def clamp_radius(radius: float) -> float:
    return clamp(radius, MIN_BRUSH_SIZE / 2.0, MAX_BRUSH_SIZE / 2.0)


@dataclass
class Stroke:
    """State of the gesture currently being drawn.

    Attributes:
        color: Premultiplied RGBA brush colour as a float32 vector
        radius: Brush radius in canonical pixels
        mode: Composite mode
        last_point: End of the most recent segment
        snapshot: Layer contents when the stroke began
        coverage: Union of every pixel the stroke has touched
        generation: Allocation generation of the layer the stroke belongs to
    """
    color: np.ndarray
    radius: float
    mode: StrokeMode
    last_point: Point
    snapshot: np.ndarray
    coverage: np.ndarray
    generation: int


class PaintLayer:
    """Premultiplied RGBA paint buffer addressed in canonical pixels."""

    def __init__(self, width: Optional[int] = None, height: Optional[int] = None):
        self._buffer: Optional[np.ndarray] = None
        self._stroke: Optional[Stroke] = None
        self._generation = 0
        if width is not None and height is not None:
            self.allocate(width, height)

    # ------------------------------------------------------------------
    # Allocation
    # ------------------------------------------------------------------

    @property
    def is_allocated(self) -> bool:
        return self._buffer is not None

    @property
    def size(self) -> Optional[Tuple[int, int]]:
        if self._buffer is None:
            return None
        height, width = self._buffer.shape[:2]
        return (width, height)

    @property
    def is_stroking(self) -> bool:
        return self._stroke is not None

    def allocate(self, width: int, height: int) -> None:
        """
        (Re)allocate a fully transparent buffer of ``width x height``.

        Any in-flight stroke is dropped: it belongs to the previous buffer.
        """
        width = int(width)
        height = int(height)
        self._stroke = None
        self._generation += 1
        if width <= 0 or height <= 0:
            self._buffer = None
            logger.debug(f"Paint layer released (requested {width}x{height})")
            return
        self._buffer = np.zeros((height, width, 4), dtype=np.float32)
        logger.debug(f"Paint layer allocated at {width}x{height}")

    def clear(self) -> None:
        """Reset every pixel to fully transparent."""
        self._stroke = None
        if self._buffer is not None:
            self._buffer.fill(0.0)

    # ------------------------------------------------------------------
    # Stroke protocol
    # ------------------------------------------------------------------

    def begin_stroke(
        self,
        point: Point,
        color: ColorLike,
        radius: float,
        mode: Union[StrokeMode, str] = StrokeMode.PAINT,
    ) -> bool:
        """
        Start a stroke and stamp its first dab.

        Args:
            point: Canonical (x, y) of the pointer
            color: Brush colour (ignored for coverage when erasing)
            radius: Brush radius in canonical pixels (clamped to the brush range)
            mode: ``StrokeMode`` or its string value

        Returns:
            True if the stroke started, False if the layer is not allocated

        Raises:
            ValueError: If ``color`` or ``mode`` cannot be interpreted
        """
        mode = StrokeMode(mode)
        rgba = parse_color(color)
        if self._buffer is None:
            logger.debug("begin_stroke ignored: paint layer not allocated")
            return False

        if self._stroke is not None:
            self.end_stroke()

        alpha = rgba[3] / 255.0
        premultiplied = np.array(
            [rgba[0] / 255.0 * alpha, rgba[1] / 255.0 * alpha, rgba[2] / 255.0 * alpha, alpha],
            dtype=np.float32,
        )
        point = (float(point[0]), float(point[1]))
        self._stroke = Stroke(
            color=premultiplied,
            radius=clamp_radius(radius),
            mode=mode,
            last_point=point,
            snapshot=self._buffer.copy(),
            coverage=np.zeros(self._buffer.shape[:2], dtype=bool),
            generation=self._generation,
        )
        self._rasterize_segment(point, point)
        return True

    def extend_stroke(self, point: Point) -> None:
        """Draw a segment from the previous point to ``point``."""
        stroke = self._stroke
        if stroke is None or self._buffer is None or stroke.generation != self._generation:
            logger.debug("extend_stroke ignored: no active stroke on this layer")
            return

        point = (float(point[0]), float(point[1]))
        self._rasterize_segment(stroke.last_point, point)
        stroke.last_point = point

    def end_stroke(self) -> None:
        self._stroke = None

    def abort_stroke(self) -> None:
        """Finish the in-flight stroke as drawn so far, if any."""
        if self._stroke is not None:
            logger.debug("In-flight stroke ended early")
        self._stroke = None

    # ------------------------------------------------------------------
    # Rasterization
    # ------------------------------------------------------------------

    def _rasterize_segment(self, start: Point, end: Point) -> None:
        stroke = self._stroke
        buffer = self._buffer
        height, width = buffer.shape[:2]
        radius = max(stroke.radius, MIN_COVERAGE_RADIUS)

        x0, y0 = start
        x1, y1 = end
        left = max(0, int(math.floor(min(x0, x1) - radius)))
        right = min(width, int(math.ceil(max(x0, x1) + radius)) + 1)
        top = max(0, int(math.floor(min(y0, y1) - radius)))
        bottom = min(height, int(math.ceil(max(y0, y1) + radius)) + 1)
        if left >= right or top >= bottom:
            return

        # Pixel centres inside the segment's bounding box
        cx = np.arange(left, right, dtype=np.float64)[None, :] + 0.5
        cy = np.arange(top, bottom, dtype=np.float64)[:, None] + 0.5

        dx = x1 - x0
        dy = y1 - y0
        length_sq = dx * dx + dy * dy
        if length_sq == 0:
            dist_sq = (cx - x0) ** 2 + (cy - y0) ** 2
        else:
            t = np.clip(((cx - x0) * dx + (cy - y0) * dy) / length_sq, 0.0, 1.0)
            dist_sq = (cx - (x0 + t * dx)) ** 2 + (cy - (y0 + t * dy)) ** 2

        region = (slice(top, bottom), slice(left, right))
        stroke.coverage[region] |= dist_sq <= radius * radius

        coverage = stroke.coverage[region][..., None].astype(np.float32)
        snapshot = stroke.snapshot[region]
        if stroke.mode is StrokeMode.ERASE:
            buffer[region] = snapshot * (1.0 - coverage)
        else:
            color = stroke.color
            buffer[region] = color * coverage + snapshot * (1.0 - color[3] * coverage)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    def pixels(self) -> Optional[np.ndarray]:
        """Copy of the premultiplied ``(H, W, 4)`` float32 buffer, or None."""
        if self._buffer is None:
            return None
        return self._buffer.copy()

    def alpha(self) -> Optional[np.ndarray]:
        if self._buffer is None:
            return None
        return self._buffer[..., 3].copy()

    def is_empty(self) -> bool:
        return self._buffer is None or not np.any(self._buffer[..., 3] > 0)

    def to_image(self) -> Any:
        """Straight-alpha RGBA Pillow image of the layer (None if unallocated)."""
        if self._buffer is None:
            return None
        alpha = self._buffer[..., 3:4]
        safe_alpha = np.where(alpha > 0, alpha, 1.0)
        color = np.where(alpha > 0, self._buffer[..., :3] / safe_alpha, 0.0)
        straight = np.concatenate([color, alpha], axis=-1)
        return Image.fromarray(np.rint(np.clip(straight, 0.0, 1.0) * 255.0).astype(np.uint8))
