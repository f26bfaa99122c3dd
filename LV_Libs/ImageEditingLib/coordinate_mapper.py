"""
Display-to-canonical coordinate mapping.

Pointer events arrive in display (viewport) coordinates over an image element
that may be zoomed and scaled by the layout. Everything the editing core
stores lives in canonical space: pixel coordinates of the base image at its
native width and height.

The on-screen bounding box of the rendered element already includes the zoom
transform, so the mapping only needs the box and the canonical size. Zoom is
used when predicting where a zoomed element will be drawn (``zoomed_box``),
never when mapping a pointer.

Example:
    >>> box = DisplayBox(left=100, top=50, width=400, height=300)
    >>> to_canonical(300, 200, box, (800, 600))
    (400.0, 300.0)
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from LV_Libs.ImageEditingLib.image_models import Point, clamp
from LV_Libs.constants import MAX_ZOOM, MIN_ZOOM

UNMOUNTED_POINT: Point = (0.0, 0.0)


@dataclass(frozen=True)
class DisplayBox:
    """On-screen bounding rectangle of the rendered image element.

    Attributes:
        left: Viewport x of the element's left edge
        top: Viewport y of the element's top edge
        width: Rendered width, including any zoom transform
        height: Rendered height, including any zoom transform
    """
    left: float
    top: float
    width: float
    height: float

    @property
    def is_degenerate(self) -> bool:
        return self.width <= 0 or self.height <= 0

    @property
    def center(self) -> Point:
        return (self.left + self.width / 2.0, self.top + self.height / 2.0)


def _is_mappable(box: Optional[DisplayBox], canonical_size: Optional[Tuple[int, int]]) -> bool:
    if box is None or canonical_size is None or box.is_degenerate:
        return False
    width, height = canonical_size
    return width > 0 and height > 0


def to_canonical(
    pointer_x: float,
    pointer_y: float,
    box: Optional[DisplayBox],
    canonical_size: Optional[Tuple[int, int]],
) -> Point:
    """
    Convert a viewport pointer position to canonical image pixels.

    Args:
        pointer_x: Pointer x in viewport coordinates
        pointer_y: Pointer y in viewport coordinates
        box: Current on-screen box of the image element (None if unmounted)
        canonical_size: Native (width, height) of the image (None if no image)

    Returns:
        (x, y) in canonical pixels, or (0.0, 0.0) when nothing is mounted.
        Points outside the element map outside the image; callers clip.
    """
    if not _is_mappable(box, canonical_size):
        return UNMOUNTED_POINT

    width, height = canonical_size
    x = (pointer_x - box.left) * (width / box.width)
    y = (pointer_y - box.top) * (height / box.height)
    return (x, y)


def to_display(
    x: float,
    y: float,
    box: Optional[DisplayBox],
    canonical_size: Optional[Tuple[int, int]],
) -> Point:
    """Inverse of :func:`to_canonical`: where a canonical point appears on screen."""
    if not _is_mappable(box, canonical_size):
        return UNMOUNTED_POINT

    width, height = canonical_size
    return (box.left + x * (box.width / width), box.top + y * (box.height / height))


def clamp_zoom(zoom: float) -> float:
    return clamp(zoom, MIN_ZOOM, MAX_ZOOM)


def zoomed_box(layout_box: DisplayBox, zoom: float) -> DisplayBox:
    """
    Box of an element scaled by ``zoom`` about its centre.

    Args:
        layout_box: The element's box before the zoom transform
        zoom: Zoom factor (clamped to the supported range)

    Returns:
        The on-screen box after scaling
    """
    zoom = clamp_zoom(zoom)
    center_x, center_y = layout_box.center
    width = layout_box.width * zoom
    height = layout_box.height * zoom
    return DisplayBox(
        left=center_x - width / 2.0,
        top=center_y - height / 2.0,
        width=width,
        height=height,
    )


class CoordinateMapper:
    """Holds the canonical size and the latest display box for one editor view."""

    def __init__(
        self,
        canonical_size: Optional[Tuple[int, int]] = None,
        box: Optional[DisplayBox] = None,
    ):
        self.canonical_size = canonical_size
        self.box = box

    @property
    def is_mounted(self) -> bool:
        return _is_mappable(self.box, self.canonical_size)

    def update_box(self, box: Optional[DisplayBox]) -> None:
        self.box = box

    def map_point(self, pointer_x: float, pointer_y: float) -> Point:
        return to_canonical(pointer_x, pointer_y, self.box, self.canonical_size)

    def display_point(self, x: float, y: float) -> Point:
        return to_display(x, y, self.box, self.canonical_size)
