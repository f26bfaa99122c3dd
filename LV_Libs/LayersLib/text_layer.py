"""
Text annotation layer.

Holds an ordered collection of text annotations in canonical pixel space and
the selection/drag protocol used to move and edit them.

Insertion order is draw order: later annotations are drawn on top and are
found first by ``hit_test``. Moving or editing an annotation never reorders
the collection.

Hit testing uses a circle of radius ``2 * font_size`` around the annotation
anchor instead of measuring glyph extents, which keeps selection independent
of the font backend.

Classes:
    TextAnnotation: One placed piece of text
    TextLayer: The collection plus selection and drag state
"""

from dataclasses import dataclass, asdict, replace
from itertools import count
from typing import Any, Dict, List, Optional, Tuple
import logging
import math

from LV_Libs.ImageEditingLib.image_models import ColorLike, Point, clamp, parse_color
from LV_Libs.constants import MAX_FONT_SIZE, MIN_FONT_SIZE, TEXT_HIT_RADIUS_FACTOR

logger = logging.getLogger(__name__)


def clamp_font_size(font_size: float) -> int:
    return int(round(clamp(font_size, MIN_FONT_SIZE, MAX_FONT_SIZE)))


@dataclass(frozen=True)
class TextAnnotation:
    """A positioned piece of text.

    Attributes:
        id: Unique, monotonically increasing identifier
        content: The text itself (never empty)
        x: Canonical x of the left edge
        y: Canonical y of the vertical centre
        color: Colour string as supplied by the UI
        font_size: Font size in canonical pixels (10-200)
    """
    id: int
    content: str
    x: float
    y: float
    color: str
    font_size: int

    @property
    def position(self) -> Point:
        return (self.x, self.y)

    @property
    def rgba(self):
        return parse_color(self.color)

    def hit_radius(self) -> float:
        return self.font_size * TEXT_HIT_RADIUS_FACTOR

    def contains(self, point: Point) -> bool:
        return math.hypot(point[0] - self.x, point[1] - self.y) < self.hit_radius()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


class TextLayer:
    """Ordered text annotations with single selection and drag support."""

    def __init__(self):
        self._annotations: List[TextAnnotation] = []
        self._ids = count(1)
        self._selected_id: Optional[int] = None
        self._dragging = False

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def annotations(self) -> Tuple[TextAnnotation, ...]:
        return tuple(self._annotations)

    @property
    def selected_id(self) -> Optional[int]:
        return self._selected_id

    @property
    def selected(self) -> Optional[TextAnnotation]:
        if self._selected_id is None:
            return None
        return self.get(self._selected_id)

    @property
    def is_dragging(self) -> bool:
        return self._dragging

    def __len__(self) -> int:
        return len(self._annotations)

    def get(self, annotation_id: int) -> Optional[TextAnnotation]:
        index = self._index_of(annotation_id)
        return None if index is None else self._annotations[index]

    def _index_of(self, annotation_id: Optional[int]) -> Optional[int]:
        for index, annotation in enumerate(self._annotations):
            if annotation.id == annotation_id:
                return index
        return None

    def hit_test(self, point: Point) -> Optional[int]:
        """
        Find the topmost annotation near ``point``.

        Args:
            point: Canonical (x, y)

        Returns:
            Id of the most recently inserted annotation whose anchor lies
            closer than ``2 * font_size``, or None
        """
        for annotation in reversed(self._annotations):
            if annotation.contains(point):
                return annotation.id
        return None

    # ------------------------------------------------------------------
    # Creation and editing
    # ------------------------------------------------------------------

    def place(
        self,
        point: Point,
        content: str,
        color: ColorLike,
        font_size: float,
    ) -> Optional[int]:
        """
        Append a new annotation at ``point``.

        Nothing is placed when ``content`` is empty or when ``point`` hits an
        existing annotation (that gesture selects instead).

        Returns:
            The new id, or None if nothing was placed

        Raises:
            ValueError: If ``color`` cannot be interpreted
        """
        if not content:
            logger.debug("place ignored: empty content")
            return None
        if self.hit_test(point) is not None:
            logger.debug("place ignored: point hits an existing annotation")
            return None

        color = self._normalize_color(color)
        annotation = TextAnnotation(
            id=next(self._ids),
            content=str(content),
            x=float(point[0]),
            y=float(point[1]),
            color=color,
            font_size=clamp_font_size(font_size),
        )
        self._annotations.append(annotation)
        logger.debug(f"Placed text annotation {annotation.id} at ({annotation.x:.1f}, {annotation.y:.1f})")
        return annotation.id

    def update(
        self,
        annotation_id: int,
        content: Optional[str] = None,
        color: Optional[ColorLike] = None,
        font_size: Optional[float] = None,
    ) -> bool:
        """Replace content, colour and/or size of an annotation in place."""
        index = self._index_of(annotation_id)
        if index is None:
            logger.debug(f"update ignored: unknown annotation {annotation_id}")
            return False

        changes: Dict[str, Any] = {}
        if content:
            changes["content"] = str(content)
        if color is not None:
            changes["color"] = self._normalize_color(color)
        if font_size is not None:
            changes["font_size"] = clamp_font_size(font_size)
        self._annotations[index] = replace(self._annotations[index], **changes)
        return True

    def delete(self, annotation_id: int) -> bool:
        index = self._index_of(annotation_id)
        if index is None:
            return False
        del self._annotations[index]
        if self._selected_id == annotation_id:
            self.deselect()
        return True

    def clear_all(self) -> None:
        """Remove every annotation. Ids already issued are never reused."""
        self._annotations.clear()
        self.deselect()

    @staticmethod
    def _normalize_color(color: ColorLike) -> str:
        parse_color(color)
        if isinstance(color, str):
            return color
        return "#" + "".join(f"{channel:02x}" for channel in parse_color(color))

    # ------------------------------------------------------------------
    # Selection and dragging
    # ------------------------------------------------------------------

    def select(self, annotation_id: int) -> bool:
        if self._index_of(annotation_id) is None:
            logger.debug(f"select ignored: unknown annotation {annotation_id}")
            return False
        if self._selected_id != annotation_id:
            self._dragging = False
        self._selected_id = annotation_id
        return True

    def deselect(self) -> None:
        self._selected_id = None
        self._dragging = False

    def begin_drag(self, annotation_id: int) -> bool:
        """Select ``annotation_id`` and start dragging it."""
        if not self.select(annotation_id):
            return False
        self._dragging = True
        return True

    def update_position(self, annotation_id: int, point: Point) -> bool:
        """Move the annotation being dragged. Anything else is a no-op."""
        if not self._dragging or annotation_id != self._selected_id:
            return False
        index = self._index_of(annotation_id)
        if index is None:
            return False
        self._annotations[index] = replace(
            self._annotations[index], x=float(point[0]), y=float(point[1])
        )
        return True

    def end_drag(self) -> None:
        self._dragging = False
