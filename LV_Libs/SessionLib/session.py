"""
Editing session state.

A ``Session`` is the single explicit aggregate for one editor instance: the
current image, mode, filter parameters, paint layer, text layer, zoom and the
tool settings the UI edits. Each editor owns its own session and buffers;
nothing here is shared between sessions.

Classes:
    EditorMode: Active tool (adjust, paint, text)
    EditorState: Externally visible state, including empty and pending
    BrushSettings: Brush colour, size and eraser toggle
    TextToolSettings: Text input, colour and size mirrored from the selection
    Session: The aggregate
"""

from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import Any, Dict, Optional
import logging

from LV_Libs.ImageEditingLib.coordinate_mapper import CoordinateMapper, DisplayBox
from LV_Libs.ImageEditingLib.filter_stack import FilterParameters
from LV_Libs.ImageEditingLib.image_models import EditorImage, clamp, parse_color
from LV_Libs.LayersLib.paint_layer import PaintLayer, StrokeMode
from LV_Libs.LayersLib.text_layer import TextLayer, clamp_font_size
from LV_Libs.constants import (
    DEFAULT_BRUSH_COLOR,
    DEFAULT_BRUSH_SIZE,
    DEFAULT_FONT_SIZE,
    DEFAULT_TEXT_COLOR,
    DEFAULT_ZOOM,
    MAX_BRUSH_SIZE,
    MIN_BRUSH_SIZE,
)

logger = logging.getLogger(__name__)


class EditorMode(Enum):
    ADJUST = "adjust"
    PAINT = "paint"
    TEXT = "text"


class EditorState(Enum):
    EMPTY = "empty"
    PENDING = "pending"
    ADJUST = "adjust"
    PAINT = "paint"
    TEXT = "text"


def clamp_brush_size(size: float) -> float:
    return clamp(size, MIN_BRUSH_SIZE, MAX_BRUSH_SIZE)


@dataclass
class BrushSettings:
    """Configuration for the paint tool.

    Attributes:
        color: Brush colour string (used when not erasing)
        size: Stroke width in canonical pixels (1-50)
        eraser: Erase instead of paint
    """
    color: str = DEFAULT_BRUSH_COLOR
    size: float = DEFAULT_BRUSH_SIZE
    eraser: bool = False

    def __post_init__(self):
        parse_color(self.color)
        self.size = clamp_brush_size(self.size)

    @property
    def radius(self) -> float:
        return self.size / 2.0

    @property
    def mode(self) -> StrokeMode:
        return StrokeMode.ERASE if self.eraser else StrokeMode.PAINT

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BrushSettings":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items()
                    if k in cls.__dataclass_fields__}
        return cls(**filtered)


@dataclass
class TextToolSettings:
    """Configuration for the text tool.

    While an annotation is selected these mirror its content, colour and size.

    Attributes:
        content: Text to place on the next click
        color: Text colour string
        font_size: Font size in canonical pixels (10-200)
    """
    content: str = ""
    color: str = DEFAULT_TEXT_COLOR
    font_size: int = DEFAULT_FONT_SIZE

    def __post_init__(self):
        parse_color(self.color)
        self.font_size = clamp_font_size(self.font_size)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TextToolSettings":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items()
                    if k in cls.__dataclass_fields__}
        return cls(**filtered)


@dataclass
class Session:
    """All state of one editor instance.

    Attributes:
        image: Current base image (None until the first load)
        mode: Active tool; meaningful only while an image is loaded
        filters: Current filter parameters
        paint_layer: Paint buffer sized to ``image``
        text_layer: Text annotations and selection
        zoom: Preview zoom factor (0.5-3.0)
        mapper: Display-to-canonical mapping for the current view
        brush: Paint tool settings
        text_tool: Text tool settings
        image_pending: True while a new image is being decoded
    """
    image: Optional[EditorImage] = None
    mode: EditorMode = EditorMode.ADJUST
    filters: FilterParameters = field(default_factory=FilterParameters)
    paint_layer: PaintLayer = field(default_factory=PaintLayer)
    text_layer: TextLayer = field(default_factory=TextLayer)
    zoom: float = DEFAULT_ZOOM
    mapper: CoordinateMapper = field(default_factory=CoordinateMapper)
    brush: BrushSettings = field(default_factory=BrushSettings)
    text_tool: TextToolSettings = field(default_factory=TextToolSettings)
    image_pending: bool = False

    @property
    def has_image(self) -> bool:
        return self.image is not None

    @property
    def state(self) -> EditorState:
        if self.image_pending:
            return EditorState.PENDING
        if self.image is None:
            return EditorState.EMPTY
        return EditorState(self.mode.value)

    @property
    def display_box(self) -> Optional[DisplayBox]:
        return self.mapper.box

    def reset_for_image(self, image: EditorImage) -> None:
        """
        Install a new base image and reset everything derived from the old one.

        Filters return to identity, the paint layer is reallocated at the new
        size, text and selection are cleared, zoom returns to 1.0 and the mode
        returns to adjust. Tool settings other than the text input survive.
        """
        self.image = image
        self.mode = EditorMode.ADJUST
        self.filters.reset()
        self.paint_layer.allocate(image.width, image.height)
        self.text_layer.clear_all()
        self.text_tool.content = ""
        self.zoom = DEFAULT_ZOOM
        self.mapper.canonical_size = image.size
        self.image_pending = False
        logger.info(f"Session reset for {image.width}x{image.height} image")
