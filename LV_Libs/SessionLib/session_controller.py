"""
Session Controller.

Turns user intents into session changes. It owns the editor state machine:

    EMPTY --load--> ADJUST <--set_mode--> PAINT / TEXT
      any --begin_image_load--> PENDING --finish--> ADJUST (full reset)
                                        --cancel/decode failure--> previous state

Pointer commands carry display coordinates. They are mapped to canonical
pixels with the session's coordinate mapper and dispatched through a
mode -> action -> handler table: PAINT drives the paint layer's stroke
protocol, TEXT drives the text layer's hit-test/place/drag protocol, and
ADJUST has no handlers, so pointer input passes through untouched.

Intents that arrive before their preconditions hold (painting with no image,
pointer input while an image is decoding, dragging with no selection) are
ignored and logged at debug level. Out-of-range values are clamped.

Example:
    >>> controller = SessionController()
    >>> controller.load_image(png_bytes)
    >>> controller.set_display_box(DisplayBox(0, 0, 100, 100))
    >>> controller.set_mode(EditorMode.PAINT)
    True
    >>> controller.pointer_down(10, 10)
    True
    >>> controller.pointer_move(90, 90)
    True
    >>> controller.pointer_up(90, 90)
    True
    >>> png = controller.export_png()
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple, Union
import logging

from LV_Libs.ImageEditingLib.coordinate_mapper import DisplayBox, clamp_zoom, zoomed_box
from LV_Libs.ImageEditingLib.image_editing_ops import (
    decode_image,
    encode_png,
    save_export,
)
from LV_Libs.ImageEditingLib.image_models import ColorLike, EditorImage, Point, parse_color
from LV_Libs.LayersLib import compositor
from LV_Libs.LayersLib.text_layer import clamp_font_size
from LV_Libs.SessionLib.session import (
    EditorMode,
    EditorState,
    Session,
    clamp_brush_size,
)
from LV_Libs.constants import DEFAULT_EXPORT_FILENAME, DEFAULT_PREVIEW_MAX_SIZE

logger = logging.getLogger(__name__)


class PointerAction(Enum):
    DOWN = "down"
    MOVE = "move"
    UP = "up"


@dataclass(frozen=True)
class PointerCommand:
    """A pointer intent in display (viewport) coordinates."""
    action: PointerAction
    x: float
    y: float


PointerHandler = Callable[[Point], None]


class SessionController:
    """Routes intents for one editor instance onto its Session."""

    def __init__(self, session: Optional[Session] = None):
        self.session = session if session is not None else Session()
        self._layout_box: Optional[DisplayBox] = None
        self._pointer_handlers: Dict[EditorMode, Dict[PointerAction, PointerHandler]] = {
            EditorMode.PAINT: {
                PointerAction.DOWN: self._paint_down,
                PointerAction.MOVE: self._paint_move,
                PointerAction.UP: self._paint_up,
            },
            EditorMode.TEXT: {
                PointerAction.DOWN: self._text_down,
                PointerAction.MOVE: self._text_move,
                PointerAction.UP: self._text_up,
            },
        }

    @property
    def state(self) -> EditorState:
        return self.session.state

    @property
    def mode(self) -> EditorMode:
        return self.session.mode

    # ------------------------------------------------------------------
    # Image loading
    # ------------------------------------------------------------------

    def load_image(self, data: bytes) -> EditorImage:
        """
        Decode ``data`` and reset the session around it.

        Raises:
            ImageDecodeError: If decoding fails. On this or any other error
                the session keeps its previous image, layers and settings.
        """
        self.begin_image_load()
        try:
            image = decode_image(data)
        except Exception:
            self.cancel_image_load()
            raise
        self.finish_image_load(image)
        return image

    def load_pil_image(self, image: Any) -> EditorImage:
        """Reset the session around an already decoded Pillow image."""
        editor_image = EditorImage.from_pil(image)
        self.begin_image_load()
        self.finish_image_load(editor_image)
        return editor_image

    def begin_image_load(self) -> None:
        """
        Enter the pending state while a new image is decoded.

        Any in-flight stroke or drag is finished first so nothing can be drawn
        into layers that belong to the image being replaced.
        """
        self._end_interactions()
        self.session.image_pending = True

    def finish_image_load(self, image: EditorImage) -> None:
        self._end_interactions()
        self.session.reset_for_image(image)
        self.session.mapper.update_box(None)
        self._layout_box = None

    def cancel_image_load(self) -> None:
        if self.session.image_pending:
            logger.debug("Image load cancelled, keeping previous session state")
        self.session.image_pending = False

    def _end_interactions(self) -> None:
        self.session.paint_layer.abort_stroke()
        self.session.text_layer.end_drag()

    def _is_ready(self) -> bool:
        return self.session.has_image and not self.session.image_pending

    # ------------------------------------------------------------------
    # Mode and view
    # ------------------------------------------------------------------

    def set_mode(self, mode: Union[EditorMode, str]) -> bool:
        """Switch tools. Ignored until an image is loaded."""
        mode = EditorMode(mode)
        if not self._is_ready():
            logger.debug(f"set_mode({mode.value}) ignored: no image loaded")
            return False
        if mode is not self.session.mode:
            self._end_interactions()
            self.session.mode = mode
        return True

    def set_display_box(self, box: Optional[DisplayBox]) -> None:
        """Record where the image element is currently drawn on screen."""
        self._layout_box = None
        self.session.mapper.update_box(box)

    def set_layout_box(self, layout_box: Optional[DisplayBox]) -> None:
        """
        Record the image element's unzoomed box; the on-screen box is derived
        from it and the current zoom, and follows later zoom changes.
        """
        self._layout_box = layout_box
        box = None if layout_box is None else zoomed_box(layout_box, self.session.zoom)
        self.session.mapper.update_box(box)

    def set_zoom(self, zoom: float) -> float:
        self.session.zoom = clamp_zoom(zoom)
        if self._layout_box is not None:
            self.session.mapper.update_box(zoomed_box(self._layout_box, self.session.zoom))
        return self.session.zoom

    # ------------------------------------------------------------------
    # Adjust intents
    # ------------------------------------------------------------------

    def set_filter(self, name: str, value: float) -> float:
        """Set one filter channel; returns the clamped stored value."""
        return self.session.filters.set(name, value)

    def reset_filters(self) -> None:
        self.session.filters.reset()

    # ------------------------------------------------------------------
    # Paint intents
    # ------------------------------------------------------------------

    def set_brush(
        self,
        color: Optional[ColorLike] = None,
        size: Optional[float] = None,
        eraser: Optional[bool] = None,
    ) -> None:
        brush = self.session.brush
        if color is not None:
            parse_color(color)
            brush.color = color
        if size is not None:
            brush.size = clamp_brush_size(size)
        if eraser is not None:
            brush.eraser = bool(eraser)

    def clear_paint(self) -> None:
        self.session.paint_layer.clear()

    # ------------------------------------------------------------------
    # Text intents
    # ------------------------------------------------------------------

    def set_text_input(
        self,
        content: Optional[str] = None,
        color: Optional[ColorLike] = None,
        font_size: Optional[float] = None,
    ) -> None:
        tool = self.session.text_tool
        if content is not None:
            tool.content = str(content)
        if color is not None:
            parse_color(color)
            tool.color = color
        if font_size is not None:
            tool.font_size = clamp_font_size(font_size)

    def update_selected_text(self) -> bool:
        """Apply the text tool settings to the selected annotation."""
        text_layer = self.session.text_layer
        if text_layer.selected_id is None:
            logger.debug("update_selected_text ignored: nothing selected")
            return False
        tool = self.session.text_tool
        return text_layer.update(text_layer.selected_id, tool.content, tool.color, tool.font_size)

    def delete_selected_text(self) -> bool:
        text_layer = self.session.text_layer
        if text_layer.selected_id is None:
            logger.debug("delete_selected_text ignored: nothing selected")
            return False
        text_layer.delete(text_layer.selected_id)
        self.session.text_tool.content = ""
        return True

    def clear_texts(self) -> None:
        self.session.text_layer.clear_all()

    # ------------------------------------------------------------------
    # Pointer dispatch
    # ------------------------------------------------------------------

    def handle_pointer(self, command: PointerCommand) -> bool:
        """
        Route a pointer command to the active layer.

        Returns:
            True if a layer consumed the command
        """
        if not self._is_ready():
            logger.debug(f"Pointer {command.action.value} ignored: session not ready")
            return False

        handler = self._pointer_handlers.get(self.session.mode, {}).get(command.action)
        if handler is None:
            return False

        mapper = self.session.mapper
        if not mapper.is_mounted:
            logger.debug(f"Pointer {command.action.value} ignored: image element not mounted")
            return False

        handler(mapper.map_point(command.x, command.y))
        return True

    def pointer_down(self, x: float, y: float) -> bool:
        return self.handle_pointer(PointerCommand(PointerAction.DOWN, x, y))

    def pointer_move(self, x: float, y: float) -> bool:
        return self.handle_pointer(PointerCommand(PointerAction.MOVE, x, y))

    def pointer_up(self, x: float, y: float) -> bool:
        return self.handle_pointer(PointerCommand(PointerAction.UP, x, y))

    def _paint_down(self, point: Point) -> None:
        session = self.session
        if session.paint_layer.size != session.image.size:
            logger.debug("Stroke ignored: paint layer does not match the image")
            return
        brush = session.brush
        session.paint_layer.begin_stroke(point, brush.color, brush.radius, brush.mode)

    def _paint_move(self, point: Point) -> None:
        if self.session.paint_layer.is_stroking:
            self.session.paint_layer.extend_stroke(point)

    def _paint_up(self, point: Point) -> None:
        self.session.paint_layer.end_stroke()

    def _text_down(self, point: Point) -> None:
        text_layer = self.session.text_layer
        tool = self.session.text_tool

        hit = text_layer.hit_test(point)
        if hit is not None:
            text_layer.begin_drag(hit)
            annotation = text_layer.get(hit)
            tool.content = annotation.content
            tool.color = annotation.color
            tool.font_size = annotation.font_size
        elif tool.content:
            text_layer.place(point, tool.content, tool.color, tool.font_size)
            tool.content = ""
            text_layer.deselect()
        else:
            text_layer.deselect()

    def _text_move(self, point: Point) -> None:
        text_layer = self.session.text_layer
        if text_layer.is_dragging and text_layer.selected_id is not None:
            text_layer.update_position(text_layer.selected_id, point)

    def _text_up(self, point: Point) -> None:
        self.session.text_layer.end_drag()

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def render(self) -> Optional[Any]:
        """Flattened RGBA image at canonical resolution, or None without an image."""
        if not self.session.has_image:
            logger.debug("render ignored: no image loaded")
            return None
        return compositor.render(self.session)

    def render_preview(self, max_size: Tuple[int, int] = DEFAULT_PREVIEW_MAX_SIZE) -> Optional[Any]:
        if not self.session.has_image:
            return None
        return compositor.render_preview(self.session, max_size)

    def export_png(self, flatten_alpha: bool = False) -> Optional[bytes]:
        """
        Encode the flattened result as PNG.

        Args:
            flatten_alpha: Composite over the default background and drop alpha

        Returns:
            PNG bytes, or None without an image
        """
        image = self.render()
        if image is None:
            return None
        if flatten_alpha:
            image = compositor.flatten(image)
        return encode_png(image)

    def save_export(
        self,
        output_dir: Path,
        filename: str = DEFAULT_EXPORT_FILENAME,
        flatten_alpha: bool = False,
    ) -> Optional[Path]:
        """
        Write the flattened result to ``output_dir / filename``.

        Raises:
            OSError: If the directory does not exist or is not a directory
        """
        image = self.render()
        if image is None:
            return None
        if flatten_alpha:
            image = compositor.flatten(image)
        return save_export(image, output_dir, filename)
