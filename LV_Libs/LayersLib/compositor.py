"""
Layer Compositor.

Flattens an editing session into a single raster at the base image's native
resolution. Layers are combined back to front:

1. Base image with the filter stack applied
2. Paint layer, premultiplied source-over
3. Text annotations in insertion order, each drawn bold in its own colour and
   size, with the glyph ink starting at ``x`` and vertically centred on ``y``

Rendering reads the session and never mutates it, so repeated renders of an
unchanged session are byte-identical. Scaling to a smaller interactive
preview happens here only, after the canonical render, so stored coordinates
and font sizes are always canonical.

Example:
    >>> controller = SessionController()
    >>> controller.load_image(png_bytes)
    >>> image = render(controller.session)
    >>> image.size == controller.session.image.size
    True
"""

from functools import lru_cache
from typing import Any, Optional, Sequence, Tuple
import logging

import numpy as np

from LV_Libs.ImageEditingLib import filter_stack
from LV_Libs.ImageEditingLib.image_models import ColorLike, EditorImage, parse_color
from LV_Libs.LayersLib.paint_layer import PaintLayer
from LV_Libs.LayersLib.text_layer import TextAnnotation
from LV_Libs.constants import (
    DEFAULT_FLATTEN_BACKGROUND,
    DEFAULT_PREVIEW_MAX_SIZE,
    TEXT_BOLD_STROKE_DIVISOR,
)
from LV_Libs.pillow_compat import Image, ImageDraw, ImageFont

logger = logging.getLogger(__name__)


@lru_cache(maxsize=32)
def load_font(font_size: int) -> Any:
    """
    Fixed font used for every annotation, cached per size.

    Args:
        font_size: Size in canonical pixels

    Returns:
        Pillow FreeType font
    """
    return ImageFont.load_default(size=font_size)


def bold_stroke_width(font_size: int) -> int:
    """Outline width that renders the fixed font at a bold weight."""
    return max(1, int(round(font_size / TEXT_BOLD_STROKE_DIVISOR)))


class LayerCompositor:
    """Handles compositing of the base, paint and text layers."""

    @staticmethod
    def composite(
        image: EditorImage,
        filters: filter_stack.FilterParameters,
        paint_layer: Optional[PaintLayer] = None,
        annotations: Sequence[TextAnnotation] = (),
    ) -> Any:
        """
        Composite all layers at ``image``'s native resolution.

        Args:
            image: Base image
            filters: Filter parameters applied to the base
            paint_layer: Paint layer (skipped if unallocated or mis-sized)
            annotations: Text annotations in draw order

        Returns:
            Composited PIL Image in RGBA mode, sized ``image.size``
        """
        rendered = filter_stack.apply(image, filters)
        result = rendered.realize()
        result = LayerCompositor._composite_paint(result, paint_layer, image.size)
        composite = Image.fromarray(np.rint(result * 255.0).astype(np.uint8))

        for annotation in annotations:
            composite = LayerCompositor._composite_text(composite, annotation)
        return composite

    @staticmethod
    def _composite_paint(
        base: np.ndarray,
        paint_layer: Optional[PaintLayer],
        size: Tuple[int, int],
    ) -> np.ndarray:
        """
        Blend the premultiplied paint buffer over a straight-alpha base.

        Args:
            base: ``(H, W, 4)`` straight-alpha float32 array
            paint_layer: Paint layer to blend, or None
            size: Expected (width, height) of the paint layer

        Returns:
            Straight-alpha ``(H, W, 4)`` float32 array
        """
        if paint_layer is None or paint_layer.size != size:
            if paint_layer is not None and paint_layer.is_allocated:
                logger.debug(f"Paint layer {paint_layer.size} does not match image {size}, skipped")
            return base

        paint = paint_layer.pixels()
        base_alpha = base[..., 3:4]
        paint_alpha = paint[..., 3:4]

        color = paint[..., :3] + base[..., :3] * base_alpha * (1.0 - paint_alpha)
        alpha = paint_alpha + base_alpha * (1.0 - paint_alpha)

        safe_alpha = np.where(alpha > 0, alpha, 1.0)
        straight = np.where(alpha > 0, color / safe_alpha, 0.0)
        return np.clip(np.concatenate([straight, alpha], axis=-1), 0.0, 1.0)

    @staticmethod
    def _composite_text(base: Any, annotation: TextAnnotation) -> Any:
        """
        Draw a single annotation onto the composite.

        Args:
            base: Current composite (RGBA PIL Image)
            annotation: Annotation to draw

        Returns:
            Updated composite (RGBA PIL Image)
        """
        font = load_font(annotation.font_size)
        color = annotation.rgba
        # Shift by the left bearing so the glyph ink, not its pen origin, starts at x
        bearing = font.getbbox(annotation.content, anchor="lm")[0]

        overlay = Image.new("RGBA", base.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(overlay)
        draw.text(
            (annotation.x - bearing, annotation.y),
            annotation.content,
            fill=color,
            font=font,
            anchor="lm",
            stroke_width=bold_stroke_width(annotation.font_size),
            stroke_fill=color,
        )
        return Image.alpha_composite(base, overlay)


def render(session: Any) -> Any:
    """
    Render the session's flattened output at canonical resolution.

    Args:
        session: Session holding image, filters, paint layer and text layer

    Returns:
        PIL Image (RGBA) of exactly ``session.image.size``

    Raises:
        ValueError: If the session has no image
    """
    if session.image is None:
        raise ValueError("Cannot render: no image loaded")

    return LayerCompositor.composite(
        session.image,
        session.filters,
        session.paint_layer,
        session.text_layer.annotations,
    )


def fit_size(size: Tuple[int, int], max_size: Tuple[int, int]) -> Tuple[int, int]:
    """Largest size with ``size``'s aspect ratio fitting inside ``max_size`` (never upscaled)."""
    width, height = size
    max_width, max_height = max_size
    scale = min(max_width / width, max_height / height, 1.0)
    return (max(1, int(round(width * scale))), max(1, int(round(height * scale))))


def render_preview(session: Any, max_size: Tuple[int, int] = DEFAULT_PREVIEW_MAX_SIZE) -> Any:
    """
    Render at canonical resolution, then downscale to fit ``max_size``.

    Returns:
        PIL Image (RGBA) no larger than ``max_size``
    """
    canonical = render(session)
    target = fit_size(canonical.size, max_size)
    if target == canonical.size:
        return canonical
    return canonical.resize(target, Image.Resampling.LANCZOS)


def flatten(image: Any, background: ColorLike = DEFAULT_FLATTEN_BACKGROUND) -> Any:
    """
    Drop the alpha channel by compositing over a solid background.

    Returns:
        PIL Image in RGB mode
    """
    backdrop = Image.new("RGBA", image.size, parse_color(background))
    return Image.alpha_composite(backdrop, image.convert("RGBA")).convert("RGB")
