"""
Lumina Vision Layers Library.

Modules:
    paint_layer: Premultiplied paint buffer with brush and eraser strokes
    text_layer: Text annotations with hit testing, selection and dragging
    compositor: Flattens base, paint and text layers into one raster
"""

from LV_Libs.LayersLib.paint_layer import (
    PaintLayer,
    Stroke,
    StrokeMode,
)
from LV_Libs.LayersLib.text_layer import (
    TextAnnotation,
    TextLayer,
)
from LV_Libs.LayersLib.compositor import (
    LayerCompositor,
    flatten,
    render,
    render_preview,
)

__all__ = [
    "PaintLayer",
    "Stroke",
    "StrokeMode",
    "TextAnnotation",
    "TextLayer",
    "LayerCompositor",
    "flatten",
    "render",
    "render_preview",
]
