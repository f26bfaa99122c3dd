"""
ImageEditingLib - Core image editing functionality

This module provides image models, display-to-canonical coordinate mapping,
the non-destructive filter stack and the decode/export helpers for the
Lumina Vision editing core.
"""

from LV_Libs.ImageEditingLib.image_models import (
    EditorImage,
    RgbaColor,
    Point,
    clamp,
    parse_color,
)
from LV_Libs.ImageEditingLib.coordinate_mapper import (
    CoordinateMapper,
    DisplayBox,
    to_canonical,
    to_display,
    zoomed_box,
)
from LV_Libs.ImageEditingLib.filter_stack import (
    FilterKind,
    FilterOperation,
    FilterParameters,
    RenderedBase,
    apply,
    build_pipeline,
)
from LV_Libs.ImageEditingLib.image_editing_ops import (
    ImageDecodeError,
    decode_image,
    encode_png,
    save_export,
)

__all__ = [
    "EditorImage",
    "RgbaColor",
    "Point",
    "clamp",
    "parse_color",
    "CoordinateMapper",
    "DisplayBox",
    "to_canonical",
    "to_display",
    "zoomed_box",
    "FilterKind",
    "FilterOperation",
    "FilterParameters",
    "RenderedBase",
    "apply",
    "build_pipeline",
    "ImageDecodeError",
    "decode_image",
    "encode_png",
    "save_export",
]
