"""
Single import point for the Pillow modules used by Lumina Vision.

Pillow provides the `PIL` namespace; the editing core imports the modules it
needs from here so the required set is declared in one place:
`Image`, `ImageColor`, `ImageDraw`, `ImageFont` and `ImageOps`.
"""
from importlib import import_module
from types import ModuleType


def _import(name: str) -> ModuleType:
    try:
        return import_module(name)
    except ImportError as exc:
        raise ImportError(
            f"pillow (PIL) is required: install with 'pip install Pillow' ({name} missing)"
        ) from exc


Image = _import("PIL.Image")
ImageColor = _import("PIL.ImageColor")
ImageDraw = _import("PIL.ImageDraw")
ImageFont = _import("PIL.ImageFont")
ImageOps = _import("PIL.ImageOps")

UnidentifiedImageError = _import("PIL").UnidentifiedImageError
