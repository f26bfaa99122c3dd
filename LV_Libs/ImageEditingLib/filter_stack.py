"""
Non-destructive tone and colour filter stack.

Seven adjustable channels are applied to the untouched base image in a fixed
order:

    brightness -> contrast -> saturate -> blur -> grayscale -> sepia -> hue-rotate

Each step follows the CSS Filter Effects definition of the matching filter
function, evaluated in sRGB with the result clipped to [0, 1] after every
step. Individual steps are simple, but the composition is order-significant,
so the pipeline is always built and evaluated in ``FILTER_ORDER``.

``apply`` never produces pixels by itself. It returns a ``RenderedBase``: the
base image plus the typed pipeline, which the compositor realizes on demand.

Example:
    >>> params = FilterParameters()
    >>> params.set("brightness", 150)
    >>> params.set("blur", 500)       # clamped
    >>> params.blur
    20.0
    >>> rendered = apply(image, params)
    >>> rendered.describe()
    'brightness(150%) contrast(100%) saturate(100%) blur(20px) grayscale(0%) sepia(0%) hue-rotate(0deg)'
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, Tuple
import logging
import math

import numpy as np
from scipy import ndimage

from LV_Libs.ImageEditingLib.image_models import EditorImage, clamp
from LV_Libs.constants import (
    FILTER_ALIASES,
    FILTER_BLUR,
    FILTER_BRIGHTNESS,
    FILTER_CONTRAST,
    FILTER_GRAYSCALE,
    FILTER_HUE_ROTATE,
    FILTER_IDENTITY,
    FILTER_ORDER,
    FILTER_RANGES,
    FILTER_SATURATE,
    FILTER_SEPIA,
)
from LV_Libs.pillow_compat import Image

logger = logging.getLogger(__name__)


class FilterKind(Enum):
    BRIGHTNESS = FILTER_BRIGHTNESS
    CONTRAST = FILTER_CONTRAST
    SATURATE = FILTER_SATURATE
    BLUR = FILTER_BLUR
    GRAYSCALE = FILTER_GRAYSCALE
    SEPIA = FILTER_SEPIA
    HUE_ROTATE = FILTER_HUE_ROTATE


_CSS_NAMES = {
    FilterKind.BRIGHTNESS: ("brightness", "%"),
    FilterKind.CONTRAST: ("contrast", "%"),
    FilterKind.SATURATE: ("saturate", "%"),
    FilterKind.BLUR: ("blur", "px"),
    FilterKind.GRAYSCALE: ("grayscale", "%"),
    FilterKind.SEPIA: ("sepia", "%"),
    FilterKind.HUE_ROTATE: ("hue-rotate", "deg"),
}


def normalize_filter_name(name: str) -> str:
    """
    Map a UI channel name onto its canonical name.

    Raises:
        ValueError: If the name is not one of the seven channels
    """
    key = FILTER_ALIASES.get(str(name), str(name))
    if key not in FILTER_RANGES:
        raise ValueError(
            f"Unknown filter channel: {name}. "
            f"Valid channels: {', '.join(FILTER_ORDER)}"
        )
    return key


def clamp_filter_value(name: str, value: float) -> float:
    key = normalize_filter_name(name)
    minimum, maximum = FILTER_RANGES[key]
    return clamp(value, minimum, maximum)


@dataclass
class FilterParameters:
    """Current value of every filter channel.

    Values are always inside their declared range: anything out of range is
    clamped to the nearest bound on construction and on ``set``.

    Attributes:
        brightness: Percent, 0-200, identity 100
        contrast: Percent, 0-200, identity 100
        saturate: Percent, 0-200, identity 100
        blur: Gaussian standard deviation in pixels, 0-20, identity 0
        grayscale: Percent, 0-100, identity 0
        sepia: Percent, 0-100, identity 0
        hue_rotate: Degrees, 0-360, identity 0
    """
    brightness: float = FILTER_IDENTITY[FILTER_BRIGHTNESS]
    contrast: float = FILTER_IDENTITY[FILTER_CONTRAST]
    saturate: float = FILTER_IDENTITY[FILTER_SATURATE]
    blur: float = FILTER_IDENTITY[FILTER_BLUR]
    grayscale: float = FILTER_IDENTITY[FILTER_GRAYSCALE]
    sepia: float = FILTER_IDENTITY[FILTER_SEPIA]
    hue_rotate: float = FILTER_IDENTITY[FILTER_HUE_ROTATE]

    def __post_init__(self):
        for field_info in fields(self):
            setattr(self, field_info.name, clamp_filter_value(field_info.name, getattr(self, field_info.name)))

    def set(self, name: str, value: float) -> float:
        """Set one channel, clamping into range. Returns the stored value."""
        key = normalize_filter_name(name)
        stored = clamp_filter_value(key, value)
        setattr(self, key, stored)
        return stored

    def get(self, name: str) -> float:
        return getattr(self, normalize_filter_name(name))

    def reset(self) -> None:
        """Restore every channel to its identity value."""
        for key, value in FILTER_IDENTITY.items():
            setattr(self, key, value)

    def is_identity(self) -> bool:
        return all(getattr(self, key) == value for key, value in FILTER_IDENTITY.items())

    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary."""
        return {key: getattr(self, key) for key in FILTER_ORDER}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FilterParameters":
        """Create from dictionary, accepting UI aliases and dropping unknown keys."""
        filtered = {}
        for name, value in data.items():
            key = FILTER_ALIASES.get(name, name)
            if key in cls.__dataclass_fields__:
                filtered[key] = float(value)
        return cls(**filtered)


@dataclass(frozen=True)
class FilterOperation:
    """One typed step of the filter pipeline."""
    kind: FilterKind
    value: float

    @property
    def is_identity(self) -> bool:
        return self.value == FILTER_IDENTITY[self.kind.value]

    def describe(self) -> str:
        css_name, unit = _CSS_NAMES[self.kind]
        return f"{css_name}({self.value:g}{unit})"


def build_pipeline(params: FilterParameters) -> Tuple[FilterOperation, ...]:
    """Build the seven filter operations in their fixed evaluation order."""
    return tuple(
        FilterOperation(FilterKind(key), getattr(params, key))
        for key in FILTER_ORDER
    )


# ============================================================================
# Colour matrices (CSS Filter Effects, sRGB)
# ============================================================================

def _saturate_matrix(amount: float) -> np.ndarray:
    s = amount
    return np.array([
        [0.213 + 0.787 * s, 0.715 - 0.715 * s, 0.072 - 0.072 * s],
        [0.213 - 0.213 * s, 0.715 + 0.285 * s, 0.072 - 0.072 * s],
        [0.213 - 0.213 * s, 0.715 - 0.715 * s, 0.072 + 0.928 * s],
    ], dtype=np.float32)


def _grayscale_matrix(amount: float) -> np.ndarray:
    s = 1.0 - amount
    return np.array([
        [0.2126 + 0.7874 * s, 0.7152 - 0.7152 * s, 0.0722 - 0.0722 * s],
        [0.2126 - 0.2126 * s, 0.7152 + 0.2848 * s, 0.0722 - 0.0722 * s],
        [0.2126 - 0.2126 * s, 0.7152 - 0.7152 * s, 0.0722 + 0.9278 * s],
    ], dtype=np.float32)


def _sepia_matrix(amount: float) -> np.ndarray:
    s = 1.0 - amount
    return np.array([
        [0.393 + 0.607 * s, 0.769 - 0.769 * s, 0.189 - 0.189 * s],
        [0.349 - 0.349 * s, 0.686 + 0.314 * s, 0.168 - 0.168 * s],
        [0.272 - 0.272 * s, 0.534 - 0.534 * s, 0.131 + 0.869 * s],
    ], dtype=np.float32)


def _hue_rotate_matrix(degrees: float) -> np.ndarray:
    radians = math.radians(degrees)
    cos_a = math.cos(radians)
    sin_a = math.sin(radians)
    return np.array([
        [0.213 + cos_a * 0.787 - sin_a * 0.213,
         0.715 - cos_a * 0.715 - sin_a * 0.715,
         0.072 - cos_a * 0.072 + sin_a * 0.928],
        [0.213 - cos_a * 0.213 + sin_a * 0.143,
         0.715 + cos_a * 0.285 + sin_a * 0.140,
         0.072 - cos_a * 0.072 - sin_a * 0.283],
        [0.213 - cos_a * 0.213 - sin_a * 0.787,
         0.715 - cos_a * 0.715 + sin_a * 0.715,
         0.072 + cos_a * 0.928 + sin_a * 0.072],
    ], dtype=np.float32)


def _apply_matrix(rgba: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    rgba[..., :3] = rgba[..., :3] @ matrix.T
    return rgba


def _apply_gaussian_blur(rgba: np.ndarray, sigma: float) -> np.ndarray:
    # Blur premultiplied colour so transparent pixels do not bleed in as black.
    alpha = rgba[..., 3:4]
    premultiplied = np.concatenate([rgba[..., :3] * alpha, alpha], axis=-1)
    blurred = ndimage.gaussian_filter(premultiplied, sigma=(sigma, sigma, 0), mode="nearest")
    out_alpha = blurred[..., 3:4]
    safe_alpha = np.where(out_alpha > 0, out_alpha, 1.0)
    color = np.where(out_alpha > 0, blurred[..., :3] / safe_alpha, 0.0)
    return np.concatenate([color, out_alpha], axis=-1).astype(np.float32)


def apply_operation(rgba: np.ndarray, operation: FilterOperation) -> np.ndarray:
    """
    Apply one filter step to a straight-alpha float RGBA array.

    Args:
        rgba: ``(H, W, 4)`` float32 array in [0, 1]; may be modified in place
        operation: The step to apply

    Returns:
        The filtered array, clipped to [0, 1]
    """
    if operation.is_identity:
        return rgba

    kind = operation.kind
    if kind is FilterKind.BRIGHTNESS:
        rgba[..., :3] *= operation.value / 100.0
    elif kind is FilterKind.CONTRAST:
        factor = operation.value / 100.0
        rgba[..., :3] = (rgba[..., :3] - 0.5) * factor + 0.5
    elif kind is FilterKind.SATURATE:
        rgba = _apply_matrix(rgba, _saturate_matrix(operation.value / 100.0))
    elif kind is FilterKind.BLUR:
        rgba = _apply_gaussian_blur(rgba, operation.value)
    elif kind is FilterKind.GRAYSCALE:
        rgba = _apply_matrix(rgba, _grayscale_matrix(operation.value / 100.0))
    elif kind is FilterKind.SEPIA:
        rgba = _apply_matrix(rgba, _sepia_matrix(operation.value / 100.0))
    elif kind is FilterKind.HUE_ROTATE:
        rgba = _apply_matrix(rgba, _hue_rotate_matrix(operation.value))
    else:
        raise ValueError(f"Unsupported filter kind: {kind}")

    np.clip(rgba, 0.0, 1.0, out=rgba)
    return rgba


@dataclass(frozen=True)
class RenderedBase:
    """The base image together with the filter pipeline to apply to it.

    Attributes:
        image: The untouched base image
        operations: The seven filter steps in evaluation order
    """
    image: EditorImage
    operations: Tuple[FilterOperation, ...]

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size

    def active_operations(self) -> Tuple[FilterOperation, ...]:
        return tuple(op for op in self.operations if not op.is_identity)

    def describe(self) -> str:
        """CSS ``filter`` value equivalent to the pipeline, for preview layers."""
        return " ".join(op.describe() for op in self.operations)

    def realize(self) -> np.ndarray:
        """Evaluate the pipeline into a new ``(H, W, 4)`` straight-alpha float32 array."""
        rgba = self.image.pixels()
        for operation in self.operations:
            rgba = apply_operation(rgba, operation)
        return rgba

    def to_image(self) -> Any:
        """Evaluate the pipeline into a new RGBA Pillow image."""
        data = np.rint(self.realize() * 255.0).astype(np.uint8)
        return Image.fromarray(data)


def apply(image: EditorImage, params: FilterParameters) -> RenderedBase:
    """
    Describe the base image with the current filter parameters applied.

    Args:
        image: Base image (never modified)
        params: Current filter parameters

    Returns:
        RenderedBase holding the image and a snapshot of the pipeline
    """
    operations = build_pipeline(params)
    active = [op.describe() for op in operations if not op.is_identity]
    logger.debug(f"Filter pipeline for {image.width}x{image.height}: {active or 'identity'}")
    return RenderedBase(image=image, operations=operations)
