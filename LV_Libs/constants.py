"""
Constants and configuration values for Lumina Vision.

This module centralizes all constant values, parameter ranges and
tool defaults used throughout the editing core.
"""

# Filter channel names, in pipeline order
FILTER_BRIGHTNESS = "brightness"
FILTER_CONTRAST = "contrast"
FILTER_SATURATE = "saturate"
FILTER_BLUR = "blur"
FILTER_GRAYSCALE = "grayscale"
FILTER_SEPIA = "sepia"
FILTER_HUE_ROTATE = "hue_rotate"

FILTER_ORDER = (
    FILTER_BRIGHTNESS,
    FILTER_CONTRAST,
    FILTER_SATURATE,
    FILTER_BLUR,
    FILTER_GRAYSCALE,
    FILTER_SEPIA,
    FILTER_HUE_ROTATE,
)

# UI-facing aliases for filter channel names
FILTER_ALIASES = {
    "hueRotate": FILTER_HUE_ROTATE,
    "hue-rotate": FILTER_HUE_ROTATE,
}

# (minimum, maximum) per filter channel
FILTER_RANGES = {
    FILTER_BRIGHTNESS: (0.0, 200.0),
    FILTER_CONTRAST: (0.0, 200.0),
    FILTER_SATURATE: (0.0, 200.0),
    FILTER_BLUR: (0.0, 20.0),
    FILTER_GRAYSCALE: (0.0, 100.0),
    FILTER_SEPIA: (0.0, 100.0),
    FILTER_HUE_ROTATE: (0.0, 360.0),
}

FILTER_IDENTITY = {
    FILTER_BRIGHTNESS: 100.0,
    FILTER_CONTRAST: 100.0,
    FILTER_SATURATE: 100.0,
    FILTER_BLUR: 0.0,
    FILTER_GRAYSCALE: 0.0,
    FILTER_SEPIA: 0.0,
    FILTER_HUE_ROTATE: 0.0,
}

# Brush size is the stroke width (diameter) in canonical pixels
MIN_BRUSH_SIZE = 1
MAX_BRUSH_SIZE = 50
DEFAULT_BRUSH_SIZE = 5
DEFAULT_BRUSH_COLOR = "#9d00ff"

# Smallest radius that always covers the pixel under the pointer
MIN_COVERAGE_RADIUS = 0.75

# Text tool
MIN_FONT_SIZE = 10
MAX_FONT_SIZE = 200
DEFAULT_FONT_SIZE = 24
DEFAULT_TEXT_COLOR = "#ffffff"
TEXT_HIT_RADIUS_FACTOR = 2.0
# Text is drawn bold: the glyph outline is widened by font_size / 12 pixels
TEXT_BOLD_STROKE_DIVISOR = 12

# Zoom
MIN_ZOOM = 0.5
MAX_ZOOM = 3.0
DEFAULT_ZOOM = 1.0

# Preview rendering
DEFAULT_PREVIEW_MAX_SIZE = (1024, 1024)

# Export
DEFAULT_EXPORT_FILENAME = "lumina-edited.png"
DEFAULT_OUTPUT_FORMAT = "PNG"
DEFAULT_FLATTEN_BACKGROUND = "#ffffff"
