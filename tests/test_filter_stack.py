"""
Tests for the filter stack.

Tests cover:
- Parameter clamping, aliases and reset
- Fixed pipeline order
- Per-filter pixel results
- Order significance of the composed pipeline
- Non-destructive application
"""

import numpy as np
import pytest
from PIL import Image

from LV_Libs.ImageEditingLib.filter_stack import (
    FilterKind,
    FilterOperation,
    FilterParameters,
    apply,
    build_pipeline,
)
from LV_Libs.ImageEditingLib.image_models import EditorImage
from LV_Libs.constants import FILTER_IDENTITY, FILTER_ORDER, FILTER_RANGES


def solid(color, size=(8, 8)):
    return EditorImage(Image.new("RGBA", size, color))


def realize_pixel(image, params, x=0, y=0):
    return apply(image, params).realize()[y, x]


class TestFilterParameters:
    """Tests for FilterParameters."""

    def test_defaults_are_identity(self):
        """A fresh record should be the identity record."""
        params = FilterParameters()

        assert params.is_identity()
        assert params.to_dict() == FILTER_IDENTITY

    @pytest.mark.parametrize("name", FILTER_ORDER)
    def test_values_above_range_clamp_to_maximum(self, name):
        """Out-of-range high values should store the upper bound."""
        params = FilterParameters()

        stored = params.set(name, 10_000)

        assert stored == FILTER_RANGES[name][1]
        assert getattr(params, name) == FILTER_RANGES[name][1]

    @pytest.mark.parametrize("name", FILTER_ORDER)
    def test_values_below_range_clamp_to_minimum(self, name):
        """Out-of-range low values should store the lower bound."""
        params = FilterParameters()

        params.set(name, -50)

        assert getattr(params, name) == FILTER_RANGES[name][0]

    def test_constructor_clamps(self):
        """Constructor arguments should be clamped too."""
        params = FilterParameters(brightness=999, blur=-3)

        assert params.brightness == 200.0
        assert params.blur == 0.0

    def test_accepts_camel_case_alias(self):
        """hueRotate should address the hue_rotate channel."""
        params = FilterParameters()

        params.set("hueRotate", 90)

        assert params.hue_rotate == 90.0
        assert params.get("hueRotate") == 90.0

    def test_unknown_channel_raises(self):
        """Unknown channel names are programming errors."""
        with pytest.raises(ValueError):
            FilterParameters().set("sharpness", 10)

    def test_reset_restores_identity(self):
        """reset() should return every channel to identity."""
        params = FilterParameters(brightness=150, sepia=40, hue_rotate=200)

        params.reset()

        assert params.is_identity()

    def test_from_dict_drops_unknown_and_clamps(self):
        """from_dict should ignore unknown keys and clamp values."""
        params = FilterParameters.from_dict({"contrast": 300, "hueRotate": 45, "vignette": 3})

        assert params.contrast == 200.0
        assert params.hue_rotate == 45.0


class TestPipeline:
    """Tests for pipeline construction."""

    def test_pipeline_has_fixed_order(self):
        """Operations should always come out in the documented order."""
        params = FilterParameters(hue_rotate=10, brightness=120, blur=2)

        kinds = [op.kind for op in build_pipeline(params)]

        assert kinds == [
            FilterKind.BRIGHTNESS,
            FilterKind.CONTRAST,
            FilterKind.SATURATE,
            FilterKind.BLUR,
            FilterKind.GRAYSCALE,
            FilterKind.SEPIA,
            FilterKind.HUE_ROTATE,
        ]

    def test_describe_matches_css_filter_syntax(self):
        """describe() should produce a CSS filter value."""
        params = FilterParameters(brightness=150, blur=5)

        description = apply(solid("red"), params).describe()

        assert description == (
            "brightness(150%) contrast(100%) saturate(100%) blur(5px) "
            "grayscale(0%) sepia(0%) hue-rotate(0deg)"
        )

    def test_active_operations_skip_identity(self):
        """Only non-identity steps should be reported as active."""
        rendered = apply(solid("red"), FilterParameters(sepia=30))

        assert rendered.active_operations() == (FilterOperation(FilterKind.SEPIA, 30.0),)

    def test_apply_snapshots_parameters(self):
        """Changing parameters after apply() should not change the description."""
        params = FilterParameters(brightness=150)
        rendered = apply(solid("red"), params)

        params.set("brightness", 50)

        assert rendered.operations[0].value == 150.0


class TestFilterPixels:
    """Tests for individual filter results."""

    def test_identity_leaves_pixels_unchanged(self):
        """Identity parameters should reproduce the source exactly."""
        source = Image.new("RGBA", (4, 4))
        source.putdata([(i * 13 % 256, i * 7 % 256, i * 29 % 256, 255) for i in range(16)])
        image = EditorImage(source)

        result = apply(image, FilterParameters()).to_image()

        assert result.tobytes() == source.tobytes()

    def test_brightness_scales_channels(self):
        """brightness(150%) should multiply channels by 1.5."""
        pixel = realize_pixel(solid((100, 100, 100, 255)), FilterParameters(brightness=150))

        assert pixel[:3] == pytest.approx([150 / 255.0] * 3, abs=1e-5)

    def test_brightness_clips_at_white(self):
        """Results should be clipped to the valid range."""
        pixel = realize_pixel(solid((200, 200, 200, 255)), FilterParameters(brightness=200))

        assert pixel[:3] == pytest.approx([1.0, 1.0, 1.0])

    def test_zero_contrast_is_mid_grey(self):
        """contrast(0%) should collapse everything to 0.5."""
        pixel = realize_pixel(solid((10, 240, 90, 255)), FilterParameters(contrast=0))

        assert pixel[:3] == pytest.approx([0.5, 0.5, 0.5])

    def test_full_grayscale_uses_luminance_weights(self):
        """grayscale(100%) of pure red should give the red luminance weight."""
        pixel = realize_pixel(solid((255, 0, 0, 255)), FilterParameters(grayscale=100))

        assert pixel[:3] == pytest.approx([0.2126, 0.2126, 0.2126], abs=1e-5)

    def test_zero_saturation_matches_grayscale_of_white(self):
        """saturate(0%) of white should stay white."""
        pixel = realize_pixel(solid((255, 255, 255, 255)), FilterParameters(saturate=0))

        assert pixel[:3] == pytest.approx([1.0, 1.0, 1.0], abs=1e-5)

    def test_full_sepia_of_white(self):
        """sepia(100%) should tint white towards the sepia tone."""
        pixel = realize_pixel(solid((255, 255, 255, 255)), FilterParameters(sepia=100))

        assert pixel[0] == pytest.approx(1.0)
        assert pixel[1] == pytest.approx(1.0)
        assert pixel[2] == pytest.approx(0.131 + 0.534 + 0.272, abs=1e-5)

    def test_hue_rotate_full_turn_is_near_identity(self):
        """hue-rotate(360deg) should return to the original colour."""
        pixel = realize_pixel(solid((200, 50, 100, 255)), FilterParameters(hue_rotate=360))

        assert pixel[:3] == pytest.approx([200 / 255.0, 50 / 255.0, 100 / 255.0], abs=1e-4)

    def test_hue_rotate_changes_colour(self):
        """hue-rotate(180deg) should move red away from red."""
        pixel = realize_pixel(solid((255, 0, 0, 255)), FilterParameters(hue_rotate=180))

        assert pixel[0] < 0.5
        assert pixel[2] > pixel[0]

    def test_blur_keeps_uniform_image(self):
        """Blurring a flat colour should not change it."""
        image = solid((40, 80, 120, 255), size=(32, 32))

        result = apply(image, FilterParameters(blur=5)).realize()

        assert np.allclose(result, image.pixels(), atol=1e-5)

    def test_blur_spreads_a_single_pixel(self):
        """A lone white pixel should spread into its neighbours."""
        source = Image.new("RGBA", (21, 21), (0, 0, 0, 255))
        source.putpixel((10, 10), (255, 255, 255, 255))

        result = apply(EditorImage(source), FilterParameters(blur=2)).realize()

        assert result[10, 10, 0] < 1.0
        assert result[10, 12, 0] > 0.0
        assert result[0, 0, 0] == pytest.approx(0.0, abs=1e-4)

    def test_blur_does_not_darken_transparent_edges(self):
        """Transparent neighbours should not pull colour towards black."""
        source = Image.new("RGBA", (21, 21), (0, 0, 0, 0))
        for x in range(21):
            for y in range(10):
                source.putpixel((x, y), (255, 255, 255, 255))

        result = apply(EditorImage(source), FilterParameters(blur=2)).realize()

        assert result[9, 10, 0] == pytest.approx(1.0, abs=1e-4)
        assert result[9, 10, 3] < 1.0

    def test_pipeline_order_is_significant(self):
        """Brightness is applied before contrast."""
        pixel = realize_pixel(
            solid((102, 102, 102, 255)),
            FilterParameters(brightness=200, contrast=50),
        )

        # brightness first: 0.4 -> 0.8, then contrast: (0.8 - 0.5) * 0.5 + 0.5
        assert pixel[0] == pytest.approx(0.65, abs=1e-5)

    def test_apply_is_non_destructive(self):
        """The base image must be untouched by applying filters."""
        image = solid((90, 60, 30, 255))
        before = image.source.tobytes()

        apply(image, FilterParameters(brightness=10, blur=3, sepia=100)).realize()

        assert image.source.tobytes() == before
