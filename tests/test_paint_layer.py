"""
Tests for the Paint Layer.

Tests cover:
- Allocation and clearing
- Stroke geometry (width, round caps, continuity)
- Source-over painting and destination-out erasing
- Single blend per stroke
- No-op behaviour on unallocated or reallocated layers
"""

import unittest

import numpy as np

from LV_Libs.LayersLib.paint_layer import PaintLayer, StrokeMode, clamp_radius


class TestAllocation(unittest.TestCase):
    """Test buffer allocation."""

    def test_allocate_creates_transparent_buffer(self):
        """Test new buffer matches the size and is empty."""
        layer = PaintLayer(40, 30)

        self.assertEqual(layer.size, (40, 30))
        self.assertEqual(layer.pixels().shape, (30, 40, 4))
        self.assertTrue(layer.is_empty())

    def test_unallocated_layer_reports_no_size(self):
        """Test a fresh layer without dimensions."""
        layer = PaintLayer()

        self.assertFalse(layer.is_allocated)
        self.assertIsNone(layer.size)
        self.assertIsNone(layer.alpha())
        self.assertIsNone(layer.to_image())

    def test_operations_on_unallocated_layer_are_noops(self):
        """Test stroke calls do not raise without a buffer."""
        layer = PaintLayer()

        self.assertFalse(layer.begin_stroke((5, 5), "red", 3))
        layer.extend_stroke((10, 10))
        layer.end_stroke()
        layer.clear()

        self.assertFalse(layer.is_stroking)

    def test_zero_size_allocation_leaves_layer_unallocated(self):
        """Test degenerate dimensions release the buffer."""
        layer = PaintLayer(10, 10)

        layer.allocate(0, 10)

        self.assertFalse(layer.is_allocated)

    def test_clear_resets_every_pixel(self):
        """Test clear() makes the layer fully transparent."""
        layer = PaintLayer(20, 20)
        layer.begin_stroke((10, 10), "blue", 5)
        layer.end_stroke()

        layer.clear()

        self.assertTrue(layer.is_empty())
        self.assertEqual(float(layer.pixels().max()), 0.0)


class TestStrokeGeometry(unittest.TestCase):
    """Test stroke rasterization."""

    def setUp(self):
        """Create test layer."""
        self.layer = PaintLayer(100, 100)

    def test_stroke_width_is_twice_radius(self):
        """Test a horizontal stroke covers exactly 2 * radius rows."""
        self.layer.begin_stroke((10, 10), "red", 3)
        self.layer.extend_stroke((90, 10))
        self.layer.end_stroke()

        column = self.layer.alpha()[:, 50]
        covered_rows = np.nonzero(column)[0].tolist()

        self.assertEqual(covered_rows, [7, 8, 9, 10, 11, 12])

    def test_sparse_samples_produce_continuous_line(self):
        """Test far-apart samples still leave no gaps."""
        self.layer.begin_stroke((5, 50), "red", 2)
        for x in (35, 65, 95):
            self.layer.extend_stroke((x, 50))
        self.layer.end_stroke()

        row = self.layer.alpha()[50, 5:95]

        self.assertTrue(np.all(row == 1.0))

    def test_segments_chain_end_to_start(self):
        """Test an L-shaped stroke joins at the corner."""
        self.layer.begin_stroke((20, 20), "red", 2)
        self.layer.extend_stroke((80, 20))
        self.layer.extend_stroke((80, 80))
        self.layer.end_stroke()

        alpha = self.layer.alpha()
        self.assertTrue(np.all(alpha[20, 20:80] == 1.0))
        self.assertTrue(np.all(alpha[20:80, 80] == 1.0))
        self.assertEqual(alpha[50, 50], 0.0)

    def test_round_cap_at_stroke_end(self):
        """Test caps are round: the cap's corner pixel is left empty."""
        self.layer.begin_stroke((50, 50), "red", 5)
        self.layer.end_stroke()

        alpha = self.layer.alpha()
        self.assertEqual(alpha[50, 50], 1.0)
        self.assertEqual(alpha[50, 54], 1.0)
        self.assertEqual(alpha[54, 54], 0.0)

    def test_single_pixel_brush_always_covers_pointer_pixel(self):
        """Test the smallest brush still marks the pixel under the pointer."""
        self.layer.begin_stroke((30.0, 40.0), "red", 0.5)
        self.layer.end_stroke()

        self.assertEqual(self.layer.alpha()[40, 30], 1.0)

    def test_points_outside_layer_are_clipped(self):
        """Test strokes leaving the canvas do not raise."""
        self.layer.begin_stroke((-50, -50), "red", 4)
        self.layer.extend_stroke((150, 150))
        self.layer.extend_stroke((500, -20))
        self.layer.end_stroke()

        self.assertEqual(self.layer.alpha()[50, 50], 1.0)

    def test_radius_is_clamped_to_brush_range(self):
        """Test radius limits of 0.5-25."""
        self.assertEqual(clamp_radius(100), 25.0)
        self.assertEqual(clamp_radius(0), 0.5)


class TestCompositeModes(unittest.TestCase):
    """Test paint and erase semantics."""

    def setUp(self):
        """Create test layer."""
        self.layer = PaintLayer(100, 100)

    def _draw(self, points, color="red", radius=3, mode=StrokeMode.PAINT):
        self.layer.begin_stroke(points[0], color, radius, mode)
        for point in points[1:]:
            self.layer.extend_stroke(point)
        self.layer.end_stroke()

    def test_paint_stores_premultiplied_colour(self):
        """Test a half-transparent colour is premultiplied."""
        self._draw([(50, 50)], color=(255, 0, 0, 128))

        pixel = self.layer.pixels()[50, 50]

        self.assertAlmostEqual(float(pixel[3]), 128 / 255.0, places=5)
        self.assertAlmostEqual(float(pixel[0]), 128 / 255.0, places=5)
        self.assertEqual(float(pixel[1]), 0.0)

    def test_to_image_unpremultiplies(self):
        """Test the exported layer image has straight colour."""
        self._draw([(50, 50)], color=(255, 0, 0, 128))

        self.assertEqual(self.layer.to_image().getpixel((50, 50)), (255, 0, 0, 128))

    def test_erase_over_identical_path_removes_all_coverage(self):
        """Test erasing the painted path leaves zero alpha along it."""
        path = [(10, 10), (40, 70), (90, 90)]
        self._draw(path, color="#ff0000", radius=4)
        self.assertGreater(float(self.layer.alpha().sum()), 0.0)

        self._draw(path, radius=4, mode=StrokeMode.ERASE)

        self.assertEqual(float(self.layer.alpha().max()), 0.0)

    def test_erase_only_removes_under_the_eraser(self):
        """Test a short eraser stroke leaves the rest of the paint."""
        self._draw([(10, 50), (90, 50)], radius=4)

        self._draw([(45, 50), (55, 50)], radius=4, mode="erase")

        alpha = self.layer.alpha()
        self.assertEqual(alpha[50, 50], 0.0)
        self.assertEqual(alpha[50, 20], 1.0)
        self.assertEqual(alpha[50, 80], 1.0)

    def test_self_overlapping_stroke_blends_once(self):
        """Test one translucent stroke crossing itself does not darken."""
        self._draw([(20, 50), (80, 50), (20, 50), (80, 50)], color=(0, 0, 255, 128))

        self.assertAlmostEqual(float(self.layer.alpha()[50, 50]), 128 / 255.0, places=5)

    def test_separate_strokes_accumulate(self):
        """Test a second translucent stroke blends over the first."""
        self._draw([(20, 50), (80, 50)], color=(0, 0, 255, 128))
        self._draw([(20, 50), (80, 50)], color=(0, 0, 255, 128))

        a = 128 / 255.0
        self.assertAlmostEqual(float(self.layer.alpha()[50, 50]), a + a * (1 - a), places=5)

    def test_invalid_mode_raises(self):
        """Test unknown modes are rejected."""
        with self.assertRaises(ValueError):
            self.layer.begin_stroke((5, 5), "red", 3, "smudge")

    def test_invalid_colour_raises(self):
        """Test unknown colours are rejected."""
        with self.assertRaises(ValueError):
            self.layer.begin_stroke((5, 5), "not-a-colour", 3)


class TestReallocation(unittest.TestCase):
    """Test strokes never leak into a reallocated buffer."""

    def test_extend_after_reallocation_is_noop(self):
        """Test a stroke begun on the old buffer does not draw on the new one."""
        layer = PaintLayer(100, 100)
        layer.begin_stroke((10, 10), "red", 3)

        layer.allocate(60, 40)
        layer.extend_stroke((50, 30))

        self.assertFalse(layer.is_stroking)
        self.assertTrue(layer.is_empty())
        self.assertEqual(layer.size, (60, 40))

    def test_abort_keeps_what_was_drawn(self):
        """Test aborting an in-flight stroke commits it."""
        layer = PaintLayer(50, 50)
        layer.begin_stroke((10, 10), "red", 3)
        layer.extend_stroke((40, 10))

        layer.abort_stroke()
        layer.extend_stroke((40, 40))

        self.assertEqual(layer.alpha()[10, 25], 1.0)
        self.assertEqual(layer.alpha()[30, 40], 0.0)


if __name__ == "__main__":
    unittest.main()
