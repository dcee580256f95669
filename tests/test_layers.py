"""
tests for the layer stack and the compositor.
"""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import unittest
import numpy as np
from app.tools import StrokeBuilder
from core.compositor import Compositor
from core.layers import LayerStore
from core.state_manager import ToolState
from core.strokes import Point, Stroke
from core.surface import RasterSurface, RecordingSurface, SurfaceError


def make_stroke(*xy, color="#000000", size=4):
    return Stroke(color, size, [Point(x, y, 0.5, size) for x, y in xy])


def make_store(layers=1, factory=RecordingSurface):
    store = LayerStore(100, 100, 1.0, factory)
    for _ in range(layers):
        store.create_layer()
    return store


class TestLayerStore(unittest.TestCase):

    def test_create_appends_and_activates(self):
        store = make_store(1)
        layer = store.create_layer()
        self.assertEqual(len(store), 2)
        self.assertEqual(store.current_index, 1)
        self.assertIs(store.active_layer, layer)
        self.assertEqual(layer.name, "Layer 2")
        self.assertTrue(layer.visible)
        self.assertEqual(layer.opacity, 1.0)
        self.assertEqual(layer.strokes, [])

    def test_create_matches_canvas_size(self):
        store = LayerStore(80, 60, 1.5, RasterSurface)
        layer = store.create_layer()
        self.assertEqual(layer.surface.pixel_size, (120, 90))

    def test_create_failure_leaves_stack_alone(self):
        store = make_store(1)
        store.width = 0
        with self.assertRaises(SurfaceError):
            store.create_layer()
        self.assertEqual(len(store), 1)
        self.assertEqual(store.current_index, 0)

    def test_layer_ids_are_unique(self):
        store = make_store(4)
        ids = [layer.id for layer in store.layers]
        self.assertEqual(len(set(ids)), 4)

    def test_switch_never_touches_strokes(self):
        store = make_store(3)
        for layer in store.layers:
            layer.strokes.append(make_stroke((1, 1)))
        before = [(id(layer.strokes), list(layer.strokes)) for layer in store.layers]

        for index in (-1, 0, 2, 3, 99, "1", None):
            store.switch_layer(index)

        after = [(id(layer.strokes), list(layer.strokes)) for layer in store.layers]
        self.assertEqual(before, after)
        self.assertEqual(store.current_index, 2)

    def test_switch_out_of_range_is_noop(self):
        store = make_store(2)
        store.switch_layer(0)
        self.assertFalse(store.switch_layer(2))
        self.assertFalse(store.switch_layer(-1))
        self.assertEqual(store.current_index, 0)

    def test_bools_arent_indexes(self):
        store = make_store(2)
        store.switch_layer(0)
        self.assertFalse(store.switch_layer(True))
        self.assertFalse(store.switch_layer(False))
        self.assertFalse(store.clear_layer(True))
        self.assertFalse(store.set_opacity(True, 0.5))
        self.assertEqual(store.current_index, 0)
        self.assertEqual(store.layers[1].opacity, 1.0)

    def test_cant_delete_last_layer(self):
        store = make_store(1)
        for index in (-1, 0, 1, 5):
            self.assertFalse(store.delete_layer(index))
        self.assertEqual(len(store), 1)

    def test_delete_clamps_current(self):
        store = make_store(3)
        self.assertEqual(store.current_index, 2)
        self.assertTrue(store.delete_layer(2))
        self.assertEqual(store.current_index, 1)

    def test_delete_below_current_keeps_index(self):
        store = make_store(3)
        store.switch_layer(1)
        store.delete_layer(0)
        self.assertEqual(store.current_index, 1)
        self.assertEqual(len(store), 2)

    def test_clear_layer(self):
        store = make_store(2)
        store.layers[0].strokes.append(make_stroke((1, 1)))
        self.assertTrue(store.clear_layer(0))
        self.assertEqual(store.layers[0].strokes, [])
        self.assertFalse(store.clear_layer(5))

    def test_opacity_is_clamped(self):
        store = make_store(1)
        store.set_opacity(0, 1.7)
        self.assertEqual(store.layers[0].opacity, 1.0)
        store.set_opacity(0, -2)
        self.assertEqual(store.layers[0].opacity, 0.0)
        self.assertFalse(store.set_opacity(3, 0.5))

    def test_opacity_rejects_non_numbers(self):
        store = make_store(1)
        store.set_opacity(0, 0.25)
        for value in (float("nan"), float("inf"), float("-inf"), "abc", None, [1]):
            self.assertFalse(store.set_opacity(0, value))
        self.assertEqual(store.layers[0].opacity, 0.25)
        # numeric strings parse
        self.assertTrue(store.set_opacity(0, "0.5"))
        self.assertEqual(store.layers[0].opacity, 0.5)

    def test_visibility(self):
        store = make_store(1)
        self.assertTrue(store.set_visibility(0, False))
        self.assertFalse(store.layers[0].visible)
        self.assertFalse(store.set_visibility(1, False))


class TestSnapshots(unittest.TestCase):

    def test_capture_is_a_deep_copy(self):
        store = make_store(1)
        stroke = make_stroke((1, 1), (2, 2))
        store.layers[0].strokes.append(stroke)
        snap = store.capture()

        stroke.add_point(Point(3, 3, 0.5, 4))
        store.layers[0].strokes.append(make_stroke((9, 9)))

        saved = snap["layers"][0]["strokes"]
        self.assertEqual(len(saved), 1)
        self.assertEqual(len(saved[0].points), 2)

    def test_restore_brings_back_layers(self):
        store = make_store(1)
        store.layers[0].strokes.append(make_stroke((1, 1)))
        snap = store.capture()

        store.create_layer()
        store.layers[0].strokes.clear()
        store.restore(snap)

        self.assertEqual(len(store), 1)
        self.assertEqual(store.current_index, 0)
        self.assertEqual(len(store.layers[0].strokes), 1)

    def test_restore_gives_fresh_surfaces(self):
        store = make_store(1)
        old_surface = store.layers[0].surface
        store.restore(store.capture())
        self.assertIsNot(store.layers[0].surface, old_surface)

    def test_restore_keeps_live_presentation(self):
        store = make_store(2)
        snap = store.capture()
        store.set_visibility(0, False)
        store.set_opacity(1, 0.25)
        store.restore(snap)
        self.assertFalse(store.layers[0].visible)
        self.assertEqual(store.layers[1].opacity, 0.25)

    def test_restored_strokes_are_copies(self):
        store = make_store(1)
        store.layers[0].strokes.append(make_stroke((1, 1)))
        snap = store.capture()
        store.restore(snap)
        store.layers[0].strokes.append(make_stroke((5, 5)))
        self.assertEqual(len(snap["layers"][0]["strokes"]), 1)

    def test_resize_failure_keeps_surfaces(self):
        store = make_store(2)
        surfaces = [layer.surface for layer in store.layers]
        with self.assertRaises(SurfaceError):
            store.resize(0, 0, 1.0)
        self.assertEqual([layer.surface for layer in store.layers], surfaces)
        self.assertEqual((store.width, store.height), (100, 100))


class TestCompositor(unittest.TestCase):

    def setUp(self):
        self.builder = StrokeBuilder(ToolState())

    def test_hidden_layers_are_skipped(self):
        store = make_store(3)
        store.set_visibility(1, False)
        display = RecordingSurface(100, 100)
        display.calls.clear()
        Compositor(display, self.builder).composite_display(store.layers)

        self.assertEqual(display.names(), ["clear", "composite_from", "composite_from"])
        blitted = [args[0] for name, args in display.calls if name == "composite_from"]
        self.assertEqual(blitted, [store.layers[0].surface, store.layers[2].surface])

    def test_opacity_is_passed_as_alpha(self):
        store = make_store(1)
        store.set_opacity(0, 0.4)
        display = RecordingSurface(100, 100)
        Compositor(display, self.builder).composite_display(store.layers)
        self.assertEqual(display.calls[-1], ("composite_from", (store.layers[0].surface, 0.4)))

    def test_rebuild_replays_in_order(self):
        store = make_store(1)
        layer = store.layers[0]
        layer.strokes = [make_stroke((1, 1), color="#111111"), make_stroke((2, 2), color="#222222")]
        layer.surface.calls.clear()
        Compositor(RecordingSurface(100, 100), self.builder).rebuild_layer(layer)
        self.assertEqual(layer.surface.names(), ["clear", "fill_circle", "fill_circle"])
        self.assertEqual([args[3] for _, args in layer.surface.calls[1:]], ["#111111", "#222222"])

    def test_rebuild_is_idempotent(self):
        store = make_store(1, factory=RasterSurface)
        layer = store.layers[0]
        layer.strokes = [
            make_stroke((10, 10), (40, 20), (60, 70), (90, 30), color="#e53935"),
            make_stroke((50, 50)),
            make_stroke((20, 80), (80, 80), color="#1e88e5", size=7),
        ]
        compositor = Compositor(RasterSurface(100, 100), self.builder)
        compositor.rebuild_layer(layer)
        first = layer.surface.pixels.copy()
        compositor.rebuild_layer(layer)
        self.assertTrue(np.array_equal(first, layer.surface.pixels))
        self.assertGreater(int(first[..., 3].sum()), 0)

    def test_later_strokes_paint_over_earlier(self):
        store = make_store(1, factory=RasterSurface)
        layer = store.layers[0]
        layer.strokes = [make_stroke((50, 50), color="#ff0000", size=10),
                         make_stroke((50, 50), color="#0000ff", size=10)]
        compositor = Compositor(RasterSurface(100, 100), self.builder)
        compositor.rebuild_layer(layer)
        self.assertEqual(tuple(layer.surface.pixels[50, 50]), (255, 0, 0, 255))

    def test_rect_preview_goes_on_display(self):
        display = RecordingSurface(100, 100)
        display.calls.clear()
        Compositor(display, self.builder).draw_rect_preview((1, 2), (30, 40))
        self.assertEqual(display.names(), ["stroke_dashed_rect"])

    def test_modules_have_docstrings(self):
        import core.compositor
        import core.layers
        import core.state_manager
        for module in (core.compositor, core.state_manager, core.layers):
            self.assertTrue(module.__doc__ and module.__doc__.strip(), module.__name__)


if __name__ == "__main__":
    unittest.main()
