"""
tests for host command handling.
these are the messages the toolbar/plugin panel sends over the bus.
"""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import unittest
from app.canvas import InkCanvas
from app.commands import CommandHandler
from core.surface import RecordingSurface


class TestCommands(unittest.TestCase):

    def setUp(self):
        self.canvas = InkCanvas(100, 100, surface_factory=RecordingSurface)
        self.commands = CommandHandler(self.canvas)

    def test_pen_settings(self):
        handled = self.commands.handle("pen-settings", {
            "brushSize": "12", "pressureFactor": 0.8, "brushColor": "#336699",
        })
        self.assertTrue(handled)
        tools = self.canvas.tools
        self.assertEqual(tools.brush_size, 12.0)
        self.assertEqual(tools.pressure_factor, 0.8)
        self.assertEqual(tools.brush_color, "#336699")

    def test_pen_settings_partial(self):
        self.commands.handle("pen-settings", {"brushColor": "#ff0000"})
        self.assertEqual(self.canvas.tools.brush_size, 4)
        self.assertEqual(self.canvas.tools.brush_color, "#ff0000")

    def test_eraser_settings(self):
        self.commands.handle("eraser-settings", {"eraserSize": 35, "eraserMode": "stroke"})
        self.assertEqual(self.canvas.tools.eraser_size, 35.0)
        self.assertEqual(self.canvas.tools.eraser_mode, "stroke")

    def test_bad_eraser_mode_ignored(self):
        self.commands.handle("eraser-settings", {"eraserMode": "flood"})
        self.assertEqual(self.canvas.tools.eraser_mode, "pixel")

    def test_tool_switch(self):
        self.commands.handle("tool", {"tool": "eraser"})
        self.assertTrue(self.canvas.tools.erasing)
        self.assertEqual(self.canvas.tools.current_tool, "eraser")
        self.commands.handle("tool", {"tool": "pen"})
        self.assertFalse(self.canvas.tools.erasing)

    def test_pressure_toggle(self):
        self.commands.handle("pressure-toggle")
        self.assertFalse(self.canvas.tools.pressure_enabled)
        self.commands.handle("pressure-toggle", {})
        self.assertTrue(self.canvas.tools.pressure_enabled)

    def test_layer_commands(self):
        self.commands.handle("layer-add")
        self.commands.handle("layer-add")
        self.assertEqual(len(self.canvas.layers), 3)

        self.canvas.pointer_down({"x": 5, "y": 5})
        self.canvas.pointer_up()
        self.commands.handle("layer-clear")
        self.assertEqual(self.canvas.layers[2].strokes, [])

        self.commands.handle("layer-delete")
        self.assertEqual(len(self.canvas.layers), 2)
        self.assertEqual(self.canvas.current_layer_index, 1)

    def test_undo_redo(self):
        self.commands.handle("layer-add")
        self.commands.handle("undo")
        self.assertEqual(len(self.canvas.layers), 1)
        self.commands.handle("redo")
        self.assertEqual(len(self.canvas.layers), 2)

    def test_plugin_prefix_is_stripped(self):
        self.assertTrue(self.commands.handle("inkcanvas-with-electron-for-write/layer-add", {}))
        self.assertEqual(len(self.canvas.layers), 2)

    def test_unknown_topic(self):
        self.assertFalse(self.commands.handle("public/stroke-added", {}))
        self.assertFalse(self.commands.handle("", {}))

    def test_topics_listed(self):
        self.assertIn("pen-settings", self.commands.topics)
        self.assertIn("undo", self.commands.topics)


if __name__ == "__main__":
    unittest.main()
