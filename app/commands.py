"""
host command handling.

the host (toolbar, plugin panel, whatever) talks to us with bus
messages: a topic plus a small payload. this maps those onto canvas
calls so the canvas itself never has to know about the bus.

    tool              {"tool": "pen" | "eraser"}
    pressure-toggle   {}
    layer-add         {}
    layer-clear       {}                 clears the current layer
    layer-delete      {}                 deletes the current layer
    pen-settings      {"brushSize", "pressureFactor", "brushColor"}
    eraser-settings   {"eraserSize", "eraserMode"}
    undo / redo       {}

topics can carry a "<plugin id>/" prefix, it gets stripped.
"""
import logging

log = logging.getLogger(__name__)


def _number(value):
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class CommandHandler:

    def __init__(self, canvas):
        self.canvas = canvas
        self._handlers = {
            "tool": self._tool,
            "pressure-toggle": self._pressure_toggle,
            "layer-add": self._layer_add,
            "layer-clear": self._layer_clear,
            "layer-delete": self._layer_delete,
            "pen-settings": self._pen_settings,
            "eraser-settings": self._eraser_settings,
            "undo": lambda payload: self.canvas.undo(),
            "redo": lambda payload: self.canvas.redo(),
        }

    @property
    def topics(self):
        return sorted(self._handlers)

    def handle(self, topic, payload=None):
        """run a command. returns False for topics we dont know"""
        name = topic.rsplit("/", 1)[-1] if topic else ""
        handler = self._handlers.get(name)
        if handler is None:
            log.debug("ignoring unknown command %r", topic)
            return False
        handler(payload or {})
        return True

    # --- handlers ---

    def _tool(self, payload):
        tool = payload.get("tool")
        if tool == "eraser":
            self.canvas.set_erasing(True)
        elif tool == "pen":
            self.canvas.set_erasing(False)
        else:
            log.debug("unknown tool %r", tool)

    def _pressure_toggle(self, payload):
        self.canvas.set_pressure_enabled(not self.canvas.tools.pressure_enabled)

    def _layer_add(self, payload):
        self.canvas.create_layer()

    def _layer_clear(self, payload):
        self.canvas.clear_layer(self.canvas.current_layer_index)

    def _layer_delete(self, payload):
        self.canvas.delete_layer(self.canvas.current_layer_index)

    def _pen_settings(self, payload):
        size = _number(payload.get("brushSize"))
        if size is not None:
            self.canvas.set_brush_size(size)
        factor = _number(payload.get("pressureFactor"))
        if factor is not None:
            self.canvas.set_pressure_factor(factor)
        color = payload.get("brushColor")
        if color:
            self.canvas.set_brush_color(str(color))

    def _eraser_settings(self, payload):
        size = _number(payload.get("eraserSize"))
        if size is not None:
            self.canvas.set_eraser_size(size)
        mode = payload.get("eraserMode")
        if mode:
            self.canvas.set_eraser_mode(str(mode))
