"""
tool settings: brush, pressure and eraser. setters ignore bad values and
return whether anything was accepted.
"""
import logging

from app.config import (
    DEFAULT_BRUSH_SIZE, DEFAULT_BRUSH_COLOR, PRESSURE_ENABLED, PRESSURE_FACTOR,
    DEFAULT_ERASER_SIZE, DEFAULT_ERASER_MODE, ERASER_MODES,
)
from core.surface import parse_color

log = logging.getLogger(__name__)


class ToolState:
    """keeps track of the brush, the eraser, and whether we're erasing"""

    def __init__(self):
        self.brush_size = DEFAULT_BRUSH_SIZE
        self.brush_color = DEFAULT_BRUSH_COLOR
        self.pressure_enabled = PRESSURE_ENABLED
        self.pressure_factor = PRESSURE_FACTOR
        self.eraser_size = DEFAULT_ERASER_SIZE
        self.eraser_mode = DEFAULT_ERASER_MODE
        self.erasing = False

    @property
    def current_tool(self):
        return "eraser" if self.erasing else "pen"

    def set_brush_size(self, size):
        if size is None or size <= 0:
            log.debug("ignoring brush size %r", size)
            return False
        self.brush_size = size
        return True

    def set_brush_color(self, color):
        try:
            parse_color(color)
        except ValueError:
            log.warning("ignoring bad brush color %r", color)
            return False
        self.brush_color = color
        return True

    def set_pressure_enabled(self, enabled):
        self.pressure_enabled = bool(enabled)

    def set_pressure_factor(self, factor):
        if factor is None or factor < 0:
            log.debug("ignoring pressure factor %r", factor)
            return False
        self.pressure_factor = factor
        return True

    def set_eraser_size(self, size):
        if size is None or size <= 0:
            log.debug("ignoring eraser size %r", size)
            return False
        self.eraser_size = size
        return True

    def set_eraser_mode(self, mode):
        if mode not in ERASER_MODES:
            log.debug("ignoring unknown eraser mode %r", mode)
            return False
        self.eraser_mode = mode
        return True

    def set_erasing(self, erasing):
        self.erasing = bool(erasing)

    def point_size(self, pressure):
        """brush width for a given pressure"""
        if self.pressure_enabled:
            return self.brush_size * (0.5 + pressure * self.pressure_factor)
        return self.brush_size
