import cv2

from app.config import COLORS
from core.surface import parse_color


# color coding for each tool state
TOOL_COLORS = {
    "pen":    (0, 160, 0),       # green
    "pixel":  (0, 0, 220),       # red
    "stroke": (200, 0, 200),     # magenta
    "rect":   (0, 140, 255),     # orange
}

HELP_TEXT = "e eraser  m mode  n new  d delete  c clear  1-9 layer  u/r undo/redo  s save  q quit"


def _bgr(color):
    b, g, r, _ = parse_color(color)
    return (b, g, r)


class UI:
    """draws the status bar - tool, layer, stroke count, palette"""

    def _draw_pill(self, frame, text, x, y, color, bg=(40, 40, 40)):
        """draw text with a rounded pill-shaped background"""
        font = cv2.FONT_HERSHEY_SIMPLEX
        scale = 0.55
        thick = 1
        sz, baseline = cv2.getTextSize(text, font, scale, thick)
        pad_x, pad_y = 10, 6
        x1, y1 = x, y - sz[1] - pad_y
        x2, y2 = x + sz[0] + pad_x * 2, y + pad_y + baseline

        # semi-transparent background
        overlay = frame.copy()
        cv2.rectangle(overlay, (x1, y1), (x2, y2), bg, -1)
        cv2.addWeighted(overlay, 0.65, frame, 0.35, 0, frame)

        cv2.putText(frame, text, (x + pad_x, y), font, scale, color, thick, cv2.LINE_AA)
        return x2  # return right edge for chaining

    def draw_overlay(self, frame, canvas, color_index=0):
        """draw all the UI elements onto the frame"""
        h, w = frame.shape[:2]
        tools = canvas.tools
        stats = canvas.get_stats()

        # tool - top left
        if tools.erasing:
            label = f"ERASER ({tools.eraser_mode}) {tools.eraser_size:g}px"
            tool_color = TOOL_COLORS.get(tools.eraser_mode, (180, 180, 180))
        else:
            pressure = "on" if tools.pressure_enabled else "off"
            label = f"PEN {tools.brush_size:g}px  pressure {pressure}"
            tool_color = TOOL_COLORS["pen"]
        right = self._draw_pill(frame, label, 8, 28, tool_color)

        # layer + stroke counts next to it
        layer = canvas.active_layer
        layer_text = (f"{layer.name}  {stats['current_layer'] + 1}/{stats['total_layers']}"
                      f"  strokes {stats['total_strokes']}")
        if not layer.visible:
            layer_text += "  (hidden)"
        right = self._draw_pill(frame, layer_text, right + 8, 28, (255, 255, 255))

        # undo/redo availability
        hist = f"undo {'yes' if canvas.history.can_undo else 'no'}  redo {'yes' if canvas.history.can_redo else 'no'}"
        self._draw_pill(frame, hist, right + 8, 28, (200, 200, 200))

        # color palette - top right
        palette_w = 24
        palette_gap = 6
        total_palette = len(COLORS) * (palette_w + palette_gap) - palette_gap
        palette_x = w - total_palette - 12
        for i, color in enumerate(COLORS):
            x = palette_x + i * (palette_w + palette_gap)
            cv2.rectangle(frame, (x, 8), (x + palette_w, 8 + palette_w), _bgr(color), -1)
            if i == color_index:
                cv2.rectangle(frame, (x - 2, 6), (x + palette_w + 2, 10 + palette_w), (60, 60, 60), 2)

        # key help at the bottom
        self._draw_pill(frame, HELP_TEXT, 8, h - 12, (220, 220, 220))
        return frame
