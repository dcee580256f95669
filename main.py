import sys
import logging

import cv2
import numpy as np

from app.canvas import InkCanvas
from app.commands import CommandHandler
from app.ui import UI
from app.config import (
    CANVAS_WIDTH, CANVAS_HEIGHT, WINDOW_NAME, BACKGROUND_COLOR, COLORS,
    ERASER_MODES, LOG_PATH, LOG_LEVEL,
)
from core.events import Emitter, READY, STROKE_ADDED, LAYER_CHANGED
from core.surface import SurfaceError

# engine events go to their own log file so they dont get lost in
# stdout noise. writes to ink_canvas.log.
_log = logging.getLogger("ink_canvas")
_log.setLevel(LOG_LEVEL)
_log_handler = logging.FileHandler(LOG_PATH, mode="a")
_log_handler.setFormatter(logging.Formatter("%(asctime)s  %(message)s", datefmt="%H:%M:%S"))
_log_handler.setLevel(LOG_LEVEL)
for _name in ("app", "core", "ink_canvas"):
    logging.getLogger(_name).setLevel(LOG_LEVEL)
    logging.getLogger(_name).addHandler(_log_handler)


def _log_notification(topic):
    def handler(payload):
        if topic == STROKE_ADDED:
            stroke = payload["stroke"]
            _log.info(f"{topic:<14} layer={payload['layer_index']} points={len(stroke.points)}")
        else:
            _log.info(f"{topic:<14} {payload}")
    return handler


def main():
    emitter = Emitter()
    for topic in (READY, STROKE_ADDED, LAYER_CHANGED):
        emitter.on(topic, _log_notification(topic))

    try:
        canvas = InkCanvas(CANVAS_WIDTH, CANVAS_HEIGHT, emitter=emitter)
    except SurfaceError as e:
        print(f"\nCanvas error: {e}")
        sys.exit(1)

    commands = CommandHandler(canvas)
    ui = UI()
    color_index = 0

    def on_mouse(event, x, y, flags, param):
        # opencv mice have no pressure, the canvas defaults it
        if event == cv2.EVENT_LBUTTONDOWN:
            canvas.pointer_down({"x": x, "y": y, "pointerType": "mouse"})
        elif event == cv2.EVENT_MOUSEMOVE:
            canvas.pointer_move({"x": x, "y": y, "pointerType": "mouse"})
        elif event == cv2.EVENT_LBUTTONUP:
            canvas.pointer_up({"x": x, "y": y, "pointerType": "mouse"})

    cv2.namedWindow(WINDOW_NAME, cv2.WINDOW_AUTOSIZE)
    cv2.setMouseCallback(WINDOW_NAME, on_mouse)

    print("Ink Canvas started. Press 'q' to quit, 'e' for the eraser, 'u'/'r' to undo/redo, 's' to save.")

    background = np.full((canvas.display.pixel_size[1], canvas.display.pixel_size[0], 3),
                         BACKGROUND_COLOR, dtype=np.uint8)

    while True:
        frame = canvas.blend_onto(background)
        frame = ui.draw_overlay(frame, canvas, color_index)
        cv2.imshow(WINDOW_NAME, frame)

        key = cv2.waitKey(15) & 0xFF
        if key == ord('q') or key == 27:  # q or ESC
            break
        elif key == ord('e'):
            commands.handle("tool", {"tool": "pen" if canvas.tools.erasing else "eraser"})
        elif key == ord('m'):
            idx = ERASER_MODES.index(canvas.tools.eraser_mode)
            commands.handle("eraser-settings", {"eraserMode": ERASER_MODES[(idx + 1) % len(ERASER_MODES)]})
        elif key == ord('p'):
            commands.handle("pressure-toggle")
        elif key == ord('n'):
            commands.handle("layer-add")
        elif key == ord('d'):
            commands.handle("layer-delete")
        elif key == ord('c'):
            commands.handle("layer-clear")
        elif key == ord('h'):
            idx = canvas.current_layer_index
            canvas.set_layer_visibility(idx, not canvas.layers[idx].visible)
        elif key == ord('u'):
            commands.handle("undo")
        elif key == ord('r'):
            commands.handle("redo")
        elif key == ord('k'):
            color_index = (color_index + 1) % len(COLORS)
            commands.handle("pen-settings", {"brushColor": COLORS[color_index]})
        elif key == ord('['):
            commands.handle("pen-settings", {"brushSize": max(1, canvas.tools.brush_size - 1)})
        elif key == ord(']'):
            commands.handle("pen-settings", {"brushSize": canvas.tools.brush_size + 1})
        elif ord('1') <= key <= ord('9'):
            canvas.switch_layer(key - ord('1'))
        elif key == ord('s'):
            path = canvas.save_drawing()
            if path:
                print(f"saved drawing to {path}")

        # also quit if the window X button is clicked
        if cv2.getWindowProperty(WINDOW_NAME, cv2.WND_PROP_VISIBLE) < 1:
            break

    stats = canvas.get_stats()
    print(f"bye - {stats['total_strokes']} strokes on {stats['total_layers']} layers")
    cv2.destroyAllWindows()


if __name__ == "__main__":
    main()
