# all the settings live here so we dont scatter magic numbers everywhere

# canvas (logical size, before device pixel ratio scaling)
CANVAS_WIDTH = 960
CANVAS_HEIGHT = 600
# hi-dpi screens get a sharper raster, but capped so layers dont eat memory
MAX_DEVICE_PIXEL_RATIO = 1.5

# brush defaults
DEFAULT_BRUSH_SIZE = 4
DEFAULT_BRUSH_COLOR = "#000000"
PRESSURE_ENABLED = True
PRESSURE_FACTOR = 0.5
DEFAULT_PRESSURE = 0.5  # mice report 0, treat that as a half press

# eraser defaults
DEFAULT_ERASER_SIZE = 20
DEFAULT_ERASER_MODE = "pixel"
ERASER_MODES = ("pixel", "stroke", "rect")

# undo/redo depth
MAX_HISTORY = 30

# rect eraser preview - dashed outline on the display only
RECT_PREVIEW_DASH = (6, 4)
RECT_PREVIEW_COLOR = (0, 0, 0, 153)   # 60% black
RECT_PREVIEW_WIDTH = 1

# what we announce on the ready notification
VERSION = "1.0.0"
FEATURES = ["pressure", "layers", "eraser"]

# demo window
WINDOW_NAME = "Ink Canvas"
BACKGROUND_COLOR = (255, 255, 255)
COLORS = [
    "#000000",
    "#e53935",
    "#1e88e5",
    "#43a047",
    "#fdd835",
    "#8e24aa",
]

# logging (main.py writes engine events here)
LOG_PATH = "ink_canvas.log"
LOG_LEVEL = "INFO"
