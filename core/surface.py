"""
raster surfaces.

everything above this module draws through the same small set of calls:

    clear()
    fill_circle(x, y, radius, color)
    stroke_quadratic(p0, ctrl, p1, width, color)
    stroke_line(p0, p1, width, color)
    erase_circle(x, y, radius)
    composite_from(other, alpha)
    stroke_dashed_rect(p0, p1, color, width, dash)
    resize(width, height, scale)

coordinates and widths are in logical canvas units. the surface scales
them by its device pixel ratio, so strokes stay put when the ratio or
the window size changes.

RasterSurface is the real one (numpy buffer, opencv primitives).
RecordingSurface just writes down what it was asked to do, which is
what the tests use to check draw order and per-move cost.
"""
import math

import cv2
import numpy as np


class SurfaceError(RuntimeError):
    """raised when a surface cant be allocated (zero or negative size)"""


def device_size(width, height, scale=1.0):
    """logical size -> physical pixel size, same rounding as a browser canvas"""
    return int(math.floor(width * scale)), int(math.floor(height * scale))


def parse_color(color):
    """
    turn a color into a (b, g, r, a) tuple with 0-255 channels.

    accepts '#rgb', '#rrggbb', '#rrggbbaa' strings or a (b, g, r) /
    (b, g, r, a) tuple, which is the order opencv uses everywhere else.
    """
    if isinstance(color, str):
        text = color.strip().lstrip("#")
        if len(text) == 3:
            text = "".join(ch * 2 for ch in text)
        if len(text) not in (6, 8):
            raise ValueError(f"bad color string: {color!r}")
        try:
            channels = [int(text[i:i + 2], 16) for i in range(0, len(text), 2)]
        except ValueError:
            raise ValueError(f"bad color string: {color!r}") from None
        r, g, b = channels[:3]
        a = channels[3] if len(channels) == 4 else 255
        return (b, g, r, a)

    try:
        values = tuple(int(c) for c in color)
    except TypeError:
        raise ValueError(f"bad color: {color!r}") from None
    if len(values) == 3:
        values = values + (255,)
    if len(values) != 4 or any(c < 0 or c > 255 for c in values):
        raise ValueError(f"bad color: {color!r}")
    return values


def quadratic_points(p0, ctrl, p1, steps):
    """sample a quadratic bezier into steps + 1 points"""
    t = np.linspace(0.0, 1.0, steps + 1)[:, None]
    a = np.asarray(p0[:2], dtype=np.float64)
    c = np.asarray(ctrl[:2], dtype=np.float64)
    b = np.asarray(p1[:2], dtype=np.float64)
    return (1 - t) ** 2 * a + 2 * (1 - t) * t * c + t ** 2 * b


class RasterSurface:
    """
    transparent BGRA pixel buffer.

    pixels are stored premultiplied by alpha. that way opencv's
    antialiased edges (which blend toward whatever is underneath) come
    out right on a transparent background, and erasing is just drawing
    with (0, 0, 0, 0).
    """

    # fractional bits for opencv fixed point coordinates
    SHIFT = 4
    # roughly one sample every 2 physical pixels along a curve
    CURVE_STEP_PX = 2.0
    MAX_CURVE_STEPS = 64

    def __init__(self, width, height, scale=1.0):
        self.width = 0
        self.height = 0
        self.scale = 1.0
        self.pixels = None
        self.resize(width, height, scale)

    # --- allocation ---

    def resize(self, width, height, scale=1.0):
        """reallocate at a new size. contents are dropped, like a canvas"""
        pw, ph = device_size(width, height, scale)
        if pw <= 0 or ph <= 0:
            raise SurfaceError(
                f"cant allocate a {pw}x{ph} surface "
                f"(logical {width}x{height} at scale {scale})"
            )
        self.width = width
        self.height = height
        self.scale = scale
        self.pixels = np.zeros((ph, pw, 4), dtype=np.uint8)

    @property
    def pixel_size(self):
        h, w = self.pixels.shape[:2]
        return w, h

    def clear(self):
        self.pixels[...] = 0

    # --- helpers ---

    def _fixed(self, x, y):
        k = self.scale * (1 << self.SHIFT)
        return int(round(x * k)), int(round(y * k))

    def _thickness(self, width):
        return max(1, int(round(width * self.scale)))

    @staticmethod
    def _premultiplied(color):
        b, g, r, a = parse_color(color)
        f = a / 255.0
        return (b * f, g * f, r * f, float(a))

    # --- drawing ---

    def fill_circle(self, x, y, radius, color):
        center = self._fixed(x, y)
        r = max(1, int(round(radius * self.scale * (1 << self.SHIFT))))
        cv2.circle(self.pixels, center, r, self._premultiplied(color),
                   -1, cv2.LINE_AA, self.SHIFT)

    def stroke_line(self, p0, p1, width, color):
        cv2.line(self.pixels, self._fixed(p0[0], p0[1]), self._fixed(p1[0], p1[1]),
                 self._premultiplied(color), self._thickness(width),
                 cv2.LINE_AA, self.SHIFT)

    def stroke_quadratic(self, p0, ctrl, p1, width, color):
        # chord length is a good enough bound on the curve length here
        length = (math.hypot(ctrl[0] - p0[0], ctrl[1] - p0[1])
                  + math.hypot(p1[0] - ctrl[0], p1[1] - ctrl[1]))
        steps = int(math.ceil(length * self.scale / self.CURVE_STEP_PX))
        steps = min(max(steps, 1), self.MAX_CURVE_STEPS)

        pts = quadratic_points(p0, ctrl, p1, steps)
        fixed = np.rint(pts * self.scale * (1 << self.SHIFT)).astype(np.int32)
        cv2.polylines(self.pixels, [fixed.reshape(-1, 1, 2)], False,
                      self._premultiplied(color), self._thickness(width),
                      cv2.LINE_AA, self.SHIFT)

    def erase_circle(self, x, y, radius):
        """destination-out: pixels under the circle go transparent"""
        center = self._fixed(x, y)
        r = max(1, int(round(radius * self.scale * (1 << self.SHIFT))))
        cv2.circle(self.pixels, center, r, (0, 0, 0, 0), -1, cv2.LINE_AA, self.SHIFT)

    def stroke_dashed_rect(self, p0, p1, color, width=1, dash=(6, 4)):
        x0, x1 = sorted((p0[0], p1[0]))
        y0, y1 = sorted((p0[1], p1[1]))
        corners = [(x0, y0), (x1, y0), (x1, y1), (x0, y1), (x0, y0)]
        for a, b in zip(corners, corners[1:]):
            self._dashed_line(a, b, color, width, dash)

    def _dashed_line(self, a, b, color, width, dash):
        on, off = dash
        length = math.hypot(b[0] - a[0], b[1] - a[1])
        if length == 0:
            return
        ux = (b[0] - a[0]) / length
        uy = (b[1] - a[1]) / length
        pos = 0.0
        while pos < length:
            end = min(pos + on, length)
            self.stroke_line((a[0] + ux * pos, a[1] + uy * pos),
                             (a[0] + ux * end, a[1] + uy * end), width, color)
            pos = end + off

    # --- compositing ---

    def composite_from(self, other, alpha=1.0):
        """source-over blit of another surface with a global alpha"""
        if alpha <= 0:
            return
        src = other.pixels
        if src.shape != self.pixels.shape:
            w, h = self.pixel_size
            src = cv2.resize(src, (w, h), interpolation=cv2.INTER_LINEAR)

        src = src.astype(np.float32) * min(alpha, 1.0)
        dst = self.pixels.astype(np.float32)
        out = src + dst * (1.0 - src[..., 3:4] / 255.0)
        self.pixels[...] = np.clip(np.rint(out), 0, 255).astype(np.uint8)

    def to_bgr(self, background=(255, 255, 255)):
        """flatten onto a solid background, returns a BGR uint8 image"""
        px = self.pixels.astype(np.float32)
        bg = np.array(background, dtype=np.float32)
        out = px[..., :3] + bg * (1.0 - px[..., 3:4] / 255.0)
        return np.clip(np.rint(out), 0, 255).astype(np.uint8)

    def alpha_at(self, x, y):
        """alpha (0-255) at a logical position, handy for tests and hit checks"""
        px = int(x * self.scale)
        py = int(y * self.scale)
        w, h = self.pixel_size
        if px < 0 or py < 0 or px >= w or py >= h:
            return 0
        return int(self.pixels[py, px, 3])


class RecordingSurface:
    """
    headless stand-in that logs every call as (name, args) instead of
    drawing. same allocation rules as RasterSurface.
    """

    def __init__(self, width, height, scale=1.0):
        self.calls = []
        self.width = 0
        self.height = 0
        self.scale = 1.0
        self.resize(width, height, scale)

    def resize(self, width, height, scale=1.0):
        pw, ph = device_size(width, height, scale)
        if pw <= 0 or ph <= 0:
            raise SurfaceError(f"cant allocate a {pw}x{ph} surface")
        self.width = width
        self.height = height
        self.scale = scale
        self.calls.append(("resize", (width, height, scale)))

    def clear(self):
        self.calls.append(("clear", ()))

    def fill_circle(self, x, y, radius, color):
        self.calls.append(("fill_circle", (x, y, radius, color)))

    def stroke_line(self, p0, p1, width, color):
        self.calls.append(("stroke_line", (tuple(p0[:2]), tuple(p1[:2]), width, color)))

    def stroke_quadratic(self, p0, ctrl, p1, width, color):
        self.calls.append(("stroke_quadratic",
                           (tuple(p0[:2]), tuple(ctrl[:2]), tuple(p1[:2]), width, color)))

    def erase_circle(self, x, y, radius):
        self.calls.append(("erase_circle", (x, y, radius)))

    def stroke_dashed_rect(self, p0, p1, color, width=1, dash=(6, 4)):
        self.calls.append(("stroke_dashed_rect", (tuple(p0[:2]), tuple(p1[:2]), color, width, dash)))

    def composite_from(self, other, alpha=1.0):
        self.calls.append(("composite_from", (other, alpha)))

    def names(self):
        """just the call names, in order"""
        return [name for name, _ in self.calls]
