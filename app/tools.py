from core.strokes import Point, Stroke, is_point_near_stroke, stroke_in_rect


class StrokeBuilder:
    """
    the pen. turns a pointer down/move/up sequence into a Stroke and
    draws it onto the active layer while it's being made.

    while drawing we only ever paint the newest segment, so each move
    costs the same no matter how long the stroke is. render_stroke is
    the full replay used when a layer gets rebuilt from its strokes.
    """

    def __init__(self, tools):
        self.tools = tools  # ToolState, read at every point

    def make_point(self, event):
        size = self.tools.point_size(event.pressure)
        return Point(event.x, event.y, event.pressure, size)

    def begin(self, event, layer):
        point = self.make_point(event)
        stroke = Stroke(self.tools.brush_color, self.tools.brush_size, [point])
        layer.surface.fill_circle(point.x, point.y, point.size / 2, stroke.color)
        return stroke

    def extend(self, stroke, event, layer):
        point = self.make_point(event)
        prev = stroke.points[-1] if stroke.points else point
        stroke.add_point(point)
        self.draw_segment(layer.surface, prev, point, stroke.color, point.size)
        return point

    def commit(self, stroke, layer):
        """push the finished stroke onto the layer. empty strokes are dropped"""
        if stroke is None or not stroke.points:
            return False
        layer.strokes.append(stroke)
        return True

    @staticmethod
    def draw_segment(surface, p1, p2, color, size):
        # curve into the midpoint then straight to the new point
        mid = ((p1[0] + p2[0]) / 2, (p1[1] + p2[1]) / 2)
        surface.stroke_quadratic(p1, p1, mid, size, color)
        surface.stroke_line(mid, p2, size, color)

    @staticmethod
    def render_stroke(surface, stroke):
        """
        midpoint quadratic replay. each interior point is the control
        point of a curve between the midpoints on either side of it,
        which hides the kinks a plain polyline would show.
        """
        pts = stroke.points
        if not pts:
            return
        if len(pts) == 1:
            p = pts[0]
            surface.fill_circle(p.x, p.y, p.size / 2, stroke.color)
            return

        for i in range(1, len(pts) - 1):
            p0, p1, p2 = pts[i - 1], pts[i], pts[i + 1]
            mid1 = ((p0.x + p1.x) / 2, (p0.y + p1.y) / 2)
            mid2 = ((p1.x + p2.x) / 2, (p1.y + p2.y) / 2)
            surface.stroke_quadratic(mid1, (p1.x, p1.y), mid2, p1.size, stroke.color)

        last, second_last = pts[-1], pts[-2]
        mid = ((second_last.x + last.x) / 2, (second_last.y + last.y) / 2)
        surface.stroke_line(mid, (last.x, last.y), last.size, stroke.color)


class Eraser:
    """
    three ways to erase, picked by ToolState.eraser_mode:

      pixel   - punches a hole in the active layer's pixels. only the
                raster changes, the strokes dont know about it, so a
                rebuild (undo, redo, resize, stroke erase) brings the
                ink back. not undoable on its own.
      stroke  - removes every stroke on the active layer that has a
                point within eraser_size of the pointer
      rect    - drag out a rectangle, on release remove every stroke
                with a point inside it
    """

    def __init__(self, tools):
        self.tools = tools
        self.rect_start = None
        self.rect_end = None

    @property
    def rect_active(self):
        return self.rect_start is not None

    def erase_pixel(self, layer, point):
        layer.surface.erase_circle(point[0], point[1], self.tools.eraser_size / 2)

    def erase_strokes_at(self, layer, point):
        """returns how many strokes were removed"""
        threshold = self.tools.eraser_size
        # indices are collected top-down before anything is removed
        hits = set()
        for i in range(len(layer.strokes) - 1, -1, -1):
            if is_point_near_stroke(point, layer.strokes[i], threshold):
                hits.add(i)
        if hits:
            layer.strokes[:] = [s for i, s in enumerate(layer.strokes) if i not in hits]
        return len(hits)

    def start_rect(self, point):
        self.rect_start = (point[0], point[1])
        self.rect_end = self.rect_start

    def update_rect(self, point):
        if self.rect_start is None:
            return
        self.rect_end = (point[0], point[1])

    def finish_rect(self, layer):
        """remove strokes inside the dragged rectangle, returns how many"""
        if self.rect_start is None:
            return 0
        start, end = self.rect_start, self.rect_end
        self.cancel_rect()

        before = len(layer.strokes)
        layer.strokes[:] = [s for s in layer.strokes if not stroke_in_rect(s, start, end)]
        return before - len(layer.strokes)

    def cancel_rect(self):
        self.rect_start = None
        self.rect_end = None
