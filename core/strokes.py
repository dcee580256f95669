"""
vector ink model.

a Stroke is one pen gesture: a color, the brush size it was started
with, and the points it went through. points are immutable once
recorded so a snapshot only needs to copy the lists, never the points.
"""
import itertools
import math
from collections import namedtuple


Point = namedtuple("Point", ["x", "y", "pressure", "size"])

_stroke_ids = itertools.count(1)


class Stroke:
    """one continuous pen gesture"""

    def __init__(self, color, base_size, points=None, stroke_id=None):
        self.id = stroke_id if stroke_id is not None else next(_stroke_ids)
        self.color = color
        self.base_size = base_size
        self.points = list(points) if points else []

    def __len__(self):
        return len(self.points)

    def __eq__(self, other):
        if not isinstance(other, Stroke):
            return NotImplemented
        return (self.id == other.id and self.color == other.color
                and self.base_size == other.base_size and self.points == other.points)

    def __repr__(self):
        return f"Stroke(id={self.id}, color={self.color!r}, points={len(self.points)})"

    def add_point(self, point):
        self.points.append(point)

    def bounds(self):
        """(min_x, min_y, max_x, max_y) of the points, or None when empty"""
        if not self.points:
            return None
        xs = [p.x for p in self.points]
        ys = [p.y for p in self.points]
        return min(xs), min(ys), max(xs), max(ys)

    def to_dict(self):
        return {
            "id": self.id,
            "color": self.color,
            "base_size": self.base_size,
            "points": [p._asdict() for p in self.points],
        }


def clone_stroke(stroke):
    """structural copy. points are tuples so sharing them is safe"""
    return Stroke(stroke.color, stroke.base_size, list(stroke.points), stroke_id=stroke.id)


def clone_strokes(strokes):
    return [clone_stroke(s) for s in strokes]


def distance(a, b):
    return math.hypot(a[0] - b[0], a[1] - b[1])


def is_point_near_stroke(point, stroke, threshold):
    """true if any recorded point of the stroke is within threshold of point"""
    px, py = point[0], point[1]
    for p in stroke.points:
        if math.hypot(p.x - px, p.y - py) <= threshold:
            return True
    return False


def stroke_in_rect(stroke, p0, p1):
    """true if at least one point of the stroke lies inside the rectangle p0-p1"""
    x0, x1 = sorted((p0[0], p1[0]))
    y0, y1 = sorted((p0[1], p1[1]))
    # quick reject on the bounding box before walking the points
    b = stroke.bounds()
    if b is None or b[2] < x0 or b[0] > x1 or b[3] < y0 or b[1] > y1:
        return False
    return any(x0 <= p.x <= x1 and y0 <= p.y <= y1 for p in stroke.points)
