"""
pointer input normalization.

sits between whatever delivers raw pointer events (a browser bridge,
an opencv mouse callback, a test) and the canvas. cleans up the event
into a plain PointerEvent so the rest of the pipeline never has to
guess about missing fields.
"""
import math
from collections import namedtuple

from app.config import DEFAULT_PRESSURE


PointerEvent = namedtuple("PointerEvent", ["x", "y", "pressure", "pointer_type"])

POINTER_TYPES = ("mouse", "touch", "pen")


def _field(event, *names):
    """first present field out of names, from a mapping or an object"""
    for name in names:
        if isinstance(event, dict):
            if name in event and event[name] is not None:
                return event[name]
        else:
            value = getattr(event, name, None)
            if value is not None:
                return value
    return None


def _number(value):
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def normalize_pressure(pressure, default=DEFAULT_PRESSURE):
    """
    missing or zero pressure becomes the default. mice and most
    touchscreens report 0 (or nothing), which would draw hairlines.
    """
    value = _number(pressure)
    if not value:
        return default
    return min(max(value, 0.0), 1.0)


def normalize_event(event, origin=(0.0, 0.0), default_pressure=DEFAULT_PRESSURE):
    """
    build a PointerEvent from a dict or object.

    coordinates come from x/y, or from clientX/clientY minus the
    canvas origin (the top-left of the canvas in client space).
    returns None if there are no usable coordinates.
    """
    if event is None:
        return None

    x = _number(_field(event, "x"))
    y = _number(_field(event, "y"))
    if x is None or y is None:
        cx = _number(_field(event, "clientX", "client_x"))
        cy = _number(_field(event, "clientY", "client_y"))
        if cx is None or cy is None:
            return None
        x = cx - origin[0]
        y = cy - origin[1]

    pressure = normalize_pressure(_field(event, "pressure"), default_pressure)

    pointer_type = _field(event, "pointerType", "pointer_type")
    if pointer_type not in POINTER_TYPES:
        pointer_type = "mouse"

    return PointerEvent(x, y, pressure, pointer_type)
