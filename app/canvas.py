import logging
from datetime import datetime

import cv2
import numpy as np

from app.config import (
    CANVAS_WIDTH, CANVAS_HEIGHT, MAX_DEVICE_PIXEL_RATIO, MAX_HISTORY,
    VERSION, FEATURES, BACKGROUND_COLOR,
)
from app.tools import StrokeBuilder, Eraser
from core.compositor import Compositor
from core.events import Emitter, READY, STROKE_ADDED, LAYER_CHANGED
from core.history import HistoryManager
from core.layers import LayerStore
from core.pointer import normalize_event
from core.state_manager import ToolState
from core.surface import RasterSurface, SurfaceError

log = logging.getLogger(__name__)


def clamp_pixel_ratio(ratio):
    """device pixel ratio, capped so big screens dont blow up memory"""
    if not ratio or ratio <= 0:
        ratio = 1.0
    return min(ratio, MAX_DEVICE_PIXEL_RATIO)


class InkCanvas:
    """
    the drawing document and everything that edits it.

    owns the layer stack, the tool settings and the undo history, and
    routes pointer events to the pen or the eraser. every layer has its
    own surface; the display surface is what the host actually shows.

    a pointer session is down -> move* -> up (or leave). only one is open
    at a time; a second pointer down ends the open one first.
    """

    def __init__(self, width=CANVAS_WIDTH, height=CANVAS_HEIGHT, pixel_ratio=1.0,
                 emitter=None, surface_factory=RasterSurface, max_history=MAX_HISTORY):
        self.pixel_ratio = clamp_pixel_ratio(pixel_ratio)
        self.tools = ToolState()
        self.emitter = emitter if emitter is not None else Emitter()
        self.history = HistoryManager(max_history)
        self.store = LayerStore(width, height, self.pixel_ratio, surface_factory)
        self.builder = StrokeBuilder(self.tools)
        self.eraser = Eraser(self.tools)
        self._surface_factory = surface_factory

        # no display, no canvas - let SurfaceError reach whoever built us
        self.display = surface_factory(width, height, self.pixel_ratio)
        self.compositor = Compositor(self.display, self.builder)

        # open pointer session
        self._session = None        # "draw" or "erase"
        self._session_layer = None
        self._stroke = None

        self.store.create_layer()
        self._emit_layer_changed()
        self._push_history()
        self.emitter.emit(READY, {"version": VERSION, "features": list(FEATURES)})

    # --- state access ---

    @property
    def layers(self):
        return self.store.layers

    @property
    def current_layer_index(self):
        return self.store.current_index

    @property
    def active_layer(self):
        return self.store.active_layer

    @property
    def width(self):
        return self.store.width

    @property
    def height(self):
        return self.store.height

    @property
    def drawing(self):
        return self._session is not None

    def get_stats(self):
        return {
            "total_layers": len(self.store),
            "total_strokes": self.store.total_strokes(),
            "current_layer": self.store.current_index,
        }

    # --- pointer input ---

    def pointer_down(self, event):
        ev = normalize_event(event)
        if ev is None:
            log.debug("dropping pointer down without coordinates: %r", event)
            return
        if self._session is not None:
            log.debug("pointer down while a session is open, ending it first")
            self._end_session()

        layer = self.store.active_layer
        self._session_layer = layer
        if self.tools.erasing:
            self._session = "erase"
            self._erase_event(ev, layer, down=True)
        else:
            self._session = "draw"
            self._stroke = self.builder.begin(ev, layer)
            self.compositor.composite_display(self.layers)

    def pointer_move(self, event):
        if self._session is None:
            return
        ev = normalize_event(event)
        if ev is None:
            return

        layer = self._session_layer
        if self._session == "erase":
            self._erase_event(ev, layer, down=False)
        elif self._stroke is not None:
            self.builder.extend(self._stroke, ev, layer)
            self.compositor.composite_display(self.layers)

    def pointer_up(self, event=None):
        if self._session is None:
            return
        self._end_session()

    def pointer_leave(self, event=None):
        # leaving the canvas commits the stroke, same as lifting the pen
        self.pointer_up(event)

    def _end_session(self):
        mode, layer = self._session, self._session_layer
        self._session = None
        self._session_layer = None

        if mode == "draw":
            stroke, self._stroke = self._stroke, None
            if self.builder.commit(stroke, layer):
                self.emitter.emit(STROKE_ADDED, {
                    "stroke": stroke,
                    "layer_index": self._index_of(layer),
                })
                self._push_history()
        elif mode == "erase" and self.eraser.rect_active:
            removed = self.eraser.finish_rect(layer)
            if removed:
                log.info("rect erase removed %d strokes", removed)
                self.compositor.rebuild_layer(layer)
                self._push_history()
            # redraw without the preview either way
            self.compositor.composite_display(self.layers)

    def _close_session(self):
        """structural edits close any open session before they run"""
        if self._session is not None:
            self._end_session()

    def _erase_event(self, ev, layer, down):
        mode = self.tools.eraser_mode
        if mode == "pixel":
            self.eraser.erase_pixel(layer, ev)
            self.compositor.composite_display(self.layers)
        elif mode == "stroke":
            removed = self.eraser.erase_strokes_at(layer, ev)
            if removed:
                log.info("stroke erase removed %d strokes", removed)
                self.compositor.rebuild_layer(layer)
                self.compositor.composite_display(self.layers)
                self._push_history()
        elif mode == "rect":
            # mode switched to rect mid-session: anchor where the pointer is
            if down or not self.eraser.rect_active:
                self.eraser.start_rect(ev)
            else:
                self.eraser.update_rect(ev)
                self.compositor.composite_display(self.layers)
                self.compositor.draw_rect_preview(self.eraser.rect_start, self.eraser.rect_end)

    def _index_of(self, layer):
        for i, candidate in enumerate(self.layers):
            if candidate is layer:
                return i
        return self.store.current_index

    # --- settings ---

    def set_brush_size(self, size):
        return self.tools.set_brush_size(size)

    def set_brush_color(self, color):
        return self.tools.set_brush_color(color)

    def set_pressure_enabled(self, enabled):
        self.tools.set_pressure_enabled(enabled)

    def set_pressure_factor(self, factor):
        return self.tools.set_pressure_factor(factor)

    def set_eraser_size(self, size):
        return self.tools.set_eraser_size(size)

    def set_eraser_mode(self, mode):
        changed = self.tools.set_eraser_mode(mode)
        if changed and self.eraser.rect_active and mode != "rect":
            self.eraser.cancel_rect()
            self.compositor.composite_display(self.layers)
        return changed

    def set_erasing(self, erasing):
        self.tools.set_erasing(erasing)

    # --- layers ---

    def create_layer(self):
        self._close_session()
        try:
            layer = self.store.create_layer()
        except SurfaceError as e:
            log.warning("couldnt create layer: %s", e)
            return None
        self.compositor.composite_display(self.layers)
        self._push_history()
        self._emit_layer_changed()
        return layer

    def switch_layer(self, index):
        if self.store.switch_layer(index):
            self._emit_layer_changed()
            return True
        return False

    def delete_layer(self, index):
        self._close_session()
        if not self.store.delete_layer(index):
            return False
        self.compositor.composite_display(self.layers)
        self._push_history()
        self._emit_layer_changed()
        return True

    def clear_layer(self, index):
        self._close_session()
        if not self.store.clear_layer(index):
            return False
        self.compositor.rebuild_layer(self.layers[index])
        self.compositor.composite_display(self.layers)
        self._push_history()
        return True

    def set_layer_visibility(self, index, visible):
        if self.store.set_visibility(index, visible):
            self.compositor.composite_display(self.layers)
            return True
        return False

    def set_layer_opacity(self, index, opacity):
        if self.store.set_opacity(index, opacity):
            self.compositor.composite_display(self.layers)
            return True
        return False

    # --- history ---

    def _push_history(self):
        self.history.push(self.store.capture())

    def undo(self):
        self._close_session()
        snapshot = self.history.undo()
        if snapshot is None:
            return False
        if not self._restore(snapshot):
            self.history.cursor += 1
            return False
        return True

    def redo(self):
        self._close_session()
        snapshot = self.history.redo()
        if snapshot is None:
            return False
        if not self._restore(snapshot):
            self.history.cursor -= 1
            return False
        return True

    def _restore(self, snapshot):
        try:
            self.store.restore(snapshot)
        except SurfaceError as e:
            log.warning("couldnt restore history snapshot: %s", e)
            return False
        self.compositor.rebuild_all(self.layers)
        self._emit_layer_changed()
        return True

    # --- resize ---

    def resize(self, width, height, pixel_ratio=None):
        """
        reallocate every surface at the new size and replay all layers.
        on allocation failure nothing changes and False is returned.
        """
        self._close_session()
        ratio = self.pixel_ratio if pixel_ratio is None else clamp_pixel_ratio(pixel_ratio)
        try:
            display = self._surface_factory(width, height, ratio)
            self.store.resize(width, height, ratio)
        except SurfaceError as e:
            log.warning("resize to %sx%s failed: %s", width, height, e)
            return False

        self.pixel_ratio = ratio
        self.display = display
        self.compositor.display = display
        self.eraser.cancel_rect()
        self.compositor.rebuild_all(self.layers)
        return True

    # --- notifications ---

    def _emit_layer_changed(self):
        layer = self.store.active_layer
        self.emitter.emit(LAYER_CHANGED, {
            "current_layer": self.store.current_index,
            "total_layers": len(self.store),
            "layer_name": layer.name if layer else "",
        })

    # --- output ---

    def save_drawing(self, path=None):
        """save the composited drawing on a white background as a png"""
        if path is None:
            path = f"drawing_{datetime.now().strftime('%Y%m%d_%H%M%S')}.png"
        if not cv2.imwrite(path, self.display.to_bgr(BACKGROUND_COLOR)):
            log.warning("couldnt write %s", path)
            return None
        log.info("saved drawing to %s", path)
        return path

    def blend_onto(self, frame):
        """overlay the composited drawing onto a BGR frame of any size"""
        px = self.display.pixels
        h, w = frame.shape[:2]
        if px.shape[:2] != (h, w):
            px = cv2.resize(px, (w, h), interpolation=cv2.INTER_LINEAR)
        px = px.astype(np.float32)
        out = px[..., :3] + frame.astype(np.float32) * (1.0 - px[..., 3:4] / 255.0)
        return np.clip(np.rint(out), 0, 255).astype(np.uint8)
