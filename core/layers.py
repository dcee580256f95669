"""
layers and the ordered layer stack.

each Layer owns its strokes and its own surface. the surface is only a
cache: replaying the strokes in order must give the same picture (pixel
erase is the one thing that breaks this, see app/tools.py).

the store only does bookkeeping. it reports whether something changed
and leaves recompositing / history to the canvas that owns it.
"""
import itertools
import math
import logging

from core.strokes import clone_strokes
from core.surface import RasterSurface

log = logging.getLogger(__name__)


class Layer:

    def __init__(self, layer_id, name, surface, strokes=None, visible=True, opacity=1.0):
        self.id = layer_id
        self.name = name
        self.visible = visible
        self.opacity = opacity
        self.strokes = list(strokes) if strokes else []
        self.surface = surface

    def __repr__(self):
        return (f"Layer(id={self.id}, name={self.name!r}, strokes={len(self.strokes)}, "
                f"visible={self.visible}, opacity={self.opacity})")


def clone_layer_state(layer):
    """everything about a layer except its surface"""
    return {
        "id": layer.id,
        "name": layer.name,
        "visible": layer.visible,
        "opacity": layer.opacity,
        "strokes": clone_strokes(layer.strokes),
    }


class LayerStore:
    """
    the document: an ordered list of layers (first = bottom) plus the
    index of the active one. always holds at least one layer once the
    canvas has created its first.
    """

    def __init__(self, width, height, scale=1.0, surface_factory=RasterSurface):
        self.width = width
        self.height = height
        self.scale = scale
        self.layers = []
        self.current_index = 0
        self._surface_factory = surface_factory
        self._ids = itertools.count(1)

    def __len__(self):
        return len(self.layers)

    @property
    def active_layer(self):
        if not self.layers:
            return None
        return self.layers[self.current_index]

    def valid_index(self, index):
        # bools are ints too, True must not select layer 1
        if isinstance(index, bool) or not isinstance(index, int):
            return False
        return 0 <= index < len(self.layers)

    def new_surface(self):
        """a blank surface at the current canvas size. raises SurfaceError"""
        return self._surface_factory(self.width, self.height, self.scale)

    # --- structure ---

    def create_layer(self):
        # allocate first so a failure leaves the stack alone
        surface = self.new_surface()
        layer = Layer(next(self._ids), f"Layer {len(self.layers) + 1}", surface)
        self.layers.append(layer)
        self.current_index = len(self.layers) - 1
        log.info("created %s (%d layers)", layer.name, len(self.layers))
        return layer

    def switch_layer(self, index):
        if not self.valid_index(index):
            log.debug("switch_layer: index %r out of range", index)
            return False
        self.current_index = index
        return True

    def delete_layer(self, index):
        if len(self.layers) <= 1:
            log.debug("delete_layer: refusing to delete the last layer")
            return False
        if not self.valid_index(index):
            log.debug("delete_layer: index %r out of range", index)
            return False
        removed = self.layers.pop(index)
        if self.current_index >= len(self.layers):
            self.current_index = len(self.layers) - 1
        log.info("deleted %s (%d layers left)", removed.name, len(self.layers))
        return True

    def clear_layer(self, index):
        if not self.valid_index(index):
            log.debug("clear_layer: index %r out of range", index)
            return False
        self.layers[index].strokes = []
        return True

    # --- presentation, not undoable ---

    def set_visibility(self, index, visible):
        if not self.valid_index(index):
            return False
        self.layers[index].visible = bool(visible)
        return True

    def set_opacity(self, index, opacity):
        if not self.valid_index(index):
            return False
        try:
            value = float(opacity)
        except (TypeError, ValueError):
            log.debug("set_opacity: ignoring %r", opacity)
            return False
        if math.isnan(value) or math.isinf(value):
            log.debug("set_opacity: ignoring %r", opacity)
            return False
        self.layers[index].opacity = min(max(value, 0.0), 1.0)
        return True

    # --- bulk ---

    def total_strokes(self):
        return sum(len(layer.strokes) for layer in self.layers)

    def capture(self):
        """structural copy of the vector state, used for history snapshots"""
        return {
            "layers": [clone_layer_state(layer) for layer in self.layers],
            "current_index": self.current_index,
        }

    def restore(self, snapshot):
        """
        rebuild the layer list from a snapshot with fresh blank surfaces.
        layers that still exist keep their current visibility/opacity.
        surfaces are all allocated before anything is swapped in.
        """
        current = {layer.id: layer for layer in self.layers}
        restored = []
        for state in snapshot["layers"]:
            surface = self.new_surface()
            live = current.get(state["id"])
            restored.append(Layer(
                state["id"],
                state["name"],
                surface,
                strokes=clone_strokes(state["strokes"]),
                visible=live.visible if live else state["visible"],
                opacity=live.opacity if live else state["opacity"],
            ))
        self.layers = restored
        self.current_index = min(max(snapshot["current_index"], 0), len(restored) - 1)

    def resize(self, width, height, scale):
        """
        reallocate every layer surface at a new size. if any allocation
        fails the SurfaceError propagates and the old surfaces stay.
        """
        surfaces = [self._surface_factory(width, height, scale) for _ in self.layers]
        self.width = width
        self.height = height
        self.scale = scale
        for layer, surface in zip(self.layers, surfaces):
            layer.surface = surface
