"""
layer replay and the display composite.

layer surfaces are caches of their strokes; the display is a cache of the
visible layers. nothing here touches history or the stroke lists.
"""
from app.config import RECT_PREVIEW_COLOR, RECT_PREVIEW_DASH, RECT_PREVIEW_WIDTH


class Compositor:
    """
    builds what's on screen. layers are blitted bottom to top onto the
    display surface with their opacity. layer surfaces themselves are
    regenerated by replaying strokes through the stroke builder.
    """

    def __init__(self, display, builder):
        self.display = display
        self.builder = builder

    def composite_display(self, layers):
        self.display.clear()
        for layer in layers:
            # hidden layers are skipped outright, not drawn at zero alpha
            if not layer.visible:
                continue
            self.display.composite_from(layer.surface, layer.opacity)

    def rebuild_layer(self, layer):
        """wipe the layer surface and replay its strokes in stored order"""
        layer.surface.clear()
        for stroke in layer.strokes:
            self.builder.render_stroke(layer.surface, stroke)

    def rebuild_all(self, layers):
        for layer in layers:
            self.rebuild_layer(layer)
        self.composite_display(layers)

    def draw_rect_preview(self, start, end):
        """dashed outline on the display only, never on a layer"""
        self.display.stroke_dashed_rect(start, end, RECT_PREVIEW_COLOR,
                                        RECT_PREVIEW_WIDTH, RECT_PREVIEW_DASH)
