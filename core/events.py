"""
tiny synchronous event emitter.

the canvas never talks to a bus directly. it gets one of these (or
makes its own) and the host subscribes to whatever it cares about.
listeners run in emit order, on the caller's thread, so notifications
arrive in the same order the mutations happened.
"""
import logging

log = logging.getLogger(__name__)

READY = "ready"
STROKE_ADDED = "stroke-added"
LAYER_CHANGED = "layer-changed"


class Emitter:

    def __init__(self, sink=None):
        # sink(topic, payload) gets every notification, for forwarding to a host bus
        self._listeners = {}
        self._sink = sink

    def on(self, topic, fn):
        """subscribe. returns a function that unsubscribes"""
        self._listeners.setdefault(topic, []).append(fn)
        return lambda: self.off(topic, fn)

    def off(self, topic, fn):
        fns = self._listeners.get(topic)
        if not fns:
            return
        self._listeners[topic] = [f for f in fns if f is not fn]

    def once(self, topic, fn):
        def wrapper(payload):
            self.off(topic, wrapper)
            fn(payload)
        return self.on(topic, wrapper)

    def emit(self, topic, payload):
        # copy so listeners can unsubscribe while we iterate
        targets = list(self._listeners.get(topic, ()))
        if self._sink is not None:
            targets.append(lambda p: self._sink(topic, p))
        for fn in targets:
            try:
                fn(payload)
            except Exception:
                log.exception("listener for %s failed", topic)
