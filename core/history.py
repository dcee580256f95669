"""
bounded linear undo/redo.

entries are vector snapshots (see LayerStore.capture). the cursor
points at the snapshot that matches what's on screen. pushing after an
undo throws away the redo branch, there is no history tree.
"""
import logging

from app.config import MAX_HISTORY

log = logging.getLogger(__name__)


class HistoryManager:

    def __init__(self, max_history=MAX_HISTORY):
        self.max_history = max_history
        self.entries = []
        self.cursor = -1  # only -1 until the first push

    def __len__(self):
        return len(self.entries)

    @property
    def can_undo(self):
        return self.cursor > 0

    @property
    def can_redo(self):
        return self.cursor < len(self.entries) - 1

    @property
    def current(self):
        if self.cursor < 0:
            return None
        return self.entries[self.cursor]

    def push(self, snapshot):
        if self.cursor < len(self.entries) - 1:
            del self.entries[self.cursor + 1:]
        self.entries.append(snapshot)
        self.cursor = len(self.entries) - 1

        # drop the oldest, keep the cursor pointing at the same snapshot
        while len(self.entries) > self.max_history:
            self.entries.pop(0)
            self.cursor -= 1

    def undo(self):
        """step back. returns the snapshot to restore, or None at the start"""
        if self.cursor <= 0:
            log.debug("undo: nothing to undo")
            return None
        self.cursor -= 1
        return self.entries[self.cursor]

    def redo(self):
        """step forward. returns the snapshot to restore, or None at the end"""
        if self.cursor >= len(self.entries) - 1:
            log.debug("redo: nothing to redo")
            return None
        self.cursor += 1
        return self.entries[self.cursor]

    def clear(self):
        self.entries.clear()
        self.cursor = -1
