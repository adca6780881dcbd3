"""Single authoritative holder of the sandbox world"""

import threading

from iot_sandbox.models import World


class WorldStore:
    """
    Read/replace handle around one World value.
    The world is never edited in place: update() builds a new value from the
    current one and swaps it in while holding the lock.
    """

    def __init__(self, world=None):
        self._world = world if world is not None else World()
        self._lock = threading.RLock()

    def read(self):
        with self._lock:
            return self._world

    def replace(self, world):
        with self._lock:
            self._world = world
            return world

    def update(self, fn):
        """Apply fn(world) -> world atomically and return the new world."""
        with self._lock:
            self._world = fn(self._world)
            return self._world
