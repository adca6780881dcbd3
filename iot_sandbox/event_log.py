"""Bounded stream of simulation log entries"""

import threading
import time
from collections import deque
from dataclasses import dataclass

INFO = 'info'
DATA = 'data'
WARNING = 'warning'
ERROR = 'error'

LEVELS = (INFO, DATA, WARNING, ERROR)


@dataclass(frozen=True)
class LogEntry:
    timestamp: float
    level: str
    source: str
    message: str

    def as_dict(self):
        return {
            'timestamp': self.timestamp,
            'level': self.level,
            'source': self.source,
            'message': self.message,
        }


class EventLog:
    """
    Keeps the most recent ``max_entries`` entries; oldest are dropped first.
    With ``echo`` on, each entry is also printed as ``[source] message``.
    """

    def __init__(self, max_entries=100, echo=False, clock=time.time):
        self._entries = deque(maxlen=max_entries)
        self._lock = threading.Lock()
        self._clock = clock
        self.echo = echo

    def append(self, level, source, message):
        if level not in LEVELS:
            raise ValueError(f"Unknown log level: {level}")
        entry = LogEntry(self._clock(), level, source, message)
        with self._lock:
            self._entries.append(entry)
        if self.echo:
            print(f"[{source}] {message}")
        return entry

    def info(self, source, message):
        return self.append(INFO, source, message)

    def data(self, source, message):
        return self.append(DATA, source, message)

    def warning(self, source, message):
        return self.append(WARNING, source, message)

    def error(self, source, message):
        return self.append(ERROR, source, message)

    def entries(self):
        with self._lock:
            return list(self._entries)

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self):
        with self._lock:
            return len(self._entries)
