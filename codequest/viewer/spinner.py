"""
Spinner - Progress indicator while waiting on the feedback generator.

Runs in a daemon thread and writes only to its stream. The thread is
stopped and joined when the context exits, before control returns to code
that reads or writes session files.
"""

import itertools
import sys
import threading
from typing import Optional, TextIO

FRAMES = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")


class Spinner:
    """
    Usage:
        with Spinner("Thinking"):
            output = executor(prompt)
    """

    def __init__(self, message: str, stream: Optional[TextIO] = None, interval: float = 0.1):
        self.message = message
        self.stream = stream or sys.stderr
        self.interval = interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _spin(self):
        for frame in itertools.cycle(FRAMES):
            self.stream.write(f"\r  {frame} {self.message}...")
            self.stream.flush()
            if self._stop.wait(self.interval):
                break
        self.stream.write("\r" + " " * (len(self.message) + 8) + "\r")
        self.stream.flush()

    def start(self):
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._spin, daemon=True)
        self._thread.start()

    def stop(self):
        if self._thread is None:
            return
        self._stop.set()
        self._thread.join()
        self._thread = None

    def __enter__(self) -> "Spinner":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()
        return False
