"""
Intercepts this process' stdout and tees it through the build monitor.

Used when the build tool runs in-process and reports on sys.stdout.
"""
import sys
from typing import Any, Optional, TextIO

from .monitor import BuildMonitor


class StdoutInterceptor:
    """Text stream wrapper that forwards every write to the wrapped stream"""

    def __init__(self, monitor: BuildMonitor, stream: Optional[TextIO] = None):
        self.monitor = monitor
        self._stream = stream
        self._original: Optional[TextIO] = None

    @property
    def installed(self) -> bool:
        return self._original is not None

    def install(self):
        """Replace sys.stdout with this interceptor (idempotent)"""
        if self.installed:
            return
        self._original = sys.stdout
        if self._stream is None:
            self._stream = sys.stdout
        sys.stdout = self

    def uninstall(self):
        if not self.installed:
            return
        if sys.stdout is self:
            sys.stdout = self._original
        self._original = None

    def write(self, text: Any) -> int:
        text = self.monitor.feed(text)
        return self._stream.write(text)

    def flush(self):
        self._stream.flush()

    def __getattr__(self, name: str):
        # isatty, fileno, encoding and friends come from the wrapped stream
        return getattr(self._stream, name)
