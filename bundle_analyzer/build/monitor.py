"""
Feeds build output through the classifier into the gate.
"""
import asyncio
import logging
import threading
from typing import Any, Optional

from .classifier import OutputClassifier
from .gate import BuildCompletionGate


class BuildMonitor:
    """
    Observes build output on behalf of the gate.

    feed() runs inline on every chunk of output and never blocks. Chunks
    always come back unchanged so the normal output stays visible. Until
    activate() is called chunks are passed through unclassified.
    """

    def __init__(
        self,
        gate: BuildCompletionGate,
        classifier: Optional[OutputClassifier] = None
    ):
        self.gate = gate
        self.classifier = classifier or OutputClassifier()
        self.active = False
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._loop_thread: Optional[int] = None
        self.logger = logging.getLogger(__name__)

    def activate(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        """Start classifying output; no-op when already active"""
        if self.active:
            return
        self._loop = loop or asyncio.get_running_loop()
        self._loop_thread = threading.get_ident()
        self.active = True
        self.logger.debug("Build output monitoring activated")

    def feed(self, chunk: Any) -> Any:
        if not self.active:
            return chunk

        events = self.classifier.classify(chunk)
        if not events:
            return chunk

        if threading.get_ident() == self._loop_thread:
            self._dispatch(events)
        elif self._loop is not None and not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self._dispatch, events)

        return chunk

    def _dispatch(self, events):
        for event in events:
            self.gate.handle_event(event)
