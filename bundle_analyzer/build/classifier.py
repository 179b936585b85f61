"""
Classifies chunks of build tool output into lifecycle events.
"""
import codecs
import logging
import re
from typing import Any, List, Tuple

from ..core.enums import BuildEvent


MUTATION_PATTERN = re.compile(r'file (added|changed|deleted)')
SUCCESS_PATTERN = re.compile(r'Build successful')

# Longest marker text either pattern can match
_MAX_MARKER_LENGTH = max(len('file changed'), len('file deleted'), len('Build successful'))


class OutputClassifier:
    """
    Keeps a short carry-over tail, so a marker split over
    two chunks is still recognised exactly once. Byte chunks go through an
    incremental UTF-8 decoder, so a multibyte character cut at a read
    boundary is completed by the next chunk.
    """

    def __init__(self):
        self._tail = ''
        self._decoder = codecs.getincrementaldecoder('utf-8')(errors='replace')
        self.logger = logging.getLogger(__name__)

    def classify(self, chunk: Any) -> List[BuildEvent]:
        """
        Classify one chunk of output.

        Args:
            chunk: str or bytes; anything else is left unclassified.
                Invalid byte sequences are replaced, not dropped

        Returns:
            Events found in the chunk, in stream order
        """
        text = self._decode(chunk)
        if text is None:
            return []

        buffer = self._tail + text
        boundary = len(self._tail)

        found: List[Tuple[int, BuildEvent]] = []
        for pattern, event in ((MUTATION_PATTERN, BuildEvent.FILE_MUTATED),
                               (SUCCESS_PATTERN, BuildEvent.BUILD_SUCCEEDED)):
            for match in pattern.finditer(buffer):
                # Matches lying entirely in the tail were reported last time
                if match.end() > boundary:
                    found.append((match.start(), event))

        self._tail = buffer[-(_MAX_MARKER_LENGTH - 1):]

        found.sort(key=lambda item: item[0])
        events = [event for _, event in found]

        for event in events:
            if event is BuildEvent.FILE_MUTATED:
                self.logger.debug("Rebuild detected")
            else:
                self.logger.debug("Finished build detected")

        return events

    def reset(self):
        self._tail = ''
        self._decoder.reset()

    def _decode(self, chunk: Any):
        if isinstance(chunk, (bytes, bytearray)):
            return self._decoder.decode(bytes(chunk))
        if isinstance(chunk, str):
            return chunk
        return None
