"""
Detects genuine content changes in watched stats files.
"""
from pathlib import Path
from typing import Dict, Optional, Union
import logging

from .hasher import FileHasher


class StatsChangeDetector:
    """Keeps the last known fingerprint per stats file"""

    def __init__(self, hasher: Optional[FileHasher] = None):
        """
        Initialize change detector.

        Args:
            hasher: FileHasher instance (a default one is created if omitted)
        """
        self.hasher = hasher or FileHasher()
        # path -> fingerprint; None marks a file that was missing when hashed
        self._fingerprints: Dict[str, Optional[str]] = {}
        self.logger = logging.getLogger(__name__)

    def check_and_update(self, path: Union[str, Path]) -> bool:
        """
        Fingerprint the file and record it.

        An unseen path always counts as changed. A file deleted between the
        notification and hashing fingerprints as None, which differs from
        any real hash.

        Args:
            path: File to fingerprint

        Returns:
            True if the fingerprint differs from the previous one
        """
        key = str(Path(path).resolve())

        try:
            fingerprint = self.hasher.compute_file_content_hash(key)
        except FileNotFoundError:
            self.logger.debug(f"Stats file disappeared before hashing: {key}")
            fingerprint = None

        changed = key not in self._fingerprints or self._fingerprints[key] != fingerprint
        self._fingerprints[key] = fingerprint

        if changed:
            self.logger.debug(f"Fingerprint changed for {key}: {fingerprint}")

        return changed

    def known_fingerprint(self, path: Union[str, Path]) -> Optional[str]:
        return self._fingerprints.get(str(Path(path).resolve()))

    def __len__(self) -> int:
        return len(self._fingerprints)
