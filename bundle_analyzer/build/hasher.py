"""
Content hash computation for raw stats files.
Hashes file bytes rather than timestamps so touches without edits are ignored.
"""
import hashlib
import logging
from pathlib import Path
from typing import Union


class FileHasher:
    """Computes content fingerprints for files"""

    def __init__(self, chunk_size: int = 65536):
        self.chunk_size = chunk_size
        self.logger = logging.getLogger(__name__)

    def compute_file_content_hash(self, file_path: Union[str, Path]) -> str:
        """
        Compute hash of raw file content.

        Args:
            file_path: Path to file

        Returns:
            SHA256 hash hex string

        Raises:
            FileNotFoundError: If the file vanished before it could be read
        """
        hash_obj = hashlib.sha256()

        try:
            with open(file_path, 'rb') as f:
                for block in iter(lambda: f.read(self.chunk_size), b''):
                    hash_obj.update(block)
        except FileNotFoundError:
            raise
        except Exception as e:
            self.logger.error(f"Failed to compute file hash for {file_path}: {e}")
            raise

        return hash_obj.hexdigest()
