"""
Forces a rebuild by touching the project's entry file.
"""
import logging
import os
from pathlib import Path
from typing import Optional, Sequence


MAIN_FILE_CANDIDATES = (
    'app/app.js',               # app
    'src/main.js',              # module unification
    'tests/dummy/app/app.js',   # addon dummy app
    'app/app.ts',
    'src/main.ts',
    'tests/dummy/app/app.ts',
)


class MainFileNotFoundError(RuntimeError):
    """No entry file exists that could be touched to trigger a build"""


class BuildTrigger:
    """Touches the first existing entry file candidate"""

    def __init__(self, project_root: Path, candidates: Sequence[str] = MAIN_FILE_CANDIDATES):
        self.project_root = Path(project_root)
        self.candidates = tuple(candidates)
        self.logger = logging.getLogger(__name__)

    def get_main_file(self) -> Optional[Path]:
        for candidate in self.candidates:
            main_file = self.project_root / candidate
            if main_file.exists():
                return main_file
        return None

    def trigger_build(self) -> Path:
        """
        Touch the entry file so the watching build tool rebuilds.

        Raises:
            MainFileNotFoundError: If no candidate exists under the project root
        """
        self.logger.debug("Triggering build")
        main_file = self.get_main_file()
        if main_file is None:
            raise MainFileNotFoundError(
                f"No main file found to trigger build in {self.project_root} "
                f"(looked for {', '.join(self.candidates)})"
            )

        self.logger.debug(f"Touching {main_file}")
        os.utime(main_file, None)
        return main_file
