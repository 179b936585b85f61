from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, Optional, Tuple, Union

from .enums import ChangeKind, ResponseKind


# Ember bundles its own files before they reach vendor.js, which produces
# concat stats that are irrelevant to the final bundle.
DEFAULT_FRAMEWORK_IGNORES: Tuple[str, ...] = ('ember.js', 'ember-testing.js')

DEFAULT_TEST_IGNORES: Tuple[str, ...] = (
    'tests.js',
    'test-support.js',
    'test-support.css',
    '*-test.js',
)


@dataclass(frozen=True)
class IgnoreRules:
    """Filename patterns excluded from the size report"""
    patterns: Tuple[str, ...] = ()

    @classmethod
    def from_options(
        cls,
        ignore: Union[None, str, Iterable[str]] = None,
        ignore_test_files: bool = True
    ) -> 'IgnoreRules':
        """
        Build rules from user options.

        Args:
            ignore: A single pattern or a list of patterns
            ignore_test_files: Also exclude test bundles unless False

        Returns:
            IgnoreRules with the framework defaults appended
        """
        if ignore is None:
            patterns = []
        elif isinstance(ignore, str):
            patterns = [ignore]
        else:
            patterns = list(ignore)

        patterns.extend(DEFAULT_FRAMEWORK_IGNORES)

        if ignore_test_files is not False:
            patterns.extend(DEFAULT_TEST_IGNORES)

        return cls(patterns=tuple(patterns))

    def matches(self, filename: str) -> bool:
        name = Path(filename).name
        return any(
            fnmatchcase(name, pattern) or fnmatchcase(filename, pattern)
            for pattern in self.patterns
        )


@dataclass(frozen=True)
class StatsChange:
    """A filesystem notification for the raw stats directory"""
    kind: ChangeKind
    filename: str
    root: str

    @property
    def path(self) -> Path:
        return Path(self.root) / self.filename


@dataclass
class AnalyzeResponse:
    """Outcome of a view/compute request, rendered by the router"""
    kind: ResponseKind
    body: Optional[str] = None
    location: Optional[str] = None
