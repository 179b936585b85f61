"""
Filesystem notification sources for the stats watch loop.

A source is any async iterator of StatsChange events.
"""
import asyncio
import logging
from fnmatch import fnmatchcase
from pathlib import Path
from typing import AsyncIterator, Callable, Optional, Sequence

from watchfiles import Change, awatch

from ..core.enums import ChangeKind
from ..core.models import StatsChange


logger = logging.getLogger(__name__)

STATS_GLOB = '*.json'
DERIVED_GLOBS = ('*.out.json',)

# Seconds between checks while the build has not created the stats directory
DIRECTORY_POLL_INTERVAL = 0.5

_CHANGE_KINDS = {
    Change.added: ChangeKind.ADDED,
    Change.modified: ChangeKind.CHANGED,
    Change.deleted: ChangeKind.DELETED,
}


def stats_file_filter(
    glob: str = STATS_GLOB,
    ignored: Sequence[str] = DERIVED_GLOBS
) -> Callable[[Change, str], bool]:
    """Build a watchfiles filter accepting raw stats files only"""

    def _accept(change: Change, path: str) -> bool:
        name = Path(path).name
        if not fnmatchcase(name, glob):
            return False
        return not any(fnmatchcase(name, pattern) for pattern in ignored)

    return _accept


async def wait_for_directory(
    directory: Path,
    poll_interval: float = DIRECTORY_POLL_INTERVAL,
    stop_event: Optional[asyncio.Event] = None
) -> bool:
    """
    Poll until the directory exists.

    Returns:
        False if stop_event was set first
    """
    while not directory.is_dir():
        if stop_event is not None and stop_event.is_set():
            return False
        await asyncio.sleep(poll_interval)
    return True


async def watchfiles_source(
    directory: Path,
    glob: str = STATS_GLOB,
    ignored: Sequence[str] = DERIVED_GLOBS,
    stop_event: Optional[asyncio.Event] = None,
    poll_interval: float = DIRECTORY_POLL_INTERVAL
) -> AsyncIterator[StatsChange]:
    """
    Yield StatsChange events for the stats directory.

    Args:
        directory: Raw stats directory; watching starts once the build has
            created it
        glob: Pattern of files to report
        ignored: Patterns excluded even if they match glob
        stop_event: Optional event ending the iteration
        poll_interval: Seconds between checks for the directory
    """
    root = Path(directory).resolve()
    if not root.is_dir():
        logger.debug(f"Waiting for {root} to be created by the build")
        if not await wait_for_directory(root, poll_interval, stop_event):
            return
    logger.debug(f"Watching {root} for {glob} (ignoring {', '.join(ignored)})")

    async for changes in awatch(
        root,
        watch_filter=stats_file_filter(glob, ignored),
        recursive=False,
        stop_event=stop_event
    ):
        for change, path in sorted(changes, key=lambda item: item[1]):
            yield StatsChange(
                kind=_CHANGE_KINDS[change],
                filename=str(Path(path).relative_to(root)),
                root=str(root)
            )
