from enum import Enum


class BuildState(str, Enum):
    IDLE = "idle"
    BUILDING = "building"


class BuildEvent(str, Enum):
    """Lifecycle events recognised in the build output stream"""
    FILE_MUTATED = "file_mutated"
    BUILD_SUCCEEDED = "build_succeeded"


class ChangeKind(str, Enum):
    ADDED = "added"
    CHANGED = "changed"
    DELETED = "deleted"


class ResponseKind(str, Enum):
    """What the analyze endpoints answer with"""
    COMPUTING = "computing"
    NO_STATS = "no_stats"
    ARTIFACT = "artifact"
    REDIRECT = "redirect"
