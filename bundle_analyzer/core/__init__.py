"""
Core types shared across the analyzer: enums and value objects.
The process-wide AnalyzerContext lives in core.context.
"""

from .enums import BuildEvent, BuildState, ChangeKind, ResponseKind
from .models import AnalyzeResponse, IgnoreRules, StatsChange

__all__ = [
    'BuildEvent',
    'BuildState',
    'ChangeKind',
    'ResponseKind',
    'AnalyzeResponse',
    'IgnoreRules',
    'StatsChange',
]
