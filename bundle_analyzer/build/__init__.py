"""
Build observation: output classification, the completion gate and stats
change detection.
"""

from .hasher import FileHasher
from .change_detector import StatsChangeDetector
from .classifier import OutputClassifier
from .scheduler import LoopScheduler, ManualScheduler, Scheduler
from .gate import BuildCompletionGate, DEFAULT_SETTLE_DELAY
from .monitor import BuildMonitor
from .interceptor import StdoutInterceptor
from .process import BuildProcess
from .trigger import BuildTrigger, MainFileNotFoundError, MAIN_FILE_CANDIDATES

__all__ = [
    'FileHasher',
    'StatsChangeDetector',
    'OutputClassifier',
    'LoopScheduler',
    'ManualScheduler',
    'Scheduler',
    'BuildCompletionGate',
    'DEFAULT_SETTLE_DELAY',
    'BuildMonitor',
    'StdoutInterceptor',
    'BuildProcess',
    'BuildTrigger',
    'MainFileNotFoundError',
    'MAIN_FILE_CANDIDATES',
]
