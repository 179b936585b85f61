from .summarizer import ConcatStatsSummarizer, Summarizer, SUMMARY_SUFFIX
from .coalescer import ComputationCoalescer
from .livereload import inject_livereload, DEFAULT_LIVERELOAD_URL

__all__ = [
    'ConcatStatsSummarizer',
    'Summarizer',
    'SUMMARY_SUFFIX',
    'ComputationCoalescer',
    'inject_livereload',
    'DEFAULT_LIVERELOAD_URL',
]
