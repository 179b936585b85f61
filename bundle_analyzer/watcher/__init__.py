from .sources import watchfiles_source, stats_file_filter
from .stats_watcher import StatsWatchLoop

__all__ = ['StatsWatchLoop', 'watchfiles_source', 'stats_file_filter']
