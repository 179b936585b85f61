from .api_models import AnalyzerStatus, CacheStatus

__all__ = ['AnalyzerStatus', 'CacheStatus']
