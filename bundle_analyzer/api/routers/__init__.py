from .analyze import create_analyze_router, render_response

__all__ = ['create_analyze_router', 'render_response']
