"""
Serving Module
"""
from .cache import init_redis, close_redis, get_redis, reports_cache

__all__ = [
    "init_redis",
    "close_redis",
    "get_redis",
    "reports_cache",
]
