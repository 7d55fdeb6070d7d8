"""
弹性模块 - 并发限制器
"""

from .concurrency_limiter import ConcurrencyLimiter

__all__ = ["ConcurrencyLimiter"]
