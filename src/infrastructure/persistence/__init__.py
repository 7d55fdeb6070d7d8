"""
持久化模块 - 任务状态存储
"""

from .task_registry import InMemoryTaskRegistry

__all__ = ["InMemoryTaskRegistry"]
