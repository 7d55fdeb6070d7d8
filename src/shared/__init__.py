"""
共享模块 - 通用工具和常量
"""

from .constants import ExecutionMode, TaskStatus

__all__ = [
    "ExecutionMode",
    "TaskStatus",
]
