"""
执行策略模块 - 本地子进程执行与远程代理执行
"""

from .base import AnalysisExecutor
from .factory import create_executor
from .local_executor import LocalAnalysisExecutor
from .remote_executor import RemoteAnalysisExecutor

__all__ = [
    "AnalysisExecutor",
    "LocalAnalysisExecutor",
    "RemoteAnalysisExecutor",
    "create_executor",
]
