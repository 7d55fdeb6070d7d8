# 仓储接口
from .result_sender import IResultSender
from .task_repository import ITaskRepository

__all__ = [
    "ITaskRepository",
    "IResultSender",
]
