"""
任务注册表 - 任务状态的内存存储

任务历史不跨重启持久化，进程存活期间不做淘汰。
"""

import threading
from dataclasses import replace

from ...domain.entities.analysis_task import AnalysisTask
from ...domain.exceptions import (
    InvalidTaskTransitionException,
    TaskAlreadyExistsException,
    TaskNotFoundException,
)
from ...domain.repositories.task_repository import ITaskRepository
from ...shared.constants import TaskStatus

_STATUS_ORDER = {
    TaskStatus.PENDING: 0,
    TaskStatus.RUNNING: 1,
    TaskStatus.COMPLETED: 2,
    TaskStatus.FAILED: 2,
}


class InMemoryTaskRegistry(ITaskRepository):
    """
    基础设施：内存任务注册表

    使用互斥锁保护内部字典。存入与取出的都是任务副本，
    调用方对返回对象的修改只有通过 update() 才会生效，
    因此读取方只会看到完整写入后的记录。
    """

    def __init__(self):
        self._tasks: dict[str, AnalysisTask] = {}
        self._lock = threading.Lock()

    def create(self, task_id: str, requester_id: str, group_id: str) -> AnalysisTask:
        task = AnalysisTask(
            id=task_id, requester_id=str(requester_id), group_id=str(group_id or "")
        )
        with self._lock:
            if task_id in self._tasks:
                raise TaskAlreadyExistsException(task_id)
            self._tasks[task_id] = replace(task)
        return task

    def get(self, task_id: str) -> AnalysisTask | None:
        with self._lock:
            task = self._tasks.get(task_id)
            return replace(task) if task else None

    def list_by_requester(self, requester_id: str) -> list[AnalysisTask]:
        requester_id = str(requester_id)
        with self._lock:
            return [
                replace(task)
                for task in self._tasks.values()
                if task.requester_id == requester_id
            ]

    def update(self, task: AnalysisTask) -> None:
        with self._lock:
            current = self._tasks.get(task.id)
            if current is None:
                raise TaskNotFoundException(task.id)
            # 终态不可离开，状态不可回退
            if current.is_terminal and current.status != task.status:
                raise InvalidTaskTransitionException(
                    task.id, current.status.value, task.status.value
                )
            if _STATUS_ORDER[task.status] < _STATUS_ORDER[current.status]:
                raise InvalidTaskTransitionException(
                    task.id, current.status.value, task.status.value
                )
            self._tasks[task.id] = replace(task)

    def __len__(self) -> int:
        with self._lock:
            return len(self._tasks)
