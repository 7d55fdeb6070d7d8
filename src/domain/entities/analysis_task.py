"""
分析任务实体 - 聚合根
"""

import time
from dataclasses import dataclass, field

from ...shared.constants import TaskStatus
from ..exceptions import InvalidTaskTransitionException

# 允许的状态迁移：pending -> running -> {completed, failed}
_ALLOWED_TRANSITIONS = {
    TaskStatus.PENDING: {TaskStatus.RUNNING},
    TaskStatus.RUNNING: {TaskStatus.COMPLETED, TaskStatus.FAILED},
    TaskStatus.COMPLETED: set(),
    TaskStatus.FAILED: set(),
}


@dataclass
class AnalysisTask:
    """
    分析任务实体 - 聚合根

    一次 /analyze 请求对应一个任务。ended_at 与 duration 仅在终态时设置。

    Attributes:
        id (str): 8 位短 ID，进程生命周期内唯一
        requester_id (str): 发起者 ID，只有发起者能列出自己的任务
        group_id (str): 群组 ID，为空表示私聊
        status (TaskStatus): 当前状态
        created_at (float): 创建时间戳
        started_at (float | None): 获取并发槽位、开始执行的时间戳
        ended_at (float | None): 进入终态的时间戳
        duration (float | None): 耗时（秒），远程上报值优先
        error (str | None): 失败原因，仅 failed 状态下设置
    """

    id: str
    requester_id: str = ""
    group_id: str = ""
    status: TaskStatus = TaskStatus.PENDING
    created_at: float = field(default_factory=time.time)
    started_at: float | None = None
    ended_at: float | None = None
    duration: float | None = None
    error: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def is_private(self) -> bool:
        """群组 ID 为空或非正数时视为私聊投递目标"""
        if not self.group_id:
            return True
        try:
            return int(self.group_id) <= 0
        except ValueError:
            return False

    def _transition(self, target: TaskStatus) -> None:
        if target not in _ALLOWED_TRANSITIONS[self.status]:
            raise InvalidTaskTransitionException(
                self.id, self.status.value, target.value
            )
        self.status = target

    def start(self, now: float | None = None) -> None:
        """标记任务为运行中（已持有并发槽位）"""
        self._transition(TaskStatus.RUNNING)
        self.started_at = now if now is not None else time.time()

    def complete(
        self, reported_duration: float | None = None, now: float | None = None
    ) -> None:
        """标记任务为已完成"""
        self._transition(TaskStatus.COMPLETED)
        self._finish(reported_duration, now)

    def fail(self, error: str, now: float | None = None) -> None:
        """标记任务为失败"""
        self._transition(TaskStatus.FAILED)
        self.error = error
        self._finish(None, now)

    def _finish(self, reported_duration: float | None, now: float | None) -> None:
        self.ended_at = now if now is not None else time.time()
        if reported_duration is not None and reported_duration > 0:
            self.duration = reported_duration
        else:
            self.duration = self.ended_at - (self.started_at or self.created_at)

    def elapsed(self, now: float | None = None) -> float:
        """非终态任务已经过的时间（排队中从创建算起，运行中从开始算起）"""
        now = now if now is not None else time.time()
        return now - (self.started_at or self.created_at)
