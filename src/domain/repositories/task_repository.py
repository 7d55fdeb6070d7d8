"""
任务仓储接口 - 与存储实现无关的抽象
"""

from abc import ABC, abstractmethod

from ..entities.analysis_task import AnalysisTask


class ITaskRepository(ABC):
    """
    任务仓储接口

    所有方法都必须可在多个分析任务与状态查询并发调用时安全使用，
    读取方永远不会看到只更新了一半的任务记录。
    """

    @abstractmethod
    def create(self, task_id: str, requester_id: str, group_id: str) -> AnalysisTask:
        """创建一个 pending 状态的任务并立即可见"""
        pass

    @abstractmethod
    def get(self, task_id: str) -> AnalysisTask | None:
        """按 ID 获取任务快照，不存在时返回 None"""
        pass

    @abstractmethod
    def list_by_requester(self, requester_id: str) -> list[AnalysisTask]:
        """列出某个发起者的全部任务（无序）"""
        pass

    @abstractmethod
    def update(self, task: AnalysisTask) -> None:
        """整体替换该 ID 对应的任务记录"""
        pass
