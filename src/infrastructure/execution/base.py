"""
执行策略基类
"""

import os
from abc import ABC, abstractmethod

from ...domain.entities.analysis_task import AnalysisTask
from ...domain.value_objects.analysis_outcome import AnalysisOutcome
from ...utils.helpers import artifact_filename


class AnalysisExecutor(ABC):
    """
    基础设施：分析执行策略基类

    本地执行与远程代理两种实现共享同一契约：成功时返回 AnalysisOutcome，
    并在共享目录留下以任务 ID 命名的输出文件；失败时抛出 AnalysisException 子类。
    截止时间由调用方通过取消协程来强制执行，实现必须在被取消时释放自身资源。

    Attributes:
        shared_data_path (str): 输出文件所在的共享目录
    """

    mode: str = ""

    def __init__(self, shared_data_path: str):
        self.shared_data_path = shared_data_path

    def output_path_for(self, task_id: str) -> str:
        """任务输出文件的完整路径"""
        return os.path.join(self.shared_data_path, artifact_filename(task_id))

    @abstractmethod
    async def execute(self, task: AnalysisTask, log_content: str) -> AnalysisOutcome:
        """
        执行一次分析。

        Args:
            task (AnalysisTask): 已进入 running 状态的任务
            log_content (str): 用户提交的日志文本

        Returns:
            AnalysisOutcome: 执行产出

        Raises:
            AnalysisException: 提交失败或执行失败
        """
        raise NotImplementedError

    async def close(self) -> None:
        """释放策略持有的长期资源（如 HTTP 会话）"""
        return None
