"""
结果收尾 - 任务终态处理与结果投递

与执行策略无关：只依赖 AnalysisOutcome 与任务注册表。
"""

import asyncio

from ...domain.entities.analysis_task import AnalysisTask
from ...domain.repositories.result_sender import IResultSender
from ...domain.repositories.task_repository import ITaskRepository
from ...domain.services import report_formatter
from ...domain.value_objects.analysis_outcome import AnalysisOutcome
from ...shared.constants import MAX_RESULT_LENGTH
from ...utils.helpers import artifact_filename, extract_request_id, truncate_result
from ...utils.logger import logger


def _read_artifact(path: str) -> str:
    with open(path, encoding="utf-8", errors="replace") as f:
        return f.read()


class ResultFinalizer:
    """
    结果收尾器

    负责三件事：
    1. 将任务迁移到终态并写回注册表
    2. 向发起者发送成功 / 失败 / 读取失败报告（每个终态恰好一条）
    3. 结果被截断时上传完整输出文件
    """

    def __init__(self, registry: ITaskRepository, max_length: int = MAX_RESULT_LENGTH):
        self.registry = registry
        self.max_length = max_length

    async def finalize_failure(
        self, task: AnalysisTask, error: str, sender: IResultSender
    ) -> None:
        """任务失败：记录错误并发送失败报告"""
        task.fail(error)
        self.registry.update(task)
        logger.error(f"[{task.id}] 分析失败: {error}")

        await sender.send_text(report_formatter.format_failure(task))

    async def finalize_success(
        self, task: AnalysisTask, outcome: AnalysisOutcome, sender: IResultSender
    ) -> None:
        """任务成功：发送结果，必要时上传完整文件"""
        task.complete(outcome.reported_duration)
        self.registry.update(task)
        logger.info(f"[{task.id}] 分析完成，耗时 {task.duration:.2f}s")

        content = outcome.content
        if content is None:
            try:
                content = await asyncio.to_thread(_read_artifact, outcome.output_path)
            except OSError as e:
                logger.error(f"[{task.id}] 读取输出文件失败: {e}")
                await sender.send_text(
                    report_formatter.format_read_error(
                        task, outcome.output_path, str(e)
                    )
                )
                return

        request_id = extract_request_id(content)
        display_text, truncated = truncate_result(content, self.max_length)

        await sender.send_text(
            report_formatter.format_success(
                task, outcome.output_path, display_text, request_id
            )
        )

        if truncated and outcome.output_path:
            filename = artifact_filename(task.id)
            if task.is_private:
                logger.info(f"[{task.id}] 结果已截断，私聊上传完整输出文件")
                await sender.upload_private_file(
                    task.requester_id, outcome.output_path, filename
                )
            else:
                logger.info(f"[{task.id}] 结果已截断，上传完整输出文件到群 {task.group_id}")
                await sender.upload_group_file(
                    task.group_id, outcome.output_path, filename
                )
