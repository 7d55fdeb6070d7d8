"""
日志分析应用服务 - 应用层
实现"提交日志 -> 后台分析 -> 异步回报结果"的核心用例。
负责协调任务注册表、并发限制器、执行策略与结果收尾器。
"""

import asyncio
from collections.abc import Callable

from ...domain.entities.analysis_task import AnalysisTask
from ...domain.exceptions import AnalysisException, AnalysisTimeoutException
from ...domain.repositories.result_sender import IResultSender
from ...domain.repositories.task_repository import ITaskRepository
from ...infrastructure.config.config_manager import ConfigManager
from ...infrastructure.execution.base import AnalysisExecutor
from ...infrastructure.reporting.result_finalizer import ResultFinalizer
from ...infrastructure.resilience.concurrency_limiter import ConcurrencyLimiter
from ...shared.constants import TaskStatus
from ...utils.helpers import generate_short_id
from ...utils.logger import logger


class LogAnalysisService:
    """
    日志分析应用服务

    submit() 同步登记任务并启动后台协程后立即返回，调用方只拿到任务 ID。
    后台协程在获取并发槽位后才进入 running，截止时间从此刻开始计算；
    超时会取消执行策略（本地模式会杀死子进程，远程模式放弃轮询）。
    任务内的任何异常都只会落到该任务的 error 字段，不会影响其他任务。
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        registry: ITaskRepository,
        limiter: ConcurrencyLimiter,
        executor: AnalysisExecutor,
        finalizer: ResultFinalizer,
        id_factory: Callable[[], str] = generate_short_id,
    ):
        self.config_manager = config_manager
        self.registry = registry
        self.limiter = limiter
        self.executor = executor
        self.finalizer = finalizer
        self.id_factory = id_factory
        self.timeout = config_manager.get_timeout()
        self._background: set[asyncio.Task] = set()

    @property
    def mode(self) -> str:
        return self.config_manager.get_mode()

    def submit(
        self,
        log_content: str,
        requester_id: str,
        group_id: str,
        sender: IResultSender,
    ) -> AnalysisTask:
        """
        登记分析任务并在后台执行。

        Args:
            log_content (str): 待分析的日志文本
            requester_id (str): 发起者 ID
            group_id (str): 群组 ID，私聊时为空
            sender (IResultSender): 结果投递目标

        Returns:
            AnalysisTask: pending 状态的任务快照

        Raises:
            ConfigurationException: 当前模式的配置不完整，此时不会创建任务
        """
        self.config_manager.ensure_ready()

        task = self.registry.create(self.id_factory(), requester_id, group_id)
        logger.info(
            f"[{task.id}] 创建分析任务: 发起者 {requester_id}, "
            f"群 {group_id or '私聊'}, 日志长度 {len(log_content)}"
        )

        background = asyncio.create_task(
            self._run(task, log_content, sender), name=f"log-analysis-{task.id}"
        )
        self._background.add(background)
        background.add_done_callback(self._background.discard)
        return task

    def get_task(self, task_id: str) -> AnalysisTask | None:
        return self.registry.get(task_id)

    def list_tasks(self, requester_id: str) -> list[AnalysisTask]:
        return self.registry.list_by_requester(requester_id)

    @property
    def in_flight(self) -> int:
        """尚未结束的后台任务数"""
        return len(self._background)

    async def wait_idle(self) -> None:
        """等待当前所有后台任务结束"""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    async def shutdown(self) -> None:
        """取消所有后台任务并释放执行策略资源"""
        pending = list(self._background)
        if pending:
            logger.info(f"正在取消 {len(pending)} 个分析任务...")
        for background in pending:
            background.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        await self.executor.close()

    async def _run(
        self, task: AnalysisTask, log_content: str, sender: IResultSender
    ) -> None:
        try:
            async with self.limiter.slot():
                task.start()
                self.registry.update(task)
                logger.info(f"[{task.id}] 开始分析 (模式: {self.executor.mode})")

                try:
                    outcome = await asyncio.wait_for(
                        self.executor.execute(task, log_content), timeout=self.timeout
                    )
                except asyncio.TimeoutError:
                    error = AnalysisTimeoutException(self.timeout).message
                except AnalysisException as e:
                    error = e.message
                except Exception as e:
                    logger.error(f"[{task.id}] 执行策略异常: {e}", exc_info=True)
                    error = f"分析执行异常: {e}"
                else:
                    await self.finalizer.finalize_success(task, outcome, sender)
                    return

                await self.finalizer.finalize_failure(task, error, sender)

        except asyncio.CancelledError:
            if task.status == TaskStatus.RUNNING:
                task.fail("分析任务已取消")
                self.registry.update(task)
            logger.warning(f"[{task.id}] 分析任务被取消")
            raise
        except Exception as e:
            logger.error(f"[{task.id}] 任务收尾异常: {e}", exc_info=True)
