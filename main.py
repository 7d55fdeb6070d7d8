"""
日志分析插件
调用 knot-cli 对用户提交的错误日志进行 AI 分析，并异步回报结果

支持两种执行模式：
1. direct - 插件直接执行 knot-cli（运行在宿主机上时）
2. proxy  - 调用 knot-proxy HTTP 服务（运行在 Docker 容器中时）
"""

import os

from astrbot.api import AstrBotConfig
from astrbot.api.event import AstrMessageEvent, filter
from astrbot.api.star import Context, Star

from .src.application.services.log_analysis_service import LogAnalysisService
from .src.domain.exceptions import ConfigurationException
from .src.domain.services import report_formatter
from .src.infrastructure.config.config_manager import ConfigManager
from .src.infrastructure.execution.factory import create_executor
from .src.infrastructure.messaging.result_sender import AstrBotResultSender
from .src.infrastructure.persistence.task_registry import InMemoryTaskRegistry
from .src.infrastructure.reporting.result_finalizer import ResultFinalizer
from .src.infrastructure.resilience.concurrency_limiter import ConcurrencyLimiter
from .src.utils.helpers import extract_command_args
from .src.utils.logger import logger

ANALYZE_COMMANDS = ("analyze", "日志分析")
STATUS_COMMANDS = ("analyzestatus", "日志分析状态")


class LogAnalyzerPlugin(Star):
    """日志分析插件主类"""

    def __init__(self, context: Context, config: AstrBotConfig):
        super().__init__(context)
        self.config = config

        # 1. 基础设施层
        self.config_manager = ConfigManager(config)
        for problem in self.config_manager.validate():
            logger.warning(f"配置问题: {problem}")

        self.registry = InMemoryTaskRegistry()
        self.limiter = ConcurrencyLimiter(
            name="knot", capacity=max(1, self.config_manager.get_max_concurrent())
        )
        self.executor = create_executor(self.config_manager)
        self.finalizer = ResultFinalizer(self.registry)

        # 2. 应用层
        self.analysis_service = LogAnalysisService(
            self.config_manager,
            self.registry,
            self.limiter,
            self.executor,
            self.finalizer,
        )

        self._prepare_shared_data_dir()

        logger.info(f"日志分析插件已启动，模式: {self.config_manager.get_mode()}")
        if self.config_manager.is_proxy_mode():
            logger.info(f"  proxy_url: {self.config_manager.get_proxy_url()}")
        else:
            logger.info(f"  workspace: {self.config_manager.get_workspace_path()}")
        logger.info(f"  shared_data: {self.config_manager.get_shared_data_path()}")

    def _prepare_shared_data_dir(self) -> None:
        """确保共享输出目录存在，失败只记录警告"""
        path = self.config_manager.get_shared_data_path()
        try:
            os.makedirs(path, exist_ok=True)
        except OSError as e:
            logger.warning(f"创建共享数据目录失败: {e}")

    async def terminate(self):
        """插件被卸载/停用时调用，清理资源"""
        try:
            logger.info("开始清理日志分析插件资源...")
            await self.analysis_service.shutdown()
            logger.info("日志分析插件资源清理完成")
        except Exception as e:
            logger.error(f"插件资源清理失败: {e}", exc_info=True)

    @filter.command("analyzehelp", alias={"日志分析帮助"})
    async def analyze_help(self, event: AstrMessageEvent):
        """
        显示日志分析插件帮助
        用法: /analyzehelp
        """
        proxy_url = (
            self.config_manager.get_proxy_url()
            if self.config_manager.is_proxy_mode()
            else ""
        )
        yield event.plain_result(
            report_formatter.format_help(self.config_manager.get_mode(), proxy_url)
        )

    @filter.command("analyze", alias={"日志分析"})
    async def analyze(self, event: AstrMessageEvent):
        """
        使用 AI 分析日志，结果异步返回
        用法: /analyze <日志内容>
        """
        log_content = extract_command_args(event.message_str, ANALYZE_COMMANDS)
        if not log_content:
            yield event.plain_result(report_formatter.format_usage())
            return

        sender = AstrBotResultSender.from_event(self.context, event)
        try:
            task = self.analysis_service.submit(
                log_content,
                requester_id=str(event.get_sender_id()),
                group_id=self._get_group_id_from_event(event) or "",
                sender=sender,
            )
        except ConfigurationException as e:
            logger.warning(f"拒绝分析请求: {e.message}")
            yield event.plain_result(report_formatter.format_config_error(e.message))
            return

        yield event.plain_result(
            report_formatter.format_task_created(
                task, len(log_content), self.analysis_service.mode
            )
        )

    @filter.command("analyzestatus", alias={"日志分析状态"})
    async def analyze_status(self, event: AstrMessageEvent):
        """
        查看分析任务状态
        用法: /analyzestatus [任务ID]
        """
        task_id = extract_command_args(event.message_str, STATUS_COMMANDS)
        task_id = task_id.split()[0].upper() if task_id else ""

        if task_id:
            task = self.analysis_service.get_task(task_id)
            if task is None:
                yield event.plain_result(
                    report_formatter.format_task_not_found(task_id)
                )
                return
            yield event.plain_result(report_formatter.format_task_status(task))
            return

        tasks = self.analysis_service.list_tasks(str(event.get_sender_id()))
        yield event.plain_result(report_formatter.format_task_list(tasks))

    def _get_group_id_from_event(self, event: AstrMessageEvent) -> str | None:
        """从消息事件中安全获取群组 ID"""
        try:
            group_id = event.get_group_id()
            return str(group_id) if group_id else None
        except Exception:
            return None
