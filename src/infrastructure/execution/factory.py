"""
执行策略工厂 - 根据配置中的 mode 选择执行策略
"""

from ...shared.constants import ExecutionMode
from ..config.config_manager import ConfigManager
from .base import AnalysisExecutor
from .local_executor import LocalAnalysisExecutor
from .remote_executor import RemoteAnalysisExecutor


def create_executor(config_manager: ConfigManager) -> AnalysisExecutor:
    """
    根据 mode 配置创建执行策略。

    proxy 使用远程代理，其余取值一律使用本地执行；
    未知取值会在提交任务时被 ConfigManager.ensure_ready() 拒绝。
    """
    shared_data_path = config_manager.get_shared_data_path()

    if config_manager.get_mode() == ExecutionMode.PROXY.value:
        return RemoteAnalysisExecutor(
            proxy_url=config_manager.get_proxy_url(),
            shared_data_path=shared_data_path,
            poll_interval=config_manager.get_poll_interval(),
            http_timeout=config_manager.get_http_timeout(),
        )
    return LocalAnalysisExecutor(
        cli_path=config_manager.get_knot_cli_path(),
        shared_data_path=shared_data_path,
        workspace_path=config_manager.get_workspace_path(),
        system_prompt_path=config_manager.get_system_prompt_path(),
    )
