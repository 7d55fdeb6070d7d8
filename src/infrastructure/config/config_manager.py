"""
配置管理器 - 集中化配置管理

该模块提供了一个访问插件配置的统一接口，
在 AstrBot 配置之上叠加环境变量覆盖，并增加了验证和默认值功能。
"""

import os
from typing import Any, Dict, List, Mapping, Optional

from ...domain.exceptions import (
    InvalidConfigurationException,
    MissingConfigurationException,
)
from ...shared.constants import (
    DEFAULT_KNOT_CLI_PATH,
    DEFAULT_MAX_CONCURRENT,
    DEFAULT_MODE,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_PROXY_URL,
    DEFAULT_SHARED_DATA_PATH,
    DEFAULT_TIMEOUT,
    ENV_OVERRIDES,
    HTTP_TIMEOUT_GRACE,
    ExecutionMode,
)


class ConfigManager:
    """
    插件的集中配置管理器。

    提供带有默认值和验证的配置值类型化访问。
    环境变量（如 LOGANALYZER_MODE）优先于配置文件中的值。
    """

    def __init__(
        self, config: Dict[str, Any], environ: Optional[Mapping[str, str]] = None
    ):
        """
        初始化配置管理器。

        Args:
            config: 原始配置字典（AstrBotConfig）
            environ: 环境变量映射，默认为 os.environ
        """
        self._config = config or {}
        self._environ = environ if environ is not None else os.environ

    def get(self, key: str, default: Any = None) -> Any:
        """
        获取配置值。

        Args:
            key: 配置键
            default: 如果键未找到则返回默认值

        Returns:
            配置值或默认值
        """
        env_name = ENV_OVERRIDES.get(key)
        if env_name:
            env_value = self._environ.get(env_name)
            if env_value:
                return env_value

        value = self._config.get(key)
        if value is None:
            return default
        return value

    def set(self, key: str, value: Any) -> None:
        """设置配置值"""
        self._config[key] = value

    # ========================================================================
    # 执行模式
    # ========================================================================

    def get_mode(self) -> str:
        """获取执行模式 (direct 或 proxy)"""
        return str(self.get("mode", DEFAULT_MODE)).strip().lower()

    def is_proxy_mode(self) -> bool:
        return self.get_mode() == ExecutionMode.PROXY.value

    # ========================================================================
    # 本地执行配置
    # ========================================================================

    def get_knot_cli_path(self) -> str:
        """获取 knot-cli 可执行文件路径"""
        return str(self.get("knot_cli_path", DEFAULT_KNOT_CLI_PATH))

    def get_workspace_path(self) -> str:
        """获取代码工作区路径"""
        return str(self.get("workspace_path", ""))

    def get_system_prompt_path(self) -> str:
        """获取系统提示词文件路径"""
        return str(self.get("system_prompt_path", ""))

    # ========================================================================
    # 代理配置
    # ========================================================================

    def get_proxy_url(self) -> str:
        """获取 knot-proxy 服务地址（去除末尾斜杠）"""
        return str(self.get("proxy_url", DEFAULT_PROXY_URL)).rstrip("/")

    def get_poll_interval(self) -> float:
        """获取状态轮询间隔（秒）"""
        return float(self.get("poll_interval", DEFAULT_POLL_INTERVAL))

    # ========================================================================
    # 通用配置
    # ========================================================================

    def get_shared_data_path(self) -> str:
        """获取输出文件共享目录"""
        return str(self.get("shared_data_path", DEFAULT_SHARED_DATA_PATH))

    def get_max_concurrent(self) -> int:
        """获取最大并发分析数"""
        return int(self.get("max_concurrent", DEFAULT_MAX_CONCURRENT))

    def get_timeout(self) -> int:
        """获取单个任务的超时时间（秒）"""
        return int(self.get("timeout", DEFAULT_TIMEOUT))

    def get_http_timeout(self) -> int:
        """获取 HTTP 客户端超时时间（秒）"""
        return self.get_timeout() + HTTP_TIMEOUT_GRACE

    # ========================================================================
    # 工具方法
    # ========================================================================

    def to_dict(self) -> Dict[str, Any]:
        """获取生效后的配置快照"""
        return {
            "mode": self.get_mode(),
            "knot_cli_path": self.get_knot_cli_path(),
            "workspace_path": self.get_workspace_path(),
            "system_prompt_path": self.get_system_prompt_path(),
            "proxy_url": self.get_proxy_url(),
            "shared_data_path": self.get_shared_data_path(),
            "max_concurrent": self.get_max_concurrent(),
            "timeout": self.get_timeout(),
            "poll_interval": self.get_poll_interval(),
        }

    def validate(self) -> List[str]:
        """
        验证配置

        Returns:
            验证错误消息列表（如果有效则为空）
        """
        errors = []

        mode = self.get_mode()
        if mode not in (ExecutionMode.DIRECT.value, ExecutionMode.PROXY.value):
            errors.append(f"mode 必须是 direct 或 proxy，当前为 {mode}")

        try:
            if self.get_max_concurrent() < 1:
                errors.append("max_concurrent 必须大于 0")
        except (TypeError, ValueError):
            errors.append("max_concurrent 必须是整数")

        try:
            if self.get_timeout() < 1:
                errors.append("timeout 必须大于 0")
        except (TypeError, ValueError):
            errors.append("timeout 必须是整数")

        try:
            if self.get_poll_interval() <= 0:
                errors.append("poll_interval 必须大于 0")
        except (TypeError, ValueError):
            errors.append("poll_interval 必须是数字")

        return errors

    def ensure_ready(self) -> None:
        """
        检查当前模式所需的配置是否齐全。

        Raises:
            InvalidConfigurationException: 执行模式未知
            MissingConfigurationException: 缺少当前模式的必需配置
        """
        mode = self.get_mode()
        if mode == ExecutionMode.DIRECT.value:
            if not self.get_workspace_path():
                raise MissingConfigurationException(
                    "workspace_path", ENV_OVERRIDES["workspace_path"]
                )
        elif mode == ExecutionMode.PROXY.value:
            if not self.get_proxy_url():
                raise MissingConfigurationException(
                    "proxy_url", ENV_OVERRIDES["proxy_url"]
                )
        else:
            raise InvalidConfigurationException("未知的执行模式", mode)
