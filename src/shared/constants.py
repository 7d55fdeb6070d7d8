"""
常量 - 插件中使用的共享常量
"""

from enum import Enum


class TaskStatus(str, Enum):
    """分析任务状态枚举类"""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.COMPLETED, TaskStatus.FAILED)


class ExecutionMode(str, Enum):
    """执行模式枚举类"""

    DIRECT = "direct"  # 本地直接执行 knot-cli
    PROXY = "proxy"  # 通过 knot-proxy HTTP 服务执行


# 插件元数据
PLUGIN_NAME = "astrbot_plugin_log_analyzer"
PLUGIN_VERSION = "1.1.0"

# 配置默认值
DEFAULT_MODE = ExecutionMode.PROXY.value
DEFAULT_KNOT_CLI_PATH = "knot-cli"
DEFAULT_PROXY_URL = "http://host.docker.internal:9999"
DEFAULT_SHARED_DATA_PATH = "/shared-data"
DEFAULT_MAX_CONCURRENT = 3
DEFAULT_TIMEOUT = 300  # 5 分钟
DEFAULT_POLL_INTERVAL = 2.0
HTTP_TIMEOUT_GRACE = 30  # HTTP 客户端超时 = 任务超时 + 宽限

# 环境变量覆盖
ENV_OVERRIDES = {
    "mode": "LOGANALYZER_MODE",
    "knot_cli_path": "KNOT_CLI_PATH",
    "workspace_path": "WORKSPACE_PATH",
    "system_prompt_path": "SYSTEM_PROMPT_PATH",
    "proxy_url": "KNOT_PROXY_URL",
    "shared_data_path": "SHARED_DATA_PATH",
}

# 结果展示
MAX_RESULT_LENGTH = 3000
TRUNCATION_NOTICE = "\n\n... [结果已截断，完整内容请查看输出文件]"
SHORT_ID_LENGTH = 8
ARTIFACT_NAME_TEMPLATE = "analysis_{task_id}.txt"

# stderr 中需要保留的错误关键字
STDERR_ERROR_KEYWORDS = ("Error", "错误")

# 状态图标
STATUS_ICONS = {
    TaskStatus.PENDING.value: "⏳",
    TaskStatus.RUNNING.value: "🔄",
    TaskStatus.COMPLETED.value: "✅",
    TaskStatus.FAILED.value: "❌",
}
UNKNOWN_STATUS_ICON = "❓"

SEPARATOR = "━━━━━━━━━━━━━━━━━━━━"

# 错误代码
ERROR_CONFIG_ERROR = "CONFIG_ERROR"
ERROR_SUBMISSION = "SUBMISSION_ERROR"
ERROR_EXECUTION = "EXECUTION_ERROR"
ERROR_TIMEOUT = "ANALYSIS_TIMEOUT"
