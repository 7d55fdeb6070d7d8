"""
领域异常 - 领域层自定义异常

该模块包含插件中使用的所有领域特定异常。
任务执行过程中抛出的异常都会被捕获并写入任务的 error 字段，
只有配置异常会同步返回给调用方。
"""

from ..shared.constants import (
    ERROR_CONFIG_ERROR,
    ERROR_EXECUTION,
    ERROR_SUBMISSION,
    ERROR_TIMEOUT,
)


class DomainException(Exception):
    """所有领域错误的基础异常。"""

    def __init__(self, message: str, code: str = "DOMAIN_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)


# ============================================================================
# 分析异常
# ============================================================================


class AnalysisException(DomainException):
    """分析相关错误的基础异常。"""

    def __init__(self, message: str, code: str = "ANALYSIS_ERROR"):
        super().__init__(message, code)


class SubmissionException(AnalysisException):
    """当无法向远程代理提交分析请求时抛出。"""

    def __init__(self, message: str = "提交分析请求失败"):
        super().__init__(message, ERROR_SUBMISSION)


class ExecutionException(AnalysisException):
    """当分析进程启动失败、非零退出或远程报告失败时抛出。"""

    def __init__(self, message: str = "分析执行失败"):
        super().__init__(message, ERROR_EXECUTION)


class AnalysisTimeoutException(AnalysisException):
    """当分析超过截止时间时抛出。"""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"分析超时（超过 {timeout:g} 秒）", ERROR_TIMEOUT)


# ============================================================================
# 配置异常
# ============================================================================


class ConfigurationException(DomainException):
    """配置相关错误的基础异常。"""

    def __init__(self, message: str, code: str = ERROR_CONFIG_ERROR):
        super().__init__(message, code)


class InvalidConfigurationException(ConfigurationException):
    """当配置无效时抛出。"""

    def __init__(self, message: str = "无效的配置", key: str = ""):
        self.key = key
        super().__init__(f"{message}: {key}" if key else message, "INVALID_CONFIG")


class MissingConfigurationException(ConfigurationException):
    """当所选模式缺少必需配置时抛出。"""

    def __init__(self, key: str, env_name: str = ""):
        self.key = key
        self.env_name = env_name
        message = f"缺少必需配置: {key}"
        if env_name:
            message += f"（可通过环境变量 {env_name} 设置）"
        super().__init__(message, "MISSING_CONFIG")


# ============================================================================
# 仓储异常
# ============================================================================


class RepositoryException(DomainException):
    """仓储相关错误的基础异常。"""

    def __init__(self, message: str, code: str = "REPOSITORY_ERROR"):
        super().__init__(message, code)


class TaskNotFoundException(RepositoryException):
    """当更新一个不存在的任务时抛出。"""

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"未找到任务: {task_id}", "TASK_NOT_FOUND")


class TaskAlreadyExistsException(RepositoryException):
    """当任务 ID 已被占用时抛出。"""

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"任务 ID 已存在: {task_id}", "TASK_ALREADY_EXISTS")


class InvalidTaskTransitionException(DomainException):
    """当任务状态发生非法迁移时抛出。"""

    def __init__(self, task_id: str, current: str, target: str):
        self.task_id = task_id
        self.current = current
        self.target = target
        super().__init__(
            f"任务 {task_id} 不能从 {current} 迁移到 {target}",
            "INVALID_TASK_TRANSITION",
        )
