"""
通用工具函数模块
包含短 ID 生成、结果文本字段提取及截断等纯函数
"""

import uuid

from ..shared.constants import (
    ARTIFACT_NAME_TEMPLATE,
    MAX_RESULT_LENGTH,
    SHORT_ID_LENGTH,
    STATUS_ICONS,
    TRUNCATION_NOTICE,
    UNKNOWN_STATUS_ICON,
)


def generate_short_id() -> str:
    """
    生成用于展示的短任务 ID。

    取 UUID4 的前 8 位并转为大写。不会与已有任务做冲突检查。

    Returns:
        str: 8 位大写十六进制字符串
    """
    return str(uuid.uuid4())[:SHORT_ID_LENGTH].upper()


def artifact_filename(task_id: str) -> str:
    """输出文件名，由任务 ID 唯一确定"""
    return ARTIFACT_NAME_TEMPLATE.format(task_id=task_id)


def extract_request_id(text: str | None) -> str:
    """
    从分析结果中提取 requestID。

    逐行扫描，找到第一行包含 "requestid"（不区分大小写）的内容，
    取其最后一个冒号之后的部分。该函数对任何输入都不会抛出异常。

    Args:
        text (str | None): 分析结果全文

    Returns:
        str: 提取到的 ID，未找到时返回空字符串
    """
    if not text:
        return ""

    for line in text.split("\n"):
        if "requestid" not in line.lower():
            continue
        parts = line.split(":")
        if len(parts) >= 2:
            return parts[-1].strip()
    return ""


def truncate_result(
    text: str, max_length: int = MAX_RESULT_LENGTH
) -> tuple[str, bool]:
    """
    截断过长的结果文本以便在聊天中展示。

    长度恰好等于上限时不截断。

    Returns:
        tuple[str, bool]: (展示文本, 是否发生截断)
    """
    if len(text) <= max_length:
        return text, False
    return text[:max_length] + TRUNCATION_NOTICE, True


def format_duration(seconds: float | None) -> str:
    """将耗时格式化为 "12.50s" 形式"""
    if seconds is None:
        return "-"
    return f"{seconds:.2f}s"


def format_elapsed(seconds: float) -> str:
    """将经过时间格式化为 "1m5s" 形式，精确到秒"""
    total = max(0, int(round(seconds)))
    minutes, secs = divmod(total, 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h{minutes}m{secs}s"
    if minutes:
        return f"{minutes}m{secs}s"
    return f"{secs}s"


def get_status_icon(status: str) -> str:
    """状态对应的 emoji"""
    return STATUS_ICONS.get(status, UNKNOWN_STATUS_ICON)


def extract_command_args(message_str: str, command_names: tuple[str, ...]) -> str:
    """
    去掉消息开头的指令名，返回其余全部文本。

    日志内容可能包含空格与换行，因此不使用框架的按空格分参。
    """
    text = (message_str or "").strip().lstrip("/").strip()
    parts = text.split(maxsplit=1)
    if parts and parts[0] in command_names:
        return parts[1].strip() if len(parts) > 1 else ""
    return text
