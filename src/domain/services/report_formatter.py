"""
回复格式化 - 生成发送给用户的文本

平台无关的纯函数集合，只依赖任务实体与常量。
"""

from ...shared.constants import SEPARATOR
from ...utils.helpers import (
    format_duration,
    format_elapsed,
    get_status_icon,
)
from ..entities.analysis_task import AnalysisTask

USAGE_EXAMPLE = "/analyze [component] sendRequest request: ..."


def format_help(mode: str, proxy_url: str = "") -> str:
    """帮助信息"""
    mode_info = f"模式: {mode}"
    if proxy_url:
        mode_info += f" ({proxy_url})"

    return (
        "🔍 日志分析插件\n"
        f"{SEPARATOR}\n"
        "基于 knot-cli 的 AI 日志分析\n"
        f"{mode_info}\n\n"
        "可用命令:\n\n"
        "📊 /analyze <日志内容>\n"
        "   使用 AI 分析给定的错误日志\n\n"
        "📋 /analyzestatus [任务ID]\n"
        "   查看分析任务状态\n"
        "   不带任务ID时列出你的全部任务\n\n"
        "❓ /analyzehelp\n"
        "   显示本帮助\n\n"
        "示例:\n"
        f"  {USAGE_EXAMPLE}"
    )


def format_usage() -> str:
    """缺少日志内容时的用法提示"""
    return (
        "❌ 请提供需要分析的日志内容\n\n"
        "用法: /analyze <日志内容>\n"
        f"示例: {USAGE_EXAMPLE}"
    )


def format_config_error(message: str) -> str:
    return f"❌ 插件配置不完整: {message}"


def format_task_created(task: AnalysisTask, log_length: int, mode: str) -> str:
    """任务创建确认"""
    return (
        "🔍 分析任务已创建\n"
        f"{SEPARATOR}\n"
        f"📋 任务ID: {task.id}\n"
        f"📝 日志长度: {log_length} 字符\n"
        f"🔧 模式: {mode}\n"
        "⏳ 状态: 排队等待分析...\n\n"
        f"使用 /analyzestatus {task.id} 查看进度"
    )


def format_success(
    task: AnalysisTask, output_path: str, display_text: str, request_id: str = ""
) -> str:
    """分析成功报告"""
    lines = [
        "✅ 分析完成",
        SEPARATOR,
        f"📋 任务ID: {task.id}",
        f"⏱️ 耗时: {format_duration(task.duration)}",
    ]
    if request_id:
        lines.append(f"🔑 Request ID: {request_id}")
    lines += [
        f"📁 输出文件: {output_path}",
        SEPARATOR,
        "",
        display_text,
    ]
    return "\n".join(lines)


def format_failure(task: AnalysisTask) -> str:
    """分析失败报告"""
    return (
        "❌ 分析失败\n"
        f"{SEPARATOR}\n"
        f"📋 任务ID: {task.id}\n"
        f"⏱️ 耗时: {format_duration(task.duration)}\n"
        f"❌ 错误: {task.error}"
    )


def format_read_error(task: AnalysisTask, output_path: str, error: str) -> str:
    """分析完成但读取结果失败"""
    return (
        "⚠️ 分析已完成，但读取结果失败\n"
        f"📋 任务ID: {task.id}\n"
        f"📁 输出文件: {output_path}\n"
        f"❌ 读取错误: {error}"
    )


def format_task_status(task: AnalysisTask, now: float | None = None) -> str:
    """单个任务的状态"""
    status = task.status.value
    if task.is_terminal:
        timing = f"⏱️ 耗时: {format_duration(task.duration)}"
    elif task.started_at is None:
        timing = f"⏱️ 已排队: {format_elapsed(task.elapsed(now))}"
    else:
        timing = f"⏱️ 已运行: {format_elapsed(task.elapsed(now))}"

    text = (
        "📊 任务状态\n"
        f"{SEPARATOR}\n"
        f"📋 任务ID: {task.id}\n"
        f"{get_status_icon(status)} 状态: {status}\n"
        f"{timing}"
    )
    if task.error:
        text += f"\n❌ 错误: {task.error}"
    return text


def format_task_not_found(task_id: str) -> str:
    return f"❌ 未找到任务: {task_id}"


def format_task_list(tasks: list[AnalysisTask]) -> str:
    """发起者的全部任务，按创建时间排序"""
    if not tasks:
        return "📊 你还没有分析任务"

    lines = ["📊 你的分析任务", SEPARATOR]
    for task in sorted(tasks, key=lambda t: t.created_at):
        status = task.status.value
        lines.append(f"{get_status_icon(status)} {task.id}: {status}")
    return "\n".join(lines)
