"""
分析结果值对象

执行策略（本地 / 远程）统一返回该对象，使结果处理与策略无关。
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class AnalysisOutcome:
    """
    一次成功执行的产出。

    Attributes:
        output_path (str): 输出文件路径，包含未截断的完整结果
        content (str | None): 已获取的结果文本；为 None 时需从输出文件读取
        reported_duration (float | None): 远程服务上报的耗时（秒）
    """

    output_path: str
    content: str | None = None
    reported_duration: float | None = None
