"""
值对象模块

不可变的领域数据结构。
"""

from .analysis_outcome import AnalysisOutcome

__all__ = [
    "AnalysisOutcome",
]
