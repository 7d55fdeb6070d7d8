"""
领域实体

该模块导出所有领域实体类，包括:
- AnalysisTask: 日志分析任务聚合根
"""

from .analysis_task import AnalysisTask

__all__ = [
    "AnalysisTask",
]
