# 应用层 - 用例
from .services.log_analysis_service import LogAnalysisService

__all__ = ["LogAnalysisService"]
