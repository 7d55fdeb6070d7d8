"""
领域服务 - 平台无关的业务逻辑

- report_formatter: 用户回复文本的生成
"""

from . import report_formatter

__all__ = [
    "report_formatter",
]
