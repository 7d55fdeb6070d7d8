# 基础设施层
# 配置
from . import config
# 执行策略
from . import execution
# 持久化
from . import persistence
# 弹性/并发控制
from . import resilience

__all__ = [
    "config",
    "execution",
    "persistence",
    "resilience",
]
