"""
并发限制器 - 控制同时执行的分析数

固定容量的准入闸门，没有优先级，准入顺序取决于 asyncio 的等待队列。
"""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

from ...utils.logger import logger


@dataclass
class ConcurrencyLimiter:
    """
    计数信号量形式的并发限制器。

    任何执行策略在启动子进程或提交 HTTP 请求之前都必须先获取槽位，
    并在所有退出路径（包括异常、超时、取消）上恰好释放一次。
    推荐使用 slot() 上下文管理器。
    """

    name: str
    capacity: int

    # 内部状态
    _semaphore: asyncio.Semaphore = field(init=False)
    _active: int = field(default=0, init=False)
    _waiting: int = field(default=0, init=False)
    _peak: int = field(default=0, init=False)

    def __post_init__(self):
        """初始化信号量。"""
        if self.capacity < 1:
            raise ValueError(f"并发容量必须大于 0: {self.capacity}")
        self._semaphore = asyncio.Semaphore(self.capacity)

    async def acquire(self) -> None:
        """等待直到有空闲槽位。没有超时。"""
        self._waiting += 1
        try:
            await self._semaphore.acquire()
        finally:
            self._waiting -= 1
        self._active += 1
        self._peak = max(self._peak, self._active)
        logger.debug(
            f"[{self.name}] 获取槽位 ({self._active}/{self.capacity}, 等待 {self._waiting})"
        )

    def release(self) -> None:
        """归还一个槽位。"""
        if self._active <= 0:
            raise RuntimeError(f"[{self.name}] release() 调用次数多于 acquire()")
        self._active -= 1
        self._semaphore.release()
        logger.debug(f"[{self.name}] 释放槽位 ({self._active}/{self.capacity})")

    @asynccontextmanager
    async def slot(self):
        """获取一个槽位，离开上下文时保证释放。"""
        await self.acquire()
        try:
            yield
        finally:
            self.release()

    @property
    def active(self) -> int:
        """当前占用的槽位数。"""
        return self._active

    @property
    def waiting(self) -> int:
        """正在排队等待的请求数。"""
        return self._waiting

    @property
    def peak(self) -> int:
        """历史最高并发数。"""
        return self._peak
