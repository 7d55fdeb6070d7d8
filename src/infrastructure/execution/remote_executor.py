"""
远程执行策略 - 通过 knot-proxy HTTP 服务执行

适用于插件运行在 Docker 容器中、knot-cli 运行在宿主机的场景。
"""

import asyncio

import aiohttp

from ...domain.entities.analysis_task import AnalysisTask
from ...domain.exceptions import ExecutionException, SubmissionException
from ...domain.value_objects.analysis_outcome import AnalysisOutcome
from ...shared.constants import (
    DEFAULT_POLL_INTERVAL,
    DEFAULT_TIMEOUT,
    HTTP_TIMEOUT_GRACE,
    ExecutionMode,
    TaskStatus,
)
from ...utils.logger import logger
from .base import AnalysisExecutor


class RemoteAnalysisExecutor(AnalysisExecutor):
    """
    具体实现：knot-proxy 远程执行

    1. POST {proxy_url}/analyze 提交 {request_id, log_content}
    2. 每隔 poll_interval 秒 GET {proxy_url}/status/{request_id}
    3. completed 时将 content 写入本地输出文件；failed 时抛出远程错误

    轮询中的连接错误或响应解析错误只记录日志，继续轮询。
    被取消时直接放弃轮询，远程侧的清理不受本插件控制。

    Attributes:
        proxy_url (str): 代理服务根地址
        poll_interval (float): 轮询间隔（秒）
        http_timeout (float): 单次 HTTP 请求超时（秒）
    """

    mode = ExecutionMode.PROXY.value

    def __init__(
        self,
        proxy_url: str,
        shared_data_path: str,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        http_timeout: float = DEFAULT_TIMEOUT + HTTP_TIMEOUT_GRACE,
    ):
        super().__init__(shared_data_path)
        self.proxy_url = proxy_url.rstrip("/")
        self.poll_interval = poll_interval
        self.http_timeout = http_timeout
        self._session: aiohttp.ClientSession | None = None

    def _get_session(self) -> aiohttp.ClientSession:
        """延迟创建 HTTP 会话，必须在事件循环内调用"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.http_timeout)
            )
        return self._session

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def execute(self, task: AnalysisTask, log_content: str) -> AnalysisOutcome:
        await self._submit(task, log_content)

        status_url = f"{self.proxy_url}/status/{task.id}"
        while True:
            await asyncio.sleep(self.poll_interval)

            status = await self._poll(task, status_url)
            if status is None:
                continue

            state = status.get("status")
            logger.info(f"[{task.id}] 代理任务状态: {state}")

            if state == TaskStatus.COMPLETED.value:
                content = status.get("content") or ""
                output_path = self.output_path_for(task.id)
                self._save_content(task, output_path, content)
                reported = status.get("duration_seconds")
                duration = (
                    float(reported)
                    if isinstance(reported, (int, float)) and reported > 0
                    else None
                )
                return AnalysisOutcome(
                    output_path=output_path,
                    content=content,
                    reported_duration=duration,
                )

            if state == TaskStatus.FAILED.value:
                raise ExecutionException(f"代理服务错误: {status.get('error', '')}")

            # pending / running，继续轮询

    async def _submit(self, task: AnalysisTask, log_content: str) -> None:
        analyze_url = f"{self.proxy_url}/analyze"
        logger.info(f"[{task.id}] 发送分析请求到代理: {analyze_url}")

        payload = {"request_id": task.id, "log_content": log_content}
        try:
            async with self._get_session().post(analyze_url, json=payload) as resp:
                if resp.status >= 400:
                    body = await resp.text()
                    raise SubmissionException(
                        f"代理拒绝了分析请求: HTTP {resp.status} {body[:200]}"
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise SubmissionException(f"连接代理失败: {e}") from e

    async def _poll(self, task: AnalysisTask, status_url: str) -> dict | None:
        """查询一次远程状态，瞬时错误返回 None"""
        try:
            async with self._get_session().get(status_url) as resp:
                data = await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"[{task.id}] 获取状态失败: {e}")
            return None
        except ValueError as e:
            logger.warning(f"[{task.id}] 解析状态失败: {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(f"[{task.id}] 解析状态失败: 响应不是 JSON 对象")
            return None
        return data

    def _save_content(self, task: AnalysisTask, output_path: str, content: str) -> None:
        try:
            with open(output_path, "w", encoding="utf-8") as f:
                f.write(content)
        except OSError as e:
            logger.warning(f"[{task.id}] 保存输出文件失败: {e}")
