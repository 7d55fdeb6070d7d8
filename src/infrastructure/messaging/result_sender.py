"""
结果发送器 - 基础设施层
将异步分析结果投递回发起会话，支持 OneBot 文件上传及通用文件消息回退。
"""

from pathlib import Path
from typing import Any

from astrbot.api.event import MessageChain
from astrbot.api.message_components import File

from ...domain.repositories.result_sender import IResultSender
from ...utils.logger import logger


class AstrBotResultSender(IResultSender):
    """
    基于 AstrBot 上下文的结果发送器

    文本通过 Context.send_message 主动发送到 unified_msg_origin 会话。
    文件上传优先调用 OneBot 的 upload_group_file / upload_private_file，
    平台不支持时回退为发送 File 消息组件。

    Attributes:
        context (Any): AstrBot 插件上下文
        session (str): 发起消息的 unified_msg_origin
        bot (Any): 平台机器人客户端（可能为 None）
    """

    def __init__(self, context: Any, session: str, bot: Any = None):
        self.context = context
        self.session = session
        self.bot = bot

    @classmethod
    def from_event(cls, context: Any, event: Any) -> "AstrBotResultSender":
        """从消息事件构建发送器"""
        return cls(context, event.unified_msg_origin, getattr(event, "bot", None))

    async def send_text(self, text: str) -> bool:
        try:
            await self.context.send_message(self.session, MessageChain().message(text))
            return True
        except Exception as e:
            logger.error(f"[ResultSender] 发送文本失败 ({self.session}): {e}")
            return False

    async def upload_group_file(
        self, group_id: str, file_path: str, filename: str
    ) -> bool:
        try:
            target = int(group_id)
        except ValueError:
            return await self._send_file_component(file_path, filename)

        if await self._call_upload(
            "upload_group_file", group_id=target, file=file_path, name=filename
        ):
            return True
        return await self._send_file_component(file_path, filename)

    async def upload_private_file(
        self, user_id: str, file_path: str, filename: str
    ) -> bool:
        try:
            target = int(user_id)
        except ValueError:
            return await self._send_file_component(file_path, filename)

        if await self._call_upload(
            "upload_private_file", user_id=target, file=file_path, name=filename
        ):
            return True
        return await self._send_file_component(file_path, filename)

    async def _call_upload(self, action: str, **params) -> bool:
        """策略 1: 调用 OneBot 上传接口"""
        if self.bot is None or not hasattr(self.bot, "call_action"):
            return False
        try:
            await self.bot.call_action(action, **params)
            logger.info(f"[ResultSender] {action} 上传成功: {params.get('name')}")
            return True
        except Exception as e:
            logger.warning(f"[ResultSender] {action} 上传失败 ({e})，尝试文件消息回退...")
            return False

    async def _send_file_component(self, file_path: str, filename: str) -> bool:
        """策略 2: 以文件消息组件发送"""
        try:
            component = File(name=filename or Path(file_path).name, file=file_path)
            await self.context.send_message(
                self.session, MessageChain(chain=[component])
            )
            return True
        except Exception as e:
            logger.error(f"[ResultSender] 文件发送最终失败: {e}")
            return False
