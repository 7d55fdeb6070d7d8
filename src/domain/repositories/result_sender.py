"""
结果投递接口 - 平台无关的抽象
"""

from abc import ABC, abstractmethod


class IResultSender(ABC):
    """
    结果投递接口

    绑定到一次请求的会话，负责把异步结果送回发起者。
    实现不应抛出异常，失败时返回 False。
    """

    @abstractmethod
    async def send_text(self, text: str) -> bool:
        """向发起会话发送文本消息"""
        pass

    @abstractmethod
    async def upload_group_file(
        self, group_id: str, file_path: str, filename: str
    ) -> bool:
        """上传群文件"""
        pass

    @abstractmethod
    async def upload_private_file(
        self, user_id: str, file_path: str, filename: str
    ) -> bool:
        """向用户私聊上传文件"""
        pass
