"""
本地执行策略 - 直接运行 knot-cli 子进程

适用于插件与 knot-cli 运行在同一主机上的场景。
"""

import asyncio
import contextlib
from typing import TextIO

from ...domain.entities.analysis_task import AnalysisTask
from ...domain.exceptions import ExecutionException
from ...domain.value_objects.analysis_outcome import AnalysisOutcome
from ...shared.constants import STDERR_ERROR_KEYWORDS, ExecutionMode
from ...utils.logger import logger
from .base import AnalysisExecutor

# 单行输出上限，knot-cli 可能输出很长的行
_STREAM_LIMIT = 4 * 1024 * 1024


def should_keep_stderr_line(line: str) -> bool:
    """
    stderr 过滤规则。

    以 "[" 开头的行视为进度信息并丢弃，除非其中包含错误关键字。
    """
    if not line.startswith("["):
        return True
    return any(keyword in line for keyword in STDERR_ERROR_KEYWORDS)


class LocalAnalysisExecutor(AnalysisExecutor):
    """
    具体实现：本地子进程执行

    以 `knot-cli chat [-w 工作区] [--system-prompt 路径] -p <日志> --codebase`
    启动子进程，stdout 与 stderr 分别逐行读取并写入输出文件。
    协程被取消（超时或插件停止）时会杀死子进程。

    Attributes:
        cli_path (str): knot-cli 可执行文件路径
        workspace_path (str): 代码工作区路径
        system_prompt_path (str): 系统提示词文件路径
    """

    mode = ExecutionMode.DIRECT.value

    def __init__(
        self,
        cli_path: str,
        shared_data_path: str,
        workspace_path: str = "",
        system_prompt_path: str = "",
    ):
        super().__init__(shared_data_path)
        self.cli_path = cli_path
        self.workspace_path = workspace_path
        self.system_prompt_path = system_prompt_path

    def build_command_args(self, log_content: str) -> list[str]:
        """构建 knot-cli 参数列表（不含可执行文件本身）"""
        args = ["chat"]
        if self.workspace_path:
            args += ["-w", self.workspace_path]
        if self.system_prompt_path:
            args += ["--system-prompt", self.system_prompt_path]
        args += ["-p", log_content, "--codebase"]
        return args

    async def execute(self, task: AnalysisTask, log_content: str) -> AnalysisOutcome:
        output_path = self.output_path_for(task.id)

        try:
            output_file = open(output_path, "w", encoding="utf-8")
        except OSError as e:
            raise ExecutionException(f"创建输出文件失败: {e}") from e

        try:
            return_code = await self._run_process(task, log_content, output_file)
        finally:
            output_file.close()

        if return_code != 0:
            if return_code < 0:
                raise ExecutionException(f"knot-cli 被信号终止: signal {-return_code}")
            raise ExecutionException(f"knot-cli 执行失败: exit status {return_code}")

        logger.info(f"[{task.id}] knot-cli 执行完成，输出文件: {output_path}")
        return AnalysisOutcome(output_path=output_path)

    async def _run_process(
        self, task: AnalysisTask, log_content: str, output_file: TextIO
    ) -> int:
        args = self.build_command_args(log_content)
        logger.info(f"[{task.id}] 启动 knot-cli: {self.cli_path} (参数 {len(args)} 个)")

        try:
            process = await asyncio.create_subprocess_exec(
                self.cli_path,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                limit=_STREAM_LIMIT,
            )
        except OSError as e:
            raise ExecutionException(f"启动 knot-cli 失败: {e}") from e

        try:
            await asyncio.gather(
                self._pump(process.stdout, output_file, None),
                self._pump(process.stderr, output_file, should_keep_stderr_line),
            )
            return await process.wait()
        finally:
            if process.returncode is None:
                logger.warning(f"[{task.id}] 终止 knot-cli 子进程 (pid={process.pid})")
                with contextlib.suppress(ProcessLookupError):
                    process.kill()
                await process.wait()

    @staticmethod
    async def _pump(stream: asyncio.StreamReader, output_file: TextIO, keep) -> None:
        """逐行读取一个输出流并写入文件"""
        while True:
            raw = await stream.readline()
            if not raw:
                break
            line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
            if keep is not None and not keep(line):
                continue
            output_file.write(line + "\n")
            output_file.flush()
