import asyncio
import os
import stat
import sys
import tempfile
import unittest

# Add paths
plugin_root = os.path.abspath(os.path.join(os.path.dirname(__file__), "../../../"))
if plugin_root not in sys.path:
    sys.path.insert(0, plugin_root)

from src.application.services.log_analysis_service import (  # noqa: E402
    LogAnalysisService,
)
from src.domain.exceptions import (  # noqa: E402
    ConfigurationException,
    ExecutionException,
)
from src.domain.repositories.result_sender import IResultSender  # noqa: E402
from src.domain.value_objects.analysis_outcome import AnalysisOutcome  # noqa: E402
from src.infrastructure.config.config_manager import ConfigManager  # noqa: E402
from src.infrastructure.execution.base import AnalysisExecutor  # noqa: E402
from src.infrastructure.execution.local_executor import (  # noqa: E402
    LocalAnalysisExecutor,
)
from src.infrastructure.persistence.task_registry import (  # noqa: E402
    InMemoryTaskRegistry,
)
from src.infrastructure.reporting.result_finalizer import (  # noqa: E402
    ResultFinalizer,
)
from src.infrastructure.resilience.concurrency_limiter import (  # noqa: E402
    ConcurrencyLimiter,
)
from src.shared.constants import TaskStatus  # noqa: E402

_ORDER = {
    TaskStatus.PENDING: 0,
    TaskStatus.RUNNING: 1,
    TaskStatus.COMPLETED: 2,
    TaskStatus.FAILED: 2,
}


class RecordingSender(IResultSender):
    def __init__(self):
        self.texts = []

    async def send_text(self, text: str) -> bool:
        self.texts.append(text)
        return True

    async def upload_group_file(self, group_id, file_path, filename) -> bool:
        return True

    async def upload_private_file(self, user_id, file_path, filename) -> bool:
        return True


class FakeExecutor(AnalysisExecutor):
    """
    可控的执行策略：
    - delay: 每次执行的耗时
    - gates: 按任务 ID 放行的事件，存在时等待事件而不是 sleep
    - error: 执行时抛出的异常
    """

    mode = "direct"

    def __init__(self, shared_data_path, delay=0.0, error=None):
        super().__init__(shared_data_path)
        self.delay = delay
        self.error = error
        self.gates: dict[str, asyncio.Event] = {}
        self.running = 0
        self.max_running = 0
        self.closed = False

    async def execute(self, task, log_content):
        self.running += 1
        self.max_running = max(self.max_running, self.running)
        try:
            gate = self.gates.get(task.id)
            if gate is not None:
                await gate.wait()
            else:
                await asyncio.sleep(self.delay)
            if self.error is not None:
                raise self.error
            return AnalysisOutcome(
                output_path=self.output_path_for(task.id),
                content=f"analysis of {log_content}",
            )
        finally:
            self.running -= 1

    async def close(self):
        self.closed = True


async def wait_until(predicate, timeout=5.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("等待条件超时")
        await asyncio.sleep(0.005)


class LogAnalysisServiceTestBase(unittest.IsolatedAsyncioTestCase):
    capacity = 3

    async def asyncSetUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.data_dir = self._tmp.name
        self.config_manager = ConfigManager(
            {"mode": "direct", "workspace_path": "/repo", "max_concurrent": 3},
            environ={},
        )
        self.registry = InMemoryTaskRegistry()
        self.limiter = ConcurrencyLimiter(name="test", capacity=self.capacity)
        self.executor = FakeExecutor(self.data_dir)
        self.sender = RecordingSender()
        self._ids = iter(f"TASK{i:04d}" for i in range(1, 1000))
        self.service = self._build_service(self.executor)

    async def asyncTearDown(self):
        await self.service.shutdown()
        self._tmp.cleanup()

    def _build_service(self, executor):
        return LogAnalysisService(
            self.config_manager,
            self.registry,
            self.limiter,
            executor,
            ResultFinalizer(self.registry),
            id_factory=lambda: next(self._ids),
        )

    def status_of(self, task_id):
        return self.registry.get(task_id).status


class TestSubmit(LogAnalysisServiceTestBase):
    async def test_task_is_pending_immediately(self):
        task = self.service.submit("test error", "u1", "100", self.sender)

        self.assertEqual(task.id, "TASK0001")
        self.assertEqual(task.status, TaskStatus.PENDING)
        self.assertEqual(self.status_of(task.id), TaskStatus.PENDING)
        self.assertEqual(self.service.in_flight, 1)

        await self.service.wait_idle()

        stored = self.registry.get(task.id)
        self.assertEqual(stored.status, TaskStatus.COMPLETED)
        self.assertIsNotNone(stored.duration)
        self.assertEqual(len(self.sender.texts), 1)
        self.assertIn("analysis of test error", self.sender.texts[0])

    async def test_incomplete_config_creates_no_task(self):
        self.config_manager.set("workspace_path", "")

        with self.assertRaises(ConfigurationException):
            self.service.submit("test error", "u1", "100", self.sender)

        self.assertEqual(len(self.registry), 0)
        self.assertEqual(self.service.in_flight, 0)

    async def test_list_and_get(self):
        first = self.service.submit("a", "u1", "", self.sender)
        self.service.submit("b", "u2", "", self.sender)

        self.assertEqual([t.id for t in self.service.list_tasks("u1")], [first.id])
        self.assertEqual(self.service.get_task(first.id).requester_id, "u1")
        self.assertIsNone(self.service.get_task("NOPE0000"))
        await self.service.wait_idle()


class TestCapacity(LogAnalysisServiceTestBase):
    capacity = 1

    async def test_second_task_waits_for_free_slot(self):
        self.executor.gates = {"TASK0001": asyncio.Event(), "TASK0002": asyncio.Event()}
        first = self.service.submit("a", "u1", "", self.sender)
        second = self.service.submit("b", "u1", "", self.sender)

        await wait_until(lambda: self.status_of(first.id) == TaskStatus.RUNNING)
        await asyncio.sleep(0.05)
        self.assertEqual(self.status_of(second.id), TaskStatus.PENDING)
        self.assertIsNone(self.registry.get(second.id).started_at)

        self.executor.gates[first.id].set()
        await wait_until(lambda: self.status_of(second.id) == TaskStatus.RUNNING)
        self.assertEqual(self.status_of(first.id), TaskStatus.COMPLETED)

        self.executor.gates[second.id].set()
        await self.service.wait_idle()
        self.assertEqual(self.status_of(second.id), TaskStatus.COMPLETED)


class TestConcurrencyBound(LogAnalysisServiceTestBase):
    capacity = 2

    async def test_running_never_exceeds_capacity(self):
        self.executor.delay = 0.05
        tasks = [
            self.service.submit(f"log {i}", "u1", "", self.sender) for i in range(6)
        ]

        peak_running = 0

        async def observe():
            nonlocal peak_running
            while self.service.in_flight:
                running = sum(
                    1 for t in tasks if self.status_of(t.id) == TaskStatus.RUNNING
                )
                peak_running = max(peak_running, running)
                await asyncio.sleep(0.002)

        await asyncio.gather(observe(), self.service.wait_idle())

        self.assertLessEqual(peak_running, 2)
        self.assertEqual(self.limiter.peak, 2)
        self.assertLessEqual(self.executor.max_running, 2)
        self.assertEqual(self.limiter.active, 0)
        for t in tasks:
            self.assertEqual(self.status_of(t.id), TaskStatus.COMPLETED)
        self.assertEqual(len(self.sender.texts), 6)

    async def test_status_changes_are_monotonic(self):
        self.executor.delay = 0.03
        tasks = [self.service.submit("x", "u1", "", self.sender) for _ in range(4)]
        seen = {t.id: [] for t in tasks}

        async def observe():
            while self.service.in_flight:
                for t in tasks:
                    seen[t.id].append(self.status_of(t.id))
                await asyncio.sleep(0.002)

        await asyncio.gather(observe(), self.service.wait_idle())

        for statuses in seen.values():
            orders = [_ORDER[s] for s in statuses]
            self.assertEqual(orders, sorted(orders))


class TestFailures(LogAnalysisServiceTestBase):
    async def test_timeout_fails_task(self):
        self.executor.delay = 5
        self.service.timeout = 0.1

        task = self.service.submit("slow", "u1", "", self.sender)
        await self.service.wait_idle()

        stored = self.registry.get(task.id)
        self.assertEqual(stored.status, TaskStatus.FAILED)
        self.assertIn("超时", stored.error)
        self.assertEqual(self.executor.running, 0)
        self.assertEqual(self.limiter.active, 0)
        self.assertEqual(len(self.sender.texts), 1)
        self.assertIn("❌ 分析失败", self.sender.texts[0])

    async def test_execution_error_fails_task(self):
        self.executor.error = ExecutionException("knot-cli 执行失败: exit status 1")

        task = self.service.submit("x", "u1", "", self.sender)
        await self.service.wait_idle()

        stored = self.registry.get(task.id)
        self.assertEqual(stored.status, TaskStatus.FAILED)
        self.assertEqual(stored.error, "knot-cli 执行失败: exit status 1")

    async def test_unexpected_error_fails_only_that_task(self):
        self.executor.gates = {"TASK0002": asyncio.Event()}
        self.executor.error = RuntimeError("boom")

        broken = self.service.submit("x", "u1", "", self.sender)
        await self.service.wait_idle()
        self.assertEqual(self.status_of(broken.id), TaskStatus.FAILED)
        self.assertIn("boom", self.registry.get(broken.id).error)

        self.executor.error = None
        healthy = self.service.submit("y", "u1", "", self.sender)
        self.executor.gates[healthy.id].set()
        await self.service.wait_idle()
        self.assertEqual(self.status_of(healthy.id), TaskStatus.COMPLETED)

    async def test_shutdown_cancels_running_tasks(self):
        self.executor.delay = 30

        task = self.service.submit("x", "u1", "", self.sender)
        await wait_until(lambda: self.status_of(task.id) == TaskStatus.RUNNING)

        await self.service.shutdown()

        stored = self.registry.get(task.id)
        self.assertEqual(stored.status, TaskStatus.FAILED)
        self.assertEqual(stored.error, "分析任务已取消")
        self.assertTrue(self.executor.closed)
        self.assertEqual(self.service.in_flight, 0)


FAKE_KNOT_CLI = """\
import sys

args = sys.argv[1:]
prompt = args[args.index("-p") + 1]
print("analysis result")
sys.stderr.write("[1/2] loading\\n")
"""


@unittest.skipIf(os.name == "nt", "需要 POSIX shebang 支持")
class TestLocalEndToEnd(LogAnalysisServiceTestBase):
    async def test_direct_mode_scenario(self):
        cli_path = os.path.join(self.data_dir, "fake-knot-cli")
        with open(cli_path, "w", encoding="utf-8") as f:
            f.write(f"#!{sys.executable}\n")
            f.write(FAKE_KNOT_CLI)
        os.chmod(cli_path, os.stat(cli_path).st_mode | stat.S_IEXEC)

        executor = LocalAnalysisExecutor(
            cli_path=cli_path, shared_data_path=self.data_dir, workspace_path="/repo"
        )
        self.service = self._build_service(executor)

        task = self.service.submit("test error", "u1", "", self.sender)
        self.assertEqual(self.status_of(task.id), TaskStatus.PENDING)

        await self.service.wait_idle()

        self.assertEqual(self.status_of(task.id), TaskStatus.COMPLETED)
        artifact = os.path.join(self.data_dir, f"analysis_{task.id}.txt")
        with open(artifact, encoding="utf-8") as f:
            self.assertEqual(f.read(), "analysis result\n")

        self.assertEqual(len(self.sender.texts), 1)
        reply = self.sender.texts[0]
        self.assertIn("✅ 分析完成", reply)
        self.assertIn("analysis result", reply)
        self.assertNotIn("结果已截断", reply)


if __name__ == "__main__":
    unittest.main()
