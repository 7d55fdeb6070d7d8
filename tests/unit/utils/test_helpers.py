import os
import sys
import unittest

# Add paths
plugin_root = os.path.abspath(os.path.join(os.path.dirname(__file__), "../../../"))
if plugin_root not in sys.path:
    sys.path.insert(0, plugin_root)

from src.shared.constants import MAX_RESULT_LENGTH, TRUNCATION_NOTICE  # noqa: E402
from src.utils.helpers import (  # noqa: E402
    artifact_filename,
    extract_command_args,
    extract_request_id,
    format_duration,
    format_elapsed,
    generate_short_id,
    get_status_icon,
    truncate_result,
)


class TestShortId(unittest.TestCase):
    def test_format(self):
        task_id = generate_short_id()
        self.assertEqual(len(task_id), 8)
        self.assertEqual(task_id, task_id.upper())
        int(task_id, 16)  # 十六进制

    def test_ids_differ(self):
        ids = {generate_short_id() for _ in range(200)}
        self.assertGreater(len(ids), 195)

    def test_artifact_filename(self):
        self.assertEqual(artifact_filename("ABCD1234"), "analysis_ABCD1234.txt")


class TestExtractRequestId(unittest.TestCase):
    def test_extracts_value_after_colon(self):
        text = "分析结果\nRequestID: abc-123\n其他内容"
        self.assertEqual(extract_request_id(text), "abc-123")

    def test_case_insensitive_and_first_match(self):
        text = "requestid: first\nREQUESTID: second"
        self.assertEqual(extract_request_id(text), "first")

    def test_takes_last_colon_segment(self):
        self.assertEqual(extract_request_id("ts 12:00 requestId: xyz"), "xyz")

    def test_no_match_returns_empty(self):
        self.assertEqual(extract_request_id("nothing here"), "")
        self.assertEqual(extract_request_id(""), "")
        self.assertEqual(extract_request_id(None), "")

    def test_matching_line_without_colon_is_skipped(self):
        self.assertEqual(extract_request_id("requestid missing\nRequestId: ok"), "ok")


class TestTruncateResult(unittest.TestCase):
    def test_exact_limit_is_not_truncated(self):
        text = "a" * MAX_RESULT_LENGTH
        display, truncated = truncate_result(text)
        self.assertFalse(truncated)
        self.assertEqual(display, text)

    def test_over_limit_is_truncated_with_notice(self):
        text = "b" * (MAX_RESULT_LENGTH + 1)
        display, truncated = truncate_result(text)
        self.assertTrue(truncated)
        self.assertEqual(display, text[:MAX_RESULT_LENGTH] + TRUNCATION_NOTICE)
        self.assertTrue(text.startswith(display[:MAX_RESULT_LENGTH]))


class TestFormatting(unittest.TestCase):
    def test_format_duration(self):
        self.assertEqual(format_duration(12.5), "12.50s")
        self.assertEqual(format_duration(None), "-")

    def test_format_elapsed(self):
        self.assertEqual(format_elapsed(4.4), "4s")
        self.assertEqual(format_elapsed(65), "1m5s")
        self.assertEqual(format_elapsed(3725), "1h2m5s")

    def test_status_icons(self):
        self.assertEqual(get_status_icon("completed"), "✅")
        self.assertEqual(get_status_icon("weird"), "❓")


class TestExtractCommandArgs(unittest.TestCase):
    def test_strips_command_and_keeps_rest(self):
        text = "/analyze [component] sendRequest request: a b\nline2"
        self.assertEqual(
            extract_command_args(text, ("analyze",)),
            "[component] sendRequest request: a b\nline2",
        )

    def test_command_only(self):
        self.assertEqual(extract_command_args("analyze", ("analyze",)), "")
        self.assertEqual(extract_command_args("", ("analyze",)), "")

    def test_alias(self):
        self.assertEqual(
            extract_command_args("日志分析 test error", ("analyze", "日志分析")),
            "test error",
        )


if __name__ == "__main__":
    unittest.main()
