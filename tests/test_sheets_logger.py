"""Tests for the Google Sheets interaction log."""

from __future__ import annotations

import json
import unittest
from unittest import mock

from planner.config import DEFAULT_SETTINGS
from planner.errors import LoggingFailure
from planner.sheets_logger import (
    CHAT_HEADERS,
    PLAN_HEADERS,
    SheetsClient,
    SheetsLogger,
    chat_record,
    chat_row,
    plan_record,
    plan_row,
)
from tests.stubs import FakeSheetsClient

PLAN_TAB = "Plan Generator Logs"
CHAT_TAB = "Chatbot Logs"


def _logger(client=None) -> SheetsLogger:
    return SheetsLogger(client=client, settings=DEFAULT_SETTINGS, client_factory=lambda: None)


class RecordTests(unittest.TestCase):
    def test_plan_row_matches_headers(self) -> None:
        record = plan_record(
            "Acme", "Build ML systems", is_url=False, plan="PLAN",
            job_fit=[{"requirement": "Python", "matches": True, "evidence": "x"}],
            metadata={"model": "gpt-4o", "latency": 1200},
        )
        row = plan_row(record)
        self.assertEqual(len(row), len(PLAN_HEADERS))
        self.assertTrue(row[0].endswith("Z"))
        self.assertEqual(row[1:5], ["Acme", "Build ML systems", 16, False])
        self.assertEqual(row[5:7], ["PLAN", 4])
        self.assertEqual(json.loads(row[7])[0]["requirement"], "Python")
        self.assertEqual(row[8], 1)
        self.assertEqual(json.loads(row[9])["model"], "gpt-4o")
        self.assertEqual(row[10], "")

    def test_error_record_has_empty_output(self) -> None:
        row = plan_row(plan_record("Acme", "jd", error="boom"))
        self.assertEqual(row[5:10], ["", 0, "", 0, "{}"])
        self.assertEqual(row[10], "boom")

    def test_chat_row_matches_headers(self) -> None:
        record = chat_record("hi", [{"role": "user", "content": "a"}], response="hello")
        row = chat_row(record)
        self.assertEqual(len(row), len(CHAT_HEADERS))
        self.assertEqual(row[1:6], ["hi", 2, 1, "hello", 5])


class WritePathTests(unittest.TestCase):
    def test_unconfigured_logger_skips(self) -> None:
        self.assertFalse(_logger().log_chatbot(chat_record("hi")))

    def test_appends_to_named_tabs(self) -> None:
        client = FakeSheetsClient()
        sheets = _logger(client)
        self.assertTrue(sheets.log_plan_generator(plan_record("Acme", "jd")))
        self.assertTrue(sheets.log_chatbot(chat_record("hi")))
        self.assertEqual(len(client.rows[PLAN_TAB]), 1)
        self.assertEqual(len(client.rows[CHAT_TAB]), 1)

    def test_client_error_raises_logging_failure(self) -> None:
        sheets = _logger(FakeSheetsClient(fail=True))
        with self.assertRaises(LoggingFailure):
            sheets.log_chatbot(chat_record("hi"))

    def test_background_failure_is_logged_not_raised(self) -> None:
        sheets = _logger(FakeSheetsClient(fail=True))
        with mock.patch("planner.sheets_logger.log") as fake_log:
            future = sheets.log_chat_async(chat_record("hi"))
            sheets.shutdown()
        self.assertIsInstance(future.exception(), LoggingFailure)
        fake_log.error.assert_called_once()

    def test_background_write_lands(self) -> None:
        client = FakeSheetsClient()
        sheets = _logger(client)
        sheets.log_plan_async(plan_record("Acme", "jd")).result(timeout=5)
        sheets.shutdown()
        self.assertEqual(client.rows[PLAN_TAB][0][1], "Acme")

    def test_init_writes_headers(self) -> None:
        client = FakeSheetsClient()
        self.assertTrue(_logger(client).init_sheets())
        self.assertEqual(client.headers, {PLAN_TAB: PLAN_HEADERS, CHAT_TAB: CHAT_HEADERS})

    def test_init_reports_failure(self) -> None:
        self.assertFalse(_logger(FakeSheetsClient(fail=True)).init_sheets())
        self.assertFalse(_logger().init_sheets())


class ReadPathTests(unittest.TestCase):
    def setUp(self) -> None:
        plan = plan_row(plan_record("Acme", "https://x.io/job", is_url=True, plan="P",
                                    metadata={"model": "gpt-4o", "cost": 0.01}))
        broken = list(plan)
        broken[9] = "{not json"
        chat = chat_row(chat_record("hi", [], response="hello"))
        self.client = FakeSheetsClient(rows={
            PLAN_TAB: [PLAN_HEADERS, plan, broken],
            CHAT_TAB: [CHAT_HEADERS, chat],
        })
        self.sheets = _logger(self.client)

    def test_plan_logs_skip_header_and_parse_metadata(self) -> None:
        logs = self.sheets.get_plan_logs()
        self.assertEqual(len(logs), 2)
        self.assertEqual(logs[0]["userInput"]["companyName"], "Acme")
        self.assertTrue(logs[0]["userInput"]["isUrl"])
        self.assertEqual(logs[0]["metadata"]["model"], "gpt-4o")
        self.assertEqual(logs[1]["metadata"], {})
        self.assertIsNone(logs[1]["error"])

    def test_limit(self) -> None:
        self.assertEqual(len(self.sheets.get_plan_logs(limit=1)), 1)

    def test_chat_logs(self) -> None:
        logs = self.sheets.get_chat_logs()
        self.assertEqual(logs[0]["modelOutput"], {"response": "hello", "responseLength": 5})

    def test_stats(self) -> None:
        stats = self.sheets.get_log_stats()
        self.assertEqual(stats, {"planGenerator": {"total": 2}, "chatbot": {"total": 1}})

    def test_read_error_gives_empty(self) -> None:
        self.assertEqual(_logger(FakeSheetsClient(fail=True)).get_chat_logs(), [])


class SheetsClientTests(unittest.TestCase):
    def test_append_posts_row_to_values_api(self) -> None:
        session = mock.Mock()
        SheetsClient("sheet-1", session).append_row("Chatbot Logs", ["a", 1])
        url = session.post.call_args.args[0]
        kwargs = session.post.call_args.kwargs
        self.assertTrue(url.endswith("/sheet-1/values/Chatbot%20Logs!A:Z:append"))
        self.assertEqual(kwargs["json"], {"values": [["a", 1]]})
        self.assertEqual(kwargs["params"]["valueInputOption"], "RAW")

    def test_read_rows_returns_values(self) -> None:
        session = mock.Mock()
        session.get.return_value.json.return_value = {"values": [["h"], ["r"]]}
        self.assertEqual(SheetsClient("s", session).read_rows("Tab"), [["h"], ["r"]])


if __name__ == "__main__":
    unittest.main()
