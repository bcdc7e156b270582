"""Tests for the log management CLI."""

from __future__ import annotations

import io
import json
import unittest
from contextlib import redirect_stdout

from manage_logs import main
from planner.config import DEFAULT_SETTINGS
from planner.sheets_logger import CHAT_HEADERS, PLAN_HEADERS, SheetsLogger, chat_record, chat_row
from tests.stubs import FakeSheetsClient


def _sheets(client) -> SheetsLogger:
    return SheetsLogger(client=client, settings=DEFAULT_SETTINGS, client_factory=lambda: None)


class ManageLogsTests(unittest.TestCase):
    def test_init(self) -> None:
        client = FakeSheetsClient()
        self.assertEqual(main(["init"], sheets=_sheets(client)), 0)
        self.assertEqual(client.headers["Plan Generator Logs"], PLAN_HEADERS)

    def test_init_unconfigured_fails(self) -> None:
        self.assertEqual(main(["init"], sheets=_sheets(None)), 1)

    def test_stats(self) -> None:
        client = FakeSheetsClient(rows={"Chatbot Logs": [CHAT_HEADERS, chat_row(chat_record("hi"))]})
        out = io.StringIO()
        with redirect_stdout(out):
            self.assertEqual(main(["stats"], sheets=_sheets(client)), 0)
        self.assertIn("Chatbot interactions:        1", out.getvalue())
        self.assertIn("Plan generator interactions: 0", out.getvalue())

    def test_chats_prints_json(self) -> None:
        client = FakeSheetsClient(rows={"Chatbot Logs": [CHAT_HEADERS, chat_row(chat_record("hi", response="yo"))]})
        out = io.StringIO()
        with redirect_stdout(out):
            main(["chats", "--limit", "5"], sheets=_sheets(client))
        self.assertEqual(json.loads(out.getvalue())["modelOutput"]["response"], "yo")


if __name__ == "__main__":
    unittest.main()
