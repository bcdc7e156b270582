#!/usr/bin/env python3
"""Inspect and initialise the Google Sheets interaction log.

    python manage_logs.py init
    python manage_logs.py stats
    python manage_logs.py plans --limit 20
    python manage_logs.py chats --limit 20
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from planner.log import get_logger
from planner.sheets_logger import SheetsLogger

log = get_logger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Google Sheets interaction log tools")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("init", help="Write header rows on both log tabs")
    sub.add_parser("stats", help="Count logged plan and chat interactions")
    for name, help_text in (("plans", "Show plan generator logs"), ("chats", "Show chatbot logs")):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("--limit", type=int, default=20)
    return parser


def main(argv: list[str] | None = None, sheets: SheetsLogger | None = None) -> int:
    args = _build_parser().parse_args(argv)
    sheets = sheets or SheetsLogger()

    if args.command == "init":
        return 0 if sheets.init_sheets() else 1

    if args.command == "stats":
        stats = sheets.get_log_stats()
        print(f"Plan generator interactions: {stats['planGenerator']['total']}")
        print(f"Chatbot interactions:        {stats['chatbot']['total']}")
        return 0

    rows = sheets.get_plan_logs(args.limit) if args.command == "plans" else sheets.get_chat_logs(args.limit)
    if not rows:
        log.info("No %s logs found (is Google Sheets configured?)", args.command[:-1])
    for row in rows:
        print(json.dumps(row, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
