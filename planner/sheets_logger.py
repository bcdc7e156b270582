"""Append-only interaction log kept in a Google Sheet.

Writes go through a background executor and are never awaited by request
handlers; any failure ends up in the diagnostic log and nowhere else.
"""
from __future__ import annotations

import json
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Callable
from urllib.parse import quote

from planner.config import get_env, load_settings
from planner.errors import LoggingFailure
from planner.log import get_logger
from planner.models import ChatLogRecord, PlanLogRecord

log = get_logger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
API_BASE = "https://sheets.googleapis.com/v4/spreadsheets"

PLAN_HEADERS = [
    "Timestamp", "Company Name", "Job Description", "Job Description Length", "Is URL",
    "Plan", "Plan Length", "Job Fit", "Job Fit Length", "Metadata", "Error",
]
CHAT_HEADERS = [
    "Timestamp", "Message", "Message Length", "Conversation History Length",
    "Response", "Response Length", "Metadata", "Error",
]


class SheetsClient:
    """Minimal Sheets v4 values client over an authorized requests session."""

    def __init__(self, spreadsheet_id: str, session: Any, timeout: float = 15.0) -> None:
        self.spreadsheet_id = spreadsheet_id
        self.session = session
        self.timeout = timeout

    @classmethod
    def from_service_account(cls, spreadsheet_id: str, credentials_json: str) -> "SheetsClient":
        from google.auth.transport.requests import AuthorizedSession
        from google.oauth2 import service_account

        info = json.loads(credentials_json)
        credentials = service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
        return cls(spreadsheet_id, AuthorizedSession(credentials))

    def _url(self, range_: str, suffix: str = "") -> str:
        return f"{API_BASE}/{self.spreadsheet_id}/values/{quote(range_, safe='!:')}{suffix}"

    def append_row(self, tab: str, values: list[Any]) -> None:
        r = self.session.post(
            self._url(f"{tab}!A:Z", ":append"),
            params={"valueInputOption": "RAW", "insertDataOption": "INSERT_ROWS"},
            json={"values": [values]},
            timeout=self.timeout,
        )
        r.raise_for_status()

    def update_row(self, tab: str, values: list[Any], cell: str = "A1") -> None:
        r = self.session.put(
            self._url(f"{tab}!{cell}"),
            params={"valueInputOption": "RAW"},
            json={"values": [values]},
            timeout=self.timeout,
        )
        r.raise_for_status()

    def read_rows(self, tab: str) -> list[list[Any]]:
        r = self.session.get(self._url(f"{tab}!A:Z"), timeout=self.timeout)
        r.raise_for_status()
        return r.json().get("values", [])


def get_sheets_client() -> SheetsClient | None:
    """Client from env credentials, or None when logging is not configured."""
    credentials_json = get_env("GOOGLE_SERVICE_ACCOUNT_CREDENTIALS")
    spreadsheet_id = get_env("GOOGLE_SHEET_ID")
    if not credentials_json or not spreadsheet_id:
        log.debug("Google Sheets not configured, interaction logging disabled")
        return None
    try:
        return SheetsClient.from_service_account(spreadsheet_id, credentials_json)
    except Exception as exc:
        log.error("Could not initialise Google Sheets client: %s", exc)
        return None


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _cell(row: list[Any], idx: int) -> Any:
    return row[idx] if idx < len(row) else ""


def _parse_metadata(raw: Any) -> dict[str, Any]:
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as exc:
        log.warning("Unparseable metadata cell in log sheet: %s", exc)
        return {}
    return data if isinstance(data, dict) else {}


def plan_record(
    company_name: str,
    job_description: str,
    is_url: bool = False,
    plan: str = "",
    job_fit: list[dict[str, Any]] | None = None,
    metadata: dict[str, Any] | None = None,
    error: str | None = None,
) -> PlanLogRecord:
    job_fit_text = json.dumps(job_fit) if job_fit else ""
    return PlanLogRecord(
        timestamp=_now(),
        company_name=company_name or "",
        job_description=job_description or "",
        job_description_length=len(job_description or ""),
        is_url=bool(is_url),
        plan=plan or "",
        plan_length=len(plan or ""),
        job_fit=job_fit_text,
        job_fit_length=len(job_fit or []),
        metadata=metadata or {},
        error=error,
    )


def chat_record(
    message: str,
    history: list[Any] | None = None,
    response: str = "",
    metadata: dict[str, Any] | None = None,
    error: str | None = None,
) -> ChatLogRecord:
    return ChatLogRecord(
        timestamp=_now(),
        message=message or "",
        message_length=len(message or ""),
        conversation_history_length=len(history or []),
        response=response or "",
        response_length=len(response or ""),
        metadata=metadata or {},
        error=error,
    )


def plan_row(record: PlanLogRecord) -> list[Any]:
    return [
        record.timestamp,
        record.company_name,
        record.job_description,
        record.job_description_length,
        record.is_url,
        record.plan,
        record.plan_length,
        record.job_fit,
        record.job_fit_length,
        json.dumps(record.metadata),
        record.error or "",
    ]


def chat_row(record: ChatLogRecord) -> list[Any]:
    return [
        record.timestamp,
        record.message,
        record.message_length,
        record.conversation_history_length,
        record.response,
        record.response_length,
        json.dumps(record.metadata),
        record.error or "",
    ]


def plan_log_from_row(row: list[Any]) -> dict[str, Any]:
    return {
        "timestamp": _cell(row, 0) or "",
        "userInput": {
            "companyName": _cell(row, 1) or "",
            "jobDescription": _cell(row, 2) or "",
            "jobDescriptionLength": _to_int(_cell(row, 3)),
            "isUrl": _cell(row, 4) in (True, "true", "TRUE", "True"),
        },
        "modelOutput": {
            "plan": _cell(row, 5) or "",
            "planLength": _to_int(_cell(row, 6)),
            "jobFit": _cell(row, 7) or "",
            "jobFitLength": _to_int(_cell(row, 8)),
        },
        "metadata": _parse_metadata(_cell(row, 9)),
        "error": _cell(row, 10) or None,
    }


def chat_log_from_row(row: list[Any]) -> dict[str, Any]:
    return {
        "timestamp": _cell(row, 0) or "",
        "userInput": {
            "message": _cell(row, 1) or "",
            "messageLength": _to_int(_cell(row, 2)),
            "conversationHistoryLength": _to_int(_cell(row, 3)),
        },
        "modelOutput": {
            "response": _cell(row, 4) or "",
            "responseLength": _to_int(_cell(row, 5)),
        },
        "metadata": _parse_metadata(_cell(row, 6)),
        "error": _cell(row, 7) or None,
    }


class SheetsLogger:
    """Plan and chat interaction log backed by two sheet tabs."""

    def __init__(
        self,
        client: SheetsClient | None = None,
        settings: dict[str, Any] | None = None,
        executor: ThreadPoolExecutor | None = None,
        client_factory: Callable[[], SheetsClient | None] = get_sheets_client,
    ) -> None:
        settings = settings or load_settings()
        tabs = settings.get("sheets", {})
        self.plan_tab = tabs.get("plan_tab", "Plan Generator Logs")
        self.chat_tab = tabs.get("chat_tab", "Chatbot Logs")
        self._client = client
        self._client_factory = client_factory
        self._executor = executor

    @property
    def client(self) -> SheetsClient | None:
        if self._client is None:
            self._client = self._client_factory()
        return self._client

    @property
    def executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="sheets-log")
        return self._executor

    # ── Write path ───────────────────────────────────────────────────────

    def append_row(self, tab: str, values: list[Any]) -> bool:
        client = self.client
        if client is None:
            log.warning("Google Sheets not configured, skipping %s log", tab)
            return False
        try:
            client.append_row(tab, values)
        except Exception as exc:
            raise LoggingFailure(f"append to {tab} failed: {exc}") from exc
        log.debug("Log appended to %s", tab)
        return True

    def log_plan_generator(self, record: PlanLogRecord) -> bool:
        return self.append_row(self.plan_tab, plan_row(record))

    def log_chatbot(self, record: ChatLogRecord) -> bool:
        return self.append_row(self.chat_tab, chat_row(record))

    def dispatch(self, fn: Callable[..., Any], *args: Any) -> Future:
        """Run *fn* in the background; exceptions go to the diagnostic log."""
        future = self.executor.submit(fn, *args)
        future.add_done_callback(_report_failure)
        return future

    def log_plan_async(self, record: PlanLogRecord) -> Future:
        return self.dispatch(self.log_plan_generator, record)

    def log_chat_async(self, record: ChatLogRecord) -> Future:
        return self.dispatch(self.log_chatbot, record)

    def init_sheets(self) -> bool:
        """Write header rows on both tabs."""
        client = self.client
        if client is None:
            log.error("Google Sheets not configured")
            return False
        try:
            client.update_row(self.plan_tab, PLAN_HEADERS)
            client.update_row(self.chat_tab, CHAT_HEADERS)
        except Exception as exc:
            log.error("Error initialising sheets: %s", exc)
            return False
        log.info("Google Sheets initialised with headers")
        return True

    # ── Read path ────────────────────────────────────────────────────────

    def read_rows(self, tab: str, limit: int = 1000) -> list[list[Any]]:
        client = self.client
        if client is None:
            return []
        try:
            rows = client.read_rows(tab)
        except Exception as exc:
            log.error("Error reading from %s: %s", tab, exc)
            return []
        return rows[1:][:limit]

    def get_plan_logs(self, limit: int = 1000) -> list[dict[str, Any]]:
        return [plan_log_from_row(row) for row in self.read_rows(self.plan_tab, limit)]

    def get_chat_logs(self, limit: int = 1000) -> list[dict[str, Any]]:
        return [chat_log_from_row(row) for row in self.read_rows(self.chat_tab, limit)]

    def get_log_stats(self) -> dict[str, dict[str, int]]:
        return {
            "planGenerator": {"total": len(self.read_rows(self.plan_tab, 10000))},
            "chatbot": {"total": len(self.read_rows(self.chat_tab, 10000))},
        }

    def shutdown(self, wait: bool = True) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None


def _report_failure(future: Future) -> None:
    exc = future.exception()
    if exc is not None:
        log.error("Interaction log write failed: %s", exc)


_default: SheetsLogger | None = None


def get_sheets_logger() -> SheetsLogger:
    global _default
    if _default is None:
        _default = SheetsLogger()
    return _default
