"""Domain exceptions surfaced (or deliberately swallowed) at component seams."""
from __future__ import annotations


class PlannerError(Exception):
    """Base class for planner failures."""


class RequestValidationError(PlannerError):
    """A required request field is missing or unusable (HTTP 400)."""

    def __init__(self, error: str, detail: str | None = None) -> None:
        super().__init__(error)
        self.error = error
        self.detail = detail


class UpstreamBlocked(PlannerError):
    """The job posting site refused automated fetching (HTTP 400/401/403)."""

    USER_MESSAGE = (
        "Automated access is blocked on this site. "
        "Please copy and paste the job description text directly."
    )

    def __init__(self, message: str = USER_MESSAGE) -> None:
        super().__init__(message)


class UpstreamUnavailable(PlannerError):
    """An LLM provider call failed; callers convert this into a local fallback."""


class ParseDegradation(PlannerError):
    """Plan text could not be parsed; never escapes the parser."""


class LoggingFailure(PlannerError):
    """Writing to the log sheet failed; reported to the diagnostic log only."""
