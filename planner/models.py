"""Data models for plan requests, results and log rows."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

ML_MATURITY_LEVELS = ("Early", "Intermediate", "Advanced")
INFRA_COMPLEXITY_LEVELS = ("Low", "Medium", "Medium-High", "High")

FALLBACK_MODEL = "fallback"


@dataclass(frozen=True)
class JobContext:
    company_name: str
    job_description_text: str
    is_url_source: bool = False


@dataclass
class InferredContext:
    ml_maturity: str = "Intermediate"
    infra_complexity: str = "Medium"
    likely_challenges: str = "Balancing model development velocity with production reliability."

    def to_dict(self) -> dict[str, str]:
        return {
            "mlMaturity": self.ml_maturity,
            "infraComplexity": self.infra_complexity,
            "likelyChallenges": self.likely_challenges,
        }


@dataclass
class TokenUsage:
    input: int = 0
    output: int = 0

    @property
    def total(self) -> int:
        return self.input + self.output

    def to_dict(self) -> dict[str, int]:
        return {"input": self.input, "output": self.output, "total": self.total}


@dataclass
class Completion:
    """Provider-neutral result of one chat completion call."""

    text: str
    model: str
    usage: TokenUsage = field(default_factory=TokenUsage)


@dataclass
class PlanMetadata:
    latency_ms: int = 0
    model_id: str = FALLBACK_MODEL
    architecture: str = "Template"
    cost_usd: float = 0.0
    tokens: TokenUsage = field(default_factory=TokenUsage)

    def to_dict(self) -> dict[str, Any]:
        return {
            "latency": self.latency_ms,
            "model": self.model_id,
            "architecture": self.architecture,
            "cost": self.cost_usd,
            "tokens": self.tokens.to_dict(),
        }


@dataclass
class PlanResult:
    plan_text: str
    metadata: PlanMetadata = field(default_factory=PlanMetadata)

    @property
    def is_fallback(self) -> bool:
        return self.metadata.model_id == FALLBACK_MODEL


@dataclass
class JobFitItem:
    requirement: str
    matches: bool
    evidence: str = ""

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "JobFitItem":
        matches = raw.get("matches", False)
        if isinstance(matches, str):
            matches = matches.strip().lower() in ("true", "yes", "1")
        return cls(
            requirement=str(raw.get("requirement", "")).strip(),
            matches=bool(matches),
            evidence=str(raw.get("evidence", "")).strip(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"requirement": self.requirement, "matches": self.matches, "evidence": self.evidence}


@dataclass
class ConversationTurn:
    role: str
    content: str

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "ConversationTurn":
        role = raw.get("role") if raw.get("role") in ("user", "assistant") else "user"
        return cls(role=role, content=str(raw.get("content") or ""))

    def to_message(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class ResearchBullet:
    title: str | None
    content: str


@dataclass
class ParsedPlanItem:
    title: str | None = None
    objective: str | None = None
    experience: str | None = None
    action: str | None = None
    position: int = 0

    @property
    def is_empty(self) -> bool:
        return not (self.title or self.objective or self.experience or self.action)


@dataclass
class PlanSection:
    label: str
    items: list[ParsedPlanItem] = field(default_factory=list)


@dataclass
class ParsedPlan:
    research: list[ResearchBullet] = field(default_factory=list)
    sections: list[PlanSection] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "ParsedPlan":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.research and not self.sections


@dataclass
class PlanLogRecord:
    timestamp: str
    company_name: str = ""
    job_description: str = ""
    job_description_length: int = 0
    is_url: bool = False
    plan: str = ""
    plan_length: int = 0
    job_fit: str = ""
    job_fit_length: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)
    error: str | None = None


@dataclass
class ChatLogRecord:
    timestamp: str
    message: str = ""
    message_length: int = 0
    conversation_history_length: int = 0
    response: str = ""
    response_length: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)
    error: str | None = None
