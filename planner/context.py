"""Classify a company's ML maturity and infra complexity (LLM or heuristic)."""
from __future__ import annotations

from planner.log import get_logger
from planner.models import INFRA_COMPLEXITY_LEVELS, ML_MATURITY_LEVELS, InferredContext
from planner.providers import LLMProvider, parse_json_object

log = get_logger(__name__)

_DEFAULTS = InferredContext()

_CHALLENGES_RESEARCH = "Moving research models to production. Establishing MLOps practices."
_CHALLENGES_STARTUP = "Building ML infrastructure from scratch. Prioritizing which problems to solve first."
_CHALLENGES_SCALE = "Managing technical debt. Improving model performance at scale. Ensuring model reliability."

_SYSTEM = "You are an expert ML engineer analyzing companies for ML maturity. Respond only with valid JSON."

_PROMPT = """\
Based on the following information about {company}, analyze their ML maturity level, infrastructure complexity, and likely challenges:

Company: {company}
Job Description: {job_description}...
Weak Signals Found: {signals}

Provide a brief analysis of:
1. ML Maturity Level (Early/Intermediate/Advanced)
2. Infrastructure Complexity (Low/Medium/Medium-High/High)
3. Likely Challenges

Format as JSON with keys: mlMaturity, infraComplexity, likelyChallenges"""


def _pick(value, allowed: tuple[str, ...], default: str) -> str:
    if isinstance(value, str):
        for option in allowed:
            if value.strip().lower() == option.lower():
                return option
    return default


def heuristic_context(job_description: str, weak_signals: list[str]) -> InferredContext:
    """Deterministic classification from signal membership and raw keywords."""
    signals = [s.lower() for s in weak_signals]
    job_text = (job_description or "").lower()

    def mentions(*words: str) -> bool:
        return any(w in s for s in signals for w in words)

    ml_maturity = _DEFAULTS.ml_maturity
    infra_complexity = _DEFAULTS.infra_complexity
    likely_challenges = _DEFAULTS.likely_challenges

    if mentions("production", "operational"):
        ml_maturity = "Advanced"
    elif mentions("research"):
        ml_maturity = "Early"
        likely_challenges = _CHALLENGES_RESEARCH

    if mentions("distributed", "kubernetes"):
        infra_complexity = "High"
    elif mentions("real-time"):
        infra_complexity = "Medium-High"

    if "startup" in job_text or "early stage" in job_text:
        likely_challenges = _CHALLENGES_STARTUP
    elif "scale" in job_text or "enterprise" in job_text:
        likely_challenges = _CHALLENGES_SCALE

    return InferredContext(
        ml_maturity=ml_maturity,
        infra_complexity=infra_complexity,
        likely_challenges=likely_challenges,
    )


def infer_ml_context(
    company_name: str,
    job_description: str,
    weak_signals: list[str],
    provider: LLMProvider | None = None,
) -> InferredContext:
    if provider is None:
        log.debug("No provider, using heuristic context")
        return heuristic_context(job_description, weak_signals)

    prompt = _PROMPT.format(
        company=company_name,
        job_description=(job_description or "")[:1000],
        signals="; ".join(weak_signals),
    )
    try:
        completion = provider.complete(
            [{"role": "user", "content": prompt}],
            system=_SYSTEM,
            task="context",
            json_mode=True,
            max_tokens=1024,
        )
        data = parse_json_object(completion.text)
        challenges = data.get("likelyChallenges")
        if isinstance(challenges, list):
            challenges = " ".join(str(c) for c in challenges)
        return InferredContext(
            ml_maturity=_pick(data.get("mlMaturity"), ML_MATURITY_LEVELS, _DEFAULTS.ml_maturity),
            infra_complexity=_pick(data.get("infraComplexity"), INFRA_COMPLEXITY_LEVELS, _DEFAULTS.infra_complexity),
            likely_challenges=(challenges or "").strip() or _DEFAULTS.likely_challenges,
        )
    except Exception as exc:
        log.warning("Context inference failed (%s), falling back to heuristics", exc)
        return heuristic_context(job_description, weak_signals)
