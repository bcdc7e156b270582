"""Requirement-by-requirement fit check of the candidate against a job description."""
from __future__ import annotations

import re
from typing import Any

from planner.config import load_cv, load_settings
from planner.log import get_logger
from planner.models import JobFitItem
from planner.providers import LLMProvider, parse_json_object

log = get_logger(__name__)

GAP_EVIDENCE_RE = re.compile(
    r"I have closely related experience in .+primary risk is .+mitigated by", re.I | re.S
)

_SYSTEM_SUFFIX = (
    "You are evaluating job fit. Be GENEROUS and ACCEPTING of broader concepts - check requirements "
    "if there's any reasonable connection through related technologies, methodologies, or domains. "
    "For example, if a job requires \"Vision Transformers\" and the candidate has computer vision "
    "experience AND transformer experience, check it even if not the exact same technology. "
    "Don't be overly decisive - accept broader conceptual matches."
)

_FIT_TEMPLATE = """\
You are analyzing job requirements for {company} and evaluating how well {name}'s experience and skills match.

JOB DESCRIPTION:
{job_description}

YOUR TASK:
1. Extract or infer key job requirements from the job description. If explicit requirements are listed, use those. If not, infer requirements based on:
   - Technical skills mentioned (programming languages, frameworks, tools, platforms)
   - Domain knowledge mentioned (ML, computer vision, NLP, etc.)
   - Experience level expectations
   - Responsibilities mentioned that imply certain skills
   - Company tech stack (if mentioned or inferable)

2. For EACH requirement, evaluate if {name} has relevant experience or skills based on the CV. Be GENEROUS:
   - Check a requirement if there is ANY reasonable connection to the candidate's experience, even if indirect
   - Consider related skills and transferable methodologies
   - Do NOT check if there is genuinely NO correlation

3. Output as JSON with this exact format:
{{
  "requirements": [
    {{
      "requirement": "Python programming",
      "matches": true,
      "evidence": "Strong Python experience across all roles."
    }},
    {{
      "requirement": "Kubernetes",
      "matches": false,
      "evidence": "I have closely related experience in Docker and AWS ECS container orchestration and Kubernetes demonstrates the same underlying skills of container management. The primary risk is lack of direct Kubernetes experience, which is mitigated by my demonstrated ability to quickly learn new technologies."
    }}
  ]
}}

CRITICAL FORMAT FOR UNMATCHED REQUIREMENTS (matches: false):
"I have closely related experience in X and Y demonstrates the same underlying skills [describe the skills]. The primary risk is R [describe the risk], which is mitigated by M [describe the mitigation]."

IMPORTANT:
- Include 8-15 requirements (mix of technical skills, tools, methodologies, domain knowledge)
- Provide specific evidence from the CV for each match
- Sort requirements by importance to the role (most important first)"""


def build_fit_prompt(company_name: str, job_description: str, settings: dict[str, Any]) -> str:
    return _FIT_TEMPLATE.format(
        company=company_name,
        name=settings.get("candidate_name", "the candidate"),
        job_description=job_description,
    )


def analyze_job_fit(
    company_name: str,
    job_description: str,
    provider: LLMProvider | None = None,
    settings: dict[str, Any] | None = None,
    cv: str | None = None,
) -> list[JobFitItem]:
    """Requirements in importance order; ``[]`` means fit analysis unavailable."""
    if provider is None:
        log.debug("No provider, skipping job fit analysis")
        return []

    settings = settings or load_settings()
    try:
        system = f"{cv if cv is not None else load_cv()}\n\n{_SYSTEM_SUFFIX}"
        completion = provider.complete(
            [{"role": "user", "content": build_fit_prompt(company_name, job_description, settings)}],
            system=system,
            task="fit",
            json_mode=True,
            temperature=0.7,
            max_tokens=4000,
        )
        data = parse_json_object(completion.text)
        raw_items = data.get("requirements") or []
        if not isinstance(raw_items, list):
            raise ValueError("'requirements' is not a list")
        items = [JobFitItem.from_dict(r) for r in raw_items if isinstance(r, dict)]
        items = [i for i in items if i.requirement]
        log.info("Job fit for %s: %d/%d requirements matched",
                 company_name, sum(i.matches for i in items), len(items))
        return items
    except Exception as exc:
        log.warning("Job fit analysis failed (%s), returning no requirements", exc)
        return []


def sort_job_fit(items: list[JobFitItem]) -> list[JobFitItem]:
    """Matched first; original order kept within each group."""
    return sorted(items, key=lambda i: not i.matches)


def is_well_formed_gap_evidence(evidence: str) -> bool:
    """True when a non-match explanation follows the related-experience / risk / mitigation form."""
    return bool(GAP_EVIDENCE_RE.search(evidence or ""))
