"""Request orchestration for the plan generator and the chatbot.

analyze: (scrape URL) → signals → plan ‖ job fit ‖ context → log (background)
chat:    scripted joke or provider reply → log (background)
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable

from planner.chat import chat_with_candidate
from planner.config import get_env, load_cv, load_settings
from planner.context import infer_ml_context
from planner.errors import RequestValidationError, UpstreamBlocked
from planner.job_fit import analyze_job_fit
from planner.log import get_logger
from planner.models import JobContext
from planner.plan_generator import generate_plan
from planner.providers import LLMProvider, get_provider
from planner.scraper import is_url, scrape_job_description
from planner.sheets_logger import SheetsLogger, chat_record, get_sheets_logger, plan_record
from planner.signals import collect_weak_signals
from planner.supplemental import SupplementalText, get_supplemental

log = get_logger(__name__)

MIN_SCRAPED_LENGTH = 50


class PlannerService:
    """Holds the collaborators a request needs; every one can be swapped in tests."""

    def __init__(
        self,
        provider: LLMProvider | None = None,
        settings: dict[str, Any] | None = None,
        cv: str | None = None,
        sheets_logger: SheetsLogger | None = None,
        supplemental: SupplementalText | None = None,
        scraper: Callable[..., str] = scrape_job_description,
    ) -> None:
        self.settings = settings or load_settings()
        self.provider = provider
        self.cv = cv if cv is not None else load_cv()
        self.sheets_logger = sheets_logger or get_sheets_logger()
        self.supplemental = supplemental or get_supplemental()
        self.scraper = scraper

    @classmethod
    def from_env(cls) -> "PlannerService":
        settings = load_settings()
        return cls(provider=get_provider(settings, get_env), settings=settings)

    def resolve_job_description(self, job_description: str) -> tuple[str, bool]:
        """(text, was_url). Raises RequestValidationError when a URL can't be used."""
        if not is_url(job_description):
            return job_description, False

        url = job_description.strip()
        log.info("Job description is a URL, scraping %s", url)
        try:
            text = self.scraper(url, provider=self.provider)
        except Exception as exc:
            log.warning("Scrape of %s failed: %s", url, exc)
            raise RequestValidationError("Failed to scrape job description from URL", str(exc)) from exc

        if not text or len(text) < MIN_SCRAPED_LENGTH:
            raise RequestValidationError("Could not extract job description from URL", UpstreamBlocked.USER_MESSAGE)
        return text, True

    def analyze_company(self, company_name: str, job_description: str) -> dict[str, Any]:
        if not (company_name or "").strip() or not (job_description or "").strip():
            raise RequestValidationError("Company name and job description are required")

        text, was_url = self.resolve_job_description(job_description)
        job = JobContext(company_name.strip(), text, was_url)
        signals = collect_weak_signals(job.job_description_text)

        with ThreadPoolExecutor(max_workers=3, thread_name_prefix="analyze") as pool:
            plan_future = pool.submit(
                generate_plan, job.company_name, job.job_description_text,
                provider=self.provider, settings=self.settings, cv=self.cv, weak_signals=signals,
            )
            fit_future = pool.submit(
                analyze_job_fit, job.company_name, job.job_description_text,
                provider=self.provider, settings=self.settings, cv=self.cv,
            )
            context_future = pool.submit(
                infer_ml_context, job.company_name, job.job_description_text, signals, provider=self.provider,
            )
            plan = plan_future.result()
            job_fit = fit_future.result()
            context = context_future.result()

        log.info("Analyzed %s: plan %d chars via %s, %d fit requirements",
                 job.company_name, len(plan.plan_text), plan.metadata.model_id, len(job_fit))

        job_fit_dicts = [item.to_dict() for item in job_fit]
        metadata = plan.metadata.to_dict()
        self.sheets_logger.log_plan_async(plan_record(
            job.company_name, job.job_description_text, is_url=job.is_url_source, plan=plan.plan_text,
            job_fit=job_fit_dicts, metadata=metadata,
        ))

        return {
            "plan": plan.plan_text,
            "jobFit": job_fit_dicts,
            "metadata": metadata,
            "context": {"signals": signals, **context.to_dict()},
        }

    def chat(self, message: str, history: list[Any] | None = None) -> dict[str, str]:
        if not (message or "").strip():
            raise RequestValidationError("Message is required")
        history = history if isinstance(history, list) else []
        response = chat_with_candidate(
            message, history, provider=self.provider, supplemental=self.supplemental,
            settings=self.settings, cv=self.cv,
        )
        self.sheets_logger.log_chat_async(chat_record(message, history, response=response))
        return {"response": response}

    def log_plan_error(self, company_name: str, job_description: str, error: str) -> None:
        self.sheets_logger.log_plan_async(plan_record(
            company_name, job_description, is_url=is_url(job_description), error=error,
        ))

    def log_chat_error(self, message: str, history: list[Any] | None, error: str) -> None:
        self.sheets_logger.log_chat_async(chat_record(message, history, error=error))
