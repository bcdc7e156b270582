"""Tests for request orchestration: validation, concurrency and background logging."""

from __future__ import annotations

import json
import time
import unittest
from pathlib import Path

import requests

from planner.chat import APOLOGY
from planner.config import DEFAULT_SETTINGS
from planner.errors import RequestValidationError, UpstreamBlocked
from planner.models import FALLBACK_MODEL, TokenUsage
from planner.plan_generator import FALLBACK_PLAN
from planner.service import PlannerService
from planner.sheets_logger import SheetsLogger
from planner.supplemental import SupplementalText
from tests.stubs import FakeSheetsClient, StubProvider

JD = (
    "We are scaling our production ML platform on Kubernetes. "
    "You will own real-time inference with PyTorch and MLflow."
)
PLAN_TEXT = "## Research & Context\n- **Stack:** PyTorch\n\n## First 90 Days Plan\n### Days 1-30\n1. **Learn:** Objective: x"
FIT_JSON = json.dumps({"requirements": [
    {"requirement": "PyTorch", "matches": True, "evidence": "Built models in PyTorch."},
    {"requirement": "Go", "matches": False, "evidence": "I have closely related experience in Python."},
]})
CONTEXT_JSON = json.dumps({"mlMaturity": "advanced", "infraComplexity": "High", "likelyChallenges": "Scale."})


def _service(provider=None, client=None, scraper=None, **kwargs) -> PlannerService:
    client = client if client is not None else FakeSheetsClient()
    holder = SupplementalText(directory=Path("/nonexistent"), basename="missing")
    service = PlannerService(
        provider=provider,
        settings=DEFAULT_SETTINGS,
        cv="CV TEXT",
        sheets_logger=SheetsLogger(client=client, settings=DEFAULT_SETTINGS, client_factory=lambda: None),
        supplemental=holder,
        **({"scraper": scraper} if scraper else {}),
        **kwargs,
    )
    return service


class AnalyzeTests(unittest.TestCase):
    def test_requires_both_fields(self) -> None:
        service = _service()
        for company, jd in (("", JD), ("Acme", "  "), (None, None)):
            with self.assertRaises(RequestValidationError) as ctx:
                service.analyze_company(company, jd)
            self.assertEqual(ctx.exception.error, "Company name and job description are required")

    def test_without_provider_uses_fallbacks(self) -> None:
        result = _service().analyze_company("Acme", JD)
        self.assertEqual(result["plan"], FALLBACK_PLAN)
        self.assertEqual(result["jobFit"], [])
        self.assertEqual(result["metadata"]["model"], FALLBACK_MODEL)
        self.assertEqual(result["metadata"]["cost"], 0)
        self.assertEqual(result["context"]["mlMaturity"], "Advanced")
        self.assertEqual(result["context"]["infraComplexity"], "High")
        self.assertTrue(result["context"]["signals"])

    def test_response_shape_with_provider(self) -> None:
        provider = StubProvider(
            {"plan": PLAN_TEXT, "fit": FIT_JSON, "context": CONTEXT_JSON},
            usage=TokenUsage(input=1000, output=500),
        )
        result = _service(provider).analyze_company("Acme", JD)

        self.assertEqual(set(result), {"plan", "jobFit", "metadata", "context"})
        self.assertEqual(result["plan"], PLAN_TEXT)
        self.assertEqual([r["requirement"] for r in result["jobFit"]], ["PyTorch", "Go"])
        self.assertEqual(result["metadata"]["model"], "gpt-4o")
        self.assertEqual(result["metadata"]["tokens"], {"input": 1000, "output": 500, "total": 1500})
        self.assertAlmostEqual(result["metadata"]["cost"], 0.0025 + 0.005)
        self.assertEqual(result["context"]["mlMaturity"], "Advanced")
        self.assertEqual({c["task"] for c in provider.calls}, {"plan", "fit", "context"})

    def test_generation_runs_concurrently(self) -> None:
        provider = StubProvider(
            {"plan": PLAN_TEXT, "fit": FIT_JSON, "context": CONTEXT_JSON},
            delay={"plan": 0.4, "fit": 0.2, "context": 0.1},
        )
        start = time.perf_counter()
        _service(provider).analyze_company("Acme", JD)
        elapsed = time.perf_counter() - start
        self.assertGreaterEqual(elapsed, 0.4)
        self.assertLess(elapsed, 0.6)

    def test_logging_does_not_block_response(self) -> None:
        client = FakeSheetsClient(delay=1.0)
        service = _service(client=client)
        start = time.perf_counter()
        service.analyze_company("Acme", JD)
        self.assertLess(time.perf_counter() - start, 0.8)
        service.sheets_logger.shutdown()
        row = client.rows["Plan Generator Logs"][0]
        self.assertEqual(row[1], "Acme")
        self.assertEqual(row[5], FALLBACK_PLAN)

    def test_logging_failure_does_not_affect_response(self) -> None:
        service = _service(client=FakeSheetsClient(fail=True))
        result = service.analyze_company("Acme", JD)
        service.sheets_logger.shutdown()
        self.assertEqual(result["plan"], FALLBACK_PLAN)


class UrlResolutionTests(unittest.TestCase):
    def test_plain_text_passes_through(self) -> None:
        self.assertEqual(_service().resolve_job_description(JD), (JD, False))

    def test_scraped_text_used(self) -> None:
        scraped = "Senior ML Engineer responsible for training pipelines and model serving."
        service = _service(scraper=lambda url, provider=None: scraped)
        result = service.analyze_company("Acme", "https://jobs.example.com/1")
        self.assertEqual(result["plan"], FALLBACK_PLAN)
        service.sheets_logger.shutdown()
        self.assertTrue(service.sheets_logger.client.rows["Plan Generator Logs"][0][4])

    def test_blocked_site(self) -> None:
        def blocked(url, provider=None):
            raise UpstreamBlocked()

        with self.assertRaises(RequestValidationError) as ctx:
            _service(scraper=blocked).resolve_job_description("https://jobs.example.com/1")
        self.assertEqual(ctx.exception.error, "Failed to scrape job description from URL")
        self.assertEqual(ctx.exception.detail, UpstreamBlocked.USER_MESSAGE)

    def test_network_error(self) -> None:
        def broken(url, provider=None):
            raise requests.ConnectionError("no route")

        with self.assertRaises(RequestValidationError) as ctx:
            _service(scraper=broken).resolve_job_description("https://jobs.example.com/1")
        self.assertIn("no route", ctx.exception.detail)

    def test_unexpected_scraper_error(self) -> None:
        def broken(url, provider=None):
            raise ValueError("bad markup")

        with self.assertRaises(RequestValidationError) as ctx:
            _service(scraper=broken).resolve_job_description("https://jobs.example.com/1")
        self.assertEqual(ctx.exception.error, "Failed to scrape job description from URL")
        self.assertEqual(ctx.exception.detail, "bad markup")

    def test_too_short(self) -> None:
        service = _service(scraper=lambda url, provider=None: "Apply now")
        with self.assertRaises(RequestValidationError) as ctx:
            service.resolve_job_description("https://jobs.example.com/1")
        self.assertEqual(ctx.exception.error, "Could not extract job description from URL")


class ChatTests(unittest.TestCase):
    def test_requires_message(self) -> None:
        with self.assertRaises(RequestValidationError) as ctx:
            _service().chat("   ")
        self.assertEqual(ctx.exception.error, "Message is required")

    def test_reply_and_log(self) -> None:
        client = FakeSheetsClient()
        service = _service(StubProvider("I led the ML platform work."), client=client)
        result = service.chat("What did you build?", [{"role": "user", "content": "hi"}])
        service.sheets_logger.shutdown()
        self.assertEqual(result, {"response": "I led the ML platform work."})
        row = client.rows["Chatbot Logs"][0]
        self.assertEqual(row[1], "What did you build?")
        self.assertEqual(row[3], 1)

    def test_provider_failure_apologizes(self) -> None:
        result = _service(StubProvider(fail=True)).chat("hello")
        self.assertEqual(result["response"], APOLOGY)

    def test_non_list_history_tolerated(self) -> None:
        result = _service().chat("hello", "not a list")
        self.assertEqual(result["response"], APOLOGY)


if __name__ == "__main__":
    unittest.main()
