"""Resolve a job-posting URL to job description text."""
from __future__ import annotations

import re

import requests

from planner.errors import UpstreamBlocked
from planner.log import get_logger
from planner.providers import LLMProvider

log = get_logger(__name__)

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
    "Cache-Control": "max-age=0",
}
BLOCKED_STATUSES = (400, 401, 403)

LLM_INPUT_LIMIT = 15000
PLAIN_TEXT_LIMIT = 5000
NOT_FOUND_SENTINEL = "no job description found"

_URL_RE = re.compile(r"^https?://\S+$", re.I)
_SCRIPT_RE = re.compile(r"<script[^>]*>[\s\S]*?</script>", re.I)
_STYLE_RE = re.compile(r"<style[^>]*>[\s\S]*?</style>", re.I)
_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")

_EXTRACT_SYSTEM = (
    "You are a tool that extracts job descriptions from web pages. "
    "Return only the clean job description text, nothing else."
)

_EXTRACT_PROMPT = """\
Extract the job description from the following scraped webpage content. Return ONLY the job description text, without any HTML tags or extra formatting. Focus on:
- Job title and role
- Responsibilities and requirements
- Required skills and qualifications
- Preferred qualifications
- Company information relevant to the role

If you cannot find a job description, return "No job description found."

Webpage content:
{text}"""


def is_url(text: str) -> bool:
    return bool(_URL_RE.match((text or "").strip()))


def strip_html(html: str) -> str:
    text = _SCRIPT_RE.sub("", html or "")
    text = _STYLE_RE.sub("", text)
    text = _TAG_RE.sub(" ", text)
    return _WS_RE.sub(" ", text).strip()


def fetch_html(url: str, timeout: float = 20.0) -> str:
    r = requests.get(url, headers=BROWSER_HEADERS, timeout=timeout, allow_redirects=True)
    if r.status_code in BLOCKED_STATUSES:
        log.warning("Scrape of %s blocked (HTTP %d)", url, r.status_code)
        raise UpstreamBlocked()
    r.raise_for_status()
    log.debug("Fetched %s (%d chars)", url, len(r.text))
    return r.text


def _extract_with_llm(text: str, provider: LLMProvider) -> str | None:
    try:
        completion = provider.complete(
            [{"role": "user", "content": _EXTRACT_PROMPT.format(text=text[:LLM_INPUT_LIMIT])}],
            system=_EXTRACT_SYSTEM,
            task="plan",
            temperature=0.3,
            max_tokens=2000,
        )
    except Exception as exc:
        log.warning("LLM job description extraction failed (%s), using page text", exc)
        return None
    extracted = completion.text.strip()
    if not extracted or NOT_FOUND_SENTINEL in extracted.lower():
        return None
    return extracted


def scrape_job_description(url: str, provider: LLMProvider | None = None, timeout: float = 20.0) -> str:
    """Job description text for *url*.

    Raises ``UpstreamBlocked`` when the site refuses automated access and
    ``requests.RequestException`` on other fetch failures.
    """
    text = strip_html(fetch_html(url, timeout=timeout))
    if provider is not None:
        extracted = _extract_with_llm(text, provider)
        if extracted:
            log.info("Extracted job description from %s (%d chars)", url, len(extracted))
            return extracted
    return text[:PLAIN_TEXT_LIMIT]
