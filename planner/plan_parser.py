"""Turn free-form plan text into research bullets and day-banded plan items.

The grammar is deliberately forgiving:

    plan      := [research] [plan-block]
    research  := "## Research & Context" NL bullet-line*
    plan-block:= "## First 90 Days Plan" NL band*      (or the whole text)
    band      := "Days 1-30" | "Days 31-60" | "Days 61-90" ( ":" | NL ) item*
    item      := "**Title:**" text [field]*
    field     := ("**Objective:**" | "Objective:" | ...) text

Every step is skipped when its anchor is missing, and any unexpected error
degrades to ``ParsedPlan.empty()``. ``parse_plan`` never raises.
"""
from __future__ import annotations

import re

from planner.errors import ParseDegradation
from planner.log import get_logger
from planner.models import ParsedPlan, ParsedPlanItem, PlanSection, ResearchBullet

log = get_logger(__name__)

FIELDS = ("Objective", "Experience", "Action")

_RESEARCH_RE = re.compile(r"##\s*Research\s*&\s*Context\s*\n([\s\S]*?)(?=##|\Z)", re.I)
_PLAN_RE = re.compile(r"##\s*First\s*90\s*Days\s*Plan\s*\n([\s\S]*)", re.I)
_HASHES_RE = re.compile(r"#+")

_BANDS: list[tuple[str, re.Pattern[str]]] = [
    ("Days 1-30", re.compile(r"Days?\s*1-30[:\n]([\s\S]*?)(?=Days?\s*31-60|Days?\s*61-90|\Z)", re.I)),
    ("Days 31-60", re.compile(r"Days?\s*31-60[:\n]([\s\S]*?)(?=Days?\s*61-90|\Z)", re.I)),
    ("Days 61-90", re.compile(r"Days?\s*61-90[:\n]([\s\S]*)", re.I)),
]
CATCH_ALL_LABEL = "Plan"

_TITLE_SPLIT_RE = re.compile(r"\*\*Title:\*\*", re.I)
_ANY_FIELD_RE = re.compile(r"(?:Objective|Experience|Action):", re.I)
_FIELD_PREFIX_RE = re.compile(r"^(?:Objective|Experience|Action|Title):", re.I)
_HEADER_ONLY_RE = re.compile(r"^(Days?\s*\d+-\d+|First\s*\d+\s*Days?\s*Plan)[:\s]*\Z", re.I)
_BOLD_TITLE_RE = re.compile(r"\*\*Title:\*\*\s*([\s\S]+?)(?=\*\*[A-Za-z]+:|\Z)", re.I)
_PLAIN_TITLE_RE = re.compile(r"^Title:\s*([\s\S]+?)(?=\n\s*(?:Objective|Experience|Action):|$)", re.I | re.M)
_NUMBERING_RE = re.compile(r"^\d+\.\s*")
_BULLET_RE = re.compile(r"^[-*•]\s*")
_COLON_RE = re.compile(r"^([^:]+):\s*(.+)$")

MIN_FRAGMENT_LENGTH = 5


def _field_patterns(name: str) -> tuple[re.Pattern[str], re.Pattern[str]]:
    return (
        re.compile(rf"\*\*{name}:\*\*\s*([\s\S]+?)(?=\*\*[A-Za-z]+:|\Z)", re.I),
        re.compile(rf"{name}:\s*([\s\S]+?)(?=\n\s*(?:Objective|Experience|Action|Title):|\Z)", re.I),
    )


_FIELD_PATTERNS = {name: _field_patterns(name) for name in FIELDS}


def clean_text(text: str | None) -> str:
    """Drop heading hashes and bold markers."""
    if not text:
        return ""
    return _HASHES_RE.sub("", text).replace("**", "").strip()


def split_blocks(text: str) -> tuple[str | None, str]:
    """(research block or None, plan block). Missing plan header => whole text."""
    research_match = _RESEARCH_RE.search(text)
    plan_match = _PLAN_RE.search(text)
    research = _HASHES_RE.sub("", research_match.group(1).strip()) if research_match else None
    plan = _HASHES_RE.sub("", plan_match.group(1).strip()) if plan_match else _HASHES_RE.sub("", text)
    return research, plan


def parse_research_bullets(block: str | None) -> list[ResearchBullet]:
    if not block:
        return []
    bullets: list[ResearchBullet] = []
    for line in block.split("\n"):
        if not line.strip():
            continue
        cleaned = _BULLET_RE.sub("", line.replace("**", "").strip()).strip()

        m = _COLON_RE.match(cleaned)
        if m:
            bullet = ResearchBullet(title=m.group(1).strip(), content=m.group(2).strip())
        else:
            words = cleaned.split()
            if len(words) > 3:
                bullet = ResearchBullet(title=" ".join(words[:2]), content=" ".join(words[2:]))
            else:
                bullet = ResearchBullet(title=None, content=cleaned)

        if bullet.content:
            bullets.append(bullet)
    return bullets


def extract_field(name: str, text: str) -> str | None:
    for pattern in _FIELD_PATTERNS[name]:
        m = pattern.search(text)
        if m and m.group(1):
            return clean_text(m.group(1)) or None
    return None


def extract_title(text: str) -> str | None:
    m = _BOLD_TITLE_RE.search(text)
    if m:
        title = clean_text(m.group(1))
        if title:
            return title

    m = _PLAIN_TITLE_RE.search(text)
    if m:
        title = clean_text(m.group(1))
        if title:
            return title

    first_field = _ANY_FIELD_RE.search(text)
    if first_field:
        before = text[:first_field.start()].strip()
        if before and not _FIELD_PREFIX_RE.match(before):
            before = _BULLET_RE.sub("", _NUMBERING_RE.sub("", before)).strip()
            return clean_text(before) or None
        return None

    first_line = text.split("\n", 1)[0]
    candidate = clean_text(first_line)
    if candidate and not _FIELD_PREFIX_RE.match(candidate):
        return candidate
    return None


def parse_plan_item(text: str, position: int = 0) -> ParsedPlanItem:
    """Extract the four labelled fields; all-None signals "not extractable"."""
    text = _HASHES_RE.sub("", text or "").strip()
    return ParsedPlanItem(
        title=extract_title(text),
        objective=extract_field("Objective", text),
        experience=extract_field("Experience", text),
        action=extract_field("Action", text),
        position=position,
    )


def _item_fragments(band_text: str) -> list[str]:
    fragments: list[str] = []
    for idx, raw in enumerate(_TITLE_SPLIT_RE.split(band_text)):
        fragment = raw.strip()
        if len(fragment) < MIN_FRAGMENT_LENGTH:
            continue
        # text before the first Title marker is a band heading unless it carries fields
        if idx == 0 and not _ANY_FIELD_RE.search(fragment):
            continue
        if _HEADER_ONLY_RE.match(fragment):
            continue
        fragments.append(fragment)
    return fragments


def parse_items(band_text: str | None) -> list[ParsedPlanItem]:
    if not band_text or not band_text.strip():
        return []
    items: list[ParsedPlanItem] = []
    for fragment in _item_fragments(band_text):
        item = parse_plan_item(fragment)
        if item.is_empty:
            continue
        item.position = len(items) + 1
        items.append(item)
    return items


def parse_sections(plan_block: str) -> list[PlanSection]:
    sections = []
    for label, pattern in _BANDS:
        m = pattern.search(plan_block)
        if m:
            sections.append(PlanSection(label=label, items=parse_items(m.group(1))))
    if not sections:
        sections.append(PlanSection(label=CATCH_ALL_LABEL, items=parse_items(plan_block)))
    return sections


def _parse(text: str) -> ParsedPlan:
    try:
        research_block, plan_block = split_blocks(text)
        return ParsedPlan(
            research=parse_research_bullets(research_block),
            sections=parse_sections(plan_block),
        )
    except Exception as exc:
        raise ParseDegradation(str(exc)) from exc


def parse_plan(text: str | None) -> ParsedPlan:
    if not isinstance(text, str) or not text.strip():
        return ParsedPlan.empty()
    try:
        return _parse(text)
    except ParseDegradation as exc:
        log.warning("Plan text could not be parsed (%s); rendering nothing", exc)
        return ParsedPlan.empty()
