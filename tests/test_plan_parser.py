"""Tests for turning plan text into research bullets and day-banded items."""

from __future__ import annotations

import unittest

from planner.models import ParsedPlan
from planner.plan_generator import FALLBACK_PLAN
from planner.plan_parser import (
    parse_plan,
    parse_plan_item,
    parse_research_bullets,
)

LLM_PLAN = """\
## Research & Context
- **Business Model:** Acme sells payment APIs to small businesses.
- Team likely owns fraud models across several product lines
- Short note

## First 90 Days Plan

### Days 1-30: Learn
**Title:** Map the fraud stack
**Objective:** Understand current models.
**Experience:** At BILL I clustered millions of sync errors.
**Action:** Read code, shadow on-call.

**Title:** Meet stakeholders
**Objective:** Build trust.
**Action:** Hold 1:1s.

### Days 31-60: Deliver
**Title:** Ship a monitoring fix
**Objective:** Reduce drift incidents.
**Action:** Add drift alerts.

### Days 61-90: Scale
**Title:** Propose roadmap
**Objective:** Align the next quarter.
**Action:** Write the proposal.
"""


class ParsePlanTests(unittest.TestCase):
    def test_full_llm_plan(self) -> None:
        parsed = parse_plan(LLM_PLAN)
        self.assertEqual([s.label for s in parsed.sections], ["Days 1-30", "Days 31-60", "Days 61-90"])
        first = parsed.sections[0].items
        self.assertEqual([i.title for i in first], ["Map the fraud stack", "Meet stakeholders"])
        self.assertEqual(first[0].objective, "Understand current models.")
        self.assertEqual(first[0].experience, "At BILL I clustered millions of sync errors.")
        self.assertEqual(first[0].action, "Read code, shadow on-call.")
        self.assertIsNone(first[1].experience)
        self.assertEqual([i.position for i in first], [1, 2])

    def test_research_bullets(self) -> None:
        bullets = parse_plan(LLM_PLAN).research
        self.assertEqual(bullets[0].title, "Business Model")
        self.assertEqual(bullets[0].content, "Acme sells payment APIs to small businesses.")
        self.assertEqual(bullets[1].title, "Team likely")
        self.assertEqual(bullets[1].content, "owns fraud models across several product lines")
        self.assertIsNone(bullets[2].title)
        self.assertEqual(bullets[2].content, "Short note")

    def test_fallback_template_parses_into_three_bands(self) -> None:
        parsed = parse_plan(FALLBACK_PLAN)
        self.assertEqual([s.label for s in parsed.sections], ["Days 1-30", "Days 31-60", "Days 61-90"])
        for section in parsed.sections:
            self.assertEqual(len(section.items), 3)
            for item in section.items:
                self.assertTrue(item.title)
                self.assertTrue(item.objective)
                self.assertTrue(item.action)
        self.assertEqual(parsed.sections[0].items[0].title, "Map the ML Infrastructure")
        self.assertEqual(parsed.research, [])

    def test_no_headers_gives_catch_all_section(self) -> None:
        parsed = parse_plan("Some notes\n**Title:** Do a thing\n**Objective:** Because.\n")
        self.assertEqual(len(parsed.sections), 1)
        self.assertEqual(parsed.sections[0].label, "Plan")
        self.assertEqual(parsed.sections[0].items[0].title, "Do a thing")
        self.assertEqual(parsed.sections[0].items[0].objective, "Because.")

    def test_days_band_without_plan_header(self) -> None:
        parsed = parse_plan("Day 1-30:\nObjective: learn things\nAction: read")
        self.assertEqual(parsed.sections[0].label, "Days 1-30")
        item = parsed.sections[0].items[0]
        self.assertEqual(item.objective, "learn things")
        self.assertEqual(item.action, "read")

    def test_totality_on_odd_inputs(self) -> None:
        for text in ["", None, "   ", "#", "**Title:**", "**Title:** **Objective:**", "Days 1-30",
                     "## First 90 Days Plan\n", "## Research & Context\n", "::::", "**" * 50,
                     "Days 1-30:\n**Title:**\n\n**Title:** ab", 12345]:
            parsed = parse_plan(text)
            self.assertIsInstance(parsed, ParsedPlan)

    def test_empty_input_is_empty_plan(self) -> None:
        self.assertTrue(parse_plan("").is_empty)
        self.assertTrue(parse_plan(None).is_empty)

    def test_short_and_header_only_fragments_dropped(self) -> None:
        parsed = parse_plan("Days 1-30:\n**Title:** ab\n**Title:** Real item here\n**Action:** go")
        items = parsed.sections[0].items
        self.assertEqual(len(items), 1)
        self.assertEqual(items[0].title, "Real item here")
        self.assertEqual(items[0].position, 1)

    def test_leading_fragment_kept_when_it_has_fields(self) -> None:
        parsed = parse_plan("Days 1-30:\nObjective: first goal\n**Title:** Second\n**Action:** act")
        items = parsed.sections[0].items
        self.assertEqual(len(items), 2)
        self.assertEqual(items[0].objective, "first goal")
        self.assertIsNone(items[0].title)


class ParseItemTests(unittest.TestCase):
    def test_title_before_first_field_with_numbering(self) -> None:
        item = parse_plan_item("1. Build the thing\nObjective: make it work")
        self.assertEqual(item.title, "Build the thing")
        self.assertEqual(item.objective, "make it work")

    def test_first_line_title_when_no_fields(self) -> None:
        item = parse_plan_item("Just a heading\nand more text")
        self.assertEqual(item.title, "Just a heading")
        self.assertIsNone(item.objective)

    def test_plain_title_field(self) -> None:
        item = parse_plan_item("Title: Plain title\nObjective: plain objective")
        self.assertEqual(item.title, "Plain title")
        self.assertEqual(item.objective, "plain objective")

    def test_hashes_and_bold_removed(self) -> None:
        item = parse_plan_item("**Title:** ### Heading **bold**\n**Action:** do #it")
        self.assertEqual(item.title, "Heading bold")
        self.assertEqual(item.action, "do it")

    def test_all_empty_item_is_empty(self) -> None:
        self.assertTrue(parse_plan_item("").is_empty)


class ResearchBulletTests(unittest.TestCase):
    def test_blank_lines_skipped(self) -> None:
        self.assertEqual(parse_research_bullets("\n\n"), [])

    def test_none(self) -> None:
        self.assertEqual(parse_research_bullets(None), [])


if __name__ == "__main__":
    unittest.main()
