"""Tests for keyword-derived weak signals."""

from __future__ import annotations

import unittest

from planner.signals import (
    NO_SIGNALS_MESSAGE,
    collect_weak_signals,
    extract_tech_stack,
)


class CollectWeakSignalsTests(unittest.TestCase):
    def test_empty_text_returns_sentinel(self) -> None:
        self.assertEqual(collect_weak_signals(""), [NO_SIGNALS_MESSAGE])

    def test_unrelated_text_returns_sentinel(self) -> None:
        self.assertEqual(collect_weak_signals("We bake bread every morning."), [NO_SIGNALS_MESSAGE])

    def test_never_empty_for_arbitrary_inputs(self) -> None:
        for text in ["", " ", "\n\n", "🙂", "x" * 5000, "##**Title:**"]:
            self.assertTrue(collect_weak_signals(text))

    def test_match_is_case_insensitive_and_ordered(self) -> None:
        signals = collect_weak_signals("Own PRODUCTION models on Kubernetes with A/B testing for recommendations")
        self.assertEqual(signals[0], "Mentions of production systems suggests operational ML maturity")
        self.assertIn("Distributed systems mentioned indicates scale requirements", signals)
        self.assertIn("A/B testing mentioned suggests data-driven decision making", signals)
        self.assertIn("Recommendation systems suggest personalization/product ML", signals)
        # taxonomy order: maturity, infra, evaluation, domain
        self.assertLess(
            signals.index("Distributed systems mentioned indicates scale requirements"),
            signals.index("A/B testing mentioned suggests data-driven decision making"),
        )
        self.assertNotIn(NO_SIGNALS_MESSAGE, signals)

    def test_tech_summaries_appended_last(self) -> None:
        signals = collect_weak_signals("Experience with PyTorch, TensorFlow, Docker and Kafka")
        self.assertEqual(signals[-2], "ML frameworks mentioned: pytorch, tensorflow")
        self.assertEqual(signals[-1], "Infrastructure tools: docker, kafka")

    def test_no_dedup_across_buckets(self) -> None:
        # "experimentation" appears in both the maturity and evaluation taxonomies
        signals = collect_weak_signals("experimentation")
        self.assertEqual(len(signals), 2)


class ExtractTechStackTests(unittest.TestCase):
    def test_keyword_order(self) -> None:
        self.assertEqual(extract_tech_stack("AWS and PyTorch, Spark"), ["pytorch", "aws", "spark"])

    def test_empty(self) -> None:
        self.assertEqual(extract_tech_stack(""), [])


if __name__ == "__main__":
    unittest.main()
