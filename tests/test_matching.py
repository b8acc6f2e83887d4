"""
Unit tests for exact span matching.
"""
import unittest

from nlp_nerc.eval.matching import score_spans
from nlp_nerc.schema import Span


class TestMatching(unittest.TestCase):

    def test_exact_match(self):
        """Test matching with identical spans."""
        score = score_spans([Span(0, 2, "PER")], [Span(0, 2, "PER")])
        self.assertEqual(score.matched, [Span(0, 2, "PER")])

    def test_different_offset(self):
        """Test matching fails with different offsets."""
        score = score_spans([Span(0, 2, "PER")], [Span(1, 2, "PER")])
        self.assertEqual(score.matched, [])

    def test_identical_spans(self):
        """Identical reference and hypothesis: everything is a true positive."""
        spans = [Span(0, 1, "PER"), Span(3, 5, "LOC"), Span(7, 8, "ORG")]
        score = score_spans(spans, list(spans))
        self.assertEqual(score.true_positive, 3)
        self.assertEqual(score.false_positive, 0)
        self.assertEqual(score.false_negative, 0)
        self.assertFalse(score.has_errors)

    def test_disjoint_spans(self):
        """Disjoint span sets have no true positives."""
        reference = [Span(0, 1, "PER"), Span(4, 5, "LOC")]
        hypothesis = [Span(1, 3, "PER")]
        score = score_spans(reference, hypothesis)
        self.assertEqual(score.true_positive, 0)
        self.assertEqual(score.false_positive, 1)
        self.assertEqual(score.false_negative, 2)

    def test_type_mismatch_is_fp_and_fn(self):
        """Correct boundaries with the wrong type get no partial credit."""
        score = score_spans([Span(0, 2, "PER")], [Span(0, 2, "ORG")])
        self.assertEqual(score.true_positive, 0)
        self.assertEqual(score.false_positive, 1)
        self.assertEqual(score.false_negative, 1)
        self.assertEqual(score.false_positives, [Span(0, 2, "ORG")])
        self.assertEqual(score.false_negatives, [Span(0, 2, "PER")])

    def test_boundary_mismatch(self):
        """Overlapping but unequal boundaries do not match."""
        score = score_spans([Span(0, 2, "PER")], [Span(0, 1, "PER")])
        self.assertEqual((score.true_positive, score.false_positive, score.false_negative), (0, 1, 1))

    def test_unmatched_keep_sample_order(self):
        reference = [Span(0, 1, "PER"), Span(2, 3, "LOC"), Span(5, 6, "ORG")]
        hypothesis = [Span(2, 3, "LOC")]
        score = score_spans(reference, hypothesis)
        self.assertEqual(score.false_negatives, [Span(0, 1, "PER"), Span(5, 6, "ORG")])

    def test_empty_sides(self):
        score = score_spans([], [])
        self.assertEqual((score.true_positive, score.false_positive, score.false_negative), (0, 0, 0))
        score = score_spans([Span(0, 1, "PER")], [])
        self.assertEqual(score.false_negative, 1)


if __name__ == "__main__":
    unittest.main()
