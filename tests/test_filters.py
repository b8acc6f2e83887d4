"""
Unit tests for entity type filtering and label normalization.
"""
import unittest

from nlp_nerc.errors import ConfigurationError
from nlp_nerc.postprocess.filters import EntityTypeFilter, filter_spans, maybe_filter
from nlp_nerc.schema import CorpusSample, Span, normalize_label


def _samples():
    return [
        CorpusSample.create(
            ["John", "Smith", "visited", "Acme", "in", "Paris"],
            [Span(0, 2, "PER"), Span(3, 4, "ORG"), Span(5, 6, "LOC")],
        ),
        CorpusSample.create(["Nothing", "here"]),
        CorpusSample.create(["Madrid", "beat", "Bayern"], [Span(0, 1, "ORG"), Span(2, 3, "ORG")]),
    ]


class TestNormalizeLabel(unittest.TestCase):

    def test_synonyms(self):
        """Long-form labels map to the short CoNLL names."""
        self.assertEqual(normalize_label("person"), "PER")
        self.assertEqual(normalize_label("Location"), "LOC")
        self.assertEqual(normalize_label("organization"), "ORG")

    def test_accents_and_case(self):
        self.assertEqual(normalize_label(" médicament "), "MEDICAMENT")
        self.assertEqual(normalize_label("misc"), "MISC")

    def test_empty(self):
        self.assertEqual(normalize_label(""), "")


class TestEntityTypeFilter(unittest.TestCase):

    def test_filter_spans_keeps_order(self):
        spans = [Span(0, 1, "PER"), Span(2, 3, "ORG"), Span(4, 5, "PER")]
        self.assertEqual(filter_spans(spans, frozenset({"PER"})), [Span(0, 1, "PER"), Span(4, 5, "PER")])

    def test_one_output_per_input(self):
        """Every upstream sample yields exactly one sample with the same tokens."""
        samples = _samples()
        filtered = list(EntityTypeFilter({"PER", "LOC"}, samples))
        self.assertEqual(len(filtered), len(samples))
        for before, after in zip(samples, filtered):
            self.assertEqual(before.tokens, after.tokens)
        self.assertEqual(filtered[0].spans, (Span(0, 2, "PER"), Span(5, 6, "LOC")))
        self.assertEqual(filtered[2].spans, ())

    def test_idempotent(self):
        once = list(EntityTypeFilter({"ORG"}, _samples()))
        twice = list(EntityTypeFilter({"ORG"}, once))
        self.assertEqual(once, twice)

    def test_types_are_normalized(self):
        """Allowed types go through the same normalization as corpus labels."""
        type_filter = EntityTypeFilter(["person", "organisation"])
        self.assertEqual(type_filter.allowed_types, frozenset({"PER", "ORG"}))

    def test_empty_types_rejected(self):
        with self.assertRaises(ConfigurationError):
            EntityTypeFilter([])
        with self.assertRaises(ConfigurationError):
            EntityTypeFilter(["", "  "])

    def test_unchanged_sample_is_returned_as_is(self):
        sample = _samples()[2]
        self.assertIs(EntityTypeFilter({"ORG"}).apply(sample), sample)

    def test_iterating_without_upstream(self):
        with self.assertRaises(TypeError):
            list(EntityTypeFilter({"PER"}))

    def test_filter_is_lazy(self):
        """Nothing upstream is read until the filtered stream is consumed."""
        consumed = []

        def stream():
            for sample in _samples():
                consumed.append(sample)
                yield sample

        filtered = iter(EntityTypeFilter({"PER"}, stream()))
        self.assertEqual(consumed, [])
        next(filtered)
        self.assertEqual(len(consumed), 1)

    def test_maybe_filter(self):
        samples = _samples()
        self.assertIs(maybe_filter(samples, None), samples)
        self.assertIsInstance(maybe_filter(samples, {"PER"}), EntityTypeFilter)


if __name__ == "__main__":
    unittest.main()
