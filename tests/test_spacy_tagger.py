"""
Smoke tests for the spaCy training backend.
"""
import os
import tempfile
import unittest

from nlp_nerc.config import ConfigSettings
from nlp_nerc.errors import ConfigurationError, ModelError, TrainingFailure
from nlp_nerc.schema import CorpusSample, Span
from nlp_nerc.train.spacy_tagger import SpacyTagger, load_model, sample_to_doc, save_model


def _samples():
    return [
        CorpusSample.create(["John", "lives", "in", "Paris"], [Span(0, 1, "PER"), Span(3, 4, "LOC")]),
        CorpusSample.create(["Mary", "visited", "Rome", "yesterday"], [Span(0, 1, "PER"), Span(2, 3, "LOC")]),
        CorpusSample.create(["Acme", "Corp", "opened", "in", "Berlin"], [Span(0, 2, "ORG"), Span(4, 5, "LOC")]),
        CorpusSample.create(["It", "rained"]),
    ]


class TestSpacyTagger(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        settings = ConfigSettings({"Language": "en", "Iterations": "2", "BatchSize": "2"})
        cls.model = SpacyTagger().train(_samples(), settings)

    def test_labels(self):
        self.assertEqual(sorted(self.model.labels), ["LOC", "ORG", "PER"])

    def test_tag_returns_spans_within_bounds(self):
        tokens = ["Anna", "moved", "to", "Madrid"]
        for span in self.model.tag(tokens):
            self.assertIsInstance(span, Span)
            self.assertLessEqual(span.end, len(tokens))

    def test_tag_empty_tokens(self):
        self.assertEqual(self.model.tag([]), [])

    def test_save_and_load(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = save_model(self.model, os.path.join(tmp, "en-ner.model"))
            loaded = load_model(path)
        self.assertEqual(sorted(loaded.labels), ["LOC", "ORG", "PER"])

    def test_load_missing_model(self):
        with self.assertRaises(ConfigurationError):
            load_model("/nonexistent/en-ner.model")

    def test_load_unreadable_model(self):
        """A directory that is not a saved pipeline raises ModelError."""
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(ModelError):
                load_model(tmp)

    def test_gold_doc_entities(self):
        doc = sample_to_doc(self.model.nlp, _samples()[2])
        self.assertEqual([(e.start, e.end, e.label_) for e in doc.ents], [(0, 2, "ORG"), (4, 5, "LOC")])


class TestSpacyTaggerErrors(unittest.TestCase):

    def test_no_entities(self):
        settings = ConfigSettings({"Language": "en", "Iterations": "1"})
        with self.assertRaises(TrainingFailure):
            SpacyTagger().train([CorpusSample.create(["no", "names"])], settings)

    def test_no_samples(self):
        with self.assertRaises(TrainingFailure):
            SpacyTagger().train([], ConfigSettings({"Language": "en"}))

    def test_invalid_iterations(self):
        settings = ConfigSettings({"Language": "en", "Iterations": "0"})
        with self.assertRaises(ConfigurationError):
            SpacyTagger().train(_samples(), settings)


if __name__ == "__main__":
    unittest.main()
