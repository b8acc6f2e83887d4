"""
Tests for the command line entry point.
"""
import contextlib
import io
import os
import tempfile
import unittest
from unittest import mock

from nlp_nerc.cli import default_model_path, main
from nlp_nerc.formats import open_corpus
from nlp_nerc.schema import Span


REFERENCE = """John B-PER
lives O
in O
Paris B-LOC

Acme B-ORG
hired O
Carol B-PER
"""

PREDICTION = """John B-PER
lives O
in O
Paris O

Acme B-ORG
hired O
Carol B-PER
"""


class FixedModel:

    def tag(self, tokens):
        return [Span(0, 1, "PER")]


class TestCli(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.reference = self._write("test.conll", REFERENCE)
        self.prediction = self._write("pred.conll", PREDICTION)

    def _write(self, name, text):
        path = os.path.join(self.tmp.name, name)
        with open(path, "w", encoding="utf-8") as handle:
            handle.write(text)
        return path

    def _params(self, *lines):
        return self._write("en-ner.properties", "\n".join(lines) + "\n")

    def test_default_model_path(self):
        self.assertEqual(default_model_path("conf/en-ner.properties"), "en-ner.model")

    def test_eval_prediction_corpus(self):
        params = self._params(
            "Language=en", "CorpusFormat=conll02", f"TestSet={self.reference}",
        )
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            code = main(["eval", "-p", params, "--prediction", self.prediction])
        self.assertEqual(code, 0)
        self.assertEqual(out.getvalue(), "precision=1.0000 recall=0.7500 f1=0.8571\n")

    def test_eval_prediction_length_mismatch(self):
        params = self._params(
            "Language=en", "CorpusFormat=conll02", f"TestSet={self.reference}",
        )
        short = self._write("short.conll", "John B-PER\n")
        self.assertEqual(main(["eval", "-p", params, "--prediction", short]), 1)

    def test_train_rejects_bad_cross_eval(self):
        params = self._params(
            "Language=en", "CorpusFormat=conll02", f"TrainSet={self.reference}",
            f"DevSet={self.reference}", "CrossEval=1",
        )
        self.assertEqual(main(["train", "-p", params]), 1)

    def test_eval_with_model(self):
        params = self._params(
            "Language=en", "CorpusFormat=conll02", f"TestSet={self.reference}",
            "OutputModel=trained.model",
        )
        out = io.StringIO()
        with mock.patch("nlp_nerc.cli.load_model", return_value=FixedModel()) as load:
            with contextlib.redirect_stdout(out):
                code = main(["eval", "-p", params, "--evalReport", "brief"])
        self.assertEqual(code, 0)
        load.assert_called_once_with("trained.model")
        self.assertEqual(out.getvalue(), "precision=0.5000 recall=0.2500 f1=0.3333\n")

    def test_eval_unreadable_model_exits_1(self):
        params = self._params("Language=en", "CorpusFormat=conll02", f"TestSet={self.reference}")
        model_dir = os.path.join(self.tmp.name, "broken.model")
        os.makedirs(model_dir)
        self.assertEqual(main(["eval", "-p", params, "--model", model_dir]), 1)

    def test_eval_invalid_model_span_exits_1(self):
        params = self._params("Language=en", "CorpusFormat=conll02", f"TestSet={self.reference}")
        bad_model = mock.Mock()
        bad_model.tag.return_value = [(2, 1, "PER")]
        with mock.patch("nlp_nerc.cli.load_model", return_value=bad_model):
            with contextlib.redirect_stdout(io.StringIO()):
                self.assertEqual(main(["eval", "-p", params, "--model", "m"]), 1)

    def test_unknown_report_mode(self):
        params = self._params("Language=en", "CorpusFormat=conll02", f"TestSet={self.reference}")
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                main(["eval", "-p", params, "--evalReport", "verbose"])

    def test_tag_writes_output_format(self):
        params = self._params("Language=en", "CorpusFormat=conll02", "OutputFormat=native")
        output = os.path.join(self.tmp.name, "out", "tagged.txt")
        with mock.patch("nlp_nerc.cli.load_model", return_value=FixedModel()):
            code = main(["tag", "-p", params, "--model", "m", "--input", self.reference, "--output", output])
        self.assertEqual(code, 0)
        samples = list(open_corpus(output, "en", "native"))
        self.assertEqual(len(samples), 2)
        self.assertEqual([s.spans[0].type for s in samples], ["PER", "PER"])
        self.assertEqual(samples[1].tokens, ("Acme", "hired", "Carol"))


if __name__ == "__main__":
    unittest.main()
