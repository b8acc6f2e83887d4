"""
Evaluation of a prediction corpus against a reference corpus.

Both corpora are already tagged; no model is involved. Sample i of the
prediction corpus is compared with sample i of the reference corpus, so the
two files must be parallel.
"""
from __future__ import annotations

import logging
import sys
from itertools import zip_longest
from pathlib import Path
from typing import Iterable, Optional, TextIO

from ..config import TEST_SET, ConfigSettings
from ..errors import LengthMismatchError
from ..formats import open_corpus
from ..postprocess.filters import maybe_filter
from ..schema import CorpusSample
from .metrics import FMeasureAccumulator
from .report import print_brief

LOG = logging.getLogger(__name__)

_MISSING = object()


class CorpusEvaluate:
    """
    Score two parallel sample streams.

    Args:
        reference: Gold samples
        prediction: Predicted samples, same order and length as ``reference``
        types: Allowed entity types applied to both streams, or None
        out: Report sink (defaults to stdout)
    """

    def __init__(
        self,
        reference: Iterable[CorpusSample],
        prediction: Iterable[CorpusSample],
        types: Optional[Iterable[str]] = None,
        out: Optional[TextIO] = None,
    ):
        self._reference = maybe_filter(reference, types)
        self._prediction = maybe_filter(prediction, types)
        self.out = out
        self.accumulator = FMeasureAccumulator()

    @classmethod
    def from_settings(
        cls,
        prediction_path: str | Path,
        settings: ConfigSettings,
        out: Optional[TextIO] = None,
    ) -> CorpusEvaluate:
        """Compare ``prediction_path`` against the configured ``TestSet``."""
        language = settings.language
        corpus_format = settings.corpus_format
        types = settings.entity_types
        reference = open_corpus(settings.require(TEST_SET), language, corpus_format)
        prediction = open_corpus(prediction_path, language, corpus_format)
        return cls(reference, prediction, types=types, out=out)

    def evaluate(self) -> FMeasureAccumulator:
        """
        Score all sample pairs and print the aggregate line.

        Raises:
            LengthMismatchError: if the corpora have different sample counts
        """
        reference_count = 0
        prediction_count = 0
        for reference, prediction in zip_longest(self._reference, self._prediction, fillvalue=_MISSING):
            if reference is not _MISSING:
                reference_count += 1
            if prediction is not _MISSING:
                prediction_count += 1
            if reference is _MISSING or prediction is _MISSING:
                continue

            if len(reference.tokens) != len(prediction.tokens):
                LOG.warning(
                    "Token count mismatch at sample %d: reference=%d, prediction=%d",
                    reference_count - 1, len(reference.tokens), len(prediction.tokens),
                )
            self.accumulator.update(reference.spans, prediction.spans)

        if reference_count != prediction_count:
            raise LengthMismatchError(
                f"Reference corpus has {reference_count} samples "
                f"but prediction corpus has {prediction_count}"
            )

        LOG.info("Compared %d sample pairs: %s", reference_count, self.accumulator)
        print_brief(self.accumulator, self.out or sys.stdout)
        return self.accumulator
