"""
Model evaluation against a reference corpus.

The model tags the tokens of every reference sample; reference and
hypothesis spans are then filtered to the same entity types (when
configured) and scored with exact span matching.
"""
from __future__ import annotations

import logging
import sys
from enum import Enum
from typing import Iterable, List, Optional, Sequence, TextIO

from ..config import TEST_SET, ConfigSettings
from ..errors import ConfigurationError, ModelError
from ..formats import open_corpus
from ..postprocess.filters import EntityTypeFilter, filter_spans
from ..schema import CorpusSample, Span, normalize_label
from ..train.tagger import Model
from .metrics import ErrorRecord, FMeasureAccumulator, PerTypeAccumulator
from .report import print_brief, print_detailed, print_errors

LOG = logging.getLogger(__name__)


class ReportMode(str, Enum):
    """Evaluation report modes."""
    BRIEF = "brief"
    DETAILED = "detailed"
    ERROR = "error"

    @classmethod
    def parse(cls, mode: str | ReportMode) -> ReportMode:
        try:
            return cls(str(mode.value if isinstance(mode, ReportMode) else mode).lower())
        except ValueError:
            raise ConfigurationError(
                f"Unknown evaluation report {mode!r} (expected brief, detailed or error)"
            ) from None


def as_span(span) -> Span:
    """
    Accept Span objects or plain (start, end, type) tuples from a model.

    The label is normalized either way so hypothesis and reference share
    one label set.

    Raises:
        ModelError: if the model returned something that is not a valid span
    """
    try:
        if isinstance(span, Span):
            start, end, entity_type = span.start, span.end, span.type
        else:
            start, end, entity_type = span
        return Span(int(start), int(end), normalize_label(entity_type))
    except (TypeError, ValueError) as exc:
        raise ModelError(f"Model returned an invalid span {span!r}: {exc}") from exc


class Evaluator:
    """
    Evaluate a trained model over a reference corpus.

    Args:
        model: Object with ``tag(tokens) -> spans``
        reference: Reference samples (read once, in order)
        types: Allowed entity types, or None to keep every type
        mode: brief, detailed or error
        out: Report sink (defaults to stdout)
    """

    def __init__(
        self,
        model: Model,
        reference: Iterable[CorpusSample],
        types: Optional[Iterable[str]] = None,
        mode: str | ReportMode = ReportMode.BRIEF,
        out: Optional[TextIO] = None,
    ):
        self.mode = ReportMode.parse(mode)
        self.type_filter = EntityTypeFilter(types) if types is not None else None
        self.model = model
        self._reference = reference
        self.out = out
        self.accumulator = FMeasureAccumulator()
        self.per_type = PerTypeAccumulator()
        self.errors: List[ErrorRecord] = []
        self.samples_evaluated = 0

    @classmethod
    def from_settings(
        cls,
        model: Model,
        settings: ConfigSettings,
        mode: str | ReportMode = ReportMode.DETAILED,
        out: Optional[TextIO] = None,
        dataset: str = TEST_SET,
    ) -> Evaluator:
        """Evaluate against the ``TestSet`` (or another dataset key) of the settings."""
        mode = ReportMode.parse(mode)
        types = settings.entity_types
        reference = open_corpus(settings.require(dataset), settings.language, settings.corpus_format)
        return cls(model, reference, types=types, mode=mode, out=out)

    def _hypothesis(self, tokens: Sequence[str]) -> List[Span]:
        return [as_span(span) for span in self.model.tag(tokens)]

    def evaluate(self) -> FMeasureAccumulator:
        """Score every reference sample, print the report and return the counts."""
        for idx, sample in enumerate(self._reference):
            reference_spans = list(sample.spans)
            hypothesis_spans = self._hypothesis(sample.tokens)
            if self.type_filter is not None:
                reference_spans = filter_spans(reference_spans, self.type_filter.allowed_types)
                hypothesis_spans = filter_spans(hypothesis_spans, self.type_filter.allowed_types)

            score = self.accumulator.update(reference_spans, hypothesis_spans)
            self.per_type.update(reference_spans, hypothesis_spans)
            if self.mode is ReportMode.ERROR and score.has_errors:
                self.errors.append(ErrorRecord(
                    sample_index=idx,
                    tokens=sample.tokens,
                    false_positives=score.false_positives,
                    false_negatives=score.false_negatives,
                ))
            self.samples_evaluated += 1

        LOG.info("Evaluated %d samples: %s", self.samples_evaluated, self.accumulator)
        self.report()
        return self.accumulator

    def report(self):
        out = self.out or sys.stdout
        if self.mode is ReportMode.BRIEF:
            print_brief(self.accumulator, out)
        elif self.mode is ReportMode.DETAILED:
            print_detailed(self.accumulator, self.per_type.metrics(), out)
        else:
            print_errors(self.accumulator, self.errors, out)
