"""
Precision/recall/F1 accumulation over exact span matches.
"""
from __future__ import annotations
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Tuple

from ..schema import Span
from .matching import SpanScore, score_spans


def compute_prf(tp: int, fp: int, fn: int) -> Tuple[float, float, float]:
    """Precision, recall and F1 from counts; each is 0.0 when undefined."""
    precision = tp / (tp + fp) if (tp + fp) > 0 else 0.0
    recall = tp / (tp + fn) if (tp + fn) > 0 else 0.0
    f1 = 2 * precision * recall / (precision + recall) if (precision + recall) > 0 else 0.0
    return precision, recall, f1


@dataclass
class TypeMetrics:
    """Per-type NER metrics."""
    type: str
    precision: float
    recall: float
    f1: float
    tp: int
    fp: int
    fn: int


@dataclass
class FMeasureAccumulator:
    """
    Running true/false positive/negative counts.

    Counters only grow, and only through update(). Scoring is commutative,
    so the final metrics do not depend on the order in which samples were
    scored, and partial accumulators can be merged.
    """
    true_positive: int = 0
    false_positive: int = 0
    false_negative: int = 0

    def update(self, reference: Iterable[Span], hypothesis: Iterable[Span]) -> SpanScore:
        score = score_spans(reference, hypothesis)
        self._add(score)
        return score

    def _add(self, score: SpanScore) -> None:
        self.true_positive += score.true_positive
        self.false_positive += score.false_positive
        self.false_negative += score.false_negative

    def merge(self, other: FMeasureAccumulator) -> FMeasureAccumulator:
        """New accumulator holding the summed counts of both."""
        return FMeasureAccumulator(
            true_positive=self.true_positive + other.true_positive,
            false_positive=self.false_positive + other.false_positive,
            false_negative=self.false_negative + other.false_negative,
        )

    @property
    def precision(self) -> float:
        return compute_prf(self.true_positive, self.false_positive, self.false_negative)[0]

    @property
    def recall(self) -> float:
        return compute_prf(self.true_positive, self.false_positive, self.false_negative)[1]

    @property
    def f1(self) -> float:
        return compute_prf(self.true_positive, self.false_positive, self.false_negative)[2]

    def __str__(self) -> str:
        return f"precision={self.precision:.4f} recall={self.recall:.4f} f1={self.f1:.4f}"


@dataclass
class PerTypeAccumulator:
    """One FMeasureAccumulator per entity type seen on either side."""
    by_type: Dict[str, FMeasureAccumulator] = field(default_factory=lambda: defaultdict(FMeasureAccumulator))

    def update(self, reference: Iterable[Span], hypothesis: Iterable[Span]) -> None:
        """Score one sample separately for every type it mentions."""
        reference = list(reference)
        hypothesis = list(hypothesis)
        types = {span.type for span in reference} | {span.type for span in hypothesis}
        for entity_type in types:
            self.by_type[entity_type].update(
                [span for span in reference if span.type == entity_type],
                [span for span in hypothesis if span.type == entity_type],
            )

    def metrics(self) -> Dict[str, TypeMetrics]:
        """
        Compute NER metrics per entity type.

        Returns:
            Dictionary mapping entity type to TypeMetrics, sorted by type
        """
        type_metrics = {}
        for entity_type in sorted(self.by_type):
            counts = self.by_type[entity_type]
            type_metrics[entity_type] = TypeMetrics(
                type=entity_type,
                precision=counts.precision,
                recall=counts.recall,
                f1=counts.f1,
                tp=counts.true_positive,
                fp=counts.false_positive,
                fn=counts.false_negative,
            )
        return type_metrics


@dataclass
class ErrorRecord:
    """Unmatched spans of one sample, kept for the error report."""
    sample_index: int
    tokens: Sequence[str]
    false_positives: List[Span]
    false_negatives: List[Span]


def span_context(tokens: Sequence[str], span: Span, window: int = 3) -> str:
    """
    Render a span inside its surrounding tokens, e.g. ``lives in [Paris] .``

    Offsets beyond the sample are clamped rather than raising.
    """
    start = max(0, min(span.start, len(tokens)))
    end = max(start, min(span.end, len(tokens)))
    left = tokens[max(0, start - window):start]
    inside = tokens[start:end]
    right = tokens[end:end + window]
    parts = list(left) + ["[" + " ".join(inside) + "]"] + list(right)
    prefix = "... " if start - window > 0 else ""
    suffix = " ..." if end + window < len(tokens) else ""
    return prefix + " ".join(parts) + suffix
