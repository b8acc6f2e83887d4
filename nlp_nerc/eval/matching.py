"""
Span matching for evaluation.

Matching is exact: a hypothesis span counts only if start, end and type all
equal a reference span. There is no partial credit; a span with correct
boundaries and the wrong type is one false positive and one false negative.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, List

from ..schema import Span


@dataclass
class SpanScore:
    """Outcome of comparing the spans of one sample."""
    matched: List[Span] = field(default_factory=list)
    false_positives: List[Span] = field(default_factory=list)  # hypothesis only
    false_negatives: List[Span] = field(default_factory=list)  # reference only

    @property
    def true_positive(self) -> int:
        return len(self.matched)

    @property
    def false_positive(self) -> int:
        return len(self.false_positives)

    @property
    def false_negative(self) -> int:
        return len(self.false_negatives)

    @property
    def has_errors(self) -> bool:
        return bool(self.false_positives or self.false_negatives)


def score_spans(reference: Iterable[Span], hypothesis: Iterable[Span]) -> SpanScore:
    """
    Compare reference and hypothesis spans of one sample.

    Args:
        reference: Gold spans
        hypothesis: Predicted spans

    Returns:
        SpanScore with TP = |R ∩ H|, FP = |H| - TP, FN = |R| - TP;
        unmatched spans keep their sample order
    """
    reference = list(reference)
    remaining = set(reference)
    score = SpanScore()

    for span in hypothesis:
        if span in remaining:
            remaining.remove(span)
            score.matched.append(span)
        else:
            score.false_positives.append(span)

    score.false_negatives = [span for span in reference if span in remaining]
    return score
