from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, Tuple

from unidecode import unidecode


# Label normalization map (long-form labels used by native corpora)
LABEL_MAP = {
    "PERSON": "PER",
    "LOCATION": "LOC",
    "ORGANIZATION": "ORG",
    "ORGANISATION": "ORG",
    "MISCELLANEOUS": "MISC",
}


def normalize_label(label: str) -> str:
    """
    Normalize entity type labels to a canonical form.

    Args:
        label: Entity type label (case- and accent-insensitive)

    Returns:
        Normalized label (uppercase ASCII)
    """
    if not label:
        return ""
    label_upper = unidecode(label).upper().strip()
    return LABEL_MAP.get(label_upper, label_upper)


@dataclass(frozen=True, order=True)
class Span:
    """Labeled token range [start, end) naming one entity."""
    start: int
    end: int
    type: str

    def __post_init__(self):
        if self.start < 0 or self.end <= self.start:
            raise ValueError(f"Invalid span offsets: ({self.start}, {self.end})")


@dataclass(frozen=True)
class CorpusSample:
    """One annotated sequence: tokens plus sorted, non-overlapping entity spans."""
    tokens: Tuple[str, ...]
    spans: Tuple[Span, ...] = field(default_factory=tuple)

    @classmethod
    def create(cls, tokens: Iterable[str], spans: Iterable[Span] = ()) -> CorpusSample:
        """Create a sample, sorting spans and checking them against the tokens."""
        tokens = tuple(tokens)
        spans = tuple(sorted(spans))
        previous_end = 0
        for span in spans:
            if span.end > len(tokens):
                raise ValueError(
                    f"Span ({span.start}, {span.end}) exceeds sample length {len(tokens)}"
                )
            if span.start < previous_end:
                raise ValueError(f"Overlapping span at ({span.start}, {span.end})")
            previous_end = span.end
        return cls(tokens=tokens, spans=spans)

    def with_spans(self, spans: Iterable[Span]) -> CorpusSample:
        """Same tokens, different spans."""
        return CorpusSample(tokens=self.tokens, spans=tuple(spans))
