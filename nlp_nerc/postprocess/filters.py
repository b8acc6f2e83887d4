"""
Entity type filtering for corpus streams.

Restricts the spans of each sample to an allowed set of entity types. The
same filter must be applied to the reference and to the hypothesis side of
an evaluation, otherwise precision and recall are not comparable.
"""
from __future__ import annotations

from typing import FrozenSet, Iterable, Iterator, List

from ..errors import ConfigurationError
from ..schema import CorpusSample, Span, normalize_label


def normalize_types(types: Iterable[str]) -> FrozenSet[str]:
    """Normalize allowed type labels (case/accent-insensitive, synonyms mapped)."""
    return frozenset(normalize_label(t) for t in types if t and t.strip())


def filter_spans(spans: Iterable[Span], allowed_types: FrozenSet[str]) -> List[Span]:
    """Keep the spans whose type is allowed; order is preserved."""
    return [span for span in spans if span.type in allowed_types]


class EntityTypeFilter:
    """
    Lazy filtering view over a sample stream.

    Each upstream sample yields exactly one filtered sample with the same
    tokens. Spans of other types are dropped, never relabeled. Filtering an
    already filtered stream with the same types changes nothing.

    Args:
        allowed_types: Entity type labels to keep (must not be empty)
        samples: Upstream samples; may be omitted when only apply() is used
    """

    def __init__(self, allowed_types: Iterable[str], samples: Iterable[CorpusSample] | None = None):
        self.allowed_types = normalize_types(allowed_types)
        if not self.allowed_types:
            raise ConfigurationError("Entity type filter needs at least one allowed type")
        self._samples = samples

    def apply(self, sample: CorpusSample) -> CorpusSample:
        kept = filter_spans(sample.spans, self.allowed_types)
        if len(kept) == len(sample.spans):
            return sample
        return sample.with_spans(kept)

    def __iter__(self) -> Iterator[CorpusSample]:
        if self._samples is None:
            raise TypeError("EntityTypeFilter was created without an upstream stream")
        for sample in self._samples:
            yield self.apply(sample)


def maybe_filter(samples: Iterable[CorpusSample], allowed_types: Iterable[str] | None) -> Iterable[CorpusSample]:
    """Wrap ``samples`` in an EntityTypeFilter when types are configured."""
    if allowed_types is None:
        return samples
    return EntityTypeFilter(allowed_types, samples)
