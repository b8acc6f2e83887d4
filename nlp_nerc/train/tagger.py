"""
The tagging capability seen by the trainer and the evaluators.

Any learner can be plugged in as long as it trains from samples and the
resulting model tags a token sequence with entity spans.
"""
from __future__ import annotations

from typing import Iterable, List, Protocol, Sequence

from ..config import ConfigSettings
from ..schema import CorpusSample, Span


class Model(Protocol):
    def tag(self, tokens: Sequence[str]) -> List[Span]:
        """Entity spans over ``tokens``, sorted and non-overlapping."""
        ...


class SequenceTagger(Protocol):
    def train(self, samples: Iterable[CorpusSample], settings: ConfigSettings) -> Model:
        """Fit a model on ``samples``; may consume the iterable once."""
        ...
