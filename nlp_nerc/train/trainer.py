"""
Training driver: a single train/evaluate run or a cross-validation fold.

States::

    IDLE -> SINGLE_RUN ------------> AGGREGATING -> DONE
    IDLE -> PER_FOLD (one per fold) -> AGGREGATING -> DONE
    IDLE -> REJECTED  (invalid configuration, nothing read or trained)
    SINGLE_RUN | PER_FOLD -> REJECTED  (fold range selects no samples)
    SINGLE_RUN | PER_FOLD -> FAILED    (corpus, training or model error)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from functools import reduce
from itertools import islice
from typing import Iterable, List, Optional, TextIO

from ..config import DEV_SET, LANGUAGE, TEST_SET, TRAIN_SET, ConfigSettings, FoldPartition
from ..errors import ConfigurationError, NercError, TrainingFailure
from ..eval.evaluate import Evaluator, ReportMode
from ..eval.metrics import FMeasureAccumulator
from ..formats import CorpusFormat, open_corpus
from ..postprocess.filters import maybe_filter
from ..schema import CorpusSample
from .tagger import Model, SequenceTagger

LOG = logging.getLogger(__name__)


class TrainerState(str, Enum):
    IDLE = "idle"
    SINGLE_RUN = "single_run"
    PER_FOLD = "per_fold"
    AGGREGATING = "aggregating"
    DONE = "done"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass
class FoldResult:
    """Model and held-out metrics of one fold."""
    partition: FoldPartition
    model: Model
    metrics: FMeasureAccumulator


@dataclass
class TrainingResult:
    model: Model
    folds: List[FoldResult] = field(default_factory=list)
    metrics: Optional[FMeasureAccumulator] = None  # None when nothing was evaluated


class CrossValidationTrainer:
    """
    Train a model from the settings, optionally cross-validating it.

    Without ``CrossEval`` the whole ``TrainSet`` is used and the ``TestSet``
    (if any) is evaluated once. With ``CrossEval=<start>:<end>`` the samples
    ``DevSet[start:end]`` are held out for evaluation and the model is
    trained on every ``TrainSet`` sample outside that index range.

    Args:
        settings: Run configuration
        tagger: Training backend (defaults to the spaCy backend)
        out: Sink for evaluation reports (defaults to stdout)
    """

    def __init__(self, settings: ConfigSettings, tagger: Optional[SequenceTagger] = None,
                 out: Optional[TextIO] = None):
        if tagger is None:
            from .spacy_tagger import SpacyTagger
            tagger = SpacyTagger()
        self.settings = settings
        self.tagger = tagger
        self.out = out
        self.state = TrainerState.IDLE
        self.types = None

    def validate(self) -> Optional[FoldPartition]:
        """
        Check the configuration before any corpus is opened.

        Returns:
            The fold partition, or None for a single run

        Raises:
            ConfigurationError: on a malformed ``CrossEval`` range, a missing
                ``DevSet`` for cross-validation, or missing/invalid core keys
        """
        try:
            self.settings.require(TRAIN_SET)
            self.settings.require(LANGUAGE)
            CorpusFormat.parse(self.settings.corpus_format)
            self.types = self.settings.entity_types
            partition = self.settings.eval_range
            if partition is not None and self.settings.dataset(DEV_SET) is None:
                raise ConfigurationError(f"CrossEval requires a {DEV_SET} to evaluate on")
        except ConfigurationError:
            self.state = TrainerState.REJECTED
            raise
        return partition

    def run(self) -> TrainingResult:
        if self.state is not TrainerState.IDLE:
            raise RuntimeError(f"Trainer already used (state={self.state.value})")
        partition = self.validate()
        try:
            if partition is None:
                return self._single_run()
            return self._cross_eval([partition])
        except ConfigurationError:
            self.state = TrainerState.REJECTED
            raise
        except NercError:
            self.state = TrainerState.FAILED
            raise

    def _open(self, key: str) -> Iterable[CorpusSample]:
        samples = open_corpus(self.settings.require(key), self.settings.language, self.settings.corpus_format)
        return maybe_filter(samples, self.types)

    def _train(self, samples: Iterable[CorpusSample]) -> Model:
        try:
            return self.tagger.train(samples, self.settings)
        except NercError:
            raise
        except Exception as exc:
            raise TrainingFailure(f"Training failed: {exc}") from exc

    def _evaluate(self, model: Model, reference: Iterable[CorpusSample]) -> FMeasureAccumulator:
        evaluator = Evaluator(model, reference, types=self.types, mode=ReportMode.BRIEF, out=self.out)
        return evaluator.evaluate()

    def _single_run(self) -> TrainingResult:
        self.state = TrainerState.SINGLE_RUN
        LOG.info("Training on %s", self.settings.require(TRAIN_SET))
        model = self._train(self._open(TRAIN_SET))

        metrics = None
        if self.settings.dataset(TEST_SET) is not None:
            LOG.info("Evaluating on %s", self.settings.require(TEST_SET))
            metrics = self._evaluate(model, self._open(TEST_SET))

        self.state = TrainerState.AGGREGATING
        result = TrainingResult(model=model, metrics=metrics)
        self.state = TrainerState.DONE
        return result

    def _run_fold(self, partition: FoldPartition) -> FoldResult:
        held_out = list(islice(self._open(DEV_SET), partition.start, partition.end))
        if not held_out:
            raise ConfigurationError(
                f"CrossEval range {partition.start}:{partition.end} selects no {DEV_SET} samples"
            )
        if len(held_out) < partition.end - partition.start:
            LOG.warning(
                "CrossEval range %d:%d extends past the end of %s; holding out %d samples",
                partition.start, partition.end, DEV_SET, len(held_out),
            )
        training = [s for i, s in enumerate(self._open(TRAIN_SET)) if i not in partition]
        if not training:
            raise ConfigurationError(
                f"CrossEval range {partition.start}:{partition.end} leaves no {TRAIN_SET} samples"
            )

        LOG.info(
            "Fold %d:%d: training on %d samples, evaluating on %d held-out samples",
            partition.start, partition.end, len(training), len(held_out),
        )
        model = self._train(training)
        metrics = self._evaluate(model, held_out)
        return FoldResult(partition=partition, model=model, metrics=metrics)

    def _cross_eval(self, partitions: List[FoldPartition]) -> TrainingResult:
        folds: List[FoldResult] = []
        for partition in partitions:
            self.state = TrainerState.PER_FOLD
            folds.append(self._run_fold(partition))

        self.state = TrainerState.AGGREGATING
        # Micro-average: counters of all folds summed
        metrics = reduce(lambda a, b: a.merge(b), (fold.metrics for fold in folds), FMeasureAccumulator())
        best = max(folds, key=lambda fold: fold.metrics.f1)
        LOG.info("Cross-evaluation over %d fold(s): %s", len(folds), metrics)
        result = TrainingResult(model=best.model, folds=folds, metrics=metrics)
        self.state = TrainerState.DONE
        return result
