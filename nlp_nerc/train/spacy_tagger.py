"""
spaCy backend for the tagging capability.

Trains a blank pipeline for the configured language with a single ``ner``
component on pre-tokenised samples. Tokens are never re-tokenised: docs are
built directly from the corpus tokens.

Training parameters (all optional):
- Iterations : passes over the training data (default 10)
- Dropout    : dropout rate for updates (default 0.2)
- BatchSize  : examples per update (default 8)
- Seed       : random seed for shuffling and initialization (default 1)
"""
from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Iterable, List, Sequence

import spacy
from spacy.language import Language
from spacy.tokens import Doc
from spacy.training import Example
from spacy.util import fix_random_seed, minibatch

from ..config import ConfigSettings
from ..errors import ConfigurationError, ModelError, TrainingFailure
from ..formats.conll import encode_tags
from ..schema import CorpusSample, Span, normalize_label

LOG = logging.getLogger(__name__)

ITERATIONS = "Iterations"
DROPOUT = "Dropout"
BATCH_SIZE = "BatchSize"
SEED = "Seed"


def sample_to_doc(nlp: Language, sample: CorpusSample) -> Doc:
    """Gold Doc with the sample's spans as BIO entity annotation."""
    return Doc(nlp.vocab, words=list(sample.tokens), ents=encode_tags(sample))


class SpacyModel:
    """Trained spaCy pipeline wrapped as a Model."""

    def __init__(self, nlp: Language):
        self.nlp = nlp

    @property
    def labels(self) -> List[str]:
        return list(self.nlp.get_pipe("ner").labels)

    def tag(self, tokens: Sequence[str]) -> List[Span]:
        if not tokens:
            return []
        doc = Doc(self.nlp.vocab, words=list(tokens))
        for _, component in self.nlp.pipeline:
            doc = component(doc)
        return [Span(ent.start, ent.end, normalize_label(ent.label_)) for ent in doc.ents]


class SpacyTagger:
    """SequenceTagger that fits a spaCy EntityRecognizer."""

    def train(self, samples: Iterable[CorpusSample], settings: ConfigSettings) -> SpacyModel:
        iterations = settings.get_int(ITERATIONS, 10)
        dropout = settings.get_float(DROPOUT, 0.2)
        batch_size = settings.get_int(BATCH_SIZE, 8)
        seed = settings.get_int(SEED, 1)
        if iterations < 1 or batch_size < 1:
            raise ConfigurationError(f"{ITERATIONS} and {BATCH_SIZE} must be positive")

        nlp = spacy.blank(settings.language)
        ner = nlp.add_pipe("ner")

        examples: List[Example] = []
        labels = set()
        for sample in samples:
            if not sample.tokens:
                continue
            predicted = Doc(nlp.vocab, words=list(sample.tokens))
            examples.append(Example(predicted, sample_to_doc(nlp, sample)))
            labels.update(span.type for span in sample.spans)

        if not examples:
            raise TrainingFailure("No training samples")
        if not labels:
            raise TrainingFailure("Training samples contain no entities")
        for label in sorted(labels):
            ner.add_label(label)

        LOG.info(
            "Training spaCy NER (%s) on %d samples, labels=%s",
            settings.language, len(examples), sorted(labels),
        )
        fix_random_seed(seed)
        rng = random.Random(seed)
        optimizer = nlp.initialize(lambda: examples)
        for iteration in range(1, iterations + 1):
            rng.shuffle(examples)
            losses = {}
            for batch in minibatch(examples, size=batch_size):
                nlp.update(batch, sgd=optimizer, drop=dropout, losses=losses)
            LOG.info("Iteration %d/%d: ner loss %.3f", iteration, iterations, losses.get("ner", 0.0))

        return SpacyModel(nlp)


def save_model(model: SpacyModel, path: str | Path) -> Path:
    path = Path(path)
    model.nlp.to_disk(path)
    return path


def load_model(path: str | Path) -> SpacyModel:
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Model not found: {path}")
    try:
        nlp = spacy.load(path)
    except (OSError, ValueError) as exc:
        raise ModelError(f"Cannot load model {path}: {exc}") from exc
    if "ner" not in nlp.pipe_names:
        raise ModelError(f"Model {path} has no ner component")
    return SpacyModel(nlp)
