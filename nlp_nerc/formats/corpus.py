"""
Corpus stream construction: one entry point for every supported format.
"""
from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, TextIO

from ..errors import ConfigurationError, CorpusReadError
from ..schema import CorpusSample
from .conll import read_conll, write_conll02, write_conll03
from .native import read_native, write_native

LOG = logging.getLogger(__name__)


class CorpusFormat(str, Enum):
    """Corpus file formats."""
    NATIVE = "native"
    CONLL02 = "conll02"
    CONLL03 = "conll03"

    @classmethod
    def parse(cls, format_id: str) -> CorpusFormat:
        try:
            return cls(format_id.strip().lower())
        except ValueError:
            choices = ", ".join(f.value for f in cls)
            raise ConfigurationError(
                f"Unknown corpus format {format_id!r} (expected one of: {choices})"
            ) from None


_READERS: Dict[CorpusFormat, Callable[[TextIO, str], Iterator[CorpusSample]]] = {
    CorpusFormat.NATIVE: read_native,
    CorpusFormat.CONLL02: read_conll,
    CorpusFormat.CONLL03: read_conll,
}

_WRITERS: Dict[CorpusFormat, Callable[[Iterable[CorpusSample], TextIO], int]] = {
    CorpusFormat.NATIVE: write_native,
    CorpusFormat.CONLL02: write_conll02,
    CorpusFormat.CONLL03: write_conll03,
}


def _stream(path: Path, language: str, corpus_format: CorpusFormat) -> Iterator[CorpusSample]:
    reader = _READERS[corpus_format]
    LOG.debug("Reading %s corpus %s (language=%s)", corpus_format.value, path, language)
    count = 0
    try:
        with open(path, "r", encoding="utf-8") as f:
            for sample in reader(f, str(path)):
                count += 1
                yield sample
    except CorpusReadError:
        raise
    except (OSError, UnicodeDecodeError) as exc:
        raise CorpusReadError(f"Cannot read corpus {path}: {exc}") from exc
    LOG.debug("Read %d samples from %s", count, path)


def open_corpus(path: str | Path, language: str, format_id: str) -> Iterator[CorpusSample]:
    """
    Open a corpus as a lazy, single-pass stream of samples.

    The format is validated immediately; the file itself is opened on the
    first read. Call again to iterate the corpus a second time.

    Args:
        path: Corpus file
        language: Corpus language code
        format_id: One of native, conll02, conll03

    Returns:
        Iterator of CorpusSample
    """
    corpus_format = CorpusFormat.parse(format_id)
    return _stream(Path(path), language, corpus_format)


def write_corpus(samples: Iterable[CorpusSample], path: str | Path, format_id: str) -> int:
    """Write samples to ``path`` in the given format; returns the sample count."""
    corpus_format = CorpusFormat.parse(format_id)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        count = _WRITERS[corpus_format](samples, f)
    LOG.info("Wrote %d samples to %s (%s)", count, path, corpus_format.value)
    return count
