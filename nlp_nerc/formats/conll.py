"""
CoNLL column formats.

- conll02: ``token [columns...] tag`` (two columns for Spanish, three for Dutch)
- conll03: ``token pos chunk [lemma] tag`` with ``-DOCSTART-`` document lines

The entity tag is always the last column. Both BIO and IOB1 tagging are read:
an ``I-`` tag that does not continue an entity of the same type opens one.
Writers always emit BIO.
"""
from __future__ import annotations

from typing import Iterable, Iterator, List, Optional, TextIO, Tuple

from ..errors import CorpusReadError
from ..schema import CorpusSample, Span, normalize_label

DOCSTART = "-DOCSTART-"
OUTSIDE = "O"


def split_tag(tag: str) -> Tuple[str, Optional[str]]:
    """
    Split a BIO/IOB1 tag into (prefix, type).

    Returns:
        ("O", None) for outside tokens, otherwise ("B" | "I", normalized type)
    """
    if tag == OUTSIDE:
        return OUTSIDE, None
    prefix, sep, entity_type = tag.partition("-")
    if not sep or prefix not in ("B", "I") or not entity_type:
        raise ValueError(f"invalid entity tag {tag!r}")
    return prefix, normalize_label(entity_type)


def decode_tags(tags: List[str]) -> List[Span]:
    """Turn one sentence of BIO/IOB1 tags into spans."""
    spans: List[Span] = []
    current: Optional[Tuple[int, str]] = None

    for idx, tag in enumerate(tags):
        prefix, entity_type = split_tag(tag)
        continues = prefix == "I" and current is not None and current[1] == entity_type
        if continues:
            continue
        if current is not None:
            spans.append(Span(current[0], idx, current[1]))
            current = None
        if entity_type is not None:
            current = (idx, entity_type)

    if current is not None:
        spans.append(Span(current[0], len(tags), current[1]))
    return spans


def encode_tags(sample: CorpusSample) -> List[str]:
    tags = [OUTSIDE] * len(sample.tokens)
    for span in sample.spans:
        tags[span.start] = f"B-{span.type}"
        for idx in range(span.start + 1, span.end):
            tags[idx] = f"I-{span.type}"
    return tags


def read_conll(handle: TextIO, source: str = "<stream>") -> Iterator[CorpusSample]:
    tokens: List[str] = []
    tags: List[str] = []
    first_line = 0

    def flush() -> CorpusSample:
        try:
            return CorpusSample.create(tokens, decode_tags(tags))
        except ValueError as exc:
            raise CorpusReadError(f"{source}:{first_line}: {exc}") from exc

    for line_no, line in enumerate(handle, start=1):
        columns = line.split()
        if not columns or columns[0] == DOCSTART:
            if tokens:
                yield flush()
                tokens, tags = [], []
            continue
        if len(columns) < 2:
            raise CorpusReadError(f"{source}:{line_no}: expected token and tag columns, got {line.strip()!r}")
        if not tokens:
            first_line = line_no
        tokens.append(columns[0])
        tags.append(columns[-1])

    if tokens:
        yield flush()


def write_conll02(samples: Iterable[CorpusSample], handle: TextIO) -> int:
    count = 0
    for sample in samples:
        for token, tag in zip(sample.tokens, encode_tags(sample)):
            handle.write(f"{token} {tag}\n")
        handle.write("\n")
        count += 1
    return count


def write_conll03(samples: Iterable[CorpusSample], handle: TextIO) -> int:
    # POS and chunk columns are unknown here; "_" keeps the column count at four
    handle.write(f"{DOCSTART} -X- -X- {OUTSIDE}\n\n")
    count = 0
    for sample in samples:
        for token, tag in zip(sample.tokens, encode_tags(sample)):
            handle.write(f"{token} _ _ {tag}\n")
        handle.write("\n")
        count += 1
    return count
