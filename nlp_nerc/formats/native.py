"""
Native one-sentence-per-line format:

    <START:person> John <END> lives in <START:location> Paris <END>

Tokens are whitespace separated; blank lines separate documents and are skipped.
"""
from __future__ import annotations

import re
from typing import Iterable, Iterator, List, Optional, TextIO, Tuple

from ..errors import CorpusReadError
from ..schema import CorpusSample, Span, normalize_label

START_TAG = re.compile(r"^<START(?::([^>]+))?>$")
END_TAG = "<END>"
DEFAULT_TYPE = "default"


def parse_line(line: str) -> CorpusSample:
    """
    Parse one annotated sentence.

    Raises:
        ValueError: on unbalanced or nested START/END tags
    """
    tokens: List[str] = []
    spans: List[Span] = []
    open_entity: Optional[Tuple[int, str]] = None

    for part in line.split():
        start_match = START_TAG.match(part)
        if start_match:
            if open_entity is not None:
                raise ValueError("nested <START> tag")
            open_entity = (len(tokens), normalize_label(start_match.group(1) or DEFAULT_TYPE))
        elif part == END_TAG:
            if open_entity is None:
                raise ValueError("<END> without <START>")
            start, entity_type = open_entity
            if start == len(tokens):
                raise ValueError("empty entity")
            spans.append(Span(start, len(tokens), entity_type))
            open_entity = None
        else:
            tokens.append(part)

    if open_entity is not None:
        raise ValueError("<START> without <END>")
    return CorpusSample.create(tokens, spans)


def read_native(handle: TextIO, source: str = "<stream>") -> Iterator[CorpusSample]:
    for line_no, line in enumerate(handle, start=1):
        if not line.strip():
            continue
        try:
            yield parse_line(line)
        except ValueError as exc:
            raise CorpusReadError(f"{source}:{line_no}: {exc}") from exc


def format_sample(sample: CorpusSample) -> str:
    starts = {span.start: span for span in sample.spans}
    ends = {span.end for span in sample.spans}
    parts: List[str] = []
    for idx, token in enumerate(sample.tokens):
        if idx in ends:
            parts.append(END_TAG)
        if idx in starts:
            parts.append(f"<START:{starts[idx].type}>")
        parts.append(token)
    if len(sample.tokens) in ends:
        parts.append(END_TAG)
    return " ".join(parts)


def write_native(samples: Iterable[CorpusSample], handle: TextIO) -> int:
    count = 0
    for sample in samples:
        handle.write(format_sample(sample) + "\n")
        count += 1
    return count
