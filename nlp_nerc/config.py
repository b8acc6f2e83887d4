"""
Run configuration: the parameters file read once per run and passed
explicitly to every component.

Two file layouts are accepted:
- properties style (``Key=Value`` or ``Key: Value`` lines, ``#``/``!`` comments)
- YAML mapping (``.yaml`` / ``.yml``)
"""
from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, FrozenSet, Iterator, Optional

import yaml

from .errors import ConfigurationError
from .schema import normalize_label

LOG = logging.getLogger(__name__)

# Settings keys recognized by the training and evaluation code
LANGUAGE = "Language"
TRAIN_SET = "TrainSet"
TEST_SET = "TestSet"
DEV_SET = "DevSet"
CROSS_EVAL = "CrossEval"
TYPES = "Types"
CORPUS_FORMAT = "CorpusFormat"
OUTPUT_FORMAT = "OutputFormat"
OUTPUT_MODEL = "OutputModel"

_RANGE_SEPARATOR = re.compile(r"[ :-]")


@dataclass(frozen=True)
class FoldPartition:
    """Held-out index range [start, end) of one cross-validation fold."""
    start: int
    end: int

    def __contains__(self, index: int) -> bool:
        return self.start <= index < self.end


def parse_eval_range(value: str) -> FoldPartition:
    """
    Parse a ``CrossEval`` value such as ``"2:5"``, ``"2-5"`` or ``"2 5"``.

    Raises:
        ConfigurationError: if the value is not exactly two integers
            with 0 <= start < end
    """
    parts = _RANGE_SEPARATOR.split(value.strip())
    if len(parts) != 2:
        raise ConfigurationError(
            f"{CROSS_EVAL} must be '<start>:<end>', got {value!r}"
        )
    try:
        start, end = int(parts[0]), int(parts[1])
    except ValueError as exc:
        raise ConfigurationError(
            f"{CROSS_EVAL} bounds must be integers, got {value!r}"
        ) from exc
    if start < 0 or start >= end:
        raise ConfigurationError(
            f"{CROSS_EVAL} range must satisfy 0 <= start < end, got {value!r}"
        )
    return FoldPartition(start=start, end=end)


def parse_types(value: str) -> FrozenSet[str]:
    """Split a comma-separated ``Types`` value into normalized labels."""
    types = frozenset(normalize_label(t) for t in value.split(",") if t.strip())
    if not types:
        raise ConfigurationError(f"{TYPES} is set but lists no entity types")
    return types


class ConfigSettings(Mapping):
    """Read-only, ordered string-to-string settings with typed accessors."""

    def __init__(self, values: Optional[Mapping] = None):
        self._values: Dict[str, str] = {}
        for key, value in (values or {}).items():
            self._values[str(key)] = "" if value is None else str(value).strip()

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ConfigSettings({self._values!r})"

    def with_values(self, **overrides: str) -> ConfigSettings:
        """Return a copy with some keys replaced; this instance is unchanged."""
        merged = dict(self._values)
        merged.update(overrides)
        return ConfigSettings(merged)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Value of ``key``; empty values count as unset."""
        value = self._values.get(key)
        return value if value else default

    def require(self, key: str) -> str:
        value = self.get(key)
        if value is None:
            raise ConfigurationError(f"Missing required parameter: {key}")
        return value

    def get_int(self, key: str, default: int) -> int:
        value = self.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError as exc:
            raise ConfigurationError(f"{key} must be an integer, got {value!r}") from exc

    def get_float(self, key: str, default: float) -> float:
        value = self.get(key)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError as exc:
            raise ConfigurationError(f"{key} must be a number, got {value!r}") from exc

    @property
    def language(self) -> str:
        return self.require(LANGUAGE)

    def dataset(self, key: str) -> Optional[str]:
        """Path of the ``TrainSet``/``TestSet``/``DevSet`` corpus, if configured."""
        return self.get(key)

    @property
    def corpus_format(self) -> str:
        return self.require(CORPUS_FORMAT).lower()

    @property
    def output_format(self) -> str:
        value = self.get(OUTPUT_FORMAT)
        return value.lower() if value else self.corpus_format

    @property
    def entity_types(self) -> Optional[FrozenSet[str]]:
        """Allowed entity types, or None when no ``Types`` filter is configured."""
        if TYPES not in self._values:
            return None
        return parse_types(self._values[TYPES])

    @property
    def eval_range(self) -> Optional[FoldPartition]:
        """Cross-validation fold, or None when ``CrossEval`` is absent; a blank value is rejected."""
        if CROSS_EVAL not in self._values:
            return None
        return parse_eval_range(self._values[CROSS_EVAL])

    def output_model(self, default: str) -> str:
        return self.get(OUTPUT_MODEL, default)


def _parse_properties(text: str) -> Dict[str, str]:
    values: Dict[str, str] = {}
    for line_no, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line[0] in "#!":
            continue
        match = re.match(r"([^=:\s]+)\s*[=:]\s*(.*)$", line)
        if not match:
            raise ConfigurationError(f"Malformed parameter line {line_no}: {raw_line!r}")
        values[match.group(1)] = match.group(2)
    return values


def load_settings(path: str | Path) -> ConfigSettings:
    """
    Load a parameters file into a ConfigSettings.

    Args:
        path: Properties-style or YAML parameters file

    Returns:
        ConfigSettings with the file's keys in file order
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read parameters file {path}: {exc}") from exc

    if path.suffix.lower() in (".yaml", ".yml"):
        # BaseLoader keeps every scalar a string ("2:5" is not read as base 60)
        try:
            data = yaml.load(text, Loader=yaml.BaseLoader) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigurationError(f"Expected a mapping in {path}, got {type(data).__name__}")
        if isinstance(data.get(TYPES), list):
            data[TYPES] = ",".join(str(t) for t in data[TYPES])
        values = data
    else:
        values = _parse_properties(text)

    settings = ConfigSettings(values)
    LOG.info("Loaded %d parameters from %s", len(settings), path)
    return settings
