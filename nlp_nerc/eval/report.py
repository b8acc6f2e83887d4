"""
Readable evaluation reports written to a text sink.

- brief    : one aggregate line
- detailed : aggregate line plus a per-type table
- error    : false positive / false negative listing with token context
"""
from __future__ import annotations

from typing import Dict, Iterable, TextIO

import pandas as pd

from .metrics import ErrorRecord, FMeasureAccumulator, TypeMetrics, span_context

TABLE_COLUMNS = ["Type", "Precision", "Recall", "F1", "TP", "FP", "FN"]


def per_type_frame(type_metrics: Dict[str, TypeMetrics]) -> pd.DataFrame:
    """Per-type metrics as a DataFrame, one row per entity type."""
    rows = [
        {
            "Type": metrics.type,
            "Precision": metrics.precision,
            "Recall": metrics.recall,
            "F1": metrics.f1,
            "TP": metrics.tp,
            "FP": metrics.fp,
            "FN": metrics.fn,
        }
        for metrics in type_metrics.values()
    ]
    frame = pd.DataFrame(rows, columns=TABLE_COLUMNS)
    return frame.sort_values("Type", kind="stable").reset_index(drop=True)


def print_brief(accumulator: FMeasureAccumulator, out: TextIO):
    out.write(f"{accumulator}\n")


def print_detailed(accumulator: FMeasureAccumulator, type_metrics: Dict[str, TypeMetrics], out: TextIO):
    """Print aggregate metrics followed by the per-type table."""
    print_brief(accumulator, out)
    out.write(
        f"TP={accumulator.true_positive} FP={accumulator.false_positive} "
        f"FN={accumulator.false_negative}\n"
    )
    if not type_metrics:
        out.write("No entities in reference or hypothesis.\n")
        return

    frame = per_type_frame(type_metrics)
    out.write("\nPer-Type Metrics:\n")
    out.write(frame.to_string(index=False, float_format=lambda v: f"{v:.4f}"))
    out.write("\n")


def print_errors(accumulator: FMeasureAccumulator, records: Iterable[ErrorRecord], out: TextIO):
    """Print every unmatched span with its context, then the aggregate line."""
    for record in records:
        out.write(f"\nSample {record.sample_index}: {' '.join(record.tokens)}\n")
        for span in record.false_positives:
            out.write(
                f"  FP {span.type} ({span.start}, {span.end}): "
                f"{span_context(record.tokens, span)}\n"
            )
        for span in record.false_negatives:
            out.write(
                f"  FN {span.type} ({span.start}, {span.end}): "
                f"{span_context(record.tokens, span)}\n"
            )
    out.write("\n")
    print_brief(accumulator, out)
