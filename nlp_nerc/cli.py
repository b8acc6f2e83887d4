"""
Command line entry point.

Usage:
    nlp-nerc train -p params.properties
    nlp-nerc eval -p params.properties --model en-ner.model --evalReport detailed
    nlp-nerc eval -p params.properties --prediction predicted.conll
    nlp-nerc tag -p params.properties --model en-ner.model --input in.conll --output out.conll
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import OUTPUT_MODEL, ConfigSettings, load_settings
from .errors import NercError
from .eval.corpus_evaluate import CorpusEvaluate
from .eval.evaluate import Evaluator, ReportMode
from .formats import open_corpus, write_corpus
from .train.spacy_tagger import load_model, save_model
from .train.trainer import CrossValidationTrainer

LOG = logging.getLogger("nlp_nerc")


def default_model_path(param_file: str) -> str:
    return Path(param_file).stem + ".model"


def _model_path(args: argparse.Namespace, settings: ConfigSettings) -> str:
    return args.model or settings.output_model(default_model_path(args.params))


def cmd_train(args: argparse.Namespace) -> int:
    settings = load_settings(args.params)
    out_model = settings.output_model(default_model_path(args.params))
    settings = settings.with_values(**{OUTPUT_MODEL: out_model})

    result = CrossValidationTrainer(settings).run()
    save_model(result.model, out_model)
    print()
    print(f"Wrote trained NERC model to {out_model}")
    return 0


def cmd_eval(args: argparse.Namespace) -> int:
    settings = load_settings(args.params)
    if args.prediction:
        CorpusEvaluate.from_settings(args.prediction, settings).evaluate()
        return 0

    # Fail on a bad report mode before loading the model
    mode = ReportMode.parse(args.evalReport or ReportMode.DETAILED)
    model = load_model(_model_path(args, settings))
    Evaluator.from_settings(model, settings, mode=mode).evaluate()
    return 0


def cmd_tag(args: argparse.Namespace) -> int:
    settings = load_settings(args.params)
    output_format = settings.output_format
    samples = open_corpus(args.input, settings.language, settings.corpus_format)
    model = load_model(_model_path(args, settings))
    tagged = (sample.with_spans(model.tag(sample.tokens)) for sample in samples)
    write_corpus(tagged, args.output, output_format)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nlp-nerc",
        description="Train, cross-validate and evaluate named entity taggers",
    )
    subparsers = parser.add_subparsers(dest="command", required=True, help="sub-command help")

    train_parser = subparsers.add_parser("train", help="Training CLI")
    train_parser.add_argument("-p", "--params", required=True, help="Load the training parameters file")
    train_parser.set_defaults(func=cmd_train)

    eval_parser = subparsers.add_parser("eval", help="Evaluation CLI")
    eval_parser.add_argument("-p", "--params", required=True, help="Load the parameters file")
    eval_parser.add_argument("--model", default=None, help="Trained model (default: OutputModel)")
    eval_parser.add_argument(
        "--prediction",
        default=None,
        help="Evaluate this prediction corpus against the TestSet instead of a model",
    )
    eval_parser.add_argument(
        "--evalReport",
        default=None,
        choices=[mode.value for mode in ReportMode],
        help="Report type (default: detailed)",
    )
    eval_parser.set_defaults(func=cmd_eval)

    tag_parser = subparsers.add_parser("tag", help="Tagging CLI")
    tag_parser.add_argument("-p", "--params", required=True, help="Load the parameters file")
    tag_parser.add_argument("--model", default=None, help="Trained model (default: OutputModel)")
    tag_parser.add_argument("--input", required=True, help="Corpus to tag (CorpusFormat)")
    tag_parser.add_argument("--output", required=True, help="Tagged corpus to write (OutputFormat)")
    tag_parser.set_defaults(func=cmd_tag)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(message)s")
    args = build_parser().parse_args(argv)
    LOG.info("CLI options: %s", vars(args))
    try:
        return args.func(args)
    except NercError as exc:
        LOG.error("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
