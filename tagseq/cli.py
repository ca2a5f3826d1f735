"""Command-line interface for building and applying feature/label mappings.

`tagseq train` runs training-mode analysis over a tagged corpus and saves the
resulting mappings; `tagseq extract` loads them and writes the feature vectors
and label ids of new sequences without growing either mapping.
"""
from __future__ import annotations
import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .config import Config, load_config
from .errors import TagseqError
from .io_utils import load_sequences, save_analyzed_sequences
from .observations import default_pos_analyzer
from .progress import progress


def _load_cfg(path: Optional[str]) -> Config:
    if path is None:
        return Config()
    print(f"Loading configuration from {path}...")
    return load_config(path)


def cmd_train(args: argparse.Namespace) -> None:
    cfg = _load_cfg(args.config)
    if args.no_compress:
        cfg.compress_features = False
    output_dir = args.output_dir or cfg.mapping_prefix

    print(f"Loading sequences from {args.input}...")
    sequences = load_sequences(args.input)

    analyzer = default_pos_analyzer(cfg)
    for seq in progress(sequences, "Analyzing (training)", len(sequences), cfg.show_progress):
        analyzer.analyze(seq)

    print(f"Found {analyzer.num_features} features and {analyzer.num_labels} labels.")
    analyzer.save(output_dir)
    print(f"Successfully saved mappings to {output_dir}")


def cmd_extract(args: argparse.Namespace) -> None:
    cfg = _load_cfg(args.config)
    model_dir = args.model_dir or cfg.mapping_prefix

    analyzer = default_pos_analyzer(cfg)
    print(f"Loading mappings from {model_dir}...")
    analyzer.load(model_dir)

    print(f"Loading sequences from {args.input}...")
    sequences = load_sequences(args.input)
    for seq in progress(sequences, "Analyzing", len(sequences), cfg.show_progress):
        analyzer.analyze_readonly(seq)

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    save_analyzed_sequences(str(output_path), sequences)
    print(f"Successfully wrote analyzed sequences to {output_path}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tagseq",
        description="Extract feature ids and label ids from tokenized sequences.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    train = sub.add_parser("train", help="Build feature and label mappings from a tagged corpus.")
    train.add_argument("--input", required=True, help="Path to the tagged sequences JSON file.")
    train.add_argument("--output-dir", help="Directory to write the mappings to (default: config mapping_prefix).")
    train.add_argument("--config", help="Path to the configuration YAML file.")
    train.add_argument("--no-compress", action="store_true", help="Save feature.mapping uncompressed.")
    train.set_defaults(func=cmd_train)

    extract = sub.add_parser("extract", help="Analyze sequences against existing mappings.")
    extract.add_argument("--input", required=True, help="Path to the sequences JSON file.")
    extract.add_argument("--output", required=True, help="Path to write the analyzed JSON file.")
    extract.add_argument("--model-dir", help="Directory holding the mappings (default: config mapping_prefix).")
    extract.add_argument("--config", help="Path to the configuration YAML file.")
    extract.set_defaults(func=cmd_extract)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    try:
        args.func(args)
    except (TagseqError, FileNotFoundError, ValueError, TypeError) as e:
        print(f"\nError: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
