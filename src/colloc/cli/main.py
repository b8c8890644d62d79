"""colloc command-line entrypoint."""

from __future__ import annotations

import argparse
from typing import Any, Optional

from ..config import CollocationConfig, SequenceConfig, config_section, load_config
from ..io import iter_documents, load_feature_ids, load_types, read_sequence_estimates, write_table
from ..pipeline import find_collocations_in_documents
from ..sequences import score_sequences
from ..utils.logging import configure_logging
from ..utils.serialization import write_json


def _resolve_arg(value: Any, config_value: Any, default: Any) -> Any:
    if value is not None:
        return value
    if config_value is not None:
        return config_value
    return default


def _print_records(records: list[dict], top: int) -> None:
    for rec in records[:top]:
        print("\t".join(str(v) for v in rec.values()))


def _add_global_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--log-level",
        default=None,
        help="Logging level (e.g., INFO, DEBUG). Also respects COLLOC_LOG_LEVEL env var.",
    )


def _add_output_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--out", default=None, help="Output path. Prints the top rows when omitted.")
    p.add_argument("--out-format", default=None, choices=["parquet", "jsonl", "csv"])
    p.add_argument("--top", type=int, default=20, help="Rows to print when --out is not given.")


def cmd_collocations(args: argparse.Namespace) -> int:
    configure_logging(args.log_level)
    cfg = config_section(load_config(args.config), "collocations")
    defaults = CollocationConfig()

    config = CollocationConfig(
        sizes=_resolve_arg(args.size, cfg.get("sizes"), defaults.sizes),
        method=_resolve_arg(args.method, cfg.get("method"), defaults.method),
        min_count=int(_resolve_arg(args.min_count, cfg.get("min_count"), defaults.min_count)),
        epsilon=float(_resolve_arg(args.epsilon, cfg.get("epsilon"), defaults.epsilon)),
        num_workers=int(_resolve_arg(args.num_workers, cfg.get("num_workers"), defaults.num_workers)),
        progress=bool(args.progress or cfg.get("progress", False)),
    )
    types = load_types(args.types)
    features = load_feature_ids(args.features_file, types) if args.features_file else None
    documents = iter_documents(args.docs, fmt=args.format, ids_key=args.ids_key, max_docs=args.max_docs)

    result = find_collocations_in_documents(documents, types=types, config=config, features=features)
    if args.out:
        out = write_table(result.to_arrow(), args.out, args.out_format)
        # resolved config sidecar
        write_json(out.with_name(out.name + ".meta.json"), {"config": config.to_dict(), "rows": len(result)})
        print(f"[OK] wrote {len(result)} collocations: {out}")
    else:
        _print_records(result.to_records(), args.top)
    return 0


def cmd_sequences(args: argparse.Namespace) -> int:
    configure_logging(args.log_level)
    cfg = config_section(load_config(args.config), "sequences")
    defaults = SequenceConfig()

    config = SequenceConfig(
        sizes=_resolve_arg(args.size, cfg.get("sizes"), defaults.sizes),
        min_count=int(_resolve_arg(args.min_count, cfg.get("min_count"), defaults.min_count)),
        method=_resolve_arg(args.method, cfg.get("method"), defaults.method),
        smoothing=float(_resolve_arg(None, cfg.get("smoothing"), defaults.smoothing)),
    )
    types = load_types(args.types) if args.types else None
    estimates = read_sequence_estimates(args.estimates, args.format)
    result = score_sequences(estimates, types, config)
    if args.out:
        out = write_table(result.to_arrow(), args.out, args.out_format)
        write_json(out.with_name(out.name + ".meta.json"), {"config": config.to_dict(), "rows": len(result)})
        print(f"[OK] wrote {len(result)} sequences: {out}")
    else:
        _print_records(result.to_records(), args.top)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="colloc", description="Collocation detection over token-id streams")
    _add_global_args(p)
    sub = p.add_subparsers(dest="cmd", required=True)

    col = sub.add_parser("collocations", help="Score bigram/trigram collocations")
    col.add_argument("--docs", required=True, help="Token-id documents file")
    col.add_argument("--types", required=True, help="Type table (one type per line, or JSON list)")
    col.add_argument("--format", default="txt", choices=["txt", "jsonl", "parquet"])
    col.add_argument("--ids-key", default="ids", help="Field key for jsonl/parquet.")
    col.add_argument("--max-docs", type=int, default=None)
    col.add_argument("--config", default=None, help="Optional YAML/JSON config file")
    col.add_argument("--size", type=int, nargs="+", default=None, choices=[2, 3])
    col.add_argument("--method", default=None, choices=["lr", "chi2", "pmi", "dice", "all"])
    col.add_argument("--min-count", type=int, default=None)
    col.add_argument("--epsilon", type=float, default=None)
    col.add_argument("--features-file", default=None, help="Allowed types, one per line")
    col.add_argument("--num-workers", type=int, default=None)
    col.add_argument("--progress", action="store_true")
    _add_output_args(col)
    col.set_defaults(func=cmd_collocations)

    seq = sub.add_parser("sequences", help="Score externally estimated lambda/sigma sequences")
    seq.add_argument("--estimates", required=True, help="jsonl/parquet table of ids, count, lambda, sigma")
    seq.add_argument("--format", default=None, choices=["jsonl", "parquet"])
    seq.add_argument("--types", default=None)
    seq.add_argument("--config", default=None, help="Optional YAML/JSON config file")
    seq.add_argument("--size", type=int, nargs="+", default=None, choices=[2, 3, 4, 5])
    seq.add_argument("--method", default=None, choices=["lambda", "lambda1"])
    seq.add_argument("--min-count", type=int, default=None)
    _add_output_args(seq)
    seq.set_defaults(func=cmd_sequences)

    return p


def main(argv: Optional[list[str]] = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
