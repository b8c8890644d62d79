from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Iterator, List, Optional

import pyarrow as pa
import pyarrow.parquet as pq

from .sequences import SequenceEstimate
from .utils.serialization import read_json
from .vocab import TypeTable


def iter_documents(
    path: str,
    fmt: str = "txt",
    ids_key: str = "ids",
    max_docs: Optional[int] = None,
) -> Iterator[List[int]]:
    """Yield token-id documents from txt, jsonl or parquet files.

    txt: one document per line, whitespace separated ids.
    jsonl: a list of ids per line, or an object holding the list under `ids_key`.
    parquet: a list<int> column named `ids_key`.
    """
    n = 0
    fmt = fmt.lower()
    if fmt == "txt":
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                s = line.strip()
                if not s:
                    continue
                yield [int(tok) for tok in s.split()]
                n += 1
                if max_docs and n >= max_docs:
                    return
    elif fmt == "jsonl":
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                obj = json.loads(line)
                if isinstance(obj, dict):
                    if ids_key not in obj:
                        raise KeyError(f"Missing ids field '{ids_key}'. Available: {', '.join(sorted(obj))}")
                    obj = obj[ids_key]
                yield [int(tok) for tok in obj]
                n += 1
                if max_docs and n >= max_docs:
                    return
    elif fmt == "parquet":
        table = pq.read_table(path, columns=[ids_key])
        for doc in table.column(ids_key).to_pylist():
            if doc is None:
                continue
            yield [int(tok) for tok in doc]
            n += 1
            if max_docs and n >= max_docs:
                return
    else:
        raise ValueError(f"Unknown format: {fmt}. Use txt|jsonl|parquet.")


def load_types(path: str) -> TypeTable:
    """Read a type table: one type per line (line i is id i), or a JSON list."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Types file not found: {p}")
    if p.suffix.lower() == ".json":
        payload = read_json(p)
        if isinstance(payload, dict):
            return TypeTable.from_dict(payload)
        return TypeTable(types=tuple(str(t) for t in payload))
    lines = p.read_text(encoding="utf-8").splitlines()
    return TypeTable(types=tuple(line for line in lines if line))


def load_feature_ids(path: str, types: TypeTable) -> set[int]:
    """Allowed feature ids from a file listing one type per line."""
    tokens = [line.strip() for line in Path(path).read_text(encoding="utf-8").splitlines()]
    return types.feature_ids(t for t in tokens if t)


def read_sequence_estimates(path: str, fmt: Optional[str] = None) -> List[SequenceEstimate]:
    """Read externally produced lambda/sigma estimates (jsonl or parquet)."""
    fmt = (fmt or Path(path).suffix.lstrip(".") or "jsonl").lower()
    if fmt == "jsonl":
        rows = []
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line:
                    rows.append(SequenceEstimate.from_dict(json.loads(line)))
        return rows
    if fmt == "parquet":
        return [SequenceEstimate.from_dict(d) for d in pq.read_table(path).to_pylist()]
    raise ValueError(f"Unknown format: {fmt}. Use jsonl|parquet.")


def write_table(table: pa.Table, path: str, fmt: Optional[str] = None) -> Path:
    out = Path(path)
    fmt = (fmt or out.suffix.lstrip(".") or "parquet").lower()
    out.parent.mkdir(parents=True, exist_ok=True)
    if fmt == "parquet":
        pq.write_table(table, out)
    elif fmt == "jsonl":
        with out.open("w", encoding="utf-8") as f:
            for rec in table.to_pylist():
                f.write(json.dumps(rec, ensure_ascii=False) + "\n")
    elif fmt == "csv":
        # list columns do not fit a flat csv row
        flat = table.select([f.name for f in table.schema if not pa.types.is_list(f.type)])
        with out.open("w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=flat.column_names)
            writer.writeheader()
            writer.writerows(flat.to_pylist())
    else:
        raise ValueError(f"Unknown output format: {fmt}. Use parquet|jsonl|csv.")
    return out
