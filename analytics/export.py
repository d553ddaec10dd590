"""
Download renderings of the current table (CSV, JSON, TSV) and JSON re-import
"""

import json
from typing import Any, Dict, List, Tuple

import pandas as pd

from analytics.errors import DatasetError, UnsupportedFileType
from analytics.ingest import Dataset, build_dataset, to_python

MEDIA_TYPES = {
    "csv": "text/csv",
    "json": "application/json",
    "tsv": "text/tab-separated-values",
}

SEPARATORS = {"csv": ",", "tsv": "\t"}


def _cell(value: Any) -> str:
    value = to_python(value)
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def to_delimited_text(dataset: Dataset, sep: str) -> str:
    """Header plus one line per row; fields are joined as-is, without quoting"""
    lines = [sep.join(dataset.columns)]
    for row in dataset.data.itertuples(index=False, name=None):
        lines.append(sep.join(_cell(value) for value in row))
    return "\n".join(lines)


def to_csv_text(dataset: Dataset) -> str:
    return to_delimited_text(dataset, SEPARATORS["csv"])


def to_tsv_text(dataset: Dataset) -> str:
    return to_delimited_text(dataset, SEPARATORS["tsv"])


def to_json_text(dataset: Dataset, indent: int = 2) -> str:
    return json.dumps(dataset.records(), indent=indent, ensure_ascii=False)


def render(dataset: Dataset, fmt: str) -> Tuple[str, str, str]:
    """Return (content, media type, filename) for a download format"""
    fmt = (fmt or "").lower()
    if fmt == "json":
        content = to_json_text(dataset)
    elif fmt in SEPARATORS:
        content = to_delimited_text(dataset, SEPARATORS[fmt])
    else:
        raise UnsupportedFileType(fmt)
    return content, MEDIA_TYPES[fmt], f"dataset.{fmt}"


def table_from_json(text: str) -> Dataset:
    """Load a JSON array of row objects, e.g. a previous JSON download"""
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DatasetError(f"Invalid JSON: {exc.msg}") from exc

    if not isinstance(payload, list) or not all(isinstance(r, dict) for r in payload):
        raise DatasetError("Expected a JSON array of row objects")

    columns: Dict[str, None] = {}
    for row in payload:
        for key in row:
            columns.setdefault(str(key), None)

    rows: List[Dict[str, Any]] = []
    for row in payload:
        rows.append(
            {
                str(key): json.dumps(value) if isinstance(value, (list, dict)) else value
                for key, value in row.items()
            }
        )

    table = pd.DataFrame(rows, columns=list(columns), dtype=object)
    return build_dataset(table)
