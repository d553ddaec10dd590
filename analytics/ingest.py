"""
CSV ingestion: parse uploaded text into a Dataset and derive per-column statistics
"""

import json
import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from analytics.errors import DatasetError, EmptyFile, MalformedRow, UnsupportedFileType

logger = logging.getLogger(__name__)

NUMERIC = "numeric"
CATEGORICAL = "categorical"

CSV_MEDIA_TYPES = ("text/csv", "application/csv")

# Finite decimal literal, optionally signed, with optional exponent
_NUMBER_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


# ────────────────────────────────────────────────────────────────────────────────
# Cell helpers
# ────────────────────────────────────────────────────────────────────────────────


def is_missing(value: Any) -> bool:
    """None, NaN and the empty string all count as a missing cell"""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def is_number(value: Any) -> bool:
    if isinstance(value, (bool, np.bool_)):
        return False
    return isinstance(value, (int, float, np.integer, np.floating))


def normalize_number(value: Any) -> Any:
    """Collapse integral floats to int so 2 and 2.0 compare and serialize alike"""
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return int(value)
    return value


def to_python(value: Any) -> Any:
    """Native scalar for JSON output; NaN becomes None"""
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def coerce_value(text: str) -> Any:
    """Number when the whole trimmed field is a numeric literal, text otherwise"""
    if _NUMBER_RE.match(text):
        number = float(text)
        if math.isfinite(number):
            return normalize_number(number)
    return text


def _json_default(value: Any) -> Any:
    if isinstance(value, np.generic):
        return value.item()
    return str(value)


def observed_values(series: pd.Series) -> List[Any]:
    return [value for value in series.tolist() if not is_missing(value)]


# ────────────────────────────────────────────────────────────────────────────────
# Data model
# ────────────────────────────────────────────────────────────────────────────────


@dataclass
class ColumnStats:
    dtype: str
    missing: int
    min: Optional[float] = None
    max: Optional[float] = None
    mean: Optional[float] = None
    unique: Optional[int] = None

    @property
    def is_numeric(self) -> bool:
        return self.dtype == NUMERIC

    def to_dict(self) -> Dict[str, Any]:
        if self.is_numeric:
            return {
                "dtype": self.dtype,
                "min": self.min,
                "max": self.max,
                "mean": self.mean,
                "missing": self.missing,
            }
        return {"dtype": self.dtype, "unique": self.unique, "missing": self.missing}


@dataclass
class Dataset:
    """A parsed table plus the statistics derived from it"""

    data: pd.DataFrame
    columns: List[str]
    column_stats: Dict[str, ColumnStats]
    shape: Tuple[int, int]
    duplicates: int

    @property
    def numeric_columns(self) -> List[str]:
        return [c for c in self.columns if self.column_stats[c].is_numeric]

    @property
    def categorical_columns(self) -> List[str]:
        return [c for c in self.columns if not self.column_stats[c].is_numeric]

    @property
    def missing_cells(self) -> int:
        return sum(stats.missing for stats in self.column_stats.values())

    def records(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        frame = self.data if limit is None else self.data.head(limit)
        return [
            {column: to_python(value) for column, value in row.items()}
            for row in frame.to_dict(orient="records")
        ]

    def summary(self) -> Dict[str, Any]:
        return {
            "shape": list(self.shape),
            "columns": list(self.columns),
            "column_stats": {c: s.to_dict() for c, s in self.column_stats.items()},
            "duplicates": self.duplicates,
            "missing_cells": self.missing_cells,
        }


# ────────────────────────────────────────────────────────────────────────────────
# Statistics
# ────────────────────────────────────────────────────────────────────────────────


def describe_column(series: pd.Series) -> ColumnStats:
    values = observed_values(series)
    missing = len(series) - len(values)

    # An all-missing column has nothing to be numeric about
    if values and all(is_number(v) for v in values):
        numbers = np.asarray(values, dtype=float)
        return ColumnStats(
            dtype=NUMERIC,
            missing=missing,
            min=normalize_number(float(numbers.min())),
            max=normalize_number(float(numbers.max())),
            mean=float(numbers.mean()),
        )

    return ColumnStats(dtype=CATEGORICAL, missing=missing, unique=len(set(values)))


def compute_column_stats(table: pd.DataFrame, columns: List[str]) -> Dict[str, ColumnStats]:
    return {column: describe_column(table[column]) for column in columns}


def row_keys(table: pd.DataFrame) -> pd.Series:
    """Canonical JSON form of every row, keys in column order"""
    keys = [
        json.dumps(row, default=_json_default)
        for row in table.to_dict(orient="records")
    ]
    return pd.Series(keys, index=table.index, dtype=object)


def duplicate_mask(table: pd.DataFrame) -> pd.Series:
    """True for every row that repeats an earlier row"""
    return row_keys(table).duplicated(keep="first")


def count_duplicates(table: pd.DataFrame) -> int:
    return int(duplicate_mask(table).sum())


def build_dataset(table: pd.DataFrame) -> Dataset:
    """Derive column stats, shape and duplicate count for a table"""
    table = table.reset_index(drop=True)
    columns = [str(c) for c in table.columns]
    return Dataset(
        data=table,
        columns=columns,
        column_stats=compute_column_stats(table, columns),
        shape=(len(table), len(columns)),
        duplicates=count_duplicates(table),
    )


# ────────────────────────────────────────────────────────────────────────────────
# Parsing
# ────────────────────────────────────────────────────────────────────────────────


def parse_csv_text(text: str) -> Dataset:
    """
    Parse comma-separated text with a header line into a Dataset.

    Rows are split on newline and fields on comma; there is no quoting.
    Blank lines are skipped but still count towards the 1-based row index
    reported by MalformedRow.

    Repeated header names alias one field: the later position wins, and
    `columns` and `shape` count distinct names, so `a,b,a` has two columns.
    """
    if text is None or text.strip() == "":
        raise EmptyFile()

    lines = text.split("\n")
    headers = [header.strip() for header in lines[0].split(",")]

    # Later duplicates overwrite earlier ones; keys keep first-seen order
    columns = list(dict.fromkeys(headers))
    if len(columns) < len(headers):
        aliased = sorted({h for h in headers if headers.count(h) > 1})
        logger.warning("Duplicate header names alias each other: %s", aliased)

    rows: List[Dict[str, Any]] = []
    for index, line in enumerate(lines[1:], start=1):
        if line.strip() == "":
            continue

        values = [value.strip() for value in line.split(",")]
        if len(values) != len(headers):
            raise MalformedRow(index, len(headers), len(values))

        row: Dict[str, Any] = {}
        for header, value in zip(headers, values):
            row[header] = coerce_value(value)
        rows.append(row)

    table = pd.DataFrame(rows, columns=columns, dtype=object)
    dataset = build_dataset(table)
    logger.info(
        "Parsed CSV: %d rows x %d columns, %d duplicate rows",
        dataset.shape[0],
        dataset.shape[1],
        dataset.duplicates,
    )
    return dataset


def is_csv_upload(filename: Optional[str], content_type: Optional[str]) -> bool:
    name = (filename or "").lower()
    media_type = (content_type or "").split(";")[0].strip().lower()
    return name.endswith(".csv") or media_type in CSV_MEDIA_TYPES


def read_upload(filename: Optional[str], content_type: Optional[str], payload: bytes) -> Dataset:
    """Validate an uploaded file and parse it"""
    if not is_csv_upload(filename, content_type):
        raise UnsupportedFileType(filename or content_type or "unknown")

    if not payload:
        raise EmptyFile()

    try:
        text = payload.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise DatasetError(f"File is not valid UTF-8 text: {exc.reason}") from exc

    return parse_csv_text(text)
