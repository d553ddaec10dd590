"""
Column editor: remove columns, remove duplicate rows, fill missing values.

Every operation returns a new table and leaves the dataset it was given alone.
The caller decides whether the result becomes the dataset of record.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping

import numpy as np
import pandas as pd

from analytics.errors import InvalidFillRule
from analytics.ingest import (
    Dataset,
    coerce_value,
    duplicate_mask,
    is_missing,
    is_number,
    normalize_number,
    observed_values,
)

logger = logging.getLogger(__name__)

FILL_METHODS = ("constant", "mean", "median", "mode")
NUMERIC_ONLY_METHODS = ("mean", "median")


@dataclass(frozen=True)
class FillRule:
    method: str
    value: Any = None


def remove_columns(dataset: Dataset, names: Iterable[str]) -> pd.DataFrame:
    """Keep every column not named; names that are not present are ignored"""
    drop = set(names)
    remaining = [column for column in dataset.columns if column not in drop]
    return dataset.data.loc[:, remaining].copy()


def remove_duplicates(dataset: Dataset) -> pd.DataFrame:
    """Keep the first occurrence of every distinct row, in original order"""
    mask = duplicate_mask(dataset.data)
    return dataset.data.loc[~mask].reset_index(drop=True)


def median_of(values: List[Any]) -> Any:
    return normalize_number(float(np.median(np.asarray(values, dtype=float))))


def mode_of(values: List[Any]) -> Any:
    # most_common keeps first-encountered order among equal counts
    return Counter(values).most_common(1)[0][0]


def resolve_fill_value(dataset: Dataset, column: str, rule: FillRule) -> Any:
    """Work out the value a rule writes into the missing cells of a column"""
    if column not in dataset.column_stats:
        raise InvalidFillRule(column, "column not found")

    stats = dataset.column_stats[column]
    method = rule.method

    if method not in FILL_METHODS:
        raise InvalidFillRule(column, f"unknown fill method '{method}'")

    if method in NUMERIC_ONLY_METHODS and not stats.is_numeric:
        raise InvalidFillRule(column, f"{method} requires a numeric column")

    if method == "constant":
        raw = rule.value
        if raw is None or (isinstance(raw, str) and raw.strip() == ""):
            raise InvalidFillRule(column, "a constant value is required")
        if isinstance(raw, bool) or not isinstance(raw, (str, int, float)):
            raise InvalidFillRule(column, "constant must be a scalar")
        if not stats.is_numeric:
            return raw
        number = raw if is_number(raw) else coerce_value(str(raw).strip())
        if not is_number(number):
            raise InvalidFillRule(column, f"'{raw}' is not a number")
        return normalize_number(number)

    values = observed_values(dataset.data[column])
    if not values:
        raise InvalidFillRule(column, "column has no values to derive a fill from")

    if method == "mean":
        return normalize_number(stats.mean)
    if method == "median":
        return median_of(values)
    return mode_of(values)


def fill_missing(dataset: Dataset, rules: Mapping[str, FillRule]) -> pd.DataFrame:
    """
    Apply one fill rule per column to a copy of the table.

    All rules are resolved before any cell is written, so a single invalid
    rule leaves nothing half-applied.
    """
    fill_values: Dict[str, Any] = {
        column: resolve_fill_value(dataset, column, rule)
        for column, rule in rules.items()
    }

    table = dataset.data.copy()
    for column, value in fill_values.items():
        mask = table[column].map(is_missing).astype(bool)
        if mask.any():
            table.loc[mask, column] = value
        logger.debug("Filled %d cells in '%s' with %r", int(mask.sum()), column, value)

    return table


def describe_fill(rules: Mapping[str, FillRule]) -> str:
    parts = []
    for column, rule in rules.items():
        if rule.method == "constant":
            parts.append(f"{column} ← {rule.value!r}")
        else:
            parts.append(f"{column} ← {rule.method}")
    return "Fill missing values: " + ", ".join(parts)
