"""
Dataset profile: overview, per-variable analysis, correlations, missing values
"""

import json
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from analytics.editor import mode_of
from analytics.errors import DatasetError
from analytics.ingest import Dataset, is_missing, normalize_number, observed_values, to_python


def _pct(part: int, whole: int) -> float:
    return round(part / whole * 100, 1) if whole else 0.0


def _numeric_series(series: pd.Series) -> pd.Series:
    return pd.to_numeric(series.map(lambda v: np.nan if is_missing(v) else v), errors="coerce")


def overview(dataset: Dataset) -> Dict[str, Any]:
    rows, n_cols = dataset.shape
    missing = dataset.missing_cells
    payload = json.dumps(dataset.records(), separators=(",", ":"))
    return {
        "rows": rows,
        "columns": n_cols,
        "missing": missing,
        "missing_percent": _pct(missing, rows * n_cols),
        "duplicates": dataset.duplicates,
        "memory_kb": round(len(payload) / 1024),
        "datatypes": list(dict.fromkeys(s.dtype for s in dataset.column_stats.values())),
    }


def variable_analysis(dataset: Dataset) -> List[Dict[str, Any]]:
    rows = dataset.shape[0]
    variables = []
    for column in dataset.columns:
        stats = dataset.column_stats[column]
        entry: Dict[str, Any] = {
            "name": column,
            "type": stats.dtype,
            "missing": stats.missing,
            "missing_percent": _pct(stats.missing, rows),
        }
        if stats.is_numeric:
            std = _numeric_series(dataset.data[column]).std()
            entry.update(
                min=stats.min,
                max=stats.max,
                mean=stats.mean,
                std=to_python(float(std)) if pd.notna(std) else None,
            )
        else:
            values = observed_values(dataset.data[column])
            most_common = mode_of(values) if values else None
            freq = values.count(most_common) if values else 0
            entry.update(
                unique=stats.unique,
                most_common=most_common,
                most_common_percent=_pct(freq, rows),
            )
        variables.append(entry)
    return variables


def correlations(dataset: Dataset) -> Dict[str, Any]:
    """Pearson correlation over numeric columns"""
    num_cols = dataset.numeric_columns
    if len(num_cols) < 2:
        return {"columns": num_cols, "matrix": []}

    frame = pd.DataFrame({col: _numeric_series(dataset.data[col]) for col in num_cols})
    corr = frame.corr(method="pearson")
    matrix = [[to_python(float(v)) for v in row] for row in corr.to_numpy()]
    return {"columns": num_cols, "matrix": matrix}


def missing_table(dataset: Dataset) -> List[Dict[str, Any]]:
    rows = dataset.shape[0]
    return [
        {
            "column": column,
            "missing": dataset.column_stats[column].missing,
            "percent_missing": _pct(dataset.column_stats[column].missing, rows),
        }
        for column in dataset.columns
    ]


def build_profile(dataset: Dataset) -> Dict[str, Any]:
    return {
        "overview": overview(dataset),
        "variables": variable_analysis(dataset),
        "correlations": correlations(dataset),
        "missing": missing_table(dataset),
    }


def column_distribution(
    dataset: Dataset, column: str, bins: int = 20, top_k: Optional[int] = 20
) -> Dict[str, Any]:
    """Histogram for a numeric column, value counts for a categorical one"""
    if column not in dataset.column_stats:
        raise DatasetError(f"Column '{column}' not found")

    stats = dataset.column_stats[column]
    values = observed_values(dataset.data[column])

    if stats.is_numeric:
        counts, edges = np.histogram(np.asarray(values, dtype=float), bins=bins)
        histogram = [
            {
                "bin_start": normalize_number(float(edges[i])),
                "bin_end": normalize_number(float(edges[i + 1])),
                "count": int(counts[i]),
            }
            for i in range(len(counts))
        ]
        return {"column": column, "type": stats.dtype, "histogram": histogram}

    vc = pd.Series(values, dtype=object).value_counts(sort=True)
    if top_k:
        vc = vc.head(top_k)
    value_counts = [
        {"value": to_python(value), "count": int(count)} for value, count in vc.items()
    ]
    return {"column": column, "type": stats.dtype, "value_counts": value_counts}
