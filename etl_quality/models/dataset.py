# TerraField ETL Quality - Dataset Model
# Positional {columns, rows} table shared by the analyzer and the rule engine

from __future__ import annotations

import copy
import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable, List, Mapping, Optional, Union

import numpy as np
import pandas as pd

from etl_quality.core.exceptions import ValidationException
from etl_quality.core.serialization import to_jsonable

Number = Union[int, float]

WILDCARD_FIELD = "*"


# ============================================================================
# Cell helpers
# ============================================================================

def is_missing(value: Any) -> bool:
    """A cell is missing if it is None, an empty string, or NaN."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, float):
        return math.isnan(value)
    return False


def to_number(value: Any) -> Optional[Number]:
    """
    Parse a cell as a number.

    Ints stay ints, numeric strings are parsed (surrounding whitespace is
    ignored), booleans count as 1/0. Returns None for missing, NaN,
    non-numeric text and nested values.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return None if math.isnan(value) else value
    if isinstance(value, Decimal):
        return None if value.is_nan() else float(value)
    if isinstance(value, np.generic):
        return to_number(value.item())
    if isinstance(value, str):
        s = value.strip()
        if not s or "_" in s:
            return None
        try:
            return int(s)
        except ValueError:
            pass
        try:
            parsed = float(s)
        except ValueError:
            return None
        return None if math.isnan(parsed) else parsed
    return None


def column_index(columns: List[str], name: str) -> int:
    """Position of a column, -1 for the whole-row wildcard or an unknown name."""
    if name == WILDCARD_FIELD:
        return -1
    try:
        return columns.index(name)
    except ValueError:
        return -1


def name_matches(column: str, keywords: Iterable[str]) -> bool:
    lowered = (column or "").lower()
    return any(k in lowered for k in keywords)


# ============================================================================
# Dataset
# ============================================================================

@dataclass
class ShapeIssue:
    """A row whose length disagrees with the column list."""
    row_index: int
    expected: int
    actual: int

    def to_dict(self) -> dict[str, Any]:
        return {"rowIndex": self.row_index, "expected": self.expected, "actual": self.actual}


@dataclass
class Dataset:
    """
    Tabular data as an ordered column list plus positional rows.

    Rows are plain lists aligned with `columns`; the engines index cells by
    position and never reorder or rename columns.
    """
    columns: List[str] = field(default_factory=list)
    rows: List[List[Any]] = field(default_factory=list)
    name: str = "dataset"
    type: str = "csv"

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return len(self.columns)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Dataset":
        """Build a dataset from a `{columns, rows}` mapping."""
        if not isinstance(payload, Mapping):
            raise ValidationException("Dataset must be a mapping with 'columns' and 'rows'")

        columns = payload.get("columns")
        rows = payload.get("rows")

        field_errors: dict[str, list[str]] = {}
        if not isinstance(columns, (list, tuple)):
            field_errors["columns"] = ["must be an array of column names"]
        if not isinstance(rows, (list, tuple)):
            field_errors["rows"] = ["must be an array of rows"]
        elif any(not isinstance(r, (list, tuple)) for r in rows):
            field_errors["rows"] = ["every row must be an array of cells"]
        if field_errors:
            raise ValidationException(
                "Columns and rows must be arrays",
                field_errors=field_errors
            )

        return cls(
            columns=[str(c) for c in columns],
            rows=[list(r) for r in rows],
            name=str(payload.get("name") or "dataset"),
            type=str(payload.get("type") or "csv"),
        )

    @classmethod
    def from_frame(cls, df: pd.DataFrame, name: str = "dataset", type: str = "dataframe") -> "Dataset":
        """Build a dataset from a DataFrame; NaN/NaT become None."""
        columns = [str(c) for c in df.columns]
        rows = [
            [to_jsonable(v) for v in record]
            for record in df.itertuples(index=False, name=None)
        ]
        return cls(columns=columns, rows=rows, name=name, type=type)

    def to_frame(self) -> pd.DataFrame:
        """DataFrame view of the dataset; ragged rows are padded or truncated."""
        width = len(self.columns)
        aligned = [(list(r) + [None] * width)[:width] for r in self.rows]
        return pd.DataFrame(aligned, columns=self.columns, dtype=object)

    def copy(self) -> "Dataset":
        """Deep copy; nested cell values are copied too."""
        return Dataset(
            columns=list(self.columns),
            rows=copy.deepcopy(self.rows),
            name=self.name,
            type=self.type,
        )

    def append_column(self, name: str, fill: Any = None) -> int:
        """Append a column, padding every row; returns its index."""
        self.columns.append(name)
        for row in self.rows:
            row.append(fill)
        return len(self.columns) - 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "columns": list(self.columns),
            "rows": [[to_jsonable(v) for v in row] for row in self.rows],
        }


def coerce_dataset(data: Union[Dataset, Mapping[str, Any], pd.DataFrame]) -> Dataset:
    """Accept a Dataset, a `{columns, rows}` mapping, or a DataFrame."""
    if isinstance(data, Dataset):
        return data
    if isinstance(data, pd.DataFrame):
        return Dataset.from_frame(data)
    return Dataset.from_dict(data)


def check_shape(dataset: Dataset) -> List[ShapeIssue]:
    """Rows whose length differs from the number of columns."""
    expected = len(dataset.columns)
    return [
        ShapeIssue(row_index=i, expected=expected, actual=len(row))
        for i, row in enumerate(dataset.rows)
        if len(row) != expected
    ]
