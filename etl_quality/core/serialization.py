from __future__ import annotations

import math
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any
from uuid import UUID

import numpy as np
import pandas as pd


def to_jsonable(value: Any) -> Any:
    """
    Best-effort conversion of a cell to JSON-serializable primitives.

    Datasets built from DataFrames carry numpy scalars, pandas timestamps
    and NaN/NaT markers; callers serialise our results themselves, so cells
    are normalised to plain Python values first.
    """

    if value is None:
        return None

    if isinstance(value, (str, bool)):
        return value

    if isinstance(value, int):
        return value

    if isinstance(value, float):
        return None if math.isnan(value) else value

    if isinstance(value, UUID):
        return str(value)

    if value is pd.NaT:
        return None

    if isinstance(value, pd.Timestamp):
        return value.isoformat()

    if isinstance(value, (datetime, date, time)):
        return value.isoformat()

    if isinstance(value, Decimal):
        return float(value)

    if isinstance(value, np.generic):
        return to_jsonable(value.item())

    if isinstance(value, np.ndarray):
        return [to_jsonable(v) for v in value.tolist()]

    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}

    if isinstance(value, (list, tuple, set)):
        return [to_jsonable(v) for v in value]

    # Fallback: preserve the value as a string rather than failing serialization.
    return str(value)
