# TerraField ETL Quality - Sample Datasets
# Small appraisal-style datasets with known quality problems

from __future__ import annotations

import random
from typing import Any, Dict, List

import numpy as np
import pandas as pd

from etl_quality.core.clock import FixedClock
from etl_quality.models.dataset import Dataset

# All tests pin "today" so year heuristics are reproducible
TEST_CLOCK = FixedClock.at(2025, 6, 15)


def scenario_a() -> Dataset:
    """Duplicate id, one missing address, one negative value, one future year."""
    return Dataset(
        columns=["id", "address", "value", "yearBuilt"],
        rows=[
            [1, "123 Main St", 450000, 2008],
            [2, "", -50, 2060],
            [1, "Dup", 100, 1990],
        ],
        name="scenario-a",
    )


def scenario_a_payload() -> Dict[str, Any]:
    return scenario_a().to_dict()


def clean_properties() -> Dataset:
    return Dataset(
        columns=["id", "address", "salePrice", "squareFeet", "yearBuilt"],
        rows=[
            [101, "12 Oak Ave", 325000, 1850, 1995],
            [102, "7 Elm St", 410000, 2200, 2004],
            [103, "99 Pine Rd", 289500, 1600, 1978],
        ],
        name="clean",
    )


def ragged_rows() -> Dataset:
    return Dataset(
        columns=["id", "address", "value"],
        rows=[
            [1, "1 First St", 100],
            [2, "2 Second St"],
            [3, "3 Third St", 300, "extra"],
        ],
        name="ragged",
    )


def sparse_properties() -> Dataset:
    """Many missing cells spread over several columns."""
    return Dataset(
        columns=["id", "address", "assessedValue", "saleDate"],
        rows=[
            [1, None, 120000, "2020-01-01"],
            [2, "", None, ""],
            [3, "3 Main", "", None],
            [4, "4 Main", 95000, "2021-05-05"],
        ],
        name="sparse",
    )


def random_properties(n_rows: int = 50, seed: int = 42) -> Dataset:
    """Random rows with missing, negative and out-of-range values sprinkled in."""
    rng = random.Random(seed)
    np.random.seed(seed)
    values = np.random.normal(300000, 80000, n_rows).round().astype(int).tolist()
    rows: List[List[Any]] = []
    for i in range(n_rows):
        value: Any = values[i]
        roll = rng.random()
        if roll < 0.1:
            value = None
        elif roll < 0.15:
            value = -abs(value)
        elif roll < 0.2:
            value = "n/a"
        year: Any = rng.choice([1950, 1987, 2001, 2019, 2031, "", None])
        rows.append([i % (n_rows - 3), f"{i} Random Rd", value, year])
    return Dataset(columns=["id", "address", "marketValue", "yearBuilt"], rows=rows, name="random")


def properties_frame() -> pd.DataFrame:
    return pd.DataFrame({
        "id": [1, 2, 3],
        "address": ["1 A St", None, "3 C St"],
        "price": [100.0, np.nan, -5.0],
    })
