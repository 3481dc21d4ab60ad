from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from etl_quality.compute.operators.base import OperationContext, OperationScope
from etl_quality.core.clock import current_year
from etl_quality.models.dataset import is_missing, name_matches, to_number
from etl_quality.models.reports import clamp_score
from etl_quality.models.rules import QualityScoreConfig

# Weight used when a listed factor has no entry in `weights`
DEFAULT_FACTOR_WEIGHT = 0.5


@dataclass(frozen=True)
class QualityScoreOperation:
    """
    Writes a 0-100 quality score for every row.

    Each row starts at 100 and loses `fraction * 100 * weight` per factor:
    the share of missing cells for `completeness` and the share of invalid
    cells for `validity`. The score column itself is not scored.
    """

    name: str = "qualityScore"
    scope: OperationScope = OperationScope.ROW

    def apply(
        self,
        rows: list[list[Any]],
        source_index: int,
        target_index: int,
        config: QualityScoreConfig,
        ctx: OperationContext,
    ) -> int:
        factors = set(config.factors)
        weights = config.weights
        year_now = current_year(ctx.clock)
        scored = [(i, c) for i, c in enumerate(ctx.columns) if i != target_index]

        changed = 0
        for row in rows:
            cells = [(column, row[i] if i < len(row) else None) for i, column in scored]
            score = 100.0
            if cells:
                if "completeness" in factors:
                    missing = sum(1 for _, v in cells if is_missing(v))
                    score -= missing / len(cells) * 100 * weights.get("completeness", DEFAULT_FACTOR_WEIGHT)
                if "validity" in factors:
                    invalid = sum(1 for c, v in cells if self._is_invalid(c, v, year_now, ctx))
                    score -= invalid / len(cells) * 100 * weights.get("validity", DEFAULT_FACTOR_WEIGHT)
            row[target_index] = clamp_score(score)
            changed += 1
        return changed

    @staticmethod
    def _is_invalid(column: str, value: Any, year_now: int, ctx: OperationContext) -> bool:
        if is_missing(value):
            return False
        cfg = ctx.settings.quality
        number = to_number(value)
        if name_matches(column, cfg.numeric_keywords) and (number is None or number < 0):
            return True
        if name_matches(column, cfg.date_keywords):
            year = number if number is not None else _year_of(value)
            return year is None or year > year_now
        return False


def _year_of(value: Any) -> Optional[int]:
    """Year of a date value or ISO date string, None if it is not a date."""
    if isinstance(value, date):
        return value.year
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10]).year
        except ValueError:
            return None
    return None


ROW_OPERATIONS = [
    QualityScoreOperation(),
]
