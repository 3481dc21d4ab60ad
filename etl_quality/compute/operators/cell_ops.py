from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable

from etl_quality.compute.operators.base import OperationContext, OperationScope
from etl_quality.core.clock import current_date_iso, current_year
from etl_quality.core.exceptions import RuleApplicationException
from etl_quality.models.dataset import Number, is_missing, to_number
from etl_quality.models.rules import (
    CURRENT_DATE,
    DateValidationConfig,
    FillMissingValuesConfig,
    NumberTransformConfig,
    ValidationConfig,
)


def _round_half_up(x: Number) -> int:
    return math.floor(x + 0.5)


NUMBER_OPERATIONS: dict[str, Callable[[Number], Number]] = {
    "abs": abs,
    "round": _round_half_up,
    "floor": math.floor,
    "ceil": math.ceil,
}


@dataclass(frozen=True)
class FillMissingValuesOperation:
    name: str = "fillMissingValues"
    scope: OperationScope = OperationScope.CELL

    def apply(
        self,
        rows: list[list[Any]],
        source_index: int,
        target_index: int,
        config: FillMissingValuesConfig,
        ctx: OperationContext,
    ) -> int:
        if config.strategy != "defaultValue":
            raise RuleApplicationException(f"Unsupported fill strategy: {config.strategy}")

        fill = config.default_value
        if fill == CURRENT_DATE:
            fill = current_date_iso(ctx.clock)

        changed = 0
        for row in rows:
            value = row[source_index]
            if is_missing(value):
                row[target_index] = fill
                changed += 1
            elif source_index != target_index:
                row[target_index] = value
        return changed


@dataclass(frozen=True)
class ValidationOperation:
    name: str = "validation"
    scope: OperationScope = OperationScope.CELL

    def apply(
        self,
        rows: list[list[Any]],
        source_index: int,
        target_index: int,
        config: ValidationConfig,
        ctx: OperationContext,
    ) -> int:
        if config.validation_type != "numeric":
            raise RuleApplicationException(
                f"Unsupported validation type: {config.validation_type}"
            )

        changed = 0
        for row in rows:
            value = row[source_index]
            number = None if is_missing(value) else to_number(value)
            if number is not None:
                row[target_index] = number
            elif config.action == "convert":
                row[target_index] = config.fallback_value
                changed += 1
            else:
                row[target_index] = value
        return changed


@dataclass(frozen=True)
class NumberTransformOperation:
    name: str = "numberTransform"
    scope: OperationScope = OperationScope.CELL

    def apply(
        self,
        rows: list[list[Any]],
        source_index: int,
        target_index: int,
        config: NumberTransformConfig,
        ctx: OperationContext,
    ) -> int:
        fn = NUMBER_OPERATIONS.get(config.operation)
        if fn is None:
            raise RuleApplicationException(f"Unsupported number operation: {config.operation}")

        changed = 0
        for row in rows:
            value = row[source_index]
            number = None if is_missing(value) else to_number(value)
            if number is None:
                row[target_index] = value
                continue
            result = fn(number)
            if result != number:
                changed += 1
            row[target_index] = result
        return changed


@dataclass(frozen=True)
class DateValidationOperation:
    """Clamps four-digit years that lie in the future."""

    name: str = "dateValidation"
    scope: OperationScope = OperationScope.CELL

    def apply(
        self,
        rows: list[list[Any]],
        source_index: int,
        target_index: int,
        config: DateValidationConfig,
        ctx: OperationContext,
    ) -> int:
        if config.invalid_action != "setToMax":
            raise RuleApplicationException(f"Unsupported invalid action: {config.invalid_action}")

        limits = ctx.settings.transform
        max_year = _resolve_max_year(config.max_date, ctx)

        changed = 0
        for row in rows:
            value = row[source_index]
            number = None if is_missing(value) else to_number(value)
            if number is not None and limits.min_year <= number <= limits.max_year and number > max_year:
                row[target_index] = max_year
                changed += 1
            else:
                row[target_index] = value
        return changed


def _resolve_max_year(max_date: Any, ctx: OperationContext) -> int:
    if max_date is None or max_date == CURRENT_DATE:
        return current_year(ctx.clock)
    if isinstance(max_date, date):
        return max_date.year

    number = to_number(max_date)
    if number is not None:
        return int(number)
    if isinstance(max_date, str):
        try:
            return date.fromisoformat(max_date.strip()[:10]).year
        except ValueError:
            pass
    raise RuleApplicationException(f"Invalid maxDate: {max_date}")


CELL_OPERATIONS = [
    FillMissingValuesOperation(),
    ValidationOperation(),
    NumberTransformOperation(),
    DateValidationOperation(),
]
