from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Any

from etl_quality.compute.operators.base import OperationContext, OperationScope
from etl_quality.core.exceptions import RuleApplicationException
from etl_quality.models.rules import DeduplicateConfig

INDEX_PLACEHOLDER = "${index}"


def stringify(value: Any) -> str:
    """Text form used to group duplicate cells."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class DeduplicateOperation:
    """
    Suffixes repeated values so every cell in the column becomes unique.

    The first occurrence of a repeated value is left as-is; the n-th
    occurrence (n >= 2) gets `suffix_pattern` appended with `${index}`
    replaced by n.
    """

    name: str = "deduplicate"
    scope: OperationScope = OperationScope.COLUMN

    def apply(
        self,
        rows: list[list[Any]],
        source_index: int,
        target_index: int,
        config: DeduplicateConfig,
        ctx: OperationContext,
    ) -> int:
        if config.strategy != "addSuffix":
            raise RuleApplicationException(f"Unsupported deduplicate strategy: {config.strategy}")

        occurrences = Counter(stringify(row[source_index]) for row in rows)
        seen: Counter = Counter()

        changed = 0
        for row in rows:
            value = row[source_index]
            key = stringify(value)
            if occurrences[key] > 1:
                seen[key] += 1
                if seen[key] > 1:
                    row[target_index] = key + config.suffix_pattern.replace(
                        INDEX_PLACEHOLDER, str(seen[key])
                    )
                    changed += 1
                    continue
            row[target_index] = value
        return changed


COLUMN_OPERATIONS = [
    DeduplicateOperation(),
]
