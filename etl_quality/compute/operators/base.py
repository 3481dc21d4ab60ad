from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from etl_quality.core.clock import Clock
from etl_quality.core.config import Settings
from etl_quality.models.rules import RuleModel


class OperationScope(str, Enum):
    """What one application of an operation looks at."""
    CELL = "cell"  # one source cell at a time
    COLUMN = "column"  # the whole source column
    ROW = "row"  # every cell of a row


@dataclass(frozen=True)
class OperationContext:
    columns: list[str]
    clock: Clock
    settings: Settings


class Operation(Protocol):
    name: str
    scope: OperationScope

    def apply(
        self,
        rows: list[list[Any]],
        source_index: int,
        target_index: int,
        config: RuleModel,
        ctx: OperationContext,
    ) -> int: ...
