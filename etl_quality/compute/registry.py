from __future__ import annotations

from etl_quality.compute.operators import ALL_OPERATIONS
from etl_quality.compute.operators.base import Operation
from etl_quality.core.exceptions import UnsupportedOperationException


class OperationRegistry:
    def __init__(self) -> None:
        self._ops: dict[str, Operation] = {}

    def register(self, op: Operation) -> None:
        self._ops[op.name] = op

    def get(self, name: str) -> Operation:
        if name not in self._ops:
            raise UnsupportedOperationException(name)
        return self._ops[name]

    def __contains__(self, name: object) -> bool:
        return name in self._ops

    def list(self) -> list[str]:
        return sorted(self._ops.keys())


def default_registry() -> OperationRegistry:
    reg = OperationRegistry()
    for op in ALL_OPERATIONS:
        reg.register(op)
    return reg
