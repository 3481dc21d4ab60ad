from etl_quality.compute.operators.base import Operation, OperationContext, OperationScope
from etl_quality.compute.operators.cell_ops import CELL_OPERATIONS
from etl_quality.compute.operators.column_ops import COLUMN_OPERATIONS
from etl_quality.compute.operators.row_ops import ROW_OPERATIONS

ALL_OPERATIONS = [*CELL_OPERATIONS, *COLUMN_OPERATIONS, *ROW_OPERATIONS]

__all__ = [
    "ALL_OPERATIONS",
    "Operation",
    "OperationContext",
    "OperationScope",
]
