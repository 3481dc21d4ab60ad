# TerraField ETL Quality - Models Package
"""Value types shared by the analyzer, the suggestion engine and the rule engine."""

from etl_quality.models.dataset import (
    Dataset,
    ShapeIssue,
    check_shape,
    coerce_dataset,
    is_missing,
    to_number,
)
from etl_quality.models.reports import (
    ExecutionLogEntry,
    ExecutionResult,
    ExecutionStatus,
    QualityIssue,
    QualityReport,
    RuleStats,
    RuleTestResult,
    Severity,
    TransformationStats,
)
from etl_quality.models.rules import (
    BaseRule,
    TransformationRule,
    TransformationType,
    parse_rule,
    parse_rules,
)

__all__ = [
    "BaseRule",
    "Dataset",
    "ExecutionLogEntry",
    "ExecutionResult",
    "ExecutionStatus",
    "QualityIssue",
    "QualityReport",
    "RuleStats",
    "RuleTestResult",
    "Severity",
    "ShapeIssue",
    "TransformationRule",
    "TransformationStats",
    "TransformationType",
    "check_shape",
    "coerce_dataset",
    "is_missing",
    "parse_rule",
    "parse_rules",
    "to_number",
]
