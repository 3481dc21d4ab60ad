# TerraField ETL Quality - Application Package
"""
TerraField ETL Quality - data quality and transformation engine for imported
appraisal datasets.

This package provides:
- Completeness, accuracy and consistency scoring of `{columns, rows}` datasets
- Suggestion of remediation rules from detected issues
- Ordered execution of field-level transformation rules with logs and stats
- A dry-run rule tester for authoring rules against sample values
"""

from etl_quality.compute.executor import (
    RuleExecutionEngine,
    execute_rules,
    get_rule_execution_engine,
    test_rule,
)
from etl_quality.core.clock import FixedClock, SystemClock
from etl_quality.models.dataset import Dataset, check_shape
from etl_quality.models.reports import ExecutionResult, QualityIssue, QualityReport, RuleTestResult
from etl_quality.models.rules import parse_rule, parse_rules
from etl_quality.quality.analyzer import QualityAnalyzer, analyze_quality, get_quality_analyzer
from etl_quality.quality.suggestions import (
    RuleSuggestionEngine,
    get_rule_suggestion_engine,
    suggest_rules,
)

__version__ = "1.0.0"

__all__ = [
    "Dataset",
    "ExecutionResult",
    "FixedClock",
    "QualityAnalyzer",
    "QualityIssue",
    "QualityReport",
    "RuleExecutionEngine",
    "RuleSuggestionEngine",
    "RuleTestResult",
    "SystemClock",
    "analyze_quality",
    "check_shape",
    "execute_rules",
    "get_quality_analyzer",
    "get_rule_execution_engine",
    "get_rule_suggestion_engine",
    "parse_rule",
    "parse_rules",
    "suggest_rules",
    "test_rule",
]
