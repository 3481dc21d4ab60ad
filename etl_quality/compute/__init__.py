from etl_quality.compute.executor import (
    RuleExecutionEngine,
    execute_rules,
    get_rule_execution_engine,
    test_rule,
)
from etl_quality.compute.registry import OperationRegistry, default_registry

__all__ = [
    "OperationRegistry",
    "RuleExecutionEngine",
    "default_registry",
    "execute_rules",
    "get_rule_execution_engine",
    "test_rule",
]
