from __future__ import annotations

import copy
import time
from typing import Any, Iterable, Mapping, Optional, Union

import pandas as pd

from etl_quality.compute.operators.base import Operation, OperationContext, OperationScope
from etl_quality.compute.registry import OperationRegistry, default_registry
from etl_quality.core.clock import Clock, resolve_clock
from etl_quality.core.config import Settings, get_settings
from etl_quality.core.exceptions import (
    RuleApplicationException,
    UnsupportedOperationException,
    ValidationException,
)
from etl_quality.core.logging import (
    LogContext,
    clear_run_context,
    get_logger,
    log_execution_time,
    set_run_context,
)
from etl_quality.models.dataset import Dataset, check_shape, coerce_dataset, column_index
from etl_quality.models.reports import (
    ExecutionLogEntry,
    ExecutionResult,
    ExecutionStatus,
    RuleTestResult,
    TransformationStats,
)
from etl_quality.models.rules import BaseRule, parse_rule

logger = get_logger(__name__)

DatasetLike = Union[Dataset, Mapping[str, Any], pd.DataFrame]
RuleLike = Union[BaseRule, Mapping[str, Any]]


class RuleExecutionEngine:
    """
    Applies an ordered list of transformation rules to a dataset.

    Rules run strictly in order against the current state of a private
    working copy. A failing rule is logged as an error and the pipeline
    moves on; the caller's dataset is never modified.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        clock: Optional[Clock] = None,
        registry: Optional[OperationRegistry] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.clock = resolve_clock(clock)
        self._registry = registry or default_registry()

    @log_execution_time(operation_name="execute_rules")
    def execute(self, dataset: DatasetLike, rules: Iterable[RuleLike]) -> ExecutionResult:
        start = time.perf_counter()
        context = LogContext(component="RuleExecutionEngine", operation="execute")

        try:
            source = coerce_dataset(dataset)
        except ValidationException as e:
            logger.warning(
                "Invalid data format. Expected {columns: string[], rows: any[][]}",
                context=context,
                error=e.message,
                field_errors=e.field_errors,
            )
            return ExecutionResult(transformed_data=Dataset())

        working = source.copy()
        if isinstance(rules, (str, bytes, Mapping)) or not isinstance(rules, Iterable):
            e = ValidationException("Invalid rules format. Expected an array of transformation rules")
            logger.warning(e.message, context=context, error_code=e.error_code.value)
            return ExecutionResult(transformed_data=working)

        set_run_context(dataset=working.name)
        try:
            self._normalize_shape(working, context)

            stats = TransformationStats()
            log: list[ExecutionLogEntry] = []
            for position, payload in enumerate(rules):
                entry = self._run_rule(working, payload, position, stats)
                log.append(entry)
                if entry.status == ExecutionStatus.ERROR:
                    logger.warning(
                        f"Rule failed: {entry.message}",
                        context=LogContext(component="RuleExecutionEngine", operation="execute", rule=entry.rule),
                    )
                else:
                    logger.debug(
                        entry.message,
                        context=LogContext(component="RuleExecutionEngine", operation="execute", rule=entry.rule),
                        status=entry.status.value,
                    )

            result = ExecutionResult(
                transformed_data=working,
                execution_log=log,
                transformation_stats=stats,
                processing_time_ms=(time.perf_counter() - start) * 1000,
            )
            logger.info(
                "Transformation rules executed",
                context=context,
                rules=len(log),
                failed=sum(1 for e in log if e.status == ExecutionStatus.ERROR),
                skipped=sum(1 for e in log if e.status == ExecutionStatus.SKIPPED),
                total_transformations=stats.total_transformations,
            )
            return result
        finally:
            clear_run_context()

    def _normalize_shape(self, working: Dataset, context: LogContext) -> None:
        ragged = check_shape(working)
        dropped = 0
        for issue in ragged:
            row = working.rows[issue.row_index]
            if issue.actual < issue.expected:
                row.extend([None] * (issue.expected - issue.actual))
            else:
                dropped += issue.actual - issue.expected
                working.rows[issue.row_index] = row[:issue.expected]
        if ragged:
            logger.warning(
                "Normalized ragged rows before applying rules",
                context=context,
                rows=[i.row_index for i in ragged],
                dropped_cells=dropped,
            )

    def _run_rule(
        self,
        working: Dataset,
        payload: RuleLike,
        position: int,
        stats: TransformationStats,
    ) -> ExecutionLogEntry:
        try:
            rule = parse_rule(payload)
        except Exception as e:
            name = payload.get("name") if isinstance(payload, Mapping) else None
            return ExecutionLogEntry(
                rule=str(name or f"rule[{position}]"),
                status=ExecutionStatus.ERROR,
                message=e.message if isinstance(e, ValidationException) else f"Invalid transformation rule: {e}",
            )

        if not rule.is_enabled:
            return ExecutionLogEntry(rule=rule.name, status=ExecutionStatus.SKIPPED, message="Rule is disabled")

        try:
            op = self._registry.get(rule.transformation_type)
        except UnsupportedOperationException as e:
            return ExecutionLogEntry(rule=rule.name, status=ExecutionStatus.SKIPPED, message=e.message)

        try:
            count = self._apply(working, rule, op)
        except Exception as e:
            if not isinstance(e, RuleApplicationException):
                logger.exception(
                    f"Unexpected failure in {rule.transformation_type}",
                    context=LogContext(component="RuleExecutionEngine", operation="apply", rule=rule.name),
                    error_type=type(e).__name__,
                )
            return ExecutionLogEntry(
                rule=rule.name,
                status=ExecutionStatus.ERROR,
                message=str(e) or f"Error applying {rule.name}",
            )

        stats.record(rule.name, count, rule.target_field)
        return ExecutionLogEntry(
            rule=rule.name,
            status=ExecutionStatus.SUCCESS,
            message=f"Applied {rule.transformation_type} transformation successfully",
            transformed_count=count,
        )

    def _apply(self, working: Dataset, rule: BaseRule, op: Operation) -> int:
        source_index = column_index(working.columns, rule.source_field)
        if rule.is_wildcard:
            if op.scope != OperationScope.ROW:
                raise RuleApplicationException(
                    f"{rule.transformation_type} needs a named source field",
                    rule_name=rule.name,
                )
        elif source_index < 0:
            raise RuleApplicationException(
                f"Source field '{rule.source_field}' not found",
                rule_name=rule.name,
            )

        if rule.target_field not in working.columns and rule.target_field != rule.source_field:
            working.append_column(rule.target_field)

        target_index = column_index(working.columns, rule.target_field)
        if target_index < 0:
            raise RuleApplicationException(
                f"Target field '{rule.target_field}' not found",
                rule_name=rule.name,
            )

        ctx = OperationContext(columns=working.columns, clock=self.clock, settings=self.settings)
        return op.apply(working.rows, source_index, target_index, rule.transformation_config, ctx)

    def test_rule(self, rule: RuleLike, sample_values: Iterable[Any]) -> RuleTestResult:
        """
        Dry-run one rule over a list of sample values.

        Cell operations run per sample, so one bad sample yields a None
        result and an indexed error without stopping the batch. Column
        operations see the whole sample list; row operations score each
        sample as a one-cell row. The rule's enabled flag is ignored.
        """
        try:
            parsed = parse_rule(rule)
        except ValidationException as e:
            return RuleTestResult(errors=[e.message])
        except Exception as e:
            return RuleTestResult(errors=[f"Invalid transformation rule: {e}"])

        if isinstance(sample_values, (str, bytes, Mapping)) or not isinstance(sample_values, Iterable):
            return RuleTestResult(errors=["Sample values must be an array"])
        samples = copy.deepcopy(list(sample_values))

        try:
            op = self._registry.get(parsed.transformation_type)
        except UnsupportedOperationException as e:
            return RuleTestResult(results=samples, errors=[e.message])

        if op.scope == OperationScope.COLUMN:
            result = self._test_column(parsed, op, samples)
        elif op.scope == OperationScope.ROW:
            result = self._test_rows(parsed, op, samples)
        else:
            result = self._test_cells(parsed, op, samples)

        logger.debug(
            "Rule test completed",
            context=LogContext(component="RuleExecutionEngine", operation="test_rule", rule=parsed.name),
            samples=len(samples),
            errors=len(result.errors),
        )
        return result

    def _test_cells(self, rule: BaseRule, op: Operation, samples: list[Any]) -> RuleTestResult:
        result = RuleTestResult()
        ctx = OperationContext(columns=[rule.source_field], clock=self.clock, settings=self.settings)
        for index, sample in enumerate(samples):
            rows = [[sample]]
            try:
                op.apply(rows, 0, 0, rule.transformation_config, ctx)
            except Exception as e:
                result.results.append(None)
                result.errors.append(f"Error processing sample at index {index}: {e}")
                continue
            result.results.append(rows[0][0])
        return result

    def _test_column(self, rule: BaseRule, op: Operation, samples: list[Any]) -> RuleTestResult:
        rows = [[s] for s in samples]
        ctx = OperationContext(columns=[rule.source_field], clock=self.clock, settings=self.settings)
        try:
            op.apply(rows, 0, 0, rule.transformation_config, ctx)
        except Exception as e:
            return RuleTestResult(
                results=[None] * len(samples),
                errors=[f"Error applying transformation: {e}"],
            )
        return RuleTestResult(results=[r[0] for r in rows])

    def _test_rows(self, rule: BaseRule, op: Operation, samples: list[Any]) -> RuleTestResult:
        result = RuleTestResult()
        ctx = OperationContext(
            columns=[rule.source_field, rule.target_field],
            clock=self.clock,
            settings=self.settings,
        )
        source_index = -1 if rule.is_wildcard else 0
        for index, sample in enumerate(samples):
            rows = [[sample, None]]
            try:
                op.apply(rows, source_index, 1, rule.transformation_config, ctx)
            except Exception as e:
                result.results.append(None)
                result.errors.append(f"Error processing sample at index {index}: {e}")
                continue
            result.results.append(rows[0][1])
        return result


# Factory functions
def get_rule_execution_engine(
    settings: Optional[Settings] = None,
    clock: Optional[Clock] = None,
    registry: Optional[OperationRegistry] = None,
) -> RuleExecutionEngine:
    """Get rule execution engine instance."""
    return RuleExecutionEngine(settings=settings, clock=clock, registry=registry)


def execute_rules(
    dataset: DatasetLike,
    rules: Iterable[RuleLike],
    *,
    clock: Optional[Clock] = None,
    settings: Optional[Settings] = None,
) -> ExecutionResult:
    """Apply rules in order to a working copy of the dataset."""
    return get_rule_execution_engine(settings=settings, clock=clock).execute(dataset, rules)


def test_rule(
    rule: RuleLike,
    sample_values: Iterable[Any],
    *,
    clock: Optional[Clock] = None,
    settings: Optional[Settings] = None,
) -> RuleTestResult:
    """Dry-run one rule over sample values."""
    return get_rule_execution_engine(settings=settings, clock=clock).test_rule(rule, sample_values)


# Keep pytest from collecting the public helper as a test
test_rule.__test__ = False
