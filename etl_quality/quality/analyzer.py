# TerraField ETL Quality - Quality Analyzer
# Completeness, accuracy and consistency scoring for imported datasets

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Protocol, Sequence, Union

import pandas as pd

from etl_quality.core.clock import Clock, current_year, resolve_clock
from etl_quality.core.config import Settings, get_settings
from etl_quality.core.exceptions import ValidationException
from etl_quality.core.logging import LogContext, get_logger, log_execution_time
from etl_quality.models.dataset import (
    Dataset,
    coerce_dataset,
    is_missing,
    name_matches,
    to_number,
)
from etl_quality.models.reports import QualityIssue, QualityReport, Severity, clamp_score

logger = get_logger(__name__)

DatasetLike = Union[Dataset, Mapping[str, Any], pd.DataFrame]


# ============================================================================
# Summary Enhancement
# ============================================================================

@dataclass
class EnhancedSummary:
    """Narrative produced by an external summarizer."""
    enhanced_summary: str
    additional_recommendations: list[str] = field(default_factory=list)


class SummaryEnhancer(Protocol):
    """
    Optional collaborator that rewrites the report summary.

    It receives the first few rows of the dataset and the detected issues;
    it never changes the numeric scores.
    """

    def enhance(
        self,
        name: str,
        type: str,
        sample: Dataset,
        issues: Sequence[QualityIssue]
    ) -> EnhancedSummary: ...


# ============================================================================
# Analyzer
# ============================================================================

@dataclass
class _ScanState:
    missing_count: int = 0
    missing_fields: set[str] = field(default_factory=set)
    accuracy: float = 100.0
    consistency: float = 100.0
    issues: list[QualityIssue] = field(default_factory=list)
    id_counts: Counter = field(default_factory=Counter)


class QualityAnalyzer:
    """
    Single-pass data quality analyzer.

    Every cell is visited once. Findings become QualityIssues and score
    deductions:
    - missing cells lower completeness
    - non-numeric/negative values in numeric-like columns and future years
      lower accuracy
    - ragged rows and duplicate ids lower consistency
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        clock: Optional[Clock] = None,
        enhancer: Optional[SummaryEnhancer] = None
    ) -> None:
        self.settings = settings or get_settings()
        self.clock = resolve_clock(clock)
        self.enhancer = enhancer

    @log_execution_time(operation_name="analyze_quality")
    def analyze(self, name: str, type: str, dataset: DatasetLike) -> QualityReport:
        """Analyze a dataset and return its quality report."""
        context = LogContext(component="QualityAnalyzer", operation="analyze", dataset=name)

        try:
            data = coerce_dataset(dataset)
        except ValidationException as e:
            logger.warning(
                f"Rejected dataset: {e.message}",
                context=context,
                error_code=e.error_code.value,
                field_errors=e.field_errors
            )
            return QualityReport(summary="Invalid data format")

        if data.row_count == 0:
            logger.info("Dataset has no rows", context=context)
            return QualityReport(
                issues=[QualityIssue(
                    field="all",
                    issue="No data rows provided",
                    severity=Severity.HIGH,
                    recommendation="Provide sample data rows for analysis"
                )],
                summary="No data rows were provided, so quality could not be assessed."
            )

        state = self._scan(data)

        total_fields = data.row_count * data.column_count
        completeness = 100.0
        if total_fields > 0:
            missing_pct = state.missing_count / total_fields * 100
            completeness = max(0.0, 100 - missing_pct)
            self._add_missing_summary_issue(state, missing_pct)

        report = QualityReport(
            completeness=clamp_score(completeness),
            accuracy=clamp_score(state.accuracy),
            consistency=clamp_score(state.consistency),
            issues=state.issues,
        )
        report.summary = self._summarize(report, data)

        if self.enhancer is not None:
            self._enhance(name, type, data, report, context)

        logger.info(
            "Quality analysis completed",
            context=context,
            rows=data.row_count,
            columns=data.column_count,
            issues=report.total_issues,
            completeness=report.completeness,
            accuracy=report.accuracy,
            consistency=report.consistency
        )
        return report

    def _scan(self, data: Dataset) -> _ScanState:
        cfg = self.settings.quality
        state = _ScanState()
        year_now = current_year(self.clock)
        columns = data.columns
        expected = len(columns)
        id_index = next(
            (i for i, c in enumerate(columns) if c.lower() == cfg.id_column.lower()),
            -1
        )

        for row_index, row in enumerate(data.rows):
            if len(row) != expected:
                state.issues.append(QualityIssue(
                    field="all",
                    issue=(
                        f"Row length does not match column count "
                        f"(row {row_index}: expected {expected}, got {len(row)})"
                    ),
                    severity=Severity.HIGH,
                    recommendation="Ensure all rows have the same number of fields as columns"
                ))
                state.consistency -= cfg.row_shape_penalty

            if 0 <= id_index < len(row) and not is_missing(row[id_index]):
                state.id_counts[_id_key(row[id_index])] += 1

            for index, value in enumerate(row):
                column = columns[index] if index < expected else f"column{index}"
                self._check_cell(state, column, value, year_now)

        duplicates = [v for v, n in state.id_counts.items() if n > 1]
        if duplicates:
            state.issues.append(QualityIssue(
                field="id",
                issue=f"Found {len(duplicates)} duplicate ID values",
                severity=Severity.HIGH,
                recommendation="Add uniqueness constraint on ID fields and implement deduplication logic"
            ))
            state.consistency -= cfg.duplicate_id_penalty

        return state

    def _check_cell(self, state: _ScanState, column: str, value: Any, year_now: int) -> None:
        cfg = self.settings.quality

        if is_missing(value):
            state.missing_count += 1
            state.missing_fields.add(column)
            state.issues.append(QualityIssue(
                field=column,
                issue=f"Found missing value in {column}",
                severity=Severity.MEDIUM,
                recommendation=f"Add data validation for {column} to ensure completeness"
            ))
            return

        if name_matches(column, cfg.numeric_keywords):
            number = to_number(value)
            if number is None:
                state.issues.append(QualityIssue(
                    field=column,
                    issue=f"Non-numeric value found in numeric column {column}",
                    severity=Severity.HIGH,
                    recommendation=f"Add numeric validation for {column}"
                ))
                state.accuracy -= cfg.non_numeric_penalty
            elif number < 0:
                state.issues.append(QualityIssue(
                    field=column,
                    issue=f"Negative value found in {column}: {_display(value)}",
                    severity=Severity.MEDIUM,
                    recommendation=f"Add range validation for {column} to ensure positive values"
                ))
                state.accuracy -= cfg.negative_value_penalty
        elif name_matches(column, cfg.year_keywords):
            number = to_number(value)
            if number is not None and number > year_now:
                state.issues.append(QualityIssue(
                    field=column,
                    issue=f"Future year found in {column}: {_display(value)}",
                    severity=Severity.MEDIUM,
                    recommendation=f"Add date validation for {column} to prevent future dates"
                ))
                state.accuracy -= cfg.future_year_penalty

    def _add_missing_summary_issue(self, state: _ScanState, missing_pct: float) -> None:
        """
        Report dataset-wide missingness above `missing_report_threshold`.

        Gaps confined to fewer than `missing_summary_min_fields` columns are
        already covered by their per-field issues and are not repeated under
        `multiple`. Set the minimum to 0 to report on the percentage alone.
        """
        cfg = self.settings.quality
        if missing_pct <= cfg.missing_report_threshold or len(state.missing_fields) < cfg.missing_summary_min_fields:
            return

        if missing_pct > cfg.missing_high_threshold:
            severity = Severity.HIGH
        elif missing_pct > cfg.missing_medium_threshold:
            severity = Severity.MEDIUM
        else:
            severity = Severity.LOW

        state.issues.append(QualityIssue(
            field="multiple",
            issue=f"Found {state.missing_count} missing values ({missing_pct:.1f}%)",
            severity=severity,
            recommendation="Add data validation rules to ensure data completeness"
        ))

    def _summarize(self, report: QualityReport, data: Dataset) -> str:
        scope = f"{data.row_count} rows and {data.column_count} columns"
        if not report.issues:
            return f"No data quality issues detected across {scope}."

        scores = {
            "completeness": report.completeness,
            "accuracy": report.accuracy,
            "consistency": report.consistency,
        }
        # Ties resolve in dict order
        weakest = min(scores, key=scores.get)
        noun = "issue" if report.total_issues == 1 else "issues"
        return (
            f"Found {report.total_issues} data quality {noun} across {scope}; "
            f"{weakest} is the main concern at {scores[weakest]}%."
        )

    def _enhance(
        self,
        name: str,
        type: str,
        data: Dataset,
        report: QualityReport,
        context: LogContext
    ) -> None:
        sample_size = self.settings.quality.enhancer_sample_rows
        sample = Dataset(
            columns=list(data.columns),
            rows=[list(r) for r in data.rows[:sample_size]],
            name=name,
            type=type,
        )
        try:
            enhanced = self.enhancer.enhance(name, type, sample, list(report.issues))
        except Exception as e:
            logger.warning(f"Summary enhancement failed: {e}", context=context)
            return

        if enhanced.enhanced_summary:
            report.summary = enhanced.enhanced_summary
        report.ai_recommendations = list(enhanced.additional_recommendations)


def _id_key(value: Any) -> str:
    number = to_number(value)
    if isinstance(value, float) and number is not None and float(number).is_integer():
        return str(int(number))
    return str(value)


def _display(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# Factory functions
def get_quality_analyzer(
    settings: Optional[Settings] = None,
    clock: Optional[Clock] = None,
    enhancer: Optional[SummaryEnhancer] = None
) -> QualityAnalyzer:
    """Get quality analyzer instance."""
    return QualityAnalyzer(settings=settings, clock=clock, enhancer=enhancer)


def analyze_quality(
    name: str,
    type: str,
    dataset: DatasetLike,
    *,
    clock: Optional[Clock] = None,
    enhancer: Optional[SummaryEnhancer] = None,
    settings: Optional[Settings] = None
) -> QualityReport:
    """Score a dataset's completeness, accuracy and consistency."""
    return get_quality_analyzer(settings=settings, clock=clock, enhancer=enhancer).analyze(
        name, type, dataset
    )
