# TerraField ETL Quality - Result Models
# Quality reports, execution logs and transformation statistics

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Set

from etl_quality.core.serialization import to_jsonable
from etl_quality.models.dataset import Dataset


# ============================================================================
# Enums
# ============================================================================

class Severity(str, Enum):
    """Issue severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ExecutionStatus(str, Enum):
    """Outcome of applying one rule."""
    SUCCESS = "success"
    SKIPPED = "skipped"
    ERROR = "error"


# ============================================================================
# Quality Analysis
# ============================================================================

def clamp_score(value: float) -> int:
    """Clamp to [0, 100] and round half up."""
    return int(min(100, max(0, math.floor(value + 0.5))))


@dataclass
class QualityIssue:
    """Single data quality issue."""
    field: str
    issue: str
    severity: Severity
    recommendation: str = ""

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "QualityIssue":
        try:
            severity = Severity(str(payload.get("severity") or "low").lower())
        except ValueError:
            severity = Severity.LOW
        return cls(
            field=str(payload.get("field") or ""),
            issue=str(payload.get("issue") or ""),
            severity=severity,
            recommendation=str(payload.get("recommendation") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field": self.field,
            "issue": self.issue,
            "severity": self.severity.value,
            "recommendation": self.recommendation,
        }


@dataclass
class QualityReport:
    """Scored, issue-annotated assessment of a dataset."""
    completeness: int = 0  # 0-100
    accuracy: int = 0  # 0-100
    consistency: int = 0  # 0-100
    issues: List[QualityIssue] = field(default_factory=list)
    summary: str = ""
    ai_recommendations: List[str] = field(default_factory=list)

    @property
    def total_issues(self) -> int:
        return len(self.issues)

    def issues_for(self, field_name: str) -> List[QualityIssue]:
        return [i for i in self.issues if i.field == field_name]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalIssues": self.total_issues,
            "completeness": self.completeness,
            "accuracy": self.accuracy,
            "consistency": self.consistency,
            "issues": [i.to_dict() for i in self.issues],
            "summary": self.summary,
            "aiRecommendations": list(self.ai_recommendations),
        }


# ============================================================================
# Rule Execution
# ============================================================================

@dataclass
class ExecutionLogEntry:
    """Outcome record for one rule in a pipeline run."""
    rule: str
    status: ExecutionStatus
    message: str
    transformed_count: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "rule": self.rule,
            "status": self.status.value,
            "message": self.message,
        }
        if self.transformed_count is not None:
            out["transformedCount"] = self.transformed_count
        return out


@dataclass
class RuleStats:
    """Per-rule counters."""
    cells_transformed: int = 0
    fields_affected: Set[str] = field(default_factory=set)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cellsTransformed": self.cells_transformed,
            "fieldsAffected": sorted(self.fields_affected),
        }


@dataclass
class TransformationStats:
    """Aggregated counters for a pipeline run."""
    total_transformations: int = 0
    by_rule: Dict[str, RuleStats] = field(default_factory=dict)

    def record(self, rule_name: str, cells_transformed: int, field_name: str) -> RuleStats:
        stats = self.by_rule.setdefault(rule_name, RuleStats())
        stats.cells_transformed += cells_transformed
        stats.fields_affected.add(field_name)
        self.total_transformations += cells_transformed
        return stats

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalTransformations": self.total_transformations,
            "byRule": {name: s.to_dict() for name, s in self.by_rule.items()},
        }


@dataclass
class ExecutionResult:
    """Transformed dataset together with its log and statistics."""
    transformed_data: Dataset
    execution_log: List[ExecutionLogEntry] = field(default_factory=list)
    transformation_stats: TransformationStats = field(default_factory=TransformationStats)
    processing_time_ms: float = 0.0

    @property
    def succeeded(self) -> bool:
        return all(e.status != ExecutionStatus.ERROR for e in self.execution_log)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "transformedData": self.transformed_data.to_dict(),
            "executionLog": [e.to_dict() for e in self.execution_log],
            "transformationStats": self.transformation_stats.to_dict(),
            "processingTimeMs": round(self.processing_time_ms, 2),
        }


@dataclass
class RuleTestResult:
    """Dry-run output for one rule over a handful of sample values."""
    results: List[Any] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "results": [to_jsonable(r) for r in self.results],
            "errors": list(self.errors),
        }
