# TerraField ETL Quality - Rule Suggestion Engine
# Maps detected quality issues to candidate transformation rules

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from etl_quality.core.clock import Clock, current_year, resolve_clock
from etl_quality.core.config import Settings, get_settings
from etl_quality.core.exceptions import ValidationException
from etl_quality.core.logging import LogContext, get_logger
from etl_quality.models.dataset import WILDCARD_FIELD, name_matches
from etl_quality.models.reports import QualityIssue
from etl_quality.models.rules import (
    CURRENT_DATE,
    BaseRule,
    DateValidationRule,
    DeduplicateRule,
    FillMissingValuesRule,
    NumberTransformRule,
    QualityScoreRule,
    UnsupportedRule,
    ValidationRule,
)

logger = get_logger(__name__)

IssueLike = Union[QualityIssue, Mapping[str, Any]]

GENERIC_FIELDS = frozenset({"all", "multiple"})


@dataclass(frozen=True)
class SuggestionPattern:
    """Issue-text fragments that trigger one kind of rule."""
    key: str
    fragments: tuple[str, ...]

    def matches(self, issue_text: str) -> bool:
        lowered = issue_text.lower()
        return any(f in lowered for f in self.fragments)


class RuleSuggestionEngine:
    """
    Turns quality issues into candidate transformation rules.

    At most one rule is suggested per (field, pattern) pair. Issues on the
    generic `all` and `multiple` fields never produce field rules.
    """

    PATTERNS: tuple[SuggestionPattern, ...] = (
        SuggestionPattern("missing_value", ("missing value",)),
        SuggestionPattern("numeric_validation", ("non-numeric", "not a number")),
        SuggestionPattern("negative_value", ("negative value",)),
        SuggestionPattern("duplicate", ("duplicate",)),
        SuggestionPattern("date_validation", ("future", "invalid date")),
    )

    def __init__(self, settings: Optional[Settings] = None, clock: Optional[Clock] = None) -> None:
        self.settings = settings or get_settings()
        self.clock = resolve_clock(clock)
        self._builders: dict[str, Callable[[str], BaseRule]] = {
            "missing_value": self._fill_missing,
            "numeric_validation": self._validate_numeric,
            "negative_value": self._ensure_positive,
            "duplicate": self._handle_duplicates,
            "date_validation": self._validate_dates,
        }

    def suggest(self, issues: Iterable[IssueLike]) -> list[BaseRule]:
        """Suggest rules for a list of issues."""
        if isinstance(issues, (str, bytes, Mapping)) or not isinstance(issues, Iterable):
            raise ValidationException("Missing or invalid issues array")

        parsed = [self._coerce_issue(i) for i in issues]
        handled: set[tuple[str, str]] = set()
        suggestions: list[BaseRule] = []

        for issue in parsed:
            if issue.field in GENERIC_FIELDS:
                continue
            for pattern in self.PATTERNS:
                key = (issue.field, pattern.key)
                if key in handled or not pattern.matches(issue.issue):
                    continue
                handled.add(key)
                suggestions.append(self._builders[pattern.key](issue.field))

        if parsed:
            if any(i.field == "address" for i in parsed):
                suggestions.append(self._address_standardization())
            suggestions.append(self._quality_score())

        logger.info(
            "Suggested transformation rules",
            context=LogContext(component="RuleSuggestionEngine", operation="suggest"),
            issues=len(parsed),
            suggestions=len(suggestions)
        )
        return suggestions

    @staticmethod
    def _coerce_issue(issue: IssueLike) -> QualityIssue:
        if isinstance(issue, QualityIssue):
            return issue
        if isinstance(issue, Mapping):
            return QualityIssue.from_dict(issue)
        raise ValidationException(
            "Each issue must be an object with field and issue text",
            field_errors={"issues": [f"unexpected item of type {type(issue).__name__}"]}
        )

    # ------------------------------------------------------------------
    # Rule builders
    # ------------------------------------------------------------------

    def _fill_missing(self, field_name: str) -> BaseRule:
        return FillMissingValuesRule(
            name=f"Fill Missing {field_name} Values",
            description=f"Handles missing values in {field_name} column",
            source_field=field_name,
            target_field=field_name,
            transformation_config={
                "strategy": "defaultValue",
                "default_value": self._default_fill_value(field_name),
            },
        )

    def _default_fill_value(self, field_name: str) -> Any:
        lowered = field_name.lower()
        if "date" in lowered:
            return CURRENT_DATE
        if "year" in lowered:
            return current_year(self.clock)
        if name_matches(field_name, ("value", "price")):
            return 0
        return self.settings.transform.default_fill_value

    def _validate_numeric(self, field_name: str) -> BaseRule:
        return ValidationRule(
            name=f"Validate {field_name} as Numeric",
            description=f"Ensures {field_name} column contains valid numeric values",
            source_field=field_name,
            target_field=field_name,
            transformation_config={
                "validation_type": "numeric",
                "action": "convert",
                "fallback_value": 0,
            },
        )

    def _ensure_positive(self, field_name: str) -> BaseRule:
        return NumberTransformRule(
            name=f"Ensure Positive {field_name}",
            description=f"Converts negative values in {field_name} column to positive",
            source_field=field_name,
            target_field=field_name,
            transformation_config={"operation": "abs"},
        )

    def _handle_duplicates(self, field_name: str) -> BaseRule:
        return DeduplicateRule(
            name=f"Handle Duplicate {field_name}",
            description=f"Adds unique suffix to duplicate {field_name} values",
            source_field=field_name,
            target_field=field_name,
            transformation_config={"strategy": "addSuffix", "suffix_pattern": "_${index}"},
        )

    def _validate_dates(self, field_name: str) -> BaseRule:
        return DateValidationRule(
            name=f"Validate {field_name} Dates",
            description=f"Ensures {field_name} has valid dates (not in future)",
            source_field=field_name,
            target_field=field_name,
            transformation_config={"max_date": CURRENT_DATE, "invalid_action": "setToMax"},
        )

    def _address_standardization(self) -> BaseRule:
        return UnsupportedRule(
            name="Address Standardization",
            description="Standardizes address formatting for consistency",
            source_field="address",
            target_field="address",
            transformation_type="addressStandardization",
            transformation_config={"format": "USPS", "includeZipCode": True},
            is_enabled=False,
        )

    def _quality_score(self) -> BaseRule:
        return QualityScoreRule(
            name="Data Quality Score",
            description="Calculates and adds a data quality score column",
            source_field=WILDCARD_FIELD,
            target_field=self.settings.transform.quality_score_column,
            transformation_config={
                "factors": ["completeness", "validity"],
                "weights": {"completeness": 1.0, "validity": 1.0},
            },
            is_enabled=False,
        )


# Factory functions
def get_rule_suggestion_engine(
    settings: Optional[Settings] = None,
    clock: Optional[Clock] = None
) -> RuleSuggestionEngine:
    """Get rule suggestion engine instance."""
    return RuleSuggestionEngine(settings=settings, clock=clock)


def suggest_rules(
    issues: Iterable[IssueLike],
    *,
    clock: Optional[Clock] = None,
    settings: Optional[Settings] = None
) -> list[BaseRule]:
    """Map quality issues to candidate transformation rules."""
    return get_rule_suggestion_engine(settings=settings, clock=clock).suggest(issues)
