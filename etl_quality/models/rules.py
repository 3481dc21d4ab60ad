# TerraField ETL Quality - Transformation Rule Schemas
# Pydantic models for rules, with one typed config per transformation type

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Iterable, Literal, Mapping, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from etl_quality.core.exceptions import ValidationException


# ============================================================================
# Enums
# ============================================================================

class TransformationType(str, Enum):
    """Transformation types the execution engine knows how to apply."""
    FILL_MISSING_VALUES = "fillMissingValues"
    VALIDATION = "validation"
    NUMBER_TRANSFORM = "numberTransform"
    DEDUPLICATE = "deduplicate"
    DATE_VALIDATION = "dateValidation"
    QUALITY_SCORE = "qualityScore"


SUPPORTED_TYPES = frozenset(t.value for t in TransformationType)

CURRENT_DATE = "CURRENT_DATE"


class RuleModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore"
    )


# ============================================================================
# Config Schemas
# ============================================================================

class FillMissingValuesConfig(RuleModel):
    strategy: str = "defaultValue"
    default_value: Any = "N/A"


class ValidationConfig(RuleModel):
    validation_type: str = "numeric"
    action: str = "convert"
    fallback_value: Any = 0


class NumberTransformConfig(RuleModel):
    operation: str = "abs"


class DeduplicateConfig(RuleModel):
    strategy: str = "addSuffix"
    suffix_pattern: str = "_${index}"


class DateValidationConfig(RuleModel):
    max_date: Any = CURRENT_DATE
    invalid_action: str = "setToMax"


class QualityScoreConfig(RuleModel):
    factors: list[str] = Field(default_factory=lambda: ["completeness", "validity"])
    weights: dict[str, float] = Field(
        default_factory=lambda: {"completeness": 1.0, "validity": 1.0}
    )


# ============================================================================
# Rule Schemas
# ============================================================================

class BaseRule(RuleModel):
    """Fields shared by every transformation rule."""

    id: Optional[int] = None
    name: str = Field(..., min_length=1)
    description: str = ""
    source_field: str = Field(..., min_length=1)
    target_field: str = Field(..., min_length=1)
    is_enabled: bool = True

    @model_validator(mode="before")
    @classmethod
    def default_target_to_source(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            has_target = data.get("targetField") or data.get("target_field")
            if not has_target:
                data = dict(data)
                data["targetField"] = data.get("sourceField", data.get("source_field"))
        return data

    @field_validator("transformation_config", mode="before", check_fields=False)
    @classmethod
    def empty_config(cls, v: Any) -> Any:
        return {} if v is None else v

    @property
    def is_wildcard(self) -> bool:
        return self.source_field == "*"

    def to_dict(self) -> dict[str, Any]:
        """Wire representation (camelCase keys)."""
        exclude = {"id"} if self.id is None else None
        return self.model_dump(by_alias=True, exclude=exclude)


class FillMissingValuesRule(BaseRule):
    transformation_type: Literal["fillMissingValues"] = "fillMissingValues"
    transformation_config: FillMissingValuesConfig = Field(default_factory=FillMissingValuesConfig)


class ValidationRule(BaseRule):
    transformation_type: Literal["validation"] = "validation"
    transformation_config: ValidationConfig = Field(default_factory=ValidationConfig)


class NumberTransformRule(BaseRule):
    transformation_type: Literal["numberTransform"] = "numberTransform"
    transformation_config: NumberTransformConfig = Field(default_factory=NumberTransformConfig)


class DeduplicateRule(BaseRule):
    transformation_type: Literal["deduplicate"] = "deduplicate"
    transformation_config: DeduplicateConfig = Field(default_factory=DeduplicateConfig)


class DateValidationRule(BaseRule):
    transformation_type: Literal["dateValidation"] = "dateValidation"
    transformation_config: DateValidationConfig = Field(default_factory=DateValidationConfig)


class QualityScoreRule(BaseRule):
    transformation_type: Literal["qualityScore"] = "qualityScore"
    transformation_config: QualityScoreConfig = Field(default_factory=QualityScoreConfig)


class UnsupportedRule(BaseRule):
    """A rule whose type has no operation; carried through and skipped."""
    transformation_type: str
    transformation_config: dict[str, Any] = Field(default_factory=dict)


def _rule_tag(value: Any) -> str:
    if isinstance(value, Mapping):
        t = value.get("transformationType", value.get("transformation_type"))
    else:
        t = getattr(value, "transformation_type", None)
    if isinstance(t, str) and t in SUPPORTED_TYPES:
        return t
    return "unsupported"


TransformationRule = Annotated[
    Union[
        Annotated[FillMissingValuesRule, Tag("fillMissingValues")],
        Annotated[ValidationRule, Tag("validation")],
        Annotated[NumberTransformRule, Tag("numberTransform")],
        Annotated[DeduplicateRule, Tag("deduplicate")],
        Annotated[DateValidationRule, Tag("dateValidation")],
        Annotated[QualityScoreRule, Tag("qualityScore")],
        Annotated[UnsupportedRule, Tag("unsupported")],
    ],
    Discriminator(_rule_tag),
]

_rule_adapter: TypeAdapter[TransformationRule] = TypeAdapter(TransformationRule)


def _field_errors(exc: ValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"] if str(p) not in SUPPORTED_TYPES | {"unsupported"})
        errors.setdefault(loc or "rule", []).append(err["msg"])
    return errors


def parse_rule(payload: Union[BaseRule, Mapping[str, Any]]) -> BaseRule:
    """Validate one rule mapping into its typed model."""
    if isinstance(payload, BaseRule):
        return payload
    if not isinstance(payload, Mapping):
        raise ValidationException("Transformation rule must be an object")
    try:
        return _rule_adapter.validate_python(payload)
    except ValidationError as e:
        name = payload.get("name") or "<unnamed>"
        raise ValidationException(
            f"Invalid transformation rule '{name}'",
            field_errors=_field_errors(e),
            cause=e
        ) from e


def parse_rules(payloads: Iterable[Union[BaseRule, Mapping[str, Any]]]) -> list[BaseRule]:
    if isinstance(payloads, (str, bytes, Mapping)) or not isinstance(payloads, Iterable):
        raise ValidationException("Invalid rules format. Expected an array of transformation rules")
    return [parse_rule(p) for p in payloads]
