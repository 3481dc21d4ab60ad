# TerraField ETL Quality - Custom Exceptions
# Exception hierarchy with error codes, context, and recovery hints

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4


class ErrorCode(str, Enum):
    """Standardized error codes for results and logging."""

    # General errors (1xxx)
    UNKNOWN_ERROR = "E1000"
    VALIDATION_ERROR = "E1001"
    CONFIGURATION_ERROR = "E1002"

    # Data errors (3xxx)
    RULE_APPLICATION_ERROR = "E3008"
    UNSUPPORTED_OPERATION = "E3009"


@dataclass(frozen=True)
class ErrorContext:
    """Immutable context information for error tracking and debugging."""

    error_id: UUID = field(default_factory=uuid4)
    timestamp: datetime = field(default_factory=datetime.utcnow)
    component: str = ""
    operation: str = ""
    additional_data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_id": str(self.error_id),
            "timestamp": self.timestamp.isoformat(),
            "component": self.component,
            "operation": self.operation,
            "additional_data": self.additional_data
        }


class BaseApplicationException(Exception):
    """
    Base exception class for all engine exceptions.

    Carries an error code, a context record and an optional recovery hint
    so callers can render failures without string matching.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
        recovery_hint: Optional[str] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or ErrorContext()
        self.cause = cause
        self.recovery_hint = recovery_hint

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured results."""
        return {
            "error": True,
            "error_code": self.error_code.value,
            "error_type": self.__class__.__name__,
            "message": self.message,
            "recovery_hint": self.recovery_hint,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None
        }

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message='{self.message}', "
            f"error_code={self.error_code}, "
            f"error_id={self.context.error_id})"
        )


# ============================================================================
# Validation Exceptions
# ============================================================================

class ValidationException(BaseApplicationException):
    """Malformed input rejected before any processing."""

    def __init__(
        self,
        message: str,
        field_errors: Optional[dict[str, list[str]]] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(
            message=message,
            error_code=ErrorCode.VALIDATION_ERROR,
            **kwargs
        )
        self.field_errors = field_errors or {}

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["field_errors"] = self.field_errors
        return result


class ConfigurationException(BaseApplicationException):
    """Invalid engine settings."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(
            message=message,
            error_code=ErrorCode.CONFIGURATION_ERROR,
            recovery_hint="Check ETLQ_* environment variables",
            **kwargs
        )


# ============================================================================
# Data Exceptions
# ============================================================================

class DataException(BaseApplicationException):
    """Base exception for data-related errors."""
    pass


class RuleApplicationException(DataException):
    """A transformation operation failed while applying one rule."""

    def __init__(self, message: str, rule_name: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(
            message=message,
            error_code=ErrorCode.RULE_APPLICATION_ERROR,
            **kwargs
        )
        self.rule_name = rule_name


class UnsupportedOperationException(DataException):
    """No operation is registered for a transformation type."""

    def __init__(self, transformation_type: str, **kwargs: Any) -> None:
        super().__init__(
            message=f"Unsupported transformation type: {transformation_type}",
            error_code=ErrorCode.UNSUPPORTED_OPERATION,
            recovery_hint="Use one of the registered transformation types",
            **kwargs
        )
        self.transformation_type = transformation_type
