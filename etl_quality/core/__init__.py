# TerraField ETL Quality - Core Package
"""
Core package containing the ambient components shared by every engine:
- Configuration management
- Exception hierarchy
- Logging infrastructure
- Injectable clock
"""

from etl_quality.core.clock import Clock, FixedClock, SystemClock
from etl_quality.core.config import Settings, get_settings
from etl_quality.core.exceptions import (
    BaseApplicationException,
    ConfigurationException,
    ErrorCode,
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

__all__ = [
    # Clock
    "Clock",
    "FixedClock",
    "SystemClock",
    # Config
    "Settings",
    "get_settings",
    # Exceptions
    "BaseApplicationException",
    "ConfigurationException",
    "ErrorCode",
    "RuleApplicationException",
    "UnsupportedOperationException",
    "ValidationException",
    # Logging
    "LogContext",
    "clear_run_context",
    "get_logger",
    "log_execution_time",
    "set_run_context",
]
