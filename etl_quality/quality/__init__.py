# TerraField ETL Quality - Quality Package
"""Quality analysis and issue-to-rule suggestion."""

from etl_quality.quality.analyzer import (
    EnhancedSummary,
    QualityAnalyzer,
    SummaryEnhancer,
    analyze_quality,
    get_quality_analyzer,
)
from etl_quality.quality.suggestions import (
    RuleSuggestionEngine,
    get_rule_suggestion_engine,
    suggest_rules,
)

__all__ = [
    "EnhancedSummary",
    "QualityAnalyzer",
    "RuleSuggestionEngine",
    "SummaryEnhancer",
    "analyze_quality",
    "get_quality_analyzer",
    "get_rule_suggestion_engine",
    "suggest_rules",
]
