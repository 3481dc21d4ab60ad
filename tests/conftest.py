# TerraField ETL Quality - Pytest Configuration
# Shared fixtures and configuration for all tests

import sys
import os

import pytest

# Add parent to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from tests.sample_datasets import (
    TEST_CLOCK,
    clean_properties,
    ragged_rows,
    scenario_a,
    sparse_properties,
)


# =============================================================================
# Engine Fixtures
# =============================================================================

@pytest.fixture
def fixed_clock():
    """Clock pinned to 2025-06-15."""
    return TEST_CLOCK


@pytest.fixture
def settings():
    """Default settings, independent of ETLQ_* environment variables."""
    from etl_quality.core.config import Settings
    return Settings(_env_file=None)


@pytest.fixture
def engine(settings, fixed_clock):
    from etl_quality.compute.executor import RuleExecutionEngine
    return RuleExecutionEngine(settings=settings, clock=fixed_clock)


# =============================================================================
# Dataset Fixtures
# =============================================================================

@pytest.fixture
def scenario_a_dataset():
    return scenario_a()


@pytest.fixture
def clean_dataset():
    return clean_properties()


@pytest.fixture
def ragged_dataset():
    return ragged_rows()


@pytest.fixture
def sparse_dataset():
    return sparse_properties()


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "scenario: end-to-end scenarios with pinned expected output"
    )
    config.addinivalue_line(
        "markers", "property: invariants checked over generated datasets"
    )
    config.addinivalue_line(
        "markers", "edge_case: marks tests for edge case scenarios"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection."""
    # Tag scenario tests by name
    for item in items:
        if 'scenario' in item.name.lower():
            item.add_marker(pytest.mark.scenario)
