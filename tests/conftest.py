"""
Shared pytest fixtures for record_joins tests.

Provides the sample record sets used across the grouping, join and
pipeline test modules, and isolates every test from the process
environment and the global configuration loader.
"""

import pytest

from record_joins.config import reset_config_loader
from record_joins.logging_config import reset_debug_trace_logger, restore_stderr_logging

RECORD_JOINS_ENV_VARS = (
    "RECORD_JOINS_KEY_SEPARATOR",
    "RECORD_JOINS_DEBUG_LOG",
    "RECORD_JOINS_LOG_DIR",
    "RECORD_JOINS_PROJECT_ROOT",
)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """
    Clear record_joins environment variables and the global config loader.

    Runs automatically before each test so a developer's own settings never
    change separators or turn on debug logging during the test run.
    """
    for name in RECORD_JOINS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_config_loader()

    yield

    reset_config_loader()
    reset_debug_trace_logger()
    restore_stderr_logging()


@pytest.fixture
def users():
    return [
        {"id": 1, "name": "Ana", "role": "admin"},
        {"id": 2, "name": "Juan", "role": "user"},
        {"id": 3, "name": "Luis", "role": "admin"},
    ]


@pytest.fixture
def orders():
    return [
        {"id": 101, "userId": 1, "total": 100},
        {"id": 102, "userId": 1, "total": 50},
        {"id": 103, "userId": 2, "total": 200},
        {"id": 104, "userId": 99, "total": 10},
    ]


@pytest.fixture
def addresses():
    return [
        {"id": 201, "userId": 1, "city": "Madrid"},
        {"id": 202, "userId": 1, "city": "Sevilla"},
        {"id": 203, "userId": 3, "city": "Bilbao"},
    ]


@pytest.fixture
def sales():
    return [
        {"country": "USA", "city": "NYC", "amount": 100},
        {"country": "USA", "city": "LA", "amount": 200},
        {"country": "Spain", "city": "Madrid", "amount": 150},
        {"country": "USA", "city": "NYC", "amount": 300},
    ]


@pytest.fixture
def products():
    return [
        {"sku": "SKU-A", "origin": "origin1", "name": "Widget"},
        {"sku": "SKU-A", "origin": "origin2", "name": "Widget EU"},
        {"sku": "SKU-B", "origin": "origin1", "name": "Gadget"},
        {"sku": "SKU-C", "origin": "origin1", "name": "Gizmo"},
    ]


@pytest.fixture
def prices():
    return [
        {"sku": "SKU-A", "origin": "origin1", "amount": 99.99},
        {"sku": "SKU-A", "origin": "origin2", "amount": 89.99},
        {"sku": "SKU-A", "origin": "origin1", "amount": 95.00},
        {"sku": "SKU-B", "origin": "origin1", "amount": 10.00},
        {"sku": "SKU-Z", "origin": "origin1", "amount": 1.00},
    ]


@pytest.fixture
def enrollments():
    return [
        {"id": 1, "student": "Ana"},
        {"id": 2, "student": "Juan"},
    ]


@pytest.fixture
def period_fees():
    return [
        {"id": 10, "period": "2024-01", "amount": 100},
        {"id": 20, "period": "2024-02", "amount": 100},
        {"id": 30, "period": "2024-03", "amount": 120},
    ]


@pytest.fixture
def payments():
    return [
        {"id": 1001, "enrollmentId": 1, "feeId": 10, "paid": 100},
        {"id": 1002, "enrollmentId": 1, "feeId": 20, "paid": 60},
        {"id": 1003, "enrollmentId": 2, "feeId": 10, "paid": 100},
        {"id": 1004, "enrollmentId": 1, "feeId": 20, "paid": 40},
        {"id": 1005, "enrollmentId": 3, "feeId": 30, "paid": 120},
    ]
