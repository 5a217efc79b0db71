"""Shared pytest configuration."""

import pytest


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (require a live DynamoDB table)"
    )
    config.addinivalue_line("markers", "slow: marks tests as slow running")
    config.addinivalue_line("markers", "property: marks property-based tests")


def pytest_addoption(parser):
    """Add command line options for integration tests."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests (requires a live DynamoDB table)"
    )
    parser.addoption(
        "--table-name",
        action="store",
        default=None,
        help="DynamoDB table for integration tests"
    )
    parser.addoption(
        "--aws-region",
        action="store",
        default="us-east-1",
        help="AWS region for integration tests"
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless explicitly requested."""
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)
