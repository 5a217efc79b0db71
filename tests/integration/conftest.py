"""
Fixtures for integration tests.

These tests read and write a real DynamoDB table and need AWS credentials
with access to it. They are skipped unless ``--integration`` is given.
"""

import os
import pytest
import boto3

from src.aws_clients.dynamodb_store import DynamoDBRecordStore
from src.config.config_manager import StoreConfig


@pytest.fixture(scope="session")
def integration_config(request):
    """Store configuration for integration tests."""
    return StoreConfig(
        table_name=(
            request.config.getoption("--table-name")
            or os.environ.get('CONTACTS_TABLE_NAME', 'aws-contact-queries-records')
        ),
        region=request.config.getoption("--aws-region") or os.environ.get('AWS_REGION', 'us-east-1'),
        page_size=10
    )


@pytest.fixture(scope="session")
def aws_credentials():
    """Verify AWS credentials are available."""
    try:
        identity = boto3.client('sts').get_caller_identity()
        return {'account_id': identity['Account'], 'arn': identity['Arn']}
    except Exception as e:
        pytest.skip(f"AWS credentials not available: {e}")


@pytest.fixture
def live_store(integration_config, aws_credentials):
    """Record store over the live table."""
    return DynamoDBRecordStore(config=integration_config)
