"""
Test configuration and fixtures for dynamodb_record.

Unit tests bind record classes to RecordingStoreClient, an in-memory store
client that records every request and answers reads from stubbed
responses. Integration tests use moto's mock_aws instead.
"""

import boto3
import pytest
from moto import mock_aws

from dynamodb_record import (
    BooleanAttribute,
    DateAttribute,
    DynamoDBConfig,
    IntegerAttribute,
    ListAttribute,
    Record,
    StringAttribute,
)


class RecordingStoreClient:
    """Store client double that records requests instead of sending them."""

    def __init__(self):
        self.requests = []
        self.get_response = None
        self.page_responses = []
        self.error = None

    def _record(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error

    def get(self, table_name, key):
        self._record({'operation': 'get', 'table_name': table_name, 'key': key})
        return self.get_response

    def put(self, table_name, item):
        self._record({'operation': 'put', 'table_name': table_name, 'item': item})

    def delete(self, table_name, key):
        self._record({'operation': 'delete', 'table_name': table_name, 'key': key})

    def page(self, table_name, request, operation="query"):
        self._record({'operation': operation, 'table_name': table_name, 'request': request})
        return self.page_responses.pop(0)


@pytest.fixture
def stub_client():
    """Recording store client with no stubbed responses."""
    return RecordingStoreClient()


@pytest.fixture
def post_class(stub_client):
    """Record with an integer hash key, a date range key and a renamed boolean."""

    class Post(Record):
        class Meta:
            table_name = "TestTable"

        id = IntegerAttribute(hash_key=True)
        date = DateAttribute(range_key=True)
        body = StringAttribute()
        bool = BooleanAttribute(storage_name="my_boolean")

    Post.configure_client(stub_client)
    return Post


@pytest.fixture
def keyed_class(stub_client):
    """Record with a string hash key only."""

    class Note(Record):
        class Meta:
            table_name = "test_table"

        mykey = StringAttribute(hash_key=True)
        body = StringAttribute()
        tags = ListAttribute()

    Note.configure_client(stub_client)
    return Note


# Integration fixtures

@pytest.fixture
def mock_dynamodb_config():
    """DynamoDB configuration for mocked testing."""
    return DynamoDBConfig(
        aws_access_key_id="test_key",
        aws_secret_access_key="test_secret",
        region_name="us-east-1",
        endpoint_url=None,  # Use default AWS endpoint for moto
        environment="test",
        table_prefix=""
    )


@pytest.fixture
def mock_dynamodb_client():
    """Mocked low-level DynamoDB client."""
    with mock_aws():
        yield boto3.client(
            'dynamodb',
            region_name='us-east-1',
            aws_access_key_id="test_key",
            aws_secret_access_key="test_secret",
        )


@pytest.fixture
def posts_table(mock_dynamodb_client):
    """Create the posts table (hash: id N, range: date S)."""
    mock_dynamodb_client.create_table(
        TableName='test_TestTable',
        KeySchema=[
            {'AttributeName': 'id', 'KeyType': 'HASH'},
            {'AttributeName': 'date', 'KeyType': 'RANGE'}
        ],
        AttributeDefinitions=[
            {'AttributeName': 'id', 'AttributeType': 'N'},
            {'AttributeName': 'date', 'AttributeType': 'S'}
        ],
        BillingMode='PAY_PER_REQUEST'
    )
    return 'test_TestTable'
