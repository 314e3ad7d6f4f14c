"""
DynamoDB Store Client

Record classes talk to DynamoDB through a store client: a small object
offering get, put, delete and page over tagged attribute values. Anything
with those four methods can be configured on a record class (see
StoreClient); DynamoDBStoreClient is the boto3-backed implementation.

The client stays thin:

1. It speaks the boto3 low-level client format (``{'N': '1'}``), which is
   exactly what the record marshalers produce.
2. It does not wrap or retry errors. A botocore ClientError reaches the
   caller unchanged; retry behaviour is whatever botocore is configured
   with.
3. It resolves physical table names through DynamoDBConfig, so table
   prefixes and environments stay out of record declarations.
"""

import logging
from typing import Any, Dict, List, Optional, Protocol, Tuple

import boto3
from botocore.config import Config

from ..config import DynamoDBConfig
from ..exceptions import ConnectionError

logger = logging.getLogger(__name__)

Item = Dict[str, Dict[str, Any]]

PAGE_OPERATIONS = ('query', 'scan')


class StoreClient(Protocol):
    """Operations a record class needs from its store."""

    def get(self, table_name: str, key: Item) -> Optional[Item]:
        ...

    def put(self, table_name: str, item: Item) -> None:
        ...

    def delete(self, table_name: str, key: Item) -> None:
        ...

    def page(self, table_name: str, request: Dict[str, Any], operation: str = "query") -> Tuple[List[Item], Optional[Item]]:
        ...


class DynamoDBStoreClient:
    """
    boto3-backed store client.

    The boto3 client is created lazily on first use and reused afterwards.
    """

    def __init__(self, config: Optional[DynamoDBConfig] = None):
        """Initialize store client.

        Args:
            config: DynamoDB configuration (read from the environment when omitted)
        """
        self.config = config or DynamoDBConfig.from_env()
        self._client = None

        if self.config.enable_debug_logging:
            logging.getLogger("dynamodb_record").setLevel(logging.DEBUG)

    @property
    def client(self):
        """Lazy initialization of the boto3 DynamoDB client."""
        if self._client is None:
            try:
                session = boto3.Session(
                    aws_access_key_id=self.config.aws_access_key_id,
                    aws_secret_access_key=self.config.aws_secret_access_key,
                    region_name=self.config.region_name
                )

                client_kwargs = {
                    'region_name': self.config.region_name
                }

                if self.config.endpoint_url:
                    client_kwargs['endpoint_url'] = self.config.endpoint_url

                client_kwargs['config'] = Config(
                    retries={'max_attempts': self.config.retries},
                    max_pool_connections=self.config.max_pool_connections,
                    read_timeout=self.config.timeout_seconds,
                    connect_timeout=self.config.timeout_seconds
                )

                self._client = session.client('dynamodb', **client_kwargs)
            except Exception as e:
                logger.error(f"Failed to create DynamoDB client: {e}")
                raise ConnectionError(f"Failed to connect to DynamoDB: {e}", e) from e
        return self._client

    def physical_table_name(self, table_name: str) -> str:
        return self.config.physical_table_name(table_name)

    def get(self, table_name: str, key: Item) -> Optional[Item]:
        """
        Fetch one item by primary key.

        Returns:
            The tagged item, or None when no item has that key
        """
        physical_name = self.physical_table_name(table_name)
        response = self.client.get_item(TableName=physical_name, Key=key)
        item = response.get('Item')
        logger.debug(f"Get item from {physical_name}: {key} ({'found' if item else 'not found'})")
        return item

    def put(self, table_name: str, item: Item) -> None:
        """Write a full item, replacing any existing item with the same key."""
        physical_name = self.physical_table_name(table_name)
        self.client.put_item(TableName=physical_name, Item=item)
        logger.info(f"Put item in {physical_name}: {item}")

    def delete(self, table_name: str, key: Item) -> None:
        physical_name = self.physical_table_name(table_name)
        self.client.delete_item(TableName=physical_name, Key=key)
        logger.info(f"Deleted item from {physical_name}: {key}")

    def page(self, table_name: str, request: Dict[str, Any], operation: str = "query") -> Tuple[List[Item], Optional[Item]]:
        """
        Fetch one page of a Query or Scan.

        Args:
            table_name: Logical table name
            request: Raw boto3 query/scan parameters (any TableName is replaced),
                including ExclusiveStartKey for follow-up pages
            operation: 'query' or 'scan'

        Returns:
            Tuple of (tagged items, LastEvaluatedKey or None when done)

        Example:
            items, last_key = store.page(
                'TestTable',
                {
                    'KeyConditionExpression': 'id = :id',
                    'ExpressionAttributeValues': {':id': {'N': '5'}},
                },
            )
        """
        if operation not in PAGE_OPERATIONS:
            raise ValueError(f"Unsupported page operation: {operation}. Supported values: {PAGE_OPERATIONS}")

        physical_name = self.physical_table_name(table_name)
        if operation == 'scan' and 'Limit' not in request:
            logger.warning(f"Scan on {physical_name} without Limit - consider adding one")

        # The record's table always wins over a TableName in the request
        response = getattr(self.client, operation)(**{**request, 'TableName': physical_name})
        items = response.get('Items', [])
        last_key = response.get('LastEvaluatedKey')
        logger.debug(f"{operation.capitalize()} page from {physical_name}: {len(items)} items")
        return items, last_key
