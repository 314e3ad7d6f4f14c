"""
Core infrastructure components for DynamoDB operations.

This module contains the store-facing building blocks used by record classes:
- DynamoDBStoreClient: Thin boto3 client for get/put/delete and paged reads
- StoreClient: Protocol any replacement client must satisfy
- ItemCollection: Lazy enumeration over query and scan pages
"""

from .item_collection import ItemCollection
from .store_client import DynamoDBStoreClient, StoreClient

__all__ = [
    "DynamoDBStoreClient",
    "ItemCollection",
    "StoreClient",
]
