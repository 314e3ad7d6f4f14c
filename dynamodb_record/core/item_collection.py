"""
Query and Scan Result Enumeration

ItemCollection is what Record.query() and Record.scan() return. It is
lazy: no request is sent until it is iterated, and each iteration starts
again from the first page. Pages are fetched through the store client's
page() method, following LastEvaluatedKey until DynamoDB reports no more
pages.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional

logger = logging.getLogger(__name__)


class ItemCollection:
    """Enumerable result of a Query or Scan, yielding clean record instances.

    Args:
        operation: 'query' or 'scan'
        request: Raw boto3 request parameters, passed through unchanged
        record_class: Record subclass used to build instances
        client: Store client providing page()
    """

    def __init__(self, operation: str, request: Dict[str, Any], record_class, client):
        self.operation = operation
        self.request = dict(request)
        self.record_class = record_class
        self.client = client
        self.last_evaluated_key: Optional[Dict[str, Any]] = None

    def pages(self) -> Iterator[List[Any]]:
        """Yield one list of record instances per page."""
        table_name = self.record_class.table_name()
        start_key = self.request.get('ExclusiveStartKey')
        page_number = 0

        while True:
            request = dict(self.request)
            if start_key:
                request['ExclusiveStartKey'] = start_key

            items, start_key = self.client.page(table_name, request, self.operation)
            self.last_evaluated_key = start_key
            page_number += 1
            logger.debug(f"{self.operation} on {table_name}: page {page_number} with {len(items)} items")

            yield [self.record_class.from_dynamodb_item(item) for item in items]

            if not start_key:
                break

    def __iter__(self):
        for page in self.pages():
            yield from page

    def __repr__(self) -> str:
        return f"ItemCollection(operation={self.operation!r}, record={self.record_class.__name__})"
