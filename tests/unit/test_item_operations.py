"""
Tests for record persistence operations (save, find, delete, reload, query, scan).

Every test runs against RecordingStoreClient so the exact requests handed to
the store can be asserted, including the absence of any request when key
validation fails.
"""

from datetime import date
from unittest.mock import patch

import pytest
from botocore.exceptions import ClientError

from dynamodb_record import ItemCollection, KeyMissing, NotFound, TypeMismatch


def _client_error(code="ConditionalCheckFailedException", operation="PutItem"):
    return ClientError({'Error': {'Code': code, 'Message': 'boom'}}, operation)


class TestSave:
    """Test Record.save()."""

    def test_save_sends_full_item(self, post_class, stub_client):
        """Test saving sends every set attribute under its storage name."""
        item = post_class()
        item.id = 1
        item.date = '2015-12-14'
        item.body = 'Hello!'

        assert item.save() is True

        assert stub_client.requests == [{
            'operation': 'put',
            'table_name': 'TestTable',
            'item': {
                'id': {'N': '1'},
                'date': {'S': '2015-12-14'},
                'body': {'S': 'Hello!'}
            }
        }]

    def test_save_uses_storage_name(self, post_class, stub_client):
        """Test a renamed attribute is written under its storage name."""
        post_class(id=1, date='2015-12-14', bool=False).save()

        item = stub_client.requests[0]['item']
        assert item['my_boolean'] == {'BOOL': False}
        assert 'bool' not in item

    def test_save_without_keys(self, post_class, stub_client):
        """Test saving without keys fails and never reaches the store."""
        no_keys = post_class()
        with pytest.raises(KeyMissing) as exc_info:
            no_keys.save()
        assert str(exc_info.value) == "Missing required keys: id, date"
        assert exc_info.value.names == ['id', 'date']

        no_hash = post_class(date='2015-12-15')
        with pytest.raises(KeyMissing) as exc_info:
            no_hash.save()
        assert str(exc_info.value) == "Missing required keys: id"

        no_range = post_class(id=5)
        with pytest.raises(KeyMissing) as exc_info:
            no_range.save()
        assert str(exc_info.value) == "Missing required keys: date"

        assert stub_client.requests == []

    def test_save_marks_clean(self, post_class):
        """Test a successful save marks the record clean."""
        item = post_class(id=1, date='2015-12-14', body='Hello!')
        assert item.is_instance_dirty() is True

        item.save()

        assert item.is_instance_dirty() is False
        assert item.was('body') == 'Hello!'
        assert item.was('date') == date(2015, 12, 14)

    def test_save_store_error_propagates(self, post_class, stub_client):
        """Test store errors reach the caller unchanged and leave the record dirty."""
        error = _client_error()
        stub_client.error = error
        item = post_class(id=1, date='2015-12-14')

        with pytest.raises(ClientError) as exc_info:
            item.save()

        assert exc_info.value is error
        assert item.is_instance_dirty() is True

    def test_save_rejects_unmarshalable_value(self, post_class, stub_client):
        """Test a value that slipped past assignment casting is rejected before sending."""
        item = post_class(id=1, date='2015-12-14')
        item._values['body'] = 42

        with pytest.raises(TypeMismatch):
            item.save()
        assert stub_client.requests == []


class TestFind:
    """Test Record.find()."""

    def test_find_reads_item(self, post_class, stub_client):
        """Test find sends the marshaled key and unmarshals the response."""
        stub_client.get_response = {
            'id': {'N': '5'},
            'date': {'S': '2015-12-15'},
            'my_boolean': {'BOOL': True}
        }

        ret = post_class.find(id=5, date='2015-12-15')

        assert stub_client.requests == [{
            'operation': 'get',
            'table_name': 'TestTable',
            'key': {
                'id': {'N': '5'},
                'date': {'S': '2015-12-15'}
            }
        }]
        assert isinstance(ret, post_class)
        assert ret.id == 5
        assert ret.date == date(2015, 12, 15)
        assert ret.bool is True
        assert ret.body is None
        assert ret.is_instance_dirty() is False

    def test_find_requires_keys(self, post_class, stub_client):
        """Test find enforces that the required keys are present."""
        with pytest.raises(KeyMissing, match="Missing required keys: date"):
            post_class.find(id=5)
        assert stub_client.requests == []

    def test_find_not_found(self, post_class, stub_client):
        """Test find returns None when the store has no item."""
        assert post_class.find(id=5, date='2015-12-15') is None
        assert len(stub_client.requests) == 1

    def test_find_ignores_non_key_criteria(self, post_class, stub_client):
        """Test non-key values passed to find are not part of the key."""
        post_class.find(id=5, date='2015-12-15', body='ignored')

        assert stub_client.requests[0]['key'] == {'id': {'N': '5'}, 'date': {'S': '2015-12-15'}}

    def test_find_rejects_bad_key_type(self, post_class, stub_client):
        """Test key values that cannot be cast fail before reaching the store."""
        with pytest.raises(TypeMismatch):
            post_class.find(id='five', date='2015-12-15')
        assert stub_client.requests == []


class TestDelete:
    """Test Record.delete()."""

    def test_delete_sends_key(self, post_class, stub_client):
        """Test delete sends only the key."""
        item = post_class(id=3, date='2015-12-17', body='bye')

        assert item.delete() is True
        assert stub_client.requests == [{
            'operation': 'delete',
            'table_name': 'TestTable',
            'key': {
                'id': {'N': '3'},
                'date': {'S': '2015-12-17'}
            }
        }]

    def test_delete_keeps_tracking_state(self, post_class):
        """Test delete does not change dirty tracking."""
        item = post_class(id=3, date='2015-12-17')
        item.save()
        item.body = 'changed'

        item.delete()

        assert item.dirty_names() == ['body']
        assert item.was('body') is None

    def test_delete_requires_keys(self, post_class, stub_client):
        """Test delete without a range key never reaches the store."""
        with pytest.raises(KeyMissing, match="Missing required keys: date"):
            post_class(id=3).delete()
        assert stub_client.requests == []


class TestReload:
    """Test Record.reload()."""

    def test_reload_replaces_values(self, keyed_class, stub_client):
        """Test reload copies the stored values and marks the record clean."""
        stub_client.get_response = {
            'mykey': {'S': 'abc'},
            'body': {'S': 'stored body'}
        }
        instance = keyed_class(mykey='abc', body='local body', tags=['x'])

        assert instance.reload() is instance

        assert instance.body == 'stored body'
        assert instance.tags is None
        assert instance.is_instance_dirty() is False
        assert stub_client.requests == [{
            'operation': 'get',
            'table_name': 'test_table',
            'key': {'mykey': {'S': 'abc'}}
        }]

    def test_reload_uses_find(self, keyed_class):
        """Test reload looks the record up by its current key values."""
        reloaded = keyed_class(mykey='abc', body='from store')
        reloaded.mark_clean()

        with patch.object(keyed_class, 'find', return_value=reloaded) as mock_find:
            instance = keyed_class(mykey='abc', body='local')
            instance.reload()

        mock_find.assert_called_once_with(mykey='abc')
        assert instance.body == 'from store'

    def test_reload_not_found(self, keyed_class):
        """Test reload raises NotFound when the item is gone."""
        instance = keyed_class(mykey='abc')

        with pytest.raises(NotFound) as exc_info:
            instance.reload()

        assert exc_info.value.table_name == 'test_table'
        assert exc_info.value.key == {'mykey': 'abc'}
        assert instance.is_instance_dirty() is True

    def test_reload_requires_keys(self, post_class, stub_client):
        """Test reload validates keys before reaching the store."""
        with pytest.raises(KeyMissing, match="Missing required keys: id"):
            post_class(date='2015-12-14').reload()
        assert stub_client.requests == []


class TestQueryAndScan:
    """Test Record.query() and Record.scan()."""

    def test_query_returns_lazy_collection(self, post_class, stub_client):
        """Test query builds a collection without sending anything."""
        collection = post_class.query(KeyConditionExpression='id = :id')

        assert isinstance(collection, ItemCollection)
        assert stub_client.requests == []

    def test_query_pages_through_results(self, post_class, stub_client):
        """Test iterating a query follows LastEvaluatedKey across pages."""
        last_key = {'id': {'N': '1'}, 'date': {'S': '2015-12-14'}}
        stub_client.page_responses = [
            ([{'id': {'N': '1'}, 'date': {'S': '2015-12-14'}}], last_key),
            ([{'id': {'N': '1'}, 'date': {'S': '2015-12-15'}, 'body': {'S': 'two'}}], None),
        ]
        request = {
            'KeyConditionExpression': '#id = :id',
            'ExpressionAttributeNames': {'#id': 'id'},
            'ExpressionAttributeValues': {':id': {'N': '1'}},
        }

        items = list(post_class.query(**request))

        assert [item.date for item in items] == [date(2015, 12, 14), date(2015, 12, 15)]
        assert items[1].body == 'two'
        assert all(not item.is_instance_dirty() for item in items)
        assert stub_client.requests == [
            {'operation': 'query', 'table_name': 'TestTable', 'request': request},
            {'operation': 'query', 'table_name': 'TestTable', 'request': {**request, 'ExclusiveStartKey': last_key}},
        ]

    def test_scan_pages(self, post_class, stub_client):
        """Test scan yields one list per page."""
        stub_client.page_responses = [
            ([{'id': {'N': '1'}, 'date': {'S': '2015-12-14'}}, {'id': {'N': '2'}, 'date': {'S': '2015-12-14'}}], None),
        ]

        collection = post_class.scan(Limit=10)
        pages = list(collection.pages())

        assert [[item.id for item in page] for page in pages] == [[1, 2]]
        assert collection.last_evaluated_key is None
        assert stub_client.requests[0]['operation'] == 'scan'
        assert stub_client.requests[0]['request'] == {'Limit': 10}
