"""
Tests for the DynamoDB client wrapper.
"""
import threading
from unittest.mock import Mock, patch

from src.utils.dynamo import DynamoDBClient, create_cycle_sk, create_pk, create_reminder_sk

def test_table_is_created_per_thread():
    """Test each thread gets its own session and table, reused within the thread."""
    with patch("src.utils.dynamo.boto3.session.Session", side_effect=lambda: Mock()) as mock_session:
        client = DynamoDBClient("cycles")
        main_table = client.table
        assert client.table is main_table

        worker_tables = []
        worker = threading.Thread(target=lambda: worker_tables.append(client.table))
        worker.start()
        worker.join()

    assert mock_session.call_count == 2
    assert worker_tables[0] is not main_table

def test_put_item_uses_thread_table():
    """Test writes go through the calling thread's table."""
    with patch("src.utils.dynamo.boto3.session.Session") as mock_session:
        table = mock_session.return_value.resource.return_value.Table.return_value
        client = DynamoDBClient("cycles")
        client.put_item({"PK": "USER#123", "SK": "SETTINGS"})

    mock_session.return_value.resource.assert_called_once_with("dynamodb")
    mock_session.return_value.resource.return_value.Table.assert_called_once_with("cycles")
    table.put_item.assert_called_once_with(Item={"PK": "USER#123", "SK": "SETTINGS"})

def test_query_items_follows_pages():
    """Test every page of a query is returned."""
    with patch("src.utils.dynamo.boto3.session.Session") as mock_session:
        table = mock_session.return_value.resource.return_value.Table.return_value
        table.query.side_effect = [
            {"Items": [{"SK": "CYCLE#a"}], "LastEvaluatedKey": {"SK": "CYCLE#a"}},
            {"Items": [{"SK": "CYCLE#b"}]}
        ]
        client = DynamoDBClient("cycles")
        items = client.query_items("PK", "USER#123")

    assert [item["SK"] for item in items] == ["CYCLE#a", "CYCLE#b"]
    assert table.query.call_args_list[1][1]["ExclusiveStartKey"] == {"SK": "CYCLE#a"}

def test_key_builders():
    assert create_pk("123") == "USER#123"
    assert create_cycle_sk("2025-01-01") == "CYCLE#2025-01-01"
    assert create_cycle_sk("2025-01-01", "abc") == "CYCLE#2025-01-01#abc"
    assert create_reminder_sk("periodReminderToday") == "REMINDER#periodReminderToday"
