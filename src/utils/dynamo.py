"""
DynamoDB utility functions for data access.
"""
import os
import threading
from typing import Dict, List, Optional, Any
import boto3
from boto3.dynamodb.conditions import Key

# Singleton instance
_dynamo_instance = None

def get_dynamo() -> 'DynamoDBClient':
    """
    Get or create singleton DynamoDB client instance.

    Example:
        dynamo = get_dynamo()
        item = dynamo.get_item({"PK": "USER#123", "SK": "SETTINGS"})

    Returns:
        DynamoDBClient: Singleton instance of DynamoDB client

    Raises:
        EnvironmentError: If TRACKER_TABLE_NAME environment variable is not set
    """
    global _dynamo_instance
    if _dynamo_instance is None:
        try:
            table_name = os.environ['TRACKER_TABLE_NAME']
        except KeyError:
            raise EnvironmentError(
                "TRACKER_TABLE_NAME environment variable not set. "
                "This variable must be set to the DynamoDB table name."
            )
        _dynamo_instance = DynamoDBClient(table_name)
    return _dynamo_instance

class DynamoDBClient:
    """
    Client for interacting with DynamoDB table.

    boto3 resources are not thread-safe, so each thread gets its own
    session and Table. Reminders are written from worker threads.
    """

    def __init__(self, table_name: str):
        self.table_name = table_name
        self._local = threading.local()

    @property
    def table(self):
        """Table resource owned by the calling thread."""
        table = getattr(self._local, "table", None)
        if table is None:
            session = boto3.session.Session()
            table = session.resource('dynamodb').Table(self.table_name)
            self._local.table = table
        return table

    def put_item(self, item: Dict[str, Any]) -> Dict[str, Any]:
        """
        Put a single item into the table, replacing any item with the same key.

        Args:
            item: Dictionary containing item attributes

        Returns:
            Response from DynamoDB
        """
        return self.table.put_item(Item=item)

    def get_item(self, key: Dict[str, str]) -> Optional[Dict[str, Any]]:
        """
        Get a single item from the table.

        Args:
            key: Dictionary containing partition key and sort key

        Returns:
            Item if found, None otherwise
        """
        response = self.table.get_item(Key=key)
        return response.get('Item')

    def query_items(
        self,
        partition_key: str,
        partition_value: str,
        sort_key_condition: Optional[Key] = None,
        scan_forward: bool = True
    ) -> List[Dict[str, Any]]:
        """
        Query items using partition key and optional sort key condition.

        Follows LastEvaluatedKey so every matching page is returned.

        Args:
            partition_key: Name of partition key
            partition_value: Value of partition key
            sort_key_condition: Optional sort key condition
            scan_forward: Ascending sort key order when True

        Returns:
            List of matching items
        """
        key_condition = Key(partition_key).eq(partition_value)
        if sort_key_condition:
            key_condition = key_condition & sort_key_condition

        params = {
            "KeyConditionExpression": key_condition,
            "ScanIndexForward": scan_forward
        }
        items = []
        while True:
            response = self.table.query(**params)
            items.extend(response.get('Items', []))
            last_key = response.get('LastEvaluatedKey')
            if not last_key:
                break
            params["ExclusiveStartKey"] = last_key
        return items

    def delete_item(self, key: Dict[str, str]) -> Dict[str, Any]:
        """
        Delete an item from the table.

        Args:
            key: Dictionary containing partition key and sort key

        Returns:
            Response from DynamoDB
        """
        return self.table.delete_item(Key=key)

def create_pk(user_id: str) -> str:
    """Create partition key from user ID."""
    return f"USER#{user_id}"

CYCLE_SK_PREFIX = "CYCLE#"
REMINDER_SK_PREFIX = "REMINDER#"
SETTINGS_SK = "SETTINGS"

def create_cycle_sk(start_date: str, cycle_id: Optional[str] = None) -> str:
    """
    Create sort key for cycle records.

    The start date leads the key so range queries by start date map onto
    sort key ranges. Without a cycle_id the result is a range boundary.

    Args:
        start_date: ISO format start date
        cycle_id: Record identifier

    Returns:
        Sort key in format "CYCLE#{start_date}#{cycle_id}"
    """
    if cycle_id is None:
        return f"{CYCLE_SK_PREFIX}{start_date}"
    return f"{CYCLE_SK_PREFIX}{start_date}#{cycle_id}"

def create_reminder_sk(identifier: str) -> str:
    """
    Create sort key for a pending reminder.

    One key per reminder identifier, so re-scheduling replaces the item.
    """
    return f"{REMINDER_SK_PREFIX}{identifier}"
