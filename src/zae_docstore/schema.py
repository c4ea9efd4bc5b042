"""DynamoDB schema definitions for collections and the catalog table."""

from typing import Any

# Range key shared by every collection
ID_KEY = "id"

# Hash key of the catalog ("database") table
CATALOG_KEY = "collection"

# DynamoDB TTL attribute (epoch seconds), written by the repository
EXPIRES_AT_ATTR = "_expires_at"

# Non-key copy of the id for filtering (Query filters cannot reference key attributes)
DOCUMENT_ID_ATTR = "_doc_id"

# Time-to-live sentinel: no default expiry for the collection / never expire the item
NO_EXPIRY = -1

SECONDS_PER_DAY = 86400

# Lowest throughput targets the provisioner will request
MIN_MANUAL_THROUGHPUT = 5
MIN_AUTOSCALE_MAX_THROUGHPUT = 100

# Table statuses during which a throughput change cannot be issued
PENDING_TABLE_STATUSES = frozenset({"CREATING", "UPDATING"})


def ttl_days_to_seconds(days: int) -> int | None:
    """
    Translate a collection default time-to-live into seconds.

    Returns:
        None for the NO_EXPIRY sentinel, otherwise the day count in seconds
    """
    if days == NO_EXPIRY:
        return None
    return days * SECONDS_PER_DAY


def calculate_expires_at(now_ms: int, ttl_seconds: int | None) -> int | None:
    """Calculate the TTL timestamp (epoch seconds), or None for no expiry."""
    if ttl_seconds is None or ttl_seconds == NO_EXPIRY:
        return None
    return (now_ms // 1000) + ttl_seconds


def is_expired(item: dict[str, Any], now_ms: int) -> bool:
    """Whether a raw item's TTL timestamp has already passed."""
    expires_at = item.get(EXPIRES_AT_ATTR, {}).get("N")
    if expires_at is None:
        return False
    return int(expires_at) <= now_ms // 1000


def get_table_definition(table_name: str, partition_key_name: str) -> dict[str, Any]:
    """
    Get the DynamoDB table definition for a collection.

    Returns a dictionary suitable for create_table(). Tables start on
    on-demand billing; the provisioner reconciles throughput afterwards.
    """
    return {
        "TableName": table_name,
        "BillingMode": "PAY_PER_REQUEST",
        "AttributeDefinitions": [
            {"AttributeName": partition_key_name, "AttributeType": "S"},
            {"AttributeName": ID_KEY, "AttributeType": "S"},
        ],
        "KeySchema": [
            {"AttributeName": partition_key_name, "KeyType": "HASH"},
            {"AttributeName": ID_KEY, "KeyType": "RANGE"},
        ],
    }


def get_catalog_definition(table_name: str) -> dict[str, Any]:
    """Get the DynamoDB table definition for the catalog table."""
    return {
        "TableName": table_name,
        "BillingMode": "PAY_PER_REQUEST",
        "AttributeDefinitions": [
            {"AttributeName": CATALOG_KEY, "AttributeType": "S"},
        ],
        "KeySchema": [
            {"AttributeName": CATALOG_KEY, "KeyType": "HASH"},
        ],
    }
