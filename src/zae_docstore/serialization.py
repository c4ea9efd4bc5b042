"""Conversion between Python values and DynamoDB attribute values."""

from typing import Any


def serialize_map(data: dict[str, Any]) -> dict[str, Any]:
    """Serialize a Python dict to DynamoDB map format."""
    return {key: serialize_value(value) for key, value in data.items()}


def serialize_value(value: Any) -> dict[str, Any]:
    """Serialize a single value to DynamoDB format."""
    if isinstance(value, str):
        return {"S": value}
    elif isinstance(value, bool):
        return {"BOOL": value}
    elif isinstance(value, (int, float)):
        return {"N": str(value)}
    elif isinstance(value, dict):
        return {"M": serialize_map(value)}
    elif isinstance(value, (list, tuple)):
        return {"L": [serialize_value(v) for v in value]}
    elif value is None:
        return {"NULL": True}
    return {"S": str(value)}


def deserialize_map(data: dict[str, Any]) -> dict[str, Any]:
    """Deserialize a DynamoDB map to Python dict."""
    return {key: deserialize_value(value) for key, value in data.items()}


def deserialize_value(value: dict[str, Any]) -> Any:
    """Deserialize a single DynamoDB value."""
    if "S" in value:
        return value["S"]
    elif "N" in value:
        num_str = value["N"]
        if "." in num_str or "e" in num_str.lower():
            return float(num_str)
        return int(num_str)
    elif "BOOL" in value:
        return value["BOOL"]
    elif "M" in value:
        return deserialize_map(value["M"])
    elif "L" in value:
        return [deserialize_value(v) for v in value["L"]]
    elif "NULL" in value:
        return None
    return None
