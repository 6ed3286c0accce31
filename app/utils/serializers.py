from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from bson import ObjectId

from app.utils.exceptions import InvalidIdError


def serialize_value(value: Any) -> Any:
    """Recursively serialize non-JSON-serializable values"""
    if isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, timedelta):
        return str(value)
    elif isinstance(value, ObjectId):
        return str(value)
    elif isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [serialize_value(item) for item in value]
    return value


def serialize_document(document: Optional[Dict]) -> Optional[Dict]:
    """Convert a MongoDB document to a JSON-ready dict (``_id`` kept as a string)"""
    if document is None:
        return None
    return serialize_value(dict(document))


def serialize_documents(documents: List[Dict]) -> List[Dict]:
    return [serialize_document(doc) for doc in documents]


def parse_object_id(value: str, label: str = "id") -> ObjectId:
    """Parse a path id, raising ``InvalidIdError`` (400) when malformed"""
    if not ObjectId.is_valid(value):
        raise InvalidIdError(f"Invalid {label}: {value}")
    return ObjectId(value)
