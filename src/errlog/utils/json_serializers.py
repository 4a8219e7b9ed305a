"""Shared JSON serialization utilities for reported records."""

from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any

from pydantic import BaseModel


def _serialize_known_type(obj: Any) -> tuple[bool, Any]:
    """Try to serialize by known type. Returns (handled, result)."""
    if isinstance(obj, (datetime, date)):
        return True, obj.isoformat()
    if isinstance(obj, Decimal):
        return True, float(obj)
    if isinstance(obj, Path):
        return True, str(obj)
    if isinstance(obj, (bytes, bytearray)):
        return True, bytes(obj).hex()
    if isinstance(obj, BaseException):
        return True, str(obj)
    if isinstance(obj, BaseModel):
        return True, obj.model_dump(mode="json", by_alias=True, exclude_none=True)
    return False, None


def json_serializer(obj: Any) -> Any:
    """
    Fallback encoder for ``json.dumps(default=...)``.

    Keeps wire values in their natural JSON types:
    - datetime/date → ISO 8601 string
    - Decimal → float
    - Path → string
    - bytes → lowercase hex
    - exceptions → their message
    - pydantic models → aliased dict
    - Enums → value
    - Everything else → string (fallback)

    Args:
        obj: Object to serialize

    Returns:
        JSON-serializable representation
    """
    handled, result = _serialize_known_type(obj)
    if handled:
        return result
    if hasattr(obj, "value"):
        return obj.value
    if hasattr(obj, "__dict__"):
        return obj.__dict__
    return str(obj)


__all__ = ["json_serializer"]
