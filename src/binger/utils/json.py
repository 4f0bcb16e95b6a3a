"""JSON serialization helpers for Binger.

This module provides helpers for serializing objects to JSON, especially for
types not natively supported by the standard library (e.g., datetime, date,
enums, pydantic models).
- Used by the CLI's ``--json`` output and by export documents.
- Ensures that datetime objects are stored in ISO 8601 format for portability.

Design:
- Custom encoder handles datetime, date, Enum and BaseModel objects.
- Extendable for additional types as needed.
"""

import json
from datetime import date, datetime
from enum import Enum
from typing import Any, Self

from pydantic import BaseModel


class DateTimeEncoder(json.JSONEncoder):
    """Custom JSON encoder for Binger.

    Handles serialization of datetime, date, Enum and pydantic objects, which
    are common in collection dumps. Extend this class to add support for
    additional types as needed.
    """

    def default(self: Self, obj: object) -> Any:  # noqa: ANN401
        """Convert objects to JSON-serializable format.

        Args:
            obj: Object to serialize.

        Returns:
            JSON-serializable representation of the object.
            - datetime/date: ISO 8601 string
            - Enum: its value
            - BaseModel: its JSON-mode dump, by alias
            - Otherwise: falls back to base class
        """
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, BaseModel):
            return obj.model_dump(mode="json", by_alias=True)
        # Let the base class default method handle it or raise TypeError
        return super().default(obj)


def dumps(obj: Any, *, indent: int | None = 2) -> str:  # noqa: ANN401
    """Serialize *obj* with :class:`DateTimeEncoder`."""
    return json.dumps(obj, cls=DateTimeEncoder, indent=indent, ensure_ascii=False)
