"""Small JSON helpers shared across modules."""

from __future__ import annotations

import json
from datetime import date, datetime
from enum import Enum
from pathlib import PurePath
from typing import Any


def json_default(obj: Any) -> Any:
    """Serialize the non-JSON types found in audit records."""
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, PurePath):
        return str(obj)
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (set, frozenset, tuple)):
        return list(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def dumps_json(data: Any, pretty: bool = True) -> str:
    return json.dumps(
        data,
        indent=2 if pretty else None,
        ensure_ascii=False,
        default=json_default,
    )
