"""
Content Catalog API - Shared Utilities

Common helpers used across multiple modules to avoid duplication.
"""

import json
from datetime import datetime, timezone
from typing import Any, Iterable, List


def parse_json_list(raw: Any) -> List[str]:
    """
    Safely parse a genre column that may be a JSON string or already a list.

    Returns a list in all cases (empty list on parse failure).
    """
    if isinstance(raw, list):
        return [str(item) for item in raw]
    if isinstance(raw, str):
        try:
            value = json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            return []
        if isinstance(value, list):
            return [str(item) for item in value]
    return []


def unique_in_order(items: Iterable[str]) -> List[str]:
    """Drop exact duplicates, keeping the first occurrence of each value."""
    seen = set()
    result: List[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def utc_now() -> str:
    """Current UTC time as an ISO-8601 string (used in log messages)."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")
