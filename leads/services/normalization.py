"""
Normalization service for leads API payloads.
"""
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r'(?<=[a-z0-9])(?=[A-Z])')


def to_snake_case(key: str) -> str:
    """
    Convert a camelCase key to snake_case.

    'expiresAt' -> 'expires_at', 'convertedCaseId' -> 'converted_case_id'.
    Keys that are already snake_case pass through unchanged.
    """
    return _CAMEL_BOUNDARY.sub('_', key).lower()


def normalize_value(value: Any) -> Any:
    """
    Normalize a single value.

    - Strings: trim whitespace
    - Empty strings: None
    """
    if isinstance(value, str):
        trimmed = value.strip()
        return trimmed or None
    return value


def normalize_dict(data: dict) -> dict:
    """
    Recursively normalize keys and values in a dictionary.
    """
    result = {}
    for key, value in data.items():
        snake_key = to_snake_case(key) if isinstance(key, str) else key
        if isinstance(value, dict):
            result[snake_key] = normalize_dict(value)
        elif isinstance(value, list):
            result[snake_key] = [normalize_value(item) if not isinstance(item, dict)
                                 else normalize_dict(item) for item in value]
        else:
            result[snake_key] = normalize_value(value)
    return result


def normalize(payload: dict) -> dict:
    """
    Normalizes a leads API response body.

    Operations:
    - Convert camelCase keys to snake_case at every level
    - Trim whitespace from all string fields, blank strings become None
    - Lowercase applicant email addresses

    Args:
        payload: Decoded JSON body

    Returns:
        Normalized payload
    """
    if not payload:
        return {}

    normalized = normalize_dict(payload)
    _lowercase_emails(normalized)

    logger.debug(f"Normalized payload keys: {sorted(normalized.keys())}")
    return normalized


def _lowercase_emails(data: Any) -> None:
    if isinstance(data, dict):
        for key, value in data.items():
            if key == 'applicant_email' and isinstance(value, str):
                data[key] = value.lower()
            else:
                _lowercase_emails(value)
    elif isinstance(data, list):
        for item in data:
            _lowercase_emails(item)
