"""Decoding of JSON secret payloads into environment entries."""
import json
import re
from typing import Any, List

from .errors import DecodeError
from .models import EnvEntry

ENV_KEY_PATTERN = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')


def _render_value(secret_name: str, key: str, value: Any) -> str:
    if isinstance(value, str):
        return value
    # bool before int: bool is an int subclass
    if isinstance(value, (bool, int, float)):
        return json.dumps(value)
    kind = "null" if value is None else type(value).__name__
    raise DecodeError(
        f"Secret '{secret_name}': value of '{key}' must be a string, number or boolean, got {kind}"
    )


def decode_env_from_json(secret_name: str, value: Any) -> List[EnvEntry]:
    """
    Turn a parsed JSON secret into (KEY, value) pairs.

    Args:
        secret_name: Secret the value came from (used in error messages)
        value: Parsed JSON document; must be an object

    Returns:
        Entries in the object's key order. Strings are kept as-is, numbers
        and booleans use their JSON spelling.

    Raises:
        DecodeError: If the document is not an object, a key is not a valid
            environment variable name, or a value is null or nested
    """
    if not isinstance(value, dict):
        raise DecodeError(
            f"Secret '{secret_name}' must contain a JSON object, got {type(value).__name__}"
        )

    entries: List[EnvEntry] = []
    for key, item in value.items():
        if not ENV_KEY_PATTERN.fullmatch(key):
            raise DecodeError(f"Secret '{secret_name}': '{key}' is not a valid environment variable name")
        entries.append((key, _render_value(secret_name, key, item)))
    return entries
