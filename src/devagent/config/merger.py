"""
Configuration merger for DevAgent.

Implements deep merge with special array operations (+/- prefixes).
"""

from typing import Any


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries with array operation support.

    Merge rules:
    - Scalar values: override replaces base
    - Dicts: recursive deep merge
    - Arrays (default): override replaces base
    - Arrays with '+' prefix key: append to base array
    - Arrays with '-' prefix key: remove items from base array
    - null/None value: remove key from result

    Examples:
        >>> base = {"blocked_patterns": ["*.pem"]}
        >>> deep_merge(base, {"+blocked_patterns": ["*.sqlite"]})
        {'blocked_patterns': ['*.pem', '*.sqlite']}
    """
    result = base.copy()

    for key, value in override.items():
        if key.startswith("+") and isinstance(value, list):
            actual_key = key[1:]
            if actual_key in result and isinstance(result[actual_key], list):
                result[actual_key] = result[actual_key] + [
                    item for item in value if item not in result[actual_key]
                ]
            else:
                result[actual_key] = value

        elif key.startswith("-") and isinstance(value, list):
            actual_key = key[1:]
            if actual_key in result and isinstance(result[actual_key], list):
                result[actual_key] = [item for item in result[actual_key] if item not in value]

        elif value is None:
            result.pop(key, None)

        elif isinstance(value, dict) and key in result and isinstance(result[key], dict):
            result[key] = deep_merge(result[key], value)

        else:
            result[key] = value

    return result


def set_nested_value(config: dict[str, Any], key_path: str, value: Any) -> dict[str, Any]:
    """
    Set a value in a nested dictionary using dot notation.

    Intermediate dictionaries are created as needed.

    Returns:
        A new dictionary with the value set.
    """
    keys = key_path.split(".")
    result = config.copy()
    current = result

    for key in keys[:-1]:
        child = current.get(key)
        current[key] = child.copy() if isinstance(child, dict) else {}
        current = current[key]

    current[keys[-1]] = value
    return result
