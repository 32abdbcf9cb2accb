from typing import Any

PLACEHOLDERS = frozenset({"n/a", "na", "null", "undefined"})

def is_meaningful(value: Any) -> bool:
    """True when a field is worth rendering.

    None, blank strings and placeholder tokens (any case, surrounding
    whitespace ignored) are absent. Every other value counts.
    """
    if value is None:
        return False
    if isinstance(value, str):
        s = value.strip().lower()
        return s != "" and s not in PLACEHOLDERS
    return True
