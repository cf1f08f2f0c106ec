"""Text and metadata helpers."""

import re
from typing import Any, Dict, Iterable, List, Optional

from slugify import slugify as _slugify

from ..core.exceptions import ValidationError


def slugify(name: str) -> str:
    """Turn a display name into a lower-case, dash separated identifier.

    Non-ASCII letters are transliterated (``"Über Café"`` -> ``"uber-cafe"``).
    """
    slug = _slugify(name, lowercase=True)
    if not slug:
        raise ValidationError(f"Cannot derive an identifier from '{name}'", "name")
    return slug


def flatten_metadata(
    metadata: Optional[Dict[str, Any]],
    prefix: str = "",
    result: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Flatten nested mappings into dotted keys.

    Vector store metadata values must be scalars, so nested dictionaries are
    flattened (``{"loc": {"page": 1}}`` -> ``{"loc.page": 1}``) and ``None``
    values are dropped. Lists are kept as-is.
    """
    if result is None:
        result = {}

    for key, value in (metadata or {}).items():
        prefixed_key = f"{prefix}.{key}" if prefix else str(key)

        if isinstance(value, dict):
            flatten_metadata(value, prefixed_key, result)
        elif value is not None:
            result[prefixed_key] = value

    return result


def filter_models(model_names: Iterable[str], pattern: Optional[str] = None) -> List[str]:
    """De-duplicate, strip and optionally regex-filter model names.

    Returns a sorted list so listings are stable across calls.
    """
    names = {str(name).strip() for name in model_names}
    names.discard("")

    if pattern and pattern.strip():
        try:
            regex = re.compile(pattern, re.IGNORECASE)
        except re.error as e:
            raise ValidationError(f"Invalid model filter '{pattern}': {e}", "filter")
        names = {name for name in names if regex.search(name)}

    return sorted(names)
