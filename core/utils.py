# core/utils.py

from typing import Any, Optional


def document_field(document: Any, *names: str) -> Any:
    """
    First non-None value among `names`, read from a dict-like row
    (Supabase / JSON) or from an object's attributes (pydantic models).
    """
    if document is None:
        return None

    for name in names:
        if isinstance(document, dict):
            value = document.get(name)
        else:
            value = getattr(document, name, None)
        if value is not None:
            return value

    return None


def canonical_id(value: Any) -> Optional[str]:
    """
    Canonical string form of an id stored either raw or as a nested
    identity ({"id": ...}, {"_id": ...}, or an object with `.id`).
    """
    if value is None:
        return None

    if isinstance(value, dict):
        nested = value.get("id")
        value = nested if nested is not None else value.get("_id")
    elif not isinstance(value, (str, int)) and hasattr(value, "id"):
        value = value.id

    if value is None:
        return None

    value = str(value).strip()
    return value or None
