"""
Field coercion helpers shared by the entity sanitizers.

Each helper returns a valid value for any input: the value itself when it
is already valid, otherwise a deterministic default.
"""

import logging
import math
import random
import time
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, TypeVar

from pydantic import BaseModel

from content_processor.models.entities import RATING_DEFAULT, RATING_MAX, RATING_MIN

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


def generate_id(prefix: str) -> str:
    """Id of the form {prefix}_{epoch_ms}_{random}."""
    return f"{prefix}_{int(time.time() * 1000)}_{random.randint(0, 999)}"


def as_mapping(raw: Any) -> Mapping[str, Any]:
    """View raw input as a mapping; models are dumped with camelCase keys."""
    if isinstance(raw, BaseModel):
        return raw.model_dump(by_alias=True, mode="json")
    if isinstance(raw, Mapping):
        return raw
    return {}


def mappings(items: Any, kind: str) -> list[Mapping[str, Any]]:
    """Keep only the dict-like entries of a raw list."""
    if not isinstance(items, list):
        return []
    kept = [as_mapping(item) for item in items if isinstance(item, (Mapping, BaseModel))]
    dropped = len(items) - len(kept)
    if dropped:
        logger.warning(f"Dropped {dropped} malformed {kind} entries")
    return kept


def text(value: Any, default: str) -> str:
    """Non-blank string, or default."""
    if isinstance(value, str) and value.strip():
        return value
    return default


def string_list(value: Any, default: Optional[Iterable[str]] = None) -> list[str]:
    """
    List of non-blank strings.

    Numbers are stringified and other items dropped. An empty result is
    replaced by default when one is given.
    """
    items: list[str] = []
    if isinstance(value, list):
        for item in value:
            if isinstance(item, bool):
                continue
            if isinstance(item, (int, float)):
                item = str(item)
            if isinstance(item, str) and item.strip():
                items.append(item)
    if not items and default is not None:
        return list(default)
    return items


def is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not (isinstance(value, float) and (math.isnan(value) or math.isinf(value)))


def rating(value: Any) -> int:
    """Clamp a numeric rating into [1, 10]; anything non-numeric is 5."""
    if not is_number(value):
        return RATING_DEFAULT
    return int(min(max(round(value), RATING_MIN), RATING_MAX))


def enum_value(enum_cls: type[E], value: Any, default: E, unknown: Optional[E] = None) -> E:
    """
    Coerce value to a member of enum_cls (case-insensitive).

    Missing values map to default; present but unrecognized values map to
    unknown when given, else to default.
    """
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str) and value.strip():
        wanted = value.strip().casefold()
        for member in enum_cls:
            if member.value.casefold() == wanted:
                return member
        return unknown if unknown is not None else default
    return default
