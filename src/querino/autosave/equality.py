"""Structural equality over plain draft data."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel


def _as_plain(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    return value


def deep_equal(a: Any, b: Any) -> bool:
    """Return True when ``a`` and ``b`` hold the same plain data.

    Mappings are equal when they have the same keys and recursively equal
    values; lists and tuples when they have the same length and recursively
    equal items. Pydantic models and dataclasses compare by type and then by
    their field data. Anything else falls back to ``==``, except that booleans
    never equal numbers and callables compare by identity.
    """
    if a is b:
        return True

    if isinstance(a, BaseModel) or isinstance(b, BaseModel) or (
        dataclasses.is_dataclass(a) or dataclasses.is_dataclass(b)
    ):
        if type(a) is not type(b):
            return False
        return deep_equal(_as_plain(a), _as_plain(b))

    if isinstance(a, Mapping) or isinstance(b, Mapping):
        if not (isinstance(a, Mapping) and isinstance(b, Mapping)):
            return False
        if len(a) != len(b):
            return False
        for key, value in a.items():
            if key not in b or not deep_equal(value, b[key]):
                return False
        return True

    if isinstance(a, (list, tuple)) or isinstance(b, (list, tuple)):
        if not (isinstance(a, (list, tuple)) and isinstance(b, (list, tuple))):
            return False
        if len(a) != len(b):
            return False
        return all(deep_equal(x, y) for x, y in zip(a, b, strict=True))

    if isinstance(a, bool) != isinstance(b, bool):
        return False
    if callable(a) or callable(b):
        return False

    return bool(a == b)
