"""Bind-parameter marshalling for JSON values coming from the UI layer.

Every caller value is turned into a ``BindValue`` first, then into the plain
Python object sqlite3 binds. Order and count are preserved; arity errors are
left to sqlite3 at bind time.
"""
from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional, Tuple

logger = logging.getLogger(__name__)

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


class ValueKind(str, Enum):
    TEXT = "text"
    INTEGER = "integer"
    REAL = "real"
    BOOLEAN = "boolean"
    NULL = "null"


class StructuredParamError(ValueError):
    """Raised in strict mode when a list/object parameter is supplied."""


@dataclass(frozen=True)
class BindValue:
    kind: ValueKind
    value: Any
    # True when a list/object was degraded to its JSON text
    structured: bool = False

    def to_sql(self) -> Any:
        if self.kind is ValueKind.BOOLEAN:
            return 1 if self.value else 0
        return self.value


def _number(value: Any) -> BindValue:
    if isinstance(value, int):
        if INT64_MIN <= value <= INT64_MAX:
            return BindValue(ValueKind.INTEGER, value)
        try:
            return BindValue(ValueKind.REAL, float(value))
        except OverflowError:
            return BindValue(ValueKind.TEXT, str(value))
    if not math.isfinite(value):
        return BindValue(ValueKind.TEXT, str(value))
    if value.is_integer() and INT64_MIN <= value < 2.0 ** 63:
        return BindValue(ValueKind.INTEGER, int(value))
    return BindValue(ValueKind.REAL, value)


def marshal_value(value: Any, *, strict: bool = False, position: Optional[int] = None) -> BindValue:
    """Classify one dynamic value.

    Strings bind verbatim, numbers as INTEGER when they have no fractional
    part and fit in 64 bits (REAL otherwise, text when neither works),
    booleans as 1/0, ``None`` as NULL. Anything else is serialized to compact
    JSON and flagged, or rejected when ``strict`` is set.
    """
    if isinstance(value, str):
        return BindValue(ValueKind.TEXT, value)
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return BindValue(ValueKind.BOOLEAN, value)
    if isinstance(value, (int, float)):
        return _number(value)
    if value is None:
        return BindValue(ValueKind.NULL, None)
    where = f"parameter {position + 1}" if position is not None else "parameter"
    if strict:
        raise StructuredParamError(f"{where} is a {type(value).__name__}; structured values are not accepted")
    text = json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)
    logger.warning("%s is a %s; binding its JSON text", where, type(value).__name__)
    return BindValue(ValueKind.TEXT, text, structured=True)


def marshal_params(values: Optional[Iterable[Any]], *, strict: bool = False) -> Tuple[BindValue, ...]:
    if values is None:
        return ()
    return tuple(marshal_value(v, strict=strict, position=i) for i, v in enumerate(values))


def to_sql_params(values: Optional[Iterable[Any]], *, strict: bool = False) -> Tuple[Any, ...]:
    """Marshal ``values`` straight to the tuple handed to ``cursor.execute``."""
    return tuple(bound.to_sql() for bound in marshal_params(values, strict=strict))
