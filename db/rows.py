"""Decode result cells into JSON-ready values.

Each cell goes through a fixed chain: text, then integer, then real. The
first decoder that accepts the cell wins and a cell no decoder accepts
becomes ``None``. The storage class of the cell decides, not the declared
column type, so one column can yield different kinds across rows.
"""
from __future__ import annotations

import math
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple


class CellTypeMismatch(Exception):
    """A decoder does not accept the cell's storage class."""


class UndecodableText(bytes):
    """Raw bytes of a TEXT cell that is not valid UTF-8."""


def text_factory(raw: bytes):
    """``Connection.text_factory`` that keeps invalid UTF-8 as ``UndecodableText``."""
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return UndecodableText(raw)


def _as_text(cell: Any) -> Optional[str]:
    if cell is None:
        return None
    if isinstance(cell, UndecodableText):
        raise CellTypeMismatch("text")
    if isinstance(cell, str):
        return cell
    raise CellTypeMismatch("text")


def _as_integer(cell: Any) -> Optional[int]:
    if cell is None:
        return None
    if isinstance(cell, int) and not isinstance(cell, bool):
        return cell
    raise CellTypeMismatch("integer")


def _as_real(cell: Any) -> Optional[float]:
    if cell is None:
        return None
    if isinstance(cell, float):
        # NaN/inf have no JSON form
        return cell if math.isfinite(cell) else None
    raise CellTypeMismatch("real")


DECODERS: Tuple[Tuple[str, Callable[[Any], Any]], ...] = (
    ("text", _as_text),
    ("integer", _as_integer),
    ("real", _as_real),
)


def decode_cell(cell: Any) -> Any:
    for _name, decoder in DECODERS:
        try:
            return decoder(cell)
        except CellTypeMismatch:
            continue
    return None


def column_names(description: Optional[Sequence[Sequence[Any]]]) -> List[str]:
    """Column names (aliases included) from ``cursor.description``."""
    if not description:
        return []
    return [col[0] or "" for col in description]


def decode_row(columns: Sequence[str], row: Sequence[Any]) -> Dict[str, Any]:
    return {name: decode_cell(cell) for name, cell in zip(columns, row)}


def decode_rows(columns: Sequence[str], rows: Sequence[Sequence[Any]]) -> List[Dict[str, Any]]:
    return [decode_row(columns, row) for row in rows]
