"""
Learner-entered cell values.

A cell is one of

- `Empty`: nothing typed,
- `Partial(text)`: an unfinished number such as "-", "." or "3.",
  kept verbatim so the keystroke is not lost,
- `Value(number)`: a complete number.

Wherever a cell is compared against a computed value it is read through
`to_number`, which maps anything that is not a number to 0.
"""

import re
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Union


@dataclass(frozen=True)
class Empty:
    """A blank cell."""


@dataclass(frozen=True)
class Partial:
    """An incomplete numeric entry."""
    text: str


@dataclass(frozen=True)
class Value:
    """A complete numeric entry."""
    number: float


CellInput = Union[Empty, Partial, Value]

EMPTY = Empty()

_NUMBER = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
_PARTIAL = re.compile(r"^[+-]?\d*\.?$")


def parse_cell(text: str, current: CellInput = EMPTY) -> CellInput:
    """
    Interpret one keystroke's worth of cell text.

    Parameters
    ----------
    text : str
        The full cell text after the edit.
    current : CellInput
        The cell's value before the edit, returned unchanged when `text`
        is neither a number nor the beginning of one.

    Examples
    --------
    >>> parse_cell("-")
    Partial(text='-')
    >>> parse_cell("2.5")
    Value(number=2.5)
    >>> parse_cell("2x", Value(2.0))
    Value(number=2.0)
    """
    stripped = text.strip()
    if stripped == "":
        return EMPTY
    if _NUMBER.match(stripped):
        return Value(float(stripped))
    if _PARTIAL.match(stripped):
        return Partial(stripped)
    return current


def coerce_cell(value: Any) -> CellInput:
    """Convert a number, string, None or CellInput into a CellInput."""
    if isinstance(value, (Empty, Partial, Value)):
        return value
    if value is None:
        return EMPTY
    if isinstance(value, bool):
        raise TypeError("Cell values must be numbers or strings, not bool")
    if isinstance(value, (int, float)):
        return Value(float(value))
    if isinstance(value, str):
        return parse_cell(value, Partial(value))
    # numpy scalars and other number-likes
    return Value(float(value))


def to_number(cell: CellInput) -> float:
    """Numeric reading of a cell; blank and non-numeric cells read as 0."""
    number = to_optional_number(cell)
    return 0.0 if number is None else number


def to_optional_number(cell: CellInput) -> Optional[float]:
    """Numeric reading of a cell, or None if it holds no number."""
    if isinstance(cell, Value):
        return cell.number
    if isinstance(cell, Partial):
        try:
            return float(cell.text)
        except ValueError:
            return None
    return None


def is_blank(cell: CellInput) -> bool:
    return isinstance(cell, Empty)


def blank_row(length: int) -> List[CellInput]:
    return [EMPTY] * length


def to_numbers(cells: Sequence[CellInput]) -> List[float]:
    return [to_number(c) for c in cells]


# =============================================================================
# Snapshot encoding
# =============================================================================

def encode_cell(cell: CellInput) -> Union[str, float]:
    """JSON form: "" for blank, the text for partial input, the number otherwise."""
    if isinstance(cell, Value):
        return cell.number
    if isinstance(cell, Partial):
        return cell.text
    return ""


def decode_cell(data: Union[str, float, int, None]) -> CellInput:
    """Inverse of `encode_cell`."""
    if data is None or data == "":
        return EMPTY
    if isinstance(data, str):
        return parse_cell(data, Partial(data))
    return Value(float(data))
