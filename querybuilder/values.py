"""
=========================
Bindable value handling.
=========================

A value destined for positional binding is one of:
- Scalar: bool, int, float, Decimal, str, bytes, date, datetime, time
- List: an ordered sequence of scalars, frozen into a tuple
- Null: None, which is never bound itself (comparisons rewrite to IS [NOT] NULL)

Functions:
- is_null: Check for the Null value
- is_scalar: Check whether a value can be bound to a single placeholder
- as_scalar: Validate a scalar argument
- as_value_list: Validate and freeze a list argument
"""

from collections.abc import Sequence
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Tuple, Union

from querybuilder.exceptions import InvalidArgumentError

SCALAR_TYPES = (bool, int, float, Decimal, str, bytes, date, datetime, time)

Scalar = Union[bool, int, float, Decimal, str, bytes, date, datetime, time]
ValueList = Tuple[Scalar, ...]
Value = Union[Scalar, ValueList, None]


def is_null(value: Any) -> bool:
    """Return True if value is the Null value."""
    return value is None


def is_scalar(value: Any) -> bool:
    """Return True if value can be bound to a single placeholder."""
    return isinstance(value, SCALAR_TYPES)


def as_scalar(value: Any, what: str = "value") -> Scalar:
    """
    Validate a scalar argument.

    Args:
        value: Candidate value
        what: Description used in the error message

    Returns:
        The value unchanged

    Raises:
        InvalidArgumentError: If value is not a supported scalar
    """
    if not is_scalar(value):
        raise InvalidArgumentError(
            f"{what} must be a scalar ({', '.join(t.__name__ for t in SCALAR_TYPES)}), "
            f"got {type(value).__name__}"
        )
    return value


def as_value_list(values: Any, what: str = "values") -> ValueList:
    """
    Validate a list argument and freeze it into a tuple.

    Strings and bytes are rejected even though they are sequences. Unordered
    collections (set) and None inside the list are rejected too.

    Args:
        values: Candidate sequence of scalars
        what: Description used in the error message

    Returns:
        Tuple of scalars (possibly empty)

    Raises:
        InvalidArgumentError: If values is not a sequence of scalars
    """
    if isinstance(values, (str, bytes)) or not isinstance(values, Sequence):
        raise InvalidArgumentError(
            f"{what} must be a list of scalars, got {type(values).__name__}"
        )

    frozen = tuple(values)
    for position, item in enumerate(frozen):
        if is_null(item):
            raise InvalidArgumentError(f"{what}[{position}] must not be None")
        as_scalar(item, f"{what}[{position}]")
    return frozen
