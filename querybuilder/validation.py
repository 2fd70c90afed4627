"""
==============================
Builder argument validation.
==============================

Every public builder entry point checks its arguments up front and raises
InvalidArgumentError on the first problem, so a malformed call never leaves
a half-built statement or condition behind.

Functions:
- validate_name: Table, alias or source name
- validate_column: Column name or raw() expression
- validate_aliased: Bare name or one-entry {name: alias} mapping
- validate_order_term: Bare column or one-entry {column: direction} mapping
- validate_select_options: SELECT modifier keywords
- validate_non_negative_int: LIMIT count and offset
"""

from typing import Any, List, Mapping, Optional, Tuple, Union

from querybuilder.exceptions import InvalidArgumentError
from querybuilder.expressions import Expression

SELECT_OPTIONS = frozenset({
    'ALL',
    'DISTINCT',
    'DISTINCTROW',
    'HIGH_PRIORITY',
    'STRAIGHT_JOIN',
    'SQL_SMALL_RESULT',
    'SQL_BIG_RESULT',
    'SQL_BUFFER_RESULT',
    'SQL_CACHE',
    'SQL_NO_CACHE',
    'SQL_CALC_FOUND_ROWS',
})

ORDER_DIRECTIONS = ('ASC', 'DESC')

ColumnRef = Union[str, Expression]
NameOrAlias = Union[ColumnRef, Mapping[ColumnRef, str]]


def validate_name(name: Any, what: str = "name") -> str:
    """Return name if it is a non-empty string, else raise InvalidArgumentError."""
    if not isinstance(name, str) or not name.strip():
        raise InvalidArgumentError(f"{what} must be a non-empty string, got {name!r}")
    return name


def validate_column(column: Any, what: str = "column") -> ColumnRef:
    """Return column if it is a non-empty name or a raw() expression."""
    if isinstance(column, Expression):
        return column
    return validate_name(column, what)


def _single_entry(mapping: Mapping[Any, Any], what: str) -> Tuple[Any, Any]:
    if len(mapping) != 1:
        raise InvalidArgumentError(
            f"{what} mapping must have exactly one entry, got {len(mapping)}"
        )
    return next(iter(mapping.items()))


def validate_aliased(
    entry: Any,
    what: str = "column",
    allow_expression: bool = False
) -> Tuple[ColumnRef, Optional[str]]:
    """
    Validate a bare name or a one-entry alias mapping.

    Args:
        entry: 'name' or {'name': 'alias'}
        what: Description used in error messages
        allow_expression: Accept raw() expressions as the name (SELECT list)

    Returns:
        Tuple of (name, alias); alias is None for a bare name

    Raises:
        InvalidArgumentError: If entry has the wrong shape
    """
    check = validate_column if allow_expression else validate_name

    if isinstance(entry, (str, Expression)):
        return check(entry, what), None

    if isinstance(entry, Mapping):
        name, alias = _single_entry(entry, what)
        return check(name, what), validate_name(alias, f"{what} alias")

    raise InvalidArgumentError(
        f"{what} must be a name or a {{name: alias}} mapping, got {type(entry).__name__}"
    )


def validate_order_term(entry: Any) -> Tuple[ColumnRef, Optional[str]]:
    """
    Validate an ORDER BY entry.

    Args:
        entry: 'column' or {'column': 'ASC'|'DESC'} (case-insensitive);
            the column may be a raw() expression

    Returns:
        Tuple of (column, direction); direction is None for a bare column

    Raises:
        InvalidArgumentError: If entry has the wrong shape or direction
    """
    if isinstance(entry, (str, Expression)):
        return validate_column(entry, "ORDER BY column"), None

    if isinstance(entry, Mapping):
        column, direction = _single_entry(entry, "ORDER BY")
        validate_column(column, "ORDER BY column")
        if not isinstance(direction, str) or direction.upper() not in ORDER_DIRECTIONS:
            raise InvalidArgumentError(
                f"ORDER BY direction for '{column}' must be one of {ORDER_DIRECTIONS}, "
                f"got {direction!r}"
            )
        return column, direction.upper()

    raise InvalidArgumentError(
        f"ORDER BY entry must be a column or a {{column: direction}} mapping, "
        f"got {type(entry).__name__}"
    )


def validate_select_options(options: Any) -> List[str]:
    """
    Validate SELECT modifier keywords.

    Args:
        options: None, a single keyword, or a sequence of keywords

    Returns:
        Upper-cased keywords in the order given

    Raises:
        InvalidArgumentError: On unknown or duplicate keywords
    """
    if options is None:
        return []
    if isinstance(options, str):
        options = [options]
    if not isinstance(options, (list, tuple)):
        raise InvalidArgumentError(
            f"SELECT options must be a keyword or a list of keywords, got {type(options).__name__}"
        )

    keywords = []
    for option in options:
        keyword = validate_name(option, "SELECT option").strip().upper()
        if keyword not in SELECT_OPTIONS:
            raise InvalidArgumentError(
                f"Unknown SELECT option '{option}', expected one of {sorted(SELECT_OPTIONS)}"
            )
        if keyword in keywords:
            raise InvalidArgumentError(f"Duplicate SELECT option '{keyword}'")
        keywords.append(keyword)
    return keywords


def validate_non_negative_int(value: Any, what: str) -> int:
    """Return value if it is an int >= 0 (bool excluded), else raise InvalidArgumentError."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidArgumentError(f"{what} must be a non-negative integer, got {value!r}")
    return value
