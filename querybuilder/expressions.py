"""
===========================
Raw SQL column expressions.
===========================

Every plain string handed to the builder is an identifier and is always
quoted. SQL that must reach the statement verbatim (aggregates, function
calls, arithmetic) is wrapped with raw(), in the spirit of SQLAlchemy's
literal_column().

Raw text must not contain parameter markers: values are only ever bound
through conditions, so the placeholders in a statement always match its
arguments.

Usage:
    from querybuilder import gt, raw, select

    select('category', {raw('COUNT(*)'): 'total'}).from_('article') \\
        .group_by('category').having(gt(raw('COUNT(*)')).bind(2))
"""

from dataclasses import dataclass

from core.config import VALID_PLACEHOLDERS
from querybuilder.exceptions import InvalidArgumentError


@dataclass(frozen=True)
class Expression:
    """SQL text emitted as-is wherever a column name is accepted."""

    sql: str

    def __post_init__(self):
        if not isinstance(self.sql, str) or not self.sql.strip():
            raise InvalidArgumentError(f"Raw SQL must be a non-empty string, got {self.sql!r}")
        for token in VALID_PLACEHOLDERS:
            if token in self.sql:
                raise InvalidArgumentError(
                    f"Raw SQL {self.sql!r} must not contain the parameter marker {token!r}; "
                    f"bind values through a condition instead"
                )

    def __str__(self) -> str:
        return self.sql


def raw(sql: str) -> Expression:
    """Wrap SQL text so it is emitted without quoting."""
    return Expression(sql)
