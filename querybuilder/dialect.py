"""
==========================================
Identifier quoting and placeholder output.
==========================================

A RenderContext decides, for one serialization pass, how identifiers are
quoted and which token stands in for each bound value. Identifier quoting is
delegated to the identifier preparer of a SQLAlchemy dialect, so the builder
quotes exactly the way SQLAlchemy would for that database.

Quoting rules:
- '*' is emitted bare
- Every other string is an identifier, quoted part by part on dots
  ('article.id' -> `article`.`id`); a trailing '.*' stays bare
- raw() expressions ('COUNT(*)') are emitted verbatim

Usage:
    from querybuilder.dialect import RenderContext

    context = RenderContext(dialect='mysql')
    context.quote('article.id')     # `article`.`id`
    context.quote('first name')     # `first name`
    context.placeholder()           # ?
"""

import logging
from functools import lru_cache
from typing import Optional

from sqlalchemy.dialects import registry
from sqlalchemy.engine import Dialect
from sqlalchemy.exc import NoSuchModuleError

from core.config import VALID_PLACEHOLDERS, config
from querybuilder.exceptions import InvalidArgumentError
from querybuilder.expressions import Expression
from querybuilder.validation import ColumnRef
from querybuilder.values import ValueList

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def get_dialect(name: str) -> Dialect:
    """
    Load a SQLAlchemy dialect by name.

    Args:
        name: Dialect name as used in SQLAlchemy URLs ('mysql', 'sqlite',
            'postgresql', 'mysql+pymysql', ...)

    Returns:
        Dialect instance (no DBAPI driver is imported)

    Raises:
        InvalidArgumentError: If SQLAlchemy has no such dialect
    """
    try:
        dialect_cls = registry.load(name.replace('+', '.'))
    except NoSuchModuleError as e:
        raise InvalidArgumentError(f"Unknown SQL dialect '{name}'") from e

    logger.debug(f"Loaded SQL dialect '{name}' ({dialect_cls.__name__})")
    return dialect_cls()


class RenderContext:
    """
    Quoting and placeholder policy for one serialization pass.

    Attributes:
        dialect_name: SQLAlchemy dialect name used for quoting
        placeholder_token: Token written for each positional placeholder
    """

    def __init__(self, dialect: Optional[str] = None, placeholder: Optional[str] = None):
        """
        Args:
            dialect: Dialect name (defaults to config.dialect)
            placeholder: '?' or '%s' (defaults to config.placeholder)

        Raises:
            InvalidArgumentError: On unknown dialect or placeholder
        """
        self.dialect_name = dialect or config.dialect
        self.placeholder_token = placeholder or config.placeholder

        if self.placeholder_token not in VALID_PLACEHOLDERS:
            raise InvalidArgumentError(
                f"Placeholder must be one of {VALID_PLACEHOLDERS}, got {self.placeholder_token!r}"
            )

        self._preparer = get_dialect(self.dialect_name).identifier_preparer

    def quote_identifier(self, identifier: str) -> str:
        """Quote a single identifier unconditionally."""
        return self._preparer.quote_identifier(identifier)

    def quote(self, name: ColumnRef) -> str:
        """
        Quote a column or table reference following the module quoting rules.

        Raises:
            InvalidArgumentError: If a dotted name has an empty part ('a..b')
        """
        if isinstance(name, Expression):
            return name.sql
        if name == '*':
            return name

        parts = name.split('.')
        if not all(parts):
            raise InvalidArgumentError(f"Identifier '{name}' has an empty part")

        *qualifiers, last = parts
        quoted = [self.quote_identifier(part) for part in qualifiers]
        # only a trailing * is a wildcard ('a.*')
        if qualifiers and last == '*':
            quoted.append(last)
        else:
            quoted.append(self.quote_identifier(last))
        return '.'.join(quoted)

    def aliased(self, name: ColumnRef, alias: Optional[str]) -> str:
        """Render 'name' or 'name AS alias'."""
        rendered = self.quote(name)
        if alias is None:
            return rendered
        return f"{rendered} AS {self.quote_identifier(alias)}"

    def placeholder(self) -> str:
        """Return the marker for the next scalar argument."""
        return self.placeholder_token

    def list_placeholder(self, values: ValueList) -> str:
        """Return the parenthesized marker for the next list argument.

        The whole list is one argument behind one placeholder; the execution
        layer expands it.
        """
        return f"({self.placeholder()})"
