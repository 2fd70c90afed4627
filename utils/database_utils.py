"""
==================================================
SQLAlchemy bridge for built queries.
==================================================

Hands statements built by querybuilder to SQLAlchemy. The builder itself
never touches a database: these helpers re-render a query with named bind
parameters, attach the bound values, and pass the result to a SQLAlchemy
connection.

Key Features:
    - Named bind rendering (:p_1, :p_2, ...) aligned with the positional arguments
    - IN lists expanded into one bind per element
    - Identifier quoting matched to the connection's dialect
    - Engine creation from config

Example:
    >>> from querybuilder import eq, select
    >>> from utils.database_utils import create_sqlalchemy_engine, execute_query
    >>>
    >>> engine = create_sqlalchemy_engine('sqlite://')
    >>> query = select('id').from_('article').where(eq('category').bind(5))
    >>> with engine.connect() as conn:
    ...     rows = execute_query(conn, query).fetchall()
"""

import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, CursorResult, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.elements import TextClause

from core.config import config
from querybuilder.conditions import Condition
from querybuilder.dialect import RenderContext
from querybuilder.exceptions import InvalidOperationError
from querybuilder.expressions import Expression
from querybuilder.query_builder import SelectQuery
from querybuilder.validation import ColumnRef
from querybuilder.values import Value, ValueList

logger = logging.getLogger(__name__)

Buildable = Union[SelectQuery, Condition]


class QueryExecutionError(Exception):
    """Exception raised when SQLAlchemy fails to execute a built query."""
    pass


class NamedParameterContext(RenderContext):
    """
    Render context emitting SQLAlchemy named binds instead of positional markers.

    Each scalar placeholder becomes :p_N. A list argument becomes one bind per
    element, :p_N_0, :p_N_1, ..., inside the IN parentheses.

    Attributes:
        prefix: Bind name prefix
        slots: Bind names in placeholder order; a tuple for a list argument
    """

    def __init__(self, dialect: Optional[str] = None, prefix: str = 'p'):
        super().__init__(dialect=dialect)
        self.prefix = prefix
        self.slots: List[Union[str, Tuple[str, ...]]] = []

    def quote_identifier(self, identifier: str) -> str:
        # text() would read ':name' inside an identifier as a bind
        return super().quote_identifier(identifier).replace(':', r'\:')

    def quote(self, name: ColumnRef) -> str:
        if isinstance(name, Expression):
            return name.sql.replace(':', r'\:')
        return super().quote(name)

    def _next_name(self) -> str:
        return f"{self.prefix}_{len(self.slots) + 1}"

    def placeholder(self) -> str:
        name = self._next_name()
        self.slots.append(name)
        return f":{name}"

    def list_placeholder(self, values: ValueList) -> str:
        base = self._next_name()
        names = tuple(f"{base}_{position}" for position in range(len(values)))
        self.slots.append(names)
        return "(" + ", ".join(f":{name}" for name in names) + ")"

    def bind_parameters(self, args: List[Value]) -> Dict[str, Any]:
        """
        Pair gathered arguments with the bind names emitted during rendering.

        Raises:
            InvalidOperationError: If argument and placeholder counts differ
        """
        if len(args) != len(self.slots):
            raise InvalidOperationError(
                f"{len(self.slots)} placeholder(s) rendered but {len(args)} argument(s) gathered"
            )

        params: Dict[str, Any] = {}
        for slot, value in zip(self.slots, args):
            if isinstance(slot, tuple):
                params.update(zip(slot, value))
            else:
                params[slot] = value
        return params


def to_sqlalchemy_text(
    query: Buildable,
    dialect: Optional[str] = None
) -> Tuple[TextClause, Dict[str, Any]]:
    """
    Convert a built query or condition into a SQLAlchemy text clause.

    Args:
        query: SelectQuery or condition tree
        dialect: Dialect used for identifier quoting (defaults to config.dialect)

    Returns:
        Tuple of (TextClause with values bound, bind parameter mapping)

    Example:
        >>> clause, params = to_sqlalchemy_text(in_('category').bind([1, 2]))
        >>> str(clause)
        '`category` IN(:p_1_0, :p_1_1)'
    """
    context = NamedParameterContext(dialect=dialect)
    sql, args = query.compile(context)
    params = context.bind_parameters(args)

    logger.debug(f"Rendered for SQLAlchemy: {sql} with {len(params)} bind(s)")
    return text(sql).bindparams(**params), params


def create_sqlalchemy_engine(url: Optional[str] = None, echo: bool = False) -> Engine:
    """
    Create a SQLAlchemy engine.

    Args:
        url: Database URL (defaults to config.database_url)
        echo: Enable SQL statement logging

    Returns:
        SQLAlchemy Engine

    Example:
        >>> engine = create_sqlalchemy_engine('sqlite://')
    """
    return create_engine(url or config.database_url, echo=echo)


def execute_query(
    connection: Connection,
    query: Buildable,
    dialect: Optional[str] = None
) -> CursorResult:
    """
    Execute a built SELECT on a SQLAlchemy connection.

    Identifiers are quoted for the connection's own dialect unless dialect
    is given.

    Args:
        connection: Open SQLAlchemy connection
        query: Built SelectQuery
        dialect: Optional dialect name overriding the connection's

    Returns:
        SQLAlchemy result

    Raises:
        QueryExecutionError: If the database rejects the statement
    """
    statement, params = to_sqlalchemy_text(query, dialect or connection.dialect.name)

    try:
        return connection.execute(statement)
    except SQLAlchemyError as e:
        error_msg = f"Query execution failed: {e}"
        logger.error(f"❌ {error_msg}")
        raise QueryExecutionError(error_msg) from e
