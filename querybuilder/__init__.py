"""
=======================================================
Object-oriented SQL SELECT builder with bound values.
=======================================================

This package builds SELECT statements whose values are always passed as
positional parameters, never interpolated into the SQL text.

The package follows a clear organization:
    - conditions.py: Condition tree (comparisons, IN, BETWEEN, LIKE, NULL checks, AND/OR/NOT)
    - query_builder.py: SELECT statement builder enforcing clause order
    - dialect.py: Identifier quoting and placeholder tokens (via SQLAlchemy dialects)
    - expressions.py: raw() SQL expressions emitted without quoting
    - values.py: Bindable value types
    - validation.py: Argument validation shared by all entry points
    - exceptions.py: Error hierarchy

Architecture:
    - query_builder.py imports from conditions.py (not vice versa)
    - Text and arguments are produced by one traversal, so placeholders and
      arguments always line up
    - No process-wide mutable state besides the read-only configuration

Example:
    >>> from querybuilder import and_, between, eq, select
    >>>
    >>> query = (
    ...     select('id', 'title')
    ...     .from_('article')
    ...     .where(and_(eq('id').bind(1337), between('stamp', '2013-01-06', '2014-03-31')))
    ... )
    >>> sql, args = query.build()
"""

__version__ = "0.1.0"
__all__ = [
    # Statement builder
    'select', 'SelectQuery', 'CompiledQuery', 'QueryState',
    # Conditions
    'eq', 'ne', 'lt', 'gt', 'lte', 'gte', 'between', 'in_',
    'is_null', 'is_not_null', 'like', 'and_', 'or_', 'not_', 'Condition',
    # Rendering
    'RenderContext', 'raw', 'Expression',
    # Errors
    'QueryBuilderError', 'IllegalSequenceError', 'InvalidOperationError',
    'EmptyListError', 'InvalidArgumentError',
]

from .conditions import (
    Condition,
    and_,
    between,
    eq,
    gt,
    gte,
    in_,
    is_not_null,
    is_null,
    like,
    lt,
    lte,
    ne,
    not_,
    or_,
)
from .dialect import RenderContext
from .expressions import Expression, raw
from .exceptions import (
    EmptyListError,
    IllegalSequenceError,
    InvalidArgumentError,
    InvalidOperationError,
    QueryBuilderError,
)
from .query_builder import CompiledQuery, QueryState, SelectQuery, select
