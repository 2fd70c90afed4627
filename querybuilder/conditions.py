"""
==========================
SQL Condition Expressions.
==========================

This module provides the boolean expression tree used for WHERE, HAVING and
JOIN ... ON clauses. Literal values never appear in the SQL text: each one is
written as a positional placeholder, and the values are gathered separately
in the same left-to-right order.

Condition Constructors:
- eq, ne, lt, gt, lte, gte: Relational comparisons (column vs value or column vs column)
- between: Range check with two bound limits
- in_: Membership test against a bound list
- is_null, is_not_null: NULL checks
- like: Pattern match with a bound pattern
- and_, or_, not_: Boolean connectives

NULL Handling:
    Binding None to an eq() comparison renders `column` IS NULL and binding it
    to ne() renders `column` IS NOT NULL; neither contributes an argument.
    None under an ordering operator (<, >, <=, >=) is rejected.

Columns:
    A column string is always quoted as an identifier. Pass raw('COUNT(*)')
    to compare an expression instead.

Usage:
    from querybuilder.conditions import and_, between, eq

    condition = and_(
        eq('id').bind(1337),
        between('stamp', '2013-01-06', '2014-03-31')
    )
    condition.to_text()            # `id` = ? AND `stamp` BETWEEN ? AND ?
    condition.gather_bound_args()  # [1337, '2013-01-06', '2014-03-31']
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple

from core.config import config
from querybuilder.dialect import RenderContext
from querybuilder.exceptions import (
    EmptyListError,
    InvalidArgumentError,
    InvalidOperationError,
    QueryBuilderError,
)
from querybuilder.validation import ColumnRef, validate_column
from querybuilder.values import Value, as_scalar, as_value_list

logger = logging.getLogger(__name__)

# Marks a bindable node that has not been bound yet (None is a valid binding)
_UNBOUND = object()


class Operator(Enum):
    """Relational operators and their SQL spelling."""

    EQ = '='
    NE = '!='
    LT = '<'
    GT = '>'
    LTE = '<='
    GTE = '>='


class Condition:
    """Base class of every condition node.

    The set of node kinds is closed: compile_condition() knows each of them.
    """

    def bind(self, value: Any) -> 'Condition':
        """Attach a value to the node; only unbound comparisons and IN accept one."""
        raise InvalidOperationError(f"{type(self).__name__} conditions cannot be bound")

    def compile(self, context: Optional[RenderContext] = None) -> Tuple[str, List[Value]]:
        """
        Serialize the condition and gather its bound arguments in one pass.

        Args:
            context: Quoting/placeholder policy (defaults to configured dialect)

        Returns:
            Tuple of (SQL text, bound arguments in placeholder order)

        Raises:
            InvalidOperationError: If a bindable node in the tree is unbound
        """
        return compile_condition(self, context or RenderContext())

    def to_text(self, context: Optional[RenderContext] = None) -> str:
        """Return the SQL text of the condition."""
        return self.compile(context)[0]

    def gather_bound_args(self, context: Optional[RenderContext] = None) -> List[Value]:
        """Return the bound arguments in placeholder order."""
        return self.compile(context)[1]

    def __str__(self) -> str:
        # str() is for logs and debugging: an unbound tree falls back to repr()
        try:
            return self.to_text()
        except QueryBuilderError:
            return repr(self)


@dataclass(eq=False)
class Comparison(Condition):
    """`column` OP value, or `column` OP `rhs_column` when rhs_column is given."""

    column: ColumnRef
    operator: Operator
    rhs_column: Optional[ColumnRef] = None
    value: Any = field(default=_UNBOUND, init=False, repr=False)

    def __post_init__(self):
        validate_column(self.column, "Comparison column")
        if not isinstance(self.operator, Operator):
            raise InvalidArgumentError(f"Unknown comparison operator {self.operator!r}")
        if self.rhs_column is not None:
            validate_column(self.rhs_column, "Comparison right-hand column")

    @property
    def is_bound(self) -> bool:
        return self.value is not _UNBOUND

    def bind(self, value: Any) -> 'Comparison':
        """
        Bind the right-hand value.

        Args:
            value: Scalar, or None for an IS [NOT] NULL check (EQ and NE only)

        Returns:
            self, for chaining

        Raises:
            InvalidOperationError: If the node compares two columns, is already
                bound, or None is bound under an ordering operator
            InvalidArgumentError: If value is not a scalar
        """
        if self.rhs_column is not None:
            raise InvalidOperationError(
                f"Cannot bind a value to the column comparison "
                f"'{self.column}' {self.operator.value} '{self.rhs_column}'"
            )
        if self.is_bound:
            raise InvalidOperationError(f"Comparison on '{self.column}' is already bound")

        if value is None:
            if self.operator not in (Operator.EQ, Operator.NE):
                raise InvalidOperationError(
                    f"Cannot compare '{self.column}' {self.operator.value} NULL; "
                    f"only = and != accept NULL"
                )
        else:
            as_scalar(value, f"Value for '{self.column}'")

        self.value = value
        return self


@dataclass(eq=False)
class Between(Condition):
    """`column` BETWEEN start AND end, both limits bound."""

    column: ColumnRef
    start: Any
    end: Any

    def __post_init__(self):
        validate_column(self.column, "BETWEEN column")
        as_scalar(self.start, f"BETWEEN start for '{self.column}'")
        as_scalar(self.end, f"BETWEEN end for '{self.column}'")


@dataclass(eq=False)
class In(Condition):
    """`column` IN(list), the list bound as one argument."""

    column: ColumnRef
    values: Any = field(default=_UNBOUND, init=False)

    def __post_init__(self):
        validate_column(self.column, "IN column")

    @property
    def is_bound(self) -> bool:
        return self.values is not _UNBOUND

    def bind(self, values: Any) -> 'In':
        """
        Bind the list of candidate values.

        An empty list raises EmptyListError, unless the configured empty IN
        policy is 'false': then the condition renders as the always-false
        1 = 0 and a warning is logged.

        Raises:
            InvalidOperationError: If the node is already bound
            InvalidArgumentError: If values is not a list of scalars
            EmptyListError: If values is empty under the 'raise' policy
        """
        if self.is_bound:
            raise InvalidOperationError(f"IN condition on '{self.column}' is already bound")

        frozen = as_value_list(values, f"IN values for '{self.column}'")
        if not frozen:
            if config.empty_in_policy != 'false':
                raise EmptyListError(f"Cannot bind an empty list to IN on '{self.column}'")
            logger.warning(
                f"⚠️ Empty list bound to IN on '{self.column}', "
                f"condition degraded to always-false"
            )

        self.values = frozen
        return self


@dataclass(eq=False)
class IsNull(Condition):
    """`column` IS NULL."""

    column: ColumnRef

    def __post_init__(self):
        validate_column(self.column, "IS NULL column")


@dataclass(eq=False)
class IsNotNull(Condition):
    """`column` IS NOT NULL."""

    column: ColumnRef

    def __post_init__(self):
        validate_column(self.column, "IS NOT NULL column")


@dataclass(eq=False)
class Like(Condition):
    """`column` LIKE pattern, the pattern bound as a literal."""

    column: ColumnRef
    pattern: str

    def __post_init__(self):
        validate_column(self.column, "LIKE column")
        if not isinstance(self.pattern, str):
            raise InvalidArgumentError(
                f"LIKE pattern for '{self.column}' must be a string, "
                f"got {type(self.pattern).__name__}"
            )


@dataclass(eq=False)
class _Junction(Condition):
    children: Tuple[Condition, ...]

    keyword = ''

    def __post_init__(self):
        self.children = tuple(self.children)
        if not self.children:
            raise InvalidArgumentError(f"{self.keyword} needs at least one condition")
        for position, child in enumerate(self.children):
            if not isinstance(child, Condition):
                raise InvalidArgumentError(
                    f"{self.keyword} operand {position} must be a condition, "
                    f"got {type(child).__name__}"
                )


class And(_Junction):
    """Children joined by AND."""

    keyword = 'AND'


class Or(_Junction):
    """Children joined by OR."""

    keyword = 'OR'


@dataclass(eq=False)
class Not(Condition):
    """NOT(child)."""

    child: Condition

    def __post_init__(self):
        if not isinstance(self.child, Condition):
            raise InvalidArgumentError(
                f"NOT operand must be a condition, got {type(self.child).__name__}"
            )


def _null_check(column: ColumnRef, negated: bool, context: RenderContext) -> str:
    return f"{context.quote(column)} IS {'NOT ' if negated else ''}NULL"


def compile_condition(node: Condition, context: RenderContext) -> Tuple[str, List[Value]]:
    """
    Render a condition tree and collect its arguments in a single pre-order walk.

    Text and arguments come from the same traversal, so the Nth placeholder
    always matches the Nth argument.

    Args:
        node: Root of the condition tree
        context: Quoting/placeholder policy

    Returns:
        Tuple of (SQL text, bound arguments)

    Raises:
        InvalidOperationError: If a bindable node is still unbound
        TypeError: If node is not a known condition kind
    """
    if isinstance(node, Comparison):
        column = context.quote(node.column)
        if node.rhs_column is not None:
            return f"{column} {node.operator.value} {context.quote(node.rhs_column)}", []
        if not node.is_bound:
            raise InvalidOperationError(
                f"Comparison on '{node.column}' was serialized before a value was bound"
            )
        if node.value is None:
            return _null_check(node.column, node.operator is Operator.NE, context), []
        return f"{column} {node.operator.value} {context.placeholder()}", [node.value]

    if isinstance(node, Between):
        column = context.quote(node.column)
        return (
            f"{column} BETWEEN {context.placeholder()} AND {context.placeholder()}",
            [node.start, node.end],
        )

    if isinstance(node, In):
        if not node.is_bound:
            raise InvalidOperationError(
                f"IN condition on '{node.column}' was serialized before a list was bound"
            )
        if not node.values:
            return "1 = 0", []
        return f"{context.quote(node.column)} IN{context.list_placeholder(node.values)}", [node.values]

    if isinstance(node, IsNull):
        return _null_check(node.column, False, context), []

    if isinstance(node, IsNotNull):
        return _null_check(node.column, True, context), []

    if isinstance(node, Like):
        return f"{context.quote(node.column)} LIKE {context.placeholder()}", [node.pattern]

    if isinstance(node, _Junction):
        parts = []
        args: List[Value] = []
        for child in node.children:
            text, child_args = compile_condition(child, context)
            # AND binds tighter than OR: mixed nesting needs explicit grouping
            if isinstance(child, _Junction) and child.keyword != node.keyword:
                text = f"({text})"
            parts.append(text)
            args.extend(child_args)
        return f" {node.keyword} ".join(parts), args

    if isinstance(node, Not):
        text, args = compile_condition(node.child, context)
        return f"NOT({text})", args

    raise TypeError(f"Unsupported condition node {type(node).__name__}")


def eq(column: ColumnRef, rhs_column: Optional[ColumnRef] = None) -> Comparison:
    """`column` = value (bind later) or `column` = `rhs_column`."""
    return Comparison(column, Operator.EQ, rhs_column)


def ne(column: ColumnRef, rhs_column: Optional[ColumnRef] = None) -> Comparison:
    """`column` != value (bind later) or `column` != `rhs_column`."""
    return Comparison(column, Operator.NE, rhs_column)


def lt(column: ColumnRef, rhs_column: Optional[ColumnRef] = None) -> Comparison:
    return Comparison(column, Operator.LT, rhs_column)


def gt(column: ColumnRef, rhs_column: Optional[ColumnRef] = None) -> Comparison:
    return Comparison(column, Operator.GT, rhs_column)


def lte(column: ColumnRef, rhs_column: Optional[ColumnRef] = None) -> Comparison:
    return Comparison(column, Operator.LTE, rhs_column)


def gte(column: ColumnRef, rhs_column: Optional[ColumnRef] = None) -> Comparison:
    return Comparison(column, Operator.GTE, rhs_column)


def between(column: ColumnRef, start: Any, end: Any) -> Between:
    """`column` BETWEEN start AND end."""
    return Between(column, start, end)


def in_(column: ColumnRef, values: Optional[Any] = None) -> In:
    """
    `column` IN(values).

    Args:
        column: Column name
        values: Optional list to bind immediately; otherwise call bind() later

    Returns:
        In condition
    """
    condition = In(column)
    if values is not None:
        condition.bind(values)
    return condition


def is_null(column: ColumnRef) -> IsNull:
    return IsNull(column)


def is_not_null(column: ColumnRef) -> IsNotNull:
    return IsNotNull(column)


def like(column: ColumnRef, pattern: str) -> Like:
    """`column` LIKE pattern; wildcards in pattern are passed through unescaped."""
    return Like(column, pattern)


def and_(*conditions: Condition) -> And:
    """Join conditions with AND."""
    return And(conditions)


def or_(*conditions: Condition) -> Or:
    """Join conditions with OR."""
    return Or(conditions)


def not_(condition: Condition) -> Not:
    """Negate a condition."""
    return Not(condition)
