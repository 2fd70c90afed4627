"""
=========================
SELECT Statement Builder.
=========================

This module assembles SELECT statements from chained calls and enforces SQL
clause order while doing so. Each call is legal only after specific earlier
calls; anything else raises IllegalSequenceError immediately.

Legal Sequence:
    select -> from_ -> (left_join | inner_join | right_join)* -> where?
           -> group_by? -> having? -> order_by? -> limit?

    limit() may follow any non-terminal state and ends the chain. Serializing
    the statement with compile(), to_text(), gather_bound_args() or build()
    finalizes it: no further clauses can be added. str() only previews the
    text and leaves the statement open.

Bound Arguments:
    Values bound in JOIN ... ON conditions, WHERE and HAVING are gathered in
    clause order, which is the order their placeholders appear in the text.

Usage:
    from querybuilder.conditions import eq
    from querybuilder.query_builder import select

    query = (
        select('id', 'title')
        .from_('article')
        .inner_join('users', 'userId')
        .where(eq('category').bind(5))
        .limit(10, 20)
    )
    sql, args = query.build()
    # SELECT `id`, `title` FROM `article` INNER JOIN `users` USING(`userId`)
    #   WHERE `category` = ? LIMIT 10 OFFSET 20
    # (5,)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Iterator, List, Optional, Tuple, Union

from querybuilder.conditions import Condition
from querybuilder.dialect import RenderContext
from querybuilder.exceptions import IllegalSequenceError, InvalidArgumentError, QueryBuilderError
from querybuilder.validation import (
    ColumnRef,
    NameOrAlias,
    validate_aliased,
    validate_column,
    validate_name,
    validate_non_negative_int,
    validate_order_term,
    validate_select_options,
)
from querybuilder.values import Value

logger = logging.getLogger(__name__)


class QueryState(Enum):
    """Builder states, named after the last clause accepted."""

    INITIAL = 'initial'
    COLUMNS = 'select'
    FROM = 'from'
    JOIN = 'join'
    WHERE = 'where'
    GROUP_BY = 'group by'
    HAVING = 'having'
    ORDER_BY = 'order by'
    LIMIT = 'limit'
    FINAL = 'final'


class ClauseKind(Enum):
    """Clause kinds in SQL clause order."""

    SELECT = 'SELECT'
    FROM = 'FROM'
    JOIN = 'JOIN'
    WHERE = 'WHERE'
    GROUP_BY = 'GROUP BY'
    HAVING = 'HAVING'
    ORDER_BY = 'ORDER BY'
    LIMIT = 'LIMIT'


CLAUSE_ORDER: Tuple[ClauseKind, ...] = tuple(ClauseKind)


class JoinKind(Enum):
    LEFT = 'LEFT JOIN'
    INNER = 'INNER JOIN'
    RIGHT = 'RIGHT JOIN'


_S = QueryState

# operation -> (states it may follow, state it leads to)
TRANSITIONS: Dict[str, Tuple[FrozenSet[QueryState], QueryState]] = {
    'select': (frozenset({_S.INITIAL}), _S.COLUMNS),
    'from_': (frozenset({_S.COLUMNS}), _S.FROM),
    'join': (frozenset({_S.FROM, _S.JOIN}), _S.JOIN),
    'where': (frozenset({_S.FROM, _S.JOIN}), _S.WHERE),
    'group_by': (frozenset({_S.FROM, _S.JOIN, _S.WHERE}), _S.GROUP_BY),
    'having': (frozenset({_S.GROUP_BY}), _S.HAVING),
    'order_by': (frozenset({_S.FROM, _S.JOIN, _S.WHERE, _S.GROUP_BY, _S.HAVING}), _S.ORDER_BY),
    'limit': (
        frozenset({_S.COLUMNS, _S.FROM, _S.JOIN, _S.WHERE, _S.GROUP_BY, _S.HAVING, _S.ORDER_BY}),
        _S.LIMIT,
    ),
}


@dataclass(frozen=True)
class SelectColumn:
    expression: ColumnRef
    alias: Optional[str] = None


@dataclass(frozen=True)
class SelectClause:
    columns: Tuple[SelectColumn, ...]
    options: Tuple[str, ...] = ()


@dataclass(frozen=True)
class TableSource:
    name: str
    alias: Optional[str] = None


@dataclass(frozen=True)
class JoinClause:
    """One JOIN: exactly one of condition (ON) and using_column (USING) is set."""

    kind: JoinKind
    table: TableSource
    condition: Optional[Condition] = None
    using_column: Optional[str] = None


@dataclass(frozen=True)
class OrderTerm:
    column: ColumnRef
    direction: Optional[str] = None


@dataclass(frozen=True)
class LimitClause:
    count: int
    offset: Optional[int] = None


@dataclass(frozen=True)
class CompiledQuery:
    """
    Serialized statement paired with its arguments.

    The Nth placeholder in sql corresponds to args[N]. Unpacks as
    (sql, args), so it can be splatted into a DB-API execute() call.
    """

    sql: str
    args: Tuple[Value, ...]

    def __iter__(self) -> Iterator[Any]:
        return iter((self.sql, self.args))

    def __str__(self) -> str:
        return self.sql


RenderedClause = Tuple[str, List[Value]]


def _render_select(clause: SelectClause, context: RenderContext) -> RenderedClause:
    columns = ", ".join(
        context.aliased(column.expression, column.alias) for column in clause.columns
    ) or "*"
    keywords = " ".join(('SELECT',) + clause.options)
    return f"{keywords} {columns}", []


def _render_from(sources: Tuple[TableSource, ...], context: RenderContext) -> RenderedClause:
    return "FROM " + ", ".join(context.aliased(s.name, s.alias) for s in sources), []


def _render_joins(joins: List[JoinClause], context: RenderContext) -> RenderedClause:
    parts = []
    args: List[Value] = []
    for join in joins:
        text = f"{join.kind.value} {context.aliased(join.table.name, join.table.alias)}"
        if join.condition is not None:
            condition_text, condition_args = join.condition.compile(context)
            text += f" ON({condition_text})"
            args.extend(condition_args)
        else:
            text += f" USING({context.quote(join.using_column)})"
        parts.append(text)
    return " ".join(parts), args


def _render_condition_clause(keyword: str) -> Callable[[Condition, RenderContext], RenderedClause]:
    def render(condition: Condition, context: RenderContext) -> RenderedClause:
        text, args = condition.compile(context)
        return f"{keyword} {text}", args
    return render


def _render_group_by(columns: Tuple[ColumnRef, ...], context: RenderContext) -> RenderedClause:
    return "GROUP BY " + ", ".join(context.quote(column) for column in columns), []


def _render_order_by(terms: Tuple[OrderTerm, ...], context: RenderContext) -> RenderedClause:
    rendered = [
        context.quote(term.column) + (f" {term.direction}" if term.direction else "")
        for term in terms
    ]
    return "ORDER BY " + ", ".join(rendered), []


def _render_limit(clause: LimitClause, context: RenderContext) -> RenderedClause:
    text = f"LIMIT {clause.count}"
    if clause.offset is not None:
        text += f" OFFSET {clause.offset}"
    return text, []


_CLAUSE_RENDERERS: Dict[ClauseKind, Callable[[Any, RenderContext], RenderedClause]] = {
    ClauseKind.SELECT: _render_select,
    ClauseKind.FROM: _render_from,
    ClauseKind.JOIN: _render_joins,
    ClauseKind.WHERE: _render_condition_clause('WHERE'),
    ClauseKind.GROUP_BY: _render_group_by,
    ClauseKind.HAVING: _render_condition_clause('HAVING'),
    ClauseKind.ORDER_BY: _render_order_by,
    ClauseKind.LIMIT: _render_limit,
}


def _require_condition(condition: Any, clause: str) -> Condition:
    if not isinstance(condition, Condition):
        raise InvalidArgumentError(
            f"{clause} needs a condition, got {type(condition).__name__}"
        )
    return condition


class SelectQuery:
    """
    One SELECT statement under construction.

    Instances are created by select() and mutated in place by each chained
    call. They are not thread-safe; keep each one local to the chain building
    it.

    Attributes:
        state: Name of the last clause accepted (QueryState)
    """

    def __init__(self):
        self._state = QueryState.INITIAL
        self._clauses: Dict[ClauseKind, Any] = {}

    @property
    def state(self) -> QueryState:
        return self._state

    @property
    def is_final(self) -> bool:
        return self._state is QueryState.FINAL

    def _check_transition(self, operation: str) -> QueryState:
        """Return the target state of operation, or raise if it is illegal now."""
        allowed, target = TRANSITIONS[operation]
        if self._state not in allowed:
            error_msg = (
                f"{operation.rstrip('_')}() cannot follow {self._state.value}; "
                f"legal after: {', '.join(sorted(s.value for s in allowed))}"
            )
            logger.error(f"❌ {error_msg}")
            raise IllegalSequenceError(error_msg)
        return target

    def _commit(self, target: QueryState, kind: ClauseKind, value: Any) -> 'SelectQuery':
        logger.debug(f"SELECT builder {self._state.value} -> {target.value}")
        self._clauses[kind] = value
        self._state = target
        return self

    def _select(self, columns: Tuple[NameOrAlias, ...], options: Any) -> 'SelectQuery':
        target = self._check_transition('select')
        keywords = validate_select_options(options)
        parsed = tuple(
            SelectColumn(*validate_aliased(c, "SELECT column", allow_expression=True)) for c in columns
        )
        return self._commit(target, ClauseKind.SELECT, SelectClause(parsed, tuple(keywords)))

    def from_(self, *sources: NameOrAlias) -> 'SelectQuery':
        """
        Add the FROM clause.

        Args:
            *sources: Table names or {table: alias} mappings

        Raises:
            IllegalSequenceError: If not called right after select()
            InvalidArgumentError: If no source is given or one is malformed
        """
        target = self._check_transition('from_')
        if not sources:
            raise InvalidArgumentError("FROM needs at least one source")
        parsed = tuple(TableSource(*validate_aliased(s, "FROM source")) for s in sources)
        return self._commit(target, ClauseKind.FROM, parsed)

    def _join(self, kind: JoinKind, table: NameOrAlias, on: Union[Condition, str]) -> 'SelectQuery':
        target = self._check_transition('join')
        source = TableSource(*validate_aliased(table, "JOIN table"))

        if isinstance(on, Condition):
            join = JoinClause(kind, source, condition=on)
        elif isinstance(on, str):
            join = JoinClause(kind, source, using_column=validate_name(on, "JOIN column"))
        else:
            raise InvalidArgumentError(
                f"JOIN needs a condition or a shared column name, got {type(on).__name__}"
            )

        joins = self._clauses.get(ClauseKind.JOIN, []) + [join]
        return self._commit(target, ClauseKind.JOIN, joins)

    def left_join(self, table: NameOrAlias, on: Union[Condition, str]) -> 'SelectQuery':
        """LEFT JOIN table ON(condition), or USING(column) when on is a column name."""
        return self._join(JoinKind.LEFT, table, on)

    def inner_join(self, table: NameOrAlias, on: Union[Condition, str]) -> 'SelectQuery':
        """INNER JOIN table ON(condition), or USING(column) when on is a column name."""
        return self._join(JoinKind.INNER, table, on)

    def right_join(self, table: NameOrAlias, on: Union[Condition, str]) -> 'SelectQuery':
        """RIGHT JOIN table ON(condition), or USING(column) when on is a column name."""
        return self._join(JoinKind.RIGHT, table, on)

    def where(self, condition: Condition) -> 'SelectQuery':
        """Add the WHERE clause. Legal after from_() or a join."""
        target = self._check_transition('where')
        return self._commit(target, ClauseKind.WHERE, _require_condition(condition, "WHERE"))

    def group_by(self, *columns: ColumnRef) -> 'SelectQuery':
        """Add the GROUP BY clause."""
        target = self._check_transition('group_by')
        if not columns:
            raise InvalidArgumentError("GROUP BY needs at least one column")
        parsed = tuple(validate_column(column, "GROUP BY column") for column in columns)
        return self._commit(target, ClauseKind.GROUP_BY, parsed)

    def having(self, condition: Condition) -> 'SelectQuery':
        """Add the HAVING clause. Legal only right after group_by()."""
        target = self._check_transition('having')
        return self._commit(target, ClauseKind.HAVING, _require_condition(condition, "HAVING"))

    def order_by(self, *columns: Union[ColumnRef, Dict[ColumnRef, str]]) -> 'SelectQuery':
        """
        Add the ORDER BY clause.

        Args:
            *columns: Column names, or {column: 'ASC'|'DESC'} mappings
        """
        target = self._check_transition('order_by')
        if not columns:
            raise InvalidArgumentError("ORDER BY needs at least one column")
        parsed = tuple(OrderTerm(*validate_order_term(column)) for column in columns)
        return self._commit(target, ClauseKind.ORDER_BY, parsed)

    def limit(self, count: int, offset: Optional[int] = None) -> 'SelectQuery':
        """
        Add LIMIT count [OFFSET offset]. Ends the chain.

        Raises:
            IllegalSequenceError: If called twice or before select()
            InvalidArgumentError: If count or offset is not a non-negative int
        """
        target = self._check_transition('limit')
        count = validate_non_negative_int(count, "LIMIT count")
        if offset is not None:
            offset = validate_non_negative_int(offset, "LIMIT offset")
        return self._commit(target, ClauseKind.LIMIT, LimitClause(count, offset))

    def compile(self, context: Optional[RenderContext] = None) -> Tuple[str, List[Value]]:
        """
        Serialize the statement and gather its bound arguments in one pass.

        Clauses are written in SQL clause order. A successful call finalizes
        the statement; later calls return the same result.

        Args:
            context: Quoting/placeholder policy (defaults to configured dialect)

        Returns:
            Tuple of (SQL text, bound arguments in placeholder order)

        Raises:
            IllegalSequenceError: If select() was never applied
            InvalidOperationError: If an embedded condition is unbound
        """
        sql, args = self._render(context or RenderContext())

        if not self.is_final:
            logger.debug(f"SELECT finalized after {self._state.value} with {len(args)} bound argument(s)")
            self._state = QueryState.FINAL
        return sql, args

    def _render(self, context: RenderContext) -> Tuple[str, List[Value]]:
        """Serialize the clauses accepted so far without touching the state."""
        if ClauseKind.SELECT not in self._clauses:
            raise IllegalSequenceError("Cannot serialize a statement before select()")

        parts = []
        args: List[Value] = []
        for kind in CLAUSE_ORDER:
            if kind not in self._clauses:
                continue
            text, clause_args = _CLAUSE_RENDERERS[kind](self._clauses[kind], context)
            parts.append(text)
            args.extend(clause_args)
        return " ".join(parts), args

    def to_text(self, context: Optional[RenderContext] = None) -> str:
        """Return the SQL text of the statement."""
        return self.compile(context)[0]

    def gather_bound_args(self, context: Optional[RenderContext] = None) -> List[Value]:
        """Return all bound arguments in placeholder order (ON, WHERE, HAVING)."""
        return self.compile(context)[1]

    def build(self, context: Optional[RenderContext] = None) -> CompiledQuery:
        """Return the statement text and arguments as one CompiledQuery."""
        sql, args = self.compile(context)
        return CompiledQuery(sql, tuple(args))

    def __str__(self) -> str:
        # Preview for logs and debugging: does not finalize the statement
        try:
            return self._render(RenderContext())[0]
        except QueryBuilderError:
            return repr(self)

    def __repr__(self) -> str:
        return f"<SelectQuery state={self._state.value!r}>"


def select(*columns: NameOrAlias, options: Any = None) -> SelectQuery:
    """
    Start a SELECT statement.

    Args:
        *columns: Column names, raw() expressions or {column: alias} mappings;
            none selects *
        options: SELECT modifier keyword(s), e.g. 'DISTINCT' or
            ['SQL_CALC_FOUND_ROWS', 'DISTINCT']

    Returns:
        SelectQuery in the select state

    Example:
        >>> select('id', {raw('COUNT(*)'): 'total'}, options='DISTINCT').from_('article')
    """
    return SelectQuery()._select(columns, options)
