"""
========================================================
Comprehensive pytest suite for querybuilder/conditions.py
========================================================

Sections:
---------
1. Unit tests - Rendering of each condition kind
2. NULL handling - IS [NOT] NULL rewriting on bind
3. Boolean connectives - AND/OR/NOT grouping and argument order
4. Edge case tests - Binding errors, empty IN lists, invalid arguments

Available markers:
------------------
unit, edge_case, regression

How to Execute:
---------------
All tests:          pytest tests/tests_querybuilder/test_conditions.py -v
By category:        pytest tests/tests_querybuilder/test_conditions.py -m unit
"""

import logging

import pytest

from querybuilder.conditions import (
    And,
    Comparison,
    Operator,
    and_,
    between,
    compile_condition,
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
from querybuilder.exceptions import (
    EmptyListError,
    InvalidArgumentError,
    InvalidOperationError,
)
from querybuilder.expressions import raw


def placeholder_count(sql):
    return sql.count('?')


# ===============
# 1. UNIT TESTS
# ===============

@pytest.mark.unit
def test_eq_bound_renders_placeholder():
    """Test a bound equality renders the quoted column and one placeholder."""
    condition = eq('id').bind(1337)

    assert condition.to_text() == '`id` = ?'
    assert condition.gather_bound_args() == [1337]


@pytest.mark.unit
def test_relational_operators_render_sql_spelling():
    """Test every relational operator renders its SQL symbol."""
    rendered = [
        eq('a').bind(1).to_text(),
        ne('a').bind(1).to_text(),
        lt('a').bind(1).to_text(),
        gt('a').bind(1).to_text(),
        lte('a').bind(1).to_text(),
        gte('a').bind(1).to_text(),
    ]

    assert rendered == [
        '`a` = ?', '`a` != ?', '`a` < ?', '`a` > ?', '`a` <= ?', '`a` >= ?'
    ]


@pytest.mark.unit
def test_two_column_comparison_quotes_both_sides():
    """Test a column-to-column comparison has no placeholder and no arguments."""
    condition = eq('article.userId', 'users.userId')

    assert condition.to_text() == '`article`.`userId` = `users`.`userId`'
    assert condition.gather_bound_args() == []


@pytest.mark.unit
def test_between_binds_both_limits():
    """Test BETWEEN renders two placeholders with start before end."""
    condition = between('stamp', '2013-01-06', '2014-03-31')

    assert condition.to_text() == '`stamp` BETWEEN ? AND ?'
    assert condition.gather_bound_args() == ['2013-01-06', '2014-03-31']


@pytest.mark.unit
def test_in_binds_list_as_single_argument():
    """Test IN renders one placeholder and gathers the list as one argument."""
    condition = in_('category').bind([1, 2, 3])

    assert condition.to_text() == '`category` IN(?)'
    assert condition.gather_bound_args() == [(1, 2, 3)]


@pytest.mark.unit
def test_in_with_values_binds_immediately():
    """Test in_() with values is bound at construction."""
    condition = in_('category', ['news', 'tech'])

    assert condition.is_bound
    assert condition.gather_bound_args() == [('news', 'tech')]


@pytest.mark.unit
def test_in_freezes_bound_list():
    """Test later changes to the caller's list do not leak into the condition."""
    values = [1, 2]
    condition = in_('category').bind(values)
    values.append(3)

    assert condition.gather_bound_args() == [(1, 2)]


@pytest.mark.unit
def test_null_checks_render_without_arguments():
    """Test IS NULL / IS NOT NULL constructors contribute no arguments."""
    assert is_null('author').to_text() == '`author` IS NULL'
    assert is_not_null('author').to_text() == '`author` IS NOT NULL'
    assert is_null('author').gather_bound_args() == []


@pytest.mark.unit
def test_like_binds_pattern():
    """Test LIKE never inlines the pattern."""
    condition = like('title', '%query%')

    assert condition.to_text() == '`title` LIKE ?'
    assert condition.gather_bound_args() == ['%query%']


@pytest.mark.unit
def test_raw_expression_column_is_not_quoted():
    """Test raw() expressions such as COUNT(*) are emitted verbatim."""
    assert gt(raw('COUNT(*)')).bind(1).to_text() == 'COUNT(*) > ?'
    assert eq(raw('LOWER(name)'), 'login').to_text() == 'LOWER(name) = `login`'


@pytest.mark.unit
def test_column_strings_are_always_quoted():
    """Test names with spaces, hyphens or parentheses are quoted, not passed through."""
    assert eq('first name').bind(1).to_text() == '`first name` = ?'
    assert is_null('order-id').to_text() == '`order-id` IS NULL'
    assert like('straße', 'a%').to_text() == '`straße` LIKE ?'
    assert gt('COUNT(*)').bind(1).to_text() == '`COUNT(*)` > ?'


@pytest.mark.regression
def test_placeholders_match_args_with_question_mark_in_name():
    """Test a '?' inside an identifier is quoted and cannot pose as a placeholder."""
    sql, args = eq("IFNULL(title, '?')").bind(5).compile()

    assert sql == "`IFNULL(title, '?')` = ?"
    assert args == [5]


@pytest.mark.unit
def test_str_renders_text():
    """Test str() of a condition is its SQL text."""
    assert str(eq('id').bind(1)) == '`id` = ?'


@pytest.mark.unit
def test_str_of_unbound_condition_does_not_raise():
    """Test str() falls back to repr() while a node is still unbound."""
    condition = and_(eq('id'), in_('category'))

    assert str(condition) == repr(condition)


@pytest.mark.unit
def test_compile_returns_text_and_args_together(mysql_context):
    """Test compile_condition produces both outputs in one call."""
    sql, args = compile_condition(eq('id').bind(7), mysql_context)

    assert sql == '`id` = ?'
    assert args == [7]


@pytest.mark.unit
def test_format_placeholder_style():
    """Test the placeholder token follows the render context."""
    from querybuilder.dialect import RenderContext

    context = RenderContext(dialect='mysql', placeholder='%s')

    assert between('n', 1, 2).to_text(context) == '`n` BETWEEN %s AND %s'


# ===========================
# 2. NULL HANDLING
# ===========================

@pytest.mark.unit
def test_eq_bound_to_none_becomes_is_null():
    """Test binding None under = rewrites to IS NULL with no arguments."""
    condition = eq('column').bind(None)

    assert condition.to_text() == '`column` IS NULL'
    assert condition.gather_bound_args() == []


@pytest.mark.unit
def test_ne_bound_to_none_becomes_is_not_null():
    """Test binding None under != rewrites to IS NOT NULL with no arguments."""
    condition = ne('column').bind(None)

    assert condition.to_text() == '`column` IS NOT NULL'
    assert condition.gather_bound_args() == []


@pytest.mark.unit
def test_or_of_null_rewrites_has_no_arguments():
    """Test OR over two NULL rewrites renders both checks and zero arguments."""
    condition = or_(eq('author').bind(None), ne('category').bind(None))

    assert condition.to_text() == '`author` IS NULL OR `category` IS NOT NULL'
    assert condition.gather_bound_args() == []


@pytest.mark.edge_case
def test_ordering_operator_rejects_none():
    """Test None under <, >, <=, >= raises InvalidOperationError."""
    for factory in (lt, gt, lte, gte):
        with pytest.raises(InvalidOperationError, match="NULL"):
            factory('amount').bind(None)


@pytest.mark.edge_case
def test_rejected_none_leaves_node_unbound():
    """Test a rejected bind does not change the node."""
    condition = lt('amount')
    with pytest.raises(InvalidOperationError):
        condition.bind(None)

    assert not condition.is_bound
    assert condition.bind(10).to_text() == '`amount` < ?'


# ==================================
# 3. BOOLEAN CONNECTIVES
# ==================================

@pytest.mark.unit
def test_and_with_between_orders_arguments():
    """Test AND gathers arguments left to right, matching placeholder order."""
    condition = and_(
        eq('id').bind(1337),
        between('stamp', '2013-01-06', '2014-03-31')
    )

    assert condition.to_text() == '`id` = ? AND `stamp` BETWEEN ? AND ?'
    assert condition.gather_bound_args() == [1337, '2013-01-06', '2014-03-31']


@pytest.mark.unit
def test_or_inside_and_is_parenthesized():
    """Test an OR child of AND keeps its grouping."""
    condition = and_(
        eq('a').bind(1),
        or_(eq('b').bind(2), eq('c').bind(3))
    )

    assert condition.to_text() == '`a` = ? AND (`b` = ? OR `c` = ?)'
    assert condition.gather_bound_args() == [1, 2, 3]


@pytest.mark.unit
def test_and_inside_or_is_parenthesized():
    """Test an AND child of OR is grouped as well."""
    condition = or_(
        and_(eq('a').bind(1), eq('b').bind(2)),
        is_null('c')
    )

    assert condition.to_text() == '(`a` = ? AND `b` = ?) OR `c` IS NULL'


@pytest.mark.unit
def test_same_kind_nesting_is_flat():
    """Test AND inside AND needs no parentheses."""
    condition = and_(eq('a').bind(1), and_(eq('b').bind(2), eq('c').bind(3)))

    assert condition.to_text() == '`a` = ? AND `b` = ? AND `c` = ?'


@pytest.mark.unit
def test_not_wraps_child():
    """Test NOT renders as NOT(child) and passes the child's arguments through."""
    condition = not_(or_(eq('a').bind(1), in_('b', [2, 3])))

    assert condition.to_text() == 'NOT(`a` = ? OR `b` IN(?))'
    assert condition.gather_bound_args() == [1, (2, 3)]


@pytest.mark.unit
def test_single_child_junction():
    """Test AND with one child renders just the child."""
    assert and_(eq('a').bind(1)).to_text() == '`a` = ?'


@pytest.mark.unit
def test_placeholder_count_matches_argument_count():
    """Test a mixed tree has exactly one argument per placeholder."""
    condition = and_(
        or_(eq('author').bind(None), like('title', 'SQL%')),
        not_(in_('category', [1, 2])),
        between('stamp', '2013-01-01', '2013-12-31'),
        eq('a', 'b'),
        is_not_null('published'),
        gte('rating').bind(3),
    )

    sql = condition.to_text()
    args = condition.gather_bound_args()

    assert placeholder_count(sql) == len(args) == 5
    assert args == ['SQL%', (1, 2), '2013-01-01', '2013-12-31', 3]


@pytest.mark.unit
def test_argument_order_follows_construction_order():
    """Test arguments appear in the same order as their placeholders."""
    condition = or_(
        like('title', 'SQL%'),
        and_(in_('category', [1, 2]), between('stamp', 'x', 'y')),
        gte('rating').bind(3),
    )

    assert condition.to_text() == (
        '`title` LIKE ? OR (`category` IN(?) AND `stamp` BETWEEN ? AND ?) OR `rating` >= ?'
    )
    assert condition.gather_bound_args() == ['SQL%', (1, 2), 'x', 'y', 3]


@pytest.mark.regression
def test_repeated_serialization_is_idempotent():
    """Test reading text and arguments does not mutate the tree."""
    condition = and_(eq('id').bind(1), in_('tag', ['a']))

    first = (condition.to_text(), condition.gather_bound_args())
    second = (condition.to_text(), condition.gather_bound_args())

    assert first == second


@pytest.mark.unit
def test_junction_repr_names_variant():
    """Test connective nodes report their own class name."""
    assert repr(and_(is_null('a'))).startswith('And(')
    assert isinstance(and_(is_null('a')), And)


# ================================
# 4. EDGE CASE TESTS
# ================================

@pytest.mark.edge_case
def test_rebinding_comparison_raises():
    """Test binding an already bound comparison raises InvalidOperationError."""
    condition = eq('id').bind(1)

    with pytest.raises(InvalidOperationError, match="already bound"):
        condition.bind(2)


@pytest.mark.edge_case
def test_rebinding_null_comparison_raises():
    """Test a None binding counts as bound."""
    condition = eq('id').bind(None)

    with pytest.raises(InvalidOperationError, match="already bound"):
        condition.bind(1)


@pytest.mark.edge_case
def test_rebinding_in_raises():
    """Test binding an already bound IN raises InvalidOperationError."""
    condition = in_('id', [1])

    with pytest.raises(InvalidOperationError, match="already bound"):
        condition.bind([2])


@pytest.mark.edge_case
def test_binding_two_column_comparison_raises():
    """Test a column-to-column comparison cannot be bound."""
    with pytest.raises(InvalidOperationError, match="column comparison"):
        eq('a', 'b').bind(1)


@pytest.mark.edge_case
def test_binding_non_bindable_nodes_raises():
    """Test BETWEEN, LIKE, NULL checks and connectives reject bind()."""
    nodes = [
        between('a', 1, 2),
        like('a', '%'),
        is_null('a'),
        is_not_null('a'),
        and_(is_null('a')),
        or_(is_null('a')),
        not_(is_null('a')),
    ]
    for node in nodes:
        with pytest.raises(InvalidOperationError, match="cannot be bound"):
            node.bind(1)


@pytest.mark.edge_case
def test_serializing_unbound_comparison_raises():
    """Test an unbound comparison is detected at serialization."""
    with pytest.raises(InvalidOperationError, match="before a value was bound"):
        eq('id').to_text()


@pytest.mark.edge_case
def test_serializing_unbound_in_raises():
    """Test an unbound IN is detected at serialization, also when nested."""
    with pytest.raises(InvalidOperationError, match="before a list was bound"):
        and_(eq('a').bind(1), in_('category')).gather_bound_args()


@pytest.mark.edge_case
def test_empty_in_list_raises():
    """Test binding an empty list to IN raises EmptyListError by default."""
    with pytest.raises(EmptyListError):
        in_('category').bind([])


@pytest.mark.edge_case
def test_empty_in_list_degrades_under_false_policy(builder_config, caplog):
    """Test the 'false' policy renders an always-false predicate and warns."""
    builder_config.empty_in_policy = 'false'

    with caplog.at_level(logging.WARNING, logger='querybuilder.conditions'):
        condition = in_('category').bind([])

    assert condition.to_text() == '1 = 0'
    assert condition.gather_bound_args() == []
    assert "always-false" in caplog.text


@pytest.mark.edge_case
def test_degraded_in_keeps_neighbour_arguments_aligned(builder_config):
    """Test a degraded IN drops out of the argument list without a gap."""
    builder_config.empty_in_policy = 'false'
    condition = and_(eq('a').bind(1), not_(in_('b', [])), eq('c').bind(3))

    assert condition.to_text() == '`a` = ? AND NOT(1 = 0) AND `c` = ?'
    assert condition.gather_bound_args() == [1, 3]


@pytest.mark.edge_case
def test_in_rejects_string_and_none_members():
    """Test IN values must be a real list of non-null scalars."""
    with pytest.raises(InvalidArgumentError):
        in_('category').bind('abc')
    with pytest.raises(InvalidArgumentError):
        in_('category').bind([1, None])
    with pytest.raises(InvalidArgumentError):
        in_('category').bind({1, 2})


@pytest.mark.edge_case
def test_comparison_rejects_list_value():
    """Test a comparison binds scalars only."""
    with pytest.raises(InvalidArgumentError):
        eq('id').bind([1, 2])


@pytest.mark.edge_case
def test_between_rejects_none_limits():
    """Test BETWEEN limits must be scalars."""
    with pytest.raises(InvalidArgumentError):
        between('stamp', None, '2014-01-01')


@pytest.mark.edge_case
def test_like_rejects_non_string_pattern():
    """Test LIKE patterns must be strings."""
    with pytest.raises(InvalidArgumentError):
        like('title', 5)


@pytest.mark.edge_case
def test_junction_requires_conditions():
    """Test AND/OR need at least one condition and reject other objects."""
    with pytest.raises(InvalidArgumentError, match="at least one"):
        and_()
    with pytest.raises(InvalidArgumentError, match="must be a condition"):
        or_(eq('a').bind(1), 'b = 2')
    with pytest.raises(InvalidArgumentError):
        not_('a = 1')


@pytest.mark.edge_case
def test_empty_column_name_rejected():
    """Test column names must be non-empty strings."""
    with pytest.raises(InvalidArgumentError):
        eq('')
    with pytest.raises(InvalidArgumentError):
        is_null(None)


@pytest.mark.edge_case
def test_comparison_rejects_unknown_operator():
    """Test Comparison only accepts Operator members."""
    with pytest.raises(InvalidArgumentError):
        Comparison('a', '=')

    assert Comparison('a', Operator.GTE).bind(1).to_text() == '`a` >= ?'


@pytest.mark.edge_case
def test_unknown_node_type_rejected(mysql_context):
    """Test compile_condition refuses objects outside the condition set."""
    with pytest.raises(TypeError):
        compile_condition(object(), mysql_context)


@pytest.mark.edge_case
def test_raw_expression_rejects_parameter_markers():
    """Test raw SQL cannot smuggle in placeholders without arguments."""
    for text in ("IFNULL(title, '?')", "FORMAT(x, '%s')", '', '   '):
        with pytest.raises(InvalidArgumentError):
            raw(text)
