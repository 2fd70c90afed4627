"""
==========================
Query builder exceptions.
==========================

All errors are raised synchronously at the point of misuse. The only
exception is an unbound condition, which can only be detected when it is
serialized.

Classes:
    QueryBuilderError: Base class for every builder error
    IllegalSequenceError: Fragment requested outside its legal predecessor state
    InvalidOperationError: Rebinding, binding a non-bindable node, serializing an unbound node
    EmptyListError: Empty list bound to an IN condition
    InvalidArgumentError: Argument of the wrong type or shape
"""


class QueryBuilderError(Exception):
    """Base exception for query builder errors."""
    pass


class IllegalSequenceError(QueryBuilderError):
    """Exception raised when a clause is added out of SQL clause order.

    Always a caller bug: the statement under construction is left unchanged.
    """
    pass


class InvalidOperationError(QueryBuilderError):
    """Exception raised when a condition is bound or serialized illegally."""
    pass


class EmptyListError(QueryBuilderError):
    """Exception raised when an empty list is bound to an IN condition."""
    pass


class InvalidArgumentError(QueryBuilderError, ValueError):
    """Exception raised when a builder argument fails validation."""
    pass
