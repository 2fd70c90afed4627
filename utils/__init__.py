"""
==========================
Utility Functions Package.
==========================

Helpers connecting built queries to a database layer.

Modules:
    database_utils: SQLAlchemy rendering and execution bridge
"""

__version__ = "0.1.0"
__all__ = [
    'NamedParameterContext',
    'QueryExecutionError',
    'create_sqlalchemy_engine',
    'execute_query',
    'to_sqlalchemy_text',
]

from .database_utils import (
    NamedParameterContext,
    QueryExecutionError,
    create_sqlalchemy_engine,
    execute_query,
    to_sqlalchemy_text,
)
