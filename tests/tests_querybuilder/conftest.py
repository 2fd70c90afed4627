"""
Shared fixtures for querybuilder tests.

Rendering defaults come from core.config, which reads the environment. The
autouse fixture pins them so expected SQL strings do not depend on a local
.env file.
"""

from types import SimpleNamespace
from unittest.mock import patch

import pytest


class FakeConfig(SimpleNamespace):
    """Stand-in for core.config.config with builder defaults."""

    def __init__(self, **overrides):
        settings = dict(dialect='mysql', placeholder='?', empty_in_policy='raise')
        settings.update(overrides)
        super().__init__(**settings)


@pytest.fixture(autouse=True)
def builder_config():
    """Pin dialect, placeholder and empty IN policy for every test."""
    fake = FakeConfig()
    with patch('querybuilder.dialect.config', fake), \
         patch('querybuilder.conditions.config', fake):
        yield fake


@pytest.fixture
def mysql_context():
    """Render context quoting with backticks and writing '?' placeholders."""
    from querybuilder.dialect import RenderContext
    return RenderContext(dialect='mysql', placeholder='?')
