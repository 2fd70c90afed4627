"""
Test suite for core/logger.py.

Tests cover:
- setup_logging handler configuration (console, file, colors)
- ColoredFormatter output
- get_logger / get_module_logger

setup_logging() reconfigures the root logger, so each test patches
logging.getLogger with a private logger inside the test body only.
"""

import logging
from contextlib import contextmanager
from unittest.mock import patch

import pytest

from core.logger import ColoredFormatter, get_logger, get_module_logger, setup_logging


@contextmanager
def private_root():
    """Route logging.getLogger() to a throwaway logger for the duration."""
    root = logging.Logger('root-under-test')
    try:
        with patch.object(logging, 'getLogger', return_value=root):
            yield root
    finally:
        for handler in root.handlers:
            handler.close()


@pytest.mark.unit
def test_setup_logging_console_only():
    """Test console-only setup installs one stream handler at the given level."""
    with private_root() as root:
        setup_logging(log_level='WARNING', use_colors=False)

        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], logging.StreamHandler)
        assert not isinstance(root.handlers[0].formatter, ColoredFormatter)


@pytest.mark.unit
def test_setup_logging_replaces_existing_handlers():
    """Test calling setup twice does not stack handlers."""
    with private_root() as root:
        setup_logging(log_level='INFO')
        setup_logging(log_level='INFO')

        assert len(root.handlers) == 1


@pytest.mark.unit
def test_setup_logging_with_file(tmp_path):
    """Test a log file is created in the given directory and receives records."""
    with private_root() as root:
        setup_logging(log_level='DEBUG', log_file='builder.log', log_dir=tmp_path, console_output=False)

        root.debug("compiled statement")
        for handler in root.handlers:
            handler.flush()

    log_file = tmp_path / 'builder.log'
    assert log_file.exists()
    assert "compiled statement" in log_file.read_text(encoding='utf-8')


@pytest.mark.unit
def test_setup_logging_colors():
    """Test colored console output uses ColoredFormatter."""
    with private_root() as root:
        setup_logging(log_level='INFO', use_colors=True)

        assert isinstance(root.handlers[0].formatter, ColoredFormatter)


@pytest.mark.unit
def test_colored_formatter_restores_levelname():
    """Test the formatter colors the output but leaves the record intact."""
    formatter = ColoredFormatter('%(emoji)s %(levelname)s %(message)s')
    record = logging.LogRecord('x', logging.ERROR, __file__, 1, "boom", None, None)

    output = formatter.format(record)

    assert '\033[31mERROR\033[0m' in output
    assert output.startswith('❌')
    assert record.levelname == 'ERROR'


@pytest.mark.unit
def test_get_logger_level_override():
    """Test get_logger applies an explicit level."""
    logger = get_logger('querybuilder.level_test', level='debug')

    assert logger.level == logging.DEBUG
    assert get_module_logger('querybuilder.level_test') is logger
