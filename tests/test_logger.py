#!/usr/bin/env python3
"""Test suite for logging helpers"""

import logging

from pyeph.logger import (PROPAGATION_LOGGER, ColoredFormatter, LogContext,
                          LoggerConfig, LogLevel, get_logger, setup_logger,
                          trace_propagation)


def test_trace_level_registered():
    assert logging.getLevelName(LogLevel.TRACE.value) == "TRACE"
    assert hasattr(logging.getLogger("pyeph.test"), "trace")


def test_setup_logger_console():
    logger = setup_logger("pyeph.test.console", level="DEBUG")
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, ColoredFormatter)

    # Calling again replaces the handlers instead of stacking them
    setup_logger("pyeph.test.console", level="INFO")
    assert len(logger.handlers) == 1
    assert logger.level == logging.INFO


def test_setup_logger_file(tmp_path):
    log_file = tmp_path / "pyeph.log"
    logger = setup_logger("pyeph.test.file", level="TRACE", log_file=str(log_file), console=False)
    logger.trace("kepler iterations=3")
    for handler in logger.handlers:
        handler.flush()

    content = log_file.read_text()
    assert "TRACE" in content
    assert "kepler iterations=3" in content
    for handler in logger.handlers:
        handler.close()


def test_colored_formatter_keeps_record():
    record = logging.LogRecord("pyeph", logging.WARNING, __file__, 1, "msg", None, None)
    text = ColoredFormatter("%(levelname)s %(message)s").format(record)
    assert "\033[33m" in text
    assert record.levelname == "WARNING"


def test_log_context_restores_level():
    logger = get_logger("pyeph.test.context")
    logger.setLevel(logging.WARNING)
    with LogContext(logger, "TRACE") as ctx:
        assert ctx.level == LogLevel.TRACE.value
    assert logger.level == logging.WARNING


def test_logger_config():
    config = LoggerConfig()
    config.configure_from_dict({
        'default_level': 'WARNING',
        'console': False,
        'module_levels': {'pyeph.test.module': 'DEBUG'},
    })
    assert config.get_level_for_module('pyeph.test.module') == 'DEBUG'
    assert config.get_level_for_module('pyeph.other') == 'WARNING'
    assert config.console is False


def test_get_logger_relative_names():
    assert get_logger("orbit").name == "pyeph.orbit"
    assert get_logger("pyeph.store").name == "pyeph.store"
    assert get_logger().name == "pyeph"


def test_log_context_by_name():
    logger = get_logger("test.named")
    logger.setLevel(logging.INFO)
    with LogContext("test.named", LogLevel.TRACE):
        assert logger.isEnabledFor(LogLevel.TRACE.value)
    assert logger.level == logging.INFO


def test_trace_propagation(tmp_path):
    log_file = tmp_path / "trace.log"
    logger = trace_propagation(log_file=str(log_file), console=False)
    try:
        assert logger.name == PROPAGATION_LOGGER
        assert logger.isEnabledFor(LogLevel.TRACE.value)
        logger.trace("G05 tk=300.000")
        for handler in logger.handlers:
            handler.flush()
        assert "G05 tk=300.000" in log_file.read_text()
    finally:
        setup_logger(PROPAGATION_LOGGER, level="WARNING", console=False)
        logger.setLevel(logging.NOTSET)
