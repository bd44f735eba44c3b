# Copyright 2024 inuex35
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Logging configuration for pyeph

Library modules only call ``logging.getLogger(__name__)``; applications
attach handlers through ``setup_logger`` or ``setup_logger_from_config``.
Per-evaluation quantities of the orbit propagation (anomalies, Kepler
iterations, radius, node longitude) are emitted at the TRACE level (5),
below DEBUG, by the propagation logger. The store reports rejected and
superseded records on its own logger.
"""

import logging
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

ROOT_LOGGER = "pyeph"
PROPAGATION_LOGGER = "pyeph.orbit.orbit_eph"
STORE_LOGGER = "pyeph.store.orbit_eph_store"

CONSOLE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
FILE_FORMAT = '%(asctime)s.%(msecs)03d - %(name)s - %(levelname)s - %(message)s'


class LogLevel(Enum):
    """Log levels for the system"""
    TRACE = 5
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


logging.addLevelName(LogLevel.TRACE.value, "TRACE")


def _trace(self, message, *args, **kwargs):
    if self.isEnabledFor(LogLevel.TRACE.value):
        self._log(LogLevel.TRACE.value, message, args, **kwargs)


logging.Logger.trace = _trace


def _level(level: Union[str, int, LogLevel]) -> int:
    if isinstance(level, LogLevel):
        return level.value
    if isinstance(level, int):
        return level
    return LogLevel[level.upper()].value


class ColoredFormatter(logging.Formatter):
    """Console formatter colouring the level name"""

    COLORS = {
        'TRACE': '\033[36m',     # Cyan
        'DEBUG': '\033[34m',     # Blue
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        # Colour a copy so other handlers still see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        log_color = self.COLORS.get(record.levelname, self.RESET)
        record.levelname = f"{log_color}{record.levelname}{self.RESET}"
        return super().format(record)


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Logger of a pyeph module; short names such as 'orbit' are taken
    relative to the package logger"""
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def setup_logger(name: str = ROOT_LOGGER,
                 level: Union[str, int, LogLevel] = "INFO",
                 log_file: Optional[str] = None,
                 console: bool = True) -> logging.Logger:
    """
    Attach console and/or file handlers to a pyeph logger

    Existing handlers of the logger are replaced, so calling this again
    reconfigures instead of duplicating output.

    Parameters
    ----------
    name : str
        Logger name, absolute or relative to ``pyeph``
    level : str, int or LogLevel
        Log level (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_file : str, optional
        Log file path (if None, no file logging)
    console : bool
        Enable console output

    Returns
    -------
    logging.Logger
    """
    logger = get_logger(name)
    numeric = _level(level)
    logger.setLevel(numeric)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT, datefmt='%H:%M:%S'))
        logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        logger.addHandler(file_handler)

    for handler in logger.handlers:
        handler.setLevel(numeric)
    return logger


def trace_propagation(log_file: Optional[str] = None, console: bool = True) -> logging.Logger:
    """Log the intermediate quantities of every ``sv_xvt`` evaluation"""
    return setup_logger(PROPAGATION_LOGGER, LogLevel.TRACE, log_file, console)


class LogContext:
    """Temporarily change the level of a logger

    >>> with LogContext("orbit", "TRACE"):
    ...     xvt = eph.sv_xvt(t)
    """

    def __init__(self, logger: Union[logging.Logger, str], level: Union[str, int, LogLevel]):
        self.logger = get_logger(logger) if isinstance(logger, str) else logger
        self.new_level = _level(level)
        self.old_level = None

    def __enter__(self):
        self.old_level = self.logger.level
        self.logger.setLevel(self.new_level)
        return self.logger

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.logger.setLevel(self.old_level)


@dataclass
class LoggerConfig:
    """Logging setup of an application using pyeph

    Attributes
    ----------
    default_level : str
        Level of the ``pyeph`` logger
    log_file : str, optional
        File receiving every configured logger
    console : bool
        Also log to stdout
    module_levels : dict
        Logger name (absolute or relative to ``pyeph``) -> level, e.g.
        ``{'orbit': 'TRACE', 'store': 'DEBUG'}``
    """
    default_level: str = "INFO"
    log_file: Optional[str] = None
    console: bool = True
    module_levels: dict = field(default_factory=dict)

    def set_module_level(self, module_name: str, level: str):
        """Set log level for a module, applied at once if it is already set up"""
        self.module_levels[module_name] = level
        logger = get_logger(module_name)
        if logger.handlers:
            logger.setLevel(_level(level))
            for handler in logger.handlers:
                handler.setLevel(_level(level))

    def get_level_for_module(self, module_name: str) -> str:
        return self.module_levels.get(module_name, self.default_level)

    def configure_from_dict(self, config: dict):
        """Configure from dictionary"""
        if 'default_level' in config:
            self.default_level = config['default_level']
        if 'log_file' in config:
            self.log_file = config['log_file']
        if 'console' in config:
            self.console = config['console']
        for module, level in config.get('module_levels', {}).items():
            self.set_module_level(module, level)

    def setup_all_loggers(self):
        setup_logger(ROOT_LOGGER, self.default_level, self.log_file, self.console)
        for module, level in self.module_levels.items():
            logger = setup_logger(module, level, self.log_file, self.console)
            # Records are handled here; do not print them twice through pyeph
            logger.propagate = False


logger_config = LoggerConfig()


def setup_logger_from_config(config: dict):
    """Setup loggers from configuration dictionary

    Example config:
    {
        'default_level': 'WARNING',
        'log_file': 'pyeph.log',
        'console': True,
        'module_levels': {
            'orbit.orbit_eph': 'TRACE',
            'store': 'DEBUG'
        }
    }
    """
    logger_config.configure_from_dict(config)
    logger_config.setup_all_loggers()
