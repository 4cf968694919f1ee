"""工具模块"""

from .exceptions import (
    RecoveryError, ConfigError, RuntimeUnavailableError, CommandError, RemediationError
)
from .log_manager import LogManager, LogLevel, get_logger, configure_logging, log_manager

__all__ = [
    'RecoveryError', 'ConfigError', 'RuntimeUnavailableError', 'CommandError',
    'RemediationError', 'LogManager', 'LogLevel', 'get_logger',
    'configure_logging', 'log_manager'
]
