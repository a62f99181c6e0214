# cascade_sim/infrastructure/logging/log_manager.py
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Dict, Any, Optional, Union


DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class LogManager:
    """
    Centralized logging configuration manager.
    """
    def __init__(self):
        self.root_logger = logging.getLogger()
        self.loggers = {}  # name -> logger
        self.handlers = {}  # name -> handler
        self.initialized = False

    def initialize(self, config: Dict[str, Any], force: bool = False):
        """
        Initialize logging system based on configuration.

        Args:
            config: Logging configuration dictionary (the ``logging`` section
                of a game file)
            force: Re-apply the configuration even if already initialized
        """
        if self.initialized and not force:
            return

        log_level = self._get_log_level(config.get('level', 'INFO'))
        log_format = config.get('format', DEFAULT_LOG_FORMAT)
        log_date_format = config.get('date_format', '%Y-%m-%d %H:%M:%S')
        console_enabled = config.get('console', True)
        file_enabled = config.get('file', {}).get('enabled', False)

        self.root_logger.setLevel(log_level)

        for name in list(self.handlers):
            self._remove_handler(name)

        formatter = logging.Formatter(log_format, log_date_format)

        if console_enabled:
            console_level = self._get_log_level(config.get('console_level', log_level))
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(console_level)
            console_handler.setFormatter(formatter)
            self.root_logger.addHandler(console_handler)
            self.handlers['console'] = console_handler

        if file_enabled:
            file_config = config.get('file', {})
            file_path = file_config.get('path', 'logs/cascade_sim.log')
            file_level = self._get_log_level(file_config.get('level', log_level))
            max_bytes = file_config.get('max_bytes', 10 * 1024 * 1024)  # 10 MB
            backup_count = file_config.get('backup_count', 5)

            log_dir = os.path.dirname(file_path)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)

            file_handler = RotatingFileHandler(
                file_path,
                maxBytes=max_bytes,
                backupCount=backup_count
            )
            file_handler.setLevel(file_level)
            file_handler.setFormatter(formatter)
            self.root_logger.addHandler(file_handler)
            self.handlers['file'] = file_handler

        # Parents before children so child levels win
        logger_configs = config.get('loggers', {})
        for logger_name in sorted(logger_configs, key=lambda x: len(x.split('.'))):
            logger_config = logger_configs[logger_name] or {}
            logger_level = self._get_log_level(logger_config.get('level', log_level))

            logger = logging.getLogger(logger_name)
            logger.setLevel(logger_level)
            logger.propagate = logger_config.get('propagate', True)
            self.loggers[logger_name] = logger

            self.root_logger.debug(
                f"Configured logger '{logger_name}' with level={logging.getLevelName(logger_level)}, "
                f"propagate={logger.propagate}"
            )

        self.root_logger.debug("Logging system initialized")
        self.initialized = True

    def get_logger(self, name: str) -> logging.Logger:
        return logging.getLogger(name)

    def shutdown(self):
        """Detach and close every handler this manager installed."""
        for name in list(self.handlers):
            self._remove_handler(name)
        self.loggers.clear()
        self.initialized = False

    def _remove_handler(self, name: str):
        handler = self.handlers.pop(name)
        self.root_logger.removeHandler(handler)
        handler.close()

    def _get_log_level(self, level_name: Union[str, int]) -> int:
        """
        Convert a log level name to its numeric value.

        Unknown names fall back to INFO.
        """
        if isinstance(level_name, int):
            return level_name

        level_map = {
            'CRITICAL': logging.CRITICAL,
            'FATAL': logging.FATAL,
            'ERROR': logging.ERROR,
            'WARNING': logging.WARNING,
            'WARN': logging.WARN,
            'INFO': logging.INFO,
            'DEBUG': logging.DEBUG,
            'NOTSET': logging.NOTSET
        }

        return level_map.get(str(level_name).upper(), logging.INFO)


# Singleton instance
log_manager = LogManager()


def initialize_logging(config: Optional[Dict[str, Any]] = None, force: bool = False) -> LogManager:
    """
    Initialize the logging system from a configuration section or defaults.

    Args:
        config: Optional logging configuration dictionary
        force: Reconfigure even if logging was already initialized
    """
    default_config = {
        'level': 'INFO',
        'console': True,
        'console_level': 'INFO',
        'file': {
            'enabled': False,
            'path': 'logs/cascade_sim.log',
            'level': 'DEBUG',
        },
        'loggers': {
            'domain.game': {'level': 'INFO'},
            'domain.cascade': {'level': 'INFO'},
            'domain.orders': {'level': 'INFO'},
            'domain.bonus': {'level': 'INFO'},
            'infrastructure.rng': {'level': 'WARNING'}
        }
    }

    if config is None:
        config = default_config

    log_manager.initialize(config, force=force)
    return log_manager
