"""
Logging Setup for GIF Server
Initializes logging configuration from YAML configuration
"""

import copy
import logging
import logging.config
from typing import Any, Dict, Optional

from colorama import init, Fore, Style

# Initialize colorama for Windows compatibility
init(autoreset=True)

DEFAULT_LOGGING_CONFIG: Dict[str, Any] = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'console': {
            'format': '%(asctime)s | %(levelname)-8s | %(message)s',
            'datefmt': '%H:%M:%S'
        }
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'level': 'WARNING',
            'formatter': 'console',
            'stream': 'ext://sys.stderr'
        }
    },
    'loggers': {
        'gifserver': {
            'level': 'DEBUG',
            'handlers': ['console'],
            'propagate': False
        }
    },
    'root': {
        'level': 'WARNING',
        'handlers': ['console']
    }
}


class ColoredFormatter(logging.Formatter):
    """Custom formatter to add colors to console output"""

    COLORS = {
        'DEBUG': Fore.CYAN,
        'INFO': Fore.GREEN,
        'WARNING': Fore.YELLOW,
        'ERROR': Fore.RED,
        'CRITICAL': Fore.MAGENTA + Style.BRIGHT,
    }

    def format(self, record):
        # Color a copy so other handlers see the plain level name
        record = copy.copy(record)
        if record.levelname in self.COLORS:
            record.levelname = f"{self.COLORS[record.levelname]}{record.levelname}{Style.RESET_ALL}"
        return super().format(record)


def setup_logging(logging_config: Optional[Dict[str, Any]] = None, log_level: Optional[str] = None,
                  log_file: Optional[str] = None, colored: bool = True) -> logging.Logger:
    """
    Setup logging from a dictConfig mapping

    Args:
        logging_config: dictConfig mapping, typically the 'logging' section of logging.yaml
        log_level: Override console/package level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional path of a DEBUG-level log file
        colored: Color console level names
    """
    config = copy.deepcopy(logging_config or DEFAULT_LOGGING_CONFIG)

    if log_level:
        log_level = log_level.upper()
        if 'console' in config.get('handlers', {}):
            config['handlers']['console']['level'] = log_level

    if log_file:
        config.setdefault('formatters', {})['detailed'] = {
            'format': '[%(asctime)s] %(levelname)s [%(name)s.%(funcName)s:%(lineno)d] %(message)s',
            'datefmt': '%Y-%m-%d %H:%M:%S'
        }
        config.setdefault('handlers', {})['file'] = {
            'class': 'logging.FileHandler',
            'level': 'DEBUG',
            'formatter': 'detailed',
            'filename': log_file,
            'mode': 'a',
            'encoding': 'utf-8'
        }
        package_logger = config.setdefault('loggers', {}).setdefault('gifserver', {'level': 'DEBUG', 'handlers': []})
        package_logger.setdefault('handlers', []).append('file')

    try:
        logging.config.dictConfig(config)
    except (ValueError, TypeError, AttributeError, ImportError) as config_error:
        # If dictConfig fails, fall back to basic configuration
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s | %(levelname)-8s | %(message)s',
            datefmt='%H:%M:%S'
        )
        logger = get_logger()
        logger.error(f"Failed to apply logging configuration: {config_error}")
        logger.info("Using basic logging configuration as fallback")
        return logger

    logger = get_logger()

    if colored:
        console_format = config.get('formatters', {}).get('console', {})
        for handler in logger.handlers + logging.getLogger().handlers:
            if type(handler) is logging.StreamHandler:
                handler.setFormatter(ColoredFormatter(
                    fmt=console_format.get('format', '%(asctime)s | %(levelname)-8s | %(message)s'),
                    datefmt=console_format.get('datefmt', '%H:%M:%S')
                ))

    logger.debug("Logging initialized")
    return logger


def get_logger(name: str = None) -> logging.Logger:
    """Get a logger instance"""
    if name:
        return logging.getLogger(f'gifserver.{name}')
    return logging.getLogger('gifserver')
