"""
Logging utilities for the frontend edge

Configures stdlib logging handlers and the structlog processor chain.
"""

import os
import copy
import logging
import logging.config
from typing import Optional, Dict, Any

import structlog
import yaml

# Default logging configuration
DEFAULT_LOGGING_CONFIG: Dict[str, Any] = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'default': {
            'format': '%(message)s',
        },
        'detailed': {
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(module)s - %(lineno)d - %(message)s',
            'datefmt': '%Y-%m-%d %H:%M:%S'
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'level': 'INFO',
            'formatter': 'default',
            'stream': 'ext://sys.stdout'
        }
    },
    'loggers': {
        '': {
            'level': 'INFO',
            'handlers': ['console'],
        },
        'uvicorn.access': {
            'level': 'WARNING',
            'handlers': ['console'],
            'propagate': False
        },
    }
}


def load_logging_config(config_path: Optional[str]) -> Dict[str, Any]:
    """
    Load a dictConfig mapping

    Args:
        config_path: Path to a YAML logging configuration file

    Returns:
        The loaded configuration, or a copy of the default one
    """
    if config_path and os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                config = yaml.safe_load(f)
            if isinstance(config, dict):
                return config
            logging.getLogger(__name__).warning(
                "Ignoring logging config %s: not a mapping", config_path
            )
        except (OSError, yaml.YAMLError) as e:
            logging.getLogger(__name__).warning(
                "Failed to load logging config from %s: %s", config_path, e
            )
    return copy.deepcopy(DEFAULT_LOGGING_CONFIG)


def setup_logging(
    config_path: Optional[str] = None,
    log_level: Optional[str] = None,
    log_format: str = 'json'
) -> None:
    """
    Setup stdlib logging and structlog

    Args:
        config_path: Path to logging configuration file
        log_level: Override log level
        log_format: 'json' for machine-readable output, 'console' for development
    """
    config = load_logging_config(config_path)

    # Override log level if specified
    if log_level:
        log_level = log_level.upper()
        root_config = config.get('loggers', {}).get('')
        if root_config is not None:
            root_config['level'] = log_level
        for handler_config in config.get('handlers', {}).values():
            handler_config['level'] = log_level

    logging.config.dictConfig(config)

    if log_format == 'console':
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
