"""
Logging Configuration - Shared Layer

Routes structlog events through the standard library so that third-party
loggers (uvicorn, httpx) share one handler chain. Development renders
coloured console output, staging and production render JSON.
"""

import logging
import os
import sys
from typing import Any, List, Optional, Union

import structlog
from structlog.types import Processor

from src.shared.consts import EnumEnvironment

_SHARED_PROCESSORS: List[Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
]


def _resolve_environment(
    environment: Union[str, EnumEnvironment, None],
) -> EnumEnvironment:
    if isinstance(environment, EnumEnvironment):
        return environment
    try:
        return EnumEnvironment((environment or "development").lower())
    except ValueError:
        return EnumEnvironment.DEVELOPMENT


def configure_logging(
    level: Optional[str] = None,
    file_path: Optional[str] = None,
    environment: Union[str, EnumEnvironment, None] = None,
) -> None:
    """
    Configure structlog and the root logger.

    Called once at import of the app module with values from ``LOG_LEVEL``
    and ``LOG_FILE_PATH``, then again once settings are loaded.

    Args:
        level: Log level name; falls back to ``LOG_LEVEL`` then INFO.
        file_path: Optional log file in addition to stdout.
        environment: Selects the renderer.
    """
    log_level = (level or os.environ.get("LOG_LEVEL") or "INFO").upper()
    log_file = file_path or os.environ.get("LOG_FILE_PATH")
    env = _resolve_environment(environment or os.environ.get("ENVIRONMENT"))

    renderer: Processor
    if env.renders_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=_SHARED_PROCESSORS,
    )

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.handlers = handlers
    root_logger.setLevel(getattr(logging, log_level, logging.INFO))

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    get_logger(__name__).debug(
        "logging.configured",
        level=log_level,
        environment=env.value,
        file_path=log_file,
    )


def update_logging_from_settings(settings: Any) -> None:
    """Reconfigure logging from the loaded application settings."""
    level = settings.logging.level
    configure_logging(
        level=level.value if hasattr(level, "value") else level,
        file_path=settings.logging.file_path,
        environment=settings.environment,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger configured for the project."""
    return structlog.get_logger(name)
