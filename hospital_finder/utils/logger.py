import logging

import structlog
from structlog.stdlib import LoggerFactory

from hospital_finder.config.settings import get_settings


def configure_logging(level: str | None = None) -> None:
    settings = get_settings()
    log_level = logging.getLevelName((level or settings.log_level).upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.is_development:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        # One JSON object per line for log shippers
        processors.append(structlog.processors.JSONRenderer())

    logging.basicConfig(level=log_level, format="%(message)s")
    # SQL echo is handled by the engine; keep the driver chatter out of app logs
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.database_echo else logging.WARNING
    )

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = "hospital_finder"):
    return structlog.get_logger(name)
