"""structlog configuration."""

import logging

import structlog

from juris.config import settings


def configure_logging(level: str | None = None, json_output: bool | None = None) -> None:
    """Configure structlog for the process.

    Args:
        level: Log level name, defaults to ``settings.log_level``
        json_output: Render JSON lines, defaults to ``settings.log_json``
            (always JSON in production)
    """
    level_name = (level or settings.log_level).upper()
    use_json = settings.log_json if json_output is None else json_output
    if settings.is_production:
        use_json = True

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            (
                structlog.processors.JSONRenderer()
                if use_json
                else structlog.dev.ConsoleRenderer()
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelNamesMapping().get(level_name, logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=settings.is_production,
    )
