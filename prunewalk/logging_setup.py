import logging
import sys
import structlog

from prunewalk import __version__

def _add_app_version(logger, method_name, event_dict):
    # every record names the prunewalk release that produced it.
    event_dict.setdefault("prunewalk_version", __version__)
    return event_dict

def configure_logging(log_level_str: str = "warning", force_json_logs: bool = False):
    # configures structlog for console-friendly (or json) structured logging on the "prunewalk" logger.
    log_level = getattr(logging, log_level_str.upper(), logging.WARNING)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        _add_app_version,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if force_json_logs
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )
    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        # records from plain stdlib loggers under "prunewalk" get the same fields.
        foreign_pre_chain=[structlog.stdlib.add_log_level, _add_app_version],
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    app_logger = logging.getLogger("prunewalk")
    app_logger.handlers.clear()
    app_logger.addHandler(handler)
    app_logger.setLevel(log_level)

    structlog.get_logger(__name__).info("logging_configured", level=log_level_str, json=force_json_logs)
