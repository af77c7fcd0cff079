"""structlog setup for cspkit.

Every record carries ``service`` and ``environment`` so that CSP events
(``csp_generated``, ``service_skipped``, ``insecure_nonce_fallback``) can be
told apart from uvicorn output in a shared log stream. Loggers under the
``cspkit`` namespace report their module without the package prefix.
"""

import logging
import sys

import structlog

SERVICE_NAME = "cspkit"
_PACKAGE_PREFIX = f"{SERVICE_NAME}."


def _module_from_logger(
    logger: logging.Logger, method_name: str, event_dict: dict
) -> dict:
    """Replace the 'logger' key with 'module', stripping the package prefix."""
    name = event_dict.pop("logger", None)
    if name is not None:
        event_dict["module"] = name.removeprefix(_PACKAGE_PREFIX)
    return event_dict


class _StaticFields:
    """Processor adding fields that are fixed for the life of the process."""

    def __init__(self, **fields: str) -> None:
        self._fields = fields

    def __call__(self, logger: logging.Logger, method_name: str, event_dict: dict) -> dict:
        for key, value in self._fields.items():
            event_dict.setdefault(key, value)
        return event_dict


def setup_logging(
    log_level: str = "info",
    json_format: bool = True,
    environment: str | None = None,
) -> None:
    """Configure structlog for JSON or human-readable output.

    ``log_level`` applies to the ``cspkit`` loggers; third-party loggers stay
    at WARNING unless the level asks for less.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    static = {"service": SERVICE_NAME}
    if environment:
        static["environment"] = environment

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _module_from_logger,
        _StaticFields(**static),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(max(level, logging.WARNING))

    logging.getLogger(SERVICE_NAME).setLevel(level)
    # Startup and shutdown lines from the server are still useful at INFO
    logging.getLogger("uvicorn.error").setLevel(level)
