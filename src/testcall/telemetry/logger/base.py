# src/testcall/telemetry/logger/base.py

"""
Logging for testcall.

testcall runs inside other projects' test sessions, so it never touches
structlog's global configuration. Its loggers carry their own processor
chain and hand plain records to the stdlib `testcall` logger hierarchy.
"""

import logging
import sys

import structlog
from structlog.typing import Processor

from testcall.telemetry.logger.processors import (
    add_emoji_processor,
    remove_extra_keys_processor,
)

BASE_LOGGER_NAME = "testcall"

StructLogger = structlog.stdlib.BoundLogger

# Runs when testcall emits an event. Key/value pairs travel as record extras.
LOGGER_PROCESSORS: list[Processor] = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.render_to_log_kwargs,
]

# Runs when one of testcall's handlers formats a record.
FORMATTER_PRE_CHAIN: list[Processor] = [
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.ExtraAdder(),
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    add_emoji_processor,
    remove_extra_keys_processor,
]


def get_logger(name: str) -> StructLogger:
    """Returns a structlog logger for `name` independent of structlog.configure()."""
    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=LOGGER_PROCESSORS,
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def _formatter(json_logs: bool) -> structlog.stdlib.ProcessorFormatter:
    if json_logs:
        renderers: list[Processor] = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(sort_keys=True),
        ]
    else:
        renderers = [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]
    return structlog.stdlib.ProcessorFormatter(
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *renderers],
        foreign_pre_chain=FORMATTER_PRE_CHAIN,
    )


def setup_logging(
    level: int = logging.WARNING,
    json_logs: bool = False,
    log_file: str | None = None,
    console: bool = True,
) -> None:
    """
    Configures handlers and the level of the `testcall` logger.

    With `console=True` the root logger gets a single console handler, for
    standalone scripts. With `console=False` the root handlers are left to
    the host test runner, whose log capture keeps receiving the records.
    """
    log_level_name = logging.getLevelName(level)

    package_logger = logging.getLogger(BASE_LOGGER_NAME)
    package_logger.setLevel(level)
    for handler in list(package_logger.handlers):
        handler.close()
        package_logger.removeHandler(handler)

    slog = get_logger(BASE_LOGGER_NAME)

    if console:
        root_logger = logging.getLogger()
        for handler in list(root_logger.handlers):
            handler.close()
            root_logger.removeHandler(handler)
        root_logger.setLevel(level)
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(_formatter(json_logs))
        root_logger.addHandler(console_handler)
        slog.debug("Standard StreamHandler added for console output.")

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
        except OSError as e:
            slog.error("Failed to setup file logging", log_file=log_file, error=str(e))
            raise
        file_handler.setFormatter(_formatter(json_logs=True))
        file_handler.setLevel(level)
        package_logger.addHandler(file_handler)
        slog.info("File logging enabled", log_file=log_file)

    slog.debug(
        "testcall logging initialization complete",
        log_level=log_level_name,
        json_console_format=json_logs,
        console_output_enabled=console,
        log_file=log_file or "None",
    )

# 🔼⚙️
