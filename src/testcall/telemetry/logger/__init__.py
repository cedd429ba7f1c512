from testcall.telemetry.logger.base import BASE_LOGGER_NAME, StructLogger, get_logger, setup_logging

__all__ = ["BASE_LOGGER_NAME", "StructLogger", "get_logger", "setup_logging"]
