"""
Logger backends: the standard library, loguru, and a logger that discards
everything.
"""

import logging
import sys

from loguru import logger as loguru_logger

from spatialcorr.logging.ilogger import ILogger
from spatialcorr.logging.loglevel import LogLevel

LOGFILE = "spatialcorr.log"
LOGFORMAT = "%(name)s: %(asctime)s | %(levelname)s | %(filename)s:%(lineno)s | %(process)d >>> %(message)s"

# Frames between the caller of ``spatialcorr.logging.logger`` and the backend
# call: the holder and the backend method itself.
_PYTHON_STACKLEVEL = 3
_LOGURU_DEPTH = 2


class NullLogger(ILogger):
    """
    Discards all messages. Active until :func:`spatialcorr.logging.configure`
    is called.
    """

    def debug(self, message: str, additional_depth: int = 0) -> None:
        pass

    def info(self, message: str, additional_depth: int = 0) -> None:
        pass

    def warning(self, message: str, additional_depth: int = 0) -> None:
        pass

    def error(self, message: str, additional_depth: int = 0) -> None:
        pass

    def critical(self, message: str, additional_depth: int = 0) -> None:
        pass


class PythonLogger(ILogger):
    """
    Logs through the standard library ``logging`` module, using the
    ``"spatialcorr"`` logger.
    """

    def __init__(
        self,
        log_level: LogLevel,
        add_default_stream_handler: bool,
        add_default_file_handler: bool,
    ) -> None:
        self.logger = logging.getLogger("spatialcorr")
        self.logger.setLevel(log_level.value)

        if add_default_stream_handler:
            self._add_handler(logging.StreamHandler(stream=sys.stdout))
        if add_default_file_handler:
            self._add_handler(logging.FileHandler(LOGFILE))

    def _add_handler(self, handler: logging.Handler) -> None:
        handler.setFormatter(logging.Formatter(LOGFORMAT))
        self.logger.addHandler(handler)

    def debug(self, message: str, additional_depth: int = 0) -> None:
        self.logger.debug(message, stacklevel=_PYTHON_STACKLEVEL + additional_depth)

    def info(self, message: str, additional_depth: int = 0) -> None:
        self.logger.info(message, stacklevel=_PYTHON_STACKLEVEL + additional_depth)

    def warning(self, message: str, additional_depth: int = 0) -> None:
        self.logger.warning(message, stacklevel=_PYTHON_STACKLEVEL + additional_depth)

    def error(self, message: str, additional_depth: int = 0) -> None:
        self.logger.error(message, stacklevel=_PYTHON_STACKLEVEL + additional_depth)

    def critical(self, message: str, additional_depth: int = 0) -> None:
        self.logger.critical(message, stacklevel=_PYTHON_STACKLEVEL + additional_depth)


class LoguruLogger(ILogger):
    """
    Logs through loguru. Configuring this backend removes loguru's default
    stderr sink.
    """

    def __init__(
        self,
        log_level: LogLevel,
        add_default_stream_handler: bool,
        add_default_file_handler: bool,
    ) -> None:
        loguru_logger.remove()

        if add_default_stream_handler:
            loguru_logger.add(sys.stdout, level=log_level.value)
        if add_default_file_handler:
            loguru_logger.add(LOGFILE, level=log_level.value)

    def _opt(self, additional_depth: int):
        return loguru_logger.opt(depth=_LOGURU_DEPTH + additional_depth)

    def debug(self, message: str, additional_depth: int = 0) -> None:
        self._opt(additional_depth).debug(message)

    def info(self, message: str, additional_depth: int = 0) -> None:
        self._opt(additional_depth).info(message)

    def warning(self, message: str, additional_depth: int = 0) -> None:
        self._opt(additional_depth).warning(message)

    def error(self, message: str, additional_depth: int = 0) -> None:
        self._opt(additional_depth).error(message)

    def critical(self, message: str, additional_depth: int = 0) -> None:
        self._opt(additional_depth).critical(message)
