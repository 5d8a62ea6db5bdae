from enum import Enum

import spatialcorr

from .backends import LoguruLogger, NullLogger, PythonLogger
from .loglevel import LogLevel


class LoggerType(Enum):
    """
    The available logging frameworks.
    """

    PYTHON = PythonLogger.__name__
    """
    The standard library logging framework.
    """
    LOGURU = LoguruLogger.__name__
    """
    The loguru logging framework.
    """
    NULL = NullLogger.__name__
    """
    Discard all messages.
    """


def configure(
    logger_type: LoggerType,
    log_level: LogLevel = LogLevel.WARNING,
    add_default_stream_handler: bool = True,
    add_default_file_handler: bool = False,
) -> None:
    """
    Select the logging framework used by spatialcorr and set its log level.

    Parameters
    ----------
    logger_type : LoggerType
        The logging framework to be used.
    log_level : LogLevel
        Messages below this level are dropped. WARNING by default.
    add_default_stream_handler : bool
        Write log output to stdout. True by default.
    add_default_file_handler : bool
        Write log output to ``spatialcorr.log`` in the working directory.
        False by default.
    """
    match logger_type:
        case LoggerType.PYTHON:
            spatialcorr.logging.logger.instance = PythonLogger(
                log_level, add_default_stream_handler, add_default_file_handler
            )
        case LoggerType.LOGURU:
            spatialcorr.logging.logger.instance = LoguruLogger(
                log_level, add_default_stream_handler, add_default_file_handler
            )
        case _:
            spatialcorr.logging.logger.instance = NullLogger()
