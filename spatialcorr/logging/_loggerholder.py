from spatialcorr.logging.backends import NullLogger
from spatialcorr.logging.ilogger import ILogger


class _LoggerHolder(ILogger):
    """
    Forwards every call to a swappable logger instance.

    Modules bind ``spatialcorr.logging.logger`` at import time, often as a
    default argument. Because that object is this holder rather than the
    backend itself, a later call to :func:`spatialcorr.logging.configure`
    still reaches code that imported the logger before configuration.
    """

    def __init__(self) -> None:
        self._instance: ILogger = NullLogger()

    @property
    def instance(self) -> ILogger:
        return self._instance

    @instance.setter
    def instance(self, value: ILogger) -> None:
        self._instance = value

    def debug(self, message: str, additional_depth: int = 0) -> None:
        self.instance.debug(message, additional_depth)

    def info(self, message: str, additional_depth: int = 0) -> None:
        self.instance.info(message, additional_depth)

    def warning(self, message: str, additional_depth: int = 0) -> None:
        self.instance.warning(message, additional_depth)

    def error(self, message: str, additional_depth: int = 0) -> None:
        self.instance.error(message, additional_depth)

    def critical(self, message: str, additional_depth: int = 0) -> None:
        self.instance.critical(message, additional_depth)
