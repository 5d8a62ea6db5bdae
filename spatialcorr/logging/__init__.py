"""
Logging support for spatialcorr.

Nothing is logged until a backend is configured:

>>> import spatialcorr
>>> from spatialcorr.logging import LoggerType, LogLevel
>>>
>>> spatialcorr.logging.configure(LoggerType.LOGURU, LogLevel.INFO)

To route the messages into an existing standard library setup, configure the
python backend without default handlers and attach handlers to the
``"spatialcorr"`` logger yourself:

>>> import logging
>>> spatialcorr.logging.configure(
>>>     LoggerType.PYTHON,
>>>     LogLevel.DEBUG,
>>>     add_default_stream_handler=False,
>>>     add_default_file_handler=False,
>>> )
>>> logging.getLogger("spatialcorr").addHandler(logging.StreamHandler())
"""

from spatialcorr.logging._loggerholder import _LoggerHolder
from spatialcorr.logging.config import LoggerType, configure
from spatialcorr.logging.ilogger import ILogger  # noqa: I001
from spatialcorr.logging.loglevel import LogLevel

logger = _LoggerHolder()
