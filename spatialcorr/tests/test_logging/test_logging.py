import logging
from unittest.mock import patch

import pytest

import spatialcorr
import spatialcorr.logging
from spatialcorr.logging import LoggerType, LogLevel
from spatialcorr.logging.backends import LoguruLogger, NullLogger, PythonLogger
from spatialcorr.logging.logging_decorators import standard_log_decorator


def test_logging_no_configuration():
    assert isinstance(spatialcorr.logging.logger.instance, NullLogger)


@pytest.mark.usefixtures("reset_logger")
@pytest.mark.parametrize(
    ("logger_type", "logger_class"),
    [
        (LoggerType.NULL, NullLogger),
        (LoggerType.PYTHON, PythonLogger),
        (LoggerType.LOGURU, LoguruLogger),
    ],
)
def test_logging_configure_logger(logger_type, logger_class):
    spatialcorr.logging.configure(logger_type, add_default_stream_handler=False)
    assert isinstance(spatialcorr.logging.logger.instance, logger_class)


@pytest.mark.usefixtures("reset_logger")
def test_logging_change_logger_during_runtime():
    def use_default(logger=spatialcorr.logging.logger):
        return logger.instance

    spatialcorr.logging.configure(LoggerType.PYTHON, add_default_stream_handler=False)
    assert isinstance(use_default(), PythonLogger)

    spatialcorr.logging.configure(LoggerType.LOGURU, add_default_stream_handler=False)
    assert isinstance(use_default(), LoguruLogger)


@pytest.mark.usefixtures("reset_logger")
@pytest.mark.parametrize(
    ("logger_type", "patched_logger"),
    [
        (LoggerType.PYTHON, "spatialcorr.logging.config.PythonLogger"),
        (LoggerType.LOGURU, "spatialcorr.logging.config.LoguruLogger"),
    ],
)
def test_logging_calls_forwarded_to_loggers(logger_type, patched_logger):
    with patch(patched_logger) as MockClass:
        spatialcorr.logging.configure(logger_type)
        logger = spatialcorr.logging.logger

        logger.debug("debug message")
        logger.info("info message")
        logger.warning("warning message")
        logger.error("error message")
        logger.critical("critical message")

        instance = MockClass.return_value
        instance.debug.assert_called_with("debug message", 0)
        instance.info.assert_called_with("info message", 0)
        instance.warning.assert_called_with("warning message", 0)
        instance.error.assert_called_with("error message", 0)
        instance.critical.assert_called_with("critical message", 0)


@pytest.mark.usefixtures("reset_logger")
@pytest.mark.parametrize("log_level", list(LogLevel))
@pytest.mark.parametrize("add_default_stream_handler", [True, False])
@pytest.mark.parametrize("add_default_file_handler", [True, False])
def test_logging_configure_param_forwarded(
    log_level, add_default_stream_handler, add_default_file_handler
):
    with patch("spatialcorr.logging.config.LoguruLogger") as MockClass:
        spatialcorr.logging.configure(
            LoggerType.LOGURU,
            log_level,
            add_default_stream_handler,
            add_default_file_handler,
        )
        MockClass.assert_called_with(
            log_level, add_default_stream_handler, add_default_file_handler
        )


@pytest.mark.parametrize("log_level", list(LogLevel))
def test_log_dispatches_on_level(log_level):
    with patch.object(NullLogger, log_level.name.lower()) as method:
        NullLogger().log(log_level, "message")
        method.assert_called_once_with("message", 0)


@pytest.mark.usefixtures("reset_logger")
def test_standard_log_decorator():
    @standard_log_decorator()
    def add(a, b):
        return a + b

    with patch("spatialcorr.logging.config.PythonLogger") as MockClass:
        spatialcorr.logging.configure(LoggerType.PYTHON)
        assert add(1, 2) == 3

        instance = MockClass.return_value
        start_message = instance.info.call_args.args[0]
        end_message = instance.debug.call_args.args[0]
        assert start_message.startswith("Starting")
        assert "add" in start_message
        assert end_message.startswith("Finished")
        assert "seconds" in end_message


@pytest.mark.usefixtures("reset_logger")
def test_isolates_logged_as_warning(grid_with_isolate):
    with patch("spatialcorr.logging.config.PythonLogger") as MockClass:
        spatialcorr.logging.configure(LoggerType.PYTHON)
        spatialcorr.build_neighbor_graph(grid_with_isolate)

        warning = MockClass.return_value.warning
        warning.assert_called_once()
        assert "[3]" in warning.call_args.args[0]


@pytest.mark.usefixtures("reset_logger")
def test_python_logger_records_analysis(caplog, permit_grid):
    spatialcorr.logging.configure(
        LoggerType.PYTHON, LogLevel.INFO, add_default_stream_handler=False
    )
    with caplog.at_level(logging.INFO, logger="spatialcorr"):
        spatialcorr.moran_analysis(permit_grid, "permits", permutations=99, seed=0)

    assert "contiguity graph" in caplog.text
    assert "pseudo p-value" in caplog.text
