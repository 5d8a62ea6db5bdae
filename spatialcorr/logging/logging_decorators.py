from functools import wraps
from time import perf_counter
from typing import Callable, ParamSpec, TypeVar

from spatialcorr.logging.loglevel import LogLevel

T = TypeVar("T")
P = ParamSpec("P")


def standard_log_decorator(
    start_level: LogLevel = LogLevel.INFO, end_level: LogLevel = LogLevel.DEBUG
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """
    Log the start of the decorated analysis step, and its end together with
    the elapsed wall time.
    """

    def decorator(fun: Callable[P, T]) -> Callable[P, T]:
        @wraps(fun)
        def wrapper(*args: P.args, **kwargs: P.kwargs):
            from spatialcorr.logging import logger

            step = f"{fun.__module__}.{fun.__qualname__}"
            logger.log(start_level, f"Starting {step}...", additional_depth=2)

            start_time = perf_counter()
            return_value = fun(*args, **kwargs)
            elapsed = perf_counter() - start_time

            logger.log(
                end_level, f"Finished {step} in {elapsed:.3f} seconds", additional_depth=2
            )
            return return_value

        return wrapper

    return decorator
