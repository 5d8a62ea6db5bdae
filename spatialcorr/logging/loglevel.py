from enum import Enum


class LogLevel(Enum):
    """
    Severity levels understood by every spatialcorr logger backend.

    The values match the numeric levels of the standard library ``logging``
    module, so they can be passed to both ``logging`` and ``loguru``.
    """

    DEBUG = 10
    """
    Detailed progress of the analysis: chunk scheduling, kernel timings.
    """
    INFO = 20
    """
    Milestones of the analysis: graph built, statistic computed, p-value.
    """
    WARNING = 30
    """
    The analysis continues, but the result deserves attention, e.g. isolated
    regions without neighbors.
    """
    ERROR = 40
    """
    A step of the analysis failed.
    """
    CRITICAL = 50
    """
    The analysis cannot be carried out at all.
    """
