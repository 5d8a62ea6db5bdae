"""
Exceptions raised by spatialcorr.

Every error is raised at the first violation; no partial statistic is
returned.
"""

from spatialcorr.schemata import ValidationError


class SpatialCorrError(Exception):
    """Base class of all spatialcorr errors."""


class InvalidGeometryError(SpatialCorrError, ValidationError):
    """A region geometry is missing, empty, not polygonal, or invalid."""


class InsufficientRegionsError(SpatialCorrError, ValidationError):
    """Fewer than two regions were supplied."""


class MisalignedInputError(SpatialCorrError, ValidationError):
    """Attribute values and regions do not line up one to one."""


class DegenerateAttributeError(SpatialCorrError):
    """
    Moran's I is undefined: the attribute has zero variance, or the weights
    contain no neighbor pairs at all (S0 == 0).
    """


class RandomSourceError(SpatialCorrError):
    """The random source could not be created or could not produce draws."""
