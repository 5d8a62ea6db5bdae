"""
Schemata to validate the inputs of the analysis.

A schema checks one property of an object and raises a
:class:`ValidationError` when it does not hold. Schemata can be combined with
``|``; the union succeeds as soon as one of its options succeeds:

>>> schema = DTypeSchema(np.integer) | DTypeSchema(np.floating)
>>> schema.validate(values)
"""

import abc
import operator
from functools import partial
from typing import Any, Sequence

import numpy as np
import shapely
from numpy.typing import DTypeLike

OPERATORS = {
    "<": operator.lt,
    "<=": operator.le,
    "==": operator.eq,
    "!=": operator.ne,
    ">=": operator.ge,
    ">": operator.gt,
}


def partial_operator(op, value):
    # partial doesn't allow us to insert the 1st arg on call, and
    # operators don't work with kwargs, so resort to lambda to swap
    # args a and b around.
    return partial(lambda b, a: OPERATORS[op](a, b), value)


class ValidationError(Exception):
    pass


class BaseSchema(abc.ABC):
    @abc.abstractmethod
    def validate(self, obj: Any, **kwargs) -> None:
        pass

    def __or__(self, other):
        return SchemaUnion(self, other)


class SchemaUnion:
    """
    Succesful validation only requires a single succes.
    """

    def __init__(self, *args):
        ntypes = len(set(type(arg) for arg in args))
        if ntypes > 1:
            raise TypeError("schemata in a union should have the same type")
        self.schemata = tuple(args)

    def validate(self, obj: Any, **kwargs) -> None:
        errors = []
        for schema in self.schemata:
            try:
                schema.validate(obj, **kwargs)
            except ValidationError as e:
                errors.append(e)

        if len(errors) == len(self.schemata):
            message = "\n\t" + "\n\t".join(str(error) for error in errors)
            raise ValidationError(f"No option succeeded:{message}")

    def __or__(self, other):
        return SchemaUnion(*self.schemata, other)


class DTypeSchema(BaseSchema):
    def __init__(self, dtype: DTypeLike) -> None:
        # Abstract scalar types such as np.number cannot become a np.dtype.
        if isinstance(dtype, type) and issubclass(dtype, np.generic):
            self.dtype = dtype
        else:
            self.dtype = np.dtype(dtype)

    def validate(self, obj: np.ndarray, **kwargs) -> None:
        if not np.issubdtype(obj.dtype, self.dtype):
            raise ValidationError(f"dtype {obj.dtype} != {self.dtype}")


class FiniteSchema(BaseSchema):
    """All values must be finite: no NaN, no infinity."""

    def validate(self, obj: np.ndarray, **kwargs) -> None:
        bad = np.flatnonzero(~np.isfinite(obj))
        if bad.size > 0:
            raise ValidationError(
                f"values must be finite, found non-finite values at positions "
                f"{bad[:10].tolist()}"
            )


class LengthSchema(BaseSchema):
    """
    Compare the length of a sequence against a value, e.g.
    ``LengthSchema(">=", 2)``.
    """

    def __init__(
        self,
        operator: str,
        other: int,
        error: type[ValidationError] = ValidationError,
        name: str = "length",
    ) -> None:
        if operator not in OPERATORS:
            raise ValueError(
                f"Unknown operator: {operator}, should be one of: "
                f"{', '.join(OPERATORS)}"
            )
        self.operator_str = operator
        self.operator = partial_operator(operator, other)
        self.other = other
        self.error = error
        self.name = name

    def validate(self, obj: Sequence, **kwargs) -> None:
        n = len(obj)
        if not self.operator(n):
            raise self.error(
                f"{self.name} {n} does not satisfy {self.operator_str} {self.other}"
            )


class GeometryTypeSchema(BaseSchema):
    """Every geometry must be one of the given shapely geometry types."""

    def __init__(self, *geom_types: str, error: type[ValidationError] = ValidationError):
        self.geom_types = geom_types
        self.error = error

    def validate(self, obj: np.ndarray, **kwargs) -> None:
        for i, geometry in enumerate(obj):
            if geometry is None:
                raise self.error(f"region {i}: geometry is missing")
            if not isinstance(geometry, shapely.Geometry):
                raise self.error(
                    f"region {i}: expected a shapely geometry, got "
                    f"{type(geometry).__name__}"
                )
            if geometry.geom_type not in self.geom_types:
                raise self.error(
                    f"region {i}: geometry type {geometry.geom_type} is not one of "
                    f"{', '.join(self.geom_types)}"
                )


class ValidGeometrySchema(BaseSchema):
    """Geometries must be non-empty and valid, e.g. no self-intersections."""

    def __init__(self, error: type[ValidationError] = ValidationError):
        self.error = error

    def validate(self, obj: np.ndarray, **kwargs) -> None:
        empty = np.flatnonzero(shapely.is_empty(obj))
        if empty.size > 0:
            raise self.error(f"region {empty[0]}: geometry is empty")
        invalid = np.flatnonzero(~shapely.is_valid(obj))
        if invalid.size > 0:
            i = invalid[0]
            reason = shapely.is_valid_reason(obj[i])
            raise self.error(f"region {i}: invalid geometry ({reason})")
