"""
Measurement value objects.

A measurement is a magnitude plus one of a closed set of units
(pounds, millimeters, pieces, square feet).
"""

from decimal import Decimal

from pydantic import Field

from models.base import FrozenSchema


class UnitOfMeasure(FrozenSchema):
    """Canonical description of a supported unit."""

    name: str = Field(..., description="Plural name", examples=["square feet"])
    singular: str = Field(..., description="Singular name", examples=["square foot"])
    abbreviation: str = Field(..., description="Display abbreviation", examples=["sq ft"])


class Measurement(FrozenSchema):
    """
    Parsed measurement, e.g. "2.5 SF".

    Serializing with to_code_string() and parsing again yields an equal
    Measurement.
    """

    value: float = Field(..., ge=0, description="Numeric magnitude")
    unit_of_measure: UnitOfMeasure

    def to_code_string(self) -> str:
        """Render as "<value> <abbreviation>"."""
        return f"{_format_value(self.value)} {self.unit_of_measure.abbreviation}"


def _format_value(value: float) -> str:
    """Plain decimal digits, never exponent notation, precise enough to parse back."""
    if value.is_integer():
        return str(int(value))
    return format(Decimal(repr(value)), "f")


class Dimensions(FrozenSchema):
    """Tile face size split from a size cell such as "12x24"."""

    width: float = Field(..., gt=0)
    length: float = Field(..., gt=0)
