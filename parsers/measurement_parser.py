"""
Measurement parsing for catalog spreadsheets.

Vendor price lists describe cartons with strings such as "16 PCS",
"2.5 SF" or "42 lbs". This module splits those into a magnitude and one
of a closed set of units. Adding a unit means editing UNIT_CODES.
"""

import re

import structlog

from exceptions import MeasurementError, MeasurementErrorReason
from models.measurement import Dimensions, Measurement, UnitOfMeasure

logger = structlog.get_logger(__name__)


POUNDS = UnitOfMeasure(name="pounds", singular="pound", abbreviation="lbs")
MILLIMETERS = UnitOfMeasure(name="millimeters", singular="millimeter", abbreviation="mm")
PIECES = UnitOfMeasure(name="pieces", singular="piece", abbreviation="pc")
SQUARE_FEET = UnitOfMeasure(name="square feet", singular="square foot", abbreviation="sq ft")

# Codes are matched exactly; "lbs" and "LBS" are both listed, "sf" is not.
UNIT_CODES: dict[str, UnitOfMeasure] = {
    "lbs": POUNDS,
    "LBS": POUNDS,
    "mm": MILLIMETERS,
    "PC": PIECES,
    "PCS": PIECES,
    "SF": SQUARE_FEET,
}

# Display abbreviations are accepted too so rendered values parse back.
UNIT_ABBREVIATIONS: dict[str, UnitOfMeasure] = {
    unit.abbreviation: unit for unit in (POUNDS, MILLIMETERS, PIECES, SQUARE_FEET)
}

_VALUE_PATTERN = re.compile(r"\d+(?:\.\d+)?|\.\d+")
_UNIT_PATTERN = re.compile(r"[A-Za-z]+")
_SIZE_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)x(\d+(?:\.\d+)?)$", re.IGNORECASE)


def parse_measurement(raw: str) -> Measurement:
    """
    Parse a measurement string such as "2.5 SF" or "16PCS".

    The first number in the string is the value and the first run of
    letters is the unit code.

    Args:
        raw: Cell text

    Returns:
        Measurement

    Raises:
        MeasurementError: NO_NUMERIC_VALUE, NO_UNIT_CODE or UNKNOWN_UNIT
    """
    text = raw or ""

    value_match = _VALUE_PATTERN.search(text)
    if value_match is None:
        raise MeasurementError(MeasurementErrorReason.NO_NUMERIC_VALUE, raw=text)

    unit_match = _UNIT_PATTERN.search(text)
    if unit_match is None:
        raise MeasurementError(MeasurementErrorReason.NO_UNIT_CODE, raw=text)

    code = unit_match.group(0)
    unit = UNIT_CODES.get(code)

    if unit is None:
        # Multi-word abbreviation such as "sq ft" following the number
        trailing = text[value_match.end():].strip()
        unit = UNIT_ABBREVIATIONS.get(trailing)

    if unit is None:
        logger.debug("unknown_unit_of_measure", raw=text, unit_code=code)
        raise MeasurementError(MeasurementErrorReason.UNKNOWN_UNIT, raw=text, unit_code=code)

    return Measurement(value=float(value_match.group(0)), unit_of_measure=unit)


def split_size_cell(cell: str) -> Dimensions:
    """
    Split a tile size cell such as "12x24" or "12X24 in" into width and length.

    Only the first whitespace-separated token is read.

    Raises:
        ValueError: If the cell does not start with "<width>x<length>"
    """
    tokens = (cell or "").split()
    match = _SIZE_PATTERN.match(tokens[0]) if tokens else None
    if match is None:
        raise ValueError(f"Unable to parse size: {cell!r}")
    return Dimensions(width=float(match.group(1)), length=float(match.group(2)))


def calculate_price_per_carton(
    list_price: float,
    factory_discount: float,
    margin: float,
    factor: float,
    measurement_value: float,
) -> float:
    """
    Selling price for one carton.

    cost = list_price * (1 - factory_discount)
    price = cost / (1 - margin) * factor * measurement_value

    Rounded to cents.
    """
    if margin >= 1:
        raise ValueError("margin must be below 1")
    cost = list_price * (1 - factory_discount)
    price = (cost / (1 - margin)) * factor * measurement_value
    return round(price, 2)
