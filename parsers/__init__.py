"""
Upload and cell parsers.
"""

from parsers.tabular_parser import parse_tabular_file
from parsers.measurement_parser import (
    parse_measurement,
    split_size_cell,
    calculate_price_per_carton,
)

__all__ = [
    "parse_tabular_file",
    "parse_measurement",
    "split_size_cell",
    "calculate_price_per_carton",
]
