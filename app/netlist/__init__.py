"""
SPICE netlist reading: numeric literals, error types and the parser.

The parser itself lives in netlist.spice_parser (it builds models, which in
turn depend on this package's value parser).
"""

from .errors import (
    InvalidPropertyToken,
    MissingNodeTokens,
    NetlistParseError,
    NumericFormatError,
    NumericRangeError,
    UnknownDeviceIdentifier,
    UnterminatedSubcircuit,
)
from .values import format_value, parse_value

__all__ = [
    "NetlistParseError",
    "NumericFormatError",
    "NumericRangeError",
    "UnknownDeviceIdentifier",
    "MissingNodeTokens",
    "InvalidPropertyToken",
    "UnterminatedSubcircuit",
    "parse_value",
    "format_value",
]
