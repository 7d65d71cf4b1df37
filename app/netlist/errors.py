"""
netlist/errors.py

Exceptions raised while turning SPICE netlist text into circuits.
"""

from typing import Optional


class NetlistParseError(ValueError):
    """Raised when a netlist cannot be parsed.

    Attributes:
        line_number: 1-based line in the source text where the offending
            logical line starts, or None when not tied to a line.
    """

    def __init__(self, message: str, line_number: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.line_number = line_number

    def __str__(self) -> str:
        if self.line_number is None:
            return self.message
        return f"line {self.line_number}: {self.message}"


class NumericFormatError(NetlistParseError):
    """A numeric literal has no mantissa or carries trailing garbage."""


class NumericRangeError(NumericFormatError):
    """A numeric literal is well formed but overflows a float."""


class UnknownDeviceIdentifier(NetlistParseError):
    """The first letter of a device line is not a registered device."""


class MissingNodeTokens(NetlistParseError):
    """A device line has fewer node names than the device requires."""


class InvalidPropertyToken(NetlistParseError):
    """A device rejected one of the tokens following its nodes."""


class UnterminatedSubcircuit(NetlistParseError):
    """A .SUBCKT statement has no matching .ENDS."""
