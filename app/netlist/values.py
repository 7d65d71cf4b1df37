"""
netlist/values.py

Parses SPICE numeric literals ("23.3n", "2.3e-9", "99.9pFarad") into floats
and formats floats back into engineering notation.
"""

import math

from .errors import NumericFormatError, NumericRangeError

_MANTISSA_CHARS = "0123456789.+-"
_EXPONENT_CHARS = "0123456789+-"

# (short form, long form, multiplier)
# Long forms are always tried first: short forms are prefixes of unit names.
MULTIPLIERS = [
    ("F", "FEMTO", 1e-15),
    ("P", "PICO", 1e-12),
    ("N", "NANO", 1e-9),
    ("U", "MICRO", 1e-6),
    ("M", "MILLI", 1e-3),
    ("K", "KILO", 1e3),
    ("MEG", "MEGA", 1e6),
    ("G", "GIGA", 1e9),
    ("T", "TERA", 1e12),
]

# Short forms ordered longest first so that "MEG" wins over "M"
_SHORT_MULTIPLIERS = sorted(
    ((short, mult) for short, _long, mult in MULTIPLIERS),
    key=lambda item: len(item[0]),
    reverse=True,
)

# (short form, long form); an empty form never matches
UNITS = [
    ("F", "FARAD"),
    ("OHM", ""),
    ("H", "HENRY"),
    ("A", "AMPERE"),
    ("V", "VOLT"),
]

# Engineering prefixes from 1e-24 to 1e24
_PREFIX_START = -24
ENGINEERING_PREFIXES = ["y", "z", "a", "f", "p", "n", "µ", "m", "", "k", "M", "G", "T", "P", "E", "Z", "Y"]
_PREFIX_END = _PREFIX_START + (len(ENGINEERING_PREFIXES) - 1) * 3


def _leading_run(text: str, allowed: str) -> int:
    """Return the length of the leading run of characters drawn from *allowed*."""
    length = 0
    while length < len(text) and text[length] in allowed:
        length += 1
    return length


def _match_multiplier(rest: str) -> tuple[float, str]:
    for _short, long_form, multiplier in MULTIPLIERS:
        if rest.startswith(long_form):
            return multiplier, rest[len(long_form):]
    for short_form, multiplier in _SHORT_MULTIPLIERS:
        if rest.startswith(short_form):
            return multiplier, rest[len(short_form):]
    return 1.0, rest


def _strip_unit(rest: str) -> str:
    for short_form, long_form in UNITS:
        if long_form and rest.startswith(long_form):
            return rest[len(long_form):]
        if short_form and rest.startswith(short_form):
            return rest[len(short_form):]
    return rest


def parse_value(text) -> float:
    """
    Parse a SPICE numeric literal into a float.

    The literal is a mantissa followed by either an exponent (``E-9``) or a
    multiplier suffix (``n``, ``MEG``, ``kilo``...), then an optional unit
    name (``F``, ``Ohm``, ``Henry``, ``A``, ``Volt``). Matching is
    case-insensitive. Examples: "23.3n" -> 2.33e-8, "99.9pFaraD" -> 9.99e-11,
    "10V" -> 10.0

    Raises:
        NumericFormatError: If there is no mantissa or characters remain
            after the unit.
        NumericRangeError: If the literal overflows a float.
    """
    if isinstance(text, (int, float)):
        return float(text)

    s = text.strip()
    length = _leading_run(s, _MANTISSA_CHARS)
    if length == 0:
        raise NumericFormatError(f"Invalid number format: {text!r}")

    mantissa_text = s[:length]
    try:
        mantissa = float(mantissa_text)
    except ValueError:
        raise NumericFormatError(f"Invalid number format: {text!r}") from None

    rest = s[length:].upper()

    if rest.startswith("E"):
        exp_length = _leading_run(rest[1:], _EXPONENT_CHARS)
        try:
            exponent = int(rest[1 : 1 + exp_length])
        except ValueError:
            raise NumericFormatError(f"Invalid exponent in {text!r}") from None
        # let float() compose the literal so "2.3e-9" is exact
        value = float(f"{mantissa_text}e{exponent}")
        rest = rest[1 + exp_length :]
    else:
        multiplier, rest = _match_multiplier(rest)
        value = mantissa * multiplier

    rest = _strip_unit(rest)
    if rest:
        raise NumericFormatError(f"Unexpected trailing characters {rest!r} in {text!r}")
    if not math.isfinite(value):
        raise NumericRangeError(f"Value out of range: {text!r}")

    return value


def try_parse_value(text):
    """Return the parsed value, or None if *text* is not a numeric literal.

    A literal that overflows still raises NumericRangeError.
    """
    try:
        return parse_value(text)
    except NumericRangeError:
        raise
    except NumericFormatError:
        return None


def format_value(value: float, digits: int = 3, unit: str = "", numeric: bool = False) -> str:
    """
    Format a float in engineering notation.

    The exponent is always a multiple of three and *digits* significant
    digits are printed. Examples: 0.015 -> "15.0 m", 4700 -> "4.70 k",
    format_value(1e-9, unit="F") -> "1.00 nF"

    Args:
        value: The number to format.
        digits: Significant digits (at least one is always printed).
        unit: Unit name appended after the prefix.
        numeric: Use "1.00e3" style instead of a prefix letter.
    """
    if value == 0:
        return f"0.0 {unit}" if unit else "0.0"
    if not math.isfinite(value):
        return f"{value} {unit}" if unit else str(value)

    sign = "-" if value < 0 else ""
    value = abs(value)

    exponent = int(math.log10(value))
    if exponent > 0:
        exponent = (exponent // 3) * 3
    else:
        exponent = (-exponent + 3) // 3 * (-3)

    value *= 10.0 ** (-exponent)

    if value >= 1000.0:
        value /= 1000.0
        exponent += 3
    elif value >= 100.0:
        digits -= 2
    elif value >= 10.0:
        digits -= 1

    digits = max(digits, 1)

    if numeric or exponent < _PREFIX_START or exponent > _PREFIX_END:
        return f"{sign}{value:.{digits - 1}f}e{exponent}{unit}"

    prefix = ENGINEERING_PREFIXES[(exponent - _PREFIX_START) // 3]
    return f"{sign}{value:.{digits - 1}f} {prefix}{unit}".rstrip()
