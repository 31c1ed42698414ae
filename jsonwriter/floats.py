"""Formatting of floating point numbers as JSON number text."""

from __future__ import annotations

import math
import struct
from decimal import Decimal

_LOSSY_SCALE = 1_000_000
_LOSSY_DIGITS = 6
_LOSSY_LIMIT = 0x4FFFFFF


def _to_float32(value: float) -> float:
    """Round a Python float to the nearest single precision value."""
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


_SMALL_64 = 1e-6
_LARGE_64 = 1e21
_SMALL_32 = _to_float32(1e-6)
_LARGE_32 = _to_float32(1e21)


def _describe(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    return "+Inf" if value > 0 else "-Inf"


def _check_finite(value: float) -> None:
    if not math.isfinite(value):
        raise ValueError(f"unsupported value: {_describe(value)}")


def _strip(digits: str, exponent: int) -> tuple[str, int]:
    stripped = digits.rstrip("0") or "0"
    if stripped == "0":
        return "0", 0
    return stripped, exponent + len(digits) - len(stripped)


def _shortest64(magnitude: float) -> tuple[str, int]:
    """Shortest decimal digits and exponent that round-trip as a double."""
    if magnitude == 0:
        return "0", 0
    _, digit_tuple, exponent = Decimal(repr(magnitude)).as_tuple()
    return _strip("".join(map(str, digit_tuple)), exponent)


def _shortest32(magnitude: float) -> tuple[str, int]:
    """Shortest decimal digits and exponent that round-trip as a single."""
    if magnitude == 0:
        return "0", 0
    text = f"{magnitude:.8e}"
    for precision in range(9):
        candidate = f"{magnitude:.{precision}e}"
        if _to_float32(float(candidate)) == magnitude:
            text = candidate
            break
    mantissa, exp_text = text.split("e")
    digits = mantissa.replace(".", "")
    return _strip(digits, int(exp_text) - (len(digits) - 1))


def _fixed(digits: str, exponent: int) -> str:
    if exponent >= 0:
        return digits + "0" * exponent
    point = len(digits) + exponent
    if point > 0:
        return f"{digits[:point]}.{digits[point:]}"
    return "0." + "0" * (-point) + digits


def _scientific(digits: str, exponent: int) -> str:
    power = len(digits) - 1 + exponent
    mantissa = digits[0] + (f".{digits[1:]}" if len(digits) > 1 else "")
    if power < 0:
        return f"{mantissa}e-{-power}"
    return f"{mantissa}e+{power:02d}"


def _format(value: float, single: bool) -> str:
    _check_finite(value)
    if single:
        value = _to_float32(value)
    sign = "-" if math.copysign(1.0, value) < 0 else ""
    magnitude = abs(value)
    small, large = (_SMALL_32, _LARGE_32) if single else (_SMALL_64, _LARGE_64)
    digits, exponent = _shortest32(magnitude) if single else _shortest64(magnitude)
    if magnitude != 0 and (magnitude < small or magnitude >= large):
        return sign + _scientific(digits, exponent)
    return sign + _fixed(digits, exponent)


def _format_lossy(value: float, single: bool) -> str:
    _check_finite(value)
    if single:
        value = _to_float32(value)
    sign = ""
    if value < 0:
        sign = "-"
        value = -value
    if value > _LOSSY_LIMIT:
        return sign + _format(value, single)
    scaled = int(value * _LOSSY_SCALE + 0.5)
    whole, fraction = divmod(scaled, _LOSSY_SCALE)
    if fraction == 0:
        return f"{sign}{whole}"
    return f"{sign}{whole}." + f"{fraction:0{_LOSSY_DIGITS}d}".rstrip("0")


def format_float32(value: float) -> str:
    """Format ``value`` as a single precision JSON number.

    Raises ValueError for NaN and infinities.
    """
    return _format(value, single=True)


def format_float64(value: float) -> str:
    """Format ``value`` as a double precision JSON number.

    Raises ValueError for NaN and infinities.
    """
    return _format(value, single=False)


def format_float32_lossy(value: float) -> str:
    """Format a single precision value with at most six fractional digits."""
    return _format_lossy(value, single=True)


def format_float64_lossy(value: float) -> str:
    """Format a double precision value with at most six fractional digits."""
    return _format_lossy(value, single=False)