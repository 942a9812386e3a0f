"""
Sexagesimal coordinate codec used by Web版 TKY2JGD.

The authority reads and writes coordinates as `DDDMMSS.sssss`: variable-width
degrees, two-digit minutes, two-digit seconds and five fractional-second digits,
without separators.

    encode(35.6883333)      -> "354117.99988"
    decode("354122.12345")  -> 35.68947874

All arithmetic is done in Decimal, starting from the shortest repr of the
float, so the text never picks up binary floating point noise.
"""

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Tuple, Union

from shared.constants import DEGREE_PLACES, DMS_SECONDS_PLACES
from shared.errors import FormatError

Number = Union[float, int, str, Decimal]

_SECONDS_QUANTUM = Decimal(1).scaleb(-DMS_SECONDS_PLACES)
_DEGREE_QUANTUM = Decimal(1).scaleb(-DEGREE_PLACES)

# sign, DDDMMSS (at least MMSS), fractional seconds
_DMS_PATTERN = re.compile(r"^(-?)(\d{4,})\.(\d+)$")


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, bool):
        raise FormatError(f"not a coordinate: {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        text = repr(value) if isinstance(value, float) else str(value).strip()
        try:
            result = Decimal(text)
        except InvalidOperation:
            raise FormatError(f"not a decimal coordinate: {value!r}") from None
    if not result.is_finite():
        raise FormatError(f"not a finite coordinate: {value!r}")
    return result


def split_dms(value: Number) -> Tuple[bool, int, int, Decimal]:
    """
    Split decimal degrees into (negative, degrees, minutes, seconds).
    Seconds are rounded half away from zero to 5 places; a carry to 60
    propagates into minutes and degrees.
    """
    dec = _to_decimal(value)
    negative = dec < 0
    dec = abs(dec)

    degrees = int(dec)
    minutes_total = (dec - degrees) * 60
    minutes = int(minutes_total)
    seconds = ((minutes_total - minutes) * 60).quantize(_SECONDS_QUANTUM, rounding=ROUND_HALF_UP)

    if seconds >= 60:
        seconds -= 60
        minutes += 1
    if minutes >= 60:
        minutes -= 60
        degrees += 1

    return negative, degrees, minutes, seconds


def encode(decimal_degrees: Number) -> str:
    """Decimal degrees -> `DDDMMSS.sssss` text (degrees are not zero-padded)."""
    negative, degrees, minutes, seconds = split_dms(decimal_degrees)
    sign = "-" if negative else ""
    return f"{sign}{degrees}{minutes:02d}{seconds:08.{DMS_SECONDS_PLACES}f}"


def decode(text: str) -> float:
    """`DDDMMSS.sssss` text -> decimal degrees rounded to 8 places."""
    if not isinstance(text, str):
        raise FormatError(f"sexagesimal text expected, got {type(text).__name__}")

    match = _DMS_PATTERN.match(text.strip())
    if match is None:
        raise FormatError(f"malformed sexagesimal coordinate: {text!r}")

    sign, int_part, frac_part = match.groups()
    degrees = int(int_part[:-4] or 0)
    minutes = int(int_part[-4:-2])
    seconds = Decimal(f"{int_part[-2:]}.{frac_part}")

    if minutes >= 60 or seconds >= 60:
        raise FormatError(f"minutes/seconds out of range in {text!r}")

    value = degrees + Decimal(minutes) / 60 + seconds / 3600
    value = value.quantize(_DEGREE_QUANTUM, rounding=ROUND_HALF_UP)
    return float(-value if sign else value)


def format_degrees(value: Number) -> str:
    """Render decimal degrees with 8 fixed decimals (GPX lat/lon attributes)."""
    return format(_to_decimal(value).quantize(_DEGREE_QUANTUM, rounding=ROUND_HALF_UP), "f")
