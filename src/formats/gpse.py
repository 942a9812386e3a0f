"""
GPSe track-log reader.

Observed layout (no published format documentation):
    - Shift_JIS text, CR line endings
    - 5 header lines: 'GPSe', 'Track', two numbers, number of points
    - one point per line from line 6:
        seg_no, lat, lon, ele, ext0, time, 'Track', comment, ext1, ext2
      lat/lon are decimal degrees in the Tokyo datum, time is JST.

The seg_no column is ignored: every point goes into one track with one segment.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Union

from pydantic import ValidationError

from engine.models import Segment, Track, TrackPoint
from formats.gpx import build_gpx, write_gpx
from shared.config import settings
from shared.constants import (
    GPSE_ENCODING,
    GPSE_HEADER_LINES,
    GPSE_NEWLINE,
    GPSE_TRACK_NAME,
    GPSE_UTC_OFFSET_H,
)
from shared.errors import GpseFormatError

logger = logging.getLogger("GPSe")

JST = timezone(timedelta(hours=GPSE_UTC_OFFSET_H))

_TIME_FORMATS = (
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
)


def parse_gpse_time(text: str) -> str:
    """GPSe local time -> ISO-8601 with the JST offset."""
    text = text.strip()
    for fmt in _TIME_FORMATS:
        try:
            return datetime.strptime(text, fmt).replace(tzinfo=JST).isoformat()
        except ValueError:
            continue
    raise GpseFormatError(f"unrecognized time: {text!r}")


def parse_gpse_line(line: str, lineno: int = 0) -> TrackPoint:
    items = [item.strip() for item in line.split(",")]
    if len(items) < 6:
        raise GpseFormatError(f"line {lineno}: expected at least 6 fields, got {len(items)}")

    lat, lon, ele, dt = items[1], items[2], items[3], items[5]
    try:
        return TrackPoint(
            lat=float(lat),
            lon=float(lon),
            elevation=ele or None,
            time=parse_gpse_time(dt) if dt else None,
        )
    except GpseFormatError as e:
        raise GpseFormatError(f"line {lineno}: {e}") from e
    except (ValueError, ValidationError) as e:
        raise GpseFormatError(f"line {lineno}: invalid point {line!r}: {e}") from e


def parse_gpse(data: Union[bytes, str]) -> List[TrackPoint]:
    try:
        text = data.decode(GPSE_ENCODING) if isinstance(data, bytes) else data
    except UnicodeDecodeError as e:
        raise GpseFormatError(f"not {GPSE_ENCODING} text: {e}") from e
    lines = [line.strip("\n") for line in text.split(GPSE_NEWLINE)]

    header = lines[:GPSE_HEADER_LINES]
    if len(header) < GPSE_HEADER_LINES or header[0].lstrip("\ufeff").strip() != "GPSe":
        raise GpseFormatError("missing GPSe header")

    points = []
    for lineno, line in enumerate(lines[GPSE_HEADER_LINES:], start=GPSE_HEADER_LINES + 1):
        if not line.strip():
            continue
        points.append(parse_gpse_line(line, lineno))

    declared = header[GPSE_HEADER_LINES - 1].strip()
    if declared.isdigit() and int(declared) != len(points):
        logger.warning(f"header declares {declared} points, read {len(points)}")
    return points


def gpse_to_gpx(data: Union[bytes, str], creator: Optional[str] = None) -> str:
    points = parse_gpse(data)
    track = Track(name=GPSE_TRACK_NAME, segments=[Segment(points=points)])
    return write_gpx(build_gpx([track], creator or settings.GPX_CREATOR))
