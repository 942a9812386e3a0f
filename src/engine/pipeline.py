"""
Tokyo datum -> JGD2000 pipeline.

For every segment of every track: batch the (lat, lon) pairs, hand them to
one CoordinateBatchConverter (pyproj or Web版 TKY2JGD), and write the
converted pairs back positionally. Elevation and time pass through.
"""

import logging
import time
from typing import List, Optional, Protocol, Sequence, Tuple, Union

from engine.models import Track
from engine.transform import LocalTransformConverter
from formats.gpx import parse_gpx, write_gpx
from gsi.tky2jgd_client import Tky2JgdClient
from shared.config import Settings, settings as default_settings
from shared.errors import LengthMismatchError

logger = logging.getLogger("Pipeline")

LatLon = Tuple[float, float]


class CoordinateBatchConverter(Protocol):
    name: str

    async def convert(self, points: Sequence[LatLon]) -> List[LatLon]:
        ...


def build_converter(kind: Optional[str] = None, settings: Optional[Settings] = None) -> CoordinateBatchConverter:
    """Select the converter implementation: "local" (pyproj) or "tky2jgd" (web)."""
    settings = settings or default_settings
    kind = kind or settings.DEFAULT_CONVERTER
    if kind == "local":
        return LocalTransformConverter()
    if kind == "tky2jgd":
        return Tky2JgdClient(
            base_url=settings.TKY2JGD_BASE_URL,
            timeout_s=settings.TKY2JGD_TIMEOUT_S,
            result_encoding=settings.TKY2JGD_RESULT_ENCODING,
        )
    raise ValueError(f"unknown converter: {kind!r} (expected 'local' or 'tky2jgd')")


async def convert_tracks(tracks: List[Track], converter: CoordinateBatchConverter) -> int:
    """Convert all track points in place. Returns the number of converted points."""
    converted = 0
    for t_idx, track in enumerate(tracks):
        for s_idx, segment in enumerate(track.segments):
            latlons = segment.latlons()
            if not latlons:
                continue

            logger.info(f"track {t_idx} segment {s_idx}: {len(latlons)} points via {converter.name}")
            results = await converter.convert(latlons)
            if len(results) != len(latlons):
                raise LengthMismatchError(len(latlons), len(results))

            segment.points = [
                point.with_latlon(lat, lon) for point, (lat, lon) in zip(segment.points, results)
            ]
            converted += len(results)
    return converted


async def convert_gpx(data: Union[str, bytes], converter: CoordinateBatchConverter) -> str:
    """GPX (Tokyo datum) in, GPX (JGD2000) out."""
    start_ms = time.time() * 1000
    doc = parse_gpx(data)
    count = await convert_tracks(doc.tracks, converter)
    output = write_gpx(doc)
    logger.info(f"Converted {count} track points in {int(time.time() * 1000 - start_ms)} ms")
    return output
