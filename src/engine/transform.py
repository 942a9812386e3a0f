"""
Coordinate Transformation Utilities relying on pyproj.
Local (offline) path: Tokyo datum (EPSG:4301) to JGD2000 (EPSG:4612).
"""

import logging
from typing import List, Sequence, Tuple

from pyproj import Transformer

from shared.constants import EPSG_JGD2000, EPSG_TOKYO

logger = logging.getLogger("LocalTransform")

# Initialize Transformer once to avoid overhead
# always_xy=True forces input/output to be (lon, lat) rather than (lat, lon)
TRANSFORM_TKY2JGD = Transformer.from_crs(EPSG_TOKYO, EPSG_JGD2000, always_xy=True)


def transform_tokyo_to_jgd(lat: float, lon: float, elevation: float = 0.0) -> Tuple[float, float, float]:
    """
    Transform Tokyo datum (lat, lon, h) to JGD2000 (lat, lon, h).
    always_xy expects (lon, lat) order!
    """
    lon_jgd, lat_jgd, ele_jgd = TRANSFORM_TKY2JGD.transform(xx=lon, yy=lat, zz=elevation)
    return lat_jgd, lon_jgd, ele_jgd


class LocalTransformConverter:
    """Batch converter backed by pyproj. Same contract as the Web TKY2JGD client."""

    name = "local"

    async def convert(self, points: Sequence[Tuple[float, float]]) -> List[Tuple[float, float]]:
        logger.info(f"Converting {len(points)} points with pyproj ({EPSG_TOKYO} -> {EPSG_JGD2000})")
        results = []
        for lat, lon in points:
            lat_jgd, lon_jgd, _ = transform_tokyo_to_jgd(float(lat), float(lon))
            results.append((lat_jgd, lon_jgd))
        return results
