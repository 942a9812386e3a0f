"""
Track data model: Track -> Segment -> TrackPoint.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, TypeAdapter, field_validator

_DATETIME = TypeAdapter(datetime)


class TrackPoint(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lon: float = Field(..., ge=-180.0, le=180.0)
    elevation: Optional[str] = None       # 원문 그대로 (decimal text)
    time: Optional[str] = None            # ISO-8601 text

    model_config = {"frozen": True}

    @field_validator("elevation", "time")
    @classmethod
    def _blank_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            v = v if v.strip() else None
        return v

    @field_validator("elevation")
    @classmethod
    def _elevation_is_decimal(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            float(v)
        return v

    @field_validator("time")
    @classmethod
    def _time_is_point_in_time(cls, v: Optional[str]) -> Optional[str]:
        # ISO-8601 incl. 'Z' and fractional seconds on every supported Python
        if v is not None:
            _DATETIME.validate_python(v)
        return v

    def with_latlon(self, lat: float, lon: float) -> "TrackPoint":
        return self.model_copy(update={"lat": lat, "lon": lon})


class Segment(BaseModel):
    points: List[TrackPoint] = []

    def latlons(self) -> List[tuple]:
        return [(p.lat, p.lon) for p in self.points]


class Track(BaseModel):
    name: Optional[str] = None
    segments: List[Segment] = []

    def point_count(self) -> int:
        return sum(len(s.points) for s in self.segments)
