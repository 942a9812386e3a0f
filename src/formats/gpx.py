"""
GPX 1.0 / 1.1 reader and writer (track points only).

Coordinates are written back onto the parsed <trkpt> elements, so
waypoints, routes, metadata and extensions pass through unchanged.
"""

import xml.etree.ElementTree as ET
from typing import List, Optional, Tuple, Union

from pydantic import ValidationError

from engine.codec import format_degrees
from engine.models import Segment, Track, TrackPoint
from shared.constants import GPX_NS_10, GPX_NS_11
from shared.errors import GpxFormatError, LengthMismatchError

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'


def _split_tag(tag: str) -> Tuple[str, str]:
    if tag.startswith("{"):
        uri, local = tag[1:].split("}", 1)
        return uri, local
    return "", tag


class GpxDocument:
    """Parsed GPX tree plus the tracks read from it."""

    def __init__(self, root: ET.Element):
        namespace, local = _split_tag(root.tag)
        if local != "gpx":
            raise GpxFormatError(f"root element is <{local}>, not <gpx>")
        self.root = root
        self.namespace = namespace
        self.tracks: List[Track] = []
        self._trkpt_elements: List[List[List[ET.Element]]] = []
        self._read_tracks()

    def _q(self, name: str) -> str:
        return f"{{{self.namespace}}}{name}" if self.namespace else name

    def _text(self, elem: ET.Element, name: str) -> Optional[str]:
        child = elem.find(self._q(name))
        if child is None or child.text is None:
            return None
        return child.text.strip()

    def _read_tracks(self) -> None:
        for trk in self.root.findall(self._q("trk")):
            track = Track(name=self._text(trk, "name"))
            track_elements = []
            for trkseg in trk.findall(self._q("trkseg")):
                segment = Segment()
                seg_elements = []
                for trkpt in trkseg.findall(self._q("trkpt")):
                    segment.points.append(self._read_point(trkpt))
                    seg_elements.append(trkpt)
                track.segments.append(segment)
                track_elements.append(seg_elements)
            self.tracks.append(track)
            self._trkpt_elements.append(track_elements)

    def _read_point(self, trkpt: ET.Element) -> TrackPoint:
        lat, lon = trkpt.get("lat"), trkpt.get("lon")
        if lat is None or lon is None:
            raise GpxFormatError("<trkpt> without lat/lon attribute")
        try:
            return TrackPoint(
                lat=float(lat),
                lon=float(lon),
                elevation=self._text(trkpt, "ele"),
                time=self._text(trkpt, "time"),
            )
        except (ValueError, ValidationError) as e:
            raise GpxFormatError(f"invalid <trkpt lat={lat!r} lon={lon!r}>: {e}") from e

    def point_count(self) -> int:
        return sum(t.point_count() for t in self.tracks)


def parse_gpx(data: Union[str, bytes]) -> GpxDocument:
    raw = data.encode("utf-8") if isinstance(data, str) else data
    try:
        root = ET.fromstring(raw)
    except ET.ParseError as e:
        raise GpxFormatError(f"not well-formed XML: {e}") from e

    namespace, _ = _split_tag(root.tag)
    if namespace not in ("", GPX_NS_10, GPX_NS_11):
        raise GpxFormatError(f"unsupported GPX namespace: {namespace}")
    return GpxDocument(root)


def write_gpx(doc: GpxDocument) -> str:
    """Serialize, pushing every track point's lat/lon onto its <trkpt>."""
    for track, track_elements in zip(doc.tracks, doc._trkpt_elements):
        for segment, seg_elements in zip(track.segments, track_elements):
            if len(segment.points) != len(seg_elements):
                raise LengthMismatchError(len(seg_elements), len(segment.points))
            for point, trkpt in zip(segment.points, seg_elements):
                trkpt.set("lat", format_degrees(point.lat))
                trkpt.set("lon", format_degrees(point.lon))

    # the GPX namespace (if any) stays the default one; no process-wide prefix registry
    try:
        body = ET.tostring(doc.root, encoding="unicode", default_namespace=doc.namespace or None)
    except ValueError:
        # unqualified element inside a namespaced document
        body = ET.tostring(doc.root, encoding="unicode")
    return XML_DECLARATION + body + "\n"


def build_gpx(tracks: List[Track], creator: str) -> GpxDocument:
    """Fresh GPX 1.1 document holding the given tracks."""

    def q(name: str) -> str:
        return f"{{{GPX_NS_11}}}{name}"

    root = ET.Element(q("gpx"), {"version": "1.1", "creator": creator})
    for track in tracks:
        trk = ET.SubElement(root, q("trk"))
        if track.name:
            ET.SubElement(trk, q("name")).text = track.name
        for segment in track.segments:
            trkseg = ET.SubElement(trk, q("trkseg"))
            for point in segment.points:
                trkpt = ET.SubElement(
                    trkseg, q("trkpt"), {"lat": format_degrees(point.lat), "lon": format_degrees(point.lon)}
                )
                if point.elevation is not None:
                    ET.SubElement(trkpt, q("ele")).text = point.elevation
                if point.time is not None:
                    ET.SubElement(trkpt, q("time")).text = point.time
    return GpxDocument(root)
