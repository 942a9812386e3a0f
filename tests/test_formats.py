"""
Unit tests for GPX read/write and the GPSe reader.
"""

import pytest

from engine.models import Segment, Track, TrackPoint
from formats.gpse import gpse_to_gpx, parse_gpse, parse_gpse_time
from formats.gpx import build_gpx, parse_gpx, write_gpx
from shared.errors import GpseFormatError, GpxFormatError


# -----------------------------------------------------------------------------
# GPX
# -----------------------------------------------------------------------------
def test_parse_gpx_reads_tracks_segments_points(sample_gpx):
    doc = parse_gpx(sample_gpx)

    assert len(doc.tracks) == 1
    track = doc.tracks[0]
    assert track.name == "Marunouchi walk"
    assert [len(s.points) for s in track.segments] == [3, 1, 0]

    pt = track.segments[0].points[0]
    assert (pt.lat, pt.lon, pt.elevation, pt.time) == (35.6812, 139.7671, "12.5", "2009-05-10T01:23:45Z")
    assert track.segments[1].points[0].time is None


def test_write_gpx_keeps_namespaces_and_other_elements(sample_gpx):
    doc = parse_gpx(sample_gpx)
    seg = doc.tracks[0].segments[0]
    seg.points[0] = seg.points[0].with_latlon(35.68443, 139.76387)

    output = write_gpx(doc)

    assert output.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    assert 'xmlns="http://www.topografix.com/GPX/1/1"' in output
    assert "ns0:" not in output
    assert "xsi:schemaLocation" in output
    assert '<trkpt lat="35.68443000" lon="139.76387000">' in output
    assert "<name>Tokyo Tower</name>" in output


def test_parse_gpx_without_namespace():
    doc = parse_gpx('<gpx version="1.0"><trk><trkseg><trkpt lat="1.5" lon="2.5"/></trkseg></trk></gpx>')
    assert doc.namespace == ""
    assert doc.tracks[0].segments[0].points[0].lon == 2.5


EXTENSION_GPX = (
    '<gpx version="1.0"><trk><trkseg>'
    '<trkpt lat="35.5" lon="139.5"><extensions><x xmlns="urn:ext">1</x></extensions></trkpt>'
    "</trkseg></trk></gpx>"
)


def test_write_gpx_keeps_extension_namespace_off_the_root():
    output = write_gpx(parse_gpx(EXTENSION_GPX))

    assert 'xmlns="urn:ext"' not in output
    doc = parse_gpx(output)
    assert doc.namespace == ""
    assert doc.root.find(".//{urn:ext}x").text == "1"
    assert doc.tracks[0].segments[0].points[0].lat == 35.5


def test_parsing_does_not_change_prefixes_of_later_documents(sample_gpse):
    parse_gpx(EXTENSION_GPX)
    parse_gpx('<gpx xmlns="http://www.topografix.com/GPX/1/0" version="1.0"/>')

    output = gpse_to_gpx(sample_gpse, creator="tests")

    assert 'xmlns="http://www.topografix.com/GPX/1/1"' in output
    assert "urn:ext" not in output
    assert "GPX/1/0" not in output


def test_blank_elevation_and_time_are_treated_as_missing():
    doc = parse_gpx(
        '<gpx><trk><trkseg><trkpt lat="1" lon="2"><ele> </ele><time></time></trkpt></trkseg></trk></gpx>'
    )
    pt = doc.tracks[0].segments[0].points[0]
    assert (pt.elevation, pt.time) == (None, None)


def test_fractional_second_utc_time_is_accepted():
    doc = parse_gpx(
        '<gpx><trk><trkseg><trkpt lat="1" lon="2"><time>2009-05-10T01:23:45.12Z</time></trkpt></trkseg></trk></gpx>'
    )
    assert doc.tracks[0].segments[0].points[0].time == "2009-05-10T01:23:45.12Z"


@pytest.mark.parametrize(
    "bad",
    [
        "<gpx><trk>",                                                         # not well-formed
        "<kml/>",                                                             # wrong root
        "<gpx><trk><trkseg><trkpt lat='1'/></trkseg></trk></gpx>",            # missing lon
        "<gpx><trk><trkseg><trkpt lat='x' lon='1'/></trkseg></trk></gpx>",    # non-numeric
        "<gpx><trk><trkseg><trkpt lat='95' lon='1'/></trkseg></trk></gpx>",   # out of range
        "<gpx><trk><trkseg><trkpt lat='1' lon='1'><time>yesterday</time></trkpt></trkseg></trk></gpx>",
    ],
)
def test_parse_gpx_rejects_malformed(bad):
    with pytest.raises(GpxFormatError):
        parse_gpx(bad)


def test_build_gpx_roundtrips_through_parser():
    track = Track(name="built", segments=[Segment(points=[TrackPoint(lat=35.5, lon=139.25, elevation="3")])])

    doc = parse_gpx(write_gpx(build_gpx([track], creator="tests")))

    assert doc.root.get("creator") == "tests"
    assert doc.tracks[0].name == "built"
    assert doc.tracks[0].segments[0].points[0] == TrackPoint(lat=35.5, lon=139.25, elevation="3")


# -----------------------------------------------------------------------------
# GPSe
# -----------------------------------------------------------------------------
def test_parse_gpse(sample_gpse):
    points = parse_gpse(sample_gpse)

    assert len(points) == 2
    assert (points[0].lat, points[0].lon) == (35.6812, 139.7671)
    assert points[0].elevation == "12.5"
    assert points[0].time == "2009-05-10T10:23:45+09:00"


def test_parse_gpse_time_formats():
    assert parse_gpse_time("2009/05/10 10:23") == "2009-05-10T10:23:00+09:00"
    assert parse_gpse_time("2009-05-10 10:23:45") == "2009-05-10T10:23:45+09:00"
    with pytest.raises(GpseFormatError):
        parse_gpse_time("10 May 2009")


def test_gpse_to_gpx_single_track_single_segment(sample_gpse):
    doc = parse_gpx(gpse_to_gpx(sample_gpse, creator="tests"))

    assert len(doc.tracks) == 1
    assert doc.tracks[0].name == "My Track"
    assert len(doc.tracks[0].segments) == 1
    assert [p.lat for p in doc.tracks[0].segments[0].points] == [35.6812, 35.682]


def test_parse_gpse_rejects_missing_header():
    with pytest.raises(GpseFormatError):
        parse_gpse("1,35.6812,139.7671,12.5,0,2009/05/10 10:23:45,Track,,0,0\r".encode("shift_jis"))


def test_parse_gpse_reports_line_number():
    data = "GPSe\rTrack\r1\r21\r1\r1,35.6812,139.7671\r".encode("shift_jis")
    with pytest.raises(GpseFormatError, match="line 6"):
        parse_gpse(data)


def test_parse_gpse_bad_time():
    data = "GPSe\rTrack\r1\r21\r1\r1,35.6812,139.7671,12.5,0,someday,Track,,0,0\r".encode("shift_jis")
    with pytest.raises(GpseFormatError, match="line 6"):
        parse_gpse(data)
