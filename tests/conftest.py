import pytest

SAMPLE_GPX = """<?xml version="1.0" encoding="UTF-8"?>
<gpx xmlns="http://www.topografix.com/GPX/1/1" xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
     version="1.1" creator="test"
     xsi:schemaLocation="http://www.topografix.com/GPX/1/1 http://www.topografix.com/GPX/1/1/gpx.xsd">
  <wpt lat="35.6586" lon="139.7454"><name>Tokyo Tower</name></wpt>
  <trk>
    <name>Marunouchi walk</name>
    <trkseg>
      <trkpt lat="35.6812" lon="139.7671"><ele>12.5</ele><time>2009-05-10T01:23:45Z</time></trkpt>
      <trkpt lat="35.6820" lon="139.7680"><ele>13.0</ele><time>2009-05-10T01:24:45Z</time></trkpt>
      <trkpt lat="35.6831" lon="139.7692"><ele>13.5</ele><time>2009-05-10T01:25:45Z</time></trkpt>
    </trkseg>
    <trkseg>
      <trkpt lat="35.6900" lon="139.7000"><ele>40</ele></trkpt>
    </trkseg>
    <trkseg/>
  </trk>
</gpx>
"""

SAMPLE_GPSE = (
    "GPSe\rTrack\r1\r21\r2\r"
    "1,35.6812,139.7671,12.5,0,2009/05/10 10:23:45,Track,東京駅,0,0\r"
    "1,35.6820,139.7680,13.0,0,2009/05/10 10:24:45,Track,,0,0\r"
).encode("shift_jis")


@pytest.fixture
def sample_gpx() -> str:
    return SAMPLE_GPX


@pytest.fixture
def sample_gpse() -> bytes:
    return SAMPLE_GPSE
