"""Tests for the GPX parse driver."""

import io
import logging
from datetime import datetime, timezone
from pathlib import Path

import pytest

from gpxkit.core.schema import MAX_EXTENSION_DEPTH
from gpxkit.core.trace import TraceCollector
from gpxkit.errors import (
    ExtensionTooDeepError,
    GpxReadError,
    InvalidChildElementError,
    InvalidRootElementError,
    InvalidScalarValueError,
    MalformedXmlError,
    UnsupportedVersionError,
)
from gpxkit.io.gpx_reader import read_gpx, read_gpx_file, read_gpx_string
from gpxkit.io.gpx_writer import write_gpx_string
from gpxkit.model import Fix, GpxVersion, Link, Person


FIXTURES = Path(__file__).parent / "fixtures"


def test_wikipedia_example():
    gpx = read_gpx_file(FIXTURES / "wikipedia_example.gpx")
    assert gpx.version is GpxVersion.GPX11
    assert gpx.creator == "MapSource 6.15.5"
    assert gpx.metadata.time == datetime(2009, 10, 17, 22, 58, 43, tzinfo=timezone.utc)
    assert gpx.metadata.links == [Link("http://www.garmin.com", "Garmin International")]

    assert len(gpx.tracks) == 1
    track = gpx.tracks[0]
    assert track.name == "Example GPX Document"
    assert len(track.segments) == 1
    assert [p.elevation for p in track.segments[0].points] == [4.46, 4.94, 6.87]


def test_minimal_document():
    gpx = read_gpx_string(
        '<gpx version="1.1"><trk><name>Example GPX Document</name>'
        '<trkseg><trkpt lat="38.82" lon="-121.1"><ele>4.46</ele></trkpt></trkseg></trk></gpx>'
    )
    (point,) = list(gpx.track_points())
    assert gpx.tracks[0].name == "Example GPX Document"
    assert (point.lat, point.lon, point.elevation) == (38.82, -121.1, 4.46)


def test_accuracy_fields():
    gpx = read_gpx_file(FIXTURES / "with_accuracy.gpx")
    assert gpx.metadata.name == "20170412_CARDIO.gpx"
    assert gpx.metadata.links == []
    points = list(gpx.track_points())
    assert len(points) == 3

    assert points[0].fix is Fix.DGPS
    assert points[0].sat == 4
    assert (points[0].hdop, points[0].vdop, points[0].pdop) == (5.0, 6.2, 728.0)
    assert points[0].age_of_dgps_data == 1.0
    assert points[0].dgps_id == 3

    assert points[1].fix is Fix.THREE_D
    assert points[1].age_of_dgps_data == 2.01
    assert points[1].time == datetime(2017, 4, 12, 9, 2, 53, 250000, tzinfo=timezone.utc)

    assert points[2].fix is Fix.NONE
    assert points[2].time == datetime(2017, 4, 12, 9, 2, 54, tzinfo=timezone.utc)


def test_gpx10_document_folds_into_metadata():
    gpx = read_gpx_file(FIXTURES / "gpx10_example.gpx")
    assert gpx.version is GpxVersion.GPX10
    md = gpx.metadata
    assert md.name == "Crystal Mountain"
    assert md.description == "Hike up to the summit"
    assert md.author == Person(name="Jane Hiker", email="jane@example.com")
    assert md.links == [Link("http://www.example.com/crystal", "Trip report")]
    assert md.time == datetime(2002, 2, 27, 17, 18, 33, tzinfo=timezone.utc)
    assert md.keywords == "hiking, summit"
    assert md.bounds.min_lat == 42.401051

    wpt = gpx.waypoints[0]
    assert (wpt.course, wpt.speed) == (92.5, 1.25)
    assert wpt.description == "5066"
    assert wpt.links == [Link("http://www.example.com/5066")]
    assert wpt.type == "Crossing"

    assert gpx.routes[0].number == 1
    assert [p.name for p in gpx.routes[0].points] == ["BELLEVUE", "GATE6"]
    assert gpx.tracks[0].segments[0].points[0].speed == 2.5


def test_metadata_element_rejected_in_10():
    with pytest.raises(InvalidChildElementError) as exc:
        read_gpx_string('<gpx version="1.0"><metadata/></gpx>')
    assert (exc.value.child, exc.value.parent) == ("metadata", "gpx")


def test_root_level_name_rejected_in_11():
    with pytest.raises(InvalidChildElementError, match="name"):
        read_gpx_string('<gpx version="1.1"><name>x</name></gpx>')


def test_not_a_gpx_file():
    with pytest.raises(InvalidRootElementError, match="kml"):
        read_gpx_string("<kml><Document/></kml>")


def test_foreign_namespace_gpx_root_rejected():
    with pytest.raises(InvalidRootElementError):
        read_gpx_string('<gpx xmlns="urn:not-gpx" version="1.1"/>')


def test_missing_version_falls_back_to_11(caplog):
    with caplog.at_level(logging.WARNING, logger="gpxkit.io.gpx_reader"):
        gpx = read_gpx_string("<gpx/>")
    assert gpx.version is GpxVersion.GPX11
    assert "not recognized" in caplog.text


def test_unknown_version_fallback_is_configurable():
    assert read_gpx_string('<gpx version="2.0"/>', fallback_version=GpxVersion.GPX10).version is GpxVersion.GPX10
    with pytest.raises(UnsupportedVersionError, match="2.0"):
        read_gpx_string('<gpx version="2.0"/>', fallback_version=None)


def test_empty_input():
    with pytest.raises(MalformedXmlError):
        read_gpx(b"")
    with pytest.raises(MalformedXmlError):
        read_gpx(io.BytesIO(b""))


def test_bad_character():
    with pytest.raises(MalformedXmlError) as exc:
        read_gpx_file(FIXTURES / "badcharacter.xml")
    assert exc.value.line == 4


def test_unclosed_document():
    with pytest.raises(MalformedXmlError):
        read_gpx_string('<gpx version="1.1"><wpt lat="1" lon="2">')


def test_trailing_content_after_root_is_ignored():
    gpx = read_gpx_string('<gpx version="1.1"><wpt lat="1" lon="2"/></gpx><junk><<<')
    assert len(gpx.waypoints) == 1


def test_read_errors_are_value_errors():
    with pytest.raises(ValueError):
        read_gpx_string('<gpx version="1.1"><wpt lon="2"/></gpx>')
    assert issubclass(GpxReadError, ValueError)


def test_missing_file():
    with pytest.raises(FileNotFoundError):
        read_gpx_file(FIXTURES / "does_not_exist.gpx")


def test_text_stream_source():
    gpx = read_gpx(io.StringIO('<gpx version="1.0" creator="me"><wpt lat="1" lon="2"/></gpx>'))
    assert gpx.version is GpxVersion.GPX10
    assert gpx.creator == "me"


def test_namespace_declarations_are_kept():
    gpx = read_gpx_file(FIXTURES / "extensions.gpx")
    assert gpx.namespaces == {
        "gpxtpx": "http://www.garmin.com/xmlschemas/TrackPointExtension/v1",
        "onx": "https://wwww.onxmaps.com/",
    }


def test_extensions_at_every_level():
    gpx = read_gpx_file(FIXTURES / "extensions.gpx")
    onx = "https://wwww.onxmaps.com/"
    assert gpx.metadata.extensions.find("folder", onx).text == "Hunting"
    assert gpx.waypoints[0].extensions.find("icon", onx).text == "Camp"
    assert gpx.routes[0].extensions.find("style", onx).attributes == {"weight": "4"}
    assert gpx.tracks[0].extensions.find("color", onx).text == "rgba(255,0,0,1)"
    seg = gpx.tracks[0].segments[0]
    assert seg.extensions.find("segment", onx).attributes == {"kind": "climb"}
    tpx = seg.points[0].extensions.children[0]
    assert tpx.name == "TrackPointExtension"
    assert [c.text for c in tpx.children] == ["142", "88"]
    exported = gpx.extensions.find("exported", onx)
    assert exported.text == "note "
    assert exported.children[0].tail == " tail text"


def test_trace_events():
    trace = TraceCollector()
    read_gpx_file(FIXTURES / "gpx10_example.gpx", trace=trace)
    (doc,) = trace.of_type("input.gpx")
    assert doc["version"] == "1.0"
    assert [e["name"] for e in trace.of_type("input.wpt")] == ["5066"]
    assert trace.of_type("input.rte")[0]["point_count"] == 2
    assert trace.of_type("input.trk")[0]["segment_count"] == 1


def _nested_extensions(depth: int) -> str:
    return (
        '<gpx version="1.1" xmlns:x="urn:x"><extensions>'
        + "<x:a>" * depth
        + "</x:a>" * depth
        + "</extensions></gpx>"
    )


def test_deeply_nested_extensions_rejected():
    with pytest.raises(ExtensionTooDeepError, match=f"more than {MAX_EXTENSION_DEPTH} levels") as exc:
        read_gpx_string(_nested_extensions(1200))
    assert isinstance(exc.value, GpxReadError)
    assert exc.value.line == 1


def test_extensions_at_nesting_limit_read_and_write():
    gpx = read_gpx_string(_nested_extensions(MAX_EXTENSION_DEPTH))
    depth = 0
    node = gpx.extensions
    while node.children:
        node = node.children[0]
        depth += 1
    assert depth == MAX_EXTENSION_DEPTH
    assert read_gpx_string(write_gpx_string(gpx)) == gpx


def test_gpx10_email_must_be_an_address():
    with pytest.raises(InvalidScalarValueError, match="nobody"):
        read_gpx_string('<gpx version="1.0"><email>nobody</email></gpx>')


def test_gpx10_email_converts_to_11():
    gpx = read_gpx_string('<gpx version="1.0"><email> jane@example.com </email></gpx>')
    assert gpx.metadata.author == Person(email="jane@example.com")
    text = write_gpx_string(gpx, version=GpxVersion.GPX11)
    assert '<email id="jane" domain="example.com" />' in text


def test_gpx11_email_id_with_at_sign_rejected():
    with pytest.raises(InvalidScalarValueError, match="email"):
        read_gpx_string(
            '<gpx version="1.1"><metadata><author>'
            '<email id="jane@home" domain="example.com"/>'
            "</author></metadata></gpx>"
        )
