"""gpxkit - GPX 1.0 / 1.1 reader and writer."""

__version__ = "1.0.0"
__description__ = "Parse and write GPX 1.0 and 1.1 documents"

from gpxkit.errors import (
    ExtensionTooDeepError,
    GpxError,
    GpxReadError,
    GpxWriteError,
    InvalidChildElementError,
    InvalidRootElementError,
    InvalidScalarValueError,
    MalformedXmlError,
    MissingAttributeError,
    SinkWriteError,
    UnsupportedVersionError,
    UnwritableValueError,
)
from gpxkit.io.gpx_reader import read_gpx, read_gpx_file, read_gpx_string
from gpxkit.io.gpx_writer import write_gpx, write_gpx_file, write_gpx_string
from gpxkit.model import (
    Bounds,
    Copyright,
    Extensions,
    Fix,
    Gpx,
    GpxVersion,
    Link,
    Metadata,
    Person,
    Route,
    Track,
    TrackSegment,
    Waypoint,
    XmlNode,
)

__all__ = [
    "__version__",
    "read_gpx",
    "read_gpx_file",
    "read_gpx_string",
    "write_gpx",
    "write_gpx_file",
    "write_gpx_string",
    "Bounds",
    "Copyright",
    "Extensions",
    "Fix",
    "Gpx",
    "GpxVersion",
    "Link",
    "Metadata",
    "Person",
    "Route",
    "Track",
    "TrackSegment",
    "Waypoint",
    "XmlNode",
    "ExtensionTooDeepError",
    "GpxError",
    "GpxReadError",
    "GpxWriteError",
    "InvalidChildElementError",
    "InvalidRootElementError",
    "InvalidScalarValueError",
    "MalformedXmlError",
    "MissingAttributeError",
    "SinkWriteError",
    "UnsupportedVersionError",
    "UnwritableValueError",
]
