"""
In-memory document model for gpxkit.

This is the shared representation used by both directions:
- the element parsers build it from a GPX 1.0 / 1.1 event stream
- the element writers re-emit it as XML for a chosen GPX version

Every field that the XML marks optional is `Optional` here, and absence
(`None`) is kept distinct from an empty value (`""`). The tree is strictly
hierarchical and owned top-down by `Gpx`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Iterator, List, Optional


class GpxVersion(str, Enum):
    GPX10 = "1.0"
    GPX11 = "1.1"

    def __str__(self) -> str:
        return self.value


class Fix(str, Enum):
    """
    Type of GPS fix.

    `NONE` means the GPS had no fix. To signify "the fix info is unknown",
    leave `Waypoint.fix` as None instead.
    """

    NONE = "none"
    TWO_D = "2d"
    THREE_D = "3d"
    DGPS = "dgps"
    PPS = "pps"  # military signal


@dataclass
class XmlNode:
    """
    A captured, uninterpreted XML element.

    Used for every extension point: the `<extensions>` element itself is an
    XmlNode whose children hold the vendor content. Names are split into
    local name + namespace URI; attribute keys use Clark notation
    (`{uri}name`) when namespaced. `namespace` is None for elements that live
    in the document's own (GPX) namespace.
    """

    name: str
    namespace: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)
    text: Optional[str] = None
    tail: Optional[str] = None
    children: List["XmlNode"] = field(default_factory=list)

    @property
    def tag(self) -> str:
        if self.namespace:
            return f"{{{self.namespace}}}{self.name}"
        return self.name

    def find(self, name: str, namespace: Optional[str] = None) -> Optional["XmlNode"]:
        """Return the first direct child with the given local name (and namespace, if given)."""
        for child in self.children:
            if child.name == name and (namespace is None or child.namespace == namespace):
                return child
        return None

    def iter(self) -> Iterator["XmlNode"]:
        """Depth-first walk over this node and all descendants."""
        yield self
        for child in self.children:
            yield from child.iter()


# The node captured for an <extensions> element.
Extensions = XmlNode


@dataclass
class Link:
    href: str
    text: Optional[str] = None
    type: Optional[str] = None  # mime type, e.g. image/jpeg


@dataclass
class Person:
    name: Optional[str] = None
    email: Optional[str] = None  # "id@domain"
    link: Optional[Link] = None


@dataclass
class Copyright:
    author: str
    year: Optional[int] = None
    license: Optional[str] = None  # URI


@dataclass
class Bounds:
    """Rectangular lat/lon extent. min <= max is not enforced (source values pass through)."""

    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float


@dataclass
class Metadata:
    name: Optional[str] = None
    description: Optional[str] = None
    author: Optional[Person] = None
    copyright: Optional[Copyright] = None
    links: List[Link] = field(default_factory=list)
    time: Optional[datetime] = None
    keywords: Optional[str] = None
    bounds: Optional[Bounds] = None
    extensions: Optional[Extensions] = None


@dataclass
class Waypoint:
    """
    A single geo-tagged point.

    Used for <wpt>, <trkpt> and <rtept>; which tag it came from is decided by
    its owner (document, track segment or route).
    """

    lat: float
    lon: float
    elevation: Optional[float] = None
    time: Optional[datetime] = None
    speed: Optional[float] = None  # GPX 1.0 only
    course: Optional[float] = None  # GPX 1.0 only
    magvar: Optional[float] = None
    geoid_height: Optional[float] = None
    name: Optional[str] = None
    comment: Optional[str] = None
    description: Optional[str] = None
    source: Optional[str] = None
    links: List[Link] = field(default_factory=list)
    symbol: Optional[str] = None
    type: Optional[str] = None
    fix: Optional[Fix] = None
    sat: Optional[int] = None
    hdop: Optional[float] = None
    vdop: Optional[float] = None
    pdop: Optional[float] = None
    age_of_dgps_data: Optional[float] = None
    dgps_id: Optional[int] = None
    extensions: Optional[Extensions] = None


@dataclass
class TrackSegment:
    points: List[Waypoint] = field(default_factory=list)
    extensions: Optional[Extensions] = None


@dataclass
class Track:
    name: Optional[str] = None
    comment: Optional[str] = None
    description: Optional[str] = None
    source: Optional[str] = None
    links: List[Link] = field(default_factory=list)
    type: Optional[str] = None
    number: Optional[int] = None
    segments: List[TrackSegment] = field(default_factory=list)
    extensions: Optional[Extensions] = None


@dataclass
class Route:
    name: Optional[str] = None
    comment: Optional[str] = None
    description: Optional[str] = None
    source: Optional[str] = None
    links: List[Link] = field(default_factory=list)
    type: Optional[str] = None
    number: Optional[int] = None
    points: List[Waypoint] = field(default_factory=list)
    extensions: Optional[Extensions] = None


@dataclass
class Gpx:
    """
    Root of a GPX document.

    `Gpx(GpxVersion.GPX10)` builds an empty document. The version is fixed
    once set; write with `write_gpx(..., version=...)` to emit another one.
    """

    version: GpxVersion = GpxVersion.GPX11
    creator: Optional[str] = None
    metadata: Optional[Metadata] = None
    waypoints: List[Waypoint] = field(default_factory=list)
    tracks: List[Track] = field(default_factory=list)
    routes: List[Route] = field(default_factory=list)
    extensions: Optional[Extensions] = None
    # prefix -> namespace URI as declared in the source document
    namespaces: Dict[str, str] = field(default_factory=dict, compare=False, repr=False)

    def __setattr__(self, name: str, value) -> None:
        if name == "version":
            if "version" in self.__dict__:
                raise AttributeError("Gpx.version cannot be changed once set")
            value = GpxVersion(value)
        super().__setattr__(name, value)

    def track_points(self) -> Iterator[Waypoint]:
        for track in self.tracks:
            for segment in track.segments:
                yield from segment.points

    def route_points(self) -> Iterator[Waypoint]:
        for route in self.routes:
            yield from route.points
