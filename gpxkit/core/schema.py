"""
Per-version element tables for GPX 1.0 and 1.1.

One table per entity describes its attributes and its allowed children in
XSD sequence order. The parser looks children up by local name; the writer
walks the same tuple front to back, so emission order and parse acceptance
can never drift apart.

A child rule's `path` is the attribute path on the owning entity. Paths
longer than one step go through intermediate objects that are created on
demand (1.0 root `<author>` lands in `gpx.metadata.author.name`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, FrozenSet, Optional, Tuple

from gpxkit.model import (
    Bounds,
    Copyright,
    Gpx,
    GpxVersion,
    Link,
    Metadata,
    Person,
    Route,
    Track,
    TrackSegment,
    Waypoint,
)


GPX10_NAMESPACE = "http://www.topografix.com/GPX/1/0"
GPX11_NAMESPACE = "http://www.topografix.com/GPX/1/1"
XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"
XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"

NAMESPACES: Dict[GpxVersion, str] = {
    GpxVersion.GPX10: GPX10_NAMESPACE,
    GpxVersion.GPX11: GPX11_NAMESPACE,
}

SCHEMA_LOCATIONS: Dict[GpxVersion, str] = {
    GpxVersion.GPX10: f"{GPX10_NAMESPACE} {GPX10_NAMESPACE}/gpx.xsd",
    GpxVersion.GPX11: f"{GPX11_NAMESPACE} {GPX11_NAMESPACE}/gpx.xsd",
}

GPX_NAMESPACES = frozenset(NAMESPACES.values())

# Levels of element nesting allowed below an <extensions> element.
MAX_EXTENSION_DEPTH = 256


def is_gpx_namespace(namespace: Optional[str]) -> bool:
    """True for no namespace or either GPX namespace (version is not checked)."""
    return namespace is None or namespace in GPX_NAMESPACES


class Kind(Enum):
    TEXT = "text"
    DECIMAL = "decimal"
    NON_NEGATIVE_INTEGER = "non-negative integer"
    DGPS_ID = "dgps id"
    YEAR = "year"
    TIME = "time"
    FIX = "fix"
    EMAIL = "email"  # 1.1 <email id=".." domain=".."/>
    EMAIL_ADDRESS = "email address"  # 1.0 text form, "id@domain"
    URL = "url"  # 1.0, folds into links[0].href
    URLNAME = "urlname"  # 1.0, folds into links[0].text
    ELEMENT = "element"
    EXTENSIONS = "extensions"


class Disposition(Enum):
    """What the parser does with a child start tag."""

    ELEMENT = "element"
    TEXT = "text"
    EXTENSIONS = "extensions"
    REJECT = "reject"


BOTH: FrozenSet[GpxVersion] = frozenset(GpxVersion)
ONLY_10: FrozenSet[GpxVersion] = frozenset({GpxVersion.GPX10})
ONLY_11: FrozenSet[GpxVersion] = frozenset({GpxVersion.GPX11})


@dataclass(frozen=True)
class AttributeRule:
    name: str
    field: str
    kind: Kind = Kind.TEXT
    required: bool = True


@dataclass(frozen=True)
class ChildRule:
    tag: str
    path: Tuple[str, ...]
    kind: Kind = Kind.TEXT
    entity: Optional[str] = None
    many: bool = False
    versions: FrozenSet[GpxVersion] = BOTH

    @property
    def field(self) -> str:
        return self.path[-1]

    @property
    def disposition(self) -> Disposition:
        if self.kind is Kind.ELEMENT:
            return Disposition.ELEMENT
        if self.kind is Kind.EXTENSIONS:
            return Disposition.EXTENSIONS
        return Disposition.TEXT


@dataclass(frozen=True)
class EntitySchema:
    key: str
    factory: Callable
    attributes: Tuple[AttributeRule, ...] = ()
    children: Tuple[ChildRule, ...] = ()
    _by_version: Dict[GpxVersion, Dict[str, ChildRule]] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        for version in GpxVersion:
            table = {rule.tag: rule for rule in self.children if version in rule.versions}
            self._by_version[version] = table

    def allowed_children(self, version: GpxVersion) -> Dict[str, ChildRule]:
        return self._by_version[version]

    def emitted_children(self, version: GpxVersion) -> Tuple[ChildRule, ...]:
        return tuple(rule for rule in self.children if version in rule.versions)


# Descriptive fields that trk and rte share, in XSD order up to <number>.
def _descriptive_children() -> Tuple[ChildRule, ...]:
    return (
        ChildRule("name", ("name",)),
        ChildRule("cmt", ("comment",)),
        ChildRule("desc", ("description",)),
        ChildRule("src", ("source",)),
        ChildRule("link", ("links",), Kind.ELEMENT, "link", many=True, versions=ONLY_11),
        ChildRule("url", ("links",), Kind.URL, versions=ONLY_10),
        ChildRule("urlname", ("links",), Kind.URLNAME, versions=ONLY_10),
        ChildRule("number", ("number",), Kind.NON_NEGATIVE_INTEGER),
        ChildRule("type", ("type",), versions=ONLY_11),
    )


LINK = EntitySchema(
    "link",
    Link,
    attributes=(AttributeRule("href", "href"),),
    children=(
        ChildRule("text", ("text",)),
        ChildRule("type", ("type",)),
    ),
)

PERSON = EntitySchema(
    "person",
    Person,
    children=(
        ChildRule("name", ("name",)),
        ChildRule("email", ("email",), Kind.EMAIL),
        ChildRule("link", ("link",), Kind.ELEMENT, "link"),
    ),
)

COPYRIGHT = EntitySchema(
    "copyright",
    Copyright,
    attributes=(AttributeRule("author", "author"),),
    children=(
        ChildRule("year", ("year",), Kind.YEAR),
        ChildRule("license", ("license",)),
    ),
)

BOUNDS = EntitySchema(
    "bounds",
    Bounds,
    attributes=(
        AttributeRule("minlat", "min_lat", Kind.DECIMAL),
        AttributeRule("minlon", "min_lon", Kind.DECIMAL),
        AttributeRule("maxlat", "max_lat", Kind.DECIMAL),
        AttributeRule("maxlon", "max_lon", Kind.DECIMAL),
    ),
)

METADATA = EntitySchema(
    "metadata",
    Metadata,
    children=(
        ChildRule("name", ("name",)),
        ChildRule("desc", ("description",)),
        ChildRule("author", ("author",), Kind.ELEMENT, "person"),
        ChildRule("copyright", ("copyright",), Kind.ELEMENT, "copyright"),
        ChildRule("link", ("links",), Kind.ELEMENT, "link", many=True),
        ChildRule("time", ("time",), Kind.TIME),
        ChildRule("keywords", ("keywords",)),
        ChildRule("bounds", ("bounds",), Kind.ELEMENT, "bounds"),
        ChildRule("extensions", ("extensions",), Kind.EXTENSIONS),
    ),
)

WAYPOINT = EntitySchema(
    "waypoint",
    Waypoint,
    attributes=(
        AttributeRule("lat", "lat", Kind.DECIMAL),
        AttributeRule("lon", "lon", Kind.DECIMAL),
    ),
    children=(
        ChildRule("ele", ("elevation",), Kind.DECIMAL),
        ChildRule("time", ("time",), Kind.TIME),
        ChildRule("course", ("course",), Kind.DECIMAL, versions=ONLY_10),
        ChildRule("speed", ("speed",), Kind.DECIMAL, versions=ONLY_10),
        ChildRule("magvar", ("magvar",), Kind.DECIMAL),
        ChildRule("geoidheight", ("geoid_height",), Kind.DECIMAL),
        ChildRule("name", ("name",)),
        ChildRule("cmt", ("comment",)),
        ChildRule("desc", ("description",)),
        ChildRule("src", ("source",)),
        ChildRule("link", ("links",), Kind.ELEMENT, "link", many=True, versions=ONLY_11),
        ChildRule("url", ("links",), Kind.URL, versions=ONLY_10),
        ChildRule("urlname", ("links",), Kind.URLNAME, versions=ONLY_10),
        ChildRule("sym", ("symbol",)),
        ChildRule("type", ("type",)),
        ChildRule("fix", ("fix",), Kind.FIX),
        ChildRule("sat", ("sat",), Kind.NON_NEGATIVE_INTEGER),
        ChildRule("hdop", ("hdop",), Kind.DECIMAL),
        ChildRule("vdop", ("vdop",), Kind.DECIMAL),
        ChildRule("pdop", ("pdop",), Kind.DECIMAL),
        ChildRule("ageofdgpsdata", ("age_of_dgps_data",), Kind.DECIMAL),
        ChildRule("dgpsid", ("dgps_id",), Kind.DGPS_ID),
        ChildRule("extensions", ("extensions",), Kind.EXTENSIONS),
    ),
)

TRACK_SEGMENT = EntitySchema(
    "segment",
    TrackSegment,
    children=(
        ChildRule("trkpt", ("points",), Kind.ELEMENT, "waypoint", many=True),
        ChildRule("extensions", ("extensions",), Kind.EXTENSIONS),
    ),
)

TRACK = EntitySchema(
    "track",
    Track,
    children=_descriptive_children()
    + (
        ChildRule("extensions", ("extensions",), Kind.EXTENSIONS),
        ChildRule("trkseg", ("segments",), Kind.ELEMENT, "segment", many=True),
    ),
)

ROUTE = EntitySchema(
    "route",
    Route,
    children=_descriptive_children()
    + (
        ChildRule("extensions", ("extensions",), Kind.EXTENSIONS),
        ChildRule("rtept", ("points",), Kind.ELEMENT, "waypoint", many=True),
    ),
)

GPX = EntitySchema(
    "gpx",
    Gpx,
    children=(
        ChildRule("metadata", ("metadata",), Kind.ELEMENT, "metadata", versions=ONLY_11),
        # GPX 1.0 keeps the document description inline on the root.
        ChildRule("name", ("metadata", "name"), versions=ONLY_10),
        ChildRule("desc", ("metadata", "description"), versions=ONLY_10),
        ChildRule("author", ("metadata", "author", "name"), versions=ONLY_10),
        ChildRule("email", ("metadata", "author", "email"), Kind.EMAIL_ADDRESS, versions=ONLY_10),
        ChildRule("url", ("metadata", "links"), Kind.URL, versions=ONLY_10),
        ChildRule("urlname", ("metadata", "links"), Kind.URLNAME, versions=ONLY_10),
        ChildRule("time", ("metadata", "time"), Kind.TIME, versions=ONLY_10),
        ChildRule("keywords", ("metadata", "keywords"), versions=ONLY_10),
        ChildRule("bounds", ("metadata", "bounds"), Kind.ELEMENT, "bounds", versions=ONLY_10),
        ChildRule("wpt", ("waypoints",), Kind.ELEMENT, "waypoint", many=True),
        ChildRule("rte", ("routes",), Kind.ELEMENT, "route", many=True),
        ChildRule("trk", ("tracks",), Kind.ELEMENT, "track", many=True),
        ChildRule("extensions", ("extensions",), Kind.EXTENSIONS),
    ),
)

SCHEMAS: Dict[str, EntitySchema] = {
    schema.key: schema
    for schema in (
        GPX,
        METADATA,
        PERSON,
        COPYRIGHT,
        LINK,
        BOUNDS,
        WAYPOINT,
        TRACK,
        TRACK_SEGMENT,
        ROUTE,
    )
}

# Factories for intermediate objects on multi-step paths.
PATH_FACTORIES: Dict[str, Callable] = {
    "metadata": Metadata,
    "author": Person,
}


def child_disposition(version: GpxVersion, entity: str, tag: str) -> Disposition:
    """
    Decide what happens to child `tag` inside `entity` under `version`.

    `extensions` is accepted everywhere, including entities whose table does
    not list it (the captured content is then dropped).
    """
    rule = SCHEMAS[entity].allowed_children(version).get(tag)
    if rule is not None:
        return rule.disposition
    if tag == "extensions":
        return Disposition.EXTENSIONS
    return Disposition.REJECT
