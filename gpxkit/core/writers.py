"""
Element writers.

Builds `xml.etree.ElementTree` elements from the document model by walking
the version tables in `gpxkit.core.schema` front to back, so children always
come out in XSD sequence order for the target version.

Extension content is written with literal `prefix:name` tags and the
matching `xmlns:prefix` declarations are collected by a per-call
`NamespacePrefixes` (ET.register_namespace is process-global and is not
used here).
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import Any, Callable, Dict, Iterator, Optional, Set, Tuple

from gpxkit.core import normalization as norm
from gpxkit.core.schema import (
    GPX_NAMESPACES,
    MAX_EXTENSION_DEPTH,
    SCHEMAS,
    XML_NAMESPACE,
    XSI_NAMESPACE,
    ChildRule,
    EntitySchema,
    Kind,
)
from gpxkit.errors import UnwritableValueError
from gpxkit.model import Gpx, GpxVersion, XmlNode


logger = logging.getLogger(__name__)

_RESERVED_PREFIXES = frozenset({"xml", "xmlns", "xsi"})


class NamespacePrefixes:
    """
    Namespace URI -> prefix assignments for one write call.

    Prefixes seen in the source document are reused when free; anything else
    gets ns1, ns2, ...
    """

    def __init__(self, preferred: Optional[Dict[str, str]] = None):
        self._by_uri: Dict[str, str] = {}
        self._taken: Set[str] = set(_RESERVED_PREFIXES)
        self._used: Dict[str, str] = {}
        self._counter = 0
        for prefix, uri in (preferred or {}).items():
            if not prefix or prefix in self._taken:
                continue
            if uri in GPX_NAMESPACES or uri in (XSI_NAMESPACE, XML_NAMESPACE):
                continue
            if uri in self._by_uri:
                continue
            self._by_uri[uri] = prefix
            self._taken.add(prefix)

    def prefix_for(self, uri: str) -> str:
        if uri == XML_NAMESPACE:
            return "xml"
        prefix = self._by_uri.get(uri)
        if prefix is None:
            prefix = self._next_free()
            self._by_uri[uri] = prefix
            self._taken.add(prefix)
        self._used[prefix] = uri
        return prefix

    def _next_free(self) -> str:
        while True:
            self._counter += 1
            candidate = f"ns{self._counter}"
            if candidate not in self._taken:
                return candidate

    def qualify(self, name: str, namespace: Optional[str]) -> str:
        if namespace is None or namespace in GPX_NAMESPACES:
            return name
        return f"{self.prefix_for(namespace)}:{name}"

    def qualify_attribute(self, key: str) -> str:
        if key[:1] != "{":
            return key
        uri, _, local = key[1:].partition("}")
        return self.qualify(local, uri)

    def declarations(self) -> Dict[str, str]:
        """`xmlns:prefix` attributes for every prefix handed out so far."""
        return {f"xmlns:{prefix}": uri for prefix, uri in self._used.items() if prefix != "xml"}


def extension_nodes(gpx: Gpx) -> Iterator[XmlNode]:
    """Every captured extension block in document order."""

    def from_point(point) -> Iterator[XmlNode]:
        if point.extensions is not None:
            yield point.extensions

    if gpx.metadata is not None and gpx.metadata.extensions is not None:
        yield gpx.metadata.extensions
    for wpt in gpx.waypoints:
        yield from from_point(wpt)
    for rte in gpx.routes:
        if rte.extensions is not None:
            yield rte.extensions
        for point in rte.points:
            yield from from_point(point)
    for trk in gpx.tracks:
        if trk.extensions is not None:
            yield trk.extensions
        for seg in trk.segments:
            for point in seg.points:
                yield from from_point(point)
            if seg.extensions is not None:
                yield seg.extensions
    if gpx.extensions is not None:
        yield gpx.extensions


def build_xml_node(node: XmlNode, prefixes: NamespacePrefixes, depth: int = 0) -> ET.Element:
    """
    Re-create a captured XmlNode (and its subtree) as an ET element.

    `depth` counts levels below the <extensions> node; past
    MAX_EXTENSION_DEPTH the subtree is refused as UnwritableValueError.
    """
    if depth > MAX_EXTENSION_DEPTH:
        raise UnwritableValueError("extensions", f"<{node.name}> nested more than {MAX_EXTENSION_DEPTH} levels deep")
    elem = ET.Element(prefixes.qualify(node.name, node.namespace))
    for key, value in node.attributes.items():
        elem.set(prefixes.qualify_attribute(key), value)
    elem.text = node.text
    elem.tail = node.tail
    for child in node.children:
        elem.append(build_xml_node(child, prefixes, depth + 1))
    return elem


def _format_count(value: int, field: str, maximum: Optional[int] = None) -> str:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise UnwritableValueError(field, value)
    if maximum is not None and value > maximum:
        raise UnwritableValueError(field, value)
    return str(value)


SCALAR_FORMATTERS: Dict[Kind, Callable[[Any, str], str]] = {
    Kind.TEXT: lambda value, field: value,
    Kind.DECIMAL: norm.format_decimal,
    Kind.NON_NEGATIVE_INTEGER: lambda value, field: _format_count(value, field),
    Kind.DGPS_ID: lambda value, field: _format_count(value, field, norm.MAX_DGPS_ID),
    Kind.YEAR: lambda value, field: f"{int(value):04d}",
    Kind.TIME: lambda value, field: norm.format_time(value),
    Kind.FIX: lambda value, field: getattr(value, "value", value),
    Kind.EMAIL_ADDRESS: lambda value, field: "@".join(norm.split_email(value, field)),
}


def _lookup(entity: Any, rule: ChildRule) -> Any:
    """Follow the rule's path; None if any intermediate object is missing."""
    value = entity
    for step in rule.path:
        value = getattr(value, step)
        if value is None:
            return None
    return value


def _write_child(parent: ET.Element, rule: ChildRule, value: Any, version: GpxVersion, prefixes: NamespacePrefixes) -> None:
    kind = rule.kind
    if kind is Kind.ELEMENT:
        schema = SCHEMAS[rule.entity]
        for item in value if rule.many else [value]:
            parent.append(build_element(schema, item, rule.tag, version, prefixes))
    elif kind is Kind.EXTENSIONS:
        parent.append(build_xml_node(value, prefixes))
    elif kind is Kind.EMAIL:
        email_id, domain = norm.split_email(value, rule.tag)
        ET.SubElement(parent, rule.tag, {"id": email_id, "domain": domain})
    elif kind is Kind.URL:
        if value and value[0].href:
            ET.SubElement(parent, rule.tag).text = value[0].href
    elif kind is Kind.URLNAME:
        if value and value[0].text is not None:
            ET.SubElement(parent, rule.tag).text = value[0].text
    else:
        ET.SubElement(parent, rule.tag).text = SCALAR_FORMATTERS[kind](value, rule.tag)


def _overlaps(a: Tuple[str, ...], b: Tuple[str, ...]) -> bool:
    n = min(len(a), len(b))
    return a[:n] == b[:n]


def _has_value(value: Any) -> bool:
    return value is not None and value != []


def write_children(
    schema: EntitySchema,
    entity: Any,
    elem: ET.Element,
    version: GpxVersion,
    prefixes: NamespacePrefixes,
) -> ET.Element:
    """Append `entity`'s children to `elem` in XSD order for `version`."""
    emitted = schema.emitted_children(version)
    for rule in emitted:
        value = _lookup(entity, rule)
        if _has_value(value):
            _write_child(elem, rule, value, version, prefixes)

    emitted_paths = [rule.path for rule in emitted]
    for rule in schema.children:
        if version in rule.versions or any(_overlaps(rule.path, path) for path in emitted_paths):
            continue
        if _has_value(_lookup(entity, rule)):
            logger.debug(f"Omitting <{rule.tag}> in <{elem.tag}>: not part of GPX {version}")
    return elem


def build_element(
    schema: EntitySchema,
    entity: Any,
    tag: str,
    version: GpxVersion,
    prefixes: NamespacePrefixes,
) -> ET.Element:
    elem = ET.Element(tag)
    for rule in schema.attributes:
        value = getattr(entity, rule.field)
        if value is None:
            continue
        elem.set(rule.name, SCALAR_FORMATTERS[rule.kind](value, rule.name))
    return write_children(schema, entity, elem, version, prefixes)
