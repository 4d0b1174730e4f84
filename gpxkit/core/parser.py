"""
Recursive-descent element parsers.

Every entity goes through `parse_entity`: read the attributes the table
lists, then consume events until the element's end tag, dispatching each
child start tag by the rule the version table gives for it. Each call
consumes exactly the subtree it was handed, end tag included.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from gpxkit.core import normalization as norm
from gpxkit.core.events import EndEvent, EventStream, StartEvent, TextEvent
from gpxkit.core.schema import (
    MAX_EXTENSION_DEPTH,
    PATH_FACTORIES,
    SCHEMAS,
    AttributeRule,
    ChildRule,
    Disposition,
    EntitySchema,
    Kind,
    child_disposition,
    is_gpx_namespace,
)
from gpxkit.errors import (
    ExtensionTooDeepError,
    InvalidChildElementError,
    MalformedXmlError,
    MissingAttributeError,
)
from gpxkit.model import GpxVersion, Link, XmlNode


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParseContext:
    """Per-call state threaded through the parsers. Set once by the driver."""

    version: GpxVersion


SCALAR_PARSERS: Dict[Kind, Callable[[str, str], Any]] = {
    Kind.TEXT: lambda text, field: text,
    Kind.URL: lambda text, field: text,
    Kind.URLNAME: lambda text, field: text,
    Kind.DECIMAL: norm.parse_decimal,
    Kind.NON_NEGATIVE_INTEGER: norm.parse_non_negative_integer,
    Kind.DGPS_ID: norm.parse_dgps_id,
    Kind.YEAR: norm.parse_year,
    Kind.TIME: norm.parse_time,
    Kind.FIX: norm.parse_fix,
    Kind.EMAIL_ADDRESS: norm.parse_email_address,
}


def _display_name(event: StartEvent) -> str:
    return event.name if is_gpx_namespace(event.namespace) else event.tag


def read_attribute(start: StartEvent, rule: AttributeRule) -> Any:
    raw = start.attributes.get(rule.name)
    if raw is None:
        if rule.required:
            raise MissingAttributeError(rule.name, start.name)
        return None
    return SCALAR_PARSERS[rule.kind](raw, rule.name)


def read_text(start: StartEvent, stream: EventStream) -> str:
    """Accumulate the text of a scalar element. `<name/>` gives ""."""
    parts = []
    while True:
        event = stream.next_event()
        if isinstance(event, TextEvent):
            parts.append(event.text)
        elif isinstance(event, StartEvent):
            raise InvalidChildElementError(_display_name(event), start.name, event.line)
        else:
            _check_end(start, event)
            return "".join(parts)


def _significant(text: Optional[str]) -> Optional[str]:
    if text is None or not text.strip():
        return None
    return text


def capture_extensions(start: StartEvent, stream: EventStream) -> XmlNode:
    """
    Capture an element subtree verbatim as an XmlNode.

    GPX-namespaced nodes are stored with namespace None so that a document
    with and without a default namespace capture the same tree.
    Whitespace-only text and tails are dropped. Nesting deeper than
    MAX_EXTENSION_DEPTH levels raises ExtensionTooDeepError.
    """
    root = _new_node(start)
    # (start tag, node) for every element still open, innermost last
    open_elements = [(start, root)]
    while open_elements:
        opener, node = open_elements[-1]
        event = stream.next_event()
        if isinstance(event, StartEvent):
            if len(open_elements) > MAX_EXTENSION_DEPTH:
                raise ExtensionTooDeepError(MAX_EXTENSION_DEPTH, event.line)
            child = _new_node(event)
            node.children.append(child)
            open_elements.append((event, child))
        elif isinstance(event, TextEvent):
            if node.children:
                last = node.children[-1]
                last.tail = (last.tail or "") + event.text
            else:
                node.text = (node.text or "") + event.text
        else:
            _check_end(opener, event)
            node.text = _significant(node.text)
            for child in node.children:
                child.tail = _significant(child.tail)
            open_elements.pop()
    return root


def _new_node(start: StartEvent) -> XmlNode:
    namespace = None if is_gpx_namespace(start.namespace) else start.namespace
    return XmlNode(name=start.name, namespace=namespace, attributes=dict(start.attributes))


def _check_end(start: StartEvent, end: EndEvent) -> None:
    if end.name != start.name or end.namespace != start.namespace:
        raise MalformedXmlError(f"mismatched end tag </{end.name}> for <{start.name}>")


def _owner(entity: Any, rule: ChildRule) -> Any:
    """Walk all but the last path step, creating intermediate objects."""
    owner = entity
    for step in rule.path[:-1]:
        child = getattr(owner, step)
        if child is None:
            child = PATH_FACTORIES[step]()
            setattr(owner, step, child)
        owner = child
    return owner


def _attach(entity: Any, rule: ChildRule, value: Any) -> None:
    owner = _owner(entity, rule)
    if rule.kind in (Kind.URL, Kind.URLNAME):
        links = getattr(owner, rule.field)
        if not links:
            links.append(Link(href=""))
        if rule.kind is Kind.URL:
            links[0].href = value
        else:
            links[0].text = value
    elif rule.many:
        getattr(owner, rule.field).append(value)
    else:
        # repeated single-valued children: last one wins
        setattr(owner, rule.field, value)


def _parse_child(rule: ChildRule, start: StartEvent, stream: EventStream, ctx: ParseContext) -> Any:
    if rule.kind is Kind.ELEMENT:
        return parse_entity(SCHEMAS[rule.entity], start, stream, ctx)
    if rule.kind is Kind.EXTENSIONS:
        return capture_extensions(start, stream)
    if rule.kind is Kind.EMAIL:
        email_id = read_attribute(start, AttributeRule("id", "id"))
        domain = read_attribute(start, AttributeRule("domain", "domain"))
        read_text(start, stream)
        return norm.parse_email(email_id, domain, rule.tag)
    return SCALAR_PARSERS[rule.kind](read_text(start, stream), rule.tag)


def parse_entity(
    schema: EntitySchema,
    start: StartEvent,
    stream: EventStream,
    ctx: ParseContext,
    instance: Any = None,
) -> Any:
    """
    Parse the element opened by `start` into a new `schema.factory` object.

    Pass `instance` to fill an existing object instead (the driver does this
    for the root so it can set version and creator first).
    """
    if instance is None:
        kwargs = {rule.field: read_attribute(start, rule) for rule in schema.attributes}
        instance = schema.factory(**kwargs)

    allowed = schema.allowed_children(ctx.version)
    while True:
        event = stream.next_event()
        if isinstance(event, EndEvent):
            _check_end(start, event)
            return instance
        if isinstance(event, TextEvent):
            if event.text.strip():
                logger.debug(f"Ignoring text inside <{start.name}>: {event.text.strip()[:40]!r}")
            continue

        if not is_gpx_namespace(event.namespace):
            raise InvalidChildElementError(_display_name(event), start.name, event.line)
        rule = allowed.get(event.name)
        if rule is not None:
            _attach(instance, rule, _parse_child(rule, event, stream, ctx))
        elif child_disposition(ctx.version, schema.key, event.name) is Disposition.EXTENSIONS:
            capture_extensions(event, stream)
            logger.debug(f"Dropping <extensions> inside <{start.name}>: no place to keep it")
        else:
            raise InvalidChildElementError(_display_name(event), start.name, event.line)
