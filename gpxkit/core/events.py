"""
XML event source.

Turns GPX bytes into a flat stream of Start / End / Text events. Tokenizing
is delegated to expat through defusedxml's hardened parser (no entity
expansion, no external references); a small target object records the
callbacks as events instead of building a tree.

Events are drained after every fed chunk, so the consumer can stop as soon
as the root element closes and whatever follows it is never looked at.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import IO, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from defusedxml import DefusedXmlException
from defusedxml.ElementTree import DefusedXMLParser, ParseError

from gpxkit.errors import MalformedXmlError


CHUNK_SIZE = 64 * 1024

Source = Union[str, bytes, bytearray, IO[bytes], IO[str]]


def split_tag(tag: str) -> Tuple[str, Optional[str]]:
    """'{uri}local' -> ('local', 'uri'); 'local' -> ('local', None)."""
    if tag[:1] == "{":
        uri, _, local = tag[1:].partition("}")
        return local, uri
    return tag, None


@dataclass(frozen=True)
class StartEvent:
    name: str
    namespace: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)
    line: Optional[int] = None

    @property
    def tag(self) -> str:
        """Clark-notation name, used when reporting foreign elements."""
        if self.namespace:
            return f"{{{self.namespace}}}{self.name}"
        return self.name


@dataclass(frozen=True)
class EndEvent:
    name: str
    namespace: Optional[str] = None


@dataclass(frozen=True)
class TextEvent:
    text: str


@dataclass(frozen=True)
class NamespaceEvent:
    prefix: str
    uri: str


XmlEvent = Union[StartEvent, EndEvent, TextEvent, NamespaceEvent]


class _EventCollector:
    """Parser target that records callbacks instead of building elements."""

    def __init__(self) -> None:
        self.events: List[XmlEvent] = []
        self.parser: Optional[DefusedXMLParser] = None
        self._text: List[str] = []

    def _line(self) -> Optional[int]:
        if self.parser is None:
            return None
        return self.parser.parser.CurrentLineNumber

    def start_ns(self, prefix: str, uri: str) -> None:
        self._flush_text()
        self.events.append(NamespaceEvent(prefix or "", uri))

    def _flush_text(self) -> None:
        # expat splits character data at line breaks, entities and chunk edges
        if self._text:
            self.events.append(TextEvent("".join(self._text)))
            self._text = []

    def start(self, tag: str, attrib: Dict[str, str]) -> None:
        self._flush_text()
        name, namespace = split_tag(tag)
        self.events.append(StartEvent(name, namespace, dict(attrib), self._line()))

    def end(self, tag: str) -> None:
        self._flush_text()
        name, namespace = split_tag(tag)
        self.events.append(EndEvent(name, namespace))

    def data(self, text: str) -> None:
        self._text.append(text)

    def close(self) -> None:
        return None

    def drain(self) -> List[XmlEvent]:
        events, self.events = self.events, []
        return events


def _chunks(source: Source) -> Iterator[Union[str, bytes]]:
    if isinstance(source, (str, bytes)):
        yield source
        return
    if isinstance(source, bytearray):
        yield bytes(source)
        return
    while True:
        chunk = source.read(CHUNK_SIZE)
        if not chunk:
            return
        yield chunk


def iter_events(source: Source) -> Iterator[XmlEvent]:
    """
    Yield XML events for `source` (bytes, str or a readable file object).

    Raises MalformedXmlError at the point the tokenizer rejects the input.
    Events collected before the failure are yielded first.
    """
    collector = _EventCollector()
    parser = DefusedXMLParser(
        target=collector,
        forbid_dtd=False,
        forbid_entities=True,
        forbid_external=True,
    )
    collector.parser = parser
    fed = False
    try:
        for chunk in _chunks(source):
            fed = True
            parser.feed(chunk)
            yield from collector.drain()
        if not fed:
            raise MalformedXmlError("empty document")
        parser.close()
        yield from collector.drain()
    except ParseError as e:
        yield from collector.drain()
        line, column = getattr(e, "position", (None, None))
        raise MalformedXmlError(str(e), line, column) from e
    except DefusedXmlException as e:
        yield from collector.drain()
        raise MalformedXmlError(str(e)) from e


class EventStream:
    """
    Pull-style wrapper used by the element parsers.

    Namespace declarations are recorded in `namespaces` (first binding of a
    prefix wins) and never handed to the parsers.
    """

    def __init__(self, events: Iterable[XmlEvent]):
        self._events = iter(events)
        self.namespaces: Dict[str, str] = {}

    def __iter__(self) -> "EventStream":
        return self

    def __next__(self) -> XmlEvent:
        while True:
            event = next(self._events)
            if isinstance(event, NamespaceEvent):
                self.namespaces.setdefault(event.prefix, event.uri)
                continue
            return event

    def next_event(self) -> XmlEvent:
        try:
            return next(self)
        except StopIteration:
            raise MalformedXmlError("unexpected end of document") from None

    def close(self) -> None:
        close = getattr(self._events, "close", None)
        if close is not None:
            close()
