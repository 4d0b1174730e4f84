"""
Exceptions raised by gpxkit.

Every failure is terminal for the current read or write call; there is no
partial document and nothing is retried. Read-side errors are also
`ValueError`s, so callers that only catch ValueError keep working.
"""

from __future__ import annotations

from typing import Optional


class GpxError(Exception):
    """Base class for all gpxkit errors."""


class GpxReadError(GpxError, ValueError):
    """The input could not be turned into a document."""


class MalformedXmlError(GpxReadError):
    """The XML tokenizer rejected the input."""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.line = line
        self.column = column
        if line is not None:
            message = f"{message} (line {line}, column {column})"
        super().__init__(f"Invalid GPX file (XML parse error): {message}")


class InvalidRootElementError(GpxReadError):
    def __init__(self, tag: str):
        self.tag = tag
        super().__init__(f"Document does not appear to be a GPX file (root element: {tag})")


class UnsupportedVersionError(GpxReadError):
    def __init__(self, version: Optional[str]):
        self.version = version
        super().__init__(f"Unsupported GPX version: {version!r}")


class InvalidChildElementError(GpxReadError):
    """A start tag appeared where its parent does not allow it."""

    def __init__(self, child: str, parent: str, line: Optional[int] = None):
        self.child = child
        self.parent = parent
        self.line = line
        message = f"invalid child element '{child}' in <{parent}>"
        if line is not None:
            message += f" (line {line})"
        super().__init__(message)


class InvalidScalarValueError(GpxReadError):
    """A number, time or enumeration field holds text that does not parse."""

    def __init__(self, field: str, value: str, expected: str = "value"):
        self.field = field
        self.value = value
        self.expected = expected
        super().__init__(f"invalid {expected} in '{field}': {value!r}")


class ExtensionTooDeepError(GpxReadError):
    """Extension content nests deeper than gpxkit will follow."""

    def __init__(self, limit: int, line: Optional[int] = None):
        self.limit = limit
        self.line = line
        message = f"<extensions> content nested more than {limit} levels deep"
        if line is not None:
            message += f" (line {line})"
        super().__init__(message)


class MissingAttributeError(GpxReadError):
    def __init__(self, attribute: str, element: str):
        self.attribute = attribute
        self.element = element
        super().__init__(f"<{element}> lacks required attribute '{attribute}'")


class GpxWriteError(GpxError):
    """The document could not be written."""


class UnwritableValueError(GpxWriteError, ValueError):
    """A model value has no XML representation (e.g. an email without '@')."""

    def __init__(self, field: str, value: object):
        self.field = field
        self.value = value
        super().__init__(f"cannot write <{field}>: {value!r}")


class SinkWriteError(GpxWriteError):
    """The output sink rejected a write; whatever was flushed is unusable."""
