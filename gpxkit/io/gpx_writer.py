"""
GPX write driver.

Serializes a `Gpx` as UTF-8 XML for GPX 1.0 or 1.1. Fields the target
version has no place for are dropped (see gpxkit.core.writers).
"""

from __future__ import annotations

import io
import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import IO, Optional, Union

from gpxkit.core.schema import GPX, NAMESPACES, SCHEMA_LOCATIONS, XSI_NAMESPACE
from gpxkit.core.writers import NamespacePrefixes, write_children
from gpxkit.errors import SinkWriteError
from gpxkit.model import Gpx, GpxVersion


logger = logging.getLogger(__name__)

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'


def build_gpx_element(
    gpx: Gpx,
    *,
    version: Optional[GpxVersion] = None,
    creator: Optional[str] = None,
) -> ET.Element:
    """Build the <gpx> root element, with all content, for `version`."""
    version = GpxVersion(version) if version is not None else gpx.version
    root = ET.Element("gpx")
    root.set("xmlns", NAMESPACES[version])
    root.set("xmlns:xsi", XSI_NAMESPACE)
    root.set("version", str(version))
    creator = gpx.creator if gpx.creator is not None else creator
    if creator is not None:
        root.set("creator", creator)
    root.set("xsi:schemaLocation", SCHEMA_LOCATIONS[version])

    prefixes = NamespacePrefixes(gpx.namespaces)
    write_children(GPX, gpx, root, version, prefixes)
    for key, uri in prefixes.declarations().items():
        root.set(key, uri)

    if version != gpx.version:
        logger.debug(f"Writing GPX {gpx.version} document as GPX {version}")
    return root


def write_gpx_string(
    gpx: Gpx,
    *,
    version: Optional[GpxVersion] = None,
    indent: Optional[str] = "  ",
    creator: Optional[str] = None,
) -> str:
    """Serialize `gpx` to a string (declaration included). indent=None or "" writes compact XML."""
    root = build_gpx_element(gpx, version=version, creator=creator)
    if indent:
        ET.indent(root, space=indent)
    return XML_DECLARATION + ET.tostring(root, encoding="unicode") + "\n"


def write_gpx(
    gpx: Gpx,
    sink: IO,
    *,
    version: Optional[GpxVersion] = None,
    indent: Optional[str] = "  ",
    creator: Optional[str] = None,
) -> None:
    """
    Write `gpx` to a binary (or text) file object.

    Raises:
      UnwritableValueError: a model value has no XML form
      SinkWriteError: the sink failed; its contents are undefined
    """
    text = write_gpx_string(gpx, version=version, indent=indent, creator=creator)
    data = text if isinstance(sink, io.TextIOBase) else text.encode("utf-8")
    try:
        sink.write(data)
    except (OSError, ValueError) as e:
        raise SinkWriteError(f"Failed to write GPX output: {e}") from e


def write_gpx_file(
    gpx: Gpx,
    path: Union[str, Path],
    *,
    version: Optional[GpxVersion] = None,
    indent: Optional[str] = "  ",
    creator: Optional[str] = None,
) -> int:
    """Write `gpx` to `path`. Returns the size of the written file in bytes."""
    p = Path(path)
    try:
        fh = p.open("wb")
    except OSError as e:
        raise SinkWriteError(f"Cannot open {p} for writing: {e}") from e
    with fh:
        write_gpx(gpx, fh, version=version, indent=indent, creator=creator)
    return p.stat().st_size
