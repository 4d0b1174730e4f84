"""
GPX parse driver.

Reads a GPX 1.0 or 1.1 document into a `Gpx`:
- locate the root element and check that it is <gpx>
- settle the version (fallback for missing/unknown values)
- hand the rest of the root to the element parsers

Anything after the root's end tag is never read.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional, Union

from gpxkit.core.events import EventStream, Source, StartEvent, iter_events
from gpxkit.core.parser import ParseContext, parse_entity
from gpxkit.core.schema import GPX, is_gpx_namespace
from gpxkit.errors import InvalidRootElementError, MalformedXmlError, UnsupportedVersionError
from gpxkit.model import Gpx, GpxVersion


logger = logging.getLogger(__name__)


def resolve_version(raw: Optional[str], fallback: Optional[GpxVersion]) -> GpxVersion:
    """Map the root's version attribute to a GpxVersion, or fall back."""
    if raw is not None:
        try:
            return GpxVersion(raw.strip())
        except ValueError:
            pass
    if fallback is None:
        raise UnsupportedVersionError(raw)
    fallback = GpxVersion(fallback)
    logger.warning(f"GPX version {raw!r} not recognized, reading as {fallback}")
    return fallback


def read_gpx(
    source: Source,
    *,
    fallback_version: Optional[GpxVersion] = GpxVersion.GPX11,
    trace: Any = None,
) -> Gpx:
    """
    Read a GPX document.

    Args:
      source: bytes, str, or a readable (binary or text) file object
      fallback_version: version used when the root has no usable `version`
        attribute; None makes that an UnsupportedVersionError
      trace: optional TraceWriter-like object with `emit(event: dict)` method

    Raises:
      GpxReadError: any structural, lexical or value error (all are ValueErrors)
    """
    stream = EventStream(iter_events(source))
    try:
        root = stream.next_event()
        if not isinstance(root, StartEvent):
            raise MalformedXmlError("document has no root element")
        if root.name != "gpx" or not is_gpx_namespace(root.namespace):
            raise InvalidRootElementError(root.tag)

        version = resolve_version(root.attributes.get("version"), fallback_version)
        gpx = Gpx(version=version, creator=root.attributes.get("creator"))
        parse_entity(GPX, root, stream, ParseContext(version=version), instance=gpx)
        gpx.namespaces.update({p: uri for p, uri in stream.namespaces.items() if p})
    finally:
        stream.close()

    logger.debug(
        f"Read GPX {gpx.version}: {len(gpx.waypoints)} waypoints, "
        f"{len(gpx.routes)} routes, {len(gpx.tracks)} tracks"
    )
    if trace is not None:
        _emit_trace(gpx, trace)
    return gpx


def _emit_trace(gpx: Gpx, trace: Any) -> None:
    trace.emit(
        {
            "event": "input.gpx",
            "version": str(gpx.version),
            "creator": gpx.creator,
            "namespaces": dict(gpx.namespaces),
        }
    )
    for idx, wpt in enumerate(gpx.waypoints):
        trace.emit({"event": "input.wpt", "idx": idx, "lat": wpt.lat, "lon": wpt.lon, "name": wpt.name})
    for idx, rte in enumerate(gpx.routes):
        trace.emit({"event": "input.rte", "idx": idx, "name": rte.name, "point_count": len(rte.points)})
    for idx, trk in enumerate(gpx.tracks):
        trace.emit(
            {
                "event": "input.trk",
                "idx": idx,
                "name": trk.name,
                "segment_count": len(trk.segments),
                "point_count": sum(len(seg.points) for seg in trk.segments),
            }
        )


def read_gpx_string(data: Union[str, bytes], **kwargs: Any) -> Gpx:
    return read_gpx(data, **kwargs)


def read_gpx_file(path: Union[str, Path], **kwargs: Any) -> Gpx:
    """Read a GPX file from disk. A missing file raises FileNotFoundError."""
    p = Path(path)
    with p.open("rb") as fh:
        return read_gpx(fh, **kwargs)
