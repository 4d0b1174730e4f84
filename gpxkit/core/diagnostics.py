"""
Diagnostics helpers.

Summaries of a parsed document, used by `gpxkit info` and handy next to
JSONL trace logs when a file reads differently than expected.
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Dict, Optional

from gpxkit.core.writers import extension_nodes
from gpxkit.model import Gpx, GpxVersion


def document_inventory(gpx: Gpx) -> Dict[str, Any]:
    metadata = gpx.metadata
    bounds = metadata.bounds if metadata is not None else None
    return {
        "version": str(gpx.version),
        "creator": gpx.creator,
        "name": metadata.name if metadata is not None else None,
        "waypoint_count": len(gpx.waypoints),
        "route_count": len(gpx.routes),
        "route_point_count": sum(1 for _ in gpx.route_points()),
        "track_count": len(gpx.tracks),
        "segment_count": sum(len(trk.segments) for trk in gpx.tracks),
        "track_point_count": sum(1 for _ in gpx.track_points()),
        "extension_count": sum(1 for _ in extension_nodes(gpx)),
        "bounds": (
            None
            if bounds is None
            else {
                "min_lat": bounds.min_lat,
                "min_lon": bounds.min_lon,
                "max_lat": bounds.max_lat,
                "max_lon": bounds.max_lon,
            }
        ),
    }


def extension_namespaces(gpx: Gpx) -> Dict[Optional[str], int]:
    """How many captured elements each namespace contributes (None = GPX's own)."""
    counts: Counter = Counter()
    for block in extension_nodes(gpx):
        for node in block.children:
            for inner in node.iter():
                counts[inner.namespace] += 1
    return dict(counts)


def version_narrowing_report(gpx: Gpx, target: GpxVersion) -> Dict[str, int]:
    """
    Count values a write as `target` would drop. Zero counts are left out.

    Used by `gpxkit convert` to warn before narrowing.
    """
    points = list(gpx.waypoints) + list(gpx.route_points()) + list(gpx.track_points())
    report: Dict[str, int] = {}
    if target is GpxVersion.GPX11:
        report["speed"] = sum(1 for p in points if p.speed is not None)
        report["course"] = sum(1 for p in points if p.course is not None)
    else:
        owners = points + list(gpx.routes) + list(gpx.tracks)
        report["type"] = sum(1 for o in list(gpx.routes) + list(gpx.tracks) if o.type is not None)
        # 1.0 has a single url/urlname pair per element
        report["link"] = sum(max(len(o.links) - 1, 0) for o in owners)
        metadata = gpx.metadata
        if metadata is not None:
            report["copyright"] = int(metadata.copyright is not None)
            report["metadata extensions"] = int(metadata.extensions is not None)
    return {key: count for key, count in report.items() if count}
