"""Core functionality modules for gpxkit."""

__all__ = [
    "schema",
    "events",
    "parser",
    "writers",
    "normalization",
    "config",
    "trace",
    "diagnostics",
]
