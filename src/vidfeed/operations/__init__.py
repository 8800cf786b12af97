"""
Network-facing operations.
"""

from vidfeed.operations.metadata import (
    MetadataHints,
    clean_title,
    fetch_metadata_hints,
    parse_html_hints,
    parse_iso8601_duration,
    parse_oembed,
    resolve_url_redirects,
)

__all__ = [
    "MetadataHints",
    "clean_title",
    "fetch_metadata_hints",
    "parse_html_hints",
    "parse_iso8601_duration",
    "parse_oembed",
    "resolve_url_redirects",
]
