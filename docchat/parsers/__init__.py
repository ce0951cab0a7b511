"""Text parsers."""

from docchat.parsers.citation_parser import (
    CitationSegment,
    TextSegment,
    cited_pages,
    parse_citations,
    render_segments,
)

__all__ = [
    "CitationSegment",
    "TextSegment",
    "cited_pages",
    "parse_citations",
    "render_segments",
]
