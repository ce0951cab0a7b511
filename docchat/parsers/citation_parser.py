"""Page-citation parsing for assistant messages.

Assistant answers reference document pages with tokens like ``[page 5]``.
The parser partitions a message into plain text and citation segments so a
rendering layer can turn citations into page links. The partition is lossless:
joining every segment's text gives back the original string.
"""

import logging
import re
from dataclasses import dataclass

from docchat.errors import ValidationError

logger = logging.getLogger(__name__)

CITATION_PATTERN = re.compile(r"\[page (\d+)\]", re.IGNORECASE)


@dataclass(frozen=True)
class TextSegment:
    """Plain text, kept verbatim."""

    text: str


@dataclass(frozen=True)
class CitationSegment:
    """A page citation.

    Attributes:
        page: Cited page number (positive)
        raw: The token exactly as it appeared, e.g. ``"[Page 05]"``
    """

    page: int
    raw: str

    @property
    def text(self) -> str:
        return self.raw


Segment = TextSegment | CitationSegment


def parse_page_number(digits: str) -> int:
    """Parse the number inside a citation token.

    Args:
        digits: Digit string captured from the token

    Returns:
        The page number

    Raises:
        ValidationError: If the number is not a positive integer
    """
    try:
        page = int(digits)
    except ValueError as e:
        raise ValidationError(f"Invalid page number '{digits}'") from e
    if page < 1:
        raise ValidationError(f"Page number must be positive, got {page}")
    return page


def parse_citations(text: str) -> list[Segment]:
    """Split assistant text into text and citation segments.

    Malformed tokens (e.g. ``[page 0]``) stay part of the surrounding text.
    Adjacent text is merged and empty text segments are never emitted.

    Args:
        text: Assistant message content

    Returns:
        Segments in original order
    """
    segments: list[Segment] = []
    pending: list[str] = []
    position = 0

    def flush() -> None:
        if pending:
            segments.append(TextSegment("".join(pending)))
            pending.clear()

    for match in CITATION_PATTERN.finditer(text):
        if match.start() > position:
            pending.append(text[position:match.start()])
        try:
            page = parse_page_number(match.group(1))
        except ValidationError as e:
            logger.debug(f"Treating citation token as text: {e}")
            pending.append(match.group(0))
        else:
            flush()
            segments.append(CitationSegment(page=page, raw=match.group(0)))
        position = match.end()

    if position < len(text):
        pending.append(text[position:])
    flush()

    return segments


def render_segments(segments: list[Segment]) -> str:
    """Join segments back into the original text."""
    return "".join(segment.text for segment in segments)


def cited_pages(text: str) -> list[int]:
    """Page numbers cited in the text, in order of appearance (with repeats)."""
    return [s.page for s in parse_citations(text) if isinstance(s, CitationSegment)]
