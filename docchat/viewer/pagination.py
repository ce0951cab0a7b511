"""Pagination and zoom state for a document view."""

import logging
import re
from enum import Enum

from docchat.errors import ValidationError
from docchat.models.navigation import (
    DEFAULT_ZOOM,
    MAX_ZOOM,
    MIN_ZOOM,
    ZOOM_STEP,
    ViewState,
)

logger = logging.getLogger(__name__)

PAGE_HINT_PATTERN = re.compile(r"(\d+)\s+pages?", re.IGNORECASE)


class PageCountSource(str, Enum):
    """Where the current page count came from."""

    DEFAULT = "default"
    HINT = "hint"
    AUTHORITATIVE = "authoritative"


def validate_page(page: int, page_count: int) -> int:
    """Check a page number against the document bounds.

    Raises:
        ValidationError: If the page is outside ``[1, page_count]``
    """
    if page < 1 or page > page_count:
        raise ValidationError(f"Page {page} is outside [1, {page_count}]")
    return page


def find_page_hint(content: str) -> int | None:
    """Find a textual ``N pages`` hint in document content.

    Args:
        content: Document text or summary

    Returns:
        The first positive count found, or None
    """
    for match in PAGE_HINT_PATTERN.finditer(content or ""):
        count = int(match.group(1))
        if count >= 1:
            return count
    return None


class PaginationController:
    """Tracks current page and zoom for one open document view.

    All movement clamps silently. The page count may change after the view
    has rendered: a provisional guess (``apply_page_hint``) is replaced by the
    backend's authoritative value (``set_page_count``) and never the other way
    round.
    """

    def __init__(
        self,
        document_id: str,
        page_count: int = 1,
        authoritative: bool = False,
    ):
        """Initialize controller.

        Args:
            document_id: Document shown by the view
            page_count: Initial page count
            authoritative: Whether page_count already came from the backend
        """
        self.document_id = document_id
        self.page_count = max(1, page_count)
        self.page_count_source = (
            PageCountSource.AUTHORITATIVE if authoritative else PageCountSource.DEFAULT
        )
        self.state = ViewState()

    @property
    def current_page(self) -> int:
        return self.state.current_page

    @property
    def zoom(self) -> int:
        return self.state.zoom

    @property
    def is_expanded(self) -> bool:
        return self.state.is_expanded

    @property
    def has_authoritative_count(self) -> bool:
        return self.page_count_source is PageCountSource.AUTHORITATIVE

    def _set_page(self, page: int) -> None:
        self.state = self.state.model_copy(
            update={"current_page": min(max(page, 1), self.page_count)}
        )

    def _set_zoom(self, zoom: int) -> None:
        self.state = self.state.model_copy(
            update={"zoom": min(max(zoom, MIN_ZOOM), MAX_ZOOM)}
        )

    def next_page(self) -> None:
        self._set_page(self.current_page + 1)

    def prev_page(self) -> None:
        self._set_page(self.current_page - 1)

    def zoom_in(self) -> None:
        self._set_zoom(self.zoom + ZOOM_STEP)

    def zoom_out(self) -> None:
        self._set_zoom(self.zoom - ZOOM_STEP)

    def set_page_count(self, page_count: int) -> None:
        """Apply the authoritative page count from the backend.

        Counts below 1 are treated as 1. The current page is re-clamped.
        """
        if page_count < 1:
            logger.warning(
                f"Backend reported {page_count} pages for {self.document_id}, using 1"
            )
            page_count = 1
        self.page_count = page_count
        self.page_count_source = PageCountSource.AUTHORITATIVE
        self._set_page(self.current_page)
        logger.debug(f"Page count for {self.document_id} set to {page_count}")

    def apply_page_hint(self, content: str) -> bool:
        """Derive a provisional page count from document content.

        Ignored once an authoritative count is known.

        Args:
            content: Document text to scan for an ``N pages`` hint

        Returns:
            True if a hint was found and applied
        """
        if self.has_authoritative_count:
            return False
        hint = find_page_hint(content)
        if hint is None:
            return False
        self.page_count = hint
        self.page_count_source = PageCountSource.HINT
        self._set_page(self.current_page)
        logger.debug(f"Provisional page count for {self.document_id}: {hint}")
        return True

    def jump_to_page(self, page: int) -> bool:
        """Move to a specific page, ignoring out-of-range requests.

        Page numbers typically come from citation text, which is untrusted.

        Returns:
            True if the request was applied
        """
        try:
            validate_page(page, self.page_count)
        except ValidationError as e:
            logger.debug(f"Ignoring page jump for {self.document_id}: {e}")
            return False
        self._set_page(page)
        return True

    def expand(self) -> None:
        self.state = self.state.model_copy(update={"is_expanded": True})

    def collapse(self) -> None:
        self.state = self.state.model_copy(update={"is_expanded": False})

    def toggle_expanded(self) -> None:
        self.state = self.state.model_copy(update={"is_expanded": not self.is_expanded})

    def reset(self) -> None:
        """Return to page 1 at default zoom, keeping the page count."""
        self.state = ViewState(zoom=DEFAULT_ZOOM)
