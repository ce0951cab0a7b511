"""Document view state."""

from docchat.viewer.pagination import PageCountSource, PaginationController

__all__ = ["PageCountSource", "PaginationController"]
