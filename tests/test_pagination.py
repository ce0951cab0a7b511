"""Tests for the pagination/zoom controller."""

from hypothesis import given, settings
from hypothesis import strategies as st

from docchat.viewer.pagination import (
    PageCountSource,
    PaginationController,
    find_page_hint,
)


class TestPageMovement:
    """Unit tests for page navigation."""

    def test_initial_state(self):
        view = PaginationController("doc-1", page_count=5)

        assert view.current_page == 1
        assert view.zoom == 100
        assert view.is_expanded is False
        assert view.page_count_source is PageCountSource.DEFAULT

    def test_next_and_prev_clamp_at_bounds(self):
        view = PaginationController("doc-1", page_count=3)

        for _ in range(5):
            view.next_page()
        assert view.current_page == 3

        for _ in range(5):
            view.prev_page()
        assert view.current_page == 1

    def test_jump_to_page_in_range(self):
        view = PaginationController("doc-1", page_count=12)

        assert view.jump_to_page(5) is True
        assert view.current_page == 5

    def test_jump_to_page_out_of_range_is_ignored(self):
        view = PaginationController("doc-1", page_count=12)
        view.jump_to_page(4)

        assert view.jump_to_page(99) is False
        assert view.jump_to_page(0) is False
        assert view.jump_to_page(-2) is False
        assert view.current_page == 4

    def test_page_count_below_one_is_raised_to_one(self):
        view = PaginationController("doc-1", page_count=0)

        assert view.page_count == 1


class TestZoom:
    """Unit tests for zoom control."""

    def test_zoom_steps_by_ten(self):
        view = PaginationController("doc-1")

        view.zoom_in()
        assert view.zoom == 110
        view.zoom_out()
        view.zoom_out()
        assert view.zoom == 90

    def test_zoom_clamps(self):
        view = PaginationController("doc-1")

        for _ in range(10):
            view.zoom_in()
        assert view.zoom == 150

        for _ in range(20):
            view.zoom_out()
        assert view.zoom == 50


class TestPageCount:
    """Unit tests for page count updates."""

    def test_authoritative_count_reclamps_current_page(self):
        view = PaginationController("doc-1", page_count=10)
        view.jump_to_page(8)

        view.set_page_count(5)

        assert view.page_count == 5
        assert view.current_page == 5
        assert view.page_count_source is PageCountSource.AUTHORITATIVE

    def test_authoritative_count_below_one(self):
        view = PaginationController("doc-1", page_count=10)

        view.set_page_count(0)

        assert view.page_count == 1
        assert view.current_page == 1

    def test_page_hint_is_provisional(self):
        view = PaginationController("doc-1")

        assert view.apply_page_hint("This report has 12 pages.") is True
        assert view.page_count == 12
        assert view.page_count_source is PageCountSource.HINT

        view.set_page_count(4)
        assert view.apply_page_hint("Actually 99 pages") is False
        assert view.page_count == 4

    def test_page_hint_ignored_when_already_authoritative(self):
        view = PaginationController("doc-1", page_count=7, authoritative=True)

        assert view.apply_page_hint("3 pages") is False
        assert view.page_count == 7

    def test_page_hint_without_match(self):
        view = PaginationController("doc-1", page_count=2)

        assert view.apply_page_hint("no count here") is False
        assert view.page_count == 2

    def test_find_page_hint(self):
        assert find_page_hint("1 page") == 1
        assert find_page_hint("0 pages, then 3 PAGES") == 3
        assert find_page_hint("") is None


class TestExpansion:
    """Unit tests for layout state."""

    def test_expand_collapse_toggle(self):
        view = PaginationController("doc-1")

        view.expand()
        assert view.is_expanded is True
        view.collapse()
        assert view.is_expanded is False
        view.toggle_expanded()
        assert view.is_expanded is True

    def test_reset_keeps_page_count(self):
        view = PaginationController("doc-1", page_count=6)
        view.jump_to_page(4)
        view.zoom_in()
        view.expand()

        view.reset()

        assert view.current_page == 1
        assert view.zoom == 100
        assert view.is_expanded is False
        assert view.page_count == 6


@given(
    page_count=st.integers(min_value=1, max_value=30),
    operations=st.lists(
        st.one_of(
            st.sampled_from(["next", "prev", "zoom_in", "zoom_out"]),
            st.tuples(st.just("jump"), st.integers(min_value=-5, max_value=40)),
            st.tuples(st.just("count"), st.integers(min_value=-2, max_value=30)),
        ),
        max_size=60,
    ),
)
@settings(max_examples=200, deadline=None)
def test_state_never_leaves_bounds(page_count, operations):
    """No sequence of operations moves page or zoom out of bounds."""
    view = PaginationController("doc-1", page_count=page_count)
    simple = {
        "next": view.next_page,
        "prev": view.prev_page,
        "zoom_in": view.zoom_in,
        "zoom_out": view.zoom_out,
    }

    for operation in operations:
        if isinstance(operation, tuple):
            name, value = operation
            if name == "jump":
                view.jump_to_page(value)
            else:
                view.set_page_count(value)
        else:
            simple[operation]()

        assert 1 <= view.current_page <= view.page_count
        assert 50 <= view.zoom <= 150
        assert view.zoom % 10 == 0
