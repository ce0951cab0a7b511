"""Tests for Pydantic models."""

import pytest
from pydantic import ValidationError

from docchat.errors import TransportError
from docchat.models import (
    ChatResponse,
    ChatSession,
    Completion,
    Document,
    Message,
    RelatedDocument,
    Role,
    Snapshot,
    ViewState,
    format_file_size,
)


@pytest.mark.parametrize(
    "num_bytes,expected",
    [
        (0, "0 B"),
        (1023, "1023 B"),
        (1536, "1.50 KB"),
        (2 * 1024 * 1024, "2.00 MB"),
    ],
)
def test_format_file_size(num_bytes, expected):
    assert format_file_size(num_bytes) == expected


def test_document_requires_positive_page_count():
    with pytest.raises(ValidationError) as exc_info:
        Document(id="doc-1", page_count=0)

    assert "page_count" in str(exc_info.value)


def test_document_requires_id():
    with pytest.raises(ValidationError):
        Document(id="")


def test_related_document_page_must_be_positive():
    with pytest.raises(ValidationError):
        RelatedDocument(document_id="doc-1", document_name="a.pdf", page=0)


def test_message_role_from_string():
    message = Message(id="m1", role="assistant", content="hi")

    assert message.role is Role.ASSISTANT


def test_chat_session_helpers():
    session = ChatSession(
        id="c1",
        document_id="doc-1",
        messages=(Message(id="m1", role=Role.USER), Message(id="m2", role=Role.ASSISTANT)),
    )

    assert session.last_message.id == "m2"
    assert session.has_message("m1")
    assert not session.has_message("m3")
    assert ChatSession(id="c2", document_id="doc-1").last_message is None


def test_view_state_bounds():
    with pytest.raises(ValidationError):
        ViewState(zoom=160)
    with pytest.raises(ValidationError):
        ViewState(current_page=0)


def test_chat_response_text_prefers_answer():
    assert ChatResponse(success=True, answer="a", response="b").text == "a"
    assert ChatResponse(success=True, response="b").text == "b"
    assert ChatResponse(success=False).text is None


def test_completion_variants():
    ok = Completion.success(42)
    failed = Completion.failure(TransportError("boom"))

    assert ok.ok and ok.value == 42
    assert not failed.ok and failed.value is None
    assert str(failed.error) == "boom"


def test_snapshot_defaults():
    snapshot = Snapshot()

    assert snapshot.version == 1
    assert snapshot.is_empty
    assert snapshot.navigation.screen.value == "home"
