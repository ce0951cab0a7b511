"""Document-related Pydantic models."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

# Upload time assumed for snapshots written before the field existed
EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


class Document(BaseModel):
    """An uploaded document and its derived metadata.

    The id is assigned by the upload service (its ``session_id``). Defaults
    exist so that partial snapshots can still be loaded.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1, description="Backend-assigned document id")
    name: str = Field(default="Untitled document", description="Original file name")
    uploaded_at: datetime = Field(default=EPOCH, description="Upload completion time (UTC)")
    size_label: str = Field(default="", description="Human readable file size")
    content: str = Field(default="", description="Opaque summary or extracted text")
    page_count: int = Field(default=1, ge=1, description="Number of pages (at least 1)")
    page_count_authoritative: bool = Field(
        default=False,
        description="Whether page_count was reported by the backend",
    )


def format_file_size(num_bytes: int) -> str:
    """Format a byte count for display.

    Args:
        num_bytes: Size in bytes

    Returns:
        Size label such as ``"512 B"``, ``"1.50 KB"`` or ``"2.00 MB"``
    """
    if num_bytes < 1024:
        return f"{num_bytes} B"
    if num_bytes < 1024 * 1024:
        return f"{num_bytes / 1024:.2f} KB"
    return f"{num_bytes / (1024 * 1024):.2f} MB"
