"""Navigation and document view state models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

MIN_ZOOM = 50
MAX_ZOOM = 150
ZOOM_STEP = 10
DEFAULT_ZOOM = 100


class Screen(str, Enum):
    """Top-level screens."""

    HOME = "home"
    LIBRARY = "library"
    VIEWER = "viewer"
    CHATBOT = "chatbot"


class NavigationState(BaseModel):
    """Current screen and its selections.

    ``selected_document_id`` is set for the viewer and chatbot screens,
    ``selected_chatbot_id`` for the chatbot screen only.
    """

    model_config = ConfigDict(frozen=True)

    screen: Screen = Screen.HOME
    selected_document_id: str | None = None
    selected_chatbot_id: str | None = None


class ViewState(BaseModel):
    """Pagination and zoom settings of one document view."""

    current_page: int = Field(default=1, ge=1)
    zoom: int = Field(default=DEFAULT_ZOOM, ge=MIN_ZOOM, le=MAX_ZOOM)
    is_expanded: bool = False
