"""HTTP client for the document-processing/chat backend."""

import asyncio
import logging
import urllib.parse
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as ModelValidationError

from docchat.errors import TransportError, ValidationError
from docchat.models.backend import (
    AckResponse,
    ChatRequest,
    ChatResponse,
    Completion,
    DocumentInfoResponse,
    ImageSearchRequest,
    ImageSearchResponse,
    SessionsResponse,
    UploadResponse,
)

logger = logging.getLogger(__name__)

ResponseT = TypeVar("ResponseT", bound=BaseModel)


class BackendClient:
    """Client for the backend API with retry logic and error handling.

    Every call returns a ``Completion``: transport failures, HTTP errors,
    malformed payloads and ``success=false`` responses all become a failed
    completion carrying a ``TransportError``. Nothing is raised for them.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:5006/api",
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_backoff: float = 1.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize backend client.

        Args:
            base_url: API base URL without trailing slash
            timeout: Request timeout in seconds (default: 30.0)
            max_retries: Maximum number of attempts (default: 3)
            retry_backoff: Base delay for exponential backoff in seconds
            http_client: Preconfigured httpx client (creates default if None)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff
        self.client = http_client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self.client.aclose()

    async def _request_with_retry(
        self,
        method: str,
        path: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request, retrying transport errors and 5xx responses.

        Delays grow exponentially: backoff, 2 * backoff, 4 * backoff, ...

        Raises:
            TransportError: If all attempts fail
        """
        url = f"{self.base_url}{path}"
        last_error: TransportError | None = None

        for attempt in range(self.max_retries):
            try:
                response = await self.client.request(method, url, **kwargs)
            except httpx.HTTPError as e:
                last_error = TransportError(f"{type(e).__name__}: {e}")
            else:
                if response.status_code < 500:
                    return response
                last_error = TransportError(
                    f"Server error {response.status_code}: {response.reason_phrase}",
                    status_code=response.status_code,
                )

            if attempt < self.max_retries - 1:
                delay = self.retry_backoff * (2 ** attempt)
                logger.warning(
                    f"Backend call {method} {path} failed "
                    f"(attempt {attempt + 1}/{self.max_retries}): {last_error}. "
                    f"Retrying in {delay}s..."
                )
                await asyncio.sleep(delay)
            else:
                logger.error(
                    f"Backend call {method} {path} failed after "
                    f"{self.max_retries} attempts: {last_error}"
                )

        raise last_error

    async def _call(
        self,
        operation: str,
        response_model: type[ResponseT],
        method: str,
        path: str,
        **kwargs: Any,
    ) -> Completion[ResponseT]:
        try:
            response = await self._request_with_retry(method, path, **kwargs)
        except TransportError as e:
            return Completion.failure(TransportError(f"{operation} failed: {e}", e.status_code))

        if response.status_code >= 400:
            return Completion.failure(
                TransportError(
                    f"{operation} failed: {response.reason_phrase}",
                    status_code=response.status_code,
                )
            )

        try:
            payload = response_model.model_validate(response.json())
        except (ModelValidationError, ValueError) as e:
            logger.warning(f"Malformed {operation} response: {e}")
            return Completion.failure(TransportError(f"{operation} failed: malformed response"))

        if not getattr(payload, "success", False):
            error = getattr(payload, "error", None) or "backend reported failure"
            return Completion.failure(TransportError(f"{operation} failed: {error}"))

        return Completion.success(payload)

    async def upload(
        self,
        file_name: str,
        data: bytes,
        content_type: str = "application/octet-stream",
    ) -> Completion[UploadResponse]:
        """Upload a document for processing.

        Args:
            file_name: Original file name
            data: File content
            content_type: MIME type of the file

        Returns:
            Completion with the backend session id and page count
        """
        logger.info(f"Uploading {file_name} ({len(data)} bytes)")
        return await self._call(
            "Upload",
            UploadResponse,
            "POST",
            "/upload",
            files={"file": (file_name, data, content_type)},
        )

    async def send_chat(self, session_id: str, message: str) -> Completion[ChatResponse]:
        """Ask the backend a question about a document.

        Args:
            session_id: Backend session id of the document
            message: User question

        Returns:
            Completion with the assistant answer
        """
        request = ChatRequest(session_id=session_id, message=message)
        completion = await self._call(
            "Chat",
            ChatResponse,
            "POST",
            "/chat",
            json=request.model_dump(),
        )
        if completion.ok and not completion.value.text:
            return Completion.failure(TransportError("Chat failed: Failed to get response"))
        return completion

    async def get_document_info(self, session_id: str) -> Completion[DocumentInfoResponse]:
        """Fetch document metadata (authoritative page count)."""
        return await self._call(
            "Get document info",
            DocumentInfoResponse,
            "GET",
            f"/document-info/{urllib.parse.quote(session_id, safe='')}",
        )

    async def list_sessions(self) -> Completion[SessionsResponse]:
        """List the document sessions the backend still holds."""
        return await self._call("Get sessions", SessionsResponse, "GET", "/sessions")

    async def delete_session(self, session_id: str) -> Completion[AckResponse]:
        """Delete a document session and its chat history on the backend."""
        logger.info(f"Deleting backend session {session_id}")
        return await self._call(
            "Delete session",
            AckResponse,
            "DELETE",
            f"/sessions/{urllib.parse.quote(session_id, safe='')}",
        )

    async def clear_history(self, session_id: str) -> Completion[AckResponse]:
        """Forget the backend's conversation history for a session."""
        return await self._call(
            "Clear history",
            AckResponse,
            "POST",
            f"/clear/{urllib.parse.quote(session_id, safe='')}",
        )

    async def search_images(
        self,
        query: str,
        limit: int = 10,
    ) -> Completion[ImageSearchResponse]:
        """Search images extracted from uploaded documents.

        Args:
            query: Free-text description of the image
            limit: Maximum number of results (1-100)

        Returns:
            Completion with the matching images, best first

        Raises:
            ValidationError: If the query is blank or the limit out of range
        """
        try:
            request = ImageSearchRequest(query=query.strip(), limit=limit)
        except ModelValidationError as e:
            raise ValidationError(f"Invalid image search: {e.errors()[0]['msg']}") from e
        return await self._call(
            "Image search",
            ImageSearchResponse,
            "POST",
            "/image-search",
            json=request.model_dump(),
        )

    def page_image_url(self, session_id: str, page_number: int) -> str:
        """Build the URL of a rendered page image.

        Raises:
            ValidationError: If the page number is not positive
        """
        if page_number < 1:
            raise ValidationError(f"Page number must be positive, got {page_number}")
        quoted = urllib.parse.quote(session_id, safe="")
        return f"{self.base_url}/page-image/{quoted}/{page_number}"
