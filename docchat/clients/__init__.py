"""Backend API clients."""

from docchat.clients.backend_client import BackendClient

__all__ = ["BackendClient"]
