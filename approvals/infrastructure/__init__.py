"""Infrastructure layer exports."""

from .adapters import ADAPTERS, DocumentAdapter, get_adapter
from .auth import AuthClient
from .http import ApiTransport
from .repository import DocumentRepository, HttpDocumentRepository
from .session import Session, SessionStore

__all__ = [
    "ADAPTERS",
    "ApiTransport",
    "AuthClient",
    "DocumentAdapter",
    "DocumentRepository",
    "HttpDocumentRepository",
    "Session",
    "SessionStore",
    "get_adapter",
]
