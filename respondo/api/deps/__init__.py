"""API-specific dependencies."""

from .dependencies import (
    ChatServiceScope,
    ServiceCache,
    get_chat_client,
    get_chat_service,
    get_chat_service_scope,
    get_current_user,
    get_document_service,
    get_identity_client,
    get_service_cache,
    get_settings_dependency,
)

__all__ = [
    "ChatServiceScope",
    "ServiceCache",
    "get_chat_client",
    "get_chat_service",
    "get_chat_service_scope",
    "get_current_user",
    "get_document_service",
    "get_identity_client",
    "get_service_cache",
    "get_settings_dependency",
]
