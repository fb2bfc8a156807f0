"""
Test suite for bearer token resolution on protected routes.

System role: Verification of the authentication dependency
"""

from unittest.mock import AsyncMock, MagicMock

from respondo.api.deps import get_document_service
from respondo.core.exceptions import AuthenticationError, TransportError


class TestAuthentication:
    def test_missing_token_should_return_401(self, anonymous_client) -> None:
        response = anonymous_client.get("/api/v1/documents")

        assert response.status_code == 401

    def test_rejected_token_should_return_401(self, anonymous_client, mock_identity_client) -> None:
        mock_identity_client.get_user.side_effect = AuthenticationError("expired")

        response = anonymous_client.get(
            "/api/v1/chat/messages", headers={"Authorization": "Bearer old"}
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "expired"

    def test_unreachable_provider_should_return_503(
        self, anonymous_client, mock_identity_client
    ) -> None:
        mock_identity_client.get_user.side_effect = TransportError("down")

        response = anonymous_client.get(
            "/api/v1/documents", headers={"Authorization": "Bearer token"}
        )

        assert response.status_code == 503

    def test_valid_token_should_reach_route(
        self, app, anonymous_client, mock_identity_client
    ) -> None:
        service = MagicMock()
        service.list_documents = AsyncMock(return_value=[])
        app.dependency_overrides[get_document_service] = lambda: service

        response = anonymous_client.get(
            "/api/v1/documents", headers={"Authorization": "Bearer good"}
        )

        assert response.status_code == 200
        mock_identity_client.get_user.assert_awaited_once_with("good")
        service.list_documents.assert_awaited_once_with("user-1")
