"""
Identity provider client.

Resolves bearer access tokens to users and ends sessions through the hosted
auth API (`/auth/v1`). The returned user id is opaque to the rest of the
system and only scopes storage paths and row ownership.

Dependencies: httpx
System role: Identity collaborator adapter
"""

import logging

import httpx
from pydantic import BaseModel, ConfigDict, Field

from respondo.configs.identity import IdentitySettings
from respondo.core.exceptions import AuthenticationError, TransportError

logger = logging.getLogger(__name__)


class AuthenticatedUser(BaseModel):
    """User resolved from an access token."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(description="Opaque user identifier")
    email: str | None = Field(default=None, description="Primary email, if known")


class IdentityClient:
    """Thin async client over the identity provider's user endpoints."""

    def __init__(
        self,
        settings: IdentitySettings,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Args:
            settings: Provider URL, API key and timeout
            http_client: Shared client (created and owned here when None)
        """
        self._base_url = settings.base_url.rstrip("/") + "/auth/v1"
        self._api_key = settings.api_key
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(settings.timeout))

    def _headers(self, access_token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {access_token}",
            "apikey": self._api_key,
        }

    async def get_user(self, access_token: str) -> AuthenticatedUser:
        """
        Resolve an access token to the user it was issued for.

        Args:
            access_token: Bearer token presented by the caller

        Returns:
            AuthenticatedUser: The token's user

        Raises:
            AuthenticationError: Token rejected or response unusable
            TransportError: Provider unreachable
        """
        if not access_token:
            raise AuthenticationError("Missing access token")

        url = f"{self._base_url}/user"
        try:
            response = await self._client.get(url, headers=self._headers(access_token))
        except httpx.HTTPError as e:
            logger.error(f"{__name__}:get_user - {type(e).__name__}: {e}")
            raise TransportError(f"Identity provider unreachable: {e}", url=url) from e

        if response.status_code != 200:
            logger.info(
                f"{__name__}:get_user - Token rejected",
                extra={"status_code": response.status_code},
            )
            raise AuthenticationError(
                "Access token validation failed",
                details={"status_code": response.status_code},
            )

        try:
            return AuthenticatedUser.model_validate(response.json())
        except ValueError as e:
            raise AuthenticationError("Identity provider returned an unusable user") from e

    async def sign_out(self, access_token: str) -> None:
        """
        Revoke the session behind an access token.

        Raises:
            AuthenticationError: Provider refused the request
            TransportError: Provider unreachable
        """
        url = f"{self._base_url}/logout"
        try:
            response = await self._client.post(url, headers=self._headers(access_token))
        except httpx.HTTPError as e:
            raise TransportError(f"Identity provider unreachable: {e}", url=url) from e

        if response.status_code >= 400:
            raise AuthenticationError(
                "Sign out failed",
                details={"status_code": response.status_code},
            )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
