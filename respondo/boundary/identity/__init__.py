"""Identity provider boundary."""

from respondo.boundary.identity.identity_client import AuthenticatedUser, IdentityClient

__all__ = ["AuthenticatedUser", "IdentityClient"]
