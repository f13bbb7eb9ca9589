"""
Google identity provider lookup.

Exchanges a client-held OAuth access token for the account's stable
subject id, email and display name via the userinfo endpoint.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class IdentityProviderError(Exception):
    """Raised when the identity provider rejects the token or cannot be reached."""


@dataclass(frozen=True)
class GoogleIdentity:
    """Profile returned by the userinfo endpoint."""

    subject: str
    email: Optional[str] = None
    name: Optional[str] = None


class GoogleIdentityClient:
    """
    Client for the Google OAuth2 userinfo endpoint.

    Args:
        userinfo_url: Userinfo endpoint URL
        timeout: Request timeout in seconds
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        userinfo_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.userinfo_url = userinfo_url
        self.timeout = timeout
        self._transport = transport

    async def fetch_identity(self, access_token: str) -> GoogleIdentity:
        """
        Look up the identity behind an access token.

        Args:
            access_token: OAuth access token obtained by the client

        Returns:
            The caller's Google identity

        Raises:
            IdentityProviderError: If the lookup fails or the profile has no subject
        """
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.get(
                    self.userinfo_url,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                response.raise_for_status()
                profile = response.json()
        except httpx.HTTPStatusError as e:
            raise IdentityProviderError(
                f"Userinfo lookup returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise IdentityProviderError(f"Userinfo lookup failed: {e}") from e
        except ValueError as e:
            raise IdentityProviderError("Userinfo response was not JSON") from e

        if not isinstance(profile, dict) or not profile.get("sub"):
            raise IdentityProviderError("Userinfo response has no subject")

        email = profile.get("email")
        return GoogleIdentity(
            subject=str(profile["sub"]),
            email=email.strip().lower() if isinstance(email, str) else None,
            name=profile.get("name") or None,
        )
