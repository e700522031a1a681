"""Notion public-integration OAuth: authorize URL and code exchange.

Notion's token endpoint expects the client credentials as HTTP Basic auth and
a JSON body, so the exchange is done directly with httpx.
"""

import logging
from urllib.parse import urlencode

import httpx
from pydantic import BaseModel, ValidationError

from reddit_notion.config import get_settings
from reddit_notion.errors import ServiceUnavailableError, UnauthenticatedError
from reddit_notion.logging_config import mask_secret
from reddit_notion.models.user import NotionIdentity

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://api.notion.com/v1/oauth/authorize"
TOKEN_URL = "https://api.notion.com/v1/oauth/token"


class NotionTokenResponse(BaseModel):
    """Body of a successful /v1/oauth/token call."""

    access_token: str
    token_type: str = "bearer"
    bot_id: str = ""
    workspace_id: str = ""
    workspace_name: str | None = None
    workspace_icon: str | None = None
    owner: dict = {}

    def identity(self) -> NotionIdentity:
        """Extract who granted access.

        The owner is either {"type": "user", "user": {...}} or
        {"type": "workspace", "workspace": true}; workspace grants are
        identified by the bot id.

        Raises UnauthenticatedError when neither shape yields an id.
        """
        common = {
            "workspace_id": self.workspace_id,
            "workspace_name": self.workspace_name or "",
            "bot_id": self.bot_id,
        }
        user = self.owner.get("user")
        if isinstance(user, dict) and user.get("id"):
            person = user.get("person") or {}
            return NotionIdentity(
                notion_user_id=user["id"],
                name=user.get("name") or "",
                email=person.get("email") or "",
                avatar_url=user.get("avatar_url") or "",
                **common,
            )
        if self.owner.get("workspace") is True and self.bot_id:
            logger.info("OAuth granted by workspace, using bot_id as identifier")
            return NotionIdentity(
                notion_user_id=self.bot_id,
                name=self.workspace_name or "",
                **common,
            )
        raise UnauthenticatedError("Could not determine the Notion user from the OAuth response")


def build_authorize_url(state: str) -> str:
    """Return the Notion consent URL carrying ``state``."""
    settings = get_settings()
    query = urlencode(
        {
            "client_id": settings.notion_client_id,
            "response_type": "code",
            "owner": "user",
            "redirect_uri": settings.notion_redirect_uri,
            "state": state,
        }
    )
    return f"{AUTHORIZE_URL}?{query}"


async def exchange_code(code: str, transport: httpx.AsyncBaseTransport | None = None) -> NotionTokenResponse:
    """Exchange an authorization code for an access token.

    Raises:
        UnauthenticatedError: Notion rejected the code (4xx) or the body was unusable.
        ServiceUnavailableError: network failure or Notion 5xx.
    """
    settings = get_settings()
    logger.info("Exchanging Notion authorization code %s", mask_secret(code))
    try:
        async with httpx.AsyncClient(timeout=httpx.Timeout(10.0), transport=transport) as client:
            response = await client.post(
                TOKEN_URL,
                auth=(settings.notion_client_id, settings.notion_client_secret),
                json={
                    "grant_type": "authorization_code",
                    "code": code,
                    "redirect_uri": settings.notion_redirect_uri,
                },
            )
    except httpx.HTTPError as exc:
        logger.warning("Notion token exchange failed: %s", exc)
        raise ServiceUnavailableError("Could not reach Notion for token exchange") from exc

    if response.status_code >= 500:
        logger.warning("Notion token endpoint returned %d", response.status_code)
        raise ServiceUnavailableError("Notion token exchange is unavailable")
    if response.status_code != 200:
        logger.warning(
            "Notion rejected authorization code (%d): %s",
            response.status_code,
            response.text[:200],
        )
        raise UnauthenticatedError("Notion rejected the authorization code")

    try:
        token = NotionTokenResponse.model_validate(response.json())
    except (ValueError, ValidationError) as exc:
        raise UnauthenticatedError("Unexpected token response from Notion") from exc

    logger.info(
        "Token exchange successful for workspace %s (token %s)",
        token.workspace_id,
        mask_secret(token.access_token),
    )
    return token
