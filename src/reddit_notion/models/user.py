"""Identity of a user as reported by the Notion OAuth token exchange."""

from pydantic import BaseModel


class NotionIdentity(BaseModel):
    """Who granted access: a Notion user, or the workspace itself via its bot."""

    notion_user_id: str
    name: str = ""
    email: str = ""
    avatar_url: str = ""
    workspace_id: str = ""
    workspace_name: str = ""
    bot_id: str = ""
