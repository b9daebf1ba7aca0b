"""
Channel (newsletter) records returned to callers.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from wa_newsletter.errors import DecryptionError


class NewsletterReactionMode(str, Enum):
    ALL = "ALL"
    BASIC = "BASIC"
    NONE = "NONE"


class NewsletterViewRole(str, Enum):
    ADMIN = "ADMIN"
    GUEST = "GUEST"
    OWNER = "OWNER"
    SUBSCRIBER = "SUBSCRIBER"


class FetchKeyType(str, Enum):
    """How `messages` history fetches address the channel."""
    INVITE = "invite"
    JID = "jid"


class MetadataKeyType(str, Enum):
    """How metadata lookups address the channel."""
    JID = "JID"
    INVITE = "INVITE"


class NewsletterMetadata(BaseModel):
    id: str
    state: str
    creation_time: int
    name: str
    name_time: int
    description: str
    description_time: int
    invite: Optional[str] = None
    handle: Optional[str] = None
    picture: Optional[str] = None
    preview: Optional[str] = None
    reaction_codes: Optional[str] = None
    subscribers: int
    verification: Optional[str] = None
    viewer_metadata: Optional[dict[str, Any]] = None


class MessageUpdate(BaseModel):
    """One fetched channel message with its counters."""
    server_id: str
    views: Optional[int] = None  # None when the server sent no views_count
    reactions: list[dict[str, str]] = Field(default_factory=list)
    message: Any = None
    error: Optional[DecryptionError] = None

    model_config = {"arbitrary_types_allowed": True}

    @property
    def failed(self) -> bool:
        return self.error is not None
