"""
wa-newsletter — WhatsApp channel (newsletter) operations for Python.

Shapes newsletter requests as tagged `newsletter` IQs or tunneled `w:mex`
queries and parses the replies into typed records.
"""

from wa_newsletter.client import AsyncNewsletterClient, NewsletterClient
from wa_newsletter.dispatcher import QueryDispatcher
from wa_newsletter.errors import (
    DecryptionError,
    InvalidArgumentError,
    MalformedReplyError,
    NewsletterError,
    TransportError,
)
from wa_newsletter.models.identity import Identity
from wa_newsletter.models.newsletter import (
    FetchKeyType,
    MessageUpdate,
    MetadataKeyType,
    NewsletterMetadata,
    NewsletterReactionMode,
    NewsletterViewRole,
)
from wa_newsletter.models.node import BinaryNode, S_WHATSAPP_NET
from wa_newsletter.query_ids import QueryId, XWAPath

__version__ = "0.1.0"
__all__ = [
    "AsyncNewsletterClient",
    "NewsletterClient",
    "QueryDispatcher",
    "NewsletterError",
    "TransportError",
    "MalformedReplyError",
    "DecryptionError",
    "InvalidArgumentError",
    "Identity",
    "FetchKeyType",
    "MessageUpdate",
    "MetadataKeyType",
    "NewsletterMetadata",
    "NewsletterReactionMode",
    "NewsletterViewRole",
    "BinaryNode",
    "S_WHATSAPP_NET",
    "QueryId",
    "XWAPath",
]
