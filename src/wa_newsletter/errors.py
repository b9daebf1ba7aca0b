"""
Newsletter error types.

Four failure classes: the transport could not deliver or got no reply, the
reply arrived but is not shaped as expected, a single fetched message could
not be decrypted, or the caller passed something unusable.
"""

from typing import Any, Optional


class NewsletterError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class TransportError(NewsletterError):
    def __init__(self, message: str, code: str = "transport_error", details: Optional[dict[str, Any]] = None):
        super().__init__(code, message, details)


class MalformedReplyError(NewsletterError):
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("malformed_reply", message, details)


class DecryptionError(NewsletterError):
    def __init__(self, message: str, server_id: Optional[str] = None):
        super().__init__("decryption_error", message, {"server_id": server_id} if server_id else None)
        self.server_id = server_id


class InvalidArgumentError(NewsletterError, ValueError):
    def __init__(self, message: str):
        super().__init__("invalid_argument", message)
