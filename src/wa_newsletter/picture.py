"""
Default picture source for channel picture updates.

Loads the image bytes as given; resizing/re-encoding to the server's
profile-picture format is left to a custom `derive_picture` callable.
"""

from pathlib import Path
from typing import Optional

from wa_newsletter.errors import InvalidArgumentError
from wa_newsletter.transport.base import MediaUpload
from wa_newsletter.transport.http import MediaFetcher


async def load_picture(media: MediaUpload, fetcher: Optional[MediaFetcher] = None) -> bytes:
    if isinstance(media, (bytes, bytearray)):
        data = bytes(media)
    elif isinstance(media, str) and media.startswith(("http://", "https://")):
        owned = fetcher is None
        fetcher = fetcher or MediaFetcher()
        try:
            data = await fetcher.fetch(media)
        finally:
            if owned:
                await fetcher.close()
    elif isinstance(media, str):
        try:
            data = Path(media).expanduser().read_bytes()
        except OSError as e:
            raise InvalidArgumentError(f"Cannot read picture file {media}: {e}")
    else:
        raise InvalidArgumentError(f"Unsupported picture media: {type(media).__name__}")

    if not data:
        raise InvalidArgumentError("Picture is empty")
    return data
