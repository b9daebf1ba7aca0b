"""
HTTP media fetcher for picture updates given as a URL.
"""

from typing import Optional

import httpx

from wa_newsletter.errors import NewsletterError

USER_AGENT = "wa-newsletter/0.1.0"


class MediaFetcher:
    def __init__(self, timeout: float = 30.0, client: Optional[httpx.AsyncClient] = None):
        self._client = client or httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            timeout=timeout,
            follow_redirects=True,
        )

    async def fetch(self, url: str) -> bytes:
        try:
            resp = await self._client.get(url)
        except httpx.HTTPError as e:
            raise NewsletterError("http_error", f"Failed to fetch {url}: {e}")
        if resp.status_code >= 400:
            raise NewsletterError("http_error", f"HTTP {resp.status_code} fetching {url}")
        return resp.content

    async def close(self) -> None:
        await self._client.aclose()
