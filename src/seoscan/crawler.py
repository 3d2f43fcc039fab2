"""Document fetcher: retrieves a single page's HTML for analysis."""

import logging
import time
from dataclasses import dataclass
from typing import Optional

import httpx

from seoscan.constants import (
    DEFAULT_FETCH_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    HTML_ACCEPT_HEADER,
)
from seoscan.exceptions import FetchError

logger = logging.getLogger(__name__)


@dataclass
class FetchedDocument:
    """Raw result of one successful GET."""

    url: str
    final_url: str
    status_code: int
    content_type: Optional[str]
    html: str
    load_time: int  # milliseconds


class WebCrawler:
    """Fetches target pages with an identifying user agent.

    One GET per call, redirects followed, no retries: a failed fetch fails
    the HTML analysis for that URL.
    """

    def __init__(
        self,
        user_agent: Optional[str] = None,
        timeout: float = DEFAULT_FETCH_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the crawler.

        Args:
            user_agent: User agent sent with every request
            timeout: Transport timeout in seconds
            client: Optional pre-built client (tests inject a MockTransport here)
        """
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self.timeout = timeout
        self._client = client

    @property
    def headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept": HTML_ACCEPT_HEADER,
        }

    async def fetch(self, url: str) -> FetchedDocument:
        """Fetch a page.

        Args:
            url: Page URL

        Returns:
            FetchedDocument with the body and response metadata

        Raises:
            FetchError: On non-2xx status, timeout or transport failure
        """
        if self._client is not None:
            return await self._fetch_with(self._client, url)

        async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
            return await self._fetch_with(client, url)

    async def _fetch_with(self, client: httpx.AsyncClient, url: str) -> FetchedDocument:
        start_time = time.monotonic()
        try:
            response = await client.get(url, headers=self.headers, follow_redirects=True)
        except httpx.TimeoutException as e:
            logger.warning(f"Timeout fetching {url}")
            raise FetchError(f"Timeout fetching {url}") from e
        except httpx.HTTPError as e:
            logger.warning(f"Failed to fetch {url}: {e}")
            raise FetchError(f"Failed to fetch {url}: {e}") from e

        load_time = int((time.monotonic() - start_time) * 1000)

        if not response.is_success:
            reason = response.reason_phrase
            logger.warning(f"Fetch of {url} returned {response.status_code} {reason}")
            raise FetchError(
                f"Failed to fetch {url}: {response.status_code} {reason}",
                status_code=response.status_code,
                reason=reason,
            )

        logger.debug(f"Fetched {url} ({response.status_code}) in {load_time}ms")
        return FetchedDocument(
            url=url,
            final_url=str(response.url),
            status_code=response.status_code,
            content_type=response.headers.get("content-type"),
            html=response.text,
            load_time=load_time,
        )
