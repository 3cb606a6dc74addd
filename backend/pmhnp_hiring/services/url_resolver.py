"""
URL Redirect Resolver

Follows redirect chains hop by hop to find where an aggregator tracking
link (Adzuna, Jooble) finally lands.
"""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urljoin

import httpx

from pmhnp_hiring.utils.logger import get_logger

logger = get_logger(__name__)

REQUEST_TIMEOUT_SECONDS = 5.0
BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}


@dataclass
class ResolvedUrl:
    resolved_url: str
    hops_followed: int
    was_redirected: bool


async def _request_hop(client: httpx.AsyncClient, url: str) -> httpx.Response:
    """HEAD the URL, falling back to GET when the HEAD request fails."""
    try:
        return await client.head(url)
    except httpx.TimeoutException:
        raise
    except httpx.HTTPError:
        return await client.get(url)


async def resolve_apply_url(
    url: str,
    max_redirects: int = 10,
    timeout: float = REQUEST_TIMEOUT_SECONDS,
    client: Optional[httpx.AsyncClient] = None
) -> ResolvedUrl:
    """
    Follow redirects from ``url`` without downloading page bodies.

    Args:
        url: Starting URL
        max_redirects: Maximum hops to follow
        timeout: Per-request timeout in seconds
        client: Optional HTTP client; must not follow redirects itself

    Returns:
        ResolvedUrl: Final URL and hop count; on a network error the last
        URL reached
    """
    current_url = url
    hops = 0
    owns_client = client is None
    client = client or httpx.AsyncClient(headers=BROWSER_HEADERS, timeout=timeout, follow_redirects=False)

    try:
        for _ in range(max_redirects):
            response = await _request_hop(client, current_url)

            if not 300 <= response.status_code < 400:
                break

            location = response.headers.get("location")
            if not location:
                break

            current_url = urljoin(current_url, location)
            hops += 1

    except httpx.HTTPError as e:
        logger.debug(f"Stopped resolving {url} after {hops} hops: {e}")

    finally:
        if owns_client:
            await client.aclose()

    return ResolvedUrl(resolved_url=current_url, hops_followed=hops, was_redirected=current_url != url)
