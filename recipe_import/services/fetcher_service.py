"""HTTP fetching of recipe pages for the URL import route."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from recipe_import.config import settings
from recipe_import.models.recipe import DocumentKind, RawDocument
from recipe_import.utils.exceptions import FetchError, ValidationError
from recipe_import.utils.validators import validate_url

logger = logging.getLogger(__name__)


def _default_headers() -> dict:
    """Browser-like headers; some recipe sites refuse bare HTTP clients."""
    return {
        "User-Agent": settings.fetch_user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
        "Cache-Control": "no-cache",
    }


async def _check_request_target(request: httpx.Request) -> None:
    """Run on every request, redirect hops included."""
    validate_url(str(request.url))


class HtmlFetcher:
    """Downloads a page and wraps it as a ``RawDocument``."""

    def __init__(self, timeout: Optional[float] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout or settings.http_timeout
        self.transport = transport

    async def fetch(self, url: str) -> RawDocument:
        """
        Fetch ``url`` and return its markup.

        Args:
            url: Validated http(s) URL

        Returns:
            HTML document whose source id is the final URL after redirects

        Raises:
            FetchError: On network errors, timeouts, non-2xx responses or a
                redirect to a private host
        """
        logger.info(f"[FETCH] GET {url}")
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                headers=_default_headers(),
                follow_redirects=True,
                transport=self.transport,
                event_hooks={"request": [_check_request_target]},
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except ValidationError as e:
            logger.warning(f"[FETCH] refused redirect target for {url}: {e}")
            raise FetchError(f"Refused to follow redirect: {e}") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning(f"[FETCH] status={status} for {url}")
            raise FetchError(f"Fetch failed with status {status}") from e
        except httpx.TimeoutException as e:
            logger.warning(f"[FETCH] timeout after {self.timeout}s for {url}")
            raise FetchError("Timed out fetching the page") from e
        except httpx.HTTPError as e:
            logger.warning(f"[FETCH] request failed for {url}: {e}")
            raise FetchError(f"Could not fetch the page: {e}") from e

        final_url = str(response.url)
        logger.info(
            f"[FETCH] fetched {len(response.text)} characters",
            extra={"url": final_url, "status": response.status_code},
        )
        return RawDocument(kind=DocumentKind.html, body=response.text, source_id=final_url)
