"""
Bounded image download from the origin.
"""

import asyncio
import logging
from typing import Optional

import httpx

from .browser_headers import build_headers
from .config import TranscodeConfig
from .errors import (
    EmptyBody,
    FetchTimeout,
    NotAnImage,
    TooLarge,
    UpstreamError,
)
from .models import FetchResult

logger = logging.getLogger(__name__)


def _declared_length(response: httpx.Response) -> Optional[int]:
    raw = response.headers.get("content-length")
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


class ImageFetcher:
    """
    Download one image under a deadline.

    A fresh AsyncClient is opened per call; `transport` lets tests plug in
    an httpx.MockTransport.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.transport = transport

    async def fetch(self, url: str, config: TranscodeConfig) -> FetchResult:
        # wait_for cancels the inner task on expiry, which closes the stream.
        try:
            return await asyncio.wait_for(self._fetch(url, config), timeout=config.fetch_timeout)
        except asyncio.TimeoutError:
            raise FetchTimeout(f"no complete answer within {config.fetch_timeout}s")
        except httpx.TimeoutException as exc:
            raise FetchTimeout(f"transport timeout: {exc.__class__.__name__}")
        except httpx.HTTPError as exc:
            raise UpstreamError(None, f"transport error: {exc}")

    async def _fetch(self, url: str, config: TranscodeConfig) -> FetchResult:
        headers = build_headers(url, config.header_profile)
        async with httpx.AsyncClient(
            timeout=config.fetch_timeout,
            follow_redirects=True,
            transport=self.transport,
        ) as client:
            if config.size_check == "head":
                await self._check_head(client, url, headers, config.max_input_bytes)
            return await self._download(client, url, headers, config.max_input_bytes)

    async def _check_head(self, client: httpx.AsyncClient, url: str, headers: dict, limit: int) -> None:
        # HEAD status is not enforced; plenty of origins reject it outright.
        response = await client.head(url, headers=headers)
        declared = _declared_length(response)
        if response.is_success and declared is not None and declared > limit:
            raise TooLarge(f"declared {declared} bytes exceeds limit of {limit}")

    async def _download(self, client: httpx.AsyncClient, url: str, headers: dict, limit: int) -> FetchResult:
        async with client.stream("GET", url, headers=headers) as response:
            if not response.is_success:
                raise UpstreamError(response.status_code)

            content_type = response.headers.get("content-type")
            if not content_type or not content_type.lower().startswith("image/"):
                raise NotAnImage(f"content-type {content_type or 'missing'}")

            declared = _declared_length(response)
            if declared is not None and declared > limit:
                raise TooLarge(f"declared {declared} bytes exceeds limit of {limit}")

            body = bytearray()
            async for chunk in response.aiter_bytes():
                body.extend(chunk)
                if len(body) > limit:
                    raise TooLarge(f"body exceeds limit of {limit} bytes")

        if not body:
            raise EmptyBody("origin returned no bytes")

        logger.debug("[fetch] %s -> %d bytes (%s)", url, len(body), content_type)
        return FetchResult(data=bytes(body), content_type=content_type)
