"""
Shared HTTP handling for image provider adapters.

Every adapter turns one external API into a `GeneratedAsset`. Transport
errors and non-2xx statuses become `UpstreamError`; nothing is retried.
"""
import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Tuple

import aiohttp

from pixgallery.domain.entities import GeneratedAsset, GenerationRequest, ProviderDescriptor
from pixgallery.errors import MissingAssetUrl, UpstreamError
from pixgallery.utils.logger import LoggerMixin

logger = logging.getLogger(__name__)

# Checked in this order
ASSET_URL_FIELDS = ("url", "image", "output")

MAX_ERROR_EXCERPT = 200


def _excerpt(body: bytes) -> str:
    text = body[:MAX_ERROR_EXCERPT].decode("utf-8", errors="replace")
    return text + ("..." if len(body) > MAX_ERROR_EXCERPT else "")


def timeout_kwargs(timeout: Optional[aiohttp.ClientTimeout]) -> dict:
    return {"timeout": timeout} if timeout is not None else {}


def _media_type(response) -> str:
    raw = response.headers.get("Content-Type") or ""
    return raw.split(";", 1)[0].strip().lower()


async def request_bytes(
    session,
    method: str,
    url: str,
    provider_id: str,
    **kwargs
) -> Tuple[bytes, str]:
    """
    Perform one HTTP request and return (body, media type)

    Raises:
        UpstreamError: transport failure or non-2xx status
    """
    send = session.get if method == "GET" else session.post
    try:
        async with send(url, **kwargs) as response:
            body = await response.read()
            if not 200 <= response.status < 300:
                logger.error(f"{provider_id} returned HTTP {response.status}: {_excerpt(body)}")
                raise UpstreamError(
                    provider_id,
                    f"HTTP {response.status}: {_excerpt(body)}",
                    status=response.status,
                )
            return body, _media_type(response)
    except aiohttp.ClientError as e:
        logger.error(f"Network error calling {provider_id}: {e}")
        raise UpstreamError(provider_id, f"Transport failure: {e}") from e
    except asyncio.TimeoutError as e:
        logger.error(f"Timeout calling {provider_id}")
        raise UpstreamError(provider_id, "Request timed out") from e


def decode_json(body: bytes, provider_id: str) -> Any:
    try:
        return json.loads(body)
    except ValueError as e:
        raise UpstreamError(provider_id, f"Malformed JSON response: {_excerpt(body)}") from e


def extract_asset_url(payload: Any, envelope: Optional[str] = None) -> Optional[str]:
    """
    Find the image URL in a provider JSON response

    Args:
        payload: Decoded JSON body
        envelope: Optional key of a list whose first element carries the URL
            (e.g. {"data": [{"url": ...}]})

    Returns:
        The first non-empty of `url`, `image`, `output`, or None
    """
    if envelope:
        inner = payload.get(envelope) if isinstance(payload, dict) else None
        if isinstance(inner, list):
            inner = inner[0] if inner else None
        payload = inner

    if not isinstance(payload, dict):
        return None

    for key in ASSET_URL_FIELDS:
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


async def download_asset(
    session,
    url: str,
    provider_id: str,
    timeout: Optional[aiohttp.ClientTimeout] = None
) -> GeneratedAsset:
    """Second request of the JSON family: fetch the image the provider pointed at"""
    body, media_type = await request_bytes(session, "GET", url, provider_id, **timeout_kwargs(timeout))
    return GeneratedAsset(data=body, media_type=media_type, provider_id=provider_id, source_url=url)


def require_asset_url(payload: Any, provider_id: str, envelope: Optional[str] = None) -> str:
    url = extract_asset_url(payload, envelope)
    if not url:
        raise MissingAssetUrl(provider_id, "No image URL returned from API")
    return url


class ImageProviderAdapter(LoggerMixin, ABC):
    """One external API family -> GeneratedAsset"""

    @abstractmethod
    async def fetch(
        self,
        session,
        descriptor: ProviderDescriptor,
        request: GenerationRequest,
        timeout: Optional[aiohttp.ClientTimeout] = None
    ) -> GeneratedAsset:
        """Call the provider and return the raw asset (media type unchecked)"""
