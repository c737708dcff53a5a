from datetime import datetime
from typing import Any, Dict, Optional

import aiohttp

from pixgallery.domain.entities import (
    GeneratedAsset,
    GenerationRequest,
    ProviderDescriptor,
    RequestShape,
    StructuredApiConfig,
)
from pixgallery.errors import UpstreamError
from pixgallery.providers.base import (
    ImageProviderAdapter,
    decode_json,
    download_asset,
    request_bytes,
    require_asset_url,
    timeout_kwargs,
)

class RapidApiImageAdapter(ImageProviderAdapter):
    """Image generation through RapidAPI-hosted providers (POST + API key header)"""

    def __init__(self, api_key: str):
        """
        Args:
            api_key: RapidAPI key shared by every provider behind the gateway
        """
        if not api_key:
            raise ValueError("RAPIDAPI_KEY is required for RapidAPI providers")
        self.api_key = api_key

    def build_headers(self, config: StructuredApiConfig) -> Dict[str, str]:
        headers = {
            "x-rapidapi-key": self.api_key,
            "x-rapidapi-host": config.host,
        }
        # multipart sets its own boundary header
        if config.body_encoding == "json":
            headers["Content-Type"] = "application/json"
        return headers

    def build_body(self, config: StructuredApiConfig, request: GenerationRequest) -> Dict[str, Any]:
        """
        Merge provider defaults with the request fields

        Returns:
            Dict: Body fields in the provider's own naming
        """
        body: Dict[str, Any] = {config.prompt_field: request.prompt}

        if config.negative_prompt_field:
            body[config.negative_prompt_field] = request.negative_prompt or ""

        body.update(config.defaults)

        if config.width_field and request.width:
            body[config.width_field] = request.width
        if config.height_field and request.height:
            body[config.height_field] = request.height

        return body

    @staticmethod
    def _multipart(body: Dict[str, Any]) -> aiohttp.MultipartWriter:
        writer = aiohttp.MultipartWriter("form-data")
        for name, value in body.items():
            part = writer.append(str(value))
            part.set_content_disposition("form-data", name=name)
        return writer

    async def fetch(
        self,
        session,
        descriptor: ProviderDescriptor,
        request: GenerationRequest,
        timeout: Optional[aiohttp.ClientTimeout] = None
    ) -> GeneratedAsset:
        config: StructuredApiConfig = descriptor.config
        start_time = datetime.now()

        body = self.build_body(config, request)
        kwargs: Dict[str, Any] = {"headers": self.build_headers(config)}
        kwargs.update(timeout_kwargs(timeout))
        if config.body_encoding == "form":
            kwargs["data"] = self._multipart(body)
        else:
            kwargs["json"] = body

        self.logger.info(f"Starting generation through {descriptor.id} ({config.host})")
        raw, media_type = await request_bytes(session, "POST", config.endpoint, descriptor.id, **kwargs)

        if descriptor.shape is RequestShape.BINARY_RESPONSE:
            asset = GeneratedAsset(data=raw, media_type=media_type, provider_id=descriptor.id)
        elif descriptor.shape is RequestShape.JSON_URL_RESPONSE:
            payload = decode_json(raw, descriptor.id)
            url = require_asset_url(payload, descriptor.id, config.envelope)
            self.logger.debug(f"{descriptor.id} returned image URL {url[:120]}")
            asset = await download_asset(session, url, descriptor.id, timeout)
        else:
            raise UpstreamError(descriptor.id, f"Shape {descriptor.shape.value} is not served by RapidAPI")

        duration = (datetime.now() - start_time).total_seconds()
        self.logger.info(f"{descriptor.id} answered in {duration:.1f}s, {asset.size / 1024:.1f}KB")
        return asset
