from datetime import datetime
from typing import Optional
from urllib.parse import quote

import aiohttp

from pixgallery.domain.entities import (
    DirectUrlConfig,
    GeneratedAsset,
    GenerationRequest,
    ProviderDescriptor,
)
from pixgallery.providers.base import ImageProviderAdapter, request_bytes, timeout_kwargs

# Same set as JavaScript's encodeURIComponent leaves untouched
_UNRESERVED = "-_.!~*'()"

class PollinationsImageAdapter(ImageProviderAdapter):
    """Image generation through Pollinations (prompt in the URL, image in the body)"""

    FLAGS = ("enhance", "nologo", "private", "safe", "transparent")

    def __init__(self, base_url: str = "https://image.pollinations.ai/prompt/"):
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"

    def build_url(self, descriptor: ProviderDescriptor, request: GenerationRequest) -> str:
        """
        Build the GET URL for a request

        Args:
            descriptor: Catalog entry with a DirectUrlConfig
            request: Prompt and optional size override

        Returns:
            str: Fully encoded URL
        """
        config: DirectUrlConfig = descriptor.config
        width = request.width or config.width
        height = request.height or config.height

        url = f"{self.base_url}{quote(request.prompt, safe=_UNRESERVED)}?model={config.model}"

        if width:
            url += f"&width={width}"
        if height:
            url += f"&height={height}"
        for flag in self.FLAGS:
            if getattr(config, flag):
                url += f"&{flag}=true"

        return url

    async def fetch(
        self,
        session,
        descriptor: ProviderDescriptor,
        request: GenerationRequest,
        timeout: Optional[aiohttp.ClientTimeout] = None
    ) -> GeneratedAsset:
        start_time = datetime.now()
        url = self.build_url(descriptor, request)
        self.logger.debug(f"Pollinations request for {descriptor.id}: {url[:120]}")

        body, media_type = await request_bytes(session, "GET", url, descriptor.id, **timeout_kwargs(timeout))

        duration = (datetime.now() - start_time).total_seconds()
        self.logger.info(f"Pollinations ({descriptor.id}) answered in {duration:.1f}s, {len(body) / 1024:.1f}KB")

        return GeneratedAsset(data=body, media_type=media_type, provider_id=descriptor.id, source_url=url)
