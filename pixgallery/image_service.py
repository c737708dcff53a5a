from typing import Any, Dict, List, Mapping, Optional

import aiohttp

from pixgallery.config import ProviderConfig
from pixgallery.domain.entities import (
    GeneratedAsset,
    GenerationRequest,
    ProviderDescriptor,
    RequestShape,
)
from pixgallery.errors import GenerationError, InvalidAssetType, UpstreamError
from pixgallery.providers import (
    PROVIDER_CATALOG,
    PollinationsImageAdapter,
    RapidApiImageAdapter,
    get_provider,
    list_providers,
)
from pixgallery.providers.base import ImageProviderAdapter
from pixgallery.utils.logger import LoggerMixin

class GenerationDispatcher(LoggerMixin):
    """
    Routes a generation request to the adapter of its model and checks the result.

    Stateless per call: the only shared state is the statistics counters.
    No retries; the first failure goes back to the caller.
    """

    def __init__(
        self,
        provider_config: Optional[ProviderConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
        catalog: Mapping[str, ProviderDescriptor] = PROVIDER_CATALOG,
    ):
        """
        Args:
            provider_config: API key, timeout and endpoint settings
            session: Shared aiohttp session owned by the caller; when omitted a
                session is opened for each call
            catalog: Model catalog (defaults to the built-in one)
        """
        self.config = provider_config or ProviderConfig()
        self.session = session
        self.catalog = catalog

        self.pollinations = PollinationsImageAdapter(self.config.pollinations_base_url)
        self.rapidapi = RapidApiImageAdapter(self.config.rapidapi_key) if self.config.rapidapi_key else None

        if self.rapidapi is None:
            self.logger.warning("RAPIDAPI_KEY is not configured, only Pollinations models are available")

        self.stats: Dict[str, Any] = {
            "total_requests": 0,
            "success": 0,
            "failures": 0,
            "providers": {},
        }

    def _adapter_for(self, descriptor: ProviderDescriptor) -> ImageProviderAdapter:
        if descriptor.shape is RequestShape.DIRECT_URL:
            return self.pollinations
        if self.rapidapi is None:
            raise UpstreamError(descriptor.id, "RAPIDAPI_KEY is not configured")
        return self.rapidapi

    def _client_timeout(self) -> Optional[aiohttp.ClientTimeout]:
        if self.config.request_timeout is None:
            return None
        return aiohttp.ClientTimeout(total=self.config.request_timeout)

    def _record(self, provider_id: Optional[str], ok: bool):
        key = "success" if ok else "failures"
        self.stats[key] += 1
        if provider_id:
            counters = self.stats["providers"].setdefault(provider_id, {"success": 0, "failures": 0})
            counters[key] += 1

    @staticmethod
    def _check_media_type(asset: GeneratedAsset):
        # Several providers send JSON errors with HTTP 200; the content type is the only signal
        if not asset.data or not asset.media_type.startswith("image/"):
            raise InvalidAssetType(asset.provider_id, asset.media_type)

    async def generate(self, request: GenerationRequest) -> GeneratedAsset:
        """
        Generate one image

        Args:
            request: Prompt, model identifier and optional size

        Returns:
            GeneratedAsset: Image bytes with an image/* media type

        Raises:
            UnsupportedModel: unknown model identifier (no HTTP call is made)
            UpstreamError: transport failure or non-2xx status
            MissingAssetUrl: JSON response without url/image/output
            InvalidAssetType: the payload is not an image
        """
        self.stats["total_requests"] += 1
        descriptor = None

        try:
            descriptor = get_provider(request.model, self.catalog)
            adapter = self._adapter_for(descriptor)

            self.logger.info(f"Generating with {descriptor.id} ({descriptor.shape.value}): {request.prompt[:50]}...")

            # per request, so the limit also applies to a caller-owned session
            timeout = self._client_timeout()
            if self.session is not None:
                asset = await adapter.fetch(self.session, descriptor, request, timeout)
            else:
                async with aiohttp.ClientSession() as session:
                    asset = await adapter.fetch(session, descriptor, request, timeout)

            self._check_media_type(asset)

        except GenerationError as e:
            self._record(descriptor.id if descriptor else None, ok=False)
            self.logger.error(f"Image generation failed: {e}")
            raise

        self._record(descriptor.id, ok=True)
        self.logger.info(f"✅ {descriptor.id} produced {asset.media_type}, {asset.size / 1024:.1f}KB")
        return asset

    def available_models(self) -> List[ProviderDescriptor]:
        """Catalog entries usable with the current configuration"""
        return [
            descriptor for descriptor in list_providers(self.catalog)
            if not descriptor.is_structured or self.rapidapi is not None
        ]

    def get_stats(self) -> Dict[str, Any]:
        """
        Generation statistics

        Returns:
            Dict: totals and per-provider success/failure counters
        """
        total = self.stats["total_requests"]
        return {
            "total_requests": total,
            "success": self.stats["success"],
            "failures": self.stats["failures"],
            "success_rate": self.stats["success"] / total * 100 if total > 0 else 0,
            "providers": {name: dict(counters) for name, counters in self.stats["providers"].items()},
        }
