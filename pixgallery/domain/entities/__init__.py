from pixgallery.domain.entities.generation import GeneratedAsset, GenerationRequest
from pixgallery.domain.entities.provider import (
    DirectUrlConfig,
    ProviderDescriptor,
    RequestShape,
    StructuredApiConfig,
)

__all__ = [
    "GeneratedAsset",
    "GenerationRequest",
    "DirectUrlConfig",
    "ProviderDescriptor",
    "RequestShape",
    "StructuredApiConfig",
]
