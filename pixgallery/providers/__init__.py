"""
Image generation provider adapters and their static catalog.

Two families: Pollinations (GET, prompt in the URL) and RapidAPI-hosted
providers (POST, image bytes or a JSON image URL in the response).
"""
from pixgallery.providers.catalog import DEFAULT_MODEL, PROVIDER_CATALOG, get_provider, list_providers
from pixgallery.providers.pollinations_image import PollinationsImageAdapter
from pixgallery.providers.rapidapi_image import RapidApiImageAdapter

__all__ = [
    "DEFAULT_MODEL",
    "PROVIDER_CATALOG",
    "get_provider",
    "list_providers",
    "PollinationsImageAdapter",
    "RapidApiImageAdapter",
]
