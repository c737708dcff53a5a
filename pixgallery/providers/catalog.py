"""
Static catalog of image generation models.

Read-only, process-wide: identifier -> label -> request shape -> defaults.
"""
from types import MappingProxyType
from typing import List, Mapping

from pixgallery.domain.entities import (
    DirectUrlConfig,
    ProviderDescriptor,
    RequestShape,
    StructuredApiConfig,
)
from pixgallery.errors import UnsupportedModel

DEFAULT_MODEL = "pollinations-default"

_FLUX_QUICK_PATH = "/aaaaaaaaaaaaaaaaaiimagegenerator/quick.php"

_DESCRIPTORS = (
    # --- Pollinations (free, prompt in the URL) ---
    ProviderDescriptor(
        id="pollinations-default",
        label="Pollinations - Free Unlimited",
        description="High quality images with no limits",
        quality="High",
        speed="Fast",
        shape=RequestShape.DIRECT_URL,
        config=DirectUrlConfig(model="flux"),
    ),
    ProviderDescriptor(
        id="pollinations-flux",
        label="Pollinations - Flux",
        description="Fast general purpose generations",
        quality="High",
        speed="Very Fast",
        shape=RequestShape.DIRECT_URL,
        config=DirectUrlConfig(model="flux"),
    ),
    ProviderDescriptor(
        id="pollinations-gptimage",
        label="Pollinations - GPTImage",
        description="Advanced prompt understanding",
        quality="Excellent",
        speed="Medium",
        shape=RequestShape.DIRECT_URL,
        config=DirectUrlConfig(model="gptimage"),
    ),
    ProviderDescriptor(
        id="pollinations-kontext",
        label="Pollinations - Kontext",
        description="Context-aware generations",
        quality="Very High",
        speed="Medium",
        shape=RequestShape.DIRECT_URL,
        config=DirectUrlConfig(model="kontext"),
    ),
    # --- RapidAPI, image bytes in the response ---
    ProviderDescriptor(
        id="ai-image-generator-free",
        label="Free Stream",
        description="Photorealistic fantasy & nature",
        quality="High",
        speed="Fast",
        shape=RequestShape.BINARY_RESPONSE,
        config=StructuredApiConfig(
            endpoint="https://ai-image-generator-free.p.rapidapi.com/generate/stream",
            host="ai-image-generator-free.p.rapidapi.com",
            negative_prompt_field="negativePrompt",
            defaults={"guidancescale": 7.5, "style": "(No style)"},
        ),
    ),
    ProviderDescriptor(
        id="omniinfer-meina",
        label="OmniInfer Anime",
        description="Anime studio-quality art",
        quality="Very High",
        speed="Medium",
        shape=RequestShape.BINARY_RESPONSE,
        config=StructuredApiConfig(
            endpoint="https://omniinfer.p.rapidapi.com/v2/txt2img",
            host="omniinfer.p.rapidapi.com",
            negative_prompt_field="negative_prompt",
            width_field="width",
            height_field="height",
            defaults={
                "sampler_name": "Euler a",
                "batch_size": 1,
                "n_iter": 1,
                "steps": 20,
                "cfg_scale": 7,
                "seed": -1,
                "height": 1024,
                "width": 768,
                "model_name": "meinamix_meinaV9.safetensors",
            },
        ),
    ),
    # --- RapidAPI, JSON pointing at the image ---
    ProviderDescriptor(
        id="dall-e-34",
        label="DALL·E 3 (Rapid)",
        description="DALL·E 3, official via RapidAPI",
        quality="Excellent",
        speed="Slow",
        shape=RequestShape.JSON_URL_RESPONSE,
        config=StructuredApiConfig(
            endpoint="https://dall-e-34.p.rapidapi.com/v1/images/generations",
            host="dall-e-34.p.rapidapi.com",
            defaults={"model": "dall-e-3", "n": 1, "size": "1024x1024", "quality": "standard"},
            envelope="data",
        ),
    ),
    ProviderDescriptor(
        id="flux-gaming-poster",
        label="Flux Poster",
        description="Poster + neon warrior aesthetics",
        quality="Medium",
        speed="Medium",
        shape=RequestShape.JSON_URL_RESPONSE,
        config=StructuredApiConfig(
            endpoint="https://ai-text-to-image-generator-flux-free-api.p.rapidapi.com" + _FLUX_QUICK_PATH,
            host="ai-text-to-image-generator-flux-free-api.p.rapidapi.com",
            defaults={"style_id": 27, "size": "16-9"},
        ),
    ),
    ProviderDescriptor(
        id="flux-alt-api",
        label="Flux Alt",
        description="Alternate flux model",
        quality="Good",
        speed="Medium",
        shape=RequestShape.JSON_URL_RESPONSE,
        config=StructuredApiConfig(
            endpoint="https://ai-text-to-image-generator-flux-free-api-api.p.rapidapi.com" + _FLUX_QUICK_PATH,
            host="ai-text-to-image-generator-flux-free-api-api.p.rapidapi.com",
            defaults={"style_id": 2, "size": "1-1"},
        ),
    ),
    ProviderDescriptor(
        id="gen-imager",
        label="Gen Imager",
        description="Simple, ultra-light API",
        quality="Low",
        speed="Fast",
        shape=RequestShape.JSON_URL_RESPONSE,
        config=StructuredApiConfig(
            endpoint="https://gen-imager.p.rapidapi.com/genimager/index.php",
            host="gen-imager.p.rapidapi.com",
            body_encoding="form",
        ),
    ),
)

PROVIDER_CATALOG: Mapping[str, ProviderDescriptor] = MappingProxyType(
    {descriptor.id: descriptor for descriptor in _DESCRIPTORS}
)


def get_provider(model_id: str, catalog: Mapping[str, ProviderDescriptor] = PROVIDER_CATALOG) -> ProviderDescriptor:
    """Resolve a model identifier, raising UnsupportedModel when unknown"""
    try:
        return catalog[model_id]
    except KeyError:
        raise UnsupportedModel(model_id) from None


def list_providers(catalog: Mapping[str, ProviderDescriptor] = PROVIDER_CATALOG) -> List[ProviderDescriptor]:
    """Descriptors in catalog order"""
    return list(catalog.values())
