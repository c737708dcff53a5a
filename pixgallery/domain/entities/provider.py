"""
Static description of an image generation provider
"""
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union


class RequestShape(str, Enum):
    """How a provider is called and how it hands back the image"""
    DIRECT_URL = "direct_url"              # GET, body is the image
    BINARY_RESPONSE = "binary_response"    # POST, body is the image
    JSON_URL_RESPONSE = "json_url_response"  # POST, JSON points at the image


@dataclass(frozen=True)
class DirectUrlConfig:
    """Query-string provider (prompt is part of the URL path)"""
    model: str
    width: int = 1024
    height: int = 1024
    enhance: bool = False
    nologo: bool = False
    private: bool = False
    safe: bool = False
    transparent: bool = False


@dataclass(frozen=True)
class StructuredApiConfig:
    """POST provider behind a RapidAPI host"""
    endpoint: str
    host: str
    prompt_field: str = "prompt"
    defaults: Mapping[str, Any] = field(default_factory=dict, hash=False)
    negative_prompt_field: Optional[str] = None
    width_field: Optional[str] = None
    height_field: Optional[str] = None
    body_encoding: str = "json"  # "json" or "form"
    envelope: Optional[str] = None  # JSON key holding a list whose first item has the URL

    def __post_init__(self):
        if self.body_encoding not in ("json", "form"):
            raise ValueError(f"Unknown body encoding: {self.body_encoding}")
        # freeze the defaults so the catalog cannot be mutated at runtime
        object.__setattr__(self, "defaults", MappingProxyType(dict(self.defaults)))


@dataclass(frozen=True)
class ProviderDescriptor:
    """Catalog entry for one model identifier"""
    id: str
    label: str
    description: str
    quality: str
    speed: str
    shape: RequestShape
    config: Union[DirectUrlConfig, StructuredApiConfig]

    def __post_init__(self):
        expected = DirectUrlConfig if self.shape is RequestShape.DIRECT_URL else StructuredApiConfig
        if not isinstance(self.config, expected):
            raise TypeError(f"{self.id}: shape {self.shape.value} needs {expected.__name__}")

    @property
    def is_structured(self) -> bool:
        return self.shape is not RequestShape.DIRECT_URL
