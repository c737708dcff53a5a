"""
Generation request and the transient asset it produces
"""
from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from pixgallery.utils.validators import DataValidators


class GenerationRequest(BaseModel):
    """What the user asked a provider to draw"""
    prompt: str = Field(..., description="Text prompt, required")
    negative_prompt: Optional[str] = Field(None, description="What should not appear")
    model: str = Field(..., description="Provider/model identifier from the catalog")
    width: Optional[int] = Field(None, gt=0, description="Override of the provider default width")
    height: Optional[int] = Field(None, gt=0, description="Override of the provider default height")

    @field_validator("prompt")
    @classmethod
    def prompt_not_blank(cls, value: str) -> str:
        is_valid, error = DataValidators.validate_prompt(value)
        if not is_valid:
            raise ValueError(error)
        return value


@dataclass
class GeneratedAsset:
    """Raw image bytes returned by a provider, before persist/discard"""
    data: bytes
    media_type: str
    provider_id: str
    source_url: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        """File extension derived from the media type ("image/jpeg" -> "jpeg")"""
        subtype = self.media_type.split(";", 1)[0].split("/", 1)[-1].strip() if "/" in self.media_type else ""
        if not subtype:
            return "png"
        # image/svg+xml -> svg
        return subtype.split("+", 1)[0]

    def __repr__(self) -> str:
        return f"<GeneratedAsset(provider={self.provider_id}, type={self.media_type}, size={self.size}B)>"
