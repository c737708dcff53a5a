"""
Pydantic schemas for gallery images
"""
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import FrozenSet, List, Optional
from datetime import datetime


class ImageBase(BaseModel):
    """Fields shared by stored and new images"""
    title: str = Field(..., description="Image title")
    description: Optional[str] = Field(None, description="Free-text description")
    tags: List[str] = Field(default_factory=list, description="Free-text tags, order irrelevant")
    image_url: str = Field(..., description="Public URL of the stored blob")
    user_id: str = Field(..., description="Owner id")
    is_ai_generated: bool = Field(False, description="Provenance flag")
    ai_prompt: Optional[str] = Field(None, description="Prompt used for generation")
    ai_model: Optional[str] = Field(None, description="Provider/model identifier used")


class ImageCreate(ImageBase):
    """Insert payload for the images table"""

    @model_validator(mode="after")
    def check_provenance(self):
        # new rows only; stored rows are read back as they are
        if self.is_ai_generated:
            if not self.ai_prompt or not self.ai_model:
                raise ValueError("AI generated images must record ai_prompt and ai_model")
        elif self.ai_prompt is not None or self.ai_model is not None:
            raise ValueError("ai_prompt/ai_model are only allowed on AI generated images")
        return self

    def to_row(self) -> dict:
        return self.model_dump()


class ImageRecord(ImageBase):
    """Row of the images table"""
    id: str
    like_count: int = 0
    comment_count: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def tag_set(self) -> FrozenSet[str]:
        return frozenset(self.tags)
