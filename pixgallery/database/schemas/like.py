"""
Pydantic schema for likes
"""
from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime


class LikeRecord(BaseModel):
    """Row of the likes table, unique per (image_id, user_id)"""
    id: str
    image_id: str
    user_id: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
