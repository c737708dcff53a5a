"""
Pydantic schemas for comments and the profile fields joined onto them
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, Optional
from datetime import datetime


class UserProfile(BaseModel):
    """Row of the user_profiles table"""
    id: str
    email: str
    full_name: Optional[str] = None
    username: Optional[str] = None
    avatar_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class CommentRecord(BaseModel):
    """Row of the comments table joined with its author's display fields"""
    id: str
    image_id: str
    user_id: str
    content: str = Field(..., min_length=1)
    created_at: datetime
    author_username: Optional[str] = None
    author_full_name: Optional[str] = None
    author_email: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "CommentRecord":
        """Build from a `comments` row selected with `user_profiles(...)`"""
        profile = row.get("user_profiles") or {}
        # PostgREST returns a list when the relationship is not detected as to-one
        if isinstance(profile, list):
            profile = profile[0] if profile else {}

        return cls(
            id=row["id"],
            image_id=row["image_id"],
            user_id=row["user_id"],
            content=row["content"],
            created_at=row["created_at"],
            author_username=profile.get("username"),
            author_full_name=profile.get("full_name"),
            author_email=profile.get("email"),
        )

    @property
    def author_display_name(self) -> Optional[str]:
        """username, then full name, then email"""
        for value in (self.author_username, self.author_full_name, self.author_email):
            if value is not None:
                return value
        return None
