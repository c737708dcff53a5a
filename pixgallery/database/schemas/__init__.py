"""
Row schemas of the gallery store
"""
from pixgallery.database.schemas.image import ImageBase, ImageCreate, ImageRecord
from pixgallery.database.schemas.comment import CommentRecord, UserProfile
from pixgallery.database.schemas.like import LikeRecord

__all__ = [
    "ImageBase",
    "ImageCreate",
    "ImageRecord",
    "CommentRecord",
    "UserProfile",
    "LikeRecord",
]
