"""
Interaction and generation core of a social image gallery.

- `InteractionStore`: likes and comments of the open images
- `GenerationDispatcher`: one contract over the image generation providers
- `distribute` / `column_count_for_width`: masonry column assignment
- `ImageLibrary`: feed queries, uploads and downloads
"""
from pixgallery.config import GalleryConfig
from pixgallery.errors import (
    EmptyContent,
    GalleryError,
    GenerationError,
    InteractionError,
    InvalidAssetType,
    MissingAssetUrl,
    StorageError,
    UnsupportedModel,
    UpstreamError,
)
from pixgallery.domain.entities import GeneratedAsset, GenerationRequest
from pixgallery.image_library import ImageLibrary
from pixgallery.image_service import GenerationDispatcher
from pixgallery.interactions import CommentsStatus, InteractionStore, LikeState
from pixgallery.layout import MasonryLayout, column_count_for_width, distribute
from pixgallery.supabase_service import GalleryBackend, create_backend

__all__ = [
    "GalleryConfig",
    "EmptyContent",
    "GalleryError",
    "GenerationError",
    "InteractionError",
    "InvalidAssetType",
    "MissingAssetUrl",
    "StorageError",
    "UnsupportedModel",
    "UpstreamError",
    "GeneratedAsset",
    "GenerationRequest",
    "ImageLibrary",
    "GenerationDispatcher",
    "CommentsStatus",
    "InteractionStore",
    "LikeState",
    "MasonryLayout",
    "column_count_for_width",
    "distribute",
    "GalleryBackend",
    "create_backend",
]
