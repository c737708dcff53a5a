"""
Feed queries, uploads and downloads of gallery images
"""
import logging
import os
import re
import time
import uuid
from typing import Iterable, List, Optional

import aiofiles
import aiohttp

from pixgallery.config import FeedConfig
from pixgallery.database.schemas import ImageCreate, ImageRecord
from pixgallery.domain.entities import GeneratedAsset, GenerationRequest
from pixgallery.errors import StorageError
from pixgallery.supabase_service import GalleryBackend
from pixgallery.utils.validators import DataValidators

logger = logging.getLogger(__name__)

AI_TITLE_FALLBACK_LENGTH = 50


def _extension_for(content_type: str, file_name: Optional[str] = None, default: str = "png") -> str:
    if file_name and "." in file_name:
        return file_name.rsplit(".", 1)[-1].lower()
    subtype = content_type.split(";", 1)[0].split("/", 1)[-1].strip() if "/" in content_type else ""
    return subtype.split("+", 1)[0] or default


def _safe_file_stem(title: str) -> str:
    stem = re.sub(r"\s+", "_", title.strip())
    stem = re.sub(r"[\\/:*?\"<>|]", "", stem)
    return stem or "image"


class ImageLibrary:
    """Images table + storage bucket: listing, upload, persisting generated assets"""

    def __init__(
        self,
        backend: GalleryBackend,
        feed_config: Optional[FeedConfig] = None,
        session: Optional[aiohttp.ClientSession] = None
    ):
        self.backend = backend
        self.feed_config = feed_config or FeedConfig()
        self.session = session

    # --- FEED ---

    async def _list(self, op: str, **filters) -> List[ImageRecord]:
        try:
            rows = await self.backend.list_images(**filters)
            return [ImageRecord.model_validate(row) for row in rows]
        except Exception as e:
            logger.error(f"Error fetching images ({op}): {e}")
            raise StorageError(op, e) from e

    async def fetch_recent_images(self, limit: Optional[int] = None) -> List[ImageRecord]:
        """Newest images of everyone, capped by the feed limit"""
        return await self._list("fetch_recent", limit=limit or self.feed_config.recent_limit)

    async def fetch_all_images(self) -> List[ImageRecord]:
        return await self._list("fetch_all")

    async def fetch_user_images(self, user_id: str) -> List[ImageRecord]:
        return await self._list("fetch_user", user_id=user_id)

    async def fetch_generated_images(self, limit: Optional[int] = None) -> List[ImageRecord]:
        """Newest AI generated images"""
        return await self._list("fetch_generated", ai_only=True, limit=limit or self.feed_config.recent_limit)

    # --- UPLOAD ---

    async def upload_image(
        self,
        data: bytes,
        content_type: str,
        title: str,
        user_id: str,
        description: Optional[str] = None,
        tags: Iterable[str] = (),
        is_ai_generated: bool = False,
        ai_prompt: Optional[str] = None,
        ai_model: Optional[str] = None,
        file_name: Optional[str] = None
    ) -> ImageRecord:
        """
        Store the bytes in the bucket and insert the images row

        Args:
            data: Image bytes
            content_type: Media type of the bytes
            title: Image title
            user_id: Owner
            description: Optional description
            tags: Free-text tags
            is_ai_generated: Provenance flag
            ai_prompt: Prompt (AI images only)
            ai_model: Model identifier (AI images only)
            file_name: Original file name, used for the extension

        Returns:
            ImageRecord: The inserted row

        Raises:
            ValueError: invalid title or provenance fields (nothing is uploaded)
            StorageError: upload or insert failed
        """
        is_valid, error = DataValidators.validate_title(title)
        if not is_valid:
            raise ValueError(error)

        # provenance is checked before anything is uploaded
        new_image = ImageCreate(
            title=title.strip(),
            description=description,
            tags=DataValidators.normalize_tags(tags),
            image_url="",
            user_id=user_id,
            is_ai_generated=is_ai_generated,
            ai_prompt=ai_prompt,
            ai_model=ai_model,
        )

        extension = _extension_for(content_type, file_name)
        path = f"uploads/{user_id}/{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}.{extension}"

        try:
            await self.backend.upload_blob(path, data, content_type)
            public_url = await self.backend.public_url(path)
        except Exception as e:
            logger.error(f"Error uploading {path}: {e}")
            raise StorageError("upload", e) from e

        new_image = new_image.model_copy(update={"image_url": public_url})

        try:
            row = await self.backend.insert_image(new_image.to_row())
            record = ImageRecord.model_validate(row)
        except Exception as e:
            logger.error(f"Error inserting image row for {path}: {e}")
            raise StorageError("insert", e) from e

        logger.info(f"✅ Image {record.id} uploaded by {user_id} ({len(data) / 1024:.1f}KB)")
        return record

    async def save_generated_image(
        self,
        asset: GeneratedAsset,
        request: GenerationRequest,
        user_id: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        tags: Iterable[str] = ()
    ) -> ImageRecord:
        """Persist a generated asset with its prompt and model"""
        title = title.strip() if title and title.strip() else request.prompt.strip()[:AI_TITLE_FALLBACK_LENGTH]

        return await self.upload_image(
            data=asset.data,
            content_type=asset.media_type,
            title=title,
            user_id=user_id,
            description=description,
            tags=tags,
            is_ai_generated=True,
            ai_prompt=request.prompt,
            ai_model=asset.provider_id,
            file_name=f"ai_generated.{asset.extension}",
        )

    # --- DOWNLOAD ---

    async def _get(self, session, url: str) -> tuple:
        async with session.get(url) as response:
            if response.status != 200:
                raise StorageError("download", RuntimeError(f"HTTP {response.status} for {url}"))
            return await response.read(), response.headers.get("Content-Type") or ""

    async def download_image(self, image: ImageRecord, directory: str) -> str:
        """
        Save an image of the feed to a local directory

        Returns:
            str: Path of the written file
        """
        try:
            if self.session is not None:
                body, content_type = await self._get(self.session, image.image_url)
            else:
                async with aiohttp.ClientSession() as session:
                    body, content_type = await self._get(session, image.image_url)
        except StorageError:
            logger.error(f"Error downloading image {image.id}: HTTP failure")
            raise
        except aiohttp.ClientError as e:
            logger.error(f"Error downloading image {image.id}: {e}")
            raise StorageError("download", e) from e

        os.makedirs(directory, exist_ok=True)
        filepath = os.path.join(directory, f"{_safe_file_stem(image.title)}.{_extension_for(content_type, default='jpg')}")

        try:
            async with aiofiles.open(filepath, 'wb') as f:
                await f.write(body)
        except OSError as e:
            logger.error(f"Error writing {filepath}: {e}")
            raise StorageError("download", e) from e

        logger.debug(f"Image downloaded: {filepath}")
        return filepath
