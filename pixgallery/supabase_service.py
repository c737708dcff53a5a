import logging
from typing import Optional, List, Dict, Any
from supabase import acreate_client, AsyncClient

from pixgallery.config import SupabaseConfig

logger = logging.getLogger(__name__)

COMMENT_WITH_AUTHOR = "*, user_profiles(full_name, username, email)"


async def create_backend(config: SupabaseConfig) -> "GalleryBackend":
    """Connect to Supabase and wrap the client"""
    client = await acreate_client(config.url, config.key)
    logger.info("✅ Supabase client created")
    return GalleryBackend(client, bucket=config.images_bucket)


class GalleryBackend:
    """
    Row-level access to the gallery tables and the image bucket.

    Issues only filter/insert/delete/order queries. Errors from the client are
    not caught here; callers wrap them in their own typed errors.
    """

    def __init__(self, client: AsyncClient, bucket: str = "images"):
        self.client = client
        self.bucket = bucket

    # --- LIKES ---

    async def find_like(self, image_id: str, user_id: str) -> Optional[Dict]:
        """Like row of (image, user) or None"""
        response = await self.client.table('likes') \
            .select('id') \
            .eq('image_id', image_id) \
            .eq('user_id', user_id) \
            .limit(1) \
            .execute()

        if response.data and len(response.data) > 0:
            return response.data[0]
        return None

    async def insert_like(self, image_id: str, user_id: str) -> Dict:
        response = await self.client.table('likes') \
            .insert({'image_id': image_id, 'user_id': user_id}) \
            .execute()

        return response.data[0]

    async def delete_like(self, like_id: str) -> List[Dict]:
        """Delete by id; returns the deleted rows (empty when nothing matched)"""
        response = await self.client.table('likes') \
            .delete() \
            .eq('id', like_id) \
            .execute()

        return response.data or []

    async def list_likes(self, image_id: str) -> List[Dict]:
        response = await self.client.table('likes') \
            .select('*') \
            .eq('image_id', image_id) \
            .execute()

        return response.data or []

    # --- COMMENTS ---

    async def list_comments(self, image_id: str) -> List[Dict]:
        """Comments of an image with author fields, oldest first"""
        response = await self.client.table('comments') \
            .select(COMMENT_WITH_AUTHOR) \
            .eq('image_id', image_id) \
            .order('created_at', desc=False) \
            .execute()

        return response.data or []

    async def get_comment(self, comment_id: str) -> Optional[Dict]:
        response = await self.client.table('comments') \
            .select(COMMENT_WITH_AUTHOR) \
            .eq('id', comment_id) \
            .limit(1) \
            .execute()

        if response.data and len(response.data) > 0:
            return response.data[0]
        return None

    async def insert_comment(self, image_id: str, user_id: str, content: str) -> Dict:
        """Insert a comment and return it joined with its author"""
        response = await self.client.table('comments') \
            .insert({'image_id': image_id, 'user_id': user_id, 'content': content}) \
            .execute()

        row = response.data[0]
        # insert() cannot embed relations, re-read the row with the join
        joined = await self.get_comment(row['id'])
        return joined or row

    async def delete_comment(self, comment_id: str) -> List[Dict]:
        """Delete by id; returns the deleted rows (empty when nothing matched)"""
        response = await self.client.table('comments') \
            .delete() \
            .eq('id', comment_id) \
            .execute()

        return response.data or []

    # --- IMAGES ---

    async def list_images(
        self,
        user_id: Optional[str] = None,
        ai_only: bool = False,
        limit: Optional[int] = None
    ) -> List[Dict]:
        """Images, newest first"""
        query = self.client.table('images').select('*')

        if user_id is not None:
            query = query.eq('user_id', user_id)
        if ai_only:
            query = query.eq('is_ai_generated', True)

        query = query.order('created_at', desc=True)
        if limit is not None:
            query = query.limit(limit)

        response = await query.execute()
        return response.data or []

    async def insert_image(self, row: Dict[str, Any]) -> Dict:
        response = await self.client.table('images') \
            .insert(row) \
            .execute()

        return response.data[0]

    # --- STORAGE ---

    async def upload_blob(self, path: str, data: bytes, content_type: str):
        await self.client.storage.from_(self.bucket).upload(
            path,
            data,
            file_options={'content-type': content_type}
        )

    async def public_url(self, path: str) -> str:
        return await self.client.storage.from_(self.bucket).get_public_url(path)
