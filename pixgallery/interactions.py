"""
Likes and comments of the images currently open in the UI.

Local state is changed only after the remote call succeeded, so a failed
call leaves it exactly as it was. The store is the single owner of the
like/comment counters shown next to an image: callers read them through
`like_state()` / `comment_count()` instead of bumping their own copies.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple

from postgrest.exceptions import APIError

from pixgallery.database.schemas import CommentRecord, ImageRecord, LikeRecord
from pixgallery.errors import EmptyContent, InteractionError
from pixgallery.supabase_service import GalleryBackend
from pixgallery.utils.validators import DataValidators

logger = logging.getLogger(__name__)

# PostgREST: "JSON object requested, multiple (or no) rows returned"
NO_ROWS_CODE = "PGRST116"


class CommentsStatus(str, Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"


@dataclass(frozen=True)
class LikeState:
    """What a card shows for the heart button"""
    liked: bool
    like_count: int


@dataclass
class _ImageState:
    comments: List[CommentRecord] = field(default_factory=list)
    status: CommentsStatus = CommentsStatus.UNLOADED
    loaded_once: bool = False
    inflight: int = 0
    like_count: int = 0
    # False until hydrate() or fetch_likes() gave a real baseline
    like_count_known: bool = False
    comment_count: int = 0
    liked_by: Set[str] = field(default_factory=set)


class InteractionStore:
    """Likes and comments per image, hydrated lazily when an image is opened"""

    def __init__(self, backend: GalleryBackend):
        self.backend = backend
        self._images: Dict[str, _ImageState] = {}

    def _state(self, image_id: str) -> _ImageState:
        state = self._images.get(image_id)
        if state is None:
            state = self._images[image_id] = _ImageState()
        return state

    # --- HYDRATION / READ ACCESS ---

    def hydrate(self, image: ImageRecord):
        """Seed the counters from a feed row without a remote call"""
        state = self._state(image.id)
        state.like_count = image.like_count
        state.like_count_known = True
        state.comment_count = image.comment_count

    def forget(self, image_id: str):
        """Drop the state of an image that is no longer on screen"""
        self._images.pop(image_id, None)

    def comments(self, image_id: str) -> Tuple[CommentRecord, ...]:
        state = self._images.get(image_id)
        return tuple(state.comments) if state else ()

    def comments_status(self, image_id: str) -> CommentsStatus:
        state = self._images.get(image_id)
        return state.status if state else CommentsStatus.UNLOADED

    def comment_count(self, image_id: str) -> int:
        state = self._images.get(image_id)
        return state.comment_count if state else 0

    def like_state(self, image_id: str, user_id: Optional[str] = None) -> LikeState:
        """Heart state of an image; the count is 0 until hydrate()/fetch_likes()/toggle_like() loaded it"""
        state = self._images.get(image_id)
        if state is None:
            return LikeState(liked=False, like_count=0)
        return LikeState(liked=user_id is not None and user_id in state.liked_by, like_count=state.like_count)

    # --- COMMENTS ---

    async def fetch_comments(self, image_id: str):
        """
        Replace the local comment list with the server's, oldest first.

        Safe to call repeatedly (e.g. every time the image is opened).

        Raises:
            InteractionError: op="fetch_comments"; the previous list is kept
        """
        state = self._state(image_id)
        state.inflight += 1
        state.status = CommentsStatus.LOADING

        try:
            rows = await self.backend.list_comments(image_id)
            comments = [CommentRecord.from_row(row) for row in rows]
        except Exception as e:
            state.inflight -= 1
            if state.inflight == 0:
                state.status = CommentsStatus.LOADED if state.loaded_once else CommentsStatus.UNLOADED
            logger.error(f"Error fetching comments for image {image_id}: {e}")
            raise InteractionError("fetch_comments", e) from e

        state.inflight -= 1
        state.comments = comments
        state.comment_count = len(comments)
        state.loaded_once = True
        if state.inflight == 0:
            state.status = CommentsStatus.LOADED

        logger.debug(f"Loaded {len(comments)} comments for image {image_id}")

    async def add_comment(self, image_id: str, content: str, user_id: str) -> CommentRecord:
        """
        Post a comment and append it to the local list

        Args:
            image_id: Commented image
            content: Comment text, stored trimmed
            user_id: Author

        Returns:
            CommentRecord: The created row with author display fields

        Raises:
            EmptyContent: blank text, rejected before any remote call
            InteractionError: op="comment"; local list unchanged
        """
        is_valid, error = DataValidators.validate_comment(content)
        if not is_valid:
            logger.warning(f"Rejected comment on image {image_id}: {error}")
            raise EmptyContent(error)

        try:
            row = await self.backend.insert_comment(image_id, user_id, content.strip())
            comment = CommentRecord.from_row(row)
        except Exception as e:
            logger.error(f"Error adding comment to image {image_id}: {e}")
            raise InteractionError("comment", e) from e

        state = self._state(image_id)
        # new comments are always the latest, appending keeps the order
        state.comments.append(comment)
        state.comment_count += 1

        logger.info(f"Comment {comment.id} added to image {image_id} by {user_id}")
        return comment

    async def delete_comment(self, comment_id: str):
        """
        Delete a comment and remove it from whichever local list holds it

        Raises:
            InteractionError: op="delete"; also raised when the backend deleted
                nothing (e.g. row-level security refused a non-owner)
        """
        try:
            deleted = await self.backend.delete_comment(comment_id)
        except Exception as e:
            logger.error(f"Error deleting comment {comment_id}: {e}")
            raise InteractionError("delete", e) from e

        if not deleted:
            logger.error(f"Comment {comment_id} was not deleted (missing or not permitted)")
            raise InteractionError("delete", PermissionError(f"Comment {comment_id} could not be deleted"))

        for state in self._images.values():
            remaining = [comment for comment in state.comments if comment.id != comment_id]
            if len(remaining) != len(state.comments):
                state.comments = remaining
                state.comment_count = max(0, state.comment_count - 1)

        logger.info(f"Comment {comment_id} deleted")

    # --- LIKES ---

    async def toggle_like(self, image_id: str, user_id: str) -> bool:
        """
        Like or unlike an image

        Check-then-act without locking: the (image_id, user_id) unique
        constraint of the store settles double clicks and other tabs.
        When the image was never hydrated the counter is reloaded from the
        store instead of being adjusted.

        Returns:
            bool: The new liked state

        Raises:
            InteractionError: op="like"; local like state unchanged. Also
                raised when the unlike deleted nothing (e.g. row-level
                security refused it)
        """
        try:
            existing = await self.backend.find_like(image_id, user_id)
            if existing:
                deleted = await self.backend.delete_like(existing['id'])
            else:
                await self.backend.insert_like(image_id, user_id)
        except Exception as e:
            logger.error(f"Error toggling like on image {image_id} for {user_id}: {e}")
            raise InteractionError("like", e) from e

        if existing and not deleted:
            logger.error(f"Like {existing['id']} on image {image_id} was not deleted (missing or not permitted)")
            raise InteractionError("like", PermissionError(f"Like {existing['id']} could not be deleted"))

        liked = not existing
        state = self._state(image_id)
        if liked:
            state.liked_by.add(user_id)
        else:
            state.liked_by.discard(user_id)

        if state.like_count_known:
            state.like_count = state.like_count + 1 if liked else max(0, state.like_count - 1)
        else:
            await self._resync_like_count(image_id, state)

        logger.info(f"User {user_id} {'liked' if liked else 'unliked'} image {image_id}")
        return liked

    async def _resync_like_count(self, image_id: str, state: _ImageState):
        # the toggle already went through; a failed reload only leaves the count unknown
        try:
            rows = await self.backend.list_likes(image_id)
        except Exception as e:
            logger.warning(f"Could not reload like count for image {image_id}: {e}")
            return

        state.liked_by = {row['user_id'] for row in rows}
        state.like_count = len(rows)
        state.like_count_known = True

    async def check_user_like(self, image_id: str, user_id: str) -> bool:
        """
        Whether the user already likes the image (read-only)

        "No row" is a normal answer and yields False.

        Raises:
            InteractionError: op="check_like" for any other failure
        """
        try:
            existing = await self.backend.find_like(image_id, user_id)
        except APIError as e:
            if e.code != NO_ROWS_CODE:
                logger.error(f"Error checking like on image {image_id}: {e}")
                raise InteractionError("check_like", e) from e
            existing = None
        except Exception as e:
            logger.error(f"Error checking like on image {image_id}: {e}")
            raise InteractionError("check_like", e) from e

        state = self._state(image_id)
        if existing:
            state.liked_by.add(user_id)
        else:
            state.liked_by.discard(user_id)
        return bool(existing)

    async def fetch_likes(self, image_id: str) -> List[LikeRecord]:
        """
        Load all likes of an image and resync the like counter

        Raises:
            InteractionError: op="fetch_likes"
        """
        try:
            rows = await self.backend.list_likes(image_id)
            likes = [LikeRecord.model_validate(row) for row in rows]
        except Exception as e:
            logger.error(f"Error fetching likes for image {image_id}: {e}")
            raise InteractionError("fetch_likes", e) from e

        state = self._state(image_id)
        state.liked_by = {like.user_id for like in likes}
        state.like_count = len(likes)
        state.like_count_known = True
        return likes
