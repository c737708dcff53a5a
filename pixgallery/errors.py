"""
Typed errors raised by the gallery core.

Every failing operation raises one of these; nothing is logged and dropped.
"""
from typing import Optional


class GalleryError(Exception):
    """Base class for all gallery errors"""


# --- GENERATION ---

class GenerationError(GalleryError):
    """Image generation failed for a provider"""

    kind = "generation"

    def __init__(self, provider_id: Optional[str], message: str):
        self.provider_id = provider_id
        self.message = message
        super().__init__(f"[{self.kind}] {provider_id or '-'}: {message}")


class UnsupportedModel(GenerationError):
    kind = "unsupported_model"

    def __init__(self, provider_id: str):
        super().__init__(provider_id, f"Unsupported model: {provider_id!r}")


class UpstreamError(GenerationError):
    """Non-success HTTP status or transport failure"""

    kind = "upstream"

    def __init__(self, provider_id: Optional[str], message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(provider_id, message)


class MissingAssetUrl(GenerationError):
    kind = "missing_asset_url"


class InvalidAssetType(GenerationError):
    kind = "invalid_asset_type"

    def __init__(self, provider_id: Optional[str], media_type: Optional[str]):
        self.media_type = media_type
        super().__init__(provider_id, f"Received data is not an image (content-type: {media_type or 'unknown'})")


# --- INTERACTIONS ---

class InteractionError(GalleryError):
    """A like/comment call against the store failed"""

    def __init__(self, op: str, cause: BaseException):
        self.op = op
        self.cause = cause
        super().__init__(f"Interaction '{op}' failed: {cause}")


class EmptyContent(GalleryError, ValueError):
    """Comment text is empty after trimming"""

    def __init__(self, message: str = "Comment content cannot be empty"):
        super().__init__(message)


# --- STORAGE ---

class StorageError(GalleryError):
    """Image upload, persist, listing or download failed"""

    def __init__(self, op: str, cause: BaseException):
        self.op = op
        self.cause = cause
        super().__init__(f"Storage '{op}' failed: {cause}")
