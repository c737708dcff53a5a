"""
Input validators
"""
import re
from typing import Optional, List, Iterable
import logging

logger = logging.getLogger(__name__)

class DataValidators:
    """Validators for user-supplied text"""

    MAX_PROMPT_LENGTH = 2000
    MAX_TITLE_LENGTH = 200
    MAX_TAG_LENGTH = 50

    DANGEROUS_TAGS = ["<script", "<iframe", "<object", "<embed"]

    @staticmethod
    def validate_comment(text: Optional[str]) -> tuple[bool, Optional[str]]:
        """
        Validate comment text

        Returns:
            (is_valid, error_message)
        """
        if not text or not text.strip():
            return False, "Comment cannot be empty"

        return True, None

    @staticmethod
    def validate_prompt(prompt: Optional[str]) -> tuple[bool, Optional[str]]:
        """
        Validate an image generation prompt

        Returns:
            (is_valid, error_message)
        """
        if not prompt or not prompt.strip():
            return False, "Please enter a prompt"

        if len(prompt) > DataValidators.MAX_PROMPT_LENGTH:
            return False, f"Prompt is too long (max {DataValidators.MAX_PROMPT_LENGTH} characters)"

        return True, None

    @staticmethod
    def validate_title(title: Optional[str]) -> tuple[bool, Optional[str]]:
        """
        Validate an image title

        Returns:
            (is_valid, error_message)
        """
        if not title or not title.strip():
            return False, "Title cannot be empty"

        if len(title) > DataValidators.MAX_TITLE_LENGTH:
            return False, f"Title is too long (max {DataValidators.MAX_TITLE_LENGTH} characters)"

        lowered = title.lower()
        for tag in DataValidators.DANGEROUS_TAGS:
            if tag in lowered:
                return False, "Title contains forbidden HTML tags"

        return True, None

    @staticmethod
    def parse_tags(raw: Optional[str]) -> List[str]:
        """
        Split a comma separated tag string

        "fantasy, art,,landscape" -> ["fantasy", "art", "landscape"]
        """
        if not raw:
            return []
        return DataValidators.normalize_tags(raw.split(','))

    @staticmethod
    def normalize_tags(tags: Iterable[str]) -> List[str]:
        """Strip, drop empties and duplicates (first occurrence wins)"""
        result = []
        seen = set()
        for tag in tags:
            clean = re.sub(r'\s+', ' ', tag).strip()
            if not clean or clean in seen:
                continue
            if len(clean) > DataValidators.MAX_TAG_LENGTH:
                logger.warning(f"Tag truncated to {DataValidators.MAX_TAG_LENGTH} characters: {clean[:20]}...")
                clean = clean[:DataValidators.MAX_TAG_LENGTH]
            seen.add(clean)
            result.append(clean)
        return result
