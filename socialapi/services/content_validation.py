"""Content validation and sanitization for posts and comments."""
from __future__ import annotations

import html
import logging
import re
from typing import List, Optional, Sequence

from socialapi.server.errors import InvalidRequestError
from socialapi.server.settings import settings

logger = logging.getLogger(__name__)

URL_PATTERN = re.compile(
    r"https?://[\w\-]+(\.[\w\-]+)+([\w\-.,@?^=%&:/~+#]*[\w\-@?^=%&/~+#])?"
)
HASHTAG_PATTERN = re.compile(r"#\w+")
MENTION_PATTERN = re.compile(r"@\w+")

SUSPICIOUS_PATTERNS = (
    "<script",
    "javascript:",
    "onload=",
    "onerror=",
    "onclick=",
    "data:text/html",
    "vbscript:",
    "expression(",
)
DANGEROUS_SCHEMES = ("javascript:", "data:", "vbscript:")

_SUSPICIOUS_RE = re.compile(
    "|".join(re.escape(pattern) for pattern in SUSPICIOUS_PATTERNS), re.IGNORECASE
)


def _split_types(value: str) -> List[str]:
    return [item.strip().lower() for item in value.split(",") if item.strip()]


def _file_extension(url: str) -> Optional[str]:
    last_dot = url.rfind(".")
    last_slash = url.rfind("/")
    if last_dot > last_slash and last_dot < len(url) - 1:
        return url[last_dot + 1:]
    return None


def _distinct(items) -> List[str]:
    return list(dict.fromkeys(items))


class ContentValidator:
    """Validates text and media before a post or comment is stored.

    Every rejection raises ``InvalidRequestError`` so the caller gets a 400.
    """

    def __init__(
        self,
        max_post_length: Optional[int] = None,
        max_comment_length: Optional[int] = None,
        max_images: Optional[int] = None,
    ) -> None:
        self.max_post_length = max_post_length or settings.CONTENT_MAX_POST_LENGTH
        self.max_comment_length = max_comment_length or settings.CONTENT_MAX_COMMENT_LENGTH
        self.max_images = max_images or settings.CONTENT_MAX_IMAGES
        self.allowed_image_types = _split_types(settings.CONTENT_ALLOWED_IMAGE_TYPES)
        self.allowed_video_types = _split_types(settings.CONTENT_ALLOWED_VIDEO_TYPES)

    # -- text --------------------------------------------------------------

    def _validate_text(self, content: Optional[str], label: str, max_length: int) -> str:
        if content is None or not content.strip():
            raise InvalidRequestError(f"{label} content cannot be empty")
        if len(content) > max_length:
            raise InvalidRequestError(f"{label} content cannot exceed {max_length} characters")

        sanitized = self.sanitize(content)
        if not sanitized:
            raise InvalidRequestError(f"{label} content cannot be empty")
        return sanitized

    def validate_post_content(self, content: Optional[str]) -> str:
        """Return the sanitized post text."""
        return self._validate_text(content, "Post", self.max_post_length)

    def validate_comment_content(self, content: Optional[str]) -> str:
        return self._validate_text(content, "Comment", self.max_comment_length)

    @staticmethod
    def sanitize(content: str) -> str:
        """Escape HTML, strip suspicious patterns, trim."""
        sanitized = html.escape(content, quote=False).replace('"', "&quot;")
        sanitized = _SUSPICIOUS_RE.sub("", sanitized)
        return sanitized.strip()

    @staticmethod
    def is_content_appropriate(content: Optional[str]) -> bool:
        if content is None:
            return True
        lowered = content.lower()
        for pattern in SUSPICIOUS_PATTERNS:
            if pattern in lowered:
                logger.warning("Suspicious content detected: %s", pattern)
                return False
        return True

    # -- media -------------------------------------------------------------

    @staticmethod
    def _validate_url(url: str) -> None:
        lowered = url.lower()
        if lowered.startswith(DANGEROUS_SCHEMES):
            raise InvalidRequestError(f"Dangerous URL protocol: {url}")
        if not URL_PATTERN.fullmatch(url):
            raise InvalidRequestError(f"Invalid URL format: {url}")

    def validate_image_urls(self, image_urls: Optional[Sequence[str]]) -> None:
        if not image_urls:
            return
        if len(image_urls) > self.max_images:
            raise InvalidRequestError(f"Cannot attach more than {self.max_images} images")

        for url in image_urls:
            self._validate_url(url)
            extension = _file_extension(url)
            if extension is None or extension.lower() not in self.allowed_image_types:
                raise InvalidRequestError(
                    f"Invalid image type: {extension}. "
                    f"Allowed types: {', '.join(self.allowed_image_types)}"
                )

    def validate_video_url(self, video_url: Optional[str]) -> None:
        if video_url is None or not video_url.strip():
            return
        self._validate_url(video_url)
        extension = _file_extension(video_url)
        if extension is None or extension.lower() not in self.allowed_video_types:
            raise InvalidRequestError(
                f"Invalid video type: {extension}. "
                f"Allowed types: {', '.join(self.allowed_video_types)}"
            )

    # -- extraction --------------------------------------------------------

    @staticmethod
    def extract_hashtags(content: Optional[str]) -> List[str]:
        """``#Python #python`` -> ``["#python"]``"""
        if not content:
            return []
        return _distinct(match.lower() for match in HASHTAG_PATTERN.findall(content))

    @staticmethod
    def extract_mentions(content: Optional[str]) -> List[str]:
        if not content:
            return []
        return _distinct(match[1:] for match in MENTION_PATTERN.findall(content))

    @staticmethod
    def extract_urls(content: Optional[str]) -> List[str]:
        if not content:
            return []
        return _distinct(match.group(0) for match in URL_PATTERN.finditer(content))


content_validator = ContentValidator()
