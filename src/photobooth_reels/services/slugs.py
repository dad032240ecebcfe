"""Public slug and download URL helpers."""

import secrets
import string

from photobooth_reels.config import normalize_base_url

SLUG_LENGTH = 8
SLUG_ALPHABET = string.ascii_letters + string.digits + "-_"


def generate_slug(length: int = SLUG_LENGTH) -> str:
    """Return a random URL-safe slug (48 bits of entropy at length 8)."""
    return "".join(secrets.choice(SLUG_ALPHABET) for _ in range(length))


def build_download_url(base_public_url: str, slug: str) -> str:
    """Build the public download link for a slug."""
    return f"{normalize_base_url(base_public_url)}/r/{slug}"
