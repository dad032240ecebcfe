"""Error taxonomy surfaced by the session and reel services."""


class PhotoboothError(Exception):
    """Base exception carrying a stable error kind."""

    kind = "internal"


class InvalidInputError(PhotoboothError):
    """Raised when required fields are missing or malformed."""

    kind = "invalid_input"


class NotFoundError(PhotoboothError):
    """Raised when a referenced session or slug does not exist."""

    kind = "not_found"


class PreconditionFailedError(PhotoboothError):
    """Raised when an operation runs before its required prior state."""

    kind = "precondition_failed"


class ConflictExhaustedError(PhotoboothError):
    """Raised when every slug attempt collided with an existing one."""

    kind = "conflict_exhausted"


class ReelGenerationFailedError(PhotoboothError):
    """Raised when neither reel strategy produced an image."""

    kind = "reel_generation_failed"


class UpstreamUnavailableError(PhotoboothError):
    """Raised when the asset store or a delivery provider is unreachable."""

    kind = "upstream_unavailable"


class DuplicateSlugError(Exception):
    """Raised by repositories when a slug violates the unique index."""

    def __init__(self, slug: str) -> None:
        super().__init__(f"Slug already in use: {slug}")
        self.slug = slug
