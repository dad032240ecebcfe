"""Domain models for photobooth sessions."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

PHOTOS_PER_SESSION = 3


class SessionState(str, Enum):
    """Lifecycle state of a session."""

    CREATED = "CREATED"
    PHOTOS_READY = "PHOTOS_READY"
    COMPLETED = "COMPLETED"


@dataclass(frozen=True)
class ReelLink:
    """Reel asset and public link assigned together on completion."""

    reel_asset_id: str
    reel_url: str
    slug: str
    download_url: str


@dataclass(frozen=True)
class SessionRecord:
    """Represents a persisted photobooth session."""

    id: UUID
    event_id: str | None
    photo_asset_ids: tuple[str, ...]
    reel: ReelLink | None
    notified_email: str | None
    notified_phone: str | None
    created_at: datetime
    updated_at: datetime

    @property
    def state(self) -> SessionState:
        if self.reel is not None:
            return SessionState.COMPLETED
        if len(self.photo_asset_ids) == PHOTOS_PER_SESSION:
            return SessionState.PHOTOS_READY
        return SessionState.CREATED

    @property
    def slug(self) -> str | None:
        return self.reel.slug if self.reel else None

    @property
    def reel_asset_id(self) -> str | None:
        return self.reel.reel_asset_id if self.reel else None

    @property
    def download_url(self) -> str | None:
        return self.reel.download_url if self.reel else None


@dataclass(frozen=True)
class CompletionResult:
    """Outcome of completing a session."""

    download_url: str
    reel_url: str
    reel_asset_id: str
    slug: str


@dataclass(frozen=True)
class PublicReel:
    """Publicly resolvable reel for a slug."""

    slug: str
    reel_asset_id: str
    reel_url: str


@dataclass(frozen=True)
class UploadSignature:
    """Credentials letting a client upload directly to the asset store."""

    signature: str
    timestamp: int
    cloud_name: str
    api_key: str
    folder: str
