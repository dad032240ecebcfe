"""Session lifecycle: photo attachment, reel completion and sharing."""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from photobooth_reels.adapters.cloudinary_client import AssetStore
from photobooth_reels.domain.notifications import DeliveryOutcome, NotificationResult
from photobooth_reels.domain.sessions import (
    PHOTOS_PER_SESSION,
    CompletionResult,
    PublicReel,
    ReelLink,
    SessionRecord,
    SessionState,
)
from photobooth_reels.errors import (
    ConflictExhaustedError,
    DuplicateSlugError,
    InvalidInputError,
    NotFoundError,
    PreconditionFailedError,
    UpstreamUnavailableError,
)
from photobooth_reels.services.notifications import NotificationService
from photobooth_reels.services.reels import ReelGenerator
from photobooth_reels.services.slugs import build_download_url, generate_slug

logger = logging.getLogger(__name__)


class SessionRepository(Protocol):
    """Persistence interface for photobooth sessions."""

    def create_session(self, event_id: str | None) -> SessionRecord:
        """Create a session with no photos and return it."""

    def get_session(self, session_id: UUID) -> SessionRecord | None:
        """Return a session by id, if present."""

    def get_session_by_slug(self, slug: str) -> SessionRecord | None:
        """Return the session holding a slug, if any."""

    def set_photos(
        self, session_id: UUID, photo_asset_ids: tuple[str, ...]
    ) -> SessionRecord | None:
        """Replace the photo set and return the updated session."""

    def assign_reel(self, session_id: UUID, reel: ReelLink) -> SessionRecord:
        """Store reel, slug and download URL in one update.

        Raises DuplicateSlugError when the slug is already taken.
        """

    def record_recipients(
        self, session_id: UUID, email: str | None, phone: str | None
    ) -> None:
        """Store the last notified recipients; None leaves a field unchanged."""


@dataclass
class SessionService:
    """State machine for a photobooth session."""

    repository: SessionRepository
    reel_generator: ReelGenerator
    notification_service: NotificationService
    asset_store: AssetStore
    base_public_url: str
    slug_max_attempts: int = 5
    slug_factory: Callable[[], str] = generate_slug

    def create(self, event_id: str | None = None) -> SessionRecord:
        """Create an empty session."""
        session = self.repository.create_session(event_id or None)
        logger.info("Created session", extra={"session_id": str(session.id)})
        return session

    def attach_photos(
        self, session_id: UUID, photo_asset_ids: Sequence[str]
    ) -> SessionRecord:
        """Replace the session's photos with exactly three asset ids."""
        photos = _validate_photo_ids(photo_asset_ids)
        session = self._require(session_id)
        if session.state is SessionState.COMPLETED:
            raise PreconditionFailedError("Session is already completed")
        if session.photo_asset_ids == photos:
            return session
        updated = self.repository.set_photos(session_id, photos)
        if updated is None:
            raise NotFoundError("Session not found")
        return updated

    async def complete(self, session_id: UUID) -> CompletionResult:
        """Generate the reel and assign a unique slug and download URL."""
        session = self._require(session_id)
        if session.state is SessionState.COMPLETED:
            raise PreconditionFailedError("Session is already completed")
        if len(session.photo_asset_ids) != PHOTOS_PER_SESSION:
            raise PreconditionFailedError("Session must have exactly 3 photos")

        reel = await self.reel_generator.generate(session.photo_asset_ids)
        for attempt in range(1, self.slug_max_attempts + 1):
            slug = self.slug_factory()
            link = ReelLink(
                reel_asset_id=reel.reel_asset_id,
                reel_url=reel.url,
                slug=slug,
                download_url=build_download_url(self.base_public_url, slug),
            )
            try:
                self.repository.assign_reel(session_id, link)
            except DuplicateSlugError:
                logger.warning(
                    "Slug collision, regenerating",
                    extra={"session_id": str(session_id), "attempt": attempt},
                )
                continue
            logger.info(
                "Completed session",
                extra={"session_id": str(session_id), "strategy": reel.strategy},
            )
            return CompletionResult(
                download_url=link.download_url,
                reel_url=reel.url,
                reel_asset_id=reel.reel_asset_id,
                slug=slug,
            )
        raise ConflictExhaustedError(
            f"No unique slug after {self.slug_max_attempts} attempts"
        )

    async def notify(
        self, session_id: UUID, email: str | None = None, phone: str | None = None
    ) -> NotificationResult:
        """Send the download link over each requested channel."""
        email = (email or "").strip() or None
        phone = (phone or "").strip() or None
        if email is None and phone is None:
            raise InvalidInputError("Email or phone number is required")
        session = self._require(session_id)
        if session.reel is None:
            raise PreconditionFailedError("Session not completed yet")

        result = await self.notification_service.dispatch(
            session.reel.download_url, email=email, phone=phone
        )
        attempted_email = _attempted(email, result.email)
        attempted_phone = _attempted(phone, result.sms)
        if attempted_email or attempted_phone:
            try:
                self.repository.record_recipients(
                    session_id, email=attempted_email, phone=attempted_phone
                )
            except UpstreamUnavailableError:
                logger.exception(
                    "Failed to record notified recipients",
                    extra={"session_id": str(session_id)},
                )
        return result

    def resolve_public(self, slug: str) -> PublicReel:
        """Resolve a public slug to its reel; incomplete sessions look absent."""
        session = self.repository.get_session_by_slug(slug) if slug else None
        if session is None or session.reel is None:
            raise NotFoundError("Reel not found")
        reel = session.reel
        return PublicReel(
            slug=reel.slug,
            reel_asset_id=reel.reel_asset_id,
            reel_url=reel.reel_url or self.asset_store.public_url(reel.reel_asset_id),
        )

    def get(self, session_id: UUID) -> SessionRecord:
        """Return a session or raise NotFoundError."""
        return self._require(session_id)

    def _require(self, session_id: UUID) -> SessionRecord:
        session = self.repository.get_session(session_id)
        if session is None:
            raise NotFoundError("Session not found")
        return session


def _attempted(address: str | None, outcome: DeliveryOutcome) -> str | None:
    return None if outcome is DeliveryOutcome.SKIPPED else address


def _validate_photo_ids(photo_asset_ids: Sequence[str]) -> tuple[str, ...]:
    if isinstance(photo_asset_ids, str) or len(photo_asset_ids) != PHOTOS_PER_SESSION:
        raise InvalidInputError("Exactly 3 photo public IDs are required")
    cleaned = []
    for asset_id in photo_asset_ids:
        if not isinstance(asset_id, str) or not asset_id.strip():
            raise InvalidInputError("Photo public IDs must be non-empty strings")
        cleaned.append(asset_id.strip())
    return tuple(cleaned)
