"""Shared test fixtures."""

import io
import json
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest
from PIL import Image

from photobooth_reels.adapters.cloudinary_client import AssetStore, TransformStep
from photobooth_reels.adapters.sendgrid_client import EmailSender
from photobooth_reels.adapters.twilio_client import SmsSender
from photobooth_reels.config import Settings
from photobooth_reels.containers import AppContainer
from photobooth_reels.domain.sessions import ReelLink, SessionRecord
from photobooth_reels.errors import DuplicateSlugError
from photobooth_reels.services.notifications import NotificationService
from photobooth_reels.services.reels import ReelGenerator
from photobooth_reels.services.sessions import SessionRepository, SessionService
from photobooth_reels.services.uploads import UploadSignatureService

BASE_PUBLIC_URL = "https://booth.test"
RED = (220, 20, 20)
GREEN = (20, 200, 20)
BLUE = (20, 20, 220)


def solid_image_bytes(
    color: tuple[int, int, int], size: tuple[int, int] = (1200, 900)
) -> bytes:
    """Encode a single-colour PNG."""
    output = io.BytesIO()
    Image.new("RGB", size, color).save(output, format="PNG")
    return output.getvalue()


@dataclass
class InMemorySessionRepository(SessionRepository):
    """In-memory session repository with a sparse unique slug index."""

    sessions: dict[UUID, SessionRecord] = field(default_factory=dict)

    def create_session(self, event_id: str | None) -> SessionRecord:
        now = datetime.now(tz=UTC)
        session = SessionRecord(
            id=uuid4(),
            event_id=event_id,
            photo_asset_ids=(),
            reel=None,
            notified_email=None,
            notified_phone=None,
            created_at=now,
            updated_at=now,
        )
        self.sessions[session.id] = session
        return session

    def get_session(self, session_id: UUID) -> SessionRecord | None:
        return self.sessions.get(session_id)

    def get_session_by_slug(self, slug: str) -> SessionRecord | None:
        for session in self.sessions.values():
            if session.slug == slug:
                return session
        return None

    def set_photos(
        self, session_id: UUID, photo_asset_ids: tuple[str, ...]
    ) -> SessionRecord | None:
        session = self.sessions.get(session_id)
        if session is None:
            return None
        updated = replace(
            session,
            photo_asset_ids=photo_asset_ids,
            updated_at=datetime.now(tz=UTC),
        )
        self.sessions[session_id] = updated
        return updated

    def assign_reel(self, session_id: UUID, reel: ReelLink) -> SessionRecord:
        for other in self.sessions.values():
            if other.id != session_id and other.slug == reel.slug:
                raise DuplicateSlugError(reel.slug)
        updated = replace(
            self.sessions[session_id], reel=reel, updated_at=datetime.now(tz=UTC)
        )
        self.sessions[session_id] = updated
        return updated

    def record_recipients(
        self, session_id: UUID, email: str | None, phone: str | None
    ) -> None:
        session = self.sessions[session_id]
        self.sessions[session_id] = replace(
            session,
            notified_email=email if email is not None else session.notified_email,
            notified_phone=phone if phone is not None else session.notified_phone,
            updated_at=datetime.now(tz=UTC),
        )


@dataclass
class FakeAssetStore(AssetStore):
    """Asset store double serving in-memory images."""

    images: dict[str, bytes] = field(default_factory=dict)
    transform_error: Exception | None = None
    fetch_errors: dict[str, Exception] = field(default_factory=dict)
    upload_error: Exception | None = None
    resolved_urls: list[str] = field(default_factory=list)
    fetched: list[str] = field(default_factory=list)
    uploads: list[tuple[bytes, str, str]] = field(default_factory=list)

    def sign_upload(self, timestamp: int, folder: str) -> str:
        return f"sig:{folder}:{timestamp}"

    def build_transform_url(
        self, base_asset_id: str, steps: Sequence[TransformStep]
    ) -> str:
        encoded = json.dumps([dict(step) for step in steps], sort_keys=True)
        return f"https://cdn.test/transform/{base_asset_id}.jpg?steps={encoded}"

    async def resolve_transform(self, url: str) -> None:
        self.resolved_urls.append(url)
        if self.transform_error is not None:
            raise self.transform_error

    async def fetch_bytes(self, asset_id: str) -> bytes:
        self.fetched.append(asset_id)
        if asset_id in self.fetch_errors:
            raise self.fetch_errors[asset_id]
        return self.images[asset_id]

    async def upload(self, data: bytes, name: str, folder: str) -> str:
        if self.upload_error is not None:
            raise self.upload_error
        self.uploads.append((data, name, folder))
        return f"{folder}/{name}"

    def public_url(self, asset_id: str) -> str:
        return f"https://cdn.test/{asset_id}"


@dataclass
class FakeEmailSender(EmailSender):
    """Email sender that records deliveries."""

    sent: list[tuple[str, str]] = field(default_factory=list)
    error: Exception | None = None

    async def send_download_link(self, email: str, download_url: str) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append((email, download_url))


@dataclass
class FakeSmsSender(SmsSender):
    """SMS sender that records deliveries."""

    sent: list[tuple[str, str]] = field(default_factory=list)
    error: Exception | None = None

    async def send_download_link(self, phone: str, download_url: str) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append((phone, download_url))


def build_session_service(
    repository: InMemorySessionRepository,
    asset_store: FakeAssetStore,
    email_sender: FakeEmailSender | None = None,
    sms_sender: FakeSmsSender | None = None,
    **overrides: object,
) -> SessionService:
    """Wire a session service around test doubles."""
    return SessionService(
        repository=repository,
        reel_generator=ReelGenerator(asset_store=asset_store, folder="photobooth"),
        notification_service=NotificationService(
            email_sender=email_sender, sms_sender=sms_sender
        ),
        asset_store=asset_store,
        base_public_url=BASE_PUBLIC_URL,
        **overrides,  # type: ignore[arg-type]
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        base_public_url=f"{BASE_PUBLIC_URL}/",
        cloudinary_cloud_name="demo",
        cloudinary_api_key="cloud-key",
        cloudinary_api_secret="cloud-secret",
    )


@pytest.fixture
def session_repository() -> InMemorySessionRepository:
    return InMemorySessionRepository()


@pytest.fixture
def asset_store() -> FakeAssetStore:
    return FakeAssetStore(
        images={
            "p1": solid_image_bytes(RED),
            "p2": solid_image_bytes(GREEN),
            "p3": solid_image_bytes(BLUE),
        }
    )


@pytest.fixture
def email_sender() -> FakeEmailSender:
    return FakeEmailSender()


@pytest.fixture
def sms_sender() -> FakeSmsSender:
    return FakeSmsSender()


@pytest.fixture
def session_service(
    session_repository: InMemorySessionRepository,
    asset_store: FakeAssetStore,
    email_sender: FakeEmailSender,
    sms_sender: FakeSmsSender,
) -> SessionService:
    return build_session_service(
        session_repository, asset_store, email_sender, sms_sender
    )


@pytest.fixture
def bootstrap_calls() -> list[str]:
    return []


@pytest.fixture
def container(
    settings: Settings,
    session_repository: InMemorySessionRepository,
    asset_store: FakeAssetStore,
    session_service: SessionService,
    bootstrap_calls: list[str],
) -> AppContainer:
    upload_signature_service = UploadSignatureService(
        repository=session_repository,
        asset_store=asset_store,
        cloud_name=settings.cloudinary_cloud_name,
        api_key=settings.cloudinary_api_key,
        folder=settings.cloudinary_folder,
        clock=lambda: 1700000000.4,
    )

    def bootstrap() -> None:
        bootstrap_calls.append("reconcile")

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        asset_store=asset_store,
        session_service=session_service,
        upload_signature_service=upload_signature_service,
        bootstrap=bootstrap,
        close_resources=close_resources,
    )
