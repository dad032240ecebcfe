"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from photobooth_reels.adapters.cloudinary_client import (
    AssetStore,
    HttpxCloudinaryClient,
)
from photobooth_reels.adapters.sendgrid_client import HttpxSendGridClient
from photobooth_reels.adapters.supabase_index_bootstrap import (
    SupabaseSlugIndexReconciler,
)
from photobooth_reels.adapters.supabase_session_repository import (
    SupabaseSessionRepository,
)
from photobooth_reels.adapters.twilio_client import HttpxTwilioClient
from photobooth_reels.config import Settings, normalize_base_url, twilio_configured
from photobooth_reels.services.notifications import NotificationService
from photobooth_reels.services.reels import ReelGenerator
from photobooth_reels.services.sessions import SessionService
from photobooth_reels.services.uploads import UploadSignatureService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    asset_store: AssetStore
    session_service: SessionService
    upload_signature_service: UploadSignatureService
    bootstrap: Callable[[], None]
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    timeout = resolved_settings.http_timeout_seconds
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    session_repository = SupabaseSessionRepository(supabase_client)
    index_reconciler = SupabaseSlugIndexReconciler(supabase_client)
    cloudinary_client = HttpxCloudinaryClient.create(
        cloud_name=resolved_settings.cloudinary_cloud_name,
        api_key=resolved_settings.cloudinary_api_key,
        api_secret=resolved_settings.cloudinary_api_secret,
        timeout=timeout,
    )
    email_client = None
    if resolved_settings.sendgrid_api_key:
        email_client = HttpxSendGridClient.create(
            api_key=resolved_settings.sendgrid_api_key,
            from_email=resolved_settings.from_email,
            timeout=timeout,
        )
    sms_client = None
    if twilio_configured(resolved_settings):
        sms_client = HttpxTwilioClient.create(
            account_sid=str(resolved_settings.twilio_account_sid),
            auth_token=str(resolved_settings.twilio_auth_token),
            from_number=str(resolved_settings.twilio_from_number),
            timeout=timeout,
        )
    reel_generator = ReelGenerator(
        asset_store=cloudinary_client,
        folder=resolved_settings.cloudinary_folder,
    )
    session_service = SessionService(
        repository=session_repository,
        reel_generator=reel_generator,
        notification_service=NotificationService(
            email_sender=email_client, sms_sender=sms_client
        ),
        asset_store=cloudinary_client,
        base_public_url=normalize_base_url(resolved_settings.base_public_url),
        slug_max_attempts=resolved_settings.slug_max_attempts,
    )
    upload_signature_service = UploadSignatureService(
        repository=session_repository,
        asset_store=cloudinary_client,
        cloud_name=resolved_settings.cloudinary_cloud_name,
        api_key=resolved_settings.cloudinary_api_key,
        folder=resolved_settings.cloudinary_folder,
    )

    def bootstrap() -> None:
        index_reconciler.reconcile()

    async def close_resources() -> None:
        await cloudinary_client.close()
        if email_client is not None:
            await email_client.close()
        if sms_client is not None:
            await sms_client.close()

    return AppContainer(
        settings=resolved_settings,
        asset_store=cloudinary_client,
        session_service=session_service,
        upload_signature_service=upload_signature_service,
        bootstrap=bootstrap,
        close_resources=close_resources,
    )
