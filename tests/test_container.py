"""Tests for container wiring."""

import asyncio

from photobooth_reels.config import Settings
from photobooth_reels.containers import build_container


def test_build_container_creates_services(settings: Settings) -> None:
    container = build_container(settings)

    assert container.session_service is not None
    assert container.upload_signature_service.cloud_name == "demo"
    assert container.session_service.base_public_url == "https://booth.test"
    assert container.session_service.notification_service.email_sender is None
    assert container.session_service.notification_service.sms_sender is None
    asyncio.run(container.close_resources())


def test_build_container_enables_configured_channels(settings: Settings) -> None:
    configured = settings.model_copy(
        update={
            "sendgrid_api_key": "sg-key",
            "twilio_account_sid": "AC1",
            "twilio_auth_token": "token",
            "twilio_from_number": "+15550000",
            "slug_max_attempts": 7,
        }
    )

    container = build_container(configured)

    notifications = container.session_service.notification_service
    assert notifications.email_sender is not None
    assert notifications.sms_sender is not None
    assert container.session_service.slug_max_attempts == 7
    asyncio.run(container.close_resources())


def test_partial_twilio_settings_leave_sms_disabled(settings: Settings) -> None:
    configured = settings.model_copy(update={"twilio_account_sid": "AC1"})

    container = build_container(configured)

    assert container.session_service.notification_service.sms_sender is None
    asyncio.run(container.close_resources())
