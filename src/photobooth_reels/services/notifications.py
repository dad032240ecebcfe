"""Per-channel delivery of finished reel links."""

import asyncio
import logging
from dataclasses import dataclass

from photobooth_reels.adapters.sendgrid_client import EmailSender
from photobooth_reels.adapters.twilio_client import SmsSender
from photobooth_reels.domain.notifications import DeliveryOutcome, NotificationResult

logger = logging.getLogger(__name__)


@dataclass
class NotificationService:
    """Sends a download link by email and SMS, one outcome per channel."""

    email_sender: EmailSender | None
    sms_sender: SmsSender | None

    async def dispatch(
        self, download_url: str, email: str | None = None, phone: str | None = None
    ) -> NotificationResult:
        """Attempt both channels independently; channel errors become outcomes."""
        email_outcome, sms_outcome = await asyncio.gather(
            _deliver("email", self.email_sender, email, download_url),
            _deliver("sms", self.sms_sender, phone, download_url),
        )
        return NotificationResult(email=email_outcome, sms=sms_outcome)


async def _deliver(
    channel: str,
    sender: EmailSender | SmsSender | None,
    recipient: str | None,
    download_url: str,
) -> DeliveryOutcome:
    if not recipient:
        return DeliveryOutcome.SKIPPED
    if sender is None:
        logger.warning("%s delivery is not configured, skipping", channel)
        return DeliveryOutcome.SKIPPED
    try:
        await sender.send_download_link(recipient, download_url)
    except Exception:
        logger.exception("Failed to send %s notification", channel)
        return DeliveryOutcome.FAILED
    logger.info("Sent %s notification", channel)
    return DeliveryOutcome.SENT
