"""Models for notification dispatch results."""

from dataclasses import dataclass
from enum import Enum


class DeliveryOutcome(str, Enum):
    """Outcome of a single notification channel."""

    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class NotificationResult:
    """Per-channel outcomes of a notification request."""

    email: DeliveryOutcome
    sms: DeliveryOutcome

    def as_dict(self) -> dict[str, str]:
        return {"email": self.email.value, "sms": self.sms.value}
