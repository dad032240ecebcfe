"""SendGrid email delivery client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

_SUBJECT = "Your PhotoBooth Photos!"


class EmailSender(Protocol):
    """Interface for sending the download link by email."""

    async def send_download_link(self, email: str, download_url: str) -> None:
        """Send a download link to an email address."""


@dataclass
class HttpxSendGridClient(EmailSender):
    """SendGrid v3 mail client using httpx."""

    api_key: str
    from_email: str
    http_client: httpx.AsyncClient
    timeout: float = 10.0
    base_url: str = "https://api.sendgrid.com/v3"

    @classmethod
    def create(
        cls, api_key: str, from_email: str, timeout: float
    ) -> "HttpxSendGridClient":
        """Create a SendGrid client with a managed httpx session."""
        return cls(
            api_key=api_key,
            from_email=from_email,
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    async def send_download_link(self, email: str, download_url: str) -> None:
        """Send the reel link using SendGrid's mail/send API."""
        payload: dict[str, object] = {
            "personalizations": [{"to": [{"email": email}]}],
            "from": {"email": self.from_email},
            "subject": _SUBJECT,
            "content": [
                {"type": "text/plain", "value": _plain_body(download_url)},
                {"type": "text/html", "value": _html_body(download_url)},
            ],
        }
        response = await self.http_client.post(
            f"{self.base_url}/mail/send",
            json=payload,
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=self.timeout,
        )
        response.raise_for_status()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _plain_body(download_url: str) -> str:
    return f"Your PhotoBooth photos are ready! Download them here: {download_url}"


def _html_body(download_url: str) -> str:
    return (
        "<div>"
        "<h1>Your PhotoBooth Photos Are Ready!</h1>"
        "<p>Thanks for using our photobooth! Your photos are ready to download.</p>"
        f'<p><a href="{download_url}">Download Your Photos</a></p>'
        "<p>This link will be available for a limited time.</p>"
        "</div>"
    )
