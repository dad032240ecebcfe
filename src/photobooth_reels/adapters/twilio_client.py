"""Twilio SMS delivery client."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class SmsSender(Protocol):
    """Interface for sending the download link by SMS."""

    async def send_download_link(self, phone: str, download_url: str) -> None:
        """Send a download link to a phone number."""


@dataclass
class HttpxTwilioClient(SmsSender):
    """Twilio Messages API client using httpx."""

    account_sid: str
    auth_token: str
    from_number: str
    http_client: httpx.AsyncClient
    timeout: float = 10.0
    base_url: str = "https://api.twilio.com/2010-04-01"

    @classmethod
    def create(
        cls, account_sid: str, auth_token: str, from_number: str, timeout: float
    ) -> "HttpxTwilioClient":
        """Create a Twilio client with a managed httpx session."""
        return cls(
            account_sid=account_sid,
            auth_token=auth_token,
            from_number=from_number,
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    async def send_download_link(self, phone: str, download_url: str) -> None:
        """Send the reel link as a text message."""
        url = f"{self.base_url}/Accounts/{self.account_sid}/Messages.json"
        response = await self.http_client.post(
            url,
            data={
                "To": phone,
                "From": self.from_number,
                "Body": (
                    "Your PhotoBooth photos are ready! "
                    f"Download them here: {download_url}"
                ),
            },
            auth=(self.account_sid, self.auth_token),
            timeout=self.timeout,
        )
        response.raise_for_status()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
