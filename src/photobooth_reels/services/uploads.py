"""Signed credentials for direct client uploads."""

import time
from collections.abc import Callable
from dataclasses import dataclass
from uuid import UUID

from photobooth_reels.adapters.cloudinary_client import AssetStore
from photobooth_reels.domain.sessions import UploadSignature
from photobooth_reels.errors import NotFoundError
from photobooth_reels.services.sessions import SessionRepository


@dataclass
class UploadSignatureService:
    """Issues upload signatures for existing sessions."""

    repository: SessionRepository
    asset_store: AssetStore
    cloud_name: str
    api_key: str
    folder: str
    clock: Callable[[], float] = time.time

    def issue(self, session_id: UUID) -> UploadSignature:
        """Return signed upload parameters without exposing the secret."""
        if self.repository.get_session(session_id) is None:
            raise NotFoundError("Session not found")
        timestamp = round(self.clock())
        return UploadSignature(
            signature=self.asset_store.sign_upload(timestamp, self.folder),
            timestamp=timestamp,
            cloud_name=self.cloud_name,
            api_key=self.api_key,
            folder=self.folder,
        )
