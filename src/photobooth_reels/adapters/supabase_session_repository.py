"""Supabase-backed session repository."""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from photobooth_reels.domain.sessions import ReelLink, SessionRecord
from photobooth_reels.errors import DuplicateSlugError, UpstreamUnavailableError
from photobooth_reels.services.sessions import SessionRepository

_TABLE = "photobooth_sessions"
_COLUMNS = (
    "id, event_id, photo_asset_ids, reel_asset_id, reel_url, slug, download_url, "
    "notified_email, notified_phone, created_at, updated_at"
)
_UNIQUE_VIOLATION = "23505"


@dataclass
class SupabaseSessionRepository(SessionRepository):
    """Supabase implementation for photobooth sessions."""

    client: Client

    def create_session(self, event_id: str | None) -> SessionRecord:
        """Insert an empty session row and return it."""
        response = _execute(
            self.client.table(_TABLE).insert(
                {"event_id": event_id, "photo_asset_ids": []}
            )
        )
        if not response.data:
            raise RuntimeError("Failed to create session")
        return _to_record(response.data[0])

    def get_session(self, session_id: UUID) -> SessionRecord | None:
        """Return a session by id, if present."""
        response = _execute(
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .eq("id", str(session_id))
            .limit(1)
        )
        if not response.data:
            return None
        return _to_record(response.data[0])

    def get_session_by_slug(self, slug: str) -> SessionRecord | None:
        """Return the session holding a slug, if any."""
        response = _execute(
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .eq("slug", slug)
            .limit(1)
        )
        if not response.data:
            return None
        return _to_record(response.data[0])

    def set_photos(
        self, session_id: UUID, photo_asset_ids: tuple[str, ...]
    ) -> SessionRecord | None:
        """Replace the photo set in a single update."""
        response = _execute(
            self.client.table(_TABLE)
            .update(
                {
                    "photo_asset_ids": list(photo_asset_ids),
                    "updated_at": _now(),
                }
            )
            .eq("id", str(session_id))
        )
        if not response.data:
            return None
        return _to_record(response.data[0])

    def assign_reel(self, session_id: UUID, reel: ReelLink) -> SessionRecord:
        """Write reel, slug and download URL together."""
        try:
            response = _execute(
                self.client.table(_TABLE)
                .update(
                    {
                        "reel_asset_id": reel.reel_asset_id,
                        "reel_url": reel.reel_url,
                        "slug": reel.slug,
                        "download_url": reel.download_url,
                        "updated_at": _now(),
                    }
                )
                .eq("id", str(session_id))
            )
        except APIError as exc:
            if exc.code == _UNIQUE_VIOLATION:
                raise DuplicateSlugError(reel.slug) from exc
            raise
        if not response.data:
            raise RuntimeError("Failed to assign reel to session")
        return _to_record(response.data[0])

    def record_recipients(
        self, session_id: UUID, email: str | None, phone: str | None
    ) -> None:
        """Update the notified recipient columns that were attempted."""
        payload: dict[str, object] = {"updated_at": _now()}
        if email is not None:
            payload["notified_email"] = email
        if phone is not None:
            payload["notified_phone"] = phone
        _execute(self.client.table(_TABLE).update(payload).eq("id", str(session_id)))


def _execute(query: Any) -> Any:
    try:
        return query.execute()
    except httpx.HTTPError as exc:
        raise UpstreamUnavailableError("Session store unavailable") from exc


def _now() -> str:
    return datetime.now(tz=UTC).isoformat()


def _to_record(row: dict[str, object]) -> SessionRecord:
    reel = None
    if row.get("slug") and row.get("reel_asset_id"):
        reel = ReelLink(
            reel_asset_id=str(row["reel_asset_id"]),
            reel_url=str(row.get("reel_url") or ""),
            slug=str(row["slug"]),
            download_url=str(row.get("download_url") or ""),
        )
    return SessionRecord(
        id=UUID(str(row["id"])),
        event_id=row.get("event_id"),
        photo_asset_ids=tuple(row.get("photo_asset_ids") or ()),
        reel=reel,
        notified_email=row.get("notified_email"),
        notified_phone=row.get("notified_phone"),
        created_at=_parse_timestamp(row.get("created_at")),
        updated_at=_parse_timestamp(row.get("updated_at")),
    )


def _parse_timestamp(value: object) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    return datetime.now(tz=UTC)
