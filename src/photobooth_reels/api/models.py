"""Pydantic models for the session API payloads."""

from pydantic import BaseModel, ConfigDict, Field


class CreateSessionRequest(BaseModel):
    """Body for creating a session."""

    model_config = ConfigDict(populate_by_name=True)

    event_id: str | None = Field(default=None, alias="eventId")


class StorePhotosRequest(BaseModel):
    """Body listing the uploaded photo asset ids, top to bottom."""

    model_config = ConfigDict(populate_by_name=True)

    photo_public_ids: list[str] | None = Field(default=None, alias="photoPublicIds")


class ShareRequest(BaseModel):
    """Body naming the recipients of a download link."""

    email: str | None = None
    phone: str | None = None
