"""FastAPI application factory."""

import html
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from uuid import UUID

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse

from photobooth_reels.api.models import (
    CreateSessionRequest,
    ShareRequest,
    StorePhotosRequest,
)
from photobooth_reels.app_logging import configure_logging
from photobooth_reels.containers import AppContainer
from photobooth_reels.errors import (
    ConflictExhaustedError,
    InvalidInputError,
    NotFoundError,
    PhotoboothError,
    PreconditionFailedError,
    ReelGenerationFailedError,
    UpstreamUnavailableError,
)

_STATUS_BY_ERROR: dict[type[PhotoboothError], int] = {
    InvalidInputError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    PreconditionFailedError: status.HTTP_409_CONFLICT,
    ConflictExhaustedError: status.HTTP_409_CONFLICT,
    ReelGenerationFailedError: status.HTTP_502_BAD_GATEWAY,
    UpstreamUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
}

_SERVER_ERROR_DETAIL: dict[type[PhotoboothError], str] = {
    ReelGenerationFailedError: "Failed to generate reel",
    UpstreamUnavailableError: "Service temporarily unavailable",
}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            app.state.container.bootstrap()
        except Exception:
            logger.exception("Failed to reconcile session indexes")
            raise
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(PhotoboothError)
    async def photobooth_error_handler(
        request: Request, exc: PhotoboothError
    ) -> JSONResponse:
        status_code = _STATUS_BY_ERROR.get(
            type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR
        )
        detail = str(exc)
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(
                "Request failed",
                extra={"path": request.url.path, "kind": exc.kind},
                exc_info=exc,
            )
            detail = _SERVER_ERROR_DETAIL.get(type(exc), "Internal error")
        return JSONResponse(
            status_code=status_code,
            content={"error": exc.kind, "detail": detail},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": InvalidInputError.kind, "detail": "Invalid request"},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok", "timestamp": datetime.now(tz=UTC).isoformat()}

    @app.post("/api/sessions", status_code=status.HTTP_201_CREATED)
    async def create_session(
        request: Request, payload: CreateSessionRequest | None = None
    ) -> dict[str, str]:
        """Create a new photobooth session."""
        state_container: AppContainer = request.app.state.container
        event_id = payload.event_id if payload else None
        session = state_container.session_service.create(event_id)
        return {"sessionId": str(session.id)}

    @app.get("/api/sessions/{session_id}/upload-signature")
    async def upload_signature(session_id: UUID, request: Request) -> dict[str, object]:
        """Return signed parameters for a direct asset store upload."""
        state_container: AppContainer = request.app.state.container
        signed = state_container.upload_signature_service.issue(session_id)
        return {
            "signature": signed.signature,
            "timestamp": signed.timestamp,
            "cloudName": signed.cloud_name,
            "apiKey": signed.api_key,
            "folder": signed.folder,
        }

    @app.post("/api/sessions/{session_id}/photos")
    async def store_photos(
        session_id: UUID, payload: StorePhotosRequest, request: Request
    ) -> dict[str, bool]:
        """Register the three uploaded photo ids with the session."""
        state_container: AppContainer = request.app.state.container
        state_container.session_service.attach_photos(
            session_id, payload.photo_public_ids or []
        )
        return {"success": True}

    @app.post("/api/sessions/{session_id}/complete")
    async def complete_session(session_id: UUID, request: Request) -> dict[str, str]:
        """Generate the reel and return its public download link."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.session_service.complete(session_id)
        return {"downloadUrl": result.download_url, "finalReelUrl": result.reel_url}

    @app.post("/api/sessions/{session_id}/share")
    async def share_session(
        session_id: UUID, payload: ShareRequest, request: Request
    ) -> dict[str, object]:
        """Send the download link by email and/or SMS."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.session_service.notify(
            session_id, email=payload.email, phone=payload.phone
        )
        return {"ok": True, "results": result.as_dict()}

    @app.get("/r/{slug}", response_class=HTMLResponse)
    async def download_page(slug: str, request: Request) -> HTMLResponse:
        """Public page showing a completed reel."""
        state_container: AppContainer = request.app.state.container
        try:
            reel = state_container.session_service.resolve_public(slug)
        except NotFoundError:
            return HTMLResponse(_NOT_FOUND_HTML, status_code=status.HTTP_404_NOT_FOUND)
        return HTMLResponse(_render_download_page(reel.slug, reel.reel_url))

    return app


def _render_download_page(slug: str, image_url: str) -> str:
    """Render the download page for a reel."""
    return _DOWNLOAD_PAGE_HTML.format(
        image_url=html.escape(image_url, quote=True),
        slug=html.escape(slug, quote=True),
    )


_NOT_FOUND_HTML = "<h1>Photo not found</h1>"

_DOWNLOAD_PAGE_HTML = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>Your PhotoBooth Photos</title>
    <style>
      body {{ font-family: ui-sans-serif, system-ui, sans-serif; margin: 2rem; }}
      img {{ max-width: 100%; height: auto; }}
    </style>
  </head>
  <body>
    <h1>Your PhotoBooth Photos!</h1>
    <img src="{image_url}" alt="Your photobooth photos" />
    <p>
      <a href="{image_url}" download="photobooth-{slug}.jpg">Download Photos</a>
    </p>
  </body>
</html>
"""
