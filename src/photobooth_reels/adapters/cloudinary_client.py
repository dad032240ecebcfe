"""Cloudinary asset store client."""

import hashlib
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol

import httpx

TransformStep = Mapping[str, object]

_PARAM_KEYS = {
    "background": "b",
    "crop": "c",
    "gravity": "g",
    "height": "h",
    "overlay": "l",
    "width": "w",
    "x": "x",
    "y": "y",
}


class AssetStore(Protocol):
    """Interface for the remote asset store used by the reel engine."""

    def sign_upload(self, timestamp: int, folder: str) -> str:
        """Sign upload parameters with the shared secret."""

    def build_transform_url(
        self, base_asset_id: str, steps: Sequence[TransformStep]
    ) -> str:
        """Build a delivery URL applying the transform steps."""

    async def resolve_transform(self, url: str) -> None:
        """Ask the CDN to render a transform URL, raising if it is rejected."""

    async def fetch_bytes(self, asset_id: str) -> bytes:
        """Download the current rendering of an asset."""

    async def upload(self, data: bytes, name: str, folder: str) -> str:
        """Upload bytes and return the stored asset id."""

    def public_url(self, asset_id: str) -> str:
        """Return the public delivery URL for an asset."""


@dataclass
class HttpxCloudinaryClient(AssetStore):
    """Cloudinary client implemented with httpx."""

    cloud_name: str
    api_key: str
    api_secret: str
    http_client: httpx.AsyncClient
    timeout: float = 15.0
    delivery_base_url: str = "https://res.cloudinary.com"
    api_base_url: str = "https://api.cloudinary.com/v1_1"

    @classmethod
    def create(
        cls, cloud_name: str, api_key: str, api_secret: str, timeout: float
    ) -> "HttpxCloudinaryClient":
        """Create a Cloudinary client with a managed httpx session."""
        return cls(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    def sign_upload(self, timestamp: int, folder: str) -> str:
        """Sign folder and timestamp for a direct client upload."""
        return self._sign({"folder": folder, "timestamp": timestamp})

    def build_transform_url(
        self, base_asset_id: str, steps: Sequence[TransformStep]
    ) -> str:
        """Encode transform steps as chained URL components."""
        components = [_encode_step(step) for step in steps]
        path = "/".join([*components, f"{base_asset_id}.jpg"])
        return f"{self._delivery_root()}/{path}"

    async def resolve_transform(self, url: str) -> None:
        """Issue a HEAD request so the CDN renders (or rejects) the transform."""
        response = await self.http_client.head(url, timeout=self.timeout)
        if response.is_success:
            return
        reason = response.headers.get("x-cld-error", response.reason_phrase)
        raise RuntimeError(
            f"Cloudinary rejected transform ({response.status_code}): {reason}"
        )

    async def fetch_bytes(self, asset_id: str) -> bytes:
        """Download an asset's delivery rendering."""
        response = await self.http_client.get(
            self.public_url(asset_id), timeout=self.timeout
        )
        response.raise_for_status()
        return response.content

    async def upload(self, data: bytes, name: str, folder: str) -> str:
        """Upload image bytes with a signed request."""
        params: dict[str, object] = {
            "folder": folder,
            "public_id": name,
            "timestamp": int(time.time()),
        }
        form = {key: str(value) for key, value in params.items()}
        form["api_key"] = self.api_key
        form["signature"] = self._sign(params)
        response = await self.http_client.post(
            f"{self.api_base_url}/{self.cloud_name}/image/upload",
            data=form,
            files={"file": (f"{name}.jpg", data, "image/jpeg")},
            timeout=self.timeout,
        )
        response.raise_for_status()
        payload = response.json()
        public_id = payload.get("public_id")
        if not public_id:
            raise RuntimeError("Cloudinary upload returned no public_id")
        return str(public_id)

    def public_url(self, asset_id: str) -> str:
        """Return the secure delivery URL for an asset."""
        return f"{self._delivery_root()}/{asset_id}"

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    def _delivery_root(self) -> str:
        return f"{self.delivery_base_url}/{self.cloud_name}/image/upload"

    def _sign(self, params: Mapping[str, object]) -> str:
        """Cloudinary request signature: sorted key=value pairs plus secret."""
        to_sign = "&".join(
            f"{key}={params[key]}" for key in sorted(params) if params[key] != ""
        )
        return hashlib.sha1(
            f"{to_sign}{self.api_secret}".encode(), usedforsecurity=False
        ).hexdigest()


def overlay_id(asset_id: str) -> str:
    """Overlay references use colons where public ids use folder slashes."""
    return asset_id.replace("/", ":")


def _encode_step(step: TransformStep) -> str:
    parts = []
    for name, value in step.items():
        key = _PARAM_KEYS.get(name)
        if key is None:
            raise ValueError(f"Unsupported transform parameter: {name}")
        parts.append(f"{key}_{value}")
    return ",".join(sorted(parts))
