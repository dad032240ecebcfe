"""Reel generation with a remote transform and a local compositing fallback."""

import asyncio
import logging
import secrets
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field

from photobooth_reels.adapters.cloudinary_client import (
    AssetStore,
    TransformStep,
    overlay_id,
)
from photobooth_reels.domain.reels import (
    Err,
    GeneratedReel,
    Ok,
    ReelLayout,
    StrategyResult,
)
from photobooth_reels.domain.sessions import PHOTOS_PER_SESSION
from photobooth_reels.errors import InvalidInputError, ReelGenerationFailedError
from photobooth_reels.services.compositor import compose_reel, cover_fit

logger = logging.getLogger(__name__)

Strategy = Callable[[Sequence[str]], Awaitable[StrategyResult]]

REMOTE_STRATEGY = "remote_transform"
LOCAL_STRATEGY = "local_composite"


def build_reel_transform(
    photo_asset_ids: Sequence[str], layout: ReelLayout
) -> list[TransformStep]:
    """Declarative steps stacking three photos on a padded white canvas."""
    _, second, third = photo_asset_ids
    return [
        {
            "width": layout.final_width,
            "height": layout.final_height,
            "crop": "lpad",
            "background": "white",
            "gravity": "north",
            "y": layout.margin,
        },
        {
            "width": layout.photo_width,
            "height": layout.photo_height,
            "crop": "fill",
        },
        {
            "overlay": overlay_id(second),
            "width": layout.photo_width,
            "height": layout.photo_height,
            "crop": "fill",
            "gravity": "north",
            "y": layout.top_offset(1),
        },
        {
            "overlay": overlay_id(third),
            "width": layout.photo_width,
            "height": layout.photo_height,
            "crop": "fill",
            "gravity": "north",
            "y": layout.top_offset(2),
        },
    ]


def reel_upload_name() -> str:
    """Fresh asset name for a locally composited reel."""
    return f"reel_{int(time.time() * 1000)}_{secrets.token_hex(3)}"


@dataclass
class ReelGenerator:
    """Produces a reel asset from three photo asset ids."""

    asset_store: AssetStore
    folder: str
    layout: ReelLayout = field(default_factory=ReelLayout)
    name_factory: Callable[[], str] = reel_upload_name

    async def generate(self, photo_asset_ids: Sequence[str]) -> GeneratedReel:
        """Try each strategy in order and return the first reel produced."""
        if len(photo_asset_ids) != PHOTOS_PER_SESSION:
            raise InvalidInputError("Exactly 3 photos are required for the reel")
        ids = list(photo_asset_ids)
        strategies: list[tuple[str, Strategy]] = [
            (REMOTE_STRATEGY, self._remote_transform),
            (LOCAL_STRATEGY, self._local_composite),
        ]
        failures: list[tuple[str, Exception]] = []
        for name, strategy in strategies:
            result = await strategy(ids)
            if isinstance(result, Ok):
                return result.value
            failures.append((name, result.cause))
            if name == REMOTE_STRATEGY:
                logger.info(
                    "Remote reel transform failed, compositing locally",
                    extra={"base_asset_id": ids[0], "error": str(result.cause)},
                )
        _, last_cause = failures[-1]
        logger.error(
            "Reel generation failed",
            extra={
                "base_asset_id": ids[0],
                "failures": "; ".join(f"{name}: {cause}" for name, cause in failures),
            },
        )
        raise ReelGenerationFailedError("Failed to generate reel") from last_cause

    async def _remote_transform(
        self, photo_asset_ids: Sequence[str]
    ) -> StrategyResult:
        base_asset_id = photo_asset_ids[0]
        try:
            url = self.asset_store.build_transform_url(
                base_asset_id, build_reel_transform(photo_asset_ids, self.layout)
            )
            await self.asset_store.resolve_transform(url)
        except Exception as exc:  # noqa: BLE001
            return Err(exc)
        return Ok(
            GeneratedReel(
                reel_asset_id=f"{base_asset_id}_reel",
                url=url,
                strategy=REMOTE_STRATEGY,
            )
        )

    async def _local_composite(
        self, photo_asset_ids: Sequence[str]
    ) -> StrategyResult:
        try:
            sources = await self._fetch_all(photo_asset_ids)
            fitted = await asyncio.gather(
                *(
                    asyncio.to_thread(cover_fit, data, self.layout.photo_size)
                    for data in sources
                )
            )
            reel_bytes = await asyncio.to_thread(compose_reel, fitted, self.layout)
            asset_id = await self.asset_store.upload(
                reel_bytes, self.name_factory(), self.folder
            )
        except Exception as exc:  # noqa: BLE001
            return Err(exc)
        return Ok(
            GeneratedReel(
                reel_asset_id=asset_id,
                url=self.asset_store.public_url(asset_id),
                strategy=LOCAL_STRATEGY,
            )
        )

    async def _fetch_all(self, photo_asset_ids: Sequence[str]) -> list[bytes]:
        """Fetch sources concurrently; the first failure cancels the rest."""
        tasks = [
            asyncio.create_task(self.asset_store.fetch_bytes(asset_id))
            for asset_id in photo_asset_ids
        ]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
