"""Domain models for reel generation."""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class ReelLayout:
    """Geometry of a three-photo vertical reel."""

    photo_width: int = 800
    photo_height: int = 600
    margin: int = 40

    @property
    def final_width(self) -> int:
        return self.photo_width + 2 * self.margin

    @property
    def final_height(self) -> int:
        return 3 * self.photo_height + 4 * self.margin

    @property
    def photo_size(self) -> tuple[int, int]:
        return (self.photo_width, self.photo_height)

    def top_offset(self, index: int) -> int:
        """Return the vertical offset of the photo at ``index`` (0 is top)."""
        return index * self.photo_height + (index + 1) * self.margin

    def offsets(self) -> list[tuple[int, int]]:
        """Return (left, top) paste positions for the three photos."""
        return [(self.margin, self.top_offset(index)) for index in range(3)]


@dataclass(frozen=True)
class GeneratedReel:
    """A reel image available in the asset store."""

    reel_asset_id: str
    url: str
    strategy: str


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful strategy outcome."""

    value: T


@dataclass(frozen=True)
class Err:
    """Failed strategy outcome with its cause."""

    cause: Exception


StrategyResult = Ok[GeneratedReel] | Err
