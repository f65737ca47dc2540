"""BoundarySession — one live-wire tracing session over one image.

Owns the feature maps, cost model, search and cooling tracker, and turns the
UI's interaction commands into core operations. The UI calls ``tick()`` once
per frame and renders the returned snapshot.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from livewire.engine.config import ScissorsConfig
from livewire.engine.cooling import PathStabilityTracker
from livewire.engine.cost import LinkCostModel
from livewire.engine.features import FeatureMaps, extract_features
from livewire.engine.image_source import ArrayIntensitySource
from livewire.engine.pixel import Pixel, clamp_pixel
from livewire.engine.search import IncrementalPathSearch

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TickSnapshot:
    """Everything the rendering layer needs for one frame."""

    segments: tuple[tuple[Pixel, ...], ...]
    live_path: tuple[Pixel, ...] | None
    seed: Pixel | None
    free_point: Pixel | None
    converging: bool
    auto_committed: bool = False


class BoundarySession:
    def __init__(self, source: ArrayIntensitySource, config: ScissorsConfig | None = None) -> None:
        self.config = config or ScissorsConfig()
        self.source = source
        self.features: FeatureMaps = extract_features(source)
        self.cost_model = LinkCostModel(self.features, self.config)
        self.search = IncrementalPathSearch(self.cost_model, self.config)
        self.tracker = PathStabilityTracker(self.features, self.config)

        self.segments: list[tuple[Pixel, ...]] = []
        self.seed: Pixel | None = None
        self.free_point: Pixel | None = None
        self._live_path: list[Pixel] | None = None
        self._previous_path: list[Pixel] | None = None
        self._last_tick: float | None = None

    @property
    def width(self) -> int:
        return self.features.width

    @property
    def height(self) -> int:
        return self.features.height

    @property
    def converging(self) -> bool:
        return self.seed is not None and not self.search.is_complete()

    # ------------------------------------------------------------------
    # Interaction commands
    # ------------------------------------------------------------------

    def update_cursor(self, raw: Pixel) -> Pixel:
        """Snap a raw cursor position and make it the free point."""
        center = clamp_pixel(raw, self.width, self.height)
        self.free_point = self.features.snap(center, self.config.snap_radius)
        return self.free_point

    def place_first_seed(self, pixel: Pixel | None = None) -> bool:
        """Anchor the boundary at ``pixel`` (default: the free point).

        Only the first seed is placed this way; later seeds come from commits.
        """
        if self.seed is not None:
            logger.debug("Seed already placed at %s; ignoring", self.seed)
            return False
        target = pixel if pixel is not None else self.free_point
        if target is None:
            logger.debug("No pixel to seed at")
            return False
        target = clamp_pixel(target, self.width, self.height)
        self._reseed(target)
        logger.info("First seed placed at (%d, %d)", target.x, target.y)
        return True

    def commit_current_path(self) -> bool:
        """Commit seed → free point once the free point has been reached."""
        if self.seed is None or self.free_point is None:
            logger.debug("Commit ignored: no seed or free point")
            return False
        if not self.search.is_reachable(self.free_point):
            logger.debug("Commit ignored: %s not reached yet", self.free_point)
            return False
        return self.commit_at(self.free_point)

    def commit_at(self, pixel: Pixel) -> bool:
        """Commit seed → ``pixel`` as a segment and re-seed there.

        Paths that do not end at ``pixel`` or have a single pixel are not
        committed.
        """
        path = self.search.reconstruct_path(pixel)
        if path is None or path[-1] != pixel or len(path) <= 1:
            logger.debug("Commit at %s rejected (path %s)", pixel, "missing" if path is None else len(path))
            return False
        self.segments.append(tuple(path))
        logger.info("Committed segment of %d pixels; new seed (%d, %d)", len(path), pixel.x, pixel.y)
        self._reseed(pixel)
        return True

    def clear_boundary(self) -> None:
        self.segments.clear()
        self.seed = None
        self.free_point = None
        self._live_path = None
        self._previous_path = None
        self.tracker.reset()
        logger.info("Boundary cleared")

    # ------------------------------------------------------------------
    # Frame loop
    # ------------------------------------------------------------------

    def tick(self, elapsed: float | None = None) -> TickSnapshot:
        """Advance one frame: expand, accumulate cooling history, refresh the live wire."""
        now = time.perf_counter()
        if elapsed is None:
            elapsed = 0.0 if self._last_tick is None else now - self._last_tick
        self._last_tick = now

        if self.seed is not None and not self.search.is_complete():
            self.search.run(self.config.steps_per_tick)

        if self.seed is not None and self._previous_path:
            self.tracker.update(self._previous_path, elapsed)

        auto_committed = False
        live = self._compute_live_path()
        candidate = self.tracker.find_candidate(live)
        if candidate is not None:
            logger.info("Path cooled at (%d, %d)", candidate.x, candidate.y)
            auto_committed = self.commit_at(candidate)
            if auto_committed:
                live = self._compute_live_path()

        self._live_path = live
        self._previous_path = live
        return self.snapshot(auto_committed=auto_committed)

    def snapshot(self, auto_committed: bool = False) -> TickSnapshot:
        return TickSnapshot(
            segments=tuple(self.segments),
            live_path=tuple(self._live_path) if self._live_path is not None else None,
            seed=self.seed,
            free_point=self.free_point,
            converging=self.converging,
            auto_committed=auto_committed,
        )

    # ------------------------------------------------------------------

    def _compute_live_path(self) -> list[Pixel] | None:
        if self.seed is None or self.free_point is None:
            return None
        return self.search.reconstruct_path(self.free_point)

    def _reseed(self, pixel: Pixel) -> None:
        self.seed = pixel
        self.search.set_seed(pixel)
        self.tracker.reset()
        self._live_path = self._compute_live_path()
