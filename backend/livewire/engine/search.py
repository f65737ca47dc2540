"""Incremental single-source shortest paths over the 8-connected pixel graph.

Dijkstra driven by a bounded-range bucket queue: every link cost lies in
[0, M-1], so between two extractions the global minimum grows by at most M-1
and M cyclic buckets indexed by ``cost % M`` are enough to hold the active
set. Instead of decrease-key, an improved pixel is appended again and older
entries are dropped lazily when extracted (the expanded flag tells them apart).

The search never runs to completion on its own. Callers drive it with
``step()`` / ``run(n)`` a bounded number of times per interaction tick and
may re-seed at any moment, which discards all progress.
"""

from __future__ import annotations

import enum
import logging
from collections import deque

import numpy as np
from numpy.typing import NDArray

from livewire.engine.config import ScissorsConfig
from livewire.engine.cost import INFINITE_COST, NO_LINK, LinkCostModel
from livewire.engine.errors import PixelOutOfBoundsError
from livewire.engine.pixel import NEIGHBOR_OFFSETS, Pixel

logger = logging.getLogger(__name__)


class SearchState(enum.Enum):
    IDLE = "idle"
    SEEDED = "seeded"
    CONVERGED = "converged"


class StepResult(enum.Enum):
    CONTINUING = "continuing"
    COMPLETE = "complete"


class BucketQueue:
    """M FIFO buckets of flat pixel indices, scanned cyclically for the minimum."""

    def __init__(self, m: int) -> None:
        self.m = m
        self._buckets: list[deque[int]] = [deque() for _ in range(m)]
        self._size = 0
        self._cursor = 0

    def __len__(self) -> int:
        return self._size

    def clear(self) -> None:
        for bucket in self._buckets:
            bucket.clear()
        self._size = 0
        self._cursor = 0

    def push(self, index: int, cost: int) -> None:
        self._buckets[cost % self.m].append(index)
        self._size += 1

    def pop_min(self) -> int | None:
        """Remove the oldest entry of the first non-empty bucket at or after the cursor."""
        if not self._size:
            return None
        for offset in range(self.m):
            b = (self._cursor + offset) % self.m
            bucket = self._buckets[b]
            if bucket:
                self._cursor = b
                self._size -= 1
                return bucket.popleft()
        return None

    def is_empty(self) -> bool:
        return self._size == 0


class IncrementalPathSearch:
    """Resumable minimum-cost path search from a single seed pixel."""

    def __init__(self, cost_model: LinkCostModel, config: ScissorsConfig | None = None) -> None:
        self.config = config or cost_model.config
        self.width = cost_model.width
        self.height = cost_model.height
        n = self.width * self.height

        # (8, W*H) view of the shared cost table, no copy
        self._link_costs = cost_model.neighbor_costs().reshape(len(NEIGHBOR_OFFSETS), n)
        self._index_offsets = [dx + dy * self.width for dx, dy in NEIGHBOR_OFFSETS]

        self._cumulative = np.full(n, INFINITE_COST, dtype=np.int64)
        self._predecessor = np.full(n, -1, dtype=np.int32)
        self._expanded = np.zeros(n, dtype=bool)
        self._queue = BucketQueue(self.config.m)

        self.seed: Pixel | None = None
        self.state = SearchState.IDLE
        self.last_expanded: Pixel | None = None

    # ------------------------------------------------------------------
    # Seeding and stepping
    # ------------------------------------------------------------------

    def set_seed(self, seed: Pixel) -> None:
        """Reset all search state and start a new search from ``seed``."""
        if not self._in_bounds(seed):
            raise PixelOutOfBoundsError(seed.x, seed.y, self.width, self.height)
        self._cumulative.fill(INFINITE_COST)
        self._predecessor.fill(-1)
        self._expanded.fill(False)
        self._queue.clear()

        index = self._index(seed)
        self._cumulative[index] = 0
        self._queue.push(index, 0)

        self.seed = Pixel(seed.x, seed.y)
        self.state = SearchState.SEEDED
        self.last_expanded = None
        logger.debug("Search seeded at (%d, %d)", seed.x, seed.y)

    def step(self) -> StepResult:
        """Expand at most one pixel."""
        index = self._queue.pop_min()
        if index is None:
            if self.state is SearchState.SEEDED:
                self.state = SearchState.CONVERGED
                logger.debug("Search from %s converged", self.seed)
            return StepResult.COMPLETE

        expanded = self._expanded
        if expanded[index]:
            # Stale duplicate left behind by a later improvement
            return StepResult.CONTINUING
        expanded[index] = True
        self.last_expanded = self._pixel(index)

        base = int(self._cumulative[index])
        cumulative = self._cumulative
        links = self._link_costs[:, index].tolist()
        for link, delta in zip(links, self._index_offsets):
            if link == NO_LINK:
                continue
            neighbor = index + delta
            candidate = base + link
            if candidate < cumulative[neighbor]:
                cumulative[neighbor] = candidate
                self._predecessor[neighbor] = index
                self._queue.push(neighbor, candidate)
        return StepResult.CONTINUING

    def run(self, max_steps: int) -> int:
        """Call ``step()`` up to ``max_steps`` times; returns the number of steps taken."""
        steps = 0
        while steps < max_steps:
            steps += 1
            if self.step() is StepResult.COMPLETE:
                break
        return steps

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_complete(self) -> bool:
        return self._queue.is_empty()

    def cumulative_cost(self, pixel: Pixel) -> int:
        if not self._in_bounds(pixel):
            return INFINITE_COST
        return int(self._cumulative[self._index(pixel)])

    def is_reachable(self, pixel: Pixel) -> bool:
        return self.cumulative_cost(pixel) != INFINITE_COST

    def is_expanded(self, pixel: Pixel) -> bool:
        if not self._in_bounds(pixel):
            return False
        return bool(self._expanded[self._index(pixel)])

    def predecessor(self, pixel: Pixel) -> Pixel | None:
        if not self._in_bounds(pixel):
            return None
        prev = int(self._predecessor[self._index(pixel)])
        return None if prev < 0 else self._pixel(prev)

    def reconstruct_path(self, target: Pixel) -> list[Pixel] | None:
        """Seed → target path, or None when the target is unreached.

        While the search is still running the chain may not reach the seed
        yet; the partial chain is returned in that case.
        """
        if self.seed is None or not self.is_reachable(target):
            return None
        seed_index = self._index(self.seed)
        current = self._index(target)
        chain = [current]
        limit = self.width * self.height
        while current != seed_index:
            prev = int(self._predecessor[current])
            if prev < 0 or len(chain) >= limit:
                logger.warning(
                    "Partial path to (%d, %d): chain stops after %d pixels",
                    target.x,
                    target.y,
                    len(chain),
                )
                break
            chain.append(prev)
            current = prev
        chain.reverse()
        return [self._pixel(i) for i in chain]

    def cost_map(self) -> NDArray[np.int64]:
        """H×W cumulative costs, -1 where unreached."""
        costs = self._cumulative.reshape(self.height, self.width).copy()
        costs[costs == INFINITE_COST] = -1
        return costs

    # ------------------------------------------------------------------
    # Index helpers
    # ------------------------------------------------------------------

    def _in_bounds(self, pixel: Pixel) -> bool:
        return 0 <= pixel.x < self.width and 0 <= pixel.y < self.height

    def _index(self, pixel: Pixel) -> int:
        return pixel.y * self.width + pixel.x

    def _pixel(self, index: int) -> Pixel:
        return Pixel(index % self.width, index // self.width)
