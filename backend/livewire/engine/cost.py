"""Link cost model — oriented pixel pair → quantized integer cost.

    l(p, q) = Wz·fz(q) + Wg·fg(p, q) + Wd·fd(p, q)

fz  Laplacian zero-crossing, 0 on a crossing, 1 elsewhere
fg  inverse gradient-magnitude ramp, scaled 1/√2 for orthogonal steps
fd  gradient-direction smoothness, (2/3π)(acos(D'(p)·û) + acos(D'(q)·û))

The weighted float cost is mapped onto [0, M-1] so the search can run a
bucket queue. Costs for every pixel and each of the 8 neighbour offsets are
computed once, vectorized, into a (8, H, W) table; the scalar term methods
evaluate the same formulas for a single pair.
"""

from __future__ import annotations

import logging
import math

import numpy as np
from numpy.typing import NDArray

from livewire.engine.config import ScissorsConfig
from livewire.engine.features import FeatureMaps
from livewire.engine.pixel import NEIGHBOR_OFFSETS, ORTHOGONAL_OFFSETS, Pixel, neighbor_index

logger = logging.getLogger(__name__)

# Unreachable / invalid link
INFINITE_COST = int(np.iinfo(np.int64).max)

# Table entry for a link that leaves the image; real costs fit in [0, 255]
NO_LINK = -1

LAPLACIAN_ZERO_THRESHOLD = 1e-6
EPSILON = 1e-6

ORTHOGONAL_GRADIENT_SCALE = 1.0 / math.sqrt(2.0)
DIAGONAL_GRADIENT_SCALE = 1.0

GRADIENT_DIRECTION_SCALE = 2.0 / (3.0 * math.pi)


def quantize_cost(weighted: float, config: ScissorsConfig | None = None) -> int:
    """Map a weighted float cost onto the integer range [0, M-1].

    Rounds half up, so MAXCOST lands exactly on M-1.
    """
    cfg = config or ScissorsConfig()
    max_cost = cfg.max_weighted_cost
    clamped = min(max_cost, max(0.0, weighted))
    scaled = math.floor(clamped * ((cfg.m - 1) / max_cost) + 0.5)
    return min(cfg.m - 1, max(0, int(scaled)))


def _step_scale(dx: int, dy: int) -> float | None:
    adx, ady = abs(dx), abs(dy)
    if adx + ady == 1:
        return ORTHOGONAL_GRADIENT_SCALE
    if adx == 1 and ady == 1:
        return DIAGONAL_GRADIENT_SCALE
    return None


def _shift(arr: NDArray, dx: int, dy: int, fill: float = 0.0) -> tuple[NDArray, NDArray[np.bool_]]:
    """out[y, x] = arr[y + dy, x + dx] where that lies inside, plus the validity mask."""
    h, w = arr.shape[:2]
    out = np.full_like(arr, fill)
    valid = np.zeros((h, w), dtype=bool)
    dst = (slice(max(0, -dy), min(h, h - dy)), slice(max(0, -dx), min(w, w - dx)))
    src = (slice(max(0, dy), min(h, h + dy)), slice(max(0, dx), min(w, w + dx)))
    out[dst] = arr[src]
    valid[dst] = True
    return out, valid


class LinkCostModel:
    """Quantized link costs over one image's feature maps."""

    def __init__(self, features: FeatureMaps, config: ScissorsConfig | None = None) -> None:
        self.features = features
        self.config = config or ScissorsConfig()
        self._table = self._build_table()

    @property
    def width(self) -> int:
        return self.features.width

    @property
    def height(self) -> int:
        return self.features.height

    # ------------------------------------------------------------------
    # Public queries
    # ------------------------------------------------------------------

    def cost(self, p: Pixel, q: Pixel) -> int:
        """Integer cost of the directed link p → q, or INFINITE_COST."""
        if not (self.features.in_bounds(p) and self.features.in_bounds(q)):
            return INFINITE_COST
        k = neighbor_index(q.x - p.x, q.y - p.y)
        if k is None:
            return INFINITE_COST
        link = int(self._table[k, p.y, p.x])
        return INFINITE_COST if link == NO_LINK else link

    def neighbor_costs(self) -> NDArray[np.signedinteger]:
        """Read-only (8, H, W) table; entry [k, y, x] is the cost of (x, y) → (x, y) + offset k.

        Links leaving the image hold NO_LINK.
        """
        return self._table

    def weighted_cost(self, p: Pixel, q: Pixel) -> float:
        """Unquantized cost of p → q (inf for an invalid link)."""
        if not (self.features.in_bounds(p) and self.features.in_bounds(q)):
            return math.inf
        fg = self.gradient_magnitude_cost(p, q)
        if math.isinf(fg):
            return math.inf
        cfg = self.config
        return (
            cfg.w_zero_crossing * self.laplacian_cost(q)
            + cfg.w_gradient_magnitude * fg
            + cfg.w_gradient_direction * self.gradient_direction_cost(p, q)
        )

    def laplacian_cost(self, q: Pixel) -> float:
        """fz(q): 0 when q sits on a Laplacian zero-crossing, else 1."""
        il = self.features.laplacian
        il_q = float(il[q.y, q.x])
        if abs(il_q) < LAPLACIAN_ZERO_THRESHOLD:
            return 0.0
        for dx, dy in ORTHOGONAL_OFFSETS:
            r = Pixel(q.x + dx, q.y + dy)
            if not self.features.in_bounds(r):
                continue
            il_r = float(il[r.y, r.x])
            if il_q * il_r < 0 and abs(il_q) < abs(il_r) - EPSILON:
                return 0.0
        return 1.0

    def gradient_magnitude_cost(self, p: Pixel, q: Pixel) -> float:
        """fg(p, q): (gMax - G(q)) / gMax, scaled by step type."""
        scale = _step_scale(q.x - p.x, q.y - p.y)
        if scale is None:
            return math.inf
        g_max = self.features.g_max
        return (g_max - float(self.features.magnitude[q.y, q.x])) / g_max * scale

    def gradient_direction_cost(self, p: Pixel, q: Pixel) -> float:
        """fd(p, q) in [0, 1]; small when the link follows both tangents."""
        d = self.features.direction
        dp_x, dp_y = float(d[p.y, p.x, 0]), float(d[p.y, p.x, 1])
        dq_x, dq_y = float(d[q.y, q.x, 0]), float(d[q.y, q.x, 1])

        dx, dy = q.x - p.x, q.y - p.y
        sign = 1.0 if dp_x * dx + dp_y * dy >= 0 else -1.0
        link_x, link_y = sign * dx, sign * dy
        norm = math.sqrt(link_x * link_x + link_y * link_y)
        if norm <= EPSILON:
            return 0.0
        ux, uy = link_x / norm, link_y / norm

        cos_p = max(-1.0, min(1.0, dp_x * ux + dp_y * uy))
        cos_q = max(-1.0, min(1.0, dq_x * ux + dq_y * uy))
        fd = GRADIENT_DIRECTION_SCALE * (math.acos(cos_p) + math.acos(cos_q))
        return max(0.0, min(1.0, fd))

    # ------------------------------------------------------------------
    # Vectorized table
    # ------------------------------------------------------------------

    def _zero_crossing_map(self) -> NDArray[np.float64]:
        il = self.features.laplacian
        abs_il = np.abs(il)
        crossing = abs_il < LAPLACIAN_ZERO_THRESHOLD
        for dx, dy in ORTHOGONAL_OFFSETS:
            il_r, valid = _shift(il, dx, dy)
            crossing |= valid & (il * il_r < 0) & (abs_il < np.abs(il_r) - EPSILON)
        return np.where(crossing, 0.0, 1.0)

    def _build_table(self) -> NDArray[np.signedinteger]:
        cfg = self.config
        f = self.features
        fz = self._zero_crossing_map()
        ramp = (f.g_max - f.magnitude) / f.g_max
        d = f.direction
        scale_to_int = (cfg.m - 1) / cfg.max_weighted_cost

        dtype = np.int16 if cfg.m <= np.iinfo(np.int16).max else np.int32
        table = np.full((len(NEIGHBOR_OFFSETS), f.height, f.width), NO_LINK, dtype=dtype)
        for k, (dx, dy) in enumerate(NEIGHBOR_OFFSETS):
            # All terms are indexed by p; q-dependent maps are shifted onto p
            fz_q, valid = _shift(fz, dx, dy)
            ramp_q, _ = _shift(ramp, dx, dy)
            d_q, _ = _shift(d, dx, dy)

            fg = ramp_q * _step_scale(dx, dy)

            sign = np.where(d[..., 0] * dx + d[..., 1] * dy >= 0, 1.0, -1.0)
            link_x, link_y = sign * dx, sign * dy
            norm = math.sqrt(dx * dx + dy * dy)
            ux, uy = link_x / norm, link_y / norm
            cos_p = np.clip(d[..., 0] * ux + d[..., 1] * uy, -1.0, 1.0)
            cos_q = np.clip(d_q[..., 0] * ux + d_q[..., 1] * uy, -1.0, 1.0)
            fd = np.clip(GRADIENT_DIRECTION_SCALE * (np.arccos(cos_p) + np.arccos(cos_q)), 0.0, 1.0)

            weighted = (
                cfg.w_zero_crossing * fz_q
                + cfg.w_gradient_magnitude * fg
                + cfg.w_gradient_direction * fd
            )
            weighted = np.clip(weighted, 0.0, cfg.max_weighted_cost)
            quantized = np.clip(np.floor(weighted * scale_to_int + 0.5), 0, cfg.m - 1).astype(dtype)
            table[k][valid] = quantized[valid]

        table.setflags(write=False)
        logger.debug("Built %s link cost table", "x".join(str(s) for s in table.shape))
        return table
