"""Tests for the link cost model."""

from __future__ import annotations

import math

import numpy as np

from livewire.engine.config import ScissorsConfig
from livewire.engine.cost import INFINITE_COST, NO_LINK, LinkCostModel, quantize_cost
from livewire.engine.features import extract_features
from livewire.engine.image_source import ArrayIntensitySource
from livewire.engine.pixel import NEIGHBOR_OFFSETS, Pixel
from tests.conftest import RAMP_ROWS


def _model(source) -> LinkCostModel:
    return LinkCostModel(extract_features(source))


def test_quantize_bounds():
    assert quantize_cost(0.7) == 255
    assert quantize_cost(0.0) == 0
    assert quantize_cost(-0.2) == 0
    assert quantize_cost(3.0) == 255


def test_quantize_rounds_to_nearest():
    step = 0.7 / 255
    assert quantize_cost(step * 10) == 10
    assert quantize_cost(step * 10.6) == 11
    assert quantize_cost(step * 10.4) == 10


def test_flat_image_costs(flat_source):
    model = _model(flat_source)
    p = Pixel(2, 2)

    assert model.laplacian_cost(p) == 0.0
    assert math.isclose(model.gradient_magnitude_cost(p, Pixel(3, 2)), 1 / math.sqrt(2))
    assert model.gradient_magnitude_cost(p, Pixel(3, 3)) == 1.0
    # Zero direction vectors: both angles are π/2
    assert math.isclose(model.gradient_direction_cost(p, Pixel(3, 2)), 2 / 3)

    assert model.cost(p, Pixel(3, 2)) == 102
    assert model.cost(p, Pixel(3, 3)) == 134


def test_orthogonal_steps_cheaper_than_diagonal(flat_source):
    model = _model(flat_source)
    p = Pixel(2, 2)

    for dx, dy in NEIGHBOR_OFFSETS:
        q = Pixel(p.x + dx, p.y + dy)
        expected = 102 if abs(dx) + abs(dy) == 1 else 134
        assert model.cost(p, q) == expected


def test_invalid_links_are_infinite(flat_source):
    model = _model(flat_source)

    assert model.cost(Pixel(0, 0), Pixel(-1, 0)) == INFINITE_COST
    assert model.cost(Pixel(4, 4), Pixel(5, 5)) == INFINITE_COST
    assert model.cost(Pixel(9, 9), Pixel(8, 8)) == INFINITE_COST
    assert model.cost(Pixel(1, 1), Pixel(3, 1)) == INFINITE_COST
    assert model.cost(Pixel(1, 1), Pixel(1, 1)) == INFINITE_COST
    assert math.isinf(model.gradient_magnitude_cost(Pixel(1, 1), Pixel(3, 1)))
    assert math.isinf(model.weighted_cost(Pixel(1, 1), Pixel(3, 1)))


def test_link_along_edge_beats_crossing_it(edge_source):
    model = _model(edge_source)

    along = model.cost(Pixel(3, 2), Pixel(3, 3))
    crossing = model.cost(Pixel(2, 2), Pixel(3, 2))

    # Along: fz=1, fg=0, fd=0. Crossing: fz=1, fg=0, fd=2/3
    assert along == 109
    assert crossing == 134
    assert model.gradient_direction_cost(Pixel(3, 2), Pixel(3, 3)) == 0.0


def test_direction_cost_is_orientation_free(edge_source):
    model = _model(edge_source)

    down = model.gradient_direction_cost(Pixel(3, 2), Pixel(3, 3))
    up = model.gradient_direction_cost(Pixel(3, 3), Pixel(3, 2))
    assert down == up


def test_zero_crossing_feature():
    model = _model(ArrayIntensitySource(RAMP_ROWS))
    il = model.features.laplacian

    assert il[1, 2] == 80.0
    assert il[1, 3] == -140.0
    assert model.laplacian_cost(Pixel(2, 1)) == 0.0  # closer to zero than its opposite-sign neighbour
    assert model.laplacian_cost(Pixel(3, 1)) == 1.0
    assert model.laplacian_cost(Pixel(4, 1)) == 0.0  # exactly zero
    assert model.laplacian_cost(Pixel(1, 1)) == 1.0


def test_table_matches_scalar_terms(random_source):
    model = _model(random_source)
    table = model.neighbor_costs()

    for y in range(model.height):
        for x in range(model.width):
            p = Pixel(x, y)
            for k, (dx, dy) in enumerate(NEIGHBOR_OFFSETS):
                q = Pixel(x + dx, y + dy)
                if not model.features.in_bounds(q):
                    assert table[k, y, x] == NO_LINK
                    continue
                scalar = quantize_cost(model.weighted_cost(p, q))
                assert abs(int(table[k, y, x]) - scalar) <= 1
                assert model.cost(p, q) == table[k, y, x]
                assert isinstance(model.cost(p, q), int)


def test_table_range_and_read_only(random_source):
    model = _model(random_source)
    table = model.neighbor_costs()
    finite = table[table != NO_LINK]

    assert finite.min() >= 0
    assert finite.max() <= 255
    assert table.shape == (8, model.height, model.width)
    assert not table.flags.writeable


def test_custom_weights_change_scale(flat_source):
    cfg = ScissorsConfig(w_zero_crossing=0.5, w_gradient_magnitude=0.5, w_gradient_direction=0.0)
    model = LinkCostModel(extract_features(flat_source), cfg)

    # Only fg contributes: 0.5 * 1.0 on a diagonal out of a max of 1.0
    assert model.cost(Pixel(1, 1), Pixel(2, 2)) == quantize_cost(0.5, cfg) == 128
    assert np.all(model.neighbor_costs()[model.neighbor_costs() != NO_LINK] <= 255)


def test_table_uses_two_bytes_per_link(random_source):
    model = _model(random_source)
    table = model.neighbor_costs()

    assert table.dtype == np.int16
    assert table.nbytes == 8 * model.width * model.height * 2
    # Offset 0 is (-1, -1): every link out of the top-left corner leaves the image
    assert table[0, 0, 0] == NO_LINK
    assert model.cost(Pixel(0, 0), Pixel(-1, -1)) == INFINITE_COST
