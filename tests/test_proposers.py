"""
Tests for the region proposal strategies.
"""

import math

import numpy as np
import pytest

from parking_detection.errors import UnknownStrategyError
from parking_detection.frame import Frame
from parking_detection.proposers import (
    PROPOSERS,
    RegionProposer,
    create_proposer,
    generate_anchors,
    propose_regions,
)

FRAME = Frame(width=800, height=600)


def _rng(seed=0):
    return np.random.default_rng(seed)


def test_registry_lists_all_methods():
    assert list(PROPOSERS) == [
        "edge_detection",
        "selective_search",
        "connected_components",
        "deep_learning",
    ]
    for name, cls in PROPOSERS.items():
        assert issubclass(cls, RegionProposer)
        assert cls.name == name


def test_unknown_method_raises():
    with pytest.raises(UnknownStrategyError, match="hough_lines"):
        create_proposer("hough_lines")


def test_edge_detection_grid():
    """Test the 4x8 jittered grid."""
    regions = propose_regions(FRAME, "edge_detection", _rng())

    assert len(regions) == 32
    assert regions[0].id == "region_0_0"
    assert regions[-1].id == "region_3_7"

    for region in regions:
        row, col = (int(v) for v in region.id.split("_")[1:])
        assert abs(region.x - (col * 90 + 50)) <= 5
        assert abs(region.y - (row * 120 + 80)) <= 5
        assert 60 <= region.width <= 80
        assert 80 <= region.height <= 100
        assert 0.6 <= region.confidence <= 0.9
        assert region.method == "edge_detection"
        assert 10 <= region.attributes["edges"]["strong"] <= 29
        assert 5 <= region.attributes["edges"]["weak"] <= 19


def test_selective_search_damps_grid_confidence():
    """Same seed → same grid, confidence scaled by 0.9."""
    grid = propose_regions(FRAME, "edge_detection", _rng(3))
    selective = propose_regions(FRAME, "selective_search", _rng(3))

    assert len(selective) == len(grid) == 32
    for base, region in zip(grid, selective):
        assert region.confidence == pytest.approx(base.confidence * 0.9)
        assert (region.x, region.y, region.width, region.height) == (
            base.x, base.y, base.width, base.height,
        )
        assert region.method == "selective_search"
        assert 0.0 <= region.attributes["diversityScore"] < 1.0


@pytest.mark.parametrize("seed", range(10))
def test_connected_components_count_and_bounds(seed):
    regions = propose_regions(FRAME, "connected_components", _rng(seed))

    assert 20 <= len(regions) <= 34
    for i, region in enumerate(regions):
        assert region.id == f"component_{i}"
        assert region.attributes["label"] == i + 1
        assert 50 <= region.x < 750
        assert 50 <= region.y < 550
        assert 40 <= region.width < 140
        assert 60 <= region.height < 180
        assert 0.2 <= region.confidence <= 1.0
        assert 500 <= region.attributes["pixelCount"] < 2500


def test_connected_components_small_frame_stays_at_margin():
    regions = propose_regions(Frame(width=80, height=80), "connected_components", _rng())
    assert all(r.x == 50 and r.y == 50 for r in regions)


def test_connected_components_zero_area_frame_is_degenerate():
    regions = propose_regions(Frame(width=0, height=0), "connected_components", _rng())

    assert 20 <= len(regions) <= 34
    assert all(r.width == 0 and r.height == 0 for r in regions)
    assert all(r.x == 0 and r.y == 0 for r in regions)


def test_connected_components_tiny_frame_positions_in_bounds():
    regions = propose_regions(Frame(width=30, height=20), "connected_components", _rng())
    assert all(r.x <= 30 and r.y <= 20 for r in regions)


def test_anchor_set():
    anchors = generate_anchors(FRAME)

    assert len(anchors) == 288
    x, y, w, h = anchors[0]
    assert (x, y) == (50, 80)
    assert w == pytest.approx(80 * 0.8 * math.sqrt(0.5))
    assert h == pytest.approx(100 * 0.8 / math.sqrt(0.5))


def test_deep_learning_survival():
    regions = propose_regions(FRAME, "deep_learning", _rng(11))

    assert 0 < len(regions) <= 288
    assert len({r.id for r in regions}) == len(regions)
    for region in regions:
        assert region.id.startswith("dl_region_")
        assert 0.6 <= region.confidence < 1.0
        assert region.attributes["layer"] == "conv5"
        assert region.attributes["receptiveField"] == 160


def test_deep_learning_survival_rate_is_about_seventy_percent():
    counts = [len(propose_regions(FRAME, "deep_learning", _rng(s))) for s in range(50)]
    mean_rate = sum(counts) / (len(counts) * 288)
    assert 0.63 < mean_rate < 0.77


def test_zero_area_frame_keeps_cardinality():
    """Grid and anchor strategies emit degenerate regions for empty frames."""
    empty = Frame(width=0, height=0)

    grid = propose_regions(empty, "edge_detection", _rng())
    assert len(grid) == 32
    assert all(r.width == 0 and r.height == 0 for r in grid)

    anchors = generate_anchors(empty)
    assert len(anchors) == 288
    assert all(w == 0 and h == 0 for _, _, w, h in anchors)


def test_seeded_proposals_are_reproducible():
    a = propose_regions(FRAME, "connected_components", _rng(5))
    b = propose_regions(FRAME, "connected_components", _rng(5))
    assert a == b
