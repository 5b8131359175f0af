"""
Tests for the feature extraction module.
"""

import math

import numpy as np
import pytest

from parking_detection.detection import Region
from parking_detection.features import HISTOGRAM_BINS, extract_features, geometric_features


def _region(width, height, rid="r"):
    return Region(id=rid, x=0, y=0, width=width, height=height, confidence=0.8, method="test")


def test_geometric_features():
    geo = geometric_features(_region(50, 40))

    assert geo.area == 2000
    assert geo.aspect_ratio == pytest.approx(1.25)
    assert geo.rectangularity == 1.0
    assert geo.perimeter == 180
    assert geo.compactness == pytest.approx(4 * math.pi * 2000 / 90 ** 2)


def test_geometric_features_degenerate_region_is_finite():
    geo = geometric_features(_region(0, 0))

    assert geo.area == 0
    assert geo.aspect_ratio == 0.0
    assert geo.rectangularity == 0.0
    assert geo.compactness == 0.0
    assert all(math.isfinite(v) for v in (
        geo.area, geo.aspect_ratio, geo.rectangularity, geo.perimeter, geo.compactness,
    ))


def test_extract_preserves_order_and_count():
    regions = [_region(60 + i, 90, rid=f"r{i}") for i in range(12)]
    featured = extract_features(regions, np.random.default_rng(0))

    assert len(featured) == len(regions)
    assert [f.region for f in featured] == regions


def test_sampled_features_are_bounded():
    regions = [_region(70, 90, rid=f"r{i}") for i in range(200)]

    for item in extract_features(regions, np.random.default_rng(1)):
        f = item.features
        assert 0 <= f.intensity.mean <= 255
        assert 20 <= f.intensity.std_dev <= 70
        assert len(f.intensity.histogram) == HISTOGRAM_BINS == 16
        assert all(0 <= b < 100 for b in f.intensity.histogram)
        assert 0 <= f.texture.lbp < 1
        assert 0 <= f.texture.hog < 1000
        assert 0 <= f.texture.gabor < 1
        assert 0 <= f.edge.edge_density < 1
        assert 0 <= f.edge.corner_count <= 9
        assert 0 <= f.edge.gradient_magnitude <= 255


def test_extract_empty():
    assert extract_features([], np.random.default_rng(0)) == []
