"""
Feature extraction for candidate regions.

Geometric features are exact functions of the region's width and height.
Intensity, texture and edge features are bounded random samples standing
in for pixel analysis. Output is one FeaturedRegion per input region, in
input order.
"""

import math
from typing import List, Sequence

import numpy as np

from parking_detection.detection import (
    EdgeFeatures,
    FeatureBundle,
    FeaturedRegion,
    GeometricFeatures,
    IntensityFeatures,
    Region,
    TextureFeatures,
)

HISTOGRAM_BINS = 16


def geometric_features(region: Region) -> GeometricFeatures:
    """Area, aspect ratio, rectangularity, perimeter and compactness.

    Ratios of a zero-width or zero-height region are reported as 0.0.
    """
    w, h = region.width, region.height
    area = w * h
    perimeter = 2 * (w + h)

    # rectangularity is area over its own bounding box, so 1.0 for any real region
    rectangularity = area / (w * h) if area else 0.0
    aspect_ratio = w / h if h else 0.0
    compactness = (4 * math.pi * area) / (w + h) ** 2 if (w + h) else 0.0

    return GeometricFeatures(
        area=float(area),
        aspect_ratio=float(aspect_ratio),
        rectangularity=float(rectangularity),
        perimeter=float(perimeter),
        compactness=float(compactness),
    )


def intensity_features(rng: np.random.Generator) -> IntensityFeatures:
    return IntensityFeatures(
        mean=float(rng.uniform(0, 255)),
        std_dev=float(rng.uniform(20, 70)),
        histogram=tuple(int(v) for v in rng.integers(0, 100, size=HISTOGRAM_BINS)),
    )


def texture_features(rng: np.random.Generator) -> TextureFeatures:
    return TextureFeatures(
        lbp=float(rng.random()),
        hog=float(rng.uniform(0, 1000)),
        gabor=float(rng.random()),
    )


def edge_features(rng: np.random.Generator) -> EdgeFeatures:
    return EdgeFeatures(
        edge_density=float(rng.random()),
        corner_count=int(rng.integers(0, 10)),
        gradient_magnitude=float(rng.uniform(0, 255)),
    )


def extract_features(
    regions: Sequence[Region],
    rng: np.random.Generator,
) -> List[FeaturedRegion]:
    """Attach a FeatureBundle to every region, preserving order."""
    return [
        FeaturedRegion(
            region=region,
            features=FeatureBundle(
                geometric=geometric_features(region),
                intensity=intensity_features(rng),
                texture=texture_features(rng),
                edge=edge_features(rng),
            ),
        )
        for region in regions
    ]
