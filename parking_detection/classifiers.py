"""
Classification strategies for featured regions.

Responsibility:
    Decide, for every FeaturedRegion, whether it is a parking spot and
    with what confidence. Four interchangeable strategies are registered
    in CLASSIFIERS:

        sift_modified   keypoint heuristic on the proposal confidence
        mlp_classifier  weighted geometric/intensity/texture score (default)
        resnet34        proposal confidence boosted by 1.1, threshold 0.7
        dcnn            proposal confidence boosted by 1.05, threshold 0.65

    Output is one ClassifiedSpot per input, in input order.

Failure behavior:
    Malformed feature bundles never raise: a missing feature group, field
    or None value is scored as 0. Unknown method names raise
    UnknownStrategyError.
"""

import math
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type

import numpy as np

from parking_detection.config import ThresholdConfig
from parking_detection.detection import Classification, ClassifiedSpot, FeaturedRegion
from parking_detection.errors import UnknownStrategyError

# Weighted scoring constants
GEOMETRIC_WEIGHT = 0.4
INTENSITY_WEIGHT = 0.3
TEXTURE_WEIGHT = 0.3
IDEAL_ASPECT_RATIO = (0.7, 1.4)
IDEAL_AREA = (1000, 4000)


def _feature(group: Any, name: str) -> float:
    """Read a numeric feature from a dataclass or mapping, defaulting to 0."""
    if group is None:
        return 0.0
    if isinstance(group, Mapping):
        value = group.get(name)
    else:
        value = getattr(group, name, None)
    if value is None:
        return 0.0
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    return value if math.isfinite(value) else 0.0


def _group(features: Any, name: str) -> Any:
    if features is None:
        return None
    if isinstance(features, Mapping):
        return features.get(name)
    return getattr(features, name, None)


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def score_geometric(geometric: Any) -> float:
    """0.3 for an ideal aspect ratio, 0.3 for an ideal area, plus
    0.2 * rectangularity and 0.2 * compactness."""
    aspect_ratio = _feature(geometric, "aspect_ratio")
    area = _feature(geometric, "area")

    score = 0.0
    if IDEAL_ASPECT_RATIO[0] <= aspect_ratio <= IDEAL_ASPECT_RATIO[1]:
        score += 0.3
    if IDEAL_AREA[0] <= area <= IDEAL_AREA[1]:
        score += 0.3
    score += _feature(geometric, "rectangularity") * 0.2
    score += _feature(geometric, "compactness") * 0.2
    return score


def score_intensity(intensity: Any) -> float:
    """Uniform regions (low standard deviation) score towards 1.0."""
    uniformity = 1 - (_feature(intensity, "std_dev") / 255)
    return uniformity * 0.5 + 0.5


def score_texture(texture: Any) -> float:
    return (
        _feature(texture, "lbp")
        + _feature(texture, "hog") / 1000
        + _feature(texture, "gabor")
    ) / 3


def weighted_score(features: Any) -> Tuple[float, float, float, float]:
    """Return (geometric, intensity, texture, combined) scores.

    The combined score is clamped to [0, 1].
    """
    geometric = score_geometric(_group(features, "geometric"))
    intensity = score_intensity(_group(features, "intensity"))
    texture = score_texture(_group(features, "texture"))

    combined = (
        geometric * GEOMETRIC_WEIGHT
        + intensity * INTENSITY_WEIGHT
        + texture * TEXTURE_WEIGHT
    )
    return geometric, intensity, texture, _clamp(combined)


class Classifier:
    """Interface that all classifiers implement.

    Classifiers are constructed with the active thresholds so that per-run
    overrides never touch shared state.
    """

    name: str = ""

    def __init__(self, thresholds: Optional[ThresholdConfig] = None) -> None:
        self.thresholds = thresholds or ThresholdConfig()

    def classify(
        self,
        featured: Sequence[FeaturedRegion],
        rng: np.random.Generator,
    ) -> List[ClassifiedSpot]:
        return [self._spot(item, self.decide(item, rng)) for item in featured]

    def decide(self, item: FeaturedRegion, rng: np.random.Generator) -> Classification:
        raise NotImplementedError

    @staticmethod
    def _spot(item: FeaturedRegion, classification: Classification) -> ClassifiedSpot:
        return ClassifiedSpot(
            region=item.region,
            features=getattr(item, "features", None),
            classification=classification,
        )


class SiftClassifier(Classifier):
    """Modified-SIFT keypoint heuristic: accept proposals above 0.5."""

    name = "sift_modified"

    def decide(self, item: FeaturedRegion, rng: np.random.Generator) -> Classification:
        confidence = _clamp(item.region.confidence)
        return Classification(
            is_parking_spot=confidence > 0.5,
            confidence=confidence,
            method=self.name,
            attributes={
                "keypoints": int(rng.integers(10, 60)),
                "descriptors": int(rng.integers(50, 150)),
            },
        )


class MLPClassifier(Classifier):
    """Logistic MLP stand-in using the weighted feature score."""

    name = "mlp_classifier"

    def decide(self, item: FeaturedRegion, rng: np.random.Generator) -> Classification:
        geometric, intensity, texture, confidence = weighted_score(
            getattr(item, "features", None)
        )
        return Classification(
            is_parking_spot=confidence > self.thresholds.confidence,
            confidence=confidence,
            method=self.name,
            attributes={
                "activation": "logistic",
                "solver": "SGD",
                "layers": [64, 32, 16, 1],
                "iterations": int(rng.integers(200, 700)),
                "geometricScore": geometric,
                "intensityScore": intensity,
                "textureScore": texture,
            },
        )


class BoostedConfidenceClassifier(Classifier):
    """Scales the proposal confidence by `boost` (capped at 1.0) and
    accepts proposals whose raw confidence exceeds `decision_threshold`."""

    boost = 1.0
    decision_threshold = 0.5

    def details(self) -> Dict[str, Any]:
        """Network description attached to every classification."""
        return {}

    def decide(self, item: FeaturedRegion, rng: np.random.Generator) -> Classification:
        raw = item.region.confidence
        return Classification(
            is_parking_spot=raw > self.decision_threshold,
            confidence=_clamp(raw * self.boost),
            method=self.name,
            attributes=self.details(),
        )


class ResNetClassifier(BoostedConfidenceClassifier):
    name = "resnet34"
    boost = 1.1
    decision_threshold = 0.7

    def details(self) -> Dict[str, Any]:
        return {"networkDepth": 34, "pretrained": True, "fineTuned": True}


class DCNNClassifier(BoostedConfidenceClassifier):
    name = "dcnn"
    boost = 1.05
    decision_threshold = 0.65

    def details(self) -> Dict[str, Any]:
        return {"architecture": "custom_dcnn", "inputSize": [224, 224, 3], "outputClasses": 2}


CLASSIFIERS: Dict[str, Type[Classifier]] = {
    SiftClassifier.name: SiftClassifier,
    MLPClassifier.name: MLPClassifier,
    ResNetClassifier.name: ResNetClassifier,
    DCNNClassifier.name: DCNNClassifier,
}


def create_classifier(
    method: str,
    thresholds: Optional[ThresholdConfig] = None,
) -> Classifier:
    """Factory: create a classifier by method name."""
    if method not in CLASSIFIERS:
        raise UnknownStrategyError("classification", method, CLASSIFIERS)
    return CLASSIFIERS[method](thresholds)


def classify_spots(
    featured: Sequence[FeaturedRegion],
    method: str,
    rng: np.random.Generator,
    thresholds: Optional[ThresholdConfig] = None,
) -> List[ClassifiedSpot]:
    """Run the named classifier over featured regions.

    Raises:
        UnknownStrategyError: If the method is not registered.
    """
    return create_classifier(method, thresholds).classify(featured, rng)
