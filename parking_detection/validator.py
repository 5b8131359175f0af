"""
Validation and ranking of classified spots.

Responsibility:
    Turn ClassifiedSpots into the final, ranked list of ParkingSpots:
    drop rejected and out-of-gate candidates, sort by classification
    confidence, assign P001.. ids, and label status and type.

Non-goals:
    - No classification or scoring.
    - No drawing or serialization.

Note:
    Status and type are presentation labels drawn independently of the
    classification confidence; no occupancy sensing is wired in.
"""

import logging
from typing import List, Optional, Sequence

import numpy as np

from parking_detection.config import ThresholdConfig
from parking_detection.detection import ClassifiedSpot, ParkingSpot, SpotMetadata

logger = logging.getLogger(__name__)

# Cumulative cut points for the label draws
_STATUS_CUTS = ((0.7, "available"), (0.9, "occupied"), (1.0, "reserved"))
_TYPE_CUTS = ((0.8, "regular"), (0.9, "shaded"), (0.95, "ev_charging"), (1.0, "handicap"))


def _draw_label(rng: np.random.Generator, cuts) -> str:
    r = rng.random()
    for cut, label in cuts:
        if r < cut:
            return label
    return cuts[-1][1]


def draw_status(rng: np.random.Generator) -> str:
    """~70% available, ~20% occupied, ~10% reserved."""
    return _draw_label(rng, _STATUS_CUTS)


def draw_type(rng: np.random.Generator) -> str:
    """~80% regular, ~10% shaded, ~5% ev_charging, ~5% handicap."""
    return _draw_label(rng, _TYPE_CUTS)


def format_spot_id(rank: int) -> str:
    """Return the id for a 1-based rank, e.g. 1 -> 'P001'."""
    return f"P{rank:03d}"


class SpotValidator:
    """Filters, ranks and labels classified spots against geometric gates.

    Usage:
        validator = SpotValidator(thresholds)
        spots = validator.validate(classified, rng)
    """

    def __init__(self, thresholds: Optional[ThresholdConfig] = None) -> None:
        self._thresholds = thresholds or ThresholdConfig()

    @property
    def thresholds(self) -> ThresholdConfig:
        return self._thresholds

    def passes_gates(self, spot: ClassifiedSpot) -> bool:
        """True if the spot's area and aspect ratio lie inside the gates."""
        t = self._thresholds
        width, height = spot.region.width, spot.region.height
        if width <= 0 or height <= 0:
            return False

        area = width * height
        aspect_ratio = width / height
        return (
            t.min_spot_area <= area <= t.max_spot_area
            and t.aspect_ratio_min <= aspect_ratio <= t.aspect_ratio_max
        )

    def validate(
        self,
        classified: Sequence[ClassifiedSpot],
        rng: np.random.Generator,
    ) -> List[ParkingSpot]:
        """Filter, rank and label classified spots.

        Args:
            classified: Classifier output, in proposal order.
            rng: Random source for the status and type labels.

        Returns:
            ParkingSpots sorted by confidence (descending) with sequential
            ids. Ties keep their proposal order.
        """
        accepted = [c for c in classified if c.classification.is_parking_spot]
        gated = [c for c in accepted if self.passes_gates(c)]

        logger.debug(
            "Validation: %d candidates, %d accepted, %d within gates",
            len(classified), len(accepted), len(gated),
        )

        # sorted() is stable, so equal confidences keep proposal order
        ranked = sorted(gated, key=lambda c: c.classification.confidence, reverse=True)

        spots = []
        for rank, candidate in enumerate(ranked, start=1):
            region = candidate.region
            spots.append(ParkingSpot(
                id=format_spot_id(rank),
                x=round(region.x),
                y=round(region.y),
                width=round(region.width),
                height=round(region.height),
                confidence=round(candidate.classification.confidence, 2),
                status=draw_status(rng),
                type=draw_type(rng),
                detection_method=region.method,
                classification_method=candidate.classification.method,
                metadata=SpotMetadata(
                    area=round(region.width * region.height),
                    aspect_ratio=round(region.width / region.height, 2),
                    detection_score=region.confidence,
                ),
            ))

        return spots
