"""
Summary statistics over a DetectionResult.

Used by the CLI and the JSON export to report how many spots were found,
their average confidence, and how they split by status, type and
confidence band.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from parking_detection.detection import SPOT_STATUSES, SPOT_TYPES, DetectionResult

# (label, lower bound) from the highest band down; lower bounds are inclusive.
CONFIDENCE_BANDS: Tuple[Tuple[str, float], ...] = (
    ("90-100%", 0.9),
    ("80-90%", 0.8),
    ("70-80%", 0.7),
    ("60-70%", 0.6),
    ("50-60%", 0.5),
    ("<50%", 0.0),
)


def confidence_band(confidence: float) -> str:
    for label, lower in CONFIDENCE_BANDS:
        if confidence >= lower:
            return label
    return CONFIDENCE_BANDS[-1][0]


@dataclass(frozen=True)
class DetectionStats:
    total_detections: int
    average_confidence: float
    status_counts: Dict[str, int] = field(default_factory=dict)
    type_counts: Dict[str, int] = field(default_factory=dict)
    confidence_distribution: List[Dict[str, object]] = field(default_factory=list)

    @property
    def accuracy(self) -> float:
        """Average confidence as a percentage, one decimal."""
        return round(self.average_confidence * 100, 1)

    @property
    def occupancy_rate(self) -> float:
        if not self.total_detections:
            return 0.0
        return self.status_counts.get("occupied", 0) / self.total_detections

    def to_dict(self) -> dict:
        return {
            "totalDetections": self.total_detections,
            "avgConfidence": self.average_confidence,
            "accuracy": self.accuracy,
            "occupancyRate": round(self.occupancy_rate, 4),
            "statusCounts": dict(self.status_counts),
            "typeCounts": dict(self.type_counts),
            "confidenceDistribution": list(self.confidence_distribution),
        }


def summarize(result: DetectionResult) -> DetectionStats:
    """Compute DetectionStats for a result (fallback results included)."""
    spots = result.spots
    total = len(spots)
    average = sum(s.confidence for s in spots) / total if total else 0.0

    statuses = Counter(s.status for s in spots)
    types = Counter(s.type for s in spots)
    bands = Counter(confidence_band(s.confidence) for s in spots)

    return DetectionStats(
        total_detections=total,
        average_confidence=average,
        status_counts={status: statuses.get(status, 0) for status in SPOT_STATUSES},
        type_counts={spot_type: types.get(spot_type, 0) for spot_type in SPOT_TYPES},
        confidence_distribution=[
            {"range": label, "count": bands.get(label, 0)}
            for label, _ in CONFIDENCE_BANDS
        ],
    )
