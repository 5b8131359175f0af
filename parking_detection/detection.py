"""
Data transfer objects for the parking detection pipeline.

Each stage extends, never edits, the output of the stage before it:

    Region -> FeaturedRegion -> ClassifiedSpot -> ParkingSpot

and the detector wraps the final spots in a DetectionResult. All types are
frozen dataclasses; to_dict() methods produce the camelCase JSON shape
consumed by the HTTP layer and the UI.

Non-goals:
    - No scoring, filtering or rendering logic.
    - No file I/O (see serializer).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

SPOT_STATUSES = ("available", "occupied", "reserved")
SPOT_TYPES = ("regular", "handicap", "ev_charging", "shaded")


@dataclass(frozen=True, slots=True)
class Region:
    """A candidate rectangle proposed as a possible parking spot.

    Attributes:
        id: Proposer-assigned identifier (e.g. "region_0_3").
        x: Top-left x coordinate (pixels, float before validation).
        y: Top-left y coordinate.
        width: Rectangle width in pixels.
        height: Rectangle height in pixels.
        confidence: Proposal confidence in [0.0, 1.0].
        method: Name of the proposer strategy that emitted the region.
        attributes: Method-specific attributes (edge counts, anchor info...).
    """

    id: str
    x: float
    y: float
    width: float
    height: float
    confidence: float
    method: str
    attributes: Dict[str, Any] = field(default_factory=dict)

    @property
    def area(self) -> float:
        return self.width * self.height


@dataclass(frozen=True, slots=True)
class GeometricFeatures:
    area: float
    aspect_ratio: float
    rectangularity: float
    perimeter: float
    compactness: float


@dataclass(frozen=True, slots=True)
class IntensityFeatures:
    mean: float
    std_dev: float
    histogram: Tuple[int, ...]


@dataclass(frozen=True, slots=True)
class TextureFeatures:
    lbp: float
    hog: float
    gabor: float


@dataclass(frozen=True, slots=True)
class EdgeFeatures:
    edge_density: float
    corner_count: int
    gradient_magnitude: float


@dataclass(frozen=True, slots=True)
class FeatureBundle:
    """Geometric, intensity, texture and edge measurements for one region."""

    geometric: GeometricFeatures
    intensity: IntensityFeatures
    texture: TextureFeatures
    edge: EdgeFeatures


@dataclass(frozen=True, slots=True)
class FeaturedRegion:
    """A Region extended with its FeatureBundle."""

    region: Region
    features: FeatureBundle


@dataclass(frozen=True, slots=True)
class Classification:
    """A classifier decision for one region."""

    is_parking_spot: bool
    confidence: float
    method: str
    attributes: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ClassifiedSpot:
    """A FeaturedRegion extended with its Classification."""

    region: Region
    features: Optional[FeatureBundle]
    classification: Classification


@dataclass(frozen=True, slots=True)
class SpotMetadata:
    area: int
    aspect_ratio: float
    detection_score: float

    def to_dict(self) -> dict:
        return {
            "area": self.area,
            "aspectRatio": self.aspect_ratio,
            "detectionScore": self.detection_score,
        }


@dataclass(frozen=True, slots=True)
class ParkingSpot:
    """A validated, ranked parking spot.

    Attributes:
        id: "P" followed by a 3-digit, 1-based rank (e.g. "P001").
        x, y, width, height: Rounded pixel geometry.
        confidence: Classification confidence rounded to 2 decimals.
        status: One of SPOT_STATUSES.
        type: One of SPOT_TYPES.
        detection_method: Region proposal method that produced the spot.
        classification_method: Classifier that accepted the spot.
        metadata: Area, aspect ratio and raw proposal score.
    """

    id: str
    x: int
    y: int
    width: int
    height: int
    confidence: float
    status: str
    type: str
    detection_method: str
    classification_method: str
    metadata: Optional[SpotMetadata] = None

    def to_dict(self) -> dict:
        """Return a plain dict suitable for JSON serialization."""
        data = {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "confidence": self.confidence,
            "status": self.status,
            "type": self.type,
            "detectionMethod": self.detection_method,
            "classificationMethod": self.classification_method,
        }
        if self.metadata is not None:
            data["metadata"] = self.metadata.to_dict()
        return data


@dataclass(frozen=True, slots=True)
class ResultMetadata:
    """Run summary attached to a DetectionResult.

    processing_time is the elapsed wall time in milliseconds for a normal
    run and None for a fallback result.
    """

    detection_method: str
    classification_method: str
    total_candidates: int
    detected_spots: int
    processing_time: Optional[float] = None
    fallback_used: bool = False

    def to_dict(self) -> dict:
        data = {
            "detectionMethod": self.detection_method,
            "classificationMethod": self.classification_method,
            "totalCandidates": self.total_candidates,
            "detectedSpots": self.detected_spots,
        }
        if self.fallback_used:
            data["fallbackUsed"] = True
        else:
            data["processingTime"] = self.processing_time
        return data


@dataclass(frozen=True, slots=True)
class DetectionResult:
    """Output of ParkingDetector.detect(): ranked spots plus run metadata."""

    spots: List[ParkingSpot]
    metadata: ResultMetadata

    def to_dict(self) -> dict:
        return {
            "spots": [s.to_dict() for s in self.spots],
            "metadata": self.metadata.to_dict(),
        }
