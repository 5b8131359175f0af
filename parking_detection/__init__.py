"""
Parking Detection — synthetic parking spot detection pipeline.

Public API:
    - ParkingDetector: The single entry point for detection.
    - DetectionResult / ParkingSpot: Result data transfer objects.
    - Frame: Input frame descriptor.
    - ThresholdConfig / load_config: Configuration.
    - DetectionError and subclasses: Stage error taxonomy.

Usage:
    from parking_detection import ParkingDetector

    detector = ParkingDetector()
    result = detector.detect({"width": 800, "height": 600})
"""

from parking_detection.config import AppConfig, ThresholdConfig, load_config
from parking_detection.detection import DetectionResult, ParkingSpot
from parking_detection.detector import ParkingDetector
from parking_detection.errors import (
    DetectionError,
    InvalidFrameError,
    StageFailure,
    UnknownStrategyError,
)
from parking_detection.frame import Frame

__all__ = [
    "ParkingDetector",
    "DetectionResult",
    "ParkingSpot",
    "Frame",
    "AppConfig",
    "ThresholdConfig",
    "load_config",
    "DetectionError",
    "InvalidFrameError",
    "StageFailure",
    "UnknownStrategyError",
]
