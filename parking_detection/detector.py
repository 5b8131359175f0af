"""
ParkingDetector — the single public API for parking spot detection.

Public contract:
    ParkingDetector.detect(frame, options) -> DetectionResult

Pipeline:
    preprocess -> propose regions -> extract features -> classify -> validate

Failure behavior:
    The detector is the only recovery boundary. Any stage error is logged
    and replaced by a fixed 24-spot fallback result; detect() never raises
    for stage failures.

Thread-safety:
    detect() keeps no per-call state on the instance. Each call draws from
    its own random generator, so concurrent calls are independent.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

import numpy as np

from parking_detection.classifiers import CLASSIFIERS, classify_spots
from parking_detection.config import (
    AppConfig,
    PipelineConfig,
    ThresholdConfig,
    load_config,
    parse_bool,
)
from parking_detection.detection import DetectionResult, ParkingSpot, ResultMetadata, SpotMetadata
from parking_detection.errors import DetectionError, StageFailure
from parking_detection.features import extract_features
from parking_detection.preprocessor import preprocess
from parking_detection.proposers import PROPOSERS, propose_regions
from parking_detection.validator import SpotValidator, format_spot_id

logger = logging.getLogger(__name__)

FALLBACK_DETECTION_METHOD = "fallback"
FALLBACK_CLASSIFICATION_METHOD = "rule_based"
_FALLBACK_ROWS = 3
_FALLBACK_COLS = 8
_FALLBACK_SIZE = (75, 95)
_FALLBACK_CONFIDENCE = 0.8
_FALLBACK_OCCUPIED_RATE = 0.6


@dataclass(frozen=True)
class DetectionOptions:
    """Per-call strategy selection."""

    region_method: str
    classification_method: str
    enable_preprocessing: bool

    @classmethod
    def from_mapping(
        cls,
        options: Optional[Mapping[str, Any]],
        defaults: PipelineConfig,
    ) -> "DetectionOptions":
        """Read regionMethod / classificationMethod / enablePreprocessing.

        snake_case keys are accepted as well; missing keys fall back to
        the configured pipeline defaults.

        Raises:
            TypeError: If options is not a mapping.
            ValueError: If enablePreprocessing is not a recognizable boolean.
        """
        options = options or {}
        if not isinstance(options, Mapping):
            raise TypeError(
                f"Detection options must be a mapping, got {type(options).__name__}."
            )

        def pick(camel: str, snake: str, default):
            if camel in options:
                return options[camel]
            return options.get(snake, default)

        return cls(
            region_method=str(pick("regionMethod", "region_method", defaults.region_method)),
            classification_method=str(pick(
                "classificationMethod", "classification_method",
                defaults.classification_method,
            )),
            enable_preprocessing=parse_bool(pick(
                "enablePreprocessing", "enable_preprocessing",
                defaults.enable_preprocessing,
            )),
        )


def _run_stage(stage: str, func: Callable, *args):
    """Run a stage, wrapping unexpected exceptions in StageFailure."""
    try:
        return func(*args)
    except DetectionError:
        raise
    except Exception as e:
        raise StageFailure(stage, e) from e


def fallback_result(rng: np.random.Generator) -> DetectionResult:
    """Fixed 3x8 grid of regular spots; only the status is random."""
    width, height = _FALLBACK_SIZE
    spots = []

    for i in range(_FALLBACK_ROWS * _FALLBACK_COLS):
        occupied = rng.random() < _FALLBACK_OCCUPIED_RATE
        spots.append(ParkingSpot(
            id=format_spot_id(i + 1),
            x=(i % _FALLBACK_COLS) * 90 + 50,
            y=(i // _FALLBACK_COLS) * 120 + 80,
            width=width,
            height=height,
            confidence=_FALLBACK_CONFIDENCE,
            status="occupied" if occupied else "available",
            type="regular",
            detection_method=FALLBACK_DETECTION_METHOD,
            classification_method=FALLBACK_CLASSIFICATION_METHOD,
            metadata=SpotMetadata(
                area=width * height,
                aspect_ratio=round(width / height, 2),
                detection_score=_FALLBACK_CONFIDENCE,
            ),
        ))

    return DetectionResult(
        spots=spots,
        metadata=ResultMetadata(
            detection_method=FALLBACK_DETECTION_METHOD,
            classification_method=FALLBACK_CLASSIFICATION_METHOD,
            total_candidates=len(spots),
            detected_spots=len(spots),
            fallback_used=True,
        ),
    )


class ParkingDetector:
    """Synthetic parking spot detector with pluggable stage strategies.

    Usage:
        detector = ParkingDetector()                    # Safe defaults
        detector = ParkingDetector(config=my_config)    # Custom config
        result = detector.detect(frame, {"regionMethod": "deep_learning"})

    `frame` may be a Frame, a BGR numpy image, or a mapping with
    width/height.
    """

    def __init__(self, config: Optional[AppConfig] = None) -> None:
        if config is None:
            config = load_config()

        self._config = config
        self._thresholds = config.thresholds

        logger.info(
            "ParkingDetector initialized (region=%s, classification=%s, confidence=%.2f)",
            config.pipeline.region_method,
            config.pipeline.classification_method,
            self._thresholds.confidence,
        )

    @property
    def config(self) -> AppConfig:
        """Return the active configuration (read-only)."""
        return self._config

    @property
    def thresholds(self) -> ThresholdConfig:
        return self._thresholds

    def update_thresholds(self, overrides: Mapping[str, Any]) -> ThresholdConfig:
        """Merge threshold overrides into the detector's thresholds.

        Raises:
            ValueError: On unknown keys or invalid values; the current
                        thresholds are left unchanged.
        """
        self._thresholds = self._thresholds.merged(overrides)
        logger.info("Thresholds updated: %s", self._thresholds.to_dict())
        return self._thresholds

    @staticmethod
    def get_available_methods() -> Dict[str, List[str]]:
        """Registered strategy names, for populating client selectors."""
        return {
            "regionProposal": list(PROPOSERS),
            "classification": list(CLASSIFIERS),
        }

    def detect(
        self,
        frame: Any,
        options: Optional[Mapping[str, Any]] = None,
        *,
        thresholds: Union[ThresholdConfig, Mapping[str, Any], None] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> DetectionResult:
        """Detect parking spots in a frame.

        Args:
            frame: Frame, numpy image, or {'width', 'height'} mapping.
            options: regionMethod / classificationMethod / enablePreprocessing.
            thresholds: Scoped threshold override for this call only: a full
                        ThresholdConfig or a mapping merged over the
                        detector's thresholds.
            rng: Random source. Defaults to a generator seeded from
                 pipeline.seed.

        Returns:
            A DetectionResult. On any stage failure, the fallback result.
        """
        if rng is None:
            rng = np.random.default_rng(self._config.pipeline.seed)

        start = time.perf_counter()
        try:
            opts = _run_stage(
                "configure", DetectionOptions.from_mapping, options, self._config.pipeline,
            )
            active = _run_stage("configure", self._scoped_thresholds, thresholds)
            result = self._run_pipeline(frame, opts, active, rng, start)
        except DetectionError as e:
            logger.error("Detection failed, returning fallback result: %s", e, exc_info=True)
            return fallback_result(rng)

        logger.debug(
            "Detected %d spots from %d candidates (%s/%s) in %.2f ms",
            result.metadata.detected_spots,
            result.metadata.total_candidates,
            opts.region_method,
            opts.classification_method,
            result.metadata.processing_time,
        )
        return result

    def _scoped_thresholds(
        self,
        thresholds: Union[ThresholdConfig, Mapping[str, Any], None],
    ) -> ThresholdConfig:
        if thresholds is None:
            return self._thresholds
        if isinstance(thresholds, ThresholdConfig):
            return thresholds
        return self._thresholds.merged(thresholds)

    @staticmethod
    def _run_pipeline(
        frame: Any,
        opts: DetectionOptions,
        thresholds: ThresholdConfig,
        rng: np.random.Generator,
        start: float,
    ) -> DetectionResult:
        processed = _run_stage("preprocess", preprocess, frame, opts.enable_preprocessing)
        regions = _run_stage("propose", propose_regions, processed, opts.region_method, rng)
        featured = _run_stage("extract", extract_features, regions, rng)
        classified = _run_stage(
            "classify", classify_spots, featured, opts.classification_method, rng, thresholds,
        )
        validator = SpotValidator(thresholds)
        spots = _run_stage("validate", validator.validate, classified, rng)

        return DetectionResult(
            spots=spots,
            metadata=ResultMetadata(
                detection_method=opts.region_method,
                classification_method=opts.classification_method,
                total_candidates=len(regions),
                detected_spots=len(spots),
                processing_time=round((time.perf_counter() - start) * 1000, 3),
            ),
        )
