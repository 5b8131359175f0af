"""
Configuration management for the parking detection system.

Provides a layered configuration system with the following precedence
(highest to lowest):

    CLI arguments > Environment variables > YAML config file > Defaults

Design constraints:
    - The system MUST run with zero configuration (safe defaults only).
    - Missing or invalid values fail early and loudly.
    - No detection logic or I/O belongs here.

Non-goals:
    - No dynamic reloading.
    - No database-backed or remote configuration.
"""

import dataclasses
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Project root resolution
# ---------------------------------------------------------------------------
# Resolved relative to this file's location: parking_detection/config.py → project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent


def get_project_root() -> Path:
    """Return the resolved project root directory."""
    return _PROJECT_ROOT


# ---------------------------------------------------------------------------
# Configuration dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PipelineConfig:
    """Default strategy selection for a detection run.

    Attributes:
        region_method: Region proposal strategy name.
        classification_method: Classification strategy name.
        enable_preprocessing: Whether the preprocessing record is applied.
        seed: Seed for the per-run random source. None draws fresh entropy
              on every run; a fixed seed makes every run reproducible.
    """

    region_method: str = "edge_detection"
    classification_method: str = "mlp_classifier"
    enable_preprocessing: bool = True
    seed: Optional[int] = None


# Wire (camelCase) names accepted by ThresholdConfig.merged().
_THRESHOLD_ALIASES = {
    "confidence": "confidence",
    "minSpotArea": "min_spot_area",
    "maxSpotArea": "max_spot_area",
    "aspectRatioMin": "aspect_ratio_min",
    "aspectRatioMax": "aspect_ratio_max",
}


@dataclass(frozen=True)
class ThresholdConfig:
    """Decision and geometric gate thresholds.

    Attributes:
        confidence: Combined-score threshold used by the weighted classifier.
        min_spot_area: Smallest accepted spot area (pixels).
        max_spot_area: Largest accepted spot area (pixels).
        aspect_ratio_min: Smallest accepted width/height ratio.
        aspect_ratio_max: Largest accepted width/height ratio.
    """

    confidence: float = 0.75
    min_spot_area: float = 500
    max_spot_area: float = 5000
    aspect_ratio_min: float = 0.3
    aspect_ratio_max: float = 3.0

    def merged(self, overrides: Mapping[str, Any]) -> "ThresholdConfig":
        """Return a validated copy with `overrides` applied.

        Keys may use the wire names (minSpotArea) or the attribute names
        (min_spot_area).

        Raises:
            ValueError: On unknown keys or invalid resulting values.
        """
        known = {f.name for f in dataclasses.fields(self)}
        kwargs = {}
        for key, value in overrides.items():
            name = _THRESHOLD_ALIASES.get(key, key)
            if name not in known:
                raise ValueError(
                    f"Unknown threshold '{key}'. "
                    f"Valid keys: {sorted(_THRESHOLD_ALIASES)}."
                )
            kwargs[name] = float(value)

        updated = dataclasses.replace(self, **kwargs)
        _validate_thresholds(updated)
        return updated

    def to_dict(self) -> dict:
        """Return the thresholds under their wire names."""
        return {alias: getattr(self, name) for alias, name in _THRESHOLD_ALIASES.items()}


@dataclass(frozen=True)
class InputConfig:
    """Input source configuration.

    Attributes:
        source: 'synthetic', an image/video file, a directory of images,
                or a webcam device index (as string or int).
        resize_width: Optional width to downscale input frames. None means
                      no resizing.
        synthetic_size: (width, height) of the synthetic frame.
    """

    source: str = "synthetic"
    resize_width: Optional[int] = None
    synthetic_size: Tuple[int, int] = (800, 600)


@dataclass(frozen=True)
class OutputConfig:
    """Output behavior configuration.

    Attributes:
        mode: Output mode(s), comma-separated:
              'display', 'save_image', 'save_json', 'save_csv'.
              Example: "save_image,save_json"
        save_path: Directory where output artifacts are written.
    """

    mode: str = "save_json"
    save_path: str = "output/"


@dataclass(frozen=True)
class VisualizationConfig:
    """Overlay rendering parameters.

    Attributes:
        thickness: Rectangle line thickness in pixels.
        show_labels: Whether to render "P001 85.0%" labels.
        label_confidence_threshold: Spots below this confidence are drawn
                                    without a label.
    """

    thickness: int = 2
    show_labels: bool = True
    label_confidence_threshold: float = 0.0


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration.

    Aggregates all sub-configurations into a single, frozen object.
    """

    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)
    input: InputConfig = field(default_factory=InputConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    visualization: VisualizationConfig = field(default_factory=VisualizationConfig)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

VALID_OUTPUT_MODES = {"display", "save_image", "save_json", "save_csv"}


def _validate_thresholds(t: ThresholdConfig) -> None:
    """Raise ValueError if the thresholds are out of range or inverted."""
    if not (0.0 <= t.confidence <= 1.0):
        raise ValueError(
            f"thresholds.confidence must be in [0.0, 1.0], got {t.confidence}."
        )

    if t.min_spot_area < 0 or t.max_spot_area <= 0:
        raise ValueError(
            f"thresholds spot areas must be positive, "
            f"got min={t.min_spot_area}, max={t.max_spot_area}."
        )

    if t.min_spot_area > t.max_spot_area:
        raise ValueError(
            f"thresholds.min_spot_area ({t.min_spot_area}) exceeds "
            f"max_spot_area ({t.max_spot_area})."
        )

    if t.aspect_ratio_min <= 0 or t.aspect_ratio_min > t.aspect_ratio_max:
        raise ValueError(
            f"thresholds aspect ratio range is invalid: "
            f"[{t.aspect_ratio_min}, {t.aspect_ratio_max}]."
        )


def _validate(config: AppConfig) -> None:
    """Validate configuration values. Raises ValueError on invalid state."""

    _validate_thresholds(config.thresholds)

    modes = set(m.strip() for m in config.output.mode.split(",") if m.strip())
    invalid_modes = modes - VALID_OUTPUT_MODES
    if invalid_modes:
        raise ValueError(
            f"Invalid output.mode(s): {invalid_modes}. "
            f"Valid modes: {VALID_OUTPUT_MODES}. "
            f"Use comma-separated values for multiple outputs."
        )

    if config.input.resize_width is not None and config.input.resize_width <= 0:
        raise ValueError(
            f"input.resize_width must be positive or None, "
            f"got {config.input.resize_width}."
        )

    if len(config.input.synthetic_size) != 2 or any(
        d <= 0 for d in config.input.synthetic_size
    ):
        raise ValueError(
            f"input.synthetic_size must be a positive (width, height) tuple, "
            f"got {config.input.synthetic_size}."
        )

    if config.visualization.thickness <= 0:
        raise ValueError(
            f"visualization.thickness must be positive, "
            f"got {config.visualization.thickness}."
        )


# ---------------------------------------------------------------------------
# YAML loading
# ---------------------------------------------------------------------------

def _parse_tuple(value, expected_len: int, cast_type=float):
    """Convert a list from YAML into a tuple of the expected type and length."""
    if isinstance(value, (list, tuple)):
        if len(value) != expected_len:
            raise ValueError(
                f"Expected {expected_len} values, got {len(value)}: {value}"
            )
        return tuple(cast_type(v) for v in value)
    return value


def parse_bool(value) -> bool:
    """Interpret YAML booleans and env-var strings ('true', '0', 'no')."""
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
        raise ValueError(f"Cannot interpret '{value}' as a boolean.")
    return bool(value)


def _build_pipeline_config(raw: dict) -> PipelineConfig:
    """Build PipelineConfig from a raw YAML dict."""
    kwargs = {}
    if "region_method" in raw:
        kwargs["region_method"] = str(raw["region_method"]).lower()
    if "classification_method" in raw:
        kwargs["classification_method"] = str(raw["classification_method"]).lower()
    if "enable_preprocessing" in raw:
        kwargs["enable_preprocessing"] = parse_bool(raw["enable_preprocessing"])
    if "seed" in raw:
        val = raw["seed"]
        kwargs["seed"] = int(val) if val is not None else None
    return PipelineConfig(**kwargs)


def _build_threshold_config(raw: dict) -> ThresholdConfig:
    """Build ThresholdConfig from a raw YAML dict."""
    kwargs = {}
    for key in ("confidence", "min_spot_area", "max_spot_area",
                "aspect_ratio_min", "aspect_ratio_max"):
        if key in raw:
            kwargs[key] = float(raw[key])
    return ThresholdConfig(**kwargs)


def _build_input_config(raw: dict) -> InputConfig:
    """Build InputConfig from a raw YAML dict."""
    kwargs = {}
    if "source" in raw:
        kwargs["source"] = str(raw["source"])
    if "resize_width" in raw:
        val = raw["resize_width"]
        kwargs["resize_width"] = int(val) if val is not None else None
    if "synthetic_size" in raw:
        kwargs["synthetic_size"] = _parse_tuple(raw["synthetic_size"], 2, int)
    return InputConfig(**kwargs)


def _build_output_config(raw: dict) -> OutputConfig:
    """Build OutputConfig from a raw YAML dict."""
    kwargs = {}
    if "mode" in raw:
        kwargs["mode"] = str(raw["mode"]).lower()
    if "save_path" in raw:
        kwargs["save_path"] = str(raw["save_path"])
    return OutputConfig(**kwargs)


def _build_visualization_config(raw: dict) -> VisualizationConfig:
    """Build VisualizationConfig from a raw YAML dict."""
    kwargs = {}
    if "thickness" in raw:
        kwargs["thickness"] = int(raw["thickness"])
    if "show_labels" in raw:
        kwargs["show_labels"] = parse_bool(raw["show_labels"])
    if "label_confidence_threshold" in raw:
        kwargs["label_confidence_threshold"] = float(raw["label_confidence_threshold"])
    return VisualizationConfig(**kwargs)


# ---------------------------------------------------------------------------
# Environment variable overrides
# ---------------------------------------------------------------------------

_ENV_PREFIX = "PARKING_DETECT_"


def _apply_env_overrides(raw: dict) -> dict:
    """Apply environment variable overrides to the raw config dict.

    Environment variables follow the pattern:
        PARKING_DETECT_PIPELINE_REGION_METHOD=deep_learning
        PARKING_DETECT_THRESHOLDS_CONFIDENCE=0.8
    """
    env_map = {
        f"{_ENV_PREFIX}PIPELINE_REGION_METHOD": ("pipeline", "region_method"),
        f"{_ENV_PREFIX}PIPELINE_CLASSIFICATION_METHOD": ("pipeline", "classification_method"),
        f"{_ENV_PREFIX}PIPELINE_ENABLE_PREPROCESSING": ("pipeline", "enable_preprocessing"),
        f"{_ENV_PREFIX}PIPELINE_SEED": ("pipeline", "seed"),
        f"{_ENV_PREFIX}THRESHOLDS_CONFIDENCE": ("thresholds", "confidence"),
        f"{_ENV_PREFIX}THRESHOLDS_MIN_SPOT_AREA": ("thresholds", "min_spot_area"),
        f"{_ENV_PREFIX}THRESHOLDS_MAX_SPOT_AREA": ("thresholds", "max_spot_area"),
        f"{_ENV_PREFIX}THRESHOLDS_ASPECT_RATIO_MIN": ("thresholds", "aspect_ratio_min"),
        f"{_ENV_PREFIX}THRESHOLDS_ASPECT_RATIO_MAX": ("thresholds", "aspect_ratio_max"),
        f"{_ENV_PREFIX}INPUT_SOURCE": ("input", "source"),
        f"{_ENV_PREFIX}INPUT_RESIZE_WIDTH": ("input", "resize_width"),
        f"{_ENV_PREFIX}OUTPUT_MODE": ("output", "mode"),
        f"{_ENV_PREFIX}OUTPUT_SAVE_PATH": ("output", "save_path"),
    }

    for env_var, (section, key) in env_map.items():
        value = os.environ.get(env_var)
        if value is not None:
            raw.setdefault(section, {})[key] = value
            logger.debug("Config override from env: %s=%s", env_var, value)

    return raw


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------

def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Load and validate application configuration.

    Precedence (highest → lowest):
        Environment variables > YAML file > Hard-coded defaults

    Args:
        config_path: Path to a YAML configuration file. If None,
                     the system runs entirely on defaults.

    Returns:
        A validated, frozen AppConfig instance.

    Raises:
        FileNotFoundError: If config_path is provided but does not exist.
        ValueError: If any configuration value is invalid.
        yaml.YAMLError: If the YAML file is malformed.
    """
    raw: dict = {}

    # --- Layer 1: YAML file ---
    if config_path is not None:
        resolved = Path(config_path)
        if not resolved.is_absolute():
            resolved = _PROJECT_ROOT / resolved

        if not resolved.is_file():
            raise FileNotFoundError(
                f"Configuration file not found: {resolved}. "
                f"Provide a valid path or omit to use defaults."
            )

        logger.info("Loading config from: %s", resolved)
        with open(resolved, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

    # --- Layer 2: Environment variable overrides ---
    raw = _apply_env_overrides(raw)

    # --- Build typed configs ---
    config = AppConfig(
        pipeline=_build_pipeline_config(raw.get("pipeline", {})),
        thresholds=_build_threshold_config(raw.get("thresholds", {})),
        input=_build_input_config(raw.get("input", {})),
        output=_build_output_config(raw.get("output", {})),
        visualization=_build_visualization_config(raw.get("visualization", {})),
    )

    # --- Validate ---
    _validate(config)

    logger.debug("Configuration loaded: %s", config)
    return config
