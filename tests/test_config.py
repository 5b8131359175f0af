"""
Tests for the configuration module.
"""

import pytest

from parking_detection.config import (
    AppConfig,
    OutputConfig,
    ThresholdConfig,
    _validate,
    load_config,
)


def test_load_defaults():
    """Test loading configuration without any file."""
    config = load_config(None)
    assert isinstance(config, AppConfig)
    assert config.pipeline.region_method == "edge_detection"
    assert config.pipeline.classification_method == "mlp_classifier"
    assert config.pipeline.enable_preprocessing is True
    assert config.thresholds == ThresholdConfig(
        confidence=0.75,
        min_spot_area=500,
        max_spot_area=5000,
        aspect_ratio_min=0.3,
        aspect_ratio_max=3.0,
    )


def test_validation_failure():
    """Test fail-fast validation."""
    with pytest.raises(ValueError, match="confidence"):
        _validate(AppConfig(thresholds=ThresholdConfig(confidence=1.5)))

    with pytest.raises(ValueError, match="min_spot_area"):
        _validate(AppConfig(thresholds=ThresholdConfig(min_spot_area=6000)))

    with pytest.raises(ValueError, match="output.mode"):
        _validate(AppConfig(output=OutputConfig(mode="save_json,print")))


def test_env_override(monkeypatch):
    """Test environment variable overrides."""
    monkeypatch.setenv("PARKING_DETECT_THRESHOLDS_CONFIDENCE", "0.9")
    monkeypatch.setenv("PARKING_DETECT_PIPELINE_REGION_METHOD", "deep_learning")
    monkeypatch.setenv("PARKING_DETECT_PIPELINE_ENABLE_PREPROCESSING", "false")
    monkeypatch.setenv("PARKING_DETECT_PIPELINE_SEED", "42")
    monkeypatch.setenv("PARKING_DETECT_THRESHOLDS_ASPECT_RATIO_MIN", "0.5")
    monkeypatch.setenv("PARKING_DETECT_THRESHOLDS_ASPECT_RATIO_MAX", "2.5")

    config = load_config(None)

    assert config.thresholds.confidence == 0.9
    assert config.pipeline.region_method == "deep_learning"
    assert config.pipeline.enable_preprocessing is False
    assert config.pipeline.seed == 42
    assert config.thresholds.aspect_ratio_min == 0.5
    assert config.thresholds.aspect_ratio_max == 2.5


def test_yaml_file(tmp_path):
    """Test loading a YAML file with partial sections."""
    path = tmp_path / "config.yaml"
    path.write_text(
        "pipeline:\n"
        "  classification_method: resnet34\n"
        "thresholds:\n"
        "  max_spot_area: 8000\n"
        "input:\n"
        "  synthetic_size: [640, 480]\n",
        encoding="utf-8",
    )

    config = load_config(str(path))

    assert config.pipeline.classification_method == "resnet34"
    assert config.pipeline.region_method == "edge_detection"
    assert config.thresholds.max_spot_area == 8000
    assert config.input.synthetic_size == (640, 480)


def test_missing_yaml_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.yaml"))


def test_threshold_merge_accepts_wire_names():
    """Overrides merge over the current values, camelCase or snake_case."""
    base = ThresholdConfig()
    merged = base.merged({"minSpotArea": 800, "aspect_ratio_max": 2.5})

    assert merged.min_spot_area == 800
    assert merged.aspect_ratio_max == 2.5
    assert merged.confidence == base.confidence
    assert base.min_spot_area == 500  # base untouched


def test_threshold_merge_rejects_bad_input():
    with pytest.raises(ValueError, match="Unknown threshold"):
        ThresholdConfig().merged({"nmsThreshold": 0.4})

    with pytest.raises(ValueError):
        ThresholdConfig().merged({"aspectRatioMin": 4.0})


def test_threshold_to_dict_uses_wire_names():
    assert ThresholdConfig().to_dict() == {
        "confidence": 0.75,
        "minSpotArea": 500,
        "maxSpotArea": 5000,
        "aspectRatioMin": 0.3,
        "aspectRatioMax": 3.0,
    }
