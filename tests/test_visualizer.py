"""
Tests for overlay rendering and frame input.
"""

import cv2
import numpy as np
import pytest

from parking_detection.config import VisualizationConfig
from parking_detection.detection import ParkingSpot
from parking_detection.input_handler import InputHandler, synthetic_frame
from parking_detection.visualizer import STATUS_COLORS, draw_spots, spot_label


def _spot(status="occupied", confidence=0.853):
    return ParkingSpot(
        id="P001", x=100, y=100, width=70, height=90, confidence=confidence,
        status=status, type="regular", detection_method="edge_detection",
        classification_method="mlp_classifier",
    )


def test_draw_spots_returns_annotated_copy():
    frame = synthetic_frame()
    annotated = draw_spots(frame, [_spot()], VisualizationConfig())

    assert annotated.shape == frame.shape
    assert np.all(frame == 128)
    # left edge of the rectangle, below the label
    assert tuple(int(v) for v in annotated[150, 100]) == STATUS_COLORS["occupied"]


def test_label_skipped_below_threshold():
    frame = synthetic_frame()
    config = VisualizationConfig(label_confidence_threshold=0.9)
    annotated = draw_spots(frame, [_spot(confidence=0.5)], config)

    # no label background above the box
    assert np.all(annotated[85:95, 105:150] == 128)


def test_spot_label():
    assert spot_label(_spot(confidence=0.85)) == "P001 85.0%"


def test_synthetic_source():
    handler = InputHandler("synthetic", synthetic_size=(640, 480))
    frames = list(handler)
    handler.release()

    assert len(frames) == 1
    frame_id, image = frames[0]
    assert frame_id == 0
    assert image.shape == (480, 640, 3)


def test_directory_source_with_resize(tmp_path):
    for name in ("b.png", "a.png"):
        cv2.imwrite(str(tmp_path / name), np.zeros((100, 200, 3), dtype=np.uint8))
    (tmp_path / "notes.txt").write_text("ignored")

    handler = InputHandler(str(tmp_path), resize_width=100)
    frames = list(handler)

    assert handler.mode == "directory"
    assert [fid for fid, _ in frames] == [0, 1]
    assert frames[0][1].shape == (50, 100, 3)


def test_missing_source():
    with pytest.raises(FileNotFoundError):
        InputHandler("/nonexistent/lot.jpg")
