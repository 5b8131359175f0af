"""
Tests for the preprocessing module and frame coercion.
"""

import numpy as np
import pytest

from parking_detection.errors import InvalidFrameError
from parking_detection.frame import Frame, ProcessedFrame, as_frame
from parking_detection.preprocessor import PREPROCESSING_FILTERS, preprocess


def test_preprocess_enabled_records_filters():
    """Test that enabled preprocessing annotates without touching pixels."""
    image = np.full((600, 800, 3), 128, dtype=np.uint8)
    frame = Frame.from_array(image)

    processed = preprocess(frame, enabled=True)

    assert isinstance(processed, ProcessedFrame)
    assert processed.processed is True
    assert processed.filters == ("gaussian_blur", "contrast_enhancement", "noise_reduction")
    assert processed.filters == PREPROCESSING_FILTERS
    assert processed.width == 800
    assert processed.height == 600
    assert processed.data is image
    assert np.all(image == 128)


def test_preprocess_disabled_is_identity():
    frame = Frame(width=800, height=600)
    assert preprocess(frame, enabled=False) is frame


def test_preprocess_does_not_stack_records():
    frame = Frame(width=10, height=10)
    once = preprocess(frame)
    twice = preprocess(once)
    assert twice.frame is frame


def test_preprocess_accepts_mapping():
    processed = preprocess({"width": 640, "height": 480})
    assert (processed.width, processed.height) == (640, 480)


@pytest.mark.parametrize("raw", [
    {"height": 600},
    {"width": 800},
    {"width": None, "height": 600},
    {"width": "wide", "height": 600},
    {"width": -1, "height": 600},
])
def test_preprocess_rejects_malformed_mapping(raw):
    with pytest.raises(InvalidFrameError):
        preprocess(raw)


def test_as_frame_rejects_unknown_types():
    with pytest.raises(InvalidFrameError):
        as_frame("not a frame")

    with pytest.raises(InvalidFrameError):
        as_frame(None)


def test_from_array_rejects_1d():
    with pytest.raises(InvalidFrameError):
        Frame.from_array(np.zeros(10))
