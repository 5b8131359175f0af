"""
Preprocessing for the parking detection pipeline.

Responsibility:
    Validate the incoming frame and record which conceptual filters the
    frame went through before region search.

Non-goals:
    - No pixel-level computation. The filters are a declarative record;
      the pixel buffer is passed through untouched.
    - No frame acquisition or I/O.

Hard-coded:
    - Filter order: gaussian_blur, contrast_enhancement, noise_reduction.
"""

from typing import Any

from parking_detection.frame import FrameLike, ProcessedFrame, as_frame

PREPROCESSING_FILTERS = ("gaussian_blur", "contrast_enhancement", "noise_reduction")


def preprocess(frame: Any, enabled: bool = True) -> FrameLike:
    """Annotate a frame with the preprocessing record.

    Args:
        frame: A Frame, numpy image, or mapping with width/height.
        enabled: If False, the (validated) frame is returned unchanged.

    Returns:
        The input frame when disabled, otherwise a ProcessedFrame wrapping it.

    Raises:
        InvalidFrameError: If the frame has no usable width/height.
    """
    frame = as_frame(frame)

    if not enabled:
        return frame

    if isinstance(frame, ProcessedFrame):
        frame = frame.frame

    return ProcessedFrame(frame=frame, processed=True, filters=PREPROCESSING_FILTERS)
