"""
Frame descriptors for the parking detection pipeline.

Responsibility:
    Describe the input "image" handed to the pipeline: its dimensions and
    an optional pixel buffer. The pipeline never reads or mutates pixels;
    only width and height drive region geometry.

Non-goals:
    - No image decoding or resizing (see input_handler).
    - No pixel-level processing.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple, Union

import numpy as np

from parking_detection.errors import InvalidFrameError


@dataclass(frozen=True)
class Frame:
    """An immutable input frame.

    Attributes:
        width: Frame width in pixels.
        height: Frame height in pixels.
        data: Optional pixel buffer (e.g. a BGR numpy array). Carried
              through untouched.
    """

    width: int
    height: int
    data: Optional[np.ndarray] = None

    @classmethod
    def from_array(cls, image: np.ndarray) -> "Frame":
        """Build a Frame from an OpenCV-style (H, W[, C]) numpy array."""
        if not isinstance(image, np.ndarray) or image.ndim < 2:
            raise InvalidFrameError(
                f"Expected an image array with at least 2 dimensions, "
                f"got {type(image).__name__}."
            )
        h, w = image.shape[:2]
        return cls(width=int(w), height=int(h), data=image)

    @property
    def area(self) -> int:
        """Frame area in pixels."""
        return self.width * self.height


@dataclass(frozen=True)
class ProcessedFrame:
    """A frame annotated with the (conceptual) preprocessing it went through."""

    frame: Frame
    processed: bool = True
    filters: Tuple[str, ...] = ()

    @property
    def width(self) -> int:
        return self.frame.width

    @property
    def height(self) -> int:
        return self.frame.height

    @property
    def data(self) -> Optional[np.ndarray]:
        return self.frame.data

    @property
    def area(self) -> int:
        return self.frame.area


FrameLike = Union[Frame, ProcessedFrame]


def _dimension(raw: Mapping[str, Any], key: str) -> int:
    value = raw.get(key)
    if value is None or isinstance(value, bool):
        raise InvalidFrameError(f"Frame is missing '{key}'.")
    try:
        dim = int(value)
    except (TypeError, ValueError) as e:
        raise InvalidFrameError(
            f"Frame '{key}' must be an integer, got {value!r}."
        ) from e
    if dim < 0:
        raise InvalidFrameError(f"Frame '{key}' must be non-negative, got {dim}.")
    return dim


def as_frame(obj: Any) -> FrameLike:
    """Coerce a Frame, numpy image, or {'width', 'height', 'data'} mapping.

    Raises:
        InvalidFrameError: If the object carries no usable dimensions.
    """
    if isinstance(obj, (Frame, ProcessedFrame)):
        if obj.width < 0 or obj.height < 0:
            raise InvalidFrameError(
                f"Frame dimensions must be non-negative, got {obj.width}x{obj.height}."
            )
        return obj

    if isinstance(obj, np.ndarray):
        return Frame.from_array(obj)

    if isinstance(obj, Mapping):
        return Frame(
            width=_dimension(obj, "width"),
            height=_dimension(obj, "height"),
            data=obj.get("data"),
        )

    raise InvalidFrameError(
        f"Cannot interpret {type(obj).__name__} as a frame. "
        f"Pass a Frame, a numpy image, or a mapping with width/height."
    )
