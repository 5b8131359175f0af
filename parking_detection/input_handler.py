"""
Frame acquisition for the parking detection CLI.

Responsibility:
    Yield (frame_id, BGR image) tuples from one of:
        - 'synthetic'        one mid-gray frame (default, no files needed)
        - an image file
        - a directory of images (sorted by name)
        - a video file
        - a webcam device index ("0", "1", ...)

Robustness:
    - The source is validated at construction time.
    - Unreadable frames are logged and skipped.
    - Capture handles are released by release().
"""

import logging
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

import cv2
import numpy as np

logger = logging.getLogger(__name__)

SYNTHETIC_SOURCE = "synthetic"
_SYNTHETIC_GRAY = 128

_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".tif", ".webp"}
_VIDEO_EXTENSIONS = {".mp4", ".avi", ".mov", ".mkv"}

# Dead webcam safety valve
_MAX_FAILED_READS = 30


def synthetic_frame(width: int = 800, height: int = 600) -> np.ndarray:
    """Return a uniform mid-gray BGR frame."""
    return np.full((height, width, 3), _SYNTHETIC_GRAY, dtype=np.uint8)


class InputHandler:
    """Uniform frame iterator over synthetic, image, video and webcam sources.

    Usage:
        handler = InputHandler(source="lot.jpg")
        for frame_id, image in handler:
            ...
        handler.release()
    """

    def __init__(
        self,
        source: Union[str, int] = SYNTHETIC_SOURCE,
        resize_width: Optional[int] = None,
        synthetic_size: Tuple[int, int] = (800, 600),
    ) -> None:
        """
        Raises:
            FileNotFoundError: If a file/directory source does not exist.
            ValueError: If the file type is unsupported or a directory has no images.
            RuntimeError: If a video/webcam source cannot be opened.
        """
        self._resize_width = resize_width
        self._synthetic_size = synthetic_size
        self._cap: Optional[cv2.VideoCapture] = None
        self._image_paths: List[str] = []

        source_str = str(source).strip()
        path = Path(source_str)

        if source_str.lower() == SYNTHETIC_SOURCE:
            self._mode = "synthetic"
        elif source_str.isdigit():
            self._mode = "webcam"
            self._open_capture(int(source_str))
        elif path.is_file():
            ext = path.suffix.lower()
            if ext in _IMAGE_EXTENSIONS:
                self._mode = "image"
                self._image_paths = [source_str]
            elif ext in _VIDEO_EXTENSIONS:
                self._mode = "video"
                self._open_capture(source_str)
            else:
                raise ValueError(
                    f"Unsupported file type '{ext}' for source '{source_str}'. "
                    f"Images: {sorted(_IMAGE_EXTENSIONS)}, videos: {sorted(_VIDEO_EXTENSIONS)}."
                )
        elif path.is_dir():
            self._mode = "directory"
            self._image_paths = sorted(
                str(p) for p in path.iterdir() if p.suffix.lower() in _IMAGE_EXTENSIONS
            )
            if not self._image_paths:
                raise ValueError(f"No image files found in directory: '{source_str}'.")
        else:
            raise FileNotFoundError(
                f"Input source not found: '{source_str}'. Use '{SYNTHETIC_SOURCE}', "
                f"an image/video path, a directory, or a device index."
            )

        logger.info("InputHandler initialized: mode=%s, source=%s", self._mode, source_str)

    @property
    def mode(self) -> str:
        return self._mode

    def _open_capture(self, source: Union[str, int]) -> None:
        self._cap = cv2.VideoCapture(source)
        if not self._cap.isOpened():
            raise RuntimeError(f"Failed to open capture source {source!r}.")

    def __iter__(self) -> Iterator[Tuple[int, np.ndarray]]:
        if self._mode == "synthetic":
            yield 0, self._maybe_resize(synthetic_frame(*self._synthetic_size))
        elif self._mode in ("image", "directory"):
            yield from self._iterate_images()
        else:
            yield from self._iterate_capture()

    def _iterate_images(self) -> Iterator[Tuple[int, np.ndarray]]:
        for idx, path in enumerate(self._image_paths):
            image = cv2.imread(path)
            if image is None:
                logger.warning("Skipping unreadable image (frame_id=%d): %s", idx, path)
                continue
            yield idx, self._maybe_resize(image)

    def _iterate_capture(self) -> Iterator[Tuple[int, np.ndarray]]:
        frame_id = 0
        failures = 0

        while True:
            ok, image = self._cap.read()
            if not ok or image is None:
                if self._mode == "video":
                    logger.info("End of video reached at frame %d.", frame_id)
                    break
                failures += 1
                if failures >= _MAX_FAILED_READS:
                    logger.error("Webcam failed %d consecutive reads; stopping.", failures)
                    break
                logger.warning("Failed to read frame %d from webcam, skipping.", frame_id)
                frame_id += 1
                continue

            failures = 0
            yield frame_id, self._maybe_resize(image)
            frame_id += 1

    def _maybe_resize(self, image: np.ndarray) -> np.ndarray:
        """Downscale to resize_width, preserving aspect ratio."""
        if self._resize_width is None:
            return image

        h, w = image.shape[:2]
        if w <= self._resize_width:
            return image

        new_h = int(h * self._resize_width / w)
        return cv2.resize(image, (self._resize_width, new_h), interpolation=cv2.INTER_AREA)

    def release(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logger.debug("VideoCapture released.")
