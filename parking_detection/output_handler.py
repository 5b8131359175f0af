"""
Output routing for the parking detection CLI.

Responsibility:
    Send each frame's DetectionResult to the configured sinks. Several
    modes can be active at once (comma-separated output.mode):

        display     show the overlay in an OpenCV window
        save_image  write the overlay to frame_XXXXXX.jpg
        save_json   buffer results, write detections.json on finalize
        save_csv    buffer results, write detections.csv on finalize

Non-goals:
    - No detection logic.
    - No input acquisition.
"""

import logging
from pathlib import Path
from typing import Dict, Set

import cv2
import numpy as np

from parking_detection.config import AppConfig, get_project_root
from parking_detection.detection import DetectionResult
from parking_detection.serializer import save_csv, save_json
from parking_detection.visualizer import draw_spots, show_frame

logger = logging.getLogger(__name__)

_FILE_MODES = {"save_image", "save_json", "save_csv"}


class OutputHandler:
    """Routes detection results to configured output sinks.

    Usage:
        handler = OutputHandler(config)
        handler.process_frame(frame_id, image, result)
        ...
        handler.finalize()  # Flush buffered JSON/CSV output
    """

    def __init__(self, config: AppConfig) -> None:
        self._config = config
        self._modes: Set[str] = set(
            m.strip() for m in config.output.mode.split(",") if m.strip()
        )
        self._results: Dict[int, DetectionResult] = {}

        save_path = Path(config.output.save_path)
        if not save_path.is_absolute():
            save_path = get_project_root() / save_path
        self._save_path = save_path

        if self._modes & _FILE_MODES:
            self._save_path.mkdir(parents=True, exist_ok=True)

        logger.info("OutputHandler initialized: modes=%s, save_path=%s",
                    self._modes, self._save_path)

    @property
    def save_path(self) -> Path:
        return self._save_path

    def process_frame(
        self,
        frame_id: int,
        image: np.ndarray,
        result: DetectionResult,
    ) -> bool:
        """Route one frame's result.

        Returns:
            False if the user asked to stop (q / ESC in display mode).
        """
        should_continue = True

        if "display" in self._modes:
            key = show_frame(image, result.spots, self._config.visualization)
            if key in (ord("q"), 27):
                logger.info("Quit signal received (key press).")
                should_continue = False

        if "save_image" in self._modes:
            annotated = draw_spots(image, result.spots, self._config.visualization)
            output_file = self._save_path / f"frame_{frame_id:06d}.jpg"
            cv2.imwrite(str(output_file), annotated)
            logger.debug("Saved frame %d to %s", frame_id, output_file)

        if self._modes & {"save_json", "save_csv"}:
            self._results[frame_id] = result

        return should_continue

    def finalize(self) -> None:
        """Write buffered JSON/CSV output and close windows."""
        if "save_json" in self._modes and self._results:
            save_json(self._results, str(self._save_path / "detections.json"))

        if "save_csv" in self._modes and self._results:
            save_csv(self._results, str(self._save_path / "detections.csv"))

        if "display" in self._modes:
            cv2.destroyAllWindows()

        self._results.clear()
        logger.info("OutputHandler finalized.")
