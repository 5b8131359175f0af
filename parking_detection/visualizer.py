"""
Overlay rendering for detected parking spots.

Responsibility:
    Draw spot rectangles, colored by status, and optional "P001 85.0%"
    labels onto a copy of a frame. Pure rendering; no I/O besides the
    optional display window in show_frame().

Non-goals:
    - No file writing or detection logic.
"""

from typing import List

import cv2
import numpy as np

from parking_detection.config import VisualizationConfig
from parking_detection.detection import ParkingSpot

# BGR colors per spot status
STATUS_COLORS = {
    "available": (94, 197, 34),
    "occupied": (68, 68, 239),
    "reserved": (11, 158, 245),
}
_DEFAULT_COLOR = (200, 200, 200)

_FONT = cv2.FONT_HERSHEY_SIMPLEX
_FONT_SCALE = 0.45
_FONT_THICKNESS = 1
_LABEL_PADDING = 4


def spot_label(spot: ParkingSpot) -> str:
    return f"{spot.id} {spot.confidence * 100:.1f}%"


def draw_spots(
    frame: np.ndarray,
    spots: List[ParkingSpot],
    config: VisualizationConfig,
) -> np.ndarray:
    """Draw spots onto a frame.

    Args:
        frame: Input BGR image (not modified — a copy is returned).
        spots: Ranked ParkingSpots to render.
        config: Visualization parameters.

    Returns:
        A new BGR numpy array with the overlay drawn.
    """
    annotated = frame.copy()

    for spot in spots:
        color = STATUS_COLORS.get(spot.status, _DEFAULT_COLOR)
        top_left = (spot.x, spot.y)
        bottom_right = (spot.x + spot.width, spot.y + spot.height)
        cv2.rectangle(annotated, top_left, bottom_right, color=color,
                      thickness=config.thickness)

        if not config.show_labels or spot.confidence < config.label_confidence_threshold:
            continue

        label = spot_label(spot)
        (text_w, text_h), _ = cv2.getTextSize(label, _FONT, _FONT_SCALE, _FONT_THICKNESS)

        # Above the box, or inside it when too close to the top edge
        label_y = spot.y - _LABEL_PADDING
        if label_y - text_h - _LABEL_PADDING < 0:
            label_y = spot.y + text_h + _LABEL_PADDING

        cv2.rectangle(
            annotated,
            (spot.x, label_y - text_h - _LABEL_PADDING),
            (spot.x + text_w + _LABEL_PADDING, label_y + _LABEL_PADDING),
            color=(0, 0, 0),
            thickness=cv2.FILLED,
        )
        cv2.putText(
            annotated,
            label,
            (spot.x + _LABEL_PADDING // 2, label_y),
            _FONT,
            _FONT_SCALE,
            (255, 255, 255),
            _FONT_THICKNESS,
            cv2.LINE_AA,
        )

    return annotated


def show_frame(
    frame: np.ndarray,
    spots: List[ParkingSpot],
    config: VisualizationConfig,
) -> int:
    """Show the annotated frame in a window and return the key pressed (-1 if none)."""
    annotated = draw_spots(frame, spots, config)
    cv2.imshow("Parking Detection", annotated)
    return cv2.waitKey(1) & 0xFF
