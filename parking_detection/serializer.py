"""
Serialization for the parking detection pipeline.

Responsibility:
    Export detection results to structured file formats (JSON, CSV)
    for downstream consumption or offline analysis.

Non-goals:
    - No rendering, display, or detection logic.
    - No streaming output — writes complete files on finalize.
"""

import csv
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict

from parking_detection.analytics import summarize
from parking_detection.detection import DetectionResult

logger = logging.getLogger(__name__)

CSV_FIELDS = [
    "frame_id", "id", "x", "y", "width", "height", "confidence",
    "status", "type", "detectionMethod", "classificationMethod",
]


def result_to_export(frame_id: int, result: DetectionResult) -> dict:
    """Return the export record for one frame's result."""
    payload = result.to_dict()
    return {
        "frame_id": frame_id,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "metadata": payload["metadata"],
        "spots": payload["spots"],
        "statistics": summarize(result).to_dict(),
    }


def save_json(
    results_by_frame: Dict[int, DetectionResult],
    output_path: str,
) -> None:
    """Export all results to a JSON file.

    Output schema:
        {
            "frames": [
                {
                    "frame_id": 0,
                    "timestamp": "...",
                    "metadata": {"detectionMethod": ..., ...},
                    "spots": [{"id": "P001", ...}],
                    "statistics": {"totalDetections": ..., ...}
                }
            ],
            "total_frames": N,
            "total_spots": M
        }

    Raises:
        OSError: If the output path is not writable.
    """
    _ensure_parent_dir(output_path)

    frames = []
    total_spots = 0

    for frame_id in sorted(results_by_frame.keys()):
        result = results_by_frame[frame_id]
        total_spots += len(result.spots)
        frames.append(result_to_export(frame_id, result))

    payload = {
        "frames": frames,
        "total_frames": len(frames),
        "total_spots": total_spots,
    }

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)

    logger.info(
        "JSON output saved: %s (%d frames, %d spots)",
        output_path, len(frames), total_spots,
    )


def save_csv(
    results_by_frame: Dict[int, DetectionResult],
    output_path: str,
) -> None:
    """Export all spots to a CSV file, one row per spot.

    Raises:
        OSError: If the output path is not writable.
    """
    _ensure_parent_dir(output_path)

    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS, extrasaction="ignore")
        writer.writeheader()

        total = 0
        for frame_id in sorted(results_by_frame.keys()):
            for spot in results_by_frame[frame_id].spots:
                writer.writerow({"frame_id": frame_id, **spot.to_dict()})
                total += 1

    logger.info("CSV output saved: %s (%d rows)", output_path, total)


def _ensure_parent_dir(path: str) -> None:
    """Create parent directories if they don't exist."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)
