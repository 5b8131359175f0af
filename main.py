"""
Parking Detection CLI Entrypoint.

Responsibility:
    Parse command-line arguments, configure the application, wire together
    the detector and I/O handlers, and run the main processing loop.

Usage:
    python main.py                                     # Synthetic 800x600 frame
    python main.py --source lot.jpg --region-method deep_learning
    python main.py --source frames/ --output-mode save_image,save_csv
    python main.py --config my_config.yaml --seed 7

This module is the executable entry point. It should not be imported
by other modules.
"""

import argparse
import dataclasses
import logging
import sys
import time

# Configure logging before importing local modules
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("main")

from parking_detection.analytics import summarize
from parking_detection.classifiers import CLASSIFIERS
from parking_detection.config import load_config
from parking_detection.detector import ParkingDetector
from parking_detection.input_handler import InputHandler
from parking_detection.output_handler import OutputHandler
from parking_detection.proposers import PROPOSERS


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Parking Spot Detection — synthetic detection pipeline",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--source",
        type=str,
        help="Input source: 'synthetic', image/video file, directory, or webcam index.",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to YAML configuration file.",
    )
    parser.add_argument(
        "--region-method",
        choices=sorted(PROPOSERS),
        help="Region proposal strategy. Overrides config.",
    )
    parser.add_argument(
        "--classification-method",
        choices=sorted(CLASSIFIERS),
        help="Classification strategy. Overrides config.",
    )
    parser.add_argument(
        "--no-preprocessing",
        action="store_true",
        help="Skip the preprocessing stage.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Seed for reproducible runs. Overrides config.",
    )
    parser.add_argument(
        "--confidence",
        type=float,
        help="Weighted-classifier confidence threshold (0.0 - 1.0). Overrides config.",
    )
    parser.add_argument(
        "--output-mode",
        type=str,
        help="Comma-separated output modes: display, save_image, save_json, save_csv.",
    )
    parser.add_argument(
        "--output-path",
        type=str,
        help="Directory for output artifacts. Overrides config.",
    )

    return parser.parse_args()


def apply_overrides(config, args: argparse.Namespace):
    """Return a copy of config with CLI overrides applied."""
    pipeline = {}
    if args.region_method is not None:
        pipeline["region_method"] = args.region_method
    if args.classification_method is not None:
        pipeline["classification_method"] = args.classification_method
    if args.no_preprocessing:
        pipeline["enable_preprocessing"] = False
    if args.seed is not None:
        pipeline["seed"] = args.seed

    output = {}
    if args.output_mode is not None:
        output["mode"] = args.output_mode
    if args.output_path is not None:
        output["save_path"] = args.output_path

    thresholds = config.thresholds
    if args.confidence is not None:
        thresholds = thresholds.merged({"confidence": args.confidence})

    return dataclasses.replace(
        config,
        pipeline=dataclasses.replace(config.pipeline, **pipeline),
        thresholds=thresholds,
        input=(
            dataclasses.replace(config.input, source=args.source)
            if args.source is not None else config.input
        ),
        output=dataclasses.replace(config.output, **output),
    )


def main() -> int:
    """Main execution loop."""
    args = parse_args()

    # 1. Load Configuration (CLI args > ENV > YAML > Defaults)
    try:
        config = apply_overrides(load_config(args.config), args)
        logger.info("Configuration active for this run.")
    except Exception as e:
        logger.error("Configuration error: %s", e)
        return 1

    # 2. Initialize Components
    try:
        detector = ParkingDetector(config)
        input_handler = InputHandler(
            source=config.input.source,
            resize_width=config.input.resize_width,
            synthetic_size=config.input.synthetic_size,
        )
        output_handler = OutputHandler(config)
    except (FileNotFoundError, ValueError, RuntimeError) as e:
        logger.error("Initialization failed: %s", e)
        return 1

    # 3. Processing Loop
    frame_count = 0
    start_time = time.perf_counter()

    try:
        for frame_id, image in input_handler:
            frame_count += 1
            result = detector.detect(image)

            stats = summarize(result)
            logger.info(
                "Frame %d: %d spots (%d occupied), avg confidence %.2f%s",
                frame_id,
                stats.total_detections,
                stats.status_counts.get("occupied", 0),
                stats.average_confidence,
                " [fallback]" if result.metadata.fallback_used else "",
            )

            if not output_handler.process_frame(frame_id, image, result):
                logger.info("Stopping loop per user request.")
                break

    except KeyboardInterrupt:
        logger.info("Interrupted by user.")
    except Exception as e:
        logger.exception("Runtime error during processing: %s", e)
        return 1
    finally:
        elapsed = time.perf_counter() - start_time
        input_handler.release()
        output_handler.finalize()
        logger.info("Processing finished. Frames: %d in %.2fs.", frame_count, elapsed)

    return 0


if __name__ == "__main__":
    sys.exit(main())
