"""
Region proposal strategies.

Responsibility:
    Generate candidate Region rectangles for a frame. Four interchangeable
    strategies are registered in PROPOSERS:

        edge_detection        4x8 grid of jittered cells (default)
        selective_search      grid cells with damped confidence
        connected_components  randomly placed components
        deep_learning         grid x scale x ratio anchors, 70% survival

    The geometry is synthesized to follow a typical parking-lot layout; no
    pixels are inspected.

Adding a strategy:
    1. Subclass RegionProposer and implement propose().
    2. Register it in PROPOSERS under its method name.

Hard-coded:
    - Grid: 4 rows x 8 columns, pitch (90, 120), offset (50, 80).
    - Anchor scales (0.8, 1.0, 1.2) and aspect ratios (0.5, 1.0, 2.0).
"""

import math
from typing import Dict, List, Tuple, Type

import numpy as np

from parking_detection.detection import Region
from parking_detection.errors import UnknownStrategyError
from parking_detection.frame import FrameLike

GRID_ROWS = 4
GRID_COLS = 8
GRID_PITCH = (90, 120)
GRID_OFFSET = (50, 80)

ANCHOR_SCALES = (0.8, 1.0, 1.2)
ANCHOR_RATIOS = (0.5, 1.0, 2.0)
ANCHOR_BASE_SIZE = (80, 100)
ANCHOR_SURVIVAL = 0.7


def _grid_origin(row: int, col: int) -> Tuple[int, int]:
    return col * GRID_PITCH[0] + GRID_OFFSET[0], row * GRID_PITCH[1] + GRID_OFFSET[1]


class RegionProposer:
    """Interface that all region proposers implement."""

    name: str = ""

    def propose(self, frame: FrameLike, rng: np.random.Generator) -> List[Region]:
        """Return candidate regions for the frame (may be empty)."""
        raise NotImplementedError


class EdgeGridProposer(RegionProposer):
    """Canny/contour-style proposals laid out on a fixed 4x8 grid.

    Each cell is jittered by +/-5px in position and +/-10px in size around
    a 70x90 base, with confidence in [0.6, 0.9]. Always 32 regions; a
    zero-area frame yields zero-size regions.
    """

    name = "edge_detection"

    def propose(self, frame: FrameLike, rng: np.random.Generator) -> List[Region]:
        degenerate = frame.area == 0
        regions = []

        for row in range(GRID_ROWS):
            for col in range(GRID_COLS):
                x, y = _grid_origin(row, col)
                width = 70 + rng.uniform(-10, 10)
                height = 90 + rng.uniform(-10, 10)
                if degenerate:
                    width = height = 0.0

                regions.append(Region(
                    id=f"region_{row}_{col}",
                    x=float(x + rng.uniform(-5, 5)),
                    y=float(y + rng.uniform(-5, 5)),
                    width=float(width),
                    height=float(height),
                    confidence=float(rng.uniform(0.6, 0.9)),
                    method=self.name,
                    attributes={
                        "edges": {
                            "strong": int(rng.integers(10, 30)),
                            "weak": int(rng.integers(5, 20)),
                        }
                    },
                ))

        return regions


class SelectiveSearchProposer(RegionProposer):
    """Grid proposals re-scored with a 0.9 damping and a diversity score."""

    name = "selective_search"

    def propose(self, frame: FrameLike, rng: np.random.Generator) -> List[Region]:
        base = EdgeGridProposer().propose(frame, rng)
        return [
            Region(
                id=r.id,
                x=r.x,
                y=r.y,
                width=r.width,
                height=r.height,
                confidence=r.confidence * 0.9,
                method=self.name,
                attributes={**r.attributes, "diversityScore": float(rng.random())},
            )
            for r in base
        ]


class ConnectedComponentsProposer(RegionProposer):
    """Labelled components scattered over the frame.

    Yields 20-34 components. Positions start 50px inside the frame edge
    and span (dimension - 100) pixels, which for an 800x600 frame gives
    x in [50, 750) and y in [50, 550). Positions never pass the frame
    edge, and a zero-area frame yields zero-size components.
    """

    name = "connected_components"

    def propose(self, frame: FrameLike, rng: np.random.Generator) -> List[Region]:
        count = int(rng.integers(20, 35))
        span_x = max(frame.width - 100, 0)
        span_y = max(frame.height - 100, 0)
        degenerate = frame.area == 0

        regions = []
        for i in range(count):
            x = min(50 + rng.random() * span_x, frame.width)
            y = min(50 + rng.random() * span_y, frame.height)
            width = rng.uniform(40, 140)
            height = rng.uniform(60, 180)
            if degenerate:
                width = height = 0.0

            regions.append(Region(
                id=f"component_{i}",
                x=float(x),
                y=float(y),
                width=float(width),
                height=float(height),
                confidence=float(rng.uniform(0.2, 1.0)),
                method=self.name,
                attributes={
                    "pixelCount": int(rng.integers(500, 2500)),
                    "label": i + 1,
                },
            ))
        return regions


def generate_anchors(frame: FrameLike) -> List[Tuple[float, float, float, float]]:
    """Return the fixed (x, y, width, height) anchor set for a frame.

    Grid cells crossed with scales and aspect ratios: 4 * 8 * 3 * 3 = 288.
    """
    degenerate = frame.area == 0
    base_w, base_h = ANCHOR_BASE_SIZE
    anchors = []

    for row in range(GRID_ROWS):
        for col in range(GRID_COLS):
            x, y = _grid_origin(row, col)
            for scale in ANCHOR_SCALES:
                for ratio in ANCHOR_RATIOS:
                    if degenerate:
                        anchors.append((float(x), float(y), 0.0, 0.0))
                        continue
                    anchors.append((
                        float(x),
                        float(y),
                        base_w * scale * math.sqrt(ratio),
                        base_h * scale / math.sqrt(ratio),
                    ))
    return anchors


class AnchorProposer(RegionProposer):
    """DCNN-style proposals: each anchor survives with probability 0.7."""

    name = "deep_learning"

    def propose(self, frame: FrameLike, rng: np.random.Generator) -> List[Region]:
        regions = []
        for index, (x, y, width, height) in enumerate(generate_anchors(frame)):
            if rng.random() >= ANCHOR_SURVIVAL:
                continue
            regions.append(Region(
                id=f"dl_region_{index}",
                x=x,
                y=y,
                width=width,
                height=height,
                confidence=float(rng.uniform(0.6, 1.0)),
                method=self.name,
                attributes={
                    "activation": float(rng.random()),
                    "layer": "conv5",
                    "receptiveField": 160,
                },
            ))
        return regions


PROPOSERS: Dict[str, Type[RegionProposer]] = {
    EdgeGridProposer.name: EdgeGridProposer,
    SelectiveSearchProposer.name: SelectiveSearchProposer,
    ConnectedComponentsProposer.name: ConnectedComponentsProposer,
    AnchorProposer.name: AnchorProposer,
}


def create_proposer(method: str) -> RegionProposer:
    """Factory: create a region proposer by method name."""
    if method not in PROPOSERS:
        raise UnknownStrategyError("region proposal", method, PROPOSERS)
    return PROPOSERS[method]()


def propose_regions(
    frame: FrameLike,
    method: str,
    rng: np.random.Generator,
) -> List[Region]:
    """Run the named proposer over a frame.

    Raises:
        UnknownStrategyError: If the method is not registered.
    """
    return create_proposer(method).propose(frame, rng)
