"""
Error taxonomy for the parking detection pipeline.

Every error raised by a pipeline stage derives from DetectionError so the
detector can recover from all of them at a single boundary. Configuration
errors are not part of this hierarchy: they are plain ValueError /
FileNotFoundError and are raised at load time.
"""

from typing import Iterable


class DetectionError(Exception):
    """Base class for all pipeline stage errors."""


class UnknownStrategyError(DetectionError):
    """Raised when a region proposal or classification method is not registered."""

    def __init__(self, kind: str, name: str, available: Iterable[str]) -> None:
        self.kind = kind
        self.name = name
        self.available = sorted(available)
        super().__init__(
            f"Unknown {kind} method '{name}'. Available: {self.available}"
        )


class InvalidFrameError(DetectionError):
    """Raised when an input frame is missing or has malformed dimensions."""


class StageFailure(DetectionError):
    """Wraps an unexpected exception raised inside a pipeline stage."""

    def __init__(self, stage: str, cause: BaseException) -> None:
        self.stage = stage
        self.cause = cause
        super().__init__(f"Stage '{stage}' failed: {cause!r}")
