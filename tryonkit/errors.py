from __future__ import annotations
from typing import Any, Optional

class TryOnError(Exception):
    """Base error; folds optional context and cause into the message."""
    def __init__(self, message: str, *, context: Optional[dict[str, Any]] = None, cause: Optional[BaseException] = None):
        self.context = context or {}
        self.cause = cause
        full = message
        if self.context:
            full = f"{message} [" + ", ".join(f"{k}={v}" for k, v in self.context.items()) + "]"
        if cause is not None:
            full = f"{full} (caused by: {cause})"
        super().__init__(full)

class InitializationError(TryOnError):
    """Model or camera unavailable. Terminal for the instance that raised it."""

class TransientFrameError(TryOnError):
    """A single frame failed to process; the next one is tried normally."""

class DegenerateGeometryError(TryOnError):
    """Zero-length, non-finite or missing landmark geometry. Means: do not render."""
