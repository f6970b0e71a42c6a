from __future__ import annotations
import logging
from rich.logging import RichHandler

FORMAT = "%(name)s: %(message)s"

def setup_logging(level: str|int = "INFO"):
    """Install a rich console handler on the root logger. Called once by the CLI."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logging.basicConfig(level=level, format=FORMAT, datefmt="[%X]",
                        handlers=[RichHandler(rich_tracebacks=True, show_path=False)], force=True)
    # mediapipe/absl are chatty at INFO
    logging.getLogger("absl").setLevel(logging.WARNING)
