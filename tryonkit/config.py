from __future__ import annotations
import yaml
from pathlib import Path
from pydantic import BaseModel, ConfigDict

class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid")

class CameraConfig(_Section):
    index: int = 0
    width: int = 1280
    height: int = 720

class HandsConfig(_Section):
    max_hands: int = 2
    model_complexity: int = 0   # 0=lite, 1=full
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5

class FaceConfig(_Section):
    max_faces: int = 1
    refine_landmarks: bool = True
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5

class RenderConfig(_Section):
    ws_host: str = "0.0.0.0"
    ws_port: int = 8765

class TryOnConfig(_Section):
    camera: CameraConfig = CameraConfig()
    hands: HandsConfig = HandsConfig()
    face: FaceConfig = FaceConfig()
    render: RenderConfig = RenderConfig()
    log_level: str = "INFO"

def load_config(path: str|Path|None) -> TryOnConfig:
    """Read a YAML config; a missing or empty file gives the defaults."""
    if not path or not Path(path).exists():
        return TryOnConfig()
    with open(path, "r") as f: cfg = yaml.safe_load(f) or {}
    return TryOnConfig.model_validate(cfg)
