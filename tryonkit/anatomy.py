"""Hand and FaceMesh landmark indices used for jewelry placement."""
from __future__ import annotations
from .geometry import Point, distance

# MediaPipe Hands
WRIST=0
INDEX_MCP=5; INDEX_PIP=6; INDEX_DIP=7; INDEX_TIP=8   # ring sits between MCP and PIP
MIDDLE_MCP=9; MIDDLE_PIP=10
RING_MCP=13; RING_PIP=14

# FaceMesh
LM = {
  "chin_center": 152,
  "left_jaw": 234,
  "right_jaw": 454,
  "under_chin_left": 172,
  "under_chin_right": 397,
  "left_tragion": 234,
  "right_tragion": 454,
  "left_earlobe": 132,   # approximate
  "right_earlobe": 361,  # approximate
  "left_ear_top": 127,
  "right_ear_top": 356,
  "nose_tip": 1,
  "forehead": 10,
}

def face_width(pts) -> float:
    """Jaw-to-jaw distance in normalized units."""
    return distance(Point.from_row(pts[LM["left_jaw"]]), Point.from_row(pts[LM["right_jaw"]]))
