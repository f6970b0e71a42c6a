"""
Landmark geometry for jewelry placement.

All points are normalized to [0,1] with the origin top-left and y pointing
down, as the landmark models report them.
"""
from __future__ import annotations
import math
from dataclasses import dataclass

@dataclass(frozen=True)
class Point:
    x: float; y: float

    @staticmethod
    def from_row(row) -> "Point":
        """Build from one row of a landmark array (x, y[, z])."""
        return Point(float(row[0]), float(row[1]))

@dataclass(frozen=True)
class Transform:
    x: float; y: float; scale: float; rotation_rad: float

def compute_transform(p1: Point, p2: Point) -> Transform:
    """
    Midpoint, length and angle of the segment p1 -> p2.

    `scale` is 0 when p1 == p2 (single-landmark placements pass the same
    point twice); callers treat that as "do not render". Rotation is
    atan2(dy, dx), so a downward vector gives +pi/2.
    """
    dx = p2.x - p1.x
    dy = p2.y - p1.y
    return Transform(x=(p1.x + p2.x) / 2, y=(p1.y + p2.y) / 2,
                     scale=math.sqrt(dx*dx + dy*dy), rotation_rad=math.atan2(dy, dx))

def normalized_to_pixel_coords(x: float, y: float, width: float, height: float) -> tuple[float, float]:
    # no clamping: landmarks near the frame edge may land off-screen
    return x * width, y * height

def rad_to_deg(radians: float) -> float:
    return radians * (180.0 / math.pi)

def clamp(value: float, lo: float, hi: float) -> float:
    return min(max(value, lo), hi)

def distance(p1: Point, p2: Point) -> float:
    dx = p2.x - p1.x; dy = p2.y - p1.y
    return math.sqrt(dx*dx + dy*dy)

def midpoint(p1: Point, p2: Point) -> Point:
    return Point((p1.x + p2.x) / 2, (p1.y + p2.y) / 2)
