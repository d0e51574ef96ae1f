import math
from collections import namedtuple
from typing import List, MutableMapping, Sequence, Tuple, Union

# Every distance used for classification is divided by palm width.
MIN_PALM_WIDTH = 1e-6

# (tip, pip) landmark indices for the four long fingers, index..pinky.
FINGER_TIP_PIP: Tuple[Tuple[int, int], ...] = ((8, 6), (12, 10), (16, 14), (20, 18))

Point = namedtuple("Point", ["x", "y"])
LandmarkLike = Union[Sequence[float], MutableMapping[str, float]]


def to_point(entry: Union[LandmarkLike, object]) -> Point:
    if isinstance(entry, Point):
        return entry
    if hasattr(entry, "x") and hasattr(entry, "y"):
        return Point(float(entry.x), float(entry.y))
    if isinstance(entry, dict):
        return Point(float(entry["x"]), float(entry["y"]))
    if isinstance(entry, (list, tuple)) and len(entry) >= 2:
        return Point(float(entry[0]), float(entry[1]))
    raise ValueError("Unsupported landmark format; expected object with x,y or sequence of 2 values.")


def to_points(landmarks: Sequence[object]) -> List[Point]:
    return [to_point(lm) for lm in landmarks]


# ---------- distances ----------
def distance(a, b):
    """Euclidean distance in normalized image coordinates between two landmarks."""
    return math.hypot(a.x - b.x, a.y - b.y)


def palm_width(lm):
    """Index MCP -> pinky MCP, floored so degenerate hands never divide by zero."""
    return max(distance(lm[5], lm[17]), MIN_PALM_WIDTH)


def normalized_distance(lm, i, j, pw):
    return distance(lm[i], lm[j]) / pw


def thumb_spread_normalized(lm, pw):
    """Thumb tip -> thumb MCP in palm widths."""
    return normalized_distance(lm, 4, 2, pw)


# ---------- angles ----------
def cosine_similarity(ax, ay, bx, by):
    dot = ax * bx + ay * by
    mag_a = math.hypot(ax, ay) or MIN_PALM_WIDTH
    mag_b = math.hypot(bx, by) or MIN_PALM_WIDTH
    return dot / (mag_a * mag_b)


def ray_angle_degrees(ax, ay, bx, by):
    """Angle (degrees, 0..180) between two 2D direction vectors."""
    cos = max(-1.0, min(1.0, cosine_similarity(ax, ay, bx, by)))
    return math.degrees(math.acos(cos))


def ray(lm, base, tip):
    """Direction vector base -> tip as an (x, y) tuple."""
    return (lm[tip].x - lm[base].x, lm[tip].y - lm[base].y)


def rays_angle(lm, ray_a, ray_b):
    """Angle between two landmark rays given as (base, tip) index pairs."""
    ax, ay = ray(lm, *ray_a)
    bx, by = ray(lm, *ray_b)
    return ray_angle_degrees(ax, ay, bx, by)


def angle_at_pip(lm, tip, dip, pip):
    """Angle (degrees) at the DIP vertex between DIP->TIP and DIP->PIP."""
    ax, ay = ray(lm, dip, tip)
    bx, by = ray(lm, dip, pip)
    return ray_angle_degrees(ax, ay, bx, by)


# ---------- finger states ----------
def fingers_up(lm, thumb_spread_threshold=0.035):
    """
    Returns [thumb, index, middle, ring, pinky] as 0/1.
    A long finger is up when its tip sits above its PIP joint in image space;
    the thumb is out when its tip is horizontally far from its MCP.
    """
    thumb_out = 1 if abs(lm[4].x - lm[2].x) > thumb_spread_threshold else 0
    states = [thumb_out]
    for tip, pip in FINGER_TIP_PIP:
        states.append(1 if lm[tip].y < lm[pip].y else 0)
    return states


def is_finger_straight(lm, tip, dip, pip, threshold=150.0):
    return angle_at_pip(lm, tip, dip, pip) >= threshold


def is_finger_bent(lm, tip, pip, pw, threshold=0.62):
    return normalized_distance(lm, tip, pip, pw) < threshold
