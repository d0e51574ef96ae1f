import pytest

from helping_hand.Geometry import Point

WRIST = (0.50, 0.80)
THUMB_CMC = (0.45, 0.74)
THUMB_MCP = (0.42, 0.68)

# (IP, TIP) for each thumb pose
THUMB_POSES = {
    "in": ((0.43, 0.65), (0.43, 0.62)),  # folded against the palm
    "side": ((0.40, 0.64), (0.36, 0.60)),  # alongside the fist (A)
    "wide": ((0.36, 0.67), (0.30, 0.66)),  # sideways, ~right angle to index (L, Y)
    "up": ((0.39, 0.59), (0.36, 0.50)),  # out but nearly parallel to index
}

# MCP x of index, middle, ring, pinky; palm width = 0.56 - 0.44 = 0.12
FINGER_X = (0.44, 0.48, 0.52, 0.56)
MCP_Y = 0.60


def _finger(x, up, tip_x=None):
    if up:
        tx = x if tip_x is None else tip_x
        # pip, dip, tip; tip above pip
        return [(x, 0.50), ((x + tx) / 2, 0.45), (tx, 0.40)]
    # curled: dip bulges sideways so the finger is not straight in 2D
    return [(x, 0.54), (x + 0.02, 0.58), (x, 0.61)]


def build_hand(
    thumb="in",
    index=False,
    middle=False,
    ring=False,
    pinky=False,
    index_tip_x=None,
    middle_tip_x=None,
    scale=1.0,
    shift=(0.0, 0.0),
):
    ip, tip = THUMB_POSES[thumb]
    pts = [WRIST, THUMB_CMC, THUMB_MCP, ip, tip]
    tips_x = (index_tip_x, middle_tip_x, None, None)
    for x, up, tx in zip(FINGER_X, (index, middle, ring, pinky), tips_x):
        pts.append((x, MCP_Y))
        pts.extend(_finger(x, up, tx))
    return [
        Point(0.5 + (px - 0.5) * scale + shift[0], 0.5 + (py - 0.5) * scale + shift[1])
        for px, py in pts
    ]


def v_hand(separation):
    """Index and middle up with tips `separation` apart, centred on x=0.46."""
    return build_hand(
        index=True,
        middle=True,
        index_tip_x=0.46 - separation / 2,
        middle_tip_x=0.46 + separation / 2,
    )


LETTER_HANDS = {
    "A": lambda **kw: build_hand(thumb="side", **kw),
    "I": lambda **kw: build_hand(thumb="in", pinky=True, **kw),
    "L": lambda **kw: build_hand(thumb="wide", index=True, **kw),
    "V": lambda **kw: build_hand(thumb="in", index=True, middle=True, index_tip_x=0.40, middle_tip_x=0.52, **kw),
    "Y": lambda **kw: build_hand(thumb="wide", pinky=True, **kw),
}


@pytest.fixture
def make_hand():
    return build_hand


@pytest.fixture
def letter_hand():
    def _make(letter, **kw):
        return LETTER_HANDS[letter](**kw)

    return _make


@pytest.fixture
def make_v_hand():
    return v_hand


class FakeClock:
    """Millisecond clock for workflow tests; returns seconds like time.monotonic."""

    def __init__(self, start_ms=0):
        self.ms = start_ms

    def __call__(self):
        return self.ms / 1000.0

    def advance(self, ms):
        self.ms += ms


@pytest.fixture
def clock():
    return FakeClock()
