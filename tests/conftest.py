import pytest

from Emotion import EmotionState
from HandData import HandData

# knuckle offsets from the wrist, in hand-scale units (image y grows downward)
FINGER_MCP = {
    "index": (-0.3, -0.95),
    "middle": (0.0, -1.0),
    "ring": (0.25, -0.95),
    "pinky": (0.5, -0.85),
}
FINGER_BASE = {"index": 5, "middle": 9, "ring": 13, "pinky": 17}

# name -> (extended fingers, thumb tip offset, extra options)
SHAPES = {
    "open_b": (("index", "middle", "ring", "pinky"), (-0.1, -0.6), {}),
    "open_wide": (("index", "middle", "ring", "pinky"), (-1.0, -0.6), {}),
    "open_c": (("index", "middle", "ring", "pinky"), (-0.2, -0.9), {"reach": 0.4}),
    "thumbs_up": ((), (-0.4, -1.7), {}),
    "thumbs_down": ((), (-0.3, 0.5), {}),
    "fist_a": ((), (-0.7, -0.9), {}),
    "fist_e": ((), (-0.1, -0.5), {}),
    "fist_t": ((), (-0.3, -1.0), {}),
    "fist_s": ((), (0.2, -0.8), {}),
    "v": (("index", "middle"), (-0.1, -0.6), {"tips": {"index": (-0.5, -1.85), "middle": (0.1, -1.9)}}),
    "u": (("index", "middle"), (-0.1, -0.6), {"tips": {"index": (-0.1, -1.85), "middle": (0.0, -1.9)}}),
    "l": (("index",), (-1.0, -0.6), {}),
    "d": (("index",), (-0.1, -0.6), {}),
    "y": (("pinky",), (-1.1, -0.6), {}),
    "i": (("pinky",), (-0.1, -0.6), {}),
    "love": (("index", "pinky"), (-1.0, -0.6), {}),
    "ring_only": (("ring",), (-0.1, -0.6), {}),
}

EXPECTED_STATIC = {
    "open_b": "B",
    "open_wide": "B",
    "open_c": "C",
    "thumbs_up": "YES",
    "thumbs_down": "NO",
    "fist_a": "A",
    "fist_e": "E",
    "fist_t": "T",
    "fist_s": "S",
    "v": "V",
    "u": "U",
    "l": "L",
    "d": "D",
    "y": "Y",
    "i": "I",
    "love": "LOVE",
    "ring_only": "...",
}


def hand_points(shape, wrist=(0.5, 0.8), scale=0.2):
    """21 (x, y, z) points for a named hand shape."""
    extended, thumb, opts = SHAPES[shape]
    reach = opts.get("reach", 0.9)
    tips = opts.get("tips", {})

    rel = [(0.0, 0.0)] * 21
    tx, ty = thumb
    rel[1] = (-0.2, -0.2)
    rel[2] = (-0.35, -0.4)
    rel[3] = ((rel[2][0] + tx) / 2, (rel[2][1] + ty) / 2)
    rel[4] = (tx, ty)

    for name, base in FINGER_BASE.items():
        mx, my = FINGER_MCP[name]
        rel[base] = (mx, my)
        if name in extended:
            rel[base + 1] = (mx, my - reach * 0.4)
            rel[base + 2] = (mx, my - reach * 0.7)
            rel[base + 3] = tips.get(name, (mx, my - reach))
        else:
            rel[base + 1] = (mx, my - 0.25)
            rel[base + 2] = (mx, my - 0.1)
            rel[base + 3] = (mx, my + 0.3)

    wx, wy = wrist
    return [(wx + dx * scale, wy + dy * scale, 0.0) for dx, dy in rel]


def make_hand(shape, t=0.0, wrist=(0.5, 0.8), scale=0.2):
    return HandData.from_points(hand_points(shape, wrist, scale), timestamp=t, handedness="Right")


@pytest.fixture
def hand():
    return make_hand


@pytest.fixture
def expected_static():
    return dict(EXPECTED_STATIC)


class FixedEmotion:
    def __init__(self, tone):
        self.tone = tone

    def current(self):
        return EmotionState(self.tone, 0.9)


@pytest.fixture
def emotion():
    return FixedEmotion
