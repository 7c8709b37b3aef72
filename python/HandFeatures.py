from collections import deque
from typing import Dict, List, NamedTuple

from HandData import (
    INDEX_MCP,
    INDEX_TIP,
    MIDDLE_MCP,
    MIDDLE_TIP,
    PINKY_MCP,
    PINKY_TIP,
    RING_MCP,
    RING_TIP,
    THUMB_TIP,
    WRIST,
)
from helpers import dist2d, palm_size, ratio

# (tip, knuckle) per non-thumb finger
FINGER_TIPS = {
    "index": (INDEX_TIP, INDEX_MCP),
    "middle": (MIDDLE_TIP, MIDDLE_MCP),
    "ring": (RING_TIP, RING_MCP),
    "pinky": (PINKY_TIP, PINKY_MCP),
}
FINGER_ORDER = ("index", "middle", "ring", "pinky")


class MotionSample(NamedTuple):
    x: float
    y: float
    t: float


class MotionHistory:
    """Bounded wrist trail, newest sample first."""

    def __init__(self, size: int = 24):
        self.size = max(2, int(size))
        self._samples = deque(maxlen=self.size)

    def __len__(self):
        return len(self._samples)

    def __iter__(self):
        return iter(self._samples)

    def push(self, sample: MotionSample) -> None:
        if self._samples and sample.t < self._samples[0].t:
            # clock went backwards (replayed or restarted source)
            self._samples.clear()
        self._samples.appendleft(sample)

    def clear(self) -> None:
        self._samples.clear()

    def window(self, now: float, window_s: float) -> List[MotionSample]:
        """Samples no older than window_s, newest first."""
        out = []
        for s in self._samples:
            if now - s.t > window_s:
                break
            out.append(s)
        return out


class HandFeatures:
    """
    Normalized geometry for one frame. Distances are ratios over the hand
    scale (wrist -> middle knuckle) unless noted; motion is in hand-scale
    units with +dx toward the signer's own right and +dy downward.
    """

    def __init__(self):
        self.timestamp = 0.0
        self.scale = 0.0
        self.palm_width = 0.0

        self.extended: Dict[str, bool] = {name: False for name in FINGER_ORDER}
        self.extended_count = 0

        # thumb tip -> index knuckle
        self.thumb_spread = 0.0
        # thumb tip height above the index knuckle
        self.thumb_lift = 0.0
        # thumb tip depth below the wrist
        self.thumb_drop = 0.0
        self.thumb_above_wrist = False
        self.thumb_below_middle = False

        # secondary ratios for letters
        self.thumb_to_middle = 0.0
        self.middle_length = 0.0
        self.tip_gap = 0.0  # over palm width
        self.thumb_to_pinky = 0.0  # over palm width

        # motion over the trailing window
        self.dx = 0.0
        self.dy = 0.0
        self.path_x = 0.0
        self.reversals = 0
        self.motion_span = 0.0  # seconds covered by the window

    @property
    def open_palm(self):
        return self.extended_count == 4

    @property
    def fist(self):
        return self.extended_count == 0

    def only(self, *names):
        """True when exactly the named fingers are extended."""
        return all(self.extended[n] == (n in names) for n in FINGER_ORDER)

    def to_dict(self):
        return {
            "timestamp": self.timestamp,
            "scale": self.scale,
            "palm_width": self.palm_width,
            "extended": dict(self.extended),
            "extended_count": self.extended_count,
            "thumb_spread": self.thumb_spread,
            "thumb_lift": self.thumb_lift,
            "thumb_drop": self.thumb_drop,
            "dx": self.dx,
            "dy": self.dy,
            "path_x": self.path_x,
            "reversals": self.reversals,
        }


class HandFeatureExtractor:
    """
    Computes per-frame finger states and thumb ratios, and keeps the wrist
    motion trail used for swipe/wave detection.
    """

    def __init__(self, cfg=None):
        self.buffer_size = 24
        self.window_s = 0.4
        self.jitter_eps = 0.05
        self.mirrored = True
        self.extension_margin = 0.1
        self.motion = MotionHistory(self.buffer_size)
        if cfg:
            self.update_config(cfg)

    def update_config(self, cfg) -> None:
        m = cfg.get("motion", {})
        c = cfg.get("classifier", {})
        buffer_size = int(m.get("buffer_size", self.buffer_size))
        if buffer_size != self.buffer_size:
            self.buffer_size = buffer_size
            self.motion = MotionHistory(buffer_size)
        self.window_s = float(m.get("window_s", self.window_s))
        self.jitter_eps = float(m.get("jitter_eps", self.jitter_eps))
        self.mirrored = bool(m.get("mirrored", self.mirrored))
        self.extension_margin = float(c.get("extension_margin", self.extension_margin))

    def reset(self) -> None:
        self.motion.clear()

    def extract(self, hand) -> HandFeatures:
        lm = hand.landmarks
        f = HandFeatures()
        f.timestamp = hand.timestamp

        scale = palm_size(lm)
        f.scale = scale
        f.palm_width = dist2d(lm[INDEX_MCP], lm[PINKY_MCP])

        # image y grows downward: "up" means a smaller y
        margin = scale * self.extension_margin
        for name in FINGER_ORDER:
            tip, knuckle = FINGER_TIPS[name]
            f.extended[name] = lm[tip].y < lm[knuckle].y - margin
        f.extended_count = sum(1 for v in f.extended.values() if v)

        thumb = lm[THUMB_TIP]
        wrist = lm[WRIST]
        f.thumb_spread = ratio(dist2d(thumb, lm[INDEX_MCP]), scale)
        f.thumb_lift = ratio(lm[INDEX_MCP].y - thumb.y, scale)
        f.thumb_drop = ratio(thumb.y - wrist.y, scale)
        f.thumb_above_wrist = thumb.y < wrist.y
        f.thumb_below_middle = thumb.y > lm[MIDDLE_TIP].y

        f.thumb_to_middle = ratio(dist2d(thumb, lm[MIDDLE_TIP]), scale)
        f.middle_length = ratio(dist2d(lm[MIDDLE_TIP], lm[MIDDLE_MCP]), scale)
        f.tip_gap = ratio(dist2d(lm[INDEX_TIP], lm[MIDDLE_TIP]), f.palm_width)
        f.thumb_to_pinky = ratio(dist2d(thumb, lm[PINKY_MCP]), f.palm_width)

        self.motion.push(MotionSample(wrist.x, wrist.y, hand.timestamp))
        self._apply_motion(f, scale)
        return f

    def _apply_motion(self, f: HandFeatures, scale: float) -> None:
        recent = self.motion.window(f.timestamp, self.window_s)
        if len(recent) < 2:
            return
        newest, oldest = recent[0], recent[-1]

        # raw image x grows to the viewer's right; undo that for unmirrored input
        x_sign = 1.0 if self.mirrored else -1.0
        f.dx = x_sign * ratio(newest.x - oldest.x, scale)
        f.dy = ratio(newest.y - oldest.y, scale)
        f.motion_span = newest.t - oldest.t

        path = 0.0
        reversals = 0
        last_dir = 0
        chronological = list(reversed(recent))
        for prev, cur in zip(chronological, chronological[1:]):
            step = ratio(cur.x - prev.x, scale)
            path += abs(step)
            if abs(step) < self.jitter_eps:
                continue
            direction = 1 if step > 0 else -1
            if last_dir and direction != last_dir:
                reversals += 1
            last_dir = direction
        f.path_x = path
        f.reversals = reversals
