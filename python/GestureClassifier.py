# GestureClassifier.py
from typing import Callable, Dict, NamedTuple, Tuple

import Tokens
from EngineConfig import DEFAULT_CONFIG
from HandFeatures import HandFeatures

Thresholds = Dict[str, float]


class GestureRule(NamedTuple):
    name: str
    token: str
    predicate: Callable[[HandFeatures, Thresholds], bool]


def _thumb_out(f, th):
    return f.thumb_spread > th["thumb_out_ratio"]


def _wide_open(f, th):
    return f.open_palm and _thumb_out(f, th)


# ---------- motion words / commands ----------
def _hello_wave(f, th):
    # a wave, not a single swipe: back-and-forth with enough travel
    return (
        _wide_open(f, th)
        and f.reversals >= th["wave_min_reversals"]
        and f.path_x >= th["wave_min_energy"]
    )


def _swipe_left(f, th):
    return _wide_open(f, th) and f.dx <= -th["swipe_dist"] and abs(f.dx) > abs(f.dy)


def _swipe_right(f, th):
    return _wide_open(f, th) and f.dx >= th["swipe_dist"] and abs(f.dx) > abs(f.dy)


def _thank_you(f, th):
    return f.open_palm and f.dy >= th["thank_you_drop"] and f.dy > abs(f.dx)


def _yes_nod(f, th):
    return f.fist and abs(f.dy) >= th["nod_dist"] and f.thumb_above_wrist


# ---------- static words ----------
def _thumbs_up(f, th):
    return f.fist and f.thumb_lift > th["thumbs_up_lift"]


def _thumbs_down(f, th):
    return f.fist and f.thumb_drop > th["thumbs_down_drop"]


def _love(f, th):
    return f.only("index", "pinky") and _thumb_out(f, th)


# ---------- letters ----------
def _letter_c(f, th):
    # curved hand: thumb reaches toward the tips, fingers foreshortened
    return (
        f.open_palm
        and f.thumb_to_middle < th["c_thumb_to_middle"]
        and f.middle_length < th["c_middle_length"]
    )


def _letter_b(f, th):
    return f.open_palm


def _letter_u(f, th):
    return f.only("index", "middle") and f.tip_gap < th["u_tip_gap"]


def _letter_v(f, th):
    return f.only("index", "middle")


def _letter_e(f, th):
    return f.fist and f.thumb_below_middle


def _letter_a(f, th):
    return f.fist and f.thumb_to_pinky > th["a_thumb_to_pinky"]


def _letter_t(f, th):
    return f.fist and f.thumb_spread < th["t_thumb_to_index"]


def _letter_s(f, th):
    return f.fist


def _letter_l(f, th):
    return f.only("index") and f.thumb_spread > th["l_thumb_spread"]


def _letter_d(f, th):
    return f.only("index")


def _letter_y(f, th):
    return f.only("pinky") and f.thumb_spread > th["y_thumb_spread"]


def _letter_i(f, th):
    return f.only("pinky")


# Evaluated top to bottom, first match wins. Motion rules sit above the
# static shapes they share a hand pose with (wave/swipe above B, nod above
# thumbs-up), and each letter's refined shape sits above its fallback.
GESTURE_RULES: Tuple[GestureRule, ...] = (
    GestureRule("hello_wave", Tokens.HELLO, _hello_wave),
    GestureRule("swipe_left", Tokens.BACKSPACE, _swipe_left),
    GestureRule("swipe_right", Tokens.SPACE, _swipe_right),
    GestureRule("thank_you", Tokens.THANK_YOU, _thank_you),
    GestureRule("yes_nod", Tokens.YES, _yes_nod),
    GestureRule("thumbs_up", Tokens.YES, _thumbs_up),
    GestureRule("thumbs_down", Tokens.NO, _thumbs_down),
    GestureRule("love", Tokens.LOVE, _love),
    GestureRule("letter_c", "C", _letter_c),
    GestureRule("letter_b", "B", _letter_b),
    GestureRule("letter_u", "U", _letter_u),
    GestureRule("letter_v", "V", _letter_v),
    GestureRule("letter_e", "E", _letter_e),
    GestureRule("letter_a", "A", _letter_a),
    GestureRule("letter_t", "T", _letter_t),
    GestureRule("letter_s", "S", _letter_s),
    GestureRule("letter_l", "L", _letter_l),
    GestureRule("letter_d", "D", _letter_d),
    GestureRule("letter_y", "Y", _letter_y),
    GestureRule("letter_i", "I", _letter_i),
)


class GestureClassifier:
    """Maps one frame's features to exactly one token."""

    def __init__(self, cfg=None, rules=GESTURE_RULES):
        self.rules = tuple(rules)
        self.thresholds: Thresholds = dict(DEFAULT_CONFIG["classifier"])
        if cfg:
            self.update_config(cfg)

    def update_config(self, cfg) -> None:
        self.thresholds.update(cfg.get("classifier", {}))

    def match(self, features: HandFeatures):
        """The first rule whose predicate holds, or None."""
        for rule in self.rules:
            if rule.predicate(features, self.thresholds):
                return rule
        return None

    def classify(self, features: HandFeatures) -> str:
        rule = self.match(features)
        return rule.token if rule else Tokens.UNKNOWN
