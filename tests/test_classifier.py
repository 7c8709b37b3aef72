import pytest

import Tokens
from GestureClassifier import GESTURE_RULES, GestureClassifier
from HandFeatures import HandFeatureExtractor, HandFeatures

from conftest import EXPECTED_STATIC, make_hand


def classify_static(shape, scale=0.2):
    features = HandFeatureExtractor().extract(make_hand(shape, scale=scale))
    return GestureClassifier().classify(features)


def run_motion(shape, wrists, dt=0.0625, cfg=None):
    """Classify the last frame of a wrist trajectory."""
    ex = HandFeatureExtractor(cfg)
    clf = GestureClassifier(cfg)
    f = None
    for i, wrist in enumerate(wrists):
        f = ex.extract(make_hand(shape, t=i * dt, wrist=wrist))
    return clf.match(f), clf.classify(f)


@pytest.mark.parametrize("shape", sorted(EXPECTED_STATIC))
def test_static_shapes(shape):
    assert classify_static(shape) == EXPECTED_STATIC[shape]


@pytest.mark.parametrize("scale", [0.08, 0.15, 0.35])
def test_scale_invariance(scale):
    assert classify_static("fist_a", scale) == "A"
    assert classify_static("thumbs_up", scale) == "YES"
    assert classify_static("u", scale) == "U"


def test_determinism():
    features = HandFeatureExtractor().extract(make_hand("fist_t"))
    clf = GestureClassifier()
    assert {clf.classify(features) for _ in range(5)} == {"T"}


def test_rule_order_is_fixed():
    names = [r.name for r in GESTURE_RULES]
    assert names[:8] == [
        "hello_wave",
        "swipe_left",
        "swipe_right",
        "thank_you",
        "yes_nod",
        "thumbs_up",
        "thumbs_down",
        "love",
    ]
    # refined letter shapes precede their fallbacks
    assert names.index("letter_c") < names.index("letter_b")
    assert names.index("letter_u") < names.index("letter_v")
    assert names.index("letter_t") < names.index("letter_s")
    assert names.index("letter_l") < names.index("letter_d")
    assert names.index("letter_y") < names.index("letter_i")


def test_every_rule_token_is_in_vocabulary():
    for rule in GESTURE_RULES:
        assert rule.token in Tokens.TOKEN_KINDS
        assert not Tokens.is_sentinel(rule.token)


def test_no_match_is_unclassified():
    f = HandFeatures()
    f.extended["ring"] = True
    f.extended_count = 1
    assert GestureClassifier().match(f) is None
    assert GestureClassifier().classify(f) == Tokens.UNKNOWN


def test_swipe_right_is_space():
    wrists = [(0.3 + 0.06 * i, 0.8) for i in range(8)]
    rule, token = run_motion("open_wide", wrists)
    assert rule.name == "swipe_right"
    assert token == Tokens.SPACE


def test_swipe_left_is_backspace():
    wrists = [(0.8 - 0.06 * i, 0.8) for i in range(8)]
    _, token = run_motion("open_wide", wrists)
    assert token == Tokens.BACKSPACE


def test_unmirrored_input_reverses_swipe_direction():
    wrists = [(0.3 + 0.06 * i, 0.8) for i in range(8)]
    _, token = run_motion("open_wide", wrists, cfg={"motion": {"mirrored": False}})
    assert token == Tokens.BACKSPACE


def test_wave_is_hello_not_a_swipe():
    xs = [0.5, 0.56, 0.62, 0.56, 0.5, 0.56, 0.62, 0.56]
    rule, token = run_motion("open_wide", [(x, 0.8) for x in xs])
    assert rule.name == "hello_wave"
    assert token == Tokens.HELLO


def test_open_palm_moving_down_is_thank_you():
    wrists = [(0.5, 0.4 + 0.04 * i) for i in range(8)]
    _, token = run_motion("open_b", wrists)
    assert token == Tokens.THANK_YOU


def test_still_open_palm_stays_a_letter():
    _, token = run_motion("open_wide", [(0.5, 0.8)] * 8)
    assert token == "B"


def test_nodding_fist_is_yes_via_motion_rule():
    wrists = [(0.5, 0.5 + 0.03 * i) for i in range(8)]
    rule, token = run_motion("thumbs_up", wrists)
    assert rule.name == "yes_nod"
    assert token == Tokens.YES


def test_thresholds_come_from_config():
    features = HandFeatureExtractor().extract(make_hand("l"))
    strict = GestureClassifier({"classifier": {"l_thumb_spread": 5.0}})
    assert GestureClassifier().classify(features) == "L"
    assert strict.classify(features) == "D"
