import copy
from typing import Any, Dict

from Tokens import KIND_COMMAND, KIND_LETTER, KIND_NONE, KIND_WORD, KINDS

DEFAULT_CONFIG: Dict[str, Any] = {
    "motion": {
        "buffer_size": 24,
        "window_s": 0.4,
        # steps shorter than this (hand-scale units) do not count as reversals
        "jitter_eps": 0.05,
        # frames are flipped horizontally before tracking (selfie view)
        "mirrored": True,
    },
    "classifier": {
        "extension_margin": 0.1,
        "thumb_out_ratio": 0.6,
        "wave_min_reversals": 2,
        "wave_min_energy": 1.5,
        "swipe_dist": 1.2,
        "thank_you_drop": 0.8,
        "nod_dist": 0.4,
        "thumbs_up_lift": 0.5,
        "thumbs_down_drop": 0.2,
        "c_thumb_to_middle": 0.8,
        "c_middle_length": 0.6,
        "u_tip_gap": 0.4,
        "a_thumb_to_pinky": 1.2,
        "t_thumb_to_index": 0.4,
        "l_thumb_spread": 0.7,
        "y_thumb_spread": 0.8,
    },
    "stabilizer": {
        "history_len": 15,
        "recency_floor": 0.4,
        "kind_weights": {
            KIND_WORD: 3.0,
            KIND_COMMAND: 2.5,
            KIND_LETTER: 1.0,
            KIND_NONE: 0.3,
        },
        "display_min_count": {
            KIND_WORD: 3,
            KIND_COMMAND: 3,
            KIND_LETTER: 8,
            KIND_NONE: 8,
        },
    },
    "commit": {
        "type_min_count": {
            KIND_WORD: 4,
            KIND_COMMAND: 4,
            KIND_LETTER: 10,
        },
        "hold_delay_s": {
            KIND_WORD: 0.6,
            KIND_COMMAND: 0.6,
            KIND_LETTER: 1.2,
        },
        "cooldown_margin_s": {
            KIND_WORD: 0.3,
            KIND_COMMAND: 0.3,
            KIND_LETTER: 0.5,
        },
    },
    "finalizer": {
        "absence_frames": 8,
        "cooldown_s": 2.0,
    },
    "tracker": {
        "camera_index": 0,
        "model_complexity": 1,
        "min_detection_confidence": 0.5,
        "min_tracking_confidence": 0.5,
    },
    "emotion": {
        "enabled": True,
        "model_path": "models/face_landmarker.task",
        "poll_interval_s": 0.5,
    },
    "server": {
        "enabled": True,
        "host": "127.0.0.1",
        "port": 5555,
    },
    "publisher": {
        "enabled": True,
        "endpoint": "tcp://*:5556",
    },
    "debug": {
        "show_window": True,
        "draw_landmarks": True,
        "fps_window": 20,
    },
}

COMMIT_KINDS = (KIND_WORD, KIND_COMMAND, KIND_LETTER)


class ConfigError(ValueError):
    """Raised when thresholds would leave part of the engine unreachable."""


def merge_config(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep-merge ``override`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    if not override:
        return merged
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def build_config(cfg: Dict[str, Any] = None) -> Dict[str, Any]:
    """Defaults + user overrides, validated. Raises ConfigError."""
    merged = merge_config(DEFAULT_CONFIG, cfg or {})
    validate_config(merged)
    return merged


def _kind_map(section: Dict[str, Any], key: str, kinds) -> Dict[str, float]:
    values = section.get(key, {})
    missing = [k for k in kinds if k not in values]
    if missing:
        raise ConfigError(f"{key} is missing kinds: {', '.join(missing)}")
    return values


def validate_config(cfg: Dict[str, Any]) -> None:
    """
    Reject thresholds that cannot work together.

    Checked once at construction (and again on every reload) so a bad value
    fails loudly instead of silently making a kind impossible to type.
    """
    motion = cfg.get("motion", {})
    if int(motion.get("buffer_size", 0)) < 2:
        raise ConfigError("motion.buffer_size must be at least 2")
    if float(motion.get("window_s", 0.0)) <= 0.0:
        raise ConfigError("motion.window_s must be positive")

    stab = cfg.get("stabilizer", {})
    history_len = int(stab.get("history_len", 0))
    if history_len < 1:
        raise ConfigError("stabilizer.history_len must be at least 1")

    floor = float(stab.get("recency_floor", 0.0))
    if not 0.0 < floor <= 1.0:
        raise ConfigError("stabilizer.recency_floor must be in (0, 1]")

    weights = _kind_map(stab, "kind_weights", KINDS)
    ordered = [float(weights[k]) for k in KINDS]
    if any(w <= 0.0 for w in ordered):
        raise ConfigError("stabilizer.kind_weights must be positive")
    if not all(a > b for a, b in zip(ordered, ordered[1:])):
        raise ConfigError("stabilizer.kind_weights must satisfy word > command > letter > none")

    display_min = _kind_map(stab, "display_min_count", KINDS)
    for kind in KINDS:
        count = int(display_min[kind])
        if count < 1 or count > history_len:
            raise ConfigError(
                f"stabilizer.display_min_count[{kind}]={count} must be within 1..{history_len}"
            )

    commit = cfg.get("commit", {})
    type_min = _kind_map(commit, "type_min_count", COMMIT_KINDS)
    hold = _kind_map(commit, "hold_delay_s", COMMIT_KINDS)
    margin = _kind_map(commit, "cooldown_margin_s", COMMIT_KINDS)

    for kind in COMMIT_KINDS:
        count = int(type_min[kind])
        if count > history_len:
            raise ConfigError(
                f"commit.type_min_count[{kind}]={count} exceeds history_len={history_len}; "
                f"{kind} tokens could never be typed"
            )
        if count < int(display_min[kind]):
            raise ConfigError(
                f"commit.type_min_count[{kind}] must not be below stabilizer.display_min_count[{kind}]"
            )
        if float(hold[kind]) < 0.0 or float(margin[kind]) < 0.0:
            raise ConfigError(f"commit delays for {kind} must not be negative")

    # words and commands must never be slower to type than letters
    for kind in (KIND_WORD, KIND_COMMAND):
        if int(display_min[kind]) > int(display_min[KIND_LETTER]):
            raise ConfigError(
                f"stabilizer.display_min_count[{kind}] must not exceed the letter count"
            )
        if int(type_min[kind]) > int(type_min[KIND_LETTER]):
            raise ConfigError(f"commit.type_min_count[{kind}] must not exceed the letter count")
        if float(hold[kind]) > float(hold[KIND_LETTER]):
            raise ConfigError(f"commit.hold_delay_s[{kind}] must not exceed the letter delay")
        if float(margin[kind]) > float(margin[KIND_LETTER]):
            raise ConfigError(f"commit.cooldown_margin_s[{kind}] must not exceed the letter margin")

    fin = cfg.get("finalizer", {})
    if int(fin.get("absence_frames", 0)) < 1:
        raise ConfigError("finalizer.absence_frames must be at least 1")
    if float(fin.get("cooldown_s", -1.0)) < 0.0:
        raise ConfigError("finalizer.cooldown_s must not be negative")
