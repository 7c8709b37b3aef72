import json
import os

import pytest

from EngineConfig import DEFAULT_CONFIG, ConfigError, build_config, merge_config, validate_config
from helpers import ConfigWatcher, load_config


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def write_json(path, data, mtime):
    path.write_text(json.dumps(data), encoding="utf-8")
    os.utime(path, (mtime, mtime))


def test_defaults_are_valid():
    validate_config(DEFAULT_CONFIG)
    assert build_config() == DEFAULT_CONFIG


def test_merge_is_deep_and_does_not_touch_defaults():
    merged = merge_config(DEFAULT_CONFIG, {"commit": {"hold_delay_s": {"word": 0.4}}})
    assert merged["commit"]["hold_delay_s"] == {"word": 0.4, "command": 0.6, "letter": 1.2}
    assert DEFAULT_CONFIG["commit"]["hold_delay_s"]["word"] == 0.6


@pytest.mark.parametrize(
    "override",
    [
        {"motion": {"buffer_size": 1}},
        {"motion": {"window_s": 0}},
        {"stabilizer": {"history_len": 0}},
        {"stabilizer": {"recency_floor": 0.0}},
        {"stabilizer": {"recency_floor": 1.5}},
        {"stabilizer": {"kind_weights": {"letter": 5.0}}},
        {"stabilizer": {"kind_weights": {"none": 0.0}}},
        {"stabilizer": {"display_min_count": {"word": 0}}},
        {"stabilizer": {"display_min_count": {"letter": 20}}},
        {"commit": {"type_min_count": {"letter": 16}}},
        {"commit": {"type_min_count": {"word": 2}}},
        {"commit": {"type_min_count": {"command": 12}}},
        {"commit": {"hold_delay_s": {"word": -0.1}}},
        {"commit": {"hold_delay_s": {"word": 2.0}}},
        {"commit": {"cooldown_margin_s": {"command": 0.9}}},
        {"finalizer": {"absence_frames": 0}},
        {"finalizer": {"cooldown_s": -1}},
    ],
)
def test_inconsistent_thresholds_are_rejected(override):
    with pytest.raises(ConfigError):
        build_config(override)


def test_config_error_is_a_value_error():
    with pytest.raises(ValueError):
        build_config({"stabilizer": {"history_len": 3}})


def test_words_must_not_need_more_display_votes_than_letters():
    override = {
        "stabilizer": {"display_min_count": {"word": 9}},
        "commit": {"type_min_count": {"word": 9}},
    }
    with pytest.raises(ConfigError, match=r"display_min_count\[word\]"):
        build_config(override)


def test_missing_kind_is_reported():
    cfg = merge_config(DEFAULT_CONFIG, {})
    del cfg["commit"]["hold_delay_s"]["letter"]
    with pytest.raises(ConfigError, match="letter"):
        validate_config(cfg)


def test_load_config_missing_file_gives_empty(tmp_path):
    assert load_config(str(tmp_path / "nope.json")) == {}


def test_load_config_bad_json_gives_empty(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    assert load_config(str(path)) == {}


def test_watcher_reloads_on_change(tmp_path):
    path = tmp_path / "config.json"
    write_json(path, {"finalizer": {"absence_frames": 5}}, mtime=1000)
    clock = FakeClock()
    watcher = ConfigWatcher(str(path), min_check_interval=0.5, clock=clock)
    first = watcher.get_config()
    assert first["finalizer"]["absence_frames"] == 5

    write_json(path, {"finalizer": {"absence_frames": 9}}, mtime=2000)
    clock.now = 0.1
    # first check always stats the file
    assert watcher.check_reload()["finalizer"]["absence_frames"] == 9


def test_watcher_rate_limits_checks(tmp_path):
    path = tmp_path / "config.json"
    write_json(path, {"a": 1}, mtime=1000)
    clock = FakeClock()
    watcher = ConfigWatcher(str(path), min_check_interval=0.5, clock=clock)
    assert watcher.check_reload() == {"a": 1}

    write_json(path, {"a": 2}, mtime=2000)
    clock.now = 0.2
    assert watcher.check_reload() == {"a": 1}
    clock.now = 0.6
    assert watcher.check_reload() == {"a": 2}


def test_watcher_keeps_config_when_file_is_broken(tmp_path):
    path = tmp_path / "config.json"
    write_json(path, {"a": 1}, mtime=1000)
    clock = FakeClock()
    watcher = ConfigWatcher(str(path), clock=clock)
    cfg = watcher.get_config()

    path.write_text("{half written", encoding="utf-8")
    os.utime(path, (2000, 2000))
    clock.now = 10.0
    assert watcher.check_reload() is cfg


def test_watcher_returns_same_object_when_unchanged(tmp_path):
    path = tmp_path / "config.json"
    write_json(path, {"a": 1}, mtime=1000)
    clock = FakeClock()
    watcher = ConfigWatcher(str(path), clock=clock)
    cfg = watcher.get_config()
    clock.now = 10.0
    assert watcher.check_reload() is cfg
