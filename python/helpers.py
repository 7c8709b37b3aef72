import json
import logging
import math
import os
import time

from HandData import MIDDLE_MCP, WRIST

log = logging.getLogger(__name__)

EPS = 1e-6


# ---------- geometry ----------
def dist2d(a, b):
    """Euclidean distance in the image plane between two landmarks."""
    return math.hypot(a.x - b.x, a.y - b.y)


def ratio(value, scale):
    """value / scale, guarding against a degenerate scale."""
    return value / max(scale, EPS)


def palm_size(lm):
    """Use wrist -> middle MCP as palm reference length."""
    return dist2d(lm[WRIST], lm[MIDDLE_MCP])


# ---------- config ----------
def load_config(path="config.json"):
    if not os.path.exists(path):
        log.warning("config '%s' not found, using defaults.", path)
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        log.error("Failed to load config '%s': %s", path, e)
        return {}


class ConfigWatcher:
    """
    Watches a JSON config file and reloads it when the file changes.
    Usage:
        watcher = ConfigWatcher("config.json")
        cfg = watcher.get_config()        # initial load
        # later:
        cfg = watcher.check_reload()      # returns new cfg or same dict
    """

    def __init__(self, path="config.json", min_check_interval=0.5, clock=time.monotonic):
        self.path = path
        self._cfg = {}
        self._mtime = 0.0
        self._last_checked = float("-inf")
        self._min_check_interval = min_check_interval  # seconds between checks
        self._clock = clock
        self._load()  # load now

    def _load(self):
        try:
            if not os.path.exists(self.path):
                self._cfg = {}
                self._mtime = 0.0
                return
            m = os.path.getmtime(self.path)
            with open(self.path, "r", encoding="utf-8") as f:
                self._cfg = json.load(f)
            self._mtime = m
        except (OSError, ValueError) as e:
            # keep the previous config; a half-written file is common while editing
            log.warning("failed to load config '%s': %s", self.path, e)

    def get_config(self):
        return self._cfg

    def check_reload(self):
        """
        Call frequently (cheap). Will only stat the file every _min_check_interval seconds.
        Returns current config (reloaded if changed).
        """
        now = self._clock()
        if now - self._last_checked < self._min_check_interval:
            return self._cfg
        self._last_checked = now

        try:
            if not os.path.exists(self.path):
                # file missing -> keep existing config
                return self._cfg
            m = os.path.getmtime(self.path)
            if m != self._mtime:
                log.info("Detected %s change, reloading...", self.path)
                self._load()
        except OSError as e:
            log.warning("check_reload error: %s", e)

        return self._cfg
