import logging
import threading
import time
from typing import Dict, NamedTuple

log = logging.getLogger(__name__)

NEUTRAL = "Neutral"
CALM = "Calm"
HAPPY = "Happy"
SAD = "Sad"
ANGRY = "Angry"
URGENT = "Urgent"

TONES = (NEUTRAL, CALM, HAPPY, SAD, ANGRY, URGENT)


class EmotionState(NamedTuple):
    tone: str = NEUTRAL
    confidence: float = 0.0


def _clamp01(v):
    return max(0.0, min(1.0, v))


def _pair(scores, name):
    """Average of the Left/Right variants of a blendshape."""
    return (scores.get(name + "Left", 0.0) + scores.get(name + "Right", 0.0)) / 2.0


def tone_from_blendshapes(scores: Dict[str, float]) -> EmotionState:
    """
    Heuristic tone from face blendshape scores (category name -> 0..1).
    Checked in order: happy, sad, urgent, angry, then calm/neutral by
    overall activation.
    """
    smile = _pair(scores, "mouthSmile")
    frown = _pair(scores, "mouthFrown")
    mouth_lower_down = _pair(scores, "mouthLowerDown")
    mouth_press = _pair(scores, "mouthPress")
    brow_down = _pair(scores, "browDown")
    brow_inner_up = scores.get("browInnerUp", 0.0)
    eye_squint = _pair(scores, "eyeSquint")
    nose_sneer = _pair(scores, "noseSneer")
    eye_wide = _pair(scores, "eyeWide")
    jaw_open = scores.get("jawOpen", 0.0)

    sad = _clamp01(0.55 * frown + 0.25 * mouth_lower_down + 0.2 * brow_inner_up)
    angry = _clamp01(0.45 * brow_down + 0.25 * eye_squint + 0.2 * nose_sneer + 0.1 * mouth_press)
    urgent = _clamp01(0.6 * eye_wide + 0.4 * jaw_open)

    if smile > 0.45:
        return EmotionState(HAPPY, min(1.0, smile))
    if sad > 0.22:
        return EmotionState(SAD, sad)
    if urgent > 0.33:
        return EmotionState(URGENT, urgent)
    if angry > 0.26:
        return EmotionState(ANGRY, angry)

    if max(smile, sad, angry, urgent) < 0.08:
        return EmotionState(CALM, 0.6)
    return EmotionState(NEUTRAL, 0.5)


class ConstantEmotion:
    """Emotion source that never changes; the engine default."""

    def __init__(self, tone=NEUTRAL, confidence=0.0):
        self._state = EmotionState(tone, confidence)

    def current(self) -> EmotionState:
        return self._state


class EmotionMonitor:
    """
    Polls a face detector in the background and keeps the latest tone.

    ``detector.detect(frame, timestamp_ms)`` returns blendshape scores or None;
    ``frame_source()`` returns the most recent RGB frame or None. Readers call
    ``current()`` whenever they need a label; a stale value is acceptable.
    """

    def __init__(self, detector, frame_source, poll_interval_s=0.5, stop_event=None):
        self.detector = detector
        self.frame_source = frame_source
        self.poll_interval_s = poll_interval_s
        self.stop_event = stop_event or threading.Event()
        self._lock = threading.Lock()
        self._state = EmotionState()
        self._thread = None

    def current(self) -> EmotionState:
        with self._lock:
            return self._state

    def poll_once(self, now=None) -> EmotionState:
        frame = self.frame_source()
        if frame is None:
            return self.current()
        now = time.monotonic() if now is None else now
        scores = self.detector.detect(frame, int(now * 1000))
        if scores:
            state = tone_from_blendshapes(scores)
            with self._lock:
                if state.tone != self._state.tone:
                    log.debug("emotion -> %s (%.2f)", state.tone, state.confidence)
                self._state = state
        return self.current()

    def start(self):
        self._thread = threading.Thread(target=self._run, name="emotion", daemon=True)
        self._thread.start()
        return self

    def join(self, timeout=None):
        if self._thread is not None:
            self._thread.join(timeout)

    def _run(self):
        log.info("Emotion monitor started.")
        while not self.stop_event.is_set():
            try:
                self.poll_once()
            except Exception as e:  # keep polling past a bad frame
                log.warning("emotion poll failed: %s", e)
            self.stop_event.wait(self.poll_interval_s)
        log.info("Emotion monitor exiting.")
