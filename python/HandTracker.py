import logging

import mediapipe as mp

from HandData import HandData

log = logging.getLogger(__name__)


class HandTracker:
    def __init__(
        self,
        cfg,
    ):
        self.cfg = cfg
        tcfg = cfg.get("tracker", {})

        # the engine reads a single hand
        self.mp_hands = mp.solutions.hands.Hands(
            static_image_mode=False,
            model_complexity=tcfg.get("model_complexity", 1),
            min_detection_confidence=tcfg.get("min_detection_confidence", 0.5),
            min_tracking_confidence=tcfg.get("min_tracking_confidence", 0.5),
            max_num_hands=1,
        )
        log.info("Hand tracker ready.")

    def process_frame(self, frame_rgb, timestamp):
        """
        Process an RGB frame (expects BGR->RGB already done by caller).
        Returns a HandData for the detected hand, or None.
        timestamp: absolute time (seconds) for this frame.
        """
        result = self.mp_hands.process(frame_rgb)

        if not result.multi_hand_landmarks:
            return None

        lm = result.multi_hand_landmarks[0]
        handed = "Unknown"
        if result.multi_handedness:
            handed = result.multi_handedness[0].classification[0].label
        return HandData(lm.landmark, timestamp=timestamp, handedness=handed, raw_landmarks=lm)

    def close(self):
        self.mp_hands.close()
