from typing import NamedTuple

NUM_LANDMARKS = 21

# landmark indices (MediaPipe hand topology)
WRIST = 0
THUMB_TIP = 4
INDEX_MCP = 5
INDEX_TIP = 8
MIDDLE_MCP = 9
MIDDLE_TIP = 12
RING_MCP = 13
RING_TIP = 16
PINKY_MCP = 17
PINKY_TIP = 20


class Point(NamedTuple):
    x: float
    y: float
    z: float = 0.0


class HandData:
    """
    One observed hand for one frame: 21 landmarks plus capture time.
    Produced by the tracker and never modified afterwards.
    """

    def __init__(self, landmarks, timestamp=0.0, handedness="Unknown", raw_landmarks=None):
        if landmarks is None or len(landmarks) != NUM_LANDMARKS:
            count = 0 if landmarks is None else len(landmarks)
            raise ValueError(f"expected {NUM_LANDMARKS} landmarks, got {count}")

        # list of normalized landmarks (objects exposing x, y, z)
        self.landmarks = tuple(landmarks)

        # raw mediapipe landmark object (for drawing)
        self.raw_landmarks = raw_landmarks

        # "Left" / "Right"
        self.handedness = handedness

        # absolute time (seconds, monotonic)
        self.timestamp = float(timestamp)

    @classmethod
    def from_points(cls, points, timestamp=0.0, handedness="Unknown"):
        """Build from plain (x, y[, z]) sequences."""
        return cls([Point(*p) for p in points], timestamp=timestamp, handedness=handedness)

    @property
    def wrist(self):
        return self.landmarks[WRIST]

    def to_dict(self):
        """Serialize to JSON-friendly dict."""
        w = self.wrist
        return {
            "handedness": self.handedness,
            "timestamp": self.timestamp,
            "wrist": {"x": w.x, "y": w.y, "z": w.z},
        }
