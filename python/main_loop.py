import logging
import threading
import time
from collections import deque
from queue import Empty, Full, Queue

import cv2
import mediapipe as mp

from Emotion import ConstantEmotion, EmotionMonitor
from EngineConfig import ConfigError, build_config
from FaceTracker import FaceTracker
from GestureEngine import TranslationEngine
from GestureServer import GestureServer
from HandTracker import HandTracker
from UtterancePublisher import UtterancePublisher
from helpers import ConfigWatcher, load_config

log = logging.getLogger(__name__)

# --------------------------------------------------------
# Queue for latest frame only (overwrite when full)
# --------------------------------------------------------
FRAME_QUEUE_MAX = 1


class LatestFrame:
    """Most recent RGB frame, shared with the emotion poller."""

    def __init__(self):
        self._lock = threading.Lock()
        self._frame = None

    def set(self, frame):
        with self._lock:
            self._frame = frame

    def get(self):
        with self._lock:
            return self._frame


# --------------------------------------------------------
# CAPTURE THREAD
# --------------------------------------------------------
def capture_thread(frame_queue, latest, stop_event, cfg, tracker):
    cap = cv2.VideoCapture(cfg.get("tracker", {}).get("camera_index", 0))
    if not cap.isOpened():
        log.error("Cannot open camera")
        stop_event.set()
        return

    mirrored = cfg.get("motion", {}).get("mirrored", True)
    fps_times = deque(maxlen=cfg.get("debug", {}).get("fps_window", 20))
    current_fps = 0.0

    log.info("Capture thread started.")

    while not stop_event.is_set():
        ok, frame = cap.read()
        if not ok:
            time.sleep(0.01)
            continue

        now = time.monotonic()
        fps_times.append(now)
        if len(fps_times) > 1:
            current_fps = (len(fps_times) - 1) / (fps_times[-1] - fps_times[0])

        if mirrored:
            frame = cv2.flip(frame, 1)
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        latest.set(rgb)
        hand = tracker.process_frame(rgb, now)

        # keep only the newest sample
        if frame_queue.full():
            try:
                frame_queue.get_nowait()
            except Empty:
                pass
        try:
            frame_queue.put_nowait((frame, hand, now, current_fps))
        except Full:
            pass

    cap.release()
    log.info("Capture thread exiting.")


# --------------------------------------------------------
# ENGINE THREAD
# --------------------------------------------------------
def draw_debug(frame, hand, result):
    if hand is not None and hand.raw_landmarks is not None:
        mp.solutions.drawing_utils.draw_landmarks(
            frame, hand.raw_landmarks, mp.solutions.hands.HAND_CONNECTIONS
        )
    cv2.putText(
        frame,
        result.displayed,
        (10, 40),
        cv2.FONT_HERSHEY_SIMPLEX,
        1.0,
        (0, 255, 127),
        2,
        cv2.LINE_AA,
    )
    cv2.putText(
        frame,
        result.text,
        (10, frame.shape[0] - 20),
        cv2.FONT_HERSHEY_SIMPLEX,
        0.8,
        (255, 255, 255),
        2,
        cv2.LINE_AA,
    )


def engine_thread(frame_queue, stop_event, engine, cfg_watcher, server=None):
    debug_window = "SignType"
    debug_cfg = engine.cfg.get("debug", {})
    window_open = False

    current_cfg = cfg_watcher.get_config()
    log.info("Engine thread started.")

    while not stop_event.is_set():
        try:
            frame, hand, timestamp, fps = frame_queue.get(timeout=0.1)
        except Empty:
            continue

        try:
            new_cfg = cfg_watcher.check_reload()
            if new_cfg is not current_cfg:
                current_cfg = new_cfg
                try:
                    engine.update_config(new_cfg)
                    debug_cfg = engine.cfg.get("debug", {})
                    log.info("Config applied.")
                except ConfigError as e:
                    log.error("Rejected config change, keeping previous thresholds: %s", e)

            if server is not None:
                server.update()
                for command in server.read_commands():
                    if command.get("cmd") == "reset":
                        engine.reset()

            result = engine.process_frame(hand, now=timestamp)

            show_window = debug_cfg.get("show_window", True)
            if show_window != window_open:
                if show_window:
                    cv2.namedWindow(debug_window, cv2.WINDOW_NORMAL)
                else:
                    cv2.destroyWindow(debug_window)
                window_open = show_window

            if window_open:
                if debug_cfg.get("draw_landmarks", True):
                    draw_debug(frame, hand, result)
                cv2.imshow(debug_window, frame)
                key = cv2.waitKey(1) & 0xFF
                if key == 27:  # ESC
                    stop_event.set()
                    break
                if key == ord("c"):
                    engine.reset()

            if server is not None:
                server.send_frame(result, fps=fps)
        except Exception:
            # main() only wakes on stop_event
            log.exception("Engine thread failed")
            stop_event.set()
            break

    if window_open:
        cv2.destroyAllWindows()
    log.info("Engine thread exiting.")


# --------------------------------------------------------
# MAIN ENTRY
# --------------------------------------------------------
def main(config_path="config.json"):
    try:
        cfg = build_config(load_config(config_path))
    except ConfigError as e:
        log.error("Invalid config '%s': %s", config_path, e)
        return 2

    stop_event = threading.Event()
    latest = LatestFrame()

    # --------------- initialization phase ----------------
    tracker = HandTracker(cfg)

    emotion_source = ConstantEmotion()
    monitor = None
    face = None
    ecfg = cfg.get("emotion", {})
    if ecfg.get("enabled", True):
        try:
            face = FaceTracker.create(cfg)
        except (OSError, RuntimeError, ValueError) as e:
            log.warning("Emotion detection disabled: %s", e)
        else:
            monitor = EmotionMonitor(
                face, latest.get, ecfg.get("poll_interval_s", 0.5), stop_event
            )
            emotion_source = monitor

    publisher = None
    pcfg = cfg.get("publisher", {})
    if pcfg.get("enabled", True):
        publisher = UtterancePublisher(pcfg.get("endpoint", "tcp://*:5556"))

    server = None
    scfg = cfg.get("server", {})
    if scfg.get("enabled", True):
        server = GestureServer(scfg.get("host", "127.0.0.1"), scfg.get("port", 5555))

    engine = TranslationEngine(cfg, on_utterance=publisher, emotion_source=emotion_source)
    cfg_watcher = ConfigWatcher(config_path)
    frame_queue = Queue(maxsize=FRAME_QUEUE_MAX)

    # --------------- start threads ----------------
    cap_thread = threading.Thread(
        target=capture_thread,
        args=(frame_queue, latest, stop_event, cfg, tracker),
        daemon=True,
    )
    eng_thread = threading.Thread(
        target=engine_thread,
        args=(frame_queue, stop_event, engine, cfg_watcher, server),
        daemon=True,
    )

    cap_thread.start()
    eng_thread.start()
    if monitor is not None:
        monitor.start()

    # Keep main thread alive
    try:
        while not stop_event.is_set():
            time.sleep(0.1)
    except KeyboardInterrupt:
        stop_event.set()

    cap_thread.join(timeout=1.0)
    eng_thread.join(timeout=1.0)
    if monitor is not None:
        monitor.join(timeout=1.0)

    tracker.close()
    if face is not None:
        face.close()
    if server is not None:
        server.close()
    if publisher is not None:
        publisher.close()

    log.info("Shutdown complete.")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="[%(name)s] %(message)s")
    raise SystemExit(main())
