import logging
import os

import mediapipe as mp

log = logging.getLogger(__name__)


class FaceTracker:
    """
    Face blendshape estimator. Build it with ``FaceTracker.create`` so the
    model is loaded before any frame reaches it.
    """

    def __init__(self, landmarker):
        self._landmarker = landmarker

    @classmethod
    def create(cls, cfg):
        ecfg = cfg.get("emotion", {})
        model_path = ecfg.get("model_path", "models/face_landmarker.task")
        if not os.path.exists(model_path):
            raise FileNotFoundError(f"face landmarker model not found: {model_path}")

        vision = mp.tasks.vision
        options = vision.FaceLandmarkerOptions(
            base_options=mp.tasks.BaseOptions(model_asset_path=model_path),
            running_mode=vision.RunningMode.VIDEO,
            num_faces=1,
            output_face_blendshapes=True,
        )
        landmarker = vision.FaceLandmarker.create_from_options(options)
        log.info("Face landmarker loaded from %s", model_path)
        return cls(landmarker)

    def detect(self, frame_rgb, timestamp_ms):
        """Blendshape scores (name -> 0..1) for the first face, or None."""
        image = mp.Image(image_format=mp.ImageFormat.SRGB, data=frame_rgb)
        result = self._landmarker.detect_for_video(image, timestamp_ms)
        if not result.face_blendshapes:
            return None
        return {c.category_name: c.score for c in result.face_blendshapes[0]}

    def close(self):
        self._landmarker.close()
