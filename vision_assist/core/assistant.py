"""
Core Vision Assist class: turns camera frames into spoken hazard warnings
"""
import time
import logging
import cv2

from .. import config
from ..utils.speech import SpeechManager
from ..utils.camera import VirtualCamera, CameraError, open_camera
from ..models.model_loader import ModelLoader
from ..detectors.object_detector import ObjectDetector
from ..detectors.hazard_detector import HazardDetector, DANGER, OBSTACLE
from .warning_tracker import WarningTracker

READY_MESSAGE = "Object detection is ready. Press Space to toggle voice warnings."
MODEL_ERROR_MESSAGE = "Error loading detection model. Please restart the application."
CAMERA_ERROR_MESSAGE = "Error accessing camera. Please check camera permissions."

# BGR colors for box annotations
COLORS = {
    DANGER: (0, 0, 255),
    OBSTACLE: (0, 165, 255),
    None: (0, 255, 0),
}

MODEL_LOADING = "loading"
MODEL_READY = "ready"
MODEL_FAILED = "failed"


class VisionAssistant:
    def __init__(self, camera_index=None, camera=None, speech_manager=None, model=None,
                 detection_logger=None, lazy_loading=True, server_speech=None):
        self.logger = logging.getLogger("VisionAssistant")

        if server_speech is None:
            server_speech = config.SERVER_SPEECH
        self.speech_manager = speech_manager or SpeechManager(enabled=server_speech)

        self.object_detector = ObjectDetector()
        self.hazard_detector = HazardDetector()
        self.warning_tracker = WarningTracker()
        self.detection_logger = detection_logger

        # Model is loaded on the first frame unless one is handed in
        self.model_loader = ModelLoader()
        self.model = model
        self.model_status = MODEL_READY if model is not None else MODEL_LOADING
        if model is None and not lazy_loading:
            self._load_models()

        # Camera
        self.camera_ready = False
        if camera is not None:
            self.cap = camera
            self.camera_ready = not isinstance(camera, VirtualCamera)
        else:
            self.cap = self._open_camera(camera_index)

        self.frames_processed = 0

    def _open_camera(self, camera_index):
        try:
            cap = open_camera(camera_index)
            self.camera_ready = True
            return cap
        except CameraError as e:
            self.logger.error(f"Error accessing camera: {e}")
            self.speech_manager.announce(CAMERA_ERROR_MESSAGE)
            return VirtualCamera()

    def _load_models(self):
        """Load the detection model once; a failure is spoken and not retried"""
        try:
            start_time = time.time()
            self.model = self.model_loader.load_detection_model()
            self.model_status = MODEL_READY
            self.logger.info(f"Model loaded in {time.time() - start_time:.2f} seconds")
            self.speech_manager.announce(READY_MESSAGE)
        except Exception as e:
            self.logger.error(f"Error loading model: {e}")
            self.model = None
            self.model_status = MODEL_FAILED
            self.speech_manager.announce(MODEL_ERROR_MESSAGE)

    @property
    def models_loaded(self):
        return self.model_status == MODEL_READY

    def read_frame(self):
        return self.cap.read()

    def draw_prediction(self, frame, prediction, hazard_type):
        x, y, width, height = [int(v) for v in prediction['bbox']]
        color = COLORS[hazard_type]

        cv2.rectangle(frame, (x, y), (x + width, y + height), color, 3)
        label_y = y - 10 if y > 30 else 30
        cv2.putText(frame, prediction['class'], (x, label_y),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.8, color, 2)

    def process_frame(self, frame, user_id=None):
        """
        Run detection on one frame and act on it.

        Returns the annotated frame and the active warnings map.
        """
        if self.model_status == MODEL_LOADING:
            self._load_models()
        if not self.models_loaded or not self.camera_ready:
            return frame, {}

        processed_frame = frame.copy()
        frame_height, frame_width = frame.shape[:2]

        predictions = self.object_detector.detect(self.model, frame)
        confident = self.object_detector.filter_predictions(predictions)

        hazards = []
        for prediction in confident:
            hazard = self.hazard_detector.flag(prediction, frame_width, frame_height)
            if hazard is not None:
                hazards.append(hazard)
            self.draw_prediction(processed_frame, prediction, hazard['type'] if hazard else None)

        warnings = self.warning_tracker.update(hazards)

        salient = self.hazard_detector.most_salient(hazards)
        if salient is not None:
            self.speech_manager.speak(self.hazard_detector.warning_message(salient))

        if warnings and user_id and self.detection_logger is not None:
            try:
                self.detection_logger.record(user_id, predictions, warnings.keys())
            except Exception as e:
                self.logger.error(f"Error writing detection log: {e}")

        self.frames_processed += 1
        return processed_frame, warnings

    def active_warnings(self):
        """Active warnings for the warnings panel"""
        warnings = []
        for key in self.warning_tracker.active_keys():
            class_name = WarningTracker.parse_key(key)
            warnings.append({
                'key': key,
                'class': class_name,
                'type': self.hazard_detector.classify(class_name),
            })
        return warnings

    def toggle_voice(self):
        return self.speech_manager.toggle_mute()

    def camera_status(self):
        is_opened = self.cap.isOpened()
        return {
            'camera_opened': is_opened,
            'camera_ready': self.camera_ready,
            'virtual_camera': isinstance(self.cap, VirtualCamera),
            'camera_properties': {
                'width': self.cap.get(cv2.CAP_PROP_FRAME_WIDTH) if is_opened else 0,
                'height': self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT) if is_opened else 0,
                'fps': self.cap.get(cv2.CAP_PROP_FPS) if is_opened else 0,
            },
        }

    def status(self):
        return {
            'model': self.model_status,
            'camera_ready': self.camera_ready,
            'muted': self.speech_manager.muted,
            'frames_processed': self.frames_processed,
            'warnings': self.active_warnings(),
        }

    def shutdown(self):
        """Tear down the detection session"""
        self.warning_tracker.close()
        self.speech_manager.stop()
        try:
            self.cap.release()
        except Exception as e:
            self.logger.warning(f"Error releasing camera: {e}")
