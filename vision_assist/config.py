"""
Configuration for Vision Assist
"""
import os


def _env_float(name, default):
    value = os.environ.get(name)
    return float(value) if value else default


def _env_int(name, default):
    value = os.environ.get(name)
    return int(value) if value else default


# Objects that can move into the user (people, vehicles, animals)
DANGEROUS_OBJECTS = frozenset([
    "person",
    "car",
    "truck",
    "motorcycle",
    "bus",
    "train",
    "dog",
    "cat",
    "horse",
    "bear",
    "elephant",
])

# Static objects that block the walking path
OBSTACLE_OBJECTS = frozenset([
    "chair",
    "couch",
    "bed",
    "dining table",
    "toilet",
    "tv",
    "refrigerator",
    "oven",
    "sink",
    "door",
    "stairs",
    "bench",
])

# Box area / frame area above which an object counts as close (~2 meters)
DISTANCE_THRESHOLD = _env_float("VISION_ASSIST_DISTANCE_THRESHOLD", 0.25)
# Seconds between repeats of the same warning
WARNING_COOLDOWN = _env_float("VISION_ASSIST_WARNING_COOLDOWN", 3.0)

# Predictions must score above this to be drawn or warned about
MIN_SCORE = _env_float("VISION_ASSIST_MIN_SCORE", 0.55)
# Model-side confidence floor and box limit
MODEL_MIN_SCORE = 0.5
MAX_DETECTIONS = 20
DETECTION_MODEL = os.environ.get("VISION_ASSIST_MODEL", "yolov8n.pt")

# Ideal camera resolution
CAMERA_INDEX = _env_int("VISION_ASSIST_CAMERA_INDEX", 0)
CAMERA_WIDTH = _env_int("VISION_ASSIST_CAMERA_WIDTH", 1920)
CAMERA_HEIGHT = _env_int("VISION_ASSIST_CAMERA_HEIGHT", 1080)

# Speech output, relative to the engine default rate
SPEECH_RATE = 1.2
SPEECH_PITCH = 1.0
# Speak on the device (pyttsx3); when off the browser page speaks instead
SERVER_SPEECH = os.environ.get("VISION_ASSIST_SERVER_SPEECH", "1") not in ("0", "false", "no")

# JPEG quality for the video stream
JPEG_QUALITY = _env_int("VISION_ASSIST_JPEG_QUALITY", 85)
# Frame rate limiter for the video stream (fps)
FPS = _env_int("VISION_ASSIST_FPS", 25)

# Hosted auth / database
SUPABASE_URL = os.environ.get("SUPABASE_URL", "")
SUPABASE_ANON_KEY = os.environ.get("SUPABASE_ANON_KEY", "")
DETECTION_LOGS_TABLE = "detection_logs"
PASSWORD_RESET_REDIRECT = os.environ.get(
    "VISION_ASSIST_RESET_REDIRECT", "http://localhost:5000/reset-password"
)
