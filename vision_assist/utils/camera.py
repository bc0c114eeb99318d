"""
Camera helpers for Vision Assist
"""
import logging
import cv2
import numpy as np

from .. import config

logger = logging.getLogger("Camera")


class CameraError(Exception):
    """Raised when no camera can be opened"""


class VirtualCamera:
    """Placeholder video source used when no camera is available"""

    def __init__(self, width=640, height=480, message="No camera available"):
        self.width = width
        self.height = height
        self.message = message
        self.is_opened = True
        self.frame_count = 0

    def read(self):
        # Black frame with a pulsing marker so the stream visibly stays alive
        frame = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        self.frame_count += 1
        pulse = int(20 * np.sin(self.frame_count * 0.1) + 20)

        cv2.putText(frame, self.message, (self.width // 4, self.height // 2),
                    cv2.FONT_HERSHEY_SIMPLEX, 1, (255, 255, 255), 2)
        cv2.circle(frame, (self.width // 2, self.height // 2 + 50),
                   pulse, (0, 0, 255), -1)
        return True, frame

    def get(self, prop_id):
        if prop_id == cv2.CAP_PROP_FRAME_WIDTH:
            return self.width
        elif prop_id == cv2.CAP_PROP_FRAME_HEIGHT:
            return self.height
        elif prop_id == cv2.CAP_PROP_FPS:
            return 30
        return 0

    def isOpened(self):
        return self.is_opened

    def release(self):
        self.is_opened = False

    def set(self, prop_id, value):
        return True


def configure_camera(cap, width=None, height=None):
    """Request the ideal resolution; the driver picks the closest it supports"""
    width = config.CAMERA_WIDTH if width is None else width
    height = config.CAMERA_HEIGHT if height is None else height

    cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
    cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
    # Keep latency low
    cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)

    logger.info(
        f"Camera configured: requested {width}x{height}, got "
        f"{int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))}x{int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))}"
    )
    return cap


def open_camera(camera_index=None, width=None, height=None, max_cameras=5):
    """Open the requested camera, falling back to any other working index"""
    camera_index = config.CAMERA_INDEX if camera_index is None else camera_index

    cap = cv2.VideoCapture(camera_index)
    if not cap.isOpened():
        logger.warning(f"Cannot open camera with index {camera_index}, trying other indices...")
        cap.release()
        cap = None
        for idx in range(max_cameras):
            if idx == camera_index:
                continue
            candidate = cv2.VideoCapture(idx)
            if candidate.isOpened():
                logger.info(f"Successfully opened camera with index {idx}")
                cap = candidate
                break
            candidate.release()

    if cap is None:
        raise CameraError("No camera could be opened")

    return configure_camera(cap, width, height)
