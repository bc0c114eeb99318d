"""
Shared fakes for Vision Assist tests
"""
from unittest.mock import MagicMock, patch

import cv2
import numpy as np
import pytest


class FakeBox:
    """Mimics one ultralytics box: xyxy/cls/conf are indexable per detection"""

    def __init__(self, xyxy, class_id, score):
        self.xyxy = [list(xyxy)]
        self.cls = [class_id]
        self.conf = [score]


class FakeResult:
    def __init__(self, boxes):
        self.boxes = boxes


class FakeModel:
    """Callable stand-in for a YOLO model returning fixed detections"""

    names = {0: 'person', 1: 'chair', 2: 'cup', 3: 'car', 4: 'dining table'}

    def __init__(self, detections=None):
        # (class_id, score, (x1, y1, x2, y2))
        self.detections = detections or []
        self.calls = []

    def __call__(self, frame, **kwargs):
        self.calls.append(kwargs)
        boxes = [FakeBox(xyxy, class_id, score) for class_id, score, xyxy in self.detections]
        return [FakeResult(boxes)]


class FakeCamera:
    def __init__(self, frame):
        self.frame = frame
        self.released = False

    def read(self):
        return True, self.frame.copy()

    def isOpened(self):
        return not self.released

    def get(self, prop_id):
        if prop_id == cv2.CAP_PROP_FRAME_WIDTH:
            return self.frame.shape[1]
        if prop_id == cv2.CAP_PROP_FRAME_HEIGHT:
            return self.frame.shape[0]
        return 30

    def release(self):
        self.released = True


@pytest.fixture
def frame():
    """200x100 black frame: 20000 pixels, so boxes over 5000 pixels are close"""
    return np.zeros((100, 200, 3), dtype=np.uint8)


@pytest.fixture
def fake_engine():
    engine = MagicMock()
    engine.getProperty.return_value = 200
    with patch('vision_assist.utils.speech.pyttsx3.init', return_value=engine):
        yield engine
