"""
Model loader for Vision Assist
"""
import os
import logging
import torch
from ultralytics import YOLO

from .. import config


class ModelLoadError(Exception):
    """Raised when the detection model cannot be loaded"""


class ModelLoader:
    def __init__(self, model_name=None):
        self.logger = logging.getLogger("ModelLoader")

        # Get the device
        self.device = self.get_device()

        # Prefer a copy under models/ at the project root, otherwise fetch from ultralytics
        self.model_name = model_name or config.DETECTION_MODEL
        self.local_model_path = os.path.join(
            os.path.dirname(__file__), '..', '..', 'models', self.model_name
        )

        self.detection_model = None

    def get_device(self):
        """Get the best available device for model inference"""
        if torch.cuda.is_available():
            return torch.device("cuda")
        elif hasattr(torch.backends, 'mps') and torch.backends.mps.is_available():
            return torch.device("mps")  # For Apple M1/M2 GPUs
        else:
            return torch.device("cpu")

    def load_detection_model(self):
        """Load the pretrained COCO detector from a local file or the ultralytics registry"""
        if os.path.exists(self.local_model_path):
            source = self.local_model_path
        else:
            source = self.model_name

        self.logger.info(f"Loading detection model from {source} on {self.device}")
        try:
            model = YOLO(source)
            model.to(self.device)
        except Exception as e:
            raise ModelLoadError(f"Failed to load detection model {source}: {e}") from e

        self.detection_model = model
        return model
