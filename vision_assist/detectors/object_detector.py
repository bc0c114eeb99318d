"""
Object detector module for Vision Assist
"""
from .. import config


class ObjectDetector:
    def __init__(self, min_score=None, model_min_score=None, max_detections=None):
        # Predictions at or below this score are neither drawn nor warned about
        self.min_score = config.MIN_SCORE if min_score is None else min_score

        # Passed to the model itself
        self.model_min_score = config.MODEL_MIN_SCORE if model_min_score is None else model_min_score
        self.max_detections = config.MAX_DETECTIONS if max_detections is None else max_detections

    def detect(self, model, frame):
        """Run the model on a frame and return predictions with (x, y, width, height) boxes"""
        results = model(frame, conf=self.model_min_score, max_det=self.max_detections, verbose=False)

        predictions = []
        for r in results:
            for box in r.boxes:
                x1, y1, x2, y2 = [float(v) for v in box.xyxy[0]]
                class_id = int(box.cls[0])
                predictions.append({
                    'class': model.names[class_id],
                    'score': float(box.conf[0]),
                    'bbox': (x1, y1, x2 - x1, y2 - y1),
                })
        return predictions

    def filter_predictions(self, predictions):
        """Keep only confident predictions"""
        return [p for p in predictions if p['score'] > self.min_score]
