"""
Hazard detector module for Vision Assist
"""
from .. import config

DANGER = "danger"
OBSTACLE = "obstacle"


class HazardDetector:
    def __init__(self, dangerous_objects=None, obstacle_objects=None, distance_threshold=None):
        # Define hazard categories
        self.dangerous_objects = frozenset(
            config.DANGEROUS_OBJECTS if dangerous_objects is None else dangerous_objects
        )
        self.obstacle_objects = frozenset(
            config.OBSTACLE_OBJECTS if obstacle_objects is None else obstacle_objects
        )

        # Objects covering more of the frame than this are considered close
        self.distance_threshold = (
            config.DISTANCE_THRESHOLD if distance_threshold is None else distance_threshold
        )

    def classify(self, class_name):
        """Return the hazard type of a label, or None for harmless objects"""
        if class_name in self.dangerous_objects:
            return DANGER
        if class_name in self.obstacle_objects:
            return OBSTACLE
        return None

    @staticmethod
    def size_ratio(bbox, frame_width, frame_height):
        """Fraction of the frame covered by a bounding box"""
        _, _, width, height = bbox
        screen_size = frame_width * frame_height
        if screen_size <= 0:
            return 0.0
        return (width * height) / screen_size

    def flag(self, prediction, frame_width, frame_height):
        """Return the prediction as a hazard when it is dangerous or an obstacle and close, else None"""
        hazard_type = self.classify(prediction['class'])
        if hazard_type is None:
            return None

        ratio = self.size_ratio(prediction['bbox'], frame_width, frame_height)
        if ratio <= self.distance_threshold:
            return None

        hazard = dict(prediction)
        hazard['type'] = hazard_type
        hazard['ratio'] = ratio
        return hazard

    @staticmethod
    def most_salient(hazards):
        """
        Pick the single hazard to announce.

        Dangerous objects win over obstacles; within the same type the
        largest box wins. An obstacle never displaces a dangerous object.
        """
        selected = None
        for hazard in hazards:
            if selected is None:
                selected = hazard
            elif hazard['type'] == DANGER and selected['type'] == OBSTACLE:
                selected = hazard
            elif hazard['type'] == selected['type'] and hazard['ratio'] > selected['ratio']:
                selected = hazard
        return selected

    @staticmethod
    def warning_message(hazard):
        if hazard['type'] == DANGER:
            return f"{hazard['class']} ahead"
        return f"{hazard['class']} in your path"
