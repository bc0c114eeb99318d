"""
Tests for turning model output into predictions
"""
import pytest

from vision_assist.detectors.object_detector import ObjectDetector

from conftest import FakeModel


class TestObjectDetector:
    def test_detect_converts_boxes_to_xywh(self, frame):
        model = FakeModel([(0, 0.91, (10.5, 20.0, 60.5, 90.0))])
        predictions = ObjectDetector().detect(model, frame)

        assert len(predictions) == 1
        assert predictions[0]['class'] == 'person'
        assert predictions[0]['score'] == pytest.approx(0.91)
        assert predictions[0]['bbox'] == pytest.approx((10.5, 20.0, 50.0, 70.0))

    def test_detect_passes_model_limits(self, frame):
        model = FakeModel()
        ObjectDetector().detect(model, frame)

        assert model.calls == [{'conf': 0.5, 'max_det': 20, 'verbose': False}]

    def test_detect_with_nothing_found(self, frame):
        assert ObjectDetector().detect(FakeModel(), frame) == []

    def test_filter_is_strictly_above_min_score(self):
        predictions = [
            {'class': 'person', 'score': 0.55, 'bbox': (0, 0, 1, 1)},
            {'class': 'chair', 'score': 0.56, 'bbox': (0, 0, 1, 1)},
            {'class': 'cup', 'score': 0.2, 'bbox': (0, 0, 1, 1)},
        ]
        kept = ObjectDetector().filter_predictions(predictions)
        assert [p['class'] for p in kept] == ['chair']

    def test_custom_min_score(self):
        predictions = [{'class': 'person', 'score': 0.4, 'bbox': (0, 0, 1, 1)}]
        assert ObjectDetector(min_score=0.3).filter_predictions(predictions) == predictions
