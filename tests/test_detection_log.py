"""
Tests for detection log writes
"""
from unittest.mock import MagicMock

from vision_assist.core.detection_log import DetectionLogger

PREDICTIONS = [
    {'class': 'person', 'score': 0.9, 'bbox': (0, 0, 10, 10)},
    {'class': 'cup', 'score': 0.51, 'bbox': (5, 5, 2, 2)},
]


class TestDetectionLogger:
    def setup_method(self):
        self.client = MagicMock()
        self.logger = DetectionLogger(self.client)

    def test_record_inserts_row(self):
        record = self.logger.record("user-1", PREDICTIONS, ["person-0-0"])

        assert record == {
            'user_id': "user-1",
            'objects_detected': ['person', 'cup'],
            'distance_warnings': ['person-0-0'],
        }
        self.client.table.assert_called_once_with('detection_logs')
        self.client.table.return_value.insert.assert_called_once_with(record)
        self.client.table.return_value.insert.return_value.execute.assert_called_once()
        assert self.logger.records_written == 1

    def test_no_write_without_user(self):
        assert self.logger.record(None, PREDICTIONS, ["person-0-0"]) is None
        self.client.table.assert_not_called()

    def test_no_write_without_warnings(self):
        assert self.logger.record("user-1", PREDICTIONS, []) is None
        self.client.table.assert_not_called()

    def test_accepts_dict_keys(self):
        record = self.logger.record("user-1", PREDICTIONS, {"person-0-0": 1.0}.keys())
        assert record['distance_warnings'] == ["person-0-0"]

    def test_custom_table(self):
        DetectionLogger(self.client, table="test_logs").record("user-1", PREDICTIONS, ["a-1-2"])
        self.client.table.assert_called_once_with("test_logs")
