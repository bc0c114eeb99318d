"""
Detection log writer for Vision Assist
"""
import logging

from .. import config


class DetectionLogger:
    """Inserts one row per frame with active warnings into the detection_logs table"""

    def __init__(self, client, table=None):
        self.logger = logging.getLogger("DetectionLogger")
        self.client = client
        self.table = table or config.DETECTION_LOGS_TABLE
        self.records_written = 0

    def build_record(self, user_id, predictions, warning_keys):
        return {
            'user_id': user_id,
            'objects_detected': [p['class'] for p in predictions],
            'distance_warnings': list(warning_keys),
        }

    def record(self, user_id, predictions, warning_keys):
        """Write a log row; skipped when nobody is signed in or nothing is being warned about"""
        if not user_id or not warning_keys:
            return None

        record = self.build_record(user_id, predictions, warning_keys)
        self.client.table(self.table).insert(record).execute()
        self.records_written += 1
        self.logger.debug(f"Logged detection for {user_id}: {record['distance_warnings']}")
        return record
