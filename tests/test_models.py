"""Tests for the Watcher data model."""

import json
import unittest

from pydantic import ValidationError

from hawkeye.errors import IntegrityViolation
from hawkeye.models import Source, Status, Watcher


class TestWatcher(unittest.TestCase):
    """Test cases for the Watcher model."""

    def test_ingest_port_is_required(self):
        with self.assertRaises(ValidationError):
            Watcher(source={})

    def test_ingest_port_range(self):
        with self.assertRaises(ValidationError):
            Source(ingest_port=0)
        with self.assertRaises(ValidationError):
            Source(ingest_port=65536)

    def test_tags_accept_label_syntax(self):
        tags = {
            "team": "video",
            "example.com/site": "lobby-2",
            "app.kubernetes.io/part-of": "",
            "a": "B_c.d",
        }
        self.assertEqual(Watcher(source={"ingest_port": 8080}, tags=tags).tags, tags)

    def test_tags_reject_invalid_keys(self):
        """Test that tags which cannot become resource labels are refused."""
        for key in ["", "has space", "-team", "team-", "Example.com/site", "/site", "x" * 64, "a/b/c"]:
            with self.subTest(key=key):
                with self.assertRaises(ValidationError):
                    Watcher(source={"ingest_port": 8080}, tags={key: "video"})

    def test_tags_reject_invalid_values(self):
        for value in ["has space", "lobby/2", "-lobby", "lobby.", "x" * 64]:
            with self.subTest(value=value):
                with self.assertRaises(ValidationError):
                    Watcher(source={"ingest_port": 8080}, tags={"site": value})

    def test_record_excludes_derived_fields(self):
        """Test that status, description and ingest address are never persisted."""
        watcher = Watcher(
            id="w1",
            source=Source(ingest_port=8080, ingest_ip="10.0.0.1"),
            tags={"team": "video"},
            status=Status.RUNNING,
            status_description="starting",
        )
        record = json.loads(watcher.to_record())
        self.assertEqual(record, {"id": "w1", "source": {"ingest_port": 8080}, "tags": {"team": "video"}})

    def test_from_record_drops_derived_fields(self):
        raw = json.dumps({"id": "w1", "source": {"ingest_port": 8080, "ingest_ip": "1.2.3.4"}, "status": "Running"})
        watcher = Watcher.from_record(raw)
        self.assertEqual(watcher.id, "w1")
        self.assertEqual(watcher.source.ingest_port, 8080)
        self.assertIsNone(watcher.source.ingest_ip)
        self.assertIsNone(watcher.status)

    def test_from_record_missing(self):
        with self.assertRaises(IntegrityViolation):
            Watcher.from_record(None, origin="watcher-w1-config")

    def test_from_record_malformed(self):
        with self.assertRaises(IntegrityViolation):
            Watcher.from_record("{not json")
        with self.assertRaises(IntegrityViolation):
            Watcher.from_record(json.dumps({"id": "w1"}))

    def test_status_serialization(self):
        """Test that statuses serialize with their exact spelling."""
        self.assertEqual([s.value for s in Status], ["Ready", "Running", "Pending", "Error"])


if __name__ == "__main__":
    unittest.main()
