"""Tests for the configuration module."""

import os
import unittest
from unittest import mock

from pydantic import ValidationError

from hawkeye.config import LEGACY_WORKER_HTTP_PORT, HawkeyeConfig


class TestHawkeyeConfig(unittest.TestCase):
    """Test cases for HawkeyeConfig."""

    def test_default_values(self):
        """Test that default values are set correctly."""
        config = HawkeyeConfig()
        self.assertEqual(config.namespace, "hawkeye")
        self.assertEqual(config.worker_image, "hawkeye-worker:latest")
        self.assertEqual(config.request_timeout, 10)
        self.assertEqual(config.call_watcher_timeout, 5)
        self.assertEqual(config.legacy_frame_port, LEGACY_WORKER_HTTP_PORT)
        self.assertEqual(config.field_manager, "hawkeye_api")
        self.assertEqual(config.port, 8080)

    def test_non_positive_timeout(self):
        """Test that unbounded or negative timeouts are rejected."""
        with self.assertRaises(ValidationError):
            HawkeyeConfig(request_timeout=0)
        with self.assertRaises(ValidationError):
            HawkeyeConfig(call_watcher_timeout=-1)

    def test_invalid_port(self):
        with self.assertRaises(ValidationError):
            HawkeyeConfig(port=70000)
        with self.assertRaises(ValidationError):
            HawkeyeConfig(legacy_frame_port=0)

    def test_empty_namespace(self):
        with self.assertRaises(ValidationError):
            HawkeyeConfig(namespace="  ")

    @mock.patch.dict(
        os.environ,
        {
            "HAWKEYE_NAMESPACE": "video",
            "HAWKEYE_WORKER_IMAGE": "registry.local/hawkeye-worker:1.2.0",
            "HAWKEYE_REQUEST_TIMEOUT": "3",
            "HAWKEYE_CALL_WATCHER_TIMEOUT": "2",
            "HAWKEYE_LEGACY_FRAME_PORT": "3031",
            "HAWKEYE_PORT": "9090",
        },
    )
    def test_from_env(self):
        """Test creating config from environment variables."""
        config = HawkeyeConfig.from_env()
        self.assertEqual(config.namespace, "video")
        self.assertEqual(config.worker_image, "registry.local/hawkeye-worker:1.2.0")
        self.assertEqual(config.request_timeout, 3)
        self.assertEqual(config.call_watcher_timeout, 2)
        self.assertEqual(config.legacy_frame_port, 3031)
        self.assertEqual(config.port, 9090)

    @mock.patch.dict(os.environ, {"HAWKEYE_REQUEST_TIMEOUT": "ten"})
    def test_from_env_invalid_number(self):
        with self.assertRaises(ValueError):
            HawkeyeConfig.from_env()


if __name__ == "__main__":
    unittest.main()
