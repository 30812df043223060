"""Tests for the HTTP API module."""

import unittest
from unittest import mock

from fastapi.testclient import TestClient
from urllib3.exceptions import MaxRetryError

from factories import api_error

from hawkeye.api import create_app
from hawkeye.config import HawkeyeConfig
from hawkeye.errors import (
    FrameUnavailableError,
    IntegrityViolation,
    InvalidRequestError,
    NotAcceptableError,
    NotFoundError,
    UpstreamFailure,
)
from hawkeye.kubernetes.controller import DeleteResult, WatcherStartStatus, WatcherStopStatus
from hawkeye.models import Source, Status, Watcher


class ApiTestCase(unittest.TestCase):
    """Base test case serving the application over a mocked controller."""

    def setUp(self):
        """Set up test fixtures."""
        self.controller = mock.MagicMock()
        self.app = create_app(HawkeyeConfig(request_timeout=4), controller=self.controller)
        self.registry = mock.MagicMock()
        self.frame_proxy = mock.MagicMock()
        self.app.state.registry = self.registry
        self.app.state.frame_proxy = self.frame_proxy
        self.client = TestClient(self.app)


class TestWatcherRoutes(ApiTestCase):
    """Test cases for the Watcher read and write routes."""

    def test_list_watchers(self):
        self.registry.list.return_value = [
            Watcher(id="w1", source=Source(ingest_port=8080), status=Status.RUNNING),
            Watcher(id="w2", description="lobby", source=Source(ingest_port=8081), status=Status.ERROR),
        ]

        response = self.client.get("/v1/watchers")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(),
            [
                {"id": "w1", "source": {"ingest_port": 8080}, "status": "Running"},
                {"id": "w2", "description": "lobby", "source": {"ingest_port": 8081}, "status": "Error"},
            ],
        )

    def test_list_watchers_upstream_failure(self):
        self.registry.list.side_effect = UpstreamFailure("Kubernetes API call to list Deployment failed")

        response = self.client.get("/v1/watchers")

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"message": "Kubernetes API call to list Deployment failed"})

    def test_create_watcher(self):
        self.controller.create.return_value = Watcher(
            id="new-id", source=Source(ingest_port=8080), tags={"team": "video"}, status=Status.PENDING
        )

        response = self.client.post("/v1/watchers", json={"source": {"ingest_port": 8080}, "tags": {"team": "video"}})

        self.assertEqual(response.status_code, 201)
        self.assertEqual(
            response.json(),
            {"id": "new-id", "source": {"ingest_port": 8080}, "tags": {"team": "video"}, "status": "Pending"},
        )
        requested = self.controller.create.call_args.args[0]
        self.assertEqual(requested.source.ingest_port, 8080)

    def test_create_watcher_invalid_body(self):
        """Test that a Watcher without a usable ingest port is rejected."""
        for body in ({}, {"source": {}}, {"source": {"ingest_port": 0}}, {"source": {"ingest_port": "udp"}}):
            with self.subTest(body=body):
                response = self.client.post("/v1/watchers", json=body)
                self.assertEqual(response.status_code, 422)
        self.controller.create.assert_not_called()

    def test_create_watcher_invalid_tags(self):
        """Test that tags which cannot be used as labels never reach Kubernetes."""
        for tags in ({"has space": "video"}, {"team": "video/lobby"}, {"team": "x" * 64}):
            with self.subTest(tags=tags):
                response = self.client.post("/v1/watchers", json={"source": {"ingest_port": 8080}, "tags": tags})
                self.assertEqual(response.status_code, 422)
        self.controller.create.assert_not_called()

    def test_update_watcher(self):
        self.controller.update.return_value = Watcher(
            id="w1", description="lobby", source=Source(ingest_port=9090), status=Status.READY
        )

        response = self.client.put("/v1/watchers/w1", json={"description": "lobby", "source": {"ingest_port": 9090}})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(),
            {"id": "w1", "description": "lobby", "source": {"ingest_port": 9090}, "status": "Ready"},
        )
        watcher_id, requested = self.controller.update.call_args.args
        self.assertEqual(watcher_id, "w1")
        self.assertEqual(requested.source.ingest_port, 9090)
        self.assertEqual(requested.description, "lobby")

    def test_update_watcher_invalid_body(self):
        for body in ({}, {"source": {"ingest_port": 70000}}, {"source": {"ingest_port": 8080}, "tags": {"-x": "y"}}):
            with self.subTest(body=body):
                response = self.client.put("/v1/watchers/w1", json=body)
                self.assertEqual(response.status_code, 422)
        self.controller.update.assert_not_called()

    def test_update_watcher_errors(self):
        errors = {
            404: NotFoundError("Watcher w1 not found"),
            400: InvalidRequestError("The Watcher must be stopped before it can be updated"),
            500: UpstreamFailure("Kubernetes API call to patch Service watcher-w1 failed"),
        }
        for status_code, error in errors.items():
            with self.subTest(status_code=status_code):
                self.controller.update.side_effect = error
                response = self.client.put("/v1/watchers/w1", json={"source": {"ingest_port": 8080}})
                self.assertEqual(response.status_code, status_code)
                self.assertEqual(response.json(), {"message": error.message})

    def test_get_watcher(self):
        self.registry.get.return_value = Watcher(
            id="w1",
            source=Source(ingest_port=8080, ingest_ip="34.1.2.3"),
            status=Status.PENDING,
            status_description="Back-off pulling image",
        )

        response = self.client.get("/v1/watchers/w1")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(),
            {
                "id": "w1",
                "source": {"ingest_port": 8080, "ingest_ip": "34.1.2.3"},
                "status": "Pending",
                "status_description": "Back-off pulling image",
            },
        )
        self.registry.get.assert_called_once_with("w1")

    def test_get_watcher_errors(self):
        errors = {
            404: NotFoundError("Watcher w1 not found"),
            500: IntegrityViolation("Watcher record is missing from watcher-w1-config"),
        }
        for status_code, error in errors.items():
            with self.subTest(status_code=status_code):
                self.registry.get.side_effect = error
                response = self.client.get("/v1/watchers/w1")
                self.assertEqual(response.status_code, status_code)
                self.assertEqual(response.json(), {"message": error.message})

    def test_upgrade_watcher(self):
        self.controller.upgrade.return_value = Watcher(id="w1", source=Source(ingest_port=8080), status=Status.READY)

        response = self.client.post("/v1/watchers/w1/upgrade")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "Ready")
        self.controller.upgrade.assert_called_once_with("w1")

    def test_upgrade_watcher_errors(self):
        errors = {
            404: NotFoundError("Watcher w1 not found"),
            400: InvalidRequestError("The Watcher must be stopped before the upgrade can be applied"),
            500: UpstreamFailure("Kubernetes API call to patch Deployment watcher-w1 failed"),
        }
        for status_code, error in errors.items():
            with self.subTest(status_code=status_code):
                self.controller.upgrade.side_effect = error
                response = self.client.post("/v1/watchers/w1/upgrade")
                self.assertEqual(response.status_code, status_code)
                self.assertEqual(response.json(), {"message": error.message})

    def test_delete_watcher(self):
        self.controller.delete.return_value = DeleteResult(
            watcher_id="w1", resources={"Deployment": True, "ConfigMap": True, "Service": False}
        )

        response = self.client.delete("/v1/watchers/w1")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(),
            {
                "message": "Watcher has been deleted",
                "resources": {"Deployment": "deleted", "ConfigMap": "deleted", "Service": "absent"},
            },
        )

    def test_delete_watcher_errors(self):
        errors = {
            404: NotFoundError("Watcher w1 does not exist"),
            500: UpstreamFailure("Watcher w1 was not fully deleted"),
        }
        for status_code, error in errors.items():
            with self.subTest(status_code=status_code):
                self.controller.delete.side_effect = error
                response = self.client.delete("/v1/watchers/w1")
                self.assertEqual(response.status_code, status_code)
                self.assertEqual(response.json(), {"message": error.message})


class TestTransitionRoutes(ApiTestCase):
    """Test cases for the start and stop routes."""

    def test_start_outcomes(self):
        for outcome in WatcherStartStatus:
            with self.subTest(outcome=outcome):
                self.controller.start.return_value = outcome
                response = self.client.post("/v1/watchers/w1/start")
                self.assertEqual(response.status_code, outcome.status_code)
                self.assertEqual(response.json(), {"message": outcome.message})

    def test_stop_outcomes(self):
        for outcome in WatcherStopStatus:
            with self.subTest(outcome=outcome):
                self.controller.stop.return_value = outcome
                response = self.client.post("/v1/watchers/w1/stop")
                self.assertEqual(response.status_code, outcome.status_code)
                self.assertEqual(response.json(), {"message": outcome.message})

    def test_start_upstream_failure(self):
        self.controller.start.side_effect = UpstreamFailure("Kubernetes API call to scale Deployment watcher-w1 failed")

        response = self.client.post("/v1/watchers/w1/start")

        self.assertEqual(response.status_code, 500)


class TestVideoFrameRoute(ApiTestCase):
    """Test cases for the video frame route."""

    def test_video_frame(self):
        self.frame_proxy.latest_frame.return_value = b"\x89PNG\r\n\x1a\nframe"

        response = self.client.get("/v1/watchers/w1/video-frame")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.content, b"\x89PNG\r\n\x1a\nframe")
        self.assertEqual(response.headers["content-type"], "image/png")
        self.assertEqual(response.headers["cache-control"], "no-store")

    def test_video_frame_errors(self):
        errors = {
            404: NotFoundError("Watcher w1 not found"),
            406: NotAcceptableError("Watcher w1 is not running"),
            417: FrameUnavailableError("Watcher w1 has no reachable pod"),
        }
        for status_code, error in errors.items():
            with self.subTest(status_code=status_code):
                self.frame_proxy.latest_frame.side_effect = error
                response = self.client.get("/v1/watchers/w1/video-frame")
                self.assertEqual(response.status_code, status_code)
                self.assertEqual(response.json(), {"message": error.message})


class TestHealthcheck(ApiTestCase):
    """Test cases for the healthcheck route."""

    def test_healthy(self):
        response = self.client.get("/healthcheck")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"message": "All good!"})
        self.controller.connection.version_api.get_code.assert_called_once_with(_request_timeout=4)

    def test_api_server_unreachable(self):
        failures = [api_error(401, "Unauthorized"), MaxRetryError(None, "/version", "timed out")]
        for failure in failures:
            with self.subTest(failure=type(failure).__name__):
                self.controller.connection.version_api.get_code.side_effect = failure
                with self.assertLogs("hawkeye.api", level="ERROR"):
                    response = self.client.get("/healthcheck")
                self.assertEqual(response.status_code, 503)
                self.assertEqual(
                    response.json(), {"message": "Not able to communicate with the Kubernetes API Server."}
                )


class TestCreateApp(unittest.TestCase):
    """Test cases for building the application."""

    @mock.patch("hawkeye.api.WatcherController")
    def test_creates_controller_when_missing(self, controller_class_mock):
        config = HawkeyeConfig(call_watcher_timeout=2, legacy_frame_port=4040)

        app = create_app(config)

        controller_class_mock.assert_called_once_with(config)
        self.assertIs(app.state.controller, controller_class_mock.return_value)
        self.assertEqual(app.state.frame_proxy.timeout_s, 2)
        self.assertEqual(app.state.frame_proxy.legacy_port, 4040)


if __name__ == "__main__":
    unittest.main()
