"""HTTP API for Hawkeye.

Exposes the Watcher lifecycle over HTTP. Routes are thin: they call the
controller, registry or frame proxy and map outcomes to status codes.
"""

import logging

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, Response
from kubernetes.client.exceptions import ApiException
from urllib3.exceptions import HTTPError

from hawkeye import __description__, __version__
from hawkeye.config import HawkeyeConfig
from hawkeye.errors import HawkeyeError
from hawkeye.frames import FRAME_CONTENT_TYPE, FrameProxy
from hawkeye.kubernetes.controller import WatcherController
from hawkeye.models import Watcher
from hawkeye.registry import WatcherRegistry

logger = logging.getLogger(__name__)


def get_controller(request: Request) -> WatcherController:
    return request.app.state.controller


def get_registry(request: Request) -> WatcherRegistry:
    return request.app.state.registry


def get_frame_proxy(request: Request) -> FrameProxy:
    return request.app.state.frame_proxy


def _message(message: str, status_code: int = 200) -> JSONResponse:
    return JSONResponse({"message": message}, status_code=status_code)


def create_app(config: HawkeyeConfig, controller: WatcherController | None = None) -> FastAPI:
    """Build the HTTP application.

    Args:
        config: The Hawkeye configuration.
        controller: The controller to use. If None, one is created, which
            connects to the Kubernetes API.

    Returns:
        The FastAPI application.
    """
    app = FastAPI(title="Hawkeye API", description=__description__, version=__version__)

    controller = controller or WatcherController(config)
    app.state.config = config
    app.state.controller = controller
    app.state.registry = WatcherRegistry(controller)
    app.state.frame_proxy = FrameProxy(
        controller, timeout_s=config.call_watcher_timeout, legacy_port=config.legacy_frame_port
    )

    @app.exception_handler(HawkeyeError)
    async def handle_hawkeye_error(request: Request, exc: HawkeyeError):
        return _message(exc.message, exc.status_code)

    @app.get("/v1/watchers", response_model=list[Watcher], response_model_exclude_none=True)
    def list_watchers(registry: WatcherRegistry = Depends(get_registry)):
        return registry.list()

    @app.post("/v1/watchers", status_code=201, response_model=Watcher, response_model_exclude_none=True)
    def create_watcher(watcher: Watcher, controller: WatcherController = Depends(get_controller)):
        logger.debug(f"create_watcher: {watcher}")
        return controller.create(watcher)

    @app.get("/v1/watchers/{watcher_id}", response_model=Watcher, response_model_exclude_none=True)
    def get_watcher(watcher_id: str, registry: WatcherRegistry = Depends(get_registry)):
        return registry.get(watcher_id)

    @app.put("/v1/watchers/{watcher_id}", response_model=Watcher, response_model_exclude_none=True)
    def update_watcher(watcher_id: str, watcher: Watcher, controller: WatcherController = Depends(get_controller)):
        logger.debug(f"update_watcher: {watcher_id} {watcher}")
        return controller.update(watcher_id, watcher)

    @app.post("/v1/watchers/{watcher_id}/upgrade", response_model=Watcher, response_model_exclude_none=True)
    def upgrade_watcher(watcher_id: str, controller: WatcherController = Depends(get_controller)):
        logger.debug(f"upgrade_watcher: {watcher_id}")
        return controller.upgrade(watcher_id)

    @app.post("/v1/watchers/{watcher_id}/start")
    def start_watcher(watcher_id: str, controller: WatcherController = Depends(get_controller)):
        outcome = controller.start(watcher_id)
        outcome.raise_for_status()
        return _message(outcome.message, outcome.status_code)

    @app.post("/v1/watchers/{watcher_id}/stop")
    def stop_watcher(watcher_id: str, controller: WatcherController = Depends(get_controller)):
        outcome = controller.stop(watcher_id)
        outcome.raise_for_status()
        return _message(outcome.message, outcome.status_code)

    @app.delete("/v1/watchers/{watcher_id}")
    def delete_watcher(watcher_id: str, controller: WatcherController = Depends(get_controller)):
        result = controller.delete(watcher_id)
        resources = {kind: "deleted" if deleted else "absent" for kind, deleted in result.resources.items()}
        return JSONResponse({"message": "Watcher has been deleted", "resources": resources})

    @app.get("/v1/watchers/{watcher_id}/video-frame")
    def get_video_frame(watcher_id: str, frame_proxy: FrameProxy = Depends(get_frame_proxy)):
        frame = frame_proxy.latest_frame(watcher_id)
        return Response(
            content=frame, media_type=FRAME_CONTENT_TYPE, headers={"Cache-Control": "no-store"}
        )

    @app.get("/healthcheck")
    def healthcheck(controller: WatcherController = Depends(get_controller)):
        try:
            controller.connection.version_api.get_code(_request_timeout=config.request_timeout)
        except (ApiException, HTTPError) as e:
            logger.error(f"Cannot communicate with K8s API: {e}")
            return _message("Not able to communicate with the Kubernetes API Server.", 503)
        return _message("All good!")

    return app
