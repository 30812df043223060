"""Configuration module for Hawkeye.

This module handles the configuration of the Hawkeye control plane through environment variables.
"""
import os

from pydantic import BaseModel, Field, field_validator

# Port older worker images serve their HTTP endpoints on
LEGACY_WORKER_HTTP_PORT = 3030


class HawkeyeConfig(BaseModel):
    """Configuration class for Hawkeye.

    Attributes:
        namespace: Kubernetes namespace holding every Watcher resource.
        worker_image: Container image used for Watcher workloads.
        request_timeout: Timeout in seconds applied to every Kubernetes API call.
        call_watcher_timeout: Timeout in seconds applied to calls made to a Watcher pod.
        legacy_frame_port: Fallback port used when fetching a frame from a Watcher pod.
        field_manager: Field manager name sent with every create and patch call.
        host: Address the HTTP API binds to.
        port: Port the HTTP API listens on.
    """
    namespace: str = Field(default="hawkeye")
    worker_image: str = Field(default="hawkeye-worker:latest")
    request_timeout: int = Field(default=10)
    call_watcher_timeout: int = Field(default=5)
    legacy_frame_port: int = Field(default=LEGACY_WORKER_HTTP_PORT)
    field_manager: str = Field(default="hawkeye_api")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080)

    @field_validator("namespace", "worker_image", "field_manager")
    def validate_not_empty(cls, v):
        """Validate that the value is a non-empty string"""
        if not v or not v.strip():
            raise ValueError("Value must not be empty")
        return v.strip()

    @field_validator("request_timeout", "call_watcher_timeout")
    def validate_timeout(cls, v):
        """Validate that timeouts are bounded and positive"""
        if v <= 0:
            raise ValueError("Timeout must be a positive number of seconds")
        return v

    @field_validator("legacy_frame_port", "port")
    def validate_port(cls, v):
        """Validate that the value is a usable TCP port"""
        if not (0 < v < 65536):
            raise ValueError("Port must be in range 1-65535")
        return v

    @classmethod
    def from_env(cls):
        """Create a config instance from environment variables."""
        try:
            request_timeout = int(os.getenv("HAWKEYE_REQUEST_TIMEOUT", "10"))
            call_watcher_timeout = int(os.getenv("HAWKEYE_CALL_WATCHER_TIMEOUT", "5"))
            legacy_frame_port = int(os.getenv("HAWKEYE_LEGACY_FRAME_PORT", str(LEGACY_WORKER_HTTP_PORT)))
            port = int(os.getenv("HAWKEYE_PORT", "8080"))
        except ValueError as e:
            raise ValueError(f"Invalid numeric setting in environment: {e}") from e

        return cls(
            namespace=os.getenv("HAWKEYE_NAMESPACE", "hawkeye"),
            worker_image=os.getenv("HAWKEYE_WORKER_IMAGE", "hawkeye-worker:latest"),
            request_timeout=request_timeout,
            call_watcher_timeout=call_watcher_timeout,
            legacy_frame_port=legacy_frame_port,
            field_manager=os.getenv("HAWKEYE_FIELD_MANAGER", "hawkeye_api"),
            host=os.getenv("HAWKEYE_HOST", "0.0.0.0"),
            port=port,
        )
