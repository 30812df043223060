"""Data model for Watchers.

The Watcher record stored in a ConfigMap is the only durable state of the
control plane. Status, status description and ingest address are derived on
every read and never persisted.
"""
import re
from enum import Enum

from pydantic import BaseModel, Field, ValidationError, field_validator

from hawkeye.errors import IntegrityViolation

# Fields recomputed on every read, never written to the ConfigMap
DERIVED_FIELDS = {"status": True, "status_description": True, "source": {"ingest_ip"}}

# Tags are copied onto resource labels, so they follow Kubernetes label syntax
LABEL_NAME_MAX_LENGTH = 63
LABEL_PREFIX_MAX_LENGTH = 253
_LABEL_NAME = re.compile(r"([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9]")
_LABEL_PREFIX = re.compile(r"[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*")


def _is_label_name(value: str) -> bool:
    return len(value) <= LABEL_NAME_MAX_LENGTH and _LABEL_NAME.fullmatch(value) is not None


def _is_label_key(key: str) -> bool:
    prefix, slash, name = key.rpartition("/")
    if slash:
        if len(prefix) > LABEL_PREFIX_MAX_LENGTH or not _LABEL_PREFIX.fullmatch(prefix):
            return False
    return _is_label_name(name)


class Status(str, Enum):
    """Derived status of a Watcher."""
    READY = "Ready"
    RUNNING = "Running"
    PENDING = "Pending"
    ERROR = "Error"


class Source(BaseModel):
    """Video source of a Watcher.

    Attributes:
        ingest_port: Port the Watcher receives its video stream on.
        ingest_ip: Address assigned to the Watcher's Service, once provisioned.
    """
    ingest_port: int = Field(..., ge=1, le=65535)
    ingest_ip: str | None = None


class Watcher(BaseModel):
    """A configured video source managed by Hawkeye."""
    id: str | None = None
    description: str | None = None
    source: Source
    tags: dict[str, str] | None = None
    status: Status | None = None
    status_description: str | None = None

    @field_validator("tags")
    def validate_tags(cls, v):
        """Validate that every tag is usable as a Kubernetes label"""
        for key, value in (v or {}).items():
            if not _is_label_key(key):
                raise ValueError(f"Tag key {key!r} is not a valid Kubernetes label key")
            if value and not _is_label_name(value):
                raise ValueError(f"Tag value {value!r} of {key!r} is not a valid Kubernetes label value")
        return v

    def to_record(self) -> str:
        """Serialize the persisted fields of the Watcher to JSON."""
        return self.model_dump_json(exclude=DERIVED_FIELDS, exclude_none=True)

    @classmethod
    def from_record(cls, raw: str | None, origin: str = "record") -> "Watcher":
        """Load a Watcher from its persisted JSON record.

        Args:
            raw: The JSON document stored in the ConfigMap.
            origin: Name of the record, used in error messages.

        Returns:
            The Watcher, without any derived field set.

        Raises:
            IntegrityViolation: If the record is missing or cannot be decoded.
        """
        if not raw:
            raise IntegrityViolation(f"Watcher record is missing from {origin}")
        try:
            watcher = cls.model_validate_json(raw)
        except ValidationError as e:
            raise IntegrityViolation(f"Watcher record in {origin} is malformed: {e}") from e
        watcher.status = None
        watcher.status_description = None
        watcher.source.ingest_ip = None
        return watcher
