"""Error types raised inside Kube Exec.

Every error carries a human-readable message (which ends up in the
``error`` field of a failure Response) and a ``details`` dict for logging.
"""

from enum import Enum
from typing import Any, Optional


class KubeExecError(Exception):
    """Base class for all Kube Exec errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ClusterConnectionError(KubeExecError):
    """Raised when no usable cluster client can be built from a config source."""


class ResolutionFailure(str, Enum):
    EMPTY_POD_NAME = "EmptyPodName"
    POD_NOT_FOUND = "PodNotFound"
    POD_LOOKUP_FAILED = "PodLookupFailed"
    POD_COMPLETED = "PodCompleted"
    CONTAINER_NOT_FOUND = "ContainerNotFound"


class StreamFailure(str, Enum):
    UPGRADE_FAILED = "UpgradeFailed"
    READ_FAILED = "ReadFailed"
    TIMED_OUT = "TimedOut"
    CANCELLED = "Cancelled"


class DecodeFailure(str, Enum):
    MALFORMED_ENVELOPE = "MalformedEnvelope"


class _KindedError(KubeExecError):
    def __init__(self, kind, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message, {"kind": kind.value, **(details or {})})
        self.kind = kind


class ResolutionError(_KindedError):
    """Raised when a request cannot be mapped to a live container."""


class StreamError(_KindedError):
    """Raised when the exec stream cannot be opened or read to the end."""


class DecodeError(_KindedError):
    """Raised when exec output is not a valid response envelope."""
