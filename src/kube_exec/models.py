"""Pydantic models for Kube Exec requests, pod state and responses."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from kube_exec.config import TERMINAL_POD_PHASES

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


class ExecRequest(BaseModel):
    """A command to run inside one container of a pod."""

    model_config = ConfigDict(frozen=True)

    namespace: str = Field("", description="Namespace of the pod. Empty means 'default'.")
    pod_name: str = Field("", description="Name of the target pod.")
    container: str = Field("", description="Container to exec into. Empty means the pod's first container.")
    commands: list[str] = Field(default_factory=list, description="The argv to run inside the container.")


class PodSnapshot(BaseModel):
    """Point-in-time view of a pod, fetched fresh for every request."""

    phase: Optional[str] = None
    containers: list[str] = Field(default_factory=list)

    @classmethod
    def from_pod(cls, pod) -> "PodSnapshot":
        """Build a snapshot from a ``kubernetes.client.V1Pod``."""
        phase = pod.status.phase if pod.status else None
        containers = [c.name for c in (pod.spec.containers or [])] if pod.spec else []
        return cls(phase=phase, containers=containers)

    @property
    def completed(self) -> bool:
        return self.phase in TERMINAL_POD_PHASES


class ResolvedTarget(BaseModel):
    """A validated namespace/pod/container triple."""

    model_config = ConfigDict(frozen=True)

    namespace: str
    pod_name: str
    container_name: str


class Response(BaseModel):
    """The uniform success/failure envelope returned to every caller.

    Code conventions: 1 means nothing to do (target already absent while
    destroying), 0 or positive means success, -1 means failure.
    """

    model_config = ConfigDict(strict=True)

    code: int = Field(0, ge=INT32_MIN, le=INT32_MAX, description="Status code; negative on failure.")
    success: bool = Field(False, description="Whether the operation succeeded.")
    error: Optional[str] = Field(None, description="Failure reason, if any.")
    result: Optional[Any] = Field(None, description="Opaque payload produced by the remote command.")

    @classmethod
    def failure(cls, error: str) -> "Response":
        return cls(code=-1, success=False, error=error)

    @classmethod
    def already_absent(cls) -> "Response":
        return cls(code=1, success=True)

    def to_wire(self) -> dict[str, Any]:
        """Serialize with empty ``error`` and missing ``result`` omitted."""
        payload: dict[str, Any] = {"code": self.code, "success": self.success}
        if self.error:
            payload["error"] = self.error
        if self.result is not None:
            payload["result"] = self.result
        return payload
