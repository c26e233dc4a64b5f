"""The exec-and-collect operation exposed to callers.

``KubeExecutor.execute_command`` always returns a Response: every resolution,
stream and decode error is logged and converted into a failure envelope here.
"""

import threading
from typing import Optional

from kube_exec import stream
from kube_exec.cluster import ClusterHandle
from kube_exec.decoder import decode
from kube_exec.errors import ResolutionError, ResolutionFailure, StreamError
from kube_exec.logging_utils import get_logger
from kube_exec.models import ExecRequest, Response
from kube_exec.resolver import resolve

logger = get_logger("executor")


class KubeExecutor:
    """Runs commands in pods of one cluster.

    Args:
        cluster: Handle returned by ``kube_exec.cluster.connect``
        raw_output: Pass command output through as text instead of
            requiring a JSON Response envelope
        stream_timeout: Optional limit, in seconds, on each exec stream
    """

    def __init__(self, cluster: ClusterHandle, *, raw_output: bool = False, stream_timeout: Optional[float] = None):
        self.cluster = cluster
        self.raw_output = raw_output
        self.stream_timeout = stream_timeout

    @classmethod
    def from_config(cls, cluster: ClusterHandle, settings) -> "KubeExecutor":
        return cls(
            cluster,
            raw_output=settings.KUBE_EXEC_RAW_OUTPUT,
            stream_timeout=settings.KUBE_EXEC_STREAM_TIMEOUT,
        )

    def execute_command(
        self,
        request: ExecRequest,
        destroy: bool = False,
        cancel: Optional[threading.Event] = None,
    ) -> Response:
        """Execute ``request.commands`` in the requested pod.

        Args:
            request: Target pod/container and the argv to run
            destroy: Part of a teardown flow; a missing pod then counts as
                success with code 1
            cancel: Optional event that aborts the exec stream once set

        Returns:
            The decoded Response, or a failure Response describing what went wrong.
        """
        logger.info(f"Start to execute command: {request}")

        try:
            target = resolve(self.cluster.api, request)
        except ResolutionError as e:
            if destroy and e.kind is ResolutionFailure.POD_NOT_FOUND:
                logger.info(f"Pod {request.pod_name} already absent, nothing to do")
                return Response.already_absent()
            logger.error(f"Cannot resolve exec target for {request}: {e.message} {e.details}")
            return Response.failure(e.message)

        try:
            output = stream.execute(
                self.cluster,
                target,
                request.commands,
                timeout=self.stream_timeout,
                cancel=cancel,
            )
        except StreamError as e:
            logger.error(f"Exec stream failed for {target}: {e.message} {e.details}")
            return Response.failure(e.message)

        logger.info(f"exec result for {target}: ret: {output.decode('utf-8', errors='replace')}")
        return decode(output, raw_output=self.raw_output)
