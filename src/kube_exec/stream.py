"""Exec stream orchestration.

Opens a websocket exec stream against a pod's ``exec`` sub-resource and turns
the push-style frames it delivers into one buffered byte string. A single
background pump thread copies stdout and stderr into a ``BytePipe`` while the
calling thread drains it until the remote side closes the stream.
"""

import queue
import threading
import time
from typing import Optional, Sequence

from kubernetes import client
from kubernetes.stream import stream

from kube_exec.config import PUMP_POLL_SECONDS, READ_POLL_SECONDS, STOP_JOIN_SECONDS
from kube_exec.errors import StreamError, StreamFailure
from kube_exec.logging_utils import get_logger
from kube_exec.models import ResolvedTarget

logger = get_logger("stream")


class _EndOfStream:
    __slots__ = ("error",)

    def __init__(self, error: Optional[BaseException] = None):
        self.error = error


class BytePipe:
    """Unbounded single-producer/single-consumer byte pipe.

    The writer calls ``write`` any number of times and then ``close`` exactly
    once, optionally with the error that ended the stream. The reader gets
    chunks back in write order.
    """

    def __init__(self):
        self._chunks: queue.SimpleQueue = queue.SimpleQueue()

    def write(self, data: bytes) -> None:
        if data:
            self._chunks.put(data)

    def close(self, error: Optional[BaseException] = None) -> None:
        self._chunks.put(_EndOfStream(error))

    def read_all(self, deadline: Optional[float] = None, cancel: Optional[threading.Event] = None) -> bytes:
        """Block until the writer closes the pipe and return everything written.

        Args:
            deadline: Optional ``time.monotonic()`` value after which reading stops
            cancel: Optional event that stops reading once set

        Raises:
            StreamError: READ_FAILED if the writer closed with an error
                (a StreamError from the writer is raised as is), TIMED_OUT
                or CANCELLED if reading was cut short. Bytes
                already received are discarded in every case.
        """
        buffer = bytearray()
        while True:
            item = self._next(deadline, cancel)
            if isinstance(item, _EndOfStream):
                if isinstance(item.error, StreamError):
                    raise item.error
                if item.error is not None:
                    raise StreamError(
                        StreamFailure.READ_FAILED,
                        f"read resp got error: {item.error}",
                        {"bytes_discarded": len(buffer)},
                    ) from item.error
                return bytes(buffer)
            buffer.extend(item)

    def _next(self, deadline, cancel):
        if deadline is None and cancel is None:
            return self._chunks.get()

        while True:
            if cancel is not None and cancel.is_set():
                raise StreamError(StreamFailure.CANCELLED, "exec stream cancelled by caller")
            wait = READ_POLL_SECONDS
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise StreamError(StreamFailure.TIMED_OUT, "exec stream did not finish before the deadline")
                wait = min(wait, remaining)
            try:
                return self._chunks.get(timeout=wait)
            except queue.Empty:
                continue


def build_exec_options(target: ResolvedTarget, commands: Sequence[str]) -> dict:
    """Query parameters for the exec sub-resource. Only output is captured."""
    return {
        "container": target.container_name,
        "command": list(commands),
        "stdin": False,
        "stdout": True,
        "stderr": True,
        "tty": False,
    }


def open_exec_stream(transport: client.ApiClient, target: ResolvedTarget, commands: Sequence[str]):
    """Upgrade a POST to the pod's exec sub-resource into a websocket stream.

    Frames are delivered as raw bytes so output split across frames is never
    decoded piecemeal.

    Returns:
        A live ``kubernetes.stream.ws_client.WSClient``.

    Raises:
        StreamError: UPGRADE_FAILED if the handshake or request fails.
    """
    kwargs = build_exec_options(target, commands)
    kwargs["_preload_content"] = False
    kwargs["binary"] = True

    api = client.CoreV1Api(api_client=transport)
    try:
        return stream(api.connect_get_namespaced_pod_exec, target.pod_name, target.namespace, **kwargs)
    except Exception as e:
        logger.error(f"error when opening exec stream for {target.namespace}/{target.pod_name}: {e}")
        raise StreamError(
            StreamFailure.UPGRADE_FAILED,
            f"error when opening exec stream, err: {e}",
            target.model_dump(),
        ) from e


def _drain(ws, pipe: BytePipe) -> None:
    if ws.peek_stdout():
        pipe.write(ws.read_stdout())
    if ws.peek_stderr():
        pipe.write(ws.read_stderr())


def pump(ws, pipe: BytePipe, stopping: Optional[threading.Event] = None) -> None:
    """Copy stdout and stderr frames into ``pipe`` until the socket closes.

    ``stopping`` is set by the reader when it closed the socket itself; errors
    raised after that point are expected and not reported.
    """
    try:
        while ws.is_open():
            ws.update(timeout=PUMP_POLL_SECONDS)
            _drain(ws, pipe)
        _drain(ws, pipe)
    except Exception as e:
        if stopping is not None and stopping.is_set():
            logger.debug(f"Exec stream pump stopped after close: {e}")
            pipe.close()
            return
        logger.warning(f"Exec stream pump stopped with error: {e}")
        pipe.close(e)
    else:
        pipe.close()


class ExecSession(threading.Thread):
    """Background task that opens one exec stream and pumps it into a pipe.

    Opening happens on this thread too, so a reader deadline or cancel signal
    also bounds a handshake that never completes.
    """

    def __init__(self, cluster, target: ResolvedTarget, commands: Sequence[str]):
        super().__init__(name=f"exec-pump-{target.namespace}-{target.pod_name}", daemon=True)
        self.cluster = cluster
        self.target = target
        self.commands = list(commands)
        self.pipe = BytePipe()
        self.stopping = threading.Event()
        self._lock = threading.Lock()
        self._ws = None

    def run(self):
        try:
            with self.cluster.open_transport() as transport:
                ws = open_exec_stream(transport, self.target, self.commands)
        except StreamError as e:
            self.pipe.close(e)
            return

        with self._lock:
            if self.stopping.is_set():
                ws.close()
                self.pipe.close()
                return
            self._ws = ws
        pump(ws, self.pipe, self.stopping)

    def stop(self, join_timeout: float = STOP_JOIN_SECONDS) -> None:
        """Close the socket, if open, and wait briefly for the pump to exit.

        A session still stuck in the handshake is left to close its socket
        itself once the handshake returns.
        """
        with self._lock:
            self.stopping.set()
            ws = self._ws
        if ws is not None:
            ws.close()
            self.join(join_timeout)


def execute(
    cluster,
    target: ResolvedTarget,
    commands: Sequence[str],
    *,
    timeout: Optional[float] = None,
    cancel: Optional[threading.Event] = None,
) -> bytes:
    """Run ``commands`` in the target container and return the combined output.

    Args:
        cluster: A ClusterHandle providing the transport for the upgrade
        target: The resolved namespace/pod/container
        commands: The argv to run
        timeout: Optional number of seconds opening and reading may take together
        cancel: Optional event that aborts the stream once set

    Returns:
        stdout and stderr bytes in the order they were received.

    Raises:
        StreamError: If the stream cannot be opened, fails mid-way, times out
            or is cancelled.
    """
    if cancel is not None and cancel.is_set():
        raise StreamError(StreamFailure.CANCELLED, "exec stream cancelled by caller")
    deadline = time.monotonic() + timeout if timeout else None

    session = ExecSession(cluster, target, commands)
    session.start()
    try:
        return session.pipe.read_all(deadline=deadline, cancel=cancel)
    finally:
        session.stop()
