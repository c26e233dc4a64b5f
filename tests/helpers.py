"""Helper utilities for Kube Exec tests."""

import time

from kubernetes import client

STDOUT_CHANNEL = 1
STDERR_CHANNEL = 2


def _as_bytes(part):
    return part.encode("utf-8") if isinstance(part, str) else part


class FakeExecStream:
    """Stands in for ``kubernetes.stream.ws_client.WSClient``.

    Frames are delivered as bytes, like a client opened with ``binary=True``;
    text frames are encoded as UTF-8. Each ``update`` delivers the next
    ``(stdout, stderr)`` frame. When the frames run out the socket closes,
    unless ``error`` is set (raised by the next update) or ``hang`` is set
    (stays open until ``close``). With ``error_after_close`` a hanging update
    raises once the socket was closed under it, as a real socket does.
    """

    def __init__(self, frames=(), error=None, hang=False, error_after_close=None):
        self._frames = list(frames)
        self._channels = {}
        self._error = error
        self._hang = hang
        self._error_after_close = error_after_close
        self.closed = False
        self.close_calls = 0

    def is_open(self):
        if self.closed:
            return False
        return bool(self._frames) or self._error is not None or self._hang

    def update(self, timeout=0):
        if self._frames:
            stdout, stderr = (_as_bytes(part) for part in self._frames.pop(0))
            if stdout:
                self._channels[STDOUT_CHANNEL] = self._channels.get(STDOUT_CHANNEL, b"") + stdout
            if stderr:
                self._channels[STDERR_CHANNEL] = self._channels.get(STDERR_CHANNEL, b"") + stderr
        elif self._error is not None:
            raise self._error
        elif self._hang:
            time.sleep(0.01)
            if self.closed and self._error_after_close is not None:
                raise self._error_after_close

    def peek_stdout(self, timeout=0):
        return self._channels.get(STDOUT_CHANNEL, b"")

    def read_stdout(self, timeout=None):
        return self._channels.pop(STDOUT_CHANNEL, b"")

    def peek_stderr(self, timeout=0):
        return self._channels.get(STDERR_CHANNEL, b"")

    def read_stderr(self, timeout=None):
        return self._channels.pop(STDERR_CHANNEL, b"")

    def close(self, **kwargs):
        self.closed = True
        self.close_calls += 1


def make_pod(name="web-0", namespace="shop", phase="Running", containers=("app",)):
    """Build a ``V1Pod`` the way the API server would return it."""
    return client.V1Pod(
        metadata=client.V1ObjectMeta(name=name, namespace=namespace),
        spec=client.V1PodSpec(containers=[client.V1Container(name=c) for c in containers]),
        status=client.V1PodStatus(phase=phase),
    )
