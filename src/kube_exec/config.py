"""Configuration settings for Kube Exec.

Settings are loaded from environment variables using Pydantic, so the
process entry points and the HTTP app share a single source of defaults.
"""

from typing import Optional

from pydantic_settings import BaseSettings


class KubeExecConfig(BaseSettings):
    """
    Defines all configuration settings.
    Settings are loaded from environment variables (case-insensitive).
    Example: set KUBE_EXEC_STREAM_TIMEOUT=30 to bound how long an exec stream may run.
    """
    # Cluster access
    KUBE_EXEC_KUBECONFIG: Optional[str] = None  # empty means in-cluster, then ~/.kube/config
    KUBE_EXEC_CONTEXT: Optional[str] = None
    KUBE_EXEC_NAMESPACE: str = "default"

    # Exec stream settings
    KUBE_EXEC_STREAM_TIMEOUT: Optional[float] = None
    KUBE_EXEC_RAW_OUTPUT: bool = False

    # Logging
    KUBE_EXEC_LOG_LEVEL: str = "INFO"
    KUBE_EXEC_LOG_FILE: Optional[str] = None

    # HTTP server
    KUBE_EXEC_HOST: str = "0.0.0.0"
    KUBE_EXEC_PORT: int = 9096


# --- Application-level constants below ---

DEFAULT_NAMESPACE = "default"

# Pod phases that can no longer accept exec streams.
TERMINAL_POD_PHASES = frozenset({"Succeeded", "Failed"})

# How long the stream pump waits for a frame before re-checking the socket.
PUMP_POLL_SECONDS = 1.0

# How often a foreground reader with a deadline or cancel signal wakes up.
READ_POLL_SECONDS = 0.1

# How long a stopped exec session may take to wind down its pump thread.
STOP_JOIN_SECONDS = 2.0
