"""Cluster access for Kube Exec.

Builds the handles every exec operation needs from one configuration source:
a typed ``CoreV1Api`` for pod reads, and fresh ``ApiClient`` transports for
websocket upgrades. Both come from the same ``Configuration`` so reads and
streams always authenticate with the same credentials.
"""

from dataclasses import dataclass
from typing import Optional

import yaml
from kubernetes import client, config

from kube_exec import __version__
from kube_exec.errors import ClusterConnectionError
from kube_exec.logging_utils import get_logger

logger = get_logger("cluster")

USER_AGENT = f"kube-exec/{__version__}"


@dataclass(frozen=True)
class ClusterHandle:
    """Caller-owned access to one cluster.

    ``api`` is safe to share between calls. Exec streams must use their own
    transport from ``open_transport()``, since the websocket upgrade rewires
    the request method of the client it runs on.
    """

    configuration: client.Configuration
    api: client.CoreV1Api
    source: str

    def open_transport(self) -> client.ApiClient:
        """Return a new API client bound to the shared credentials."""
        return _new_api_client(self.configuration)


def _new_api_client(configuration: client.Configuration) -> client.ApiClient:
    api_client = client.ApiClient(configuration=configuration)
    api_client.user_agent = USER_AGENT
    return api_client


def _load_configuration(config_source: Optional[str], context: Optional[str]) -> tuple[client.Configuration, str]:
    configuration = client.Configuration()

    if config_source:
        config.load_kube_config(
            config_file=config_source,
            context=context,
            client_configuration=configuration,
            persist_config=False,
        )
        return configuration, config_source

    try:
        # Try in-cluster config first (running inside a pod)
        config.load_incluster_config(client_configuration=configuration)
        return configuration, "in-cluster"
    except config.ConfigException:
        logger.debug("No in-cluster configuration found, falling back to kubeconfig")

    config.load_kube_config(
        context=context,
        client_configuration=configuration,
        persist_config=False,
    )
    return configuration, "kubeconfig"


def connect(config_source: Optional[str] = None, context: Optional[str] = None) -> ClusterHandle:
    """Build a cluster handle from a kubeconfig path or default discovery.

    Args:
        config_source: Path to a kubeconfig file. Empty or None means the
            in-cluster service account, then the default kubeconfig location.
        context: Optional kubeconfig context to select.

    Returns:
        A ClusterHandle holding the read API and the shared configuration.

    Raises:
        ClusterConnectionError: If the configuration source is missing,
            malformed or otherwise unusable.
    """
    logger.info(f"Connecting to cluster using config source: {config_source or '<default discovery>'}")
    try:
        configuration, source = _load_configuration(config_source, context)
    except (config.ConfigException, yaml.YAMLError, OSError, ValueError, TypeError) as e:
        raise ClusterConnectionError(
            f"Cannot load Kubernetes configuration: {e}",
            {"config_source": config_source, "context": context},
        ) from e

    api = client.CoreV1Api(api_client=_new_api_client(configuration))
    logger.info(f"Kubernetes client initialized from {source}: {configuration.host}")
    return ClusterHandle(configuration=configuration, api=api, source=source)
