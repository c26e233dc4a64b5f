"""Test fixtures for the Kube Exec tests."""

from unittest.mock import MagicMock

import pytest

from kube_exec.models import ResolvedTarget
from tests.helpers import make_pod


@pytest.fixture
def mock_api():
    """Fixture for a CoreV1Api whose pod read returns a running single-container pod."""
    api = MagicMock()
    api.read_namespaced_pod.return_value = make_pod()
    return api


@pytest.fixture
def mock_cluster(mock_api):
    """Fixture for a ClusterHandle built around ``mock_api``."""
    cluster = MagicMock()
    cluster.api = mock_api
    return cluster


@pytest.fixture
def target():
    """Fixture for an already resolved exec target."""
    return ResolvedTarget(namespace="shop", pod_name="web-0", container_name="app")
