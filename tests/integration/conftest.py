# File: tests/integration/conftest.py
import os
import subprocess
import uuid
from contextlib import contextmanager

import pytest


class KubernetesClusterManager:
    """Manager class for Kubernetes cluster operations during tests."""

    def __init__(self):
        self.context = os.environ.get("KUBE_EXEC_CONTEXT")
        self.skip_cleanup = os.environ.get("KUBE_EXEC_SKIP_CLEANUP", "").lower() == "true"

    def kubectl(self, *args, timeout=30):
        """Run kubectl against the configured context."""
        cmd = ["kubectl", *args] + (["--context", self.context] if self.context else [])
        return subprocess.run(cmd, check=True, capture_output=True, text=True, timeout=timeout)

    def verify_connection(self):
        """Verify connection to the Kubernetes cluster."""
        try:
            result = self.kubectl("cluster-info", timeout=20)
            print(f"Cluster connection verified:\n{result.stdout[:200]}...")
            return True
        except Exception as e:
            print(f"Cluster connection failed: {str(e)}")
            return False

    def create_namespace(self):
        """Create a uniquely named test namespace."""
        name = f"kube-exec-test-{uuid.uuid4().hex[:8]}"
        self.kubectl("create", "namespace", name, timeout=10)
        print(f"Created test namespace: {name}")
        return name

    def delete_namespace(self, name):
        """Delete the specified namespace."""
        if self.skip_cleanup:
            print(f"Skipping cleanup of namespace {name} as requested")
            return

        try:
            self.kubectl("delete", "namespace", name, "--wait=false", timeout=10)
            print(f"Deleted test namespace: {name}")
        except Exception as e:
            print(f"Warning: Failed to delete namespace {name}: {str(e)}")

    def run_pod(self, namespace, name, container="main", image="busybox:1.36"):
        """Start a long-running pod and wait until it is ready."""
        overrides = (
            '{"spec": {"containers": [{"name": "%s", "image": "%s", "command": ["sleep", "3600"]}]}}'
            % (container, image)
        )
        self.kubectl("run", name, "-n", namespace, f"--image={image}", "--restart=Never", f"--overrides={overrides}")
        self.kubectl("wait", "--for=condition=Ready", f"pod/{name}", "-n", namespace, "--timeout=120s", timeout=130)

    @contextmanager
    def temp_namespace(self):
        """Context manager for a temporary namespace."""
        name = self.create_namespace()
        try:
            yield name
        finally:
            self.delete_namespace(name)


@pytest.fixture(scope="session")
def k8s_cluster():
    """Fixture that provides a KubernetesClusterManager.

    Integration tests only run when KUBE_EXEC_TEST_USE_EXISTING_CLUSTER=true
    and the cluster from the current kubeconfig is reachable.
    """
    if os.environ.get("KUBE_EXEC_TEST_USE_EXISTING_CLUSTER", "false").lower() != "true":
        pytest.skip("Set KUBE_EXEC_TEST_USE_EXISTING_CLUSTER=true to run integration tests")

    manager = KubernetesClusterManager()
    if not manager.verify_connection():
        pytest.skip("Cannot connect to Kubernetes cluster")

    return manager


@pytest.fixture
def k8s_namespace(k8s_cluster):
    """Fixture that provides a temporary namespace for tests."""
    with k8s_cluster.temp_namespace() as name:
        yield name
