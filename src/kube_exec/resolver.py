"""Resolution of an exec request to a concrete container.

The pod is read fresh on every call; nothing here is cached because pod
phase and container list can change between requests.
"""

from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError

from kube_exec.config import DEFAULT_NAMESPACE
from kube_exec.errors import ResolutionError, ResolutionFailure
from kube_exec.logging_utils import get_logger
from kube_exec.models import ExecRequest, PodSnapshot, ResolvedTarget

logger = get_logger("resolver")


def fetch_pod(api, namespace: str, pod_name: str) -> PodSnapshot:
    """Read the pod and reduce it to the fields resolution needs.

    Raises:
        ResolutionError: POD_NOT_FOUND on HTTP 404, POD_LOOKUP_FAILED on any
            other API error or when the API server cannot be reached.
    """
    try:
        pod = api.read_namespaced_pod(name=pod_name, namespace=namespace)
    except ApiException as e:
        details = {"namespace": namespace, "pod": pod_name, "status": e.status}
        if e.status == 404:
            raise ResolutionError(ResolutionFailure.POD_NOT_FOUND, f'pods "{pod_name}" not found', details) from e
        raise ResolutionError(
            ResolutionFailure.POD_LOOKUP_FAILED,
            f"get pod {namespace}/{pod_name} got error: ({e.status}) {e.reason}",
            details,
        ) from e
    except (HTTPError, OSError) as e:
        raise ResolutionError(
            ResolutionFailure.POD_LOOKUP_FAILED,
            f"get pod {namespace}/{pod_name} got error: {e}",
            {"namespace": namespace, "pod": pod_name},
        ) from e
    return PodSnapshot.from_pod(pod)


def select_container(snapshot: PodSnapshot, requested: str, pod_name: str) -> str:
    """Pick the container to exec into.

    An empty ``requested`` defaults to the first declared container; otherwise
    the name must match a declared container exactly.
    """
    if not requested:
        if not snapshot.containers:
            raise ResolutionError(
                ResolutionFailure.CONTAINER_NOT_FOUND,
                f"pod {pod_name} does not declare any containers",
                {"pod": pod_name},
            )
        if len(snapshot.containers) > 1:
            logger.warning(f"Defaulting container name to {snapshot.containers[0]}.")
        return snapshot.containers[0]

    if requested not in snapshot.containers:
        raise ResolutionError(
            ResolutionFailure.CONTAINER_NOT_FOUND,
            f"container name: {requested} not found in pod {pod_name}",
            {"pod": pod_name, "container": requested, "containers": snapshot.containers},
        )
    return requested


def resolve(api, request: ExecRequest) -> ResolvedTarget:
    """Validate a request against live cluster state.

    Args:
        api: A ``CoreV1Api`` (or anything with ``read_namespaced_pod``)
        request: The caller's request; it is never modified

    Returns:
        The namespace, pod and container to exec into.

    Raises:
        ResolutionError: If the pod name is empty, the pod cannot be read,
            has finished, or does not have the requested container.
    """
    if not request.pod_name:
        raise ResolutionError(
            ResolutionFailure.EMPTY_POD_NAME,
            "can not execute command with empty pod name",
            {"namespace": request.namespace},
        )

    namespace = request.namespace or DEFAULT_NAMESPACE
    snapshot = fetch_pod(api, namespace, request.pod_name)

    if snapshot.completed:
        raise ResolutionError(
            ResolutionFailure.POD_COMPLETED,
            f"cannot exec into a container in a completed pod; current phase is {snapshot.phase}",
            {"namespace": namespace, "pod": request.pod_name, "phase": snapshot.phase},
        )

    container = select_container(snapshot, request.container, request.pod_name)
    return ResolvedTarget(namespace=namespace, pod_name=request.pod_name, container_name=container)
