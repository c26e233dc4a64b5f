"""Main entry point for Kube Exec.

Runs one command in a pod and prints the Response envelope as JSON, or with
``--serve`` starts the HTTP/MCP server.
"""

import argparse
import json
import sys

from kube_exec.cluster import connect
from kube_exec.config import KubeExecConfig
from kube_exec.errors import ClusterConnectionError
from kube_exec.executor import KubeExecutor
from kube_exec.logging_utils import configure_root_logger, get_logger
from kube_exec.models import ExecRequest

logger = get_logger("main")


def build_parser(settings: KubeExecConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kube-exec",
        description="Execute a command inside a pod and print the JSON response envelope.",
        usage="%(prog)s [options] POD -- COMMAND [ARG ...]",
    )
    parser.add_argument("pod", nargs="?", default="", help="Name of the target pod")
    parser.add_argument("-n", "--namespace", default=settings.KUBE_EXEC_NAMESPACE, help="Namespace of the pod")
    parser.add_argument("-c", "--container", default="", help="Container name (defaults to the first one)")
    parser.add_argument("--destroy", action="store_true", help="Treat a missing pod as success")
    parser.add_argument("--kubeconfig", default=settings.KUBE_EXEC_KUBECONFIG, help="Path to a kubeconfig file")
    parser.add_argument("--context", default=settings.KUBE_EXEC_CONTEXT, help="Kubeconfig context to use")
    parser.add_argument("--serve", action="store_true", help="Run the HTTP/MCP server instead")
    return parser


def split_command(argv):
    """Split argv at the first '--' into options and the remote command."""
    if "--" not in argv:
        return argv, []
    index = argv.index("--")
    return argv[:index], argv[index + 1:]


def serve(executor: KubeExecutor, settings: KubeExecConfig) -> None:
    import uvicorn

    from kube_exec.app import create_app

    host, port = settings.KUBE_EXEC_HOST, settings.KUBE_EXEC_PORT
    logger.info(f"Starting Kube Exec server on {host}:{port}")
    logger.info(f"MCP endpoint available at: http://{host}:{port}/mcp")
    uvicorn.run(create_app(executor), host=host, port=port)


def main(argv=None) -> int:
    """Run Kube Exec and return the process exit status."""
    settings = KubeExecConfig()
    configure_root_logger(settings.KUBE_EXEC_LOG_LEVEL, settings.KUBE_EXEC_LOG_FILE)
    argv = sys.argv[1:] if argv is None else list(argv)
    argv, commands = split_command(argv)
    args = build_parser(settings).parse_args(argv)

    try:
        cluster = connect(args.kubeconfig, args.context)
    except ClusterConnectionError as e:
        logger.error(f"Failed to create Kubernetes client: {e.message}")
        return 1

    executor = KubeExecutor.from_config(cluster, settings)
    if args.serve:
        serve(executor, settings)
        return 0

    request = ExecRequest(
        namespace=args.namespace,
        pod_name=args.pod,
        container=args.container,
        commands=commands,
    )
    response = executor.execute_command(request, destroy=args.destroy)
    print(json.dumps(response.to_wire()))
    return 0 if response.success else 1


if __name__ == "__main__":
    sys.exit(main())
