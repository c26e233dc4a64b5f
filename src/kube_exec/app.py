"""
Kube Exec HTTP server - exposes the exec operation over REST and as an MCP tool using fastapi-mcp.
"""
import asyncio

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi_mcp import FastApiMCP
from pydantic import Field

from kube_exec import __version__
from kube_exec.executor import KubeExecutor
from kube_exec.logging_utils import get_logger
from kube_exec.models import ExecRequest, Response

logger = get_logger("app")


# --- Pydantic Models ---
class ExecCommandRequest(ExecRequest):
    destroy: bool = Field(False, description="Treat a missing pod as success (teardown flows)")

    def to_exec_request(self) -> ExecRequest:
        return ExecRequest(**self.model_dump(exclude={"destroy"}))


def get_executor(request: Request) -> KubeExecutor:
    return request.app.state.executor


def create_app(executor: KubeExecutor) -> FastAPI:
    """Build the FastAPI app around a caller-owned executor.

    The ``exec_command`` operation is also mounted as an MCP tool.
    """
    app = FastAPI(
        title="Kube Exec",
        description="Run a command inside a Kubernetes pod and collect a structured result.",
        version=__version__,
    )
    app.state.executor = executor

    @app.post(
        "/exec",
        response_model=Response,
        operation_id="exec_command",
        summary="Execute a command in a pod",
        description="Execute a command inside a pod container and return the response envelope it prints.",
    )
    async def exec_command(req: ExecCommandRequest, executor: KubeExecutor = Depends(get_executor)):
        """
        Execute a command in a pod.

        The executor blocks while the exec stream is open, so it runs in a worker thread.
        The body uses the same wire form as the command-line output.
        """
        response = await asyncio.to_thread(executor.execute_command, req.to_exec_request(), req.destroy)
        return JSONResponse(response.to_wire())

    @app.get("/health", summary="Health check", description="Check if the server is running and healthy.")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    # Only the exec endpoint becomes an MCP tool
    mcp = FastApiMCP(
        app,
        name="Kube Exec",
        description="Execute commands inside Kubernetes pods",
        include_operations=["exec_command"],
    )
    mcp.mount()

    return app
