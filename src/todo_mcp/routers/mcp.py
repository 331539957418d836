from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from ..protocol import McpProtocol
from ..repositories import Repository, get_repository

router = APIRouter(
    prefix="/api",
    tags=["mcp"],
)


def _get_protocol(repo: Repository = Depends(get_repository)) -> McpProtocol:
    """
    Dependency wrapper building the protocol handler around the configured repository.
    """
    return McpProtocol(repo)


# PUBLIC_INTERFACE
@router.post(
    "/mcp",
    summary="MCP JSON-RPC",
    description=(
        "Handle one MCP JSON-RPC request.\n\n"
        "Supported methods:\n"
        "- tools/list: catalog of the todo tools\n"
        "- tools/call: invoke create_todo, read_todos, update_todo or delete_todo\n\n"
        "Error envelopes are returned with status 400."
    ),
    responses={
        200: {"description": "JSON-RPC result envelope"},
        400: {"description": "JSON-RPC error envelope"},
    },
)
async def handle_mcp(request: Request, protocol: McpProtocol = Depends(_get_protocol)) -> JSONResponse:
    """
    Decode, route and answer a JSON-RPC request. Storage work runs in the thread pool.
    """
    body = await request.body()
    envelope, is_error = await run_in_threadpool(protocol.handle, body)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST if is_error else status.HTTP_200_OK,
        content=envelope,
    )


# PUBLIC_INTERFACE
@router.options(
    "/mcp",
    summary="MCP pre-flight",
    description="Acknowledge a pre-flight request without routing it.",
    responses={200: {"description": "Acknowledged"}},
)
def preflight_mcp() -> Response:
    """
    Answer OPTIONS with an empty body.
    """
    return Response(status_code=status.HTTP_200_OK)
