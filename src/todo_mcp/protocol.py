"""
JSON-RPC handling for the MCP endpoint.

McpProtocol turns a raw request body into a response envelope: it decodes
the envelope, routes tools/list and tools/call, validates tool arguments
against the per-tool payload models and maps failures onto JSON-RPC error
codes. It knows nothing about HTTP.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple, Type, Union

from pydantic import BaseModel, ValidationError

from .repositories import PersistenceError, Repository
from .schemas import (
    CreateTodoArgs,
    DeleteTodoArgs,
    JsonRpcError,
    JsonRpcRequest,
    ReadTodosArgs,
    ToolCallParams,
    UpdateTodoArgs,
)
from .tools import TodoTools, ToolArgumentError

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"

PARSE_ERROR = -32700
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

_DATE_TIME = {"type": "string", "format": "date-time"}

TOOL_CATALOG: List[Dict[str, Any]] = [
    {
        "name": "create_todo",
        "description": "Creates a new todo with a description and creation date.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "description": {"type": "string", "description": "Description of the todo"},
                "createdDate": {**_DATE_TIME, "description": "Creation date of the todo (RFC3339)"},
            },
            "required": ["description", "createdDate"],
        },
    },
    {
        "name": "read_todos",
        "description": "Reads all todos, or a single todo if an id is provided.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Id of the todo to read (optional)"},
            },
        },
    },
    {
        "name": "update_todo",
        "description": "Updates the specified todo fields by id.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Id of the todo to update"},
                "description": {"type": "string", "description": "New description (optional)"},
                "createdDate": {**_DATE_TIME, "description": "New creation date (optional, RFC3339)"},
            },
            "required": ["id"],
        },
    },
    {
        "name": "delete_todo",
        "description": "Deletes a todo by id.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Id of the todo to delete"},
            },
            "required": ["id"],
        },
    },
]

ToolHandler = Callable[[TodoTools, Any], str]

# Tool name -> (argument payload model, dispatcher method)
_TOOLS: Dict[str, Tuple[Type[BaseModel], ToolHandler]] = {
    "create_todo": (CreateTodoArgs, TodoTools.create_todo),
    "read_todos": (ReadTodosArgs, TodoTools.read_todos),
    "update_todo": (UpdateTodoArgs, TodoTools.update_todo),
    "delete_todo": (DeleteTodoArgs, TodoTools.delete_todo),
}


class McpError(Exception):
    """A failure that is reported to the caller as a JSON-RPC error."""

    def __init__(self, code: int, message: str, data: Optional[Any] = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def to_error(self) -> JsonRpcError:
        return JsonRpcError(code=self.code, message=self.message, data=self.data)


def _invalid_arguments(exc: ValidationError) -> McpError:
    fields = [".".join(str(p) for p in err["loc"]) for err in exc.errors()]
    message = f"Missing or invalid {fields[0]}" if fields else "Invalid params"
    return McpError(INVALID_PARAMS, message, data={"fields": fields})


# PUBLIC_INTERFACE
def success_envelope(request_id: Any, result: Any) -> Dict[str, Any]:
    """Build a JSON-RPC success response."""
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


# PUBLIC_INTERFACE
def error_envelope(request_id: Any, error: JsonRpcError) -> Dict[str, Any]:
    """Build a JSON-RPC error response; data is omitted when there is none."""
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "error": error.model_dump(exclude_none=True),
    }


# PUBLIC_INTERFACE
class McpProtocol:
    """
    Stateless JSON-RPC request handler for the todo tools.

    handle() never raises for protocol-level problems; it returns the
    response envelope and whether it carries an error.
    """

    def __init__(self, repo: Repository) -> None:
        self._tools = TodoTools(repo)

    def handle(self, body: Union[bytes, str]) -> Tuple[Dict[str, Any], bool]:
        """Process one raw request body. Return (response envelope, is_error)."""
        try:
            request = self._decode(body)
        except McpError as exc:
            logger.warning("Rejected undecodable request: %s", exc.message)
            return error_envelope(None, exc.to_error()), True

        try:
            result = self._route(request)
        except McpError as exc:
            logger.warning("Request %r failed with %d: %s", request.id, exc.code, exc.message)
            return error_envelope(request.id, exc.to_error()), True
        return success_envelope(request.id, result), False

    def _decode(self, body: Union[bytes, str]) -> JsonRpcRequest:
        try:
            payload = json.loads(body)
        except (ValueError, RecursionError) as exc:
            raise McpError(PARSE_ERROR, "Parse error") from exc
        if not isinstance(payload, dict):
            raise McpError(PARSE_ERROR, "Parse error")
        try:
            return JsonRpcRequest.model_validate(payload)
        except ValidationError as exc:
            raise McpError(PARSE_ERROR, "Parse error") from exc

    def _route(self, request: JsonRpcRequest) -> Dict[str, Any]:
        if request.method == "tools/list":
            return {"tools": TOOL_CATALOG}
        if request.method == "tools/call":
            return self._call_tool(request.params)
        raise McpError(METHOD_NOT_FOUND, "Method not found")

    def _call_tool(self, params: Any) -> Dict[str, Any]:
        if not isinstance(params, dict):
            raise McpError(INVALID_PARAMS, "Invalid params")
        try:
            call = ToolCallParams.model_validate(params)
        except ValidationError as exc:
            raise McpError(INVALID_PARAMS, "Missing tool name") from exc

        tool = _TOOLS.get(call.name)
        if tool is None:
            raise McpError(METHOD_NOT_FOUND, "Unknown tool")
        args_model, handler = tool

        try:
            args = args_model.model_validate(call.arguments)
        except ValidationError as exc:
            raise _invalid_arguments(exc) from exc

        logger.info("Calling tool %s", call.name)
        try:
            text = handler(self._tools, args)
        except ToolArgumentError as exc:
            raise McpError(INVALID_PARAMS, str(exc)) from exc
        except PersistenceError as exc:
            logger.exception("Tool %s failed in storage", call.name)
            raise McpError(INTERNAL_ERROR, "Internal error") from exc

        return {"content": [{"type": "text", "text": text}]}
