"""
Todo MCP backend package.

Exposes CRUD tools for todo items over an MCP-style JSON-RPC endpoint.
The FastAPI application lives in todo_mcp.main (app).
"""

__version__ = "0.1.0"
