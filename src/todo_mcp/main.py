import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routers import mcp as mcp_router
from .settings import Settings, get_settings

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "mcp",
        "description": "MCP JSON-RPC endpoint exposing CRUD tools for todo items.",
    },
]

_settings = get_settings()

logging.basicConfig(
    level=_settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Todo MCP Backend",
    description="MCP tool server for managing todos over JSON-RPC.",
    version="0.1.0",
    openapi_tags=openapi_tags,
)


# PUBLIC_INTERFACE
def configure_cors(target: FastAPI, settings: Settings) -> None:
    """Install CORS handling for the configured origins (CORS_ALLOW_ORIGINS), with '*' fallback."""
    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    target.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )


configure_cors(app, _settings)


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["health"])
def health_check():
    """
    Health check endpoint.

    Returns:
        A JSON object indicating service health.
    """
    return {"message": "Healthy", "backend": _settings.persistence_backend}


# Include routers
app.include_router(mcp_router.router)
