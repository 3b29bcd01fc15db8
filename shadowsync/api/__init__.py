"""ShadowSync API layer: routes, schemas, WebSocket, and middleware."""

from shadowsync.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from shadowsync.api.routes import router
from shadowsync.api.schemas import ErrorResponse, HealthResponse
from shadowsync.api.websocket import websocket_events

__all__ = [
    "ErrorHandlingMiddleware",
    "ErrorResponse",
    "HealthResponse",
    "RequestLoggingMiddleware",
    "configure_cors",
    "router",
    "websocket_events",
]
