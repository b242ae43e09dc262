"""FastAPI middleware for error handling."""

from .error_handlers import (
    graph_source_handler,
    http_exception_handler,
    internal_exception_handler,
    malformed_input_handler,
    register_error_handlers,
    validation_exception_handler,
)

__all__ = [
    "register_error_handlers",
    "validation_exception_handler",
    "http_exception_handler",
    "malformed_input_handler",
    "graph_source_handler",
    "internal_exception_handler",
]
