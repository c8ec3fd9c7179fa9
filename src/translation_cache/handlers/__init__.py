"""Handler layer for HTTP endpoints.

This layer contains the HTTP request/response handlers.
Handlers depend on services (business logic), not directly on repositories.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)
"""

from .translation_handler import TranslationHandler, inference_error_to_http

__all__ = [
    "TranslationHandler",
    "inference_error_to_http",
]
