"""Application layer for the tenancy bounded context."""

from tenancy.application.router import RequestRouter, extract_bearer_token

__all__ = [
    "RequestRouter",
    "extract_bearer_token",
]
