"""Observability for tenancy application services."""

from tenancy.application.observability.router_probe import (
    DefaultRequestRouterProbe,
    RequestRouterProbe,
)

__all__ = [
    "DefaultRequestRouterProbe",
    "RequestRouterProbe",
]
