"""Routing modes, decisions and host classification.

Every request is classified into exactly one routing mode from its host
header before any routing decision is made. Classification is a pure
function of the host and the routing configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from shared_kernel.middleware.tenant_context import RoutingContext


class RoutingMode(StrEnum):
    """Mutually exclusive environments a request can arrive in."""

    LOCAL_DEV = "local_dev"
    APEX_DOMAIN = "apex_domain"
    TENANT_SUBDOMAIN = "tenant_subdomain"


class RoutingAction(StrEnum):
    """What the middleware does with a request."""

    CONTINUE = "continue"
    REWRITE = "rewrite"
    REDIRECT = "redirect"


@dataclass(frozen=True)
class RoutingConfig:
    """Platform layout consumed by host classification and the router.

    Built once at startup from settings and injected into the router.
    """

    apex_domain: str
    apex_scheme: str = "https"
    reserved_labels: frozenset[str] = frozenset({"www"})
    local_dev_enabled: bool = False
    loopback_hosts: frozenset[str] = frozenset({"localhost", "127.0.0.1", "::1"})
    admin_path: str = "/admin"
    login_path: str = "/admin/login"
    tenant_path_prefix: str = "/tenant"
    global_tenant_id: str = "global"
    local_dev_role: str = "admin"
    local_tenant_prefix: str = "local:"
    excluded_path_prefixes: tuple[str, ...] = ()
    session_cookie_name: str = "session"

    @property
    def platform_label(self) -> str:
        """First label of the apex domain."""
        return self.apex_domain.split(".")[0]

    @property
    def all_reserved_labels(self) -> frozenset[str]:
        """Reserved labels including the platform's own label."""
        return self.reserved_labels | {self.platform_label}

    @property
    def apex_admin_url(self) -> str:
        """Absolute URL of the admin entry point on the apex domain."""
        return f"{self.apex_scheme}://{self.apex_domain}{self.admin_path}"


@dataclass(frozen=True)
class HostClassification:
    """Result of classifying a host header.

    Attributes:
        mode: The routing mode the request runs in.
        hostname: Lower-cased host without port.
        candidate_label: Leading label to look up as a tenant subdomain.
            Only set in TENANT_SUBDOMAIN mode, and None there when the host
            cannot name a tenant at all.
    """

    mode: RoutingMode
    hostname: str
    candidate_label: str | None = None


@dataclass(frozen=True)
class RoutingRequest:
    """The parts of an HTTP request the router looks at."""

    host: str
    path: str
    authorization: str | None = None
    session_token: str | None = None
    request_id: str | None = None


@dataclass(frozen=True)
class RoutingDecision:
    """Outcome of routing one request.

    Attributes:
        action: Continue, rewrite or redirect.
        mode: Routing mode the request was classified into.
        context: Routing context to attach (never set on redirects).
        path: New path for REWRITE decisions.
        location: Target URL or path for REDIRECT decisions.
    """

    action: RoutingAction
    mode: RoutingMode
    context: RoutingContext | None = None
    path: str | None = None
    location: str | None = None
    reason: str | None = field(default=None, compare=False)

    @classmethod
    def proceed(
        cls, mode: RoutingMode, context: RoutingContext | None
    ) -> RoutingDecision:
        """Let the request through on its original path."""
        return cls(action=RoutingAction.CONTINUE, mode=mode, context=context)

    @classmethod
    def rewrite(
        cls, mode: RoutingMode, path: str, context: RoutingContext
    ) -> RoutingDecision:
        """Serve the request from ``path`` instead of its original path."""
        return cls(action=RoutingAction.REWRITE, mode=mode, context=context, path=path)

    @classmethod
    def redirect(
        cls, mode: RoutingMode, location: str, reason: str | None = None
    ) -> RoutingDecision:
        """Send the caller elsewhere."""
        return cls(
            action=RoutingAction.REDIRECT,
            mode=mode,
            location=location,
            reason=reason,
        )


def split_hostname(host: str) -> str:
    """Lower-case a host header value and strip its port.

    Handles bracketed IPv6 literals (``[::1]:3000``) and bare IPv6
    addresses, which contain colons but no port.
    """
    host = host.strip().lower()
    if host.startswith("["):
        end = host.find("]")
        return host[1:end] if end != -1 else host[1:]
    if host.count(":") == 1:
        host = host.split(":", 1)[0]
    return host.rstrip(".")


def is_under(path: str, prefix: str) -> bool:
    """Whether ``path`` equals ``prefix`` or lies beneath it.

    Matching is segment aware: ``/administrator`` is not under ``/admin``.
    """
    if prefix == "/":
        return True
    return path == prefix or path.startswith(prefix + "/")


def has_dot_segment(path: str) -> bool:
    """Whether ``path`` contains a ``.`` or ``..`` segment."""
    return any(segment in (".", "..") for segment in path.split("/"))


def is_loopback(hostname: str, config: RoutingConfig) -> bool:
    """Whether ``hostname`` names the local machine."""
    return hostname in config.loopback_hosts or hostname.endswith(".localhost")


def is_apex_variant(hostname: str, config: RoutingConfig) -> bool:
    """Whether ``hostname`` is the apex domain or one of its platform aliases.

    Aliases are ``{reserved label}.{apex}`` and any host whose leading label
    is the platform label (preview and alternate deployments).
    """
    apex = config.apex_domain
    if hostname == apex:
        return True
    if any(hostname == f"{label}.{apex}" for label in config.reserved_labels):
        return True
    return hostname.startswith(config.platform_label + ".")


def classify_host(host: str, config: RoutingConfig) -> HostClassification:
    """Classify a host header into a routing mode.

    Args:
        host: Raw Host header value, port included.
        config: Platform routing configuration.

    Returns:
        The classification. Exactly one mode applies to every host.
    """
    hostname = split_hostname(host)

    if config.local_dev_enabled and is_loopback(hostname, config):
        return HostClassification(mode=RoutingMode.LOCAL_DEV, hostname=hostname)

    if hostname and is_apex_variant(hostname, config):
        return HostClassification(mode=RoutingMode.APEX_DOMAIN, hostname=hostname)

    label = hostname.split(".")[0] if hostname else ""
    if not label or label in config.all_reserved_labels:
        return HostClassification(
            mode=RoutingMode.TENANT_SUBDOMAIN,
            hostname=hostname,
            candidate_label=None,
        )

    return HostClassification(
        mode=RoutingMode.TENANT_SUBDOMAIN,
        hostname=hostname,
        candidate_label=label,
    )
