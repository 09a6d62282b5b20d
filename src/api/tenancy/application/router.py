"""Request router: tenant resolution and admin authentication.

For every inbound request the router classifies the host into a routing
mode, then decides whether the request continues, is rewritten onto the
shared tenant-content namespace, or is redirected. All authentication and
lookup failures fail closed: they produce a redirect, never a default
tenant or an elevated role.

The router holds no per-request state. Its collaborators (stores, token
verifier) are selected once at startup and injected.
"""

from __future__ import annotations

from shared_kernel.auth.errors import InvalidTokenError
from shared_kernel.auth.jwt_validator import TokenVerifier
from shared_kernel.middleware.tenant_context import RoutingContext
from shared_kernel.observability_context import ObservationContext
from tenancy.application.observability import (
    DefaultRequestRouterProbe,
    RequestRouterProbe,
)
from tenancy.domain.routing import (
    HostClassification,
    RoutingConfig,
    RoutingDecision,
    RoutingMode,
    RoutingRequest,
    classify_host,
    has_dot_segment,
    is_under,
)
from tenancy.domain.value_objects import Subdomain
from tenancy.ports.exceptions import StoreError
from tenancy.ports.repositories import ITenantDirectory, IUserStore


def extract_bearer_token(
    authorization: str | None,
    session_token: str | None = None,
) -> str | None:
    """Pick the ID token presented with a request.

    The Authorization header wins. A header that is present but not a
    well-formed ``Bearer <token>`` yields None; the session cookie is only
    consulted when no Authorization header was sent at all.

    Args:
        authorization: Raw Authorization header value, if any.
        session_token: Value of the session cookie, if any.

    Returns:
        The token string, or None when no usable token was presented.
    """
    if authorization is not None:
        parts = authorization.strip().split()
        if len(parts) != 2 or parts[0].lower() != "bearer":
            return None
        return parts[1]

    if session_token is not None and session_token.strip():
        return session_token.strip()
    return None


class RequestRouter:
    """Decides how each inbound request is routed.

    Example:
        router = RequestRouter(
            config=RoutingConfig(apex_domain="booqing.my.id"),
            tenant_directory=directory,
            user_store=users,
            token_verifier=validator,
        )
        decision = await router.route(RoutingRequest(host="acme.booqing.my.id", path="/book"))
    """

    def __init__(
        self,
        config: RoutingConfig,
        tenant_directory: ITenantDirectory,
        user_store: IUserStore,
        token_verifier: TokenVerifier,
        probe: RequestRouterProbe | None = None,
    ):
        self._config = config
        self._tenant_directory = tenant_directory
        self._user_store = user_store
        self._token_verifier = token_verifier
        self._probe = probe or DefaultRequestRouterProbe()

    @property
    def config(self) -> RoutingConfig:
        """The routing configuration this router was built with."""
        return self._config

    def is_excluded(self, path: str) -> bool:
        """Whether ``path`` bypasses routing entirely."""
        return any(is_under(path, prefix) for prefix in self._config.excluded_path_prefixes)

    async def route(self, request: RoutingRequest) -> RoutingDecision:
        """Produce the routing decision for one request.

        Args:
            request: Host, path and credentials of the inbound request.

        Returns:
            The decision. Identical inputs against identical store contents
            always produce identical decisions.
        """
        probe = self._probe.with_context(
            ObservationContext(
                request_id=request.request_id,
                host=request.host,
                path=request.path,
            )
        )
        classification = classify_host(request.host, self._config)

        if self.is_excluded(request.path):
            decision = RoutingDecision.proceed(classification.mode, None)
        else:
            match classification.mode:
                case RoutingMode.LOCAL_DEV:
                    decision = self._route_local(request.path, probe)
                case RoutingMode.APEX_DOMAIN:
                    decision = await self._route_apex(request, probe)
                case RoutingMode.TENANT_SUBDOMAIN:
                    decision = await self._route_tenant(
                        classification, request.path, probe
                    )

        probe.request_routed(
            mode=decision.mode.value,
            action=decision.action.value,
            target=decision.path or decision.location,
            tenant_id=decision.context.tenant_id if decision.context else None,
        )
        return decision

    def _global_context(self, **kwargs: str | None) -> RoutingContext:
        return RoutingContext(tenant_id=self._config.global_tenant_id, **kwargs)

    def _route_local(self, path: str, probe: RequestRouterProbe) -> RoutingDecision:
        """Development routing: no authentication and no directory lookups.

        Tenant paths get a synthesized, prefixed tenant id so that handlers
        can tell it was never verified against the directory. This branch
        only runs for loopback hosts and only when local development is
        enabled in settings.
        """
        config = self._config
        mode = RoutingMode.LOCAL_DEV

        if is_under(path, config.admin_path):
            probe.local_dev_bypass(path)
            return RoutingDecision.proceed(
                mode, self._global_context(role=config.local_dev_role)
            )

        if path.startswith(config.tenant_path_prefix + "/"):
            segment = path[len(config.tenant_path_prefix) + 1 :].split("/", 1)[0]
            if segment:
                return RoutingDecision.proceed(
                    mode,
                    RoutingContext(
                        tenant_id=f"{config.local_tenant_prefix}{segment}",
                        subdomain=segment,
                    ),
                )

        return RoutingDecision.proceed(mode, self._global_context())

    async def _route_apex(
        self, request: RoutingRequest, probe: RequestRouterProbe
    ) -> RoutingDecision:
        """Apex routing: landing page plus the authenticated admin area."""
        config = self._config
        mode = RoutingMode.APEX_DOMAIN
        path = request.path

        if is_under(path, config.admin_path):
            if has_dot_segment(path):
                probe.admin_path_malformed(path)
                return RoutingDecision.redirect(
                    mode, config.login_path, reason="admin_path_malformed"
                )
            if path in (config.login_path, config.login_path + "/"):
                return RoutingDecision.proceed(mode, self._global_context())
            return await self._authenticate_admin(request, probe)

        if path in ("", "/"):
            return RoutingDecision.proceed(mode, self._global_context())

        probe.apex_path_redirected(path)
        return RoutingDecision.redirect(mode, config.admin_path, reason="apex_path")

    async def _authenticate_admin(
        self, request: RoutingRequest, probe: RequestRouterProbe
    ) -> RoutingDecision:
        """Verify the caller's token and user record for an admin path."""
        mode = RoutingMode.APEX_DOMAIN
        login = self._config.login_path

        token = extract_bearer_token(request.authorization, request.session_token)
        if token is None:
            probe.admin_token_missing(request.path)
            return RoutingDecision.redirect(mode, login, reason="token_missing")

        try:
            claims = await self._token_verifier.validate_token(token)
        except InvalidTokenError as e:
            probe.admin_token_rejected(reason=str(e))
            return RoutingDecision.redirect(mode, login, reason="token_invalid")

        try:
            user = await self._user_store.lookup_by_id(claims.sub)
        except StoreError as e:
            probe.store_unavailable(store="user_store", error=e)
            return RoutingDecision.redirect(mode, login, reason="user_store_error")

        if user is None:
            probe.admin_user_not_found(claims.sub)
            return RoutingDecision.redirect(mode, login, reason="user_not_found")

        if not user.is_active:
            probe.admin_user_inactive(user.id)
            return RoutingDecision.redirect(mode, login, reason="user_inactive")

        tenant_id = (
            user.tenant_id.value
            if user.tenant_id is not None
            else self._config.global_tenant_id
        )
        probe.admin_authenticated(
            user_id=user.id, tenant_id=tenant_id, role=user.role.value
        )
        return RoutingDecision.proceed(
            mode,
            RoutingContext(tenant_id=tenant_id, user_id=user.id, role=user.role.value),
        )

    async def _route_tenant(
        self,
        classification: HostClassification,
        path: str,
        probe: RequestRouterProbe,
    ) -> RoutingDecision:
        """Subdomain routing: resolve the tenant and rewrite onto its namespace."""
        config = self._config
        mode = RoutingMode.TENANT_SUBDOMAIN
        fallback = config.apex_admin_url

        label = classification.candidate_label
        if label is None:
            probe.host_unresolvable(classification.hostname)
            return RoutingDecision.redirect(mode, fallback, reason="host_unresolvable")

        try:
            subdomain = Subdomain.normalize(label)
        except ValueError:
            probe.tenant_not_found(label)
            return RoutingDecision.redirect(mode, fallback, reason="tenant_not_found")

        try:
            tenant = await self._tenant_directory.lookup_by_subdomain(subdomain)
        except StoreError as e:
            probe.store_unavailable(store="tenant_directory", error=e)
            return RoutingDecision.redirect(mode, fallback, reason="directory_error")

        if tenant is None:
            probe.tenant_not_found(subdomain.value)
            return RoutingDecision.redirect(mode, fallback, reason="tenant_not_found")

        base = f"{config.tenant_path_prefix}/{tenant.subdomain.value}"
        target = base if path in ("", "/") else f"{base}{path}"
        probe.tenant_resolved(subdomain=tenant.subdomain.value, tenant_id=tenant.id.value)
        return RoutingDecision.rewrite(
            mode,
            target,
            RoutingContext(tenant_id=tenant.id.value, subdomain=tenant.subdomain.value),
        )
