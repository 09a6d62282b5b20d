"""Unit tests for host classification and routing decisions."""

from __future__ import annotations

import pytest

from shared_kernel.middleware.tenant_context import RoutingContext
from tenancy.domain.routing import (
    RoutingAction,
    RoutingConfig,
    RoutingDecision,
    RoutingMode,
    classify_host,
    is_under,
    split_hostname,
)


@pytest.fixture
def config() -> RoutingConfig:
    return RoutingConfig(apex_domain="booqing.my.id", local_dev_enabled=True)


class TestSplitHostname:
    """Tests for host header normalization."""

    @pytest.mark.parametrize(
        ("host", "expected"),
        [
            ("Acme.Booqing.My.Id", "acme.booqing.my.id"),
            ("localhost:3000", "localhost"),
            ("[::1]:3000", "::1"),
            ("::1", "::1"),
            ("booqing.my.id.", "booqing.my.id"),
            ("", ""),
        ],
    )
    def test_split_hostname(self, host: str, expected: str) -> None:
        assert split_hostname(host) == expected


class TestIsUnder:
    """Tests for segment-aware path prefix matching."""

    def test_exact_match(self) -> None:
        assert is_under("/admin", "/admin")

    def test_nested_path(self) -> None:
        assert is_under("/admin/tenants/1", "/admin")

    def test_sibling_with_shared_prefix(self) -> None:
        assert not is_under("/administrator", "/admin")

    def test_root_prefix_matches_everything(self) -> None:
        assert is_under("/anything", "/")


class TestClassifyHost:
    """Tests for classify_host."""

    @pytest.mark.parametrize(
        "host",
        ["localhost", "localhost:3000", "127.0.0.1:8000", "[::1]:3000", "app.localhost"],
    )
    def test_loopback_hosts_are_local_dev(self, host: str, config: RoutingConfig) -> None:
        assert classify_host(host, config).mode is RoutingMode.LOCAL_DEV

    def test_loopback_matching_is_exact(self, config: RoutingConfig) -> None:
        """A tenant named like a loopback host is not local development."""
        result = classify_host("localhostspa.booqing.my.id", config)
        assert result.mode is RoutingMode.TENANT_SUBDOMAIN
        assert result.candidate_label == "localhostspa"

    def test_local_dev_can_be_disabled(self) -> None:
        config = RoutingConfig(apex_domain="booqing.my.id", local_dev_enabled=False)

        result = classify_host("localhost:3000", config)

        assert result.mode is RoutingMode.TENANT_SUBDOMAIN
        assert result.candidate_label == "localhost"

    @pytest.mark.parametrize(
        "host",
        [
            "booqing.my.id",
            "BOOQING.MY.ID:443",
            "www.booqing.my.id",
            "booqing.vercel.app",
        ],
    )
    def test_apex_variants(self, host: str, config: RoutingConfig) -> None:
        assert classify_host(host, config).mode is RoutingMode.APEX_DOMAIN

    def test_platform_label_match_is_whole_label(self, config: RoutingConfig) -> None:
        result = classify_host("booqingfan.booqing.my.id", config)

        assert result.mode is RoutingMode.TENANT_SUBDOMAIN
        assert result.candidate_label == "booqingfan"

    def test_tenant_subdomain_label(self, config: RoutingConfig) -> None:
        result = classify_host("AcmeSpa.booqing.my.id", config)

        assert result.mode is RoutingMode.TENANT_SUBDOMAIN
        assert result.hostname == "acmespa.booqing.my.id"
        assert result.candidate_label == "acmespa"

    def test_reserved_label_on_foreign_domain_has_no_candidate(
        self, config: RoutingConfig
    ) -> None:
        result = classify_host("www.other.com", config)

        assert result.mode is RoutingMode.TENANT_SUBDOMAIN
        assert result.candidate_label is None

    def test_empty_host_has_no_candidate(self, config: RoutingConfig) -> None:
        result = classify_host("", config)

        assert result.mode is RoutingMode.TENANT_SUBDOMAIN
        assert result.candidate_label is None

    def test_custom_reserved_labels(self) -> None:
        config = RoutingConfig(
            apex_domain="booqing.my.id", reserved_labels=frozenset({"www", "api"})
        )
        assert classify_host("api.booqing.my.id", config).mode is RoutingMode.APEX_DOMAIN


class TestRoutingConfig:
    """Tests for derived configuration values."""

    def test_platform_label(self, config: RoutingConfig) -> None:
        assert config.platform_label == "booqing"

    def test_reserved_labels_include_platform_label(self, config: RoutingConfig) -> None:
        assert config.all_reserved_labels == {"www", "booqing"}

    def test_apex_admin_url(self, config: RoutingConfig) -> None:
        assert config.apex_admin_url == "https://booqing.my.id/admin"


class TestRoutingDecision:
    """Tests for decision constructors."""

    def test_proceed(self) -> None:
        context = RoutingContext(tenant_id="global")
        decision = RoutingDecision.proceed(RoutingMode.APEX_DOMAIN, context)

        assert decision.action is RoutingAction.CONTINUE
        assert decision.context is context
        assert decision.path is None

    def test_rewrite(self) -> None:
        context = RoutingContext(tenant_id="t", subdomain="acme")
        decision = RoutingDecision.rewrite(
            RoutingMode.TENANT_SUBDOMAIN, "/tenant/acme/book", context
        )

        assert decision.action is RoutingAction.REWRITE
        assert decision.path == "/tenant/acme/book"

    def test_redirect_carries_no_context(self) -> None:
        decision = RoutingDecision.redirect(
            RoutingMode.APEX_DOMAIN, "/admin/login", reason="token_missing"
        )

        assert decision.action is RoutingAction.REDIRECT
        assert decision.location == "/admin/login"
        assert decision.context is None

    def test_reason_does_not_affect_equality(self) -> None:
        a = RoutingDecision.redirect(RoutingMode.APEX_DOMAIN, "/admin/login", "x")
        b = RoutingDecision.redirect(RoutingMode.APEX_DOMAIN, "/admin/login", "y")
        assert a == b
