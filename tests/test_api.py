"""Generation and catalogue API tests."""

from __future__ import annotations

import pytest

from cspkit.api.generate_routes import generate
from cspkit.models.generate import GenerateRequest


class TestGenerateEndpoint:
    def test_generate_from_ids(self, client):
        resp = client.post("/api/generate-csp", json={"services": ["google-fonts"]})
        assert resp.status_code == 200
        body = resp.json()
        assert body["header"] == (
            "style-src 'self' https://fonts.googleapis.com; "
            "font-src 'self' https://fonts.gstatic.com"
        )
        assert body["report_only_header"] == body["header"]
        assert body["included_services"] == ["google-fonts"]
        assert body["unknown_services"] == []
        assert body["nonce"] is None

    def test_aliases_resolved(self, client):
        resp = client.post("/api/generate-csp", json={"services": ["ga4"]})
        assert resp.json()["included_services"] == ["google-analytics"]

    def test_unknown_services_reported(self, client):
        resp = client.post("/api/generate-csp", json={"services": ["stripe", "nope", "missing"]})
        body = resp.json()
        assert body["included_services"] == ["stripe"]
        assert body["unknown_services"] == ["nope", "missing"]
        assert body["warnings"][-1] == "Unknown services: nope, missing"

    def test_nonce_requested(self, client):
        resp = client.post("/api/generate-csp", json={"services": ["stripe"], "nonce": True})
        body = resp.json()
        assert body["nonce"]
        assert f"'nonce-{body['nonce']}'" in body["header"]

    def test_literal_nonce(self, client):
        resp = client.post("/api/generate-csp", json={"services": ["stripe"], "nonce": "abc123"})
        assert resp.json()["nonce"] == "abc123"

    def test_additional_rules_mapping(self, client):
        resp = client.post(
            "/api/generate-csp",
            json={"services": ["google-fonts"], "additional_rules": {"script-src": ["https://custom.com"]}},
        )
        assert "script-src 'self' https://custom.com" in resp.json()["header"]

    def test_additional_rules_string(self, client):
        resp = client.post(
            "/api/generate-csp",
            json={"services": [], "additional_rules": "script-src https://a.com; img-src data:"},
        )
        assert resp.json()["header"] == "script-src 'self' https://a.com; img-src 'self' data:"

    def test_report_uri(self, client):
        resp = client.post("/api/generate-csp", json={"services": ["stripe"], "report_uri": "/csp"})
        assert resp.json()["header"].endswith("report-uri /csp")

    def test_malformed_body(self, client):
        resp = client.post("/api/generate-csp", json={"services": "stripe"})
        assert resp.status_code == 422

    def test_invalid_environment(self, client):
        resp = client.post("/api/generate-csp", json={"services": [], "environment": "staging"})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_route_function_directly(self):
        body = await generate(GenerateRequest(services=["sentry", "ghost"]))
        assert body["included_services"] == ["sentry"]
        assert body["unknown_services"] == ["ghost"]


class TestServicesEndpoints:
    def test_list_services(self, client):
        resp = client.get("/api/services")
        assert resp.status_code == 200
        ids = [s["id"] for s in resp.json()]
        assert "stripe" in ids
        assert "google-fonts" in ids

    def test_search_services(self, client):
        resp = client.get("/api/services", params={"q": "gfonts"})
        assert [s["id"] for s in resp.json()] == ["google-fonts"]

    def test_get_service_by_alias(self, client):
        resp = client.get("/api/services/gtm")
        assert resp.status_code == 200
        body = resp.json()
        assert body["id"] == "google-tag-manager"
        assert body["requires_nonce"] is True
        assert body["directives"]["script-src"][0] == "https://www.googletagmanager.com"

    def test_deprecated_service_detail(self, client):
        body = client.get("/api/services/google-optimize").json()
        assert body["deprecated"]["alternative"] == "google-analytics"

    def test_unknown_service_404(self, client):
        resp = client.get("/api/services/no-such-service")
        assert resp.status_code == 404


class TestHealth:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "healthy"
        assert body["environment"] == "development"
        assert body["services"] > 0
