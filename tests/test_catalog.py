"""Tests for the bundled service catalogue."""

from __future__ import annotations

from cspkit.catalog.registry import (
    get_service,
    load_catalog,
    reset_catalog_cache,
    resolve_services,
    search_services,
)
from cspkit.generator.core import generate_csp


class TestLoadCatalog:
    def test_bundled_catalog_loads(self):
        catalog = load_catalog()
        assert "google-analytics" in catalog
        assert "google-fonts" in catalog
        assert catalog["stripe"].category == "payment"

    def test_cached_after_first_load(self):
        assert load_catalog() is load_catalog()

    def test_reset_cache(self):
        first = load_catalog()
        reset_catalog_cache()
        assert load_catalog() is not first

    def test_missing_file_gives_empty_catalog(self, tmp_path):
        assert load_catalog(tmp_path / "missing.yaml") == {}

    def test_invalid_entries_skipped(self, tmp_path):
        path = tmp_path / "services.yaml"
        path.write_text(
            "good:\n"
            "  name: Good\n"
            "  category: cdn\n"
            "  directives:\n"
            "    script-src: [https://good.example.com]\n"
            "no-name:\n"
            "  category: cdn\n"
            "  directives: {}\n"
            "scalar: just a string\n"
        )
        catalog = load_catalog(path)
        assert list(catalog) == ["good"]

    def test_catalog_path_from_settings(self, tmp_path, monkeypatch):
        import cspkit.config.loader as loader

        path = tmp_path / "services.yaml"
        path.write_text("only:\n  name: Only\n  category: cdn\n  directives: {}\n")
        monkeypatch.setenv("CSPKIT_CATALOG_FILE", str(path))
        loader._settings = None
        assert list(load_catalog()) == ["only"]

    def test_deprecated_entry(self):
        optimize = load_catalog()["google-optimize"]
        assert optimize.deprecated is not None
        assert optimize.deprecated.alternative == "google-analytics"


class TestLookup:
    def test_by_id(self):
        assert get_service("stripe").id == "stripe"

    def test_by_alias(self):
        assert get_service("ga4").id == "google-analytics"
        assert get_service("gtm").id == "google-tag-manager"

    def test_case_insensitive(self):
        assert get_service("Google-Fonts").id == "google-fonts"
        assert get_service("GFONTS").id == "google-fonts"

    def test_unknown(self):
        assert get_service("no-such-service") is None

    def test_resolve_preserves_order_and_reports_unknown(self):
        services, unknown = resolve_services(["stripe", "nope", "gfonts", "also-nope"])
        assert [s.id for s in services] == ["stripe", "google-fonts"]
        assert unknown == ["nope", "also-nope"]


class TestSearch:
    def test_empty_query_returns_all(self):
        assert len(search_services("")) == len(load_catalog())

    def test_matches_name_and_category(self):
        ids = {s.id for s in search_services("analytics")}
        assert {"google-analytics", "hotjar", "microsoft-clarity"} <= ids

    def test_matches_alias(self):
        assert [s.id for s in search_services("ms-clarity")] == ["microsoft-clarity"]


class TestCatalogGeneration:
    def test_google_fonts_from_catalog(self):
        result = generate_csp([get_service("google-fonts")])
        assert result.header == (
            "style-src 'self' https://fonts.googleapis.com; "
            "font-src 'self' https://fonts.gstatic.com"
        )

    def test_deprecated_service_warns(self):
        result = generate_csp([get_service("google-optimize")])
        assert any("sunset" in w and "google-analytics" in w for w in result.warnings)

    def test_whole_catalogue_yields_unique_sources(self):
        catalog = load_catalog()
        result = generate_csp(list(catalog.values()))
        assert len(result.included_services) == len(catalog)
        for values in result.directives.values():
            assert len(values) == len(set(values))
