"""Tests for heliotrope.config -- configuration validation and env loading."""

from __future__ import annotations

import pytest

from heliotrope.config import SolrConfig


class TestSolrConfigValidation:
    def test_defaults_are_valid(self) -> None:
        config = SolrConfig()
        assert config.base_url == "http://127.0.0.1:8983/solr/collection1"
        assert config.rows == 10
        assert config.timeout_connect == 5.0
        assert config.timeout_read == 30.0
        assert config.verify_ssl is True

    def test_trailing_slash_stripped(self) -> None:
        config = SolrConfig(base_url="http://solr:8983/solr/test/")
        assert config.base_url == "http://solr:8983/solr/test"
        assert config.update_url == "http://solr:8983/solr/test/update"
        assert config.select_url == "http://solr:8983/solr/test/select"

    def test_custom_handlers(self) -> None:
        config = SolrConfig(base_url="http://s/solr/c", select_handler="/query")
        assert config.select_url == "http://s/solr/c/query"

    def test_empty_base_url(self) -> None:
        with pytest.raises(ValueError, match="base_url"):
            SolrConfig(base_url="")

    def test_non_http_base_url(self) -> None:
        with pytest.raises(ValueError, match="http"):
            SolrConfig(base_url="solr:8983")

    def test_handler_must_be_absolute(self) -> None:
        with pytest.raises(ValueError, match="update_handler"):
            SolrConfig(update_handler="update")

    def test_rows_bounds(self) -> None:
        with pytest.raises(ValueError, match="rows must be 1-10000"):
            SolrConfig(rows=0)
        with pytest.raises(ValueError, match="rows must be 1-10000"):
            SolrConfig(rows=10_001)

    def test_negative_timeout(self) -> None:
        with pytest.raises(ValueError, match="timeout_read"):
            SolrConfig(timeout_read=0)

    def test_frozen(self) -> None:
        config = SolrConfig()
        with pytest.raises(AttributeError):
            config.rows = 5  # type: ignore[misc]

    def test_multiple_validation_errors(self) -> None:
        with pytest.raises(ValueError) as exc_info:
            SolrConfig(rows=0, timeout_connect=-1, max_error_body=-1)
        message = str(exc_info.value)
        assert "rows" in message
        assert "timeout_connect" in message
        assert "max_error_body" in message


class TestSolrConfigFromEnv:
    def test_reads_base_url(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HELIOTROPE_BASE_URL", "http://from-env:8983/solr/x/")
        assert SolrConfig.from_env().base_url == "http://from-env:8983/solr/x"

    def test_reads_numbers(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HELIOTROPE_ROWS", "25")
        monkeypatch.setenv("HELIOTROPE_TIMEOUT_READ", "2.5")
        config = SolrConfig.from_env()
        assert config.rows == 25
        assert config.timeout_read == 2.5

    def test_invalid_rows_env_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HELIOTROPE_ROWS", "many")
        with pytest.raises(ValueError, match="HELIOTROPE_ROWS"):
            SolrConfig.from_env()

    def test_invalid_timeout_env_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HELIOTROPE_TIMEOUT_CONNECT", "fast")
        with pytest.raises(ValueError, match="HELIOTROPE_TIMEOUT_CONNECT"):
            SolrConfig.from_env()

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("true", True), ("no", False), ("/etc/ssl/ca.pem", "/etc/ssl/ca.pem")],
    )
    def test_verify_ssl(self, monkeypatch: pytest.MonkeyPatch, raw: str, expected: object) -> None:
        monkeypatch.setenv("HELIOTROPE_VERIFY_SSL", raw)
        assert SolrConfig.from_env().verify_ssl == expected

    def test_overrides_take_precedence(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HELIOTROPE_BASE_URL", "http://env:8983/solr/a")
        config = SolrConfig.from_env(base_url="http://override:8983/solr/b")
        assert config.base_url == "http://override:8983/solr/b"

    def test_none_overrides_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("HELIOTROPE_BASE_URL", raising=False)
        monkeypatch.delenv("HELIOTROPE_ROWS", raising=False)
        config = SolrConfig.from_env(base_url=None, rows=None)
        assert config.base_url == "http://127.0.0.1:8983/solr/collection1"
        assert config.rows == 10

    def test_reads_max_error_body(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HELIOTROPE_MAX_ERROR_BODY", "80")
        assert SolrConfig.from_env().max_error_body == 80

    def test_invalid_value_names_variable_type_and_field(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("HELIOTROPE_TIMEOUT_READ", "soon")
        with pytest.raises(ValueError) as exc_info:
            SolrConfig.from_env()
        assert str(exc_info.value) == (
            "Environment variable HELIOTROPE_TIMEOUT_READ='soon' "
            "is not a valid float for timeout_read"
        )

    def test_unset_variables_keep_field_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for var in ("HELIOTROPE_BASE_URL", "HELIOTROPE_ROWS", "HELIOTROPE_VERIFY_SSL"):
            monkeypatch.delenv(var, raising=False)
        config = SolrConfig.from_env()
        assert config.base_url == SolrConfig().base_url
        assert config.rows == SolrConfig().rows
        assert config.verify_ssl is True
