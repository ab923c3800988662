"""
Configuration for the Solr client.

The config is validated once at construction time and is immutable
afterwards. ``SolrConfig.from_env()`` reads ``HELIOTROPE_*`` environment
variables for deployments that configure the client externally.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass

logger = logging.getLogger(__name__)

_DEFAULT_BASE_URL = "http://127.0.0.1:8983/solr/collection1"
_DEFAULT_UPDATE_HANDLER = "/update"
_DEFAULT_SELECT_HANDLER = "/select"
_DEFAULT_ROWS = 10
_DEFAULT_TIMEOUT_CONNECT = 5.0
_DEFAULT_TIMEOUT_READ = 30.0
_DEFAULT_MAX_ERROR_BODY = 500
_MAX_ROWS = 10_000


@dataclass(frozen=True)
class SolrConfig:
    """Validated, immutable configuration for a Solr core or collection.

    Args:
        base_url: URL of the core, e.g. ``http://localhost:8983/solr/test``
            (a trailing slash is dropped).
        update_handler: Path of the JSON update handler, appended to
            ``base_url``.
        select_handler: Path of the search handler, appended to ``base_url``.
        rows: Page size used when a query does not set one (1-10000).
        timeout_connect: TCP connect timeout in seconds.
        timeout_read: HTTP read timeout in seconds.
        verify_ssl: TLS verification (True, False, or path to CA bundle).
        max_error_body: Characters of a non-JSON error body kept in the
            error message.
    """

    base_url: str = _DEFAULT_BASE_URL
    update_handler: str = _DEFAULT_UPDATE_HANDLER
    select_handler: str = _DEFAULT_SELECT_HANDLER
    rows: int = _DEFAULT_ROWS
    timeout_connect: float = _DEFAULT_TIMEOUT_CONNECT
    timeout_read: float = _DEFAULT_TIMEOUT_READ
    verify_ssl: bool | str = True
    max_error_body: int = _DEFAULT_MAX_ERROR_BODY

    def __post_init__(self) -> None:
        # frozen: normalize through object.__setattr__
        object.__setattr__(self, "base_url", (self.base_url or "").rstrip("/"))

        errors: list[str] = []
        if not self.base_url:
            errors.append("base_url must be a non-empty string")
        elif not self.base_url.startswith(("http://", "https://")):
            errors.append(f"base_url must be an http(s) URL, got {self.base_url!r}")
        if not self.update_handler.startswith("/"):
            errors.append(f"update_handler must start with '/', got {self.update_handler!r}")
        if not self.select_handler.startswith("/"):
            errors.append(f"select_handler must start with '/', got {self.select_handler!r}")
        if self.rows < 1 or self.rows > _MAX_ROWS:
            errors.append(f"rows must be 1-{_MAX_ROWS}, got {self.rows}")
        if self.timeout_connect <= 0:
            errors.append(f"timeout_connect must be > 0, got {self.timeout_connect}")
        if self.timeout_read <= 0:
            errors.append(f"timeout_read must be > 0, got {self.timeout_read}")
        if self.max_error_body < 0:
            errors.append(f"max_error_body must be >= 0, got {self.max_error_body}")

        if errors:
            raise ValueError("Invalid Solr configuration: " + "; ".join(errors))

    @property
    def update_url(self) -> str:
        return f"{self.base_url}{self.update_handler}"

    @property
    def select_url(self) -> str:
        return f"{self.base_url}{self.select_handler}"

    @classmethod
    def from_env(cls, **overrides: object) -> SolrConfig:
        """Build config from ``HELIOTROPE_*`` variables with optional overrides.

        Environment variables:
            HELIOTROPE_BASE_URL        -- Core URL (default http://127.0.0.1:8983/solr/collection1)
            HELIOTROPE_UPDATE_HANDLER  -- Update handler path (default /update)
            HELIOTROPE_SELECT_HANDLER  -- Select handler path (default /select)
            HELIOTROPE_ROWS            -- Default page size (default 10)
            HELIOTROPE_TIMEOUT_CONNECT -- Connect timeout seconds (default 5.0)
            HELIOTROPE_TIMEOUT_READ    -- Read timeout seconds (default 30.0)
            HELIOTROPE_VERIFY_SSL      -- "true", "false", or path to CA bundle
            HELIOTROPE_MAX_ERROR_BODY  -- Characters of a non-JSON error body kept (default 500)

        Unset variables keep the field default. Explicit keyword arguments
        override environment variables; ``None`` overrides are ignored.
        """
        kwargs = _read_env(os.environ)
        kwargs.update({k: v for k, v in overrides.items() if v is not None})

        config = cls(**kwargs)  # type: ignore[arg-type]
        logger.info(
            "Solr config: base_url=%s update=%s select=%s rows=%d timeout_read=%.1f",
            config.base_url,
            config.update_handler,
            config.select_handler,
            config.rows,
            config.timeout_read,
        )
        return config


def _parse_verify(raw: str) -> bool | str:
    low = raw.strip().lower()
    if low in ("true", "1", "yes"):
        return True
    if low in ("false", "0", "no"):
        return False
    return raw  # CA bundle path


# SolrConfig field, environment variable, parser
_ENV_FIELDS: tuple[tuple[str, str, Callable[[str], object]], ...] = (
    ("base_url", "HELIOTROPE_BASE_URL", str),
    ("update_handler", "HELIOTROPE_UPDATE_HANDLER", str),
    ("select_handler", "HELIOTROPE_SELECT_HANDLER", str),
    ("rows", "HELIOTROPE_ROWS", int),
    ("timeout_connect", "HELIOTROPE_TIMEOUT_CONNECT", float),
    ("timeout_read", "HELIOTROPE_TIMEOUT_READ", float),
    ("verify_ssl", "HELIOTROPE_VERIFY_SSL", _parse_verify),
    ("max_error_body", "HELIOTROPE_MAX_ERROR_BODY", int),
)


def _read_env(environ: Mapping[str, str]) -> dict[str, object]:
    """Parse the set ``HELIOTROPE_*`` variables into ``SolrConfig`` keyword arguments."""
    values: dict[str, object] = {}
    for name, var, parse in _ENV_FIELDS:
        raw = environ.get(var)
        if raw is None:
            continue
        try:
            values[name] = parse(raw)
        except ValueError:
            raise ValueError(
                f"Environment variable {var}={raw!r} is not a valid {parse.__name__} for {name}"
            ) from None
    return values
