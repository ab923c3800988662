"""HTTP transport used by :class:`~heliotrope.client.SolrClient`.

The :class:`Transport` protocol is the only thing the client needs from the
network: POST a body with a content type and get back the status code and
raw bytes. :class:`HttpTransport` implements it on top of ``httpx``.
Transport failures surface as :class:`~heliotrope.models.SolrConnectionError`
(status ``0``); HTTP error statuses are *not* failures here, they are handed
back for the client to decode.
"""

from __future__ import annotations

import importlib.metadata
import logging
import time
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import httpx

from heliotrope.config import SolrConfig
from heliotrope.models import SolrConnectionError

logger = logging.getLogger(__name__)

try:
    _PKG_VERSION = importlib.metadata.version("heliotrope")
except importlib.metadata.PackageNotFoundError:
    _PKG_VERSION = "dev"

_USER_AGENT = f"heliotrope/{_PKG_VERSION}"


@dataclass(frozen=True)
class TransportResponse:
    """Raw HTTP outcome: status code and undecoded body."""

    status_code: int
    body: bytes


@runtime_checkable
class Transport(Protocol):
    """Protocol for the client's network boundary."""

    def post(self, url: str, body: bytes, content_type: str) -> TransportResponse: ...

    def close(self) -> None: ...


class HttpTransport:
    """``httpx.Client``-backed transport.

    Only ``Content-Type`` is set per request (``Content-Length`` is filled in
    by httpx). No retries are performed.
    """

    def __init__(
        self,
        config: SolrConfig,
        *,
        _transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._config = config
        timeout = httpx.Timeout(
            connect=config.timeout_connect,
            read=config.timeout_read,
            write=config.timeout_read,
            pool=config.timeout_connect,
        )
        headers = {"Accept": "application/json", "User-Agent": _USER_AGENT}
        transport = _transport or httpx.HTTPTransport(
            retries=0,
            verify=config.verify_ssl,  # type: ignore[arg-type]
        )
        self._client = httpx.Client(transport=transport, timeout=timeout, headers=headers)

    def post(self, url: str, body: bytes, content_type: str) -> TransportResponse:
        t0 = time.monotonic()
        try:
            resp = self._client.post(url, content=body, headers={"Content-Type": content_type})
        except httpx.ConnectError as exc:
            logger.warning("POST %s connect failed (%.1fms): %s", url, _elapsed_ms(t0), exc)
            raise SolrConnectionError(f"Cannot connect to Solr at {url}: {exc}") from exc
        except httpx.TimeoutException as exc:
            logger.warning("POST %s timed out (%.1fms)", url, _elapsed_ms(t0))
            raise SolrConnectionError(f"Timeout talking to Solr at {url}: {exc}") from exc
        except httpx.HTTPError as exc:
            logger.warning("POST %s failed (%.1fms): %s", url, _elapsed_ms(t0), exc)
            raise SolrConnectionError(f"Solr request failed: {exc}") from exc

        logger.debug(
            "POST %s -> %d bytes=%d (%.1fms)",
            url,
            resp.status_code,
            len(resp.content),
            _elapsed_ms(t0),
        )
        return TransportResponse(status_code=resp.status_code, body=resp.content)

    def close(self) -> None:
        self._client.close()


def _elapsed_ms(t0: float) -> float:
    return (time.monotonic() - t0) * 1000
