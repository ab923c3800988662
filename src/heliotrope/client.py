"""
Solr client: request construction plus response decoding.

Usage:
    from heliotrope import Document, SolrClient, SolrConfig

    with SolrClient(SolrConfig(base_url="http://localhost:8983/solr/test")) as client:
        client.delete_by_query("city:NY")
        client.add_and_commit(Document().add_field("id", "1").add_field("city", "London"))
        page = client.query("*:*")
        print(page.total, [doc.to_dict() for doc in page.items])

Every operation returns a typed response or raises a
:class:`~heliotrope.models.SolrError`:

- :class:`~heliotrope.models.SolrConnectionError` (status 0) when Solr was
  never reached,
- :class:`~heliotrope.models.SolrServerError` when Solr answered with an HTTP
  error,
- :class:`~heliotrope.models.SolrParseError` /
  :class:`~heliotrope.models.SolrResponseError` when the answer could not be
  decoded.

The client keeps no per-call state and can be shared between threads.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable, Iterable
from contextlib import nullcontext
from typing import Any, TypeVar

import httpx

from heliotrope.config import SolrConfig
from heliotrope.document import Document
from heliotrope.models import (
    SolrConnectionError,
    SolrError,
    SolrQuery,
    SolrQueryResponse,
    SolrUpdateResponse,
)
from heliotrope.response import (
    decode_error_response,
    decode_query_response,
    decode_update_response,
)
from heliotrope.transport import HttpTransport, Transport

logger = logging.getLogger(__name__)

_otel_tracer: Any = None
try:
    from opentelemetry import trace

    _otel_tracer = trace.get_tracer("heliotrope")
except ImportError:
    pass

_JSON = "application/json"
_FORM = "application/x-www-form-urlencoded"

R = TypeVar("R", SolrUpdateResponse, SolrQueryResponse)


def _elapsed_ms(t0: float) -> float:
    return (time.monotonic() - t0) * 1000


def _log_fields(operation: str, t0: float, **fields: int) -> dict[str, Any]:
    """Structured Solr fields attached to a log record via ``extra=``."""
    return {"operation": operation, "elapsed_ms": round(_elapsed_ms(t0), 1), **fields}


def _otel_span(operation: str, url: str) -> Any:
    """Return an OTel span context manager, or nullcontext if OTel is absent."""
    if _otel_tracer is not None:
        return _otel_tracer.start_as_current_span(
            f"solr.{operation}",
            attributes={"solr.operation": operation, "solr.url": url},
        )
    return nullcontext()


def _encode_command(value: Any) -> str:
    """JSON-encode an update command, writing documents with their repeated keys."""
    if isinstance(value, Document):
        return value.to_json()
    if isinstance(value, dict):
        members = (f"{json.dumps(k)}: {_encode_command(v)}" for k, v in value.items())
        return "{" + ", ".join(members) + "}"
    if isinstance(value, list):
        return "[" + ", ".join(_encode_command(v) for v in value) + "]"
    return json.dumps(value)


def _require_expression(value: str, what: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError(f"{what} must be a non-empty string")
    return value


class SolrClient:
    """Client for one Solr core or collection.

    Args:
        config: Connection settings; read from the environment when omitted.
        transport: Any :class:`~heliotrope.transport.Transport`. Defaults to
            an :class:`~heliotrope.transport.HttpTransport` owned (and closed)
            by this client.
    """

    def __init__(
        self,
        config: SolrConfig | None = None,
        *,
        transport: Transport | None = None,
        _http_transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._config = config or SolrConfig.from_env()
        self._owns_transport = transport is None
        self._transport: Transport = transport or HttpTransport(
            self._config, _transport=_http_transport
        )
        logger.debug(
            "SolrClient created update=%s select=%s rows=%d",
            self._config.update_url,
            self._config.select_url,
            self._config.rows,
        )

    @property
    def config(self) -> SolrConfig:
        return self._config

    # -- Indexing ------------------------------------------------------------

    def add(self, document: Document, *, commit_within: int | None = None) -> SolrUpdateResponse:
        """Add one document without committing.

        ``commit_within`` (milliseconds) asks Solr to commit on its own schedule.
        """
        add: dict[str, Any] = {"doc": document}
        if commit_within is not None:
            add["commitWithin"] = commit_within
        return self._update("add", {"add": add})

    def add_and_commit(self, document: Document) -> SolrUpdateResponse:
        """Add one document and commit it in the same request."""
        return self._update("add_and_commit", {"add": {"doc": document}, "commit": {}})

    def add_many(self, documents: Iterable[Document], *, commit: bool = False) -> SolrUpdateResponse:
        """Add several documents in one request."""
        payload = list(documents)
        return self._update("add_many", payload, commit=commit)

    def commit(self) -> SolrUpdateResponse:
        """Make every pending write visible to searchers."""
        return self._update("commit", {"commit": {}})

    def rollback(self) -> SolrUpdateResponse:
        """Discard writes made since the last commit."""
        return self._update("rollback", {"rollback": {}})

    # -- Deletion ------------------------------------------------------------

    def delete_by_id(self, doc_id: str | int, *, commit: bool = True) -> SolrUpdateResponse:
        payload: dict[str, Any] = {"delete": {"id": str(doc_id)}}
        if commit:
            payload["commit"] = {}
        return self._update("delete_by_id", payload)

    def delete_by_query(self, query_expression: str, *, commit: bool = True) -> SolrUpdateResponse:
        """Delete every document matching a raw query expression (``"city:NY"``)."""
        expression = _require_expression(query_expression, "delete query")
        payload: dict[str, Any] = {"delete": {"query": expression}}
        if commit:
            payload["commit"] = {}
        return self._update("delete_by_query", payload)

    # -- Search --------------------------------------------------------------

    def query(self, query: SolrQuery | str) -> SolrQueryResponse:
        """Run a search and return one page of documents."""
        if isinstance(query, str):
            query = SolrQuery(q=query)
        params = query.to_params(self._config.rows)
        body = str(httpx.QueryParams(params)).encode("utf-8")
        return self._execute(
            "query", self._config.select_url, body, _FORM, decode_query_response
        )

    # -- Internals -----------------------------------------------------------

    def _update(self, operation: str, payload: Any, *, commit: bool = False) -> SolrUpdateResponse:
        url = f"{self._config.update_url}?wt=json"
        if commit:
            url += "&commit=true"
        body = _encode_command(payload).encode("utf-8")
        return self._execute(operation, url, body, _JSON, decode_update_response)

    def _execute(
        self,
        operation: str,
        url: str,
        body: bytes,
        content_type: str,
        decoder: Callable[..., R],
    ) -> R:
        t0 = time.monotonic()
        with _otel_span(operation, url):
            try:
                raw = self._transport.post(url, body, content_type)
            except SolrConnectionError as exc:
                logger.warning(
                    "Solr %s unreachable: %s",
                    operation,
                    exc.message,
                    extra=_log_fields(operation, t0, http_status=0),
                )
                raise

            if raw.status_code >= 400:
                error = decode_error_response(
                    raw.body,
                    http_status=raw.status_code,
                    max_body=self._config.max_error_body,
                )
                logger.warning(
                    "Solr %s HTTP %d code=%d: %s",
                    operation,
                    raw.status_code,
                    error.status,
                    error.message,
                    extra=_log_fields(
                        operation, t0, http_status=raw.status_code, qtime_ms=error.time
                    ),
                )
                raise error

            try:
                result = decoder(raw.body, http_status=raw.status_code)
            except SolrError as exc:
                logger.warning(
                    "Solr %s undecodable response (%s): %s",
                    operation,
                    type(exc).__name__,
                    exc.message,
                    extra=_log_fields(operation, t0, http_status=raw.status_code),
                )
                raise

        logger.info(
            "Solr %s status=%d qtime_ms=%d",
            operation,
            result.status,
            result.time,
            extra=_log_fields(
                operation,
                t0,
                http_status=raw.status_code,
                solr_status=result.status,
                qtime_ms=result.time,
            ),
        )
        return result

    # -- Lifecycle -----------------------------------------------------------

    def close(self) -> None:
        if self._owns_transport:
            self._transport.close()

    def __enter__(self) -> SolrClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
