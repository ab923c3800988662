"""
Response models and exception hierarchy for the Solr client.

Responses are frozen dataclasses so they can be shared across threads once
decoded. Every failure the client can report is a :class:`SolrError`
carrying the HTTP status (``0`` when no well-formed response was reached),
the server-side elapsed time in milliseconds (``0`` when unknown) and a
message that names where the failure happened.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from heliotrope.document import Document

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class SolrError(Exception):
    """Base exception for all Solr client errors."""

    def __init__(self, message: str, *, status: int = 0, time: int = 0) -> None:
        self.message = message
        self.status = status
        self.time = time
        super().__init__(message)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(status={self.status}, time={self.time}, "
            f"message={self.message!r})"
        )


class SolrConnectionError(SolrError):
    """Solr is unreachable or a transport-level error occurred (DNS, TCP, TLS, timeout)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status=0, time=0)


class SolrServerError(SolrError):
    """Solr answered with its error envelope (``{"error": {"msg", "code"}}``)."""


class SolrResponseError(SolrError):
    """Solr answered with JSON that is missing or mistyping an expected field.

    ``message`` is the first problem found; ``errors`` holds every problem in
    the order the response was traversed.
    """

    def __init__(
        self,
        errors: list[str],
        *,
        status: int = 0,
        time: int = 0,
        raw_body: str = "",
    ) -> None:
        self.errors = tuple(errors)
        self.raw_body = raw_body[:2000]
        super().__init__(errors[0], status=status, time=time)


class SolrParseError(SolrError):
    """The response body is not valid JSON at all."""

    def __init__(self, message: str, raw_body: str = "") -> None:
        self.raw_body = raw_body[:2000]
        super().__init__(message, status=0, time=0)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SolrUpdateResponse:
    """Outcome of an add, commit, rollback or delete request."""

    status: int
    time: int


@dataclass(frozen=True)
class SolrQueryResponse:
    """One page of query results.

    ``total`` is the number of matching documents on the server and is
    usually larger than ``len(items)``; ``start`` is the zero-based offset of
    this page.
    """

    status: int
    time: int
    total: int
    start: int
    items: tuple[Document, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict (e.g. for JSON output)."""
        return {
            "status": self.status,
            "time": self.time,
            "total": self.total,
            "start": self.start,
            "items": [doc.to_dict() for doc in self.items],
        }


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SolrQuery:
    """A raw Solr query expression plus paging and field selection.

    The expression is passed through untouched (``"*:*"``, ``"city:London"``);
    no query DSL is built here.
    """

    q: str
    start: int = 0
    rows: int | None = None
    fields: tuple[str, ...] = ()
    filters: tuple[str, ...] = ()
    sort: str | None = None
    extra: tuple[tuple[str, str], ...] = ()

    def __post_init__(self) -> None:
        if not self.q or not self.q.strip():
            raise ValueError("query expression must be a non-empty string")
        if self.start < 0:
            raise ValueError(f"start must be >= 0, got {self.start}")
        if self.rows is not None and self.rows < 0:
            raise ValueError(f"rows must be >= 0, got {self.rows}")

    def to_params(self, default_rows: int) -> list[tuple[str, str]]:
        """Build select-handler parameters; repeated keys (``fq``) stay separate."""
        rows = self.rows if self.rows is not None else default_rows
        params: list[tuple[str, str]] = [
            ("q", self.q),
            ("start", str(self.start)),
            ("rows", str(rows)),
            ("wt", "json"),
        ]
        if self.fields:
            params.append(("fl", ",".join(self.fields)))
        params.extend(("fq", fq) for fq in self.filters)
        if self.sort:
            params.append(("sort", self.sort))
        params.extend(self.extra)
        return params
