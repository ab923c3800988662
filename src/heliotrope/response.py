"""
Decoding of Solr JSON response envelopes into typed responses.

Each envelope is described declaratively as an ordered tuple of
``section.key`` lookups with a type check. A single traversal walks the
shape top-down, records every missing or mistyped key (naming its path)
and keeps going so that later keys are still examined. If anything was
recorded the decode fails with :class:`~heliotrope.models.SolrResponseError`
whose message is the first problem found; the complete list is kept on
``errors``.

Field values inside ``response.docs`` never fail the decode: unsupported
shapes (nested objects, arrays) degrade to a null :class:`FieldValue`.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from heliotrope.document import Document, Field, FieldValue
from heliotrope.models import (
    SolrParseError,
    SolrQueryResponse,
    SolrResponseError,
    SolrServerError,
    SolrUpdateResponse,
)

logger = logging.getLogger(__name__)

_MAX_ERROR_BODY = 500


class _JsonObject(dict):
    """A decoded JSON object that also keeps its raw key/value pairs.

    Duplicate keys collapse in the dict view but survive in ``pairs``.
    """

    def __init__(self, pairs: list[tuple[str, Any]]) -> None:
        super().__init__(pairs)
        self.pairs = pairs


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_count(value: Any) -> bool:
    return _is_int(value) and value >= 0


def _is_str(value: Any) -> bool:
    return isinstance(value, str)


def _is_array(value: Any) -> bool:
    return isinstance(value, list)


@dataclass(frozen=True)
class _Key:
    section: str
    name: str
    check: Callable[[Any], bool]
    expected: str

    @property
    def path(self) -> str:
        return f"{self.section}.{self.name}"


_HEADER_SHAPE = (
    _Key("responseHeader", "QTime", _is_int, "an integer"),
    _Key("responseHeader", "status", _is_int, "an integer"),
)

_QUERY_SHAPE = _HEADER_SHAPE + (
    _Key("response", "numFound", _is_count, "a non-negative integer"),
    _Key("response", "start", _is_count, "a non-negative integer"),
    _Key("response", "docs", _is_array, "a JSON array"),
)

_ERROR_SHAPE = (
    _Key("error", "msg", _is_str, "a string"),
    _Key("error", "code", _is_int, "an integer"),
)


class _Traversal:
    """Walks a declared shape and collects path-naming problems."""

    def __init__(self, label: str) -> None:
        self.label = label
        self.errors: list[str] = []

    def fail(self, problem: str) -> None:
        self.errors.append(f"{self.label} JSON parsing error: {problem}")

    def walk(self, root: dict[str, Any], shape: tuple[_Key, ...]) -> dict[str, Any]:
        found: dict[str, Any] = {}
        broken: set[str] = set()
        for key in shape:
            if key.section in broken:
                continue
            if key.section not in root:
                self.fail(f"{key.section} not found")
                broken.add(key.section)
                continue
            section = root[key.section]
            if not isinstance(section, dict):
                self.fail(f"{key.section} is not a JSON object")
                broken.add(key.section)
                continue
            if key.name not in section:
                self.fail(f"{key.path} not found")
                continue
            value = section[key.name]
            if not key.check(value):
                self.fail(f"{key.path} is not {key.expected}")
                continue
            found[key.path] = value
        return found


def _preview(raw: bytes | str) -> str:
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw[:2000]).decode("utf-8", errors="replace")
    return raw[:2000]


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def _load(raw: bytes | str, label: str, http_status: int) -> dict[str, Any]:
    """Parse the body as generic JSON and require a top-level object."""
    try:
        data = json.loads(raw, object_pairs_hook=_JsonObject, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as exc:
        # JSONDecodeError and UnicodeDecodeError are ValueErrors; deep nesting recurses
        raise SolrParseError(f"{label} JSON parsing error: {exc}", raw_body=_preview(raw)) from exc
    if not isinstance(data, dict):
        raise SolrResponseError(
            [f"{label} JSON parsing error: response is not a JSON object"],
            status=http_status,
            raw_body=_preview(raw),
        )
    return data


def _raise_if_failed(
    walk: _Traversal,
    found: dict[str, Any],
    raw: bytes | str,
    http_status: int,
) -> None:
    if not walk.errors:
        return
    logger.debug(
        "%s decode failed with %d problem(s): %s",
        walk.label,
        len(walk.errors),
        walk.errors[0],
    )
    raise SolrResponseError(
        walk.errors,
        status=http_status,
        time=found.get("responseHeader.QTime", 0),
        raw_body=_preview(raw),
    )


def _decode_document(raw_doc: dict[str, Any]) -> Document:
    pairs = raw_doc.pairs if isinstance(raw_doc, _JsonObject) else list(raw_doc.items())
    return Document._decoded([Field(name, FieldValue.of(value)) for name, value in pairs])


def decode_update_response(raw: bytes | str, *, http_status: int = 0) -> SolrUpdateResponse:
    """Decode an add/commit/delete response.

    Expected shape::

        {"responseHeader": {"status": 0, "QTime": 3}}

    Raises:
        SolrParseError: body is not JSON.
        SolrResponseError: body is JSON but not the expected shape.
    """
    walk = _Traversal("SolrUpdateResponse")
    data = _load(raw, walk.label, http_status)
    found = walk.walk(data, _HEADER_SHAPE)
    _raise_if_failed(walk, found, raw, http_status)
    return SolrUpdateResponse(
        status=found["responseHeader.status"],
        time=found["responseHeader.QTime"],
    )


def decode_query_response(raw: bytes | str, *, http_status: int = 0) -> SolrQueryResponse:
    """Decode a select response into one page of documents.

    Expected shape::

        {"responseHeader": {"status": 0, "QTime": 1},
         "response": {"numFound": 57, "start": 0,
                      "docs": [{"id": 1}, {"id": 3}]}}

    Every element of ``docs`` must be a JSON object; each key/value pair
    becomes one field, in document order.

    Raises:
        SolrParseError: body is not JSON.
        SolrResponseError: body is JSON but not the expected shape.
    """
    walk = _Traversal("SolrQueryResponse")
    data = _load(raw, walk.label, http_status)
    found = walk.walk(data, _QUERY_SHAPE)

    items: list[Document] = []
    for i, raw_doc in enumerate(found.get("response.docs", [])):
        if not isinstance(raw_doc, dict):
            walk.fail(f"response.docs[{i}] is not a JSON object")
            continue
        items.append(_decode_document(raw_doc))

    _raise_if_failed(walk, found, raw, http_status)
    return SolrQueryResponse(
        status=found["responseHeader.status"],
        time=found["responseHeader.QTime"],
        total=found["response.numFound"],
        start=found["response.start"],
        items=tuple(items),
    )


def decode_error_response(
    raw: bytes | str,
    *,
    http_status: int,
    max_body: int = _MAX_ERROR_BODY,
) -> SolrServerError:
    """Decode Solr's error envelope into a :class:`SolrServerError`.

    Expected shape::

        {"responseHeader": {"status": 400, "QTime": 2},
         "error": {"msg": "undefined field foo", "code": 400}}

    The error is returned, not raised. ``time`` comes from
    ``responseHeader.QTime`` when present. When the envelope is missing or
    unusable (an HTML error page from a proxy, say) the HTTP status and the
    start of the body are used instead.
    """
    walk = _Traversal("SolrError")
    try:
        data = _load(raw, walk.label, http_status)
    except (SolrParseError, SolrResponseError):
        data = {}

    found = walk.walk(data, _ERROR_SHAPE) if data else {}
    header = data.get("responseHeader")
    qtime = header.get("QTime") if isinstance(header, dict) else None
    time = qtime if _is_int(qtime) else 0

    message = found.get("error.msg")
    if message is None:
        body = _preview(raw)[:max_body].strip()
        message = f"HTTP {http_status}: {body}" if body else f"HTTP {http_status}"
        logger.debug("Solr error body has no usable error envelope (status=%d)", http_status)
    return SolrServerError(message, status=found.get("error.code", http_status), time=time)
